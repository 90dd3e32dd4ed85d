# OAuth login — authorization code flow against the identity server.
# Created: 2026-10-18
#
# The code is captured on a loopback port and relayed to the login page,
# which exchanges it for an access token itself and posts the token back.

from __future__ import annotations

import asyncio
import logging
import time
import urllib.parse
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from iamdebug.config import Settings, get_settings
from iamdebug.constants import (
    ACCESS_TOKEN,
    CLIENT_SECRET,
    COMMAND_CODE,
    IAM_BASE_URL,
    IAM_SERVICE_CLIENT_ID,
    MESSAGE_CONFIGURATION_SUCCESS,
    OAUTH_SCOPE,
)
from iamdebug.errors import (
    PortInUse,
    RedirectError,
    RedirectTimeout,
    SessionInProgress,
    VaultError,
)
from iamdebug.host import HostContext
from iamdebug.integrations.redirect_server import RedirectCaptureServer
from iamdebug.messages import AccessCommand, LoginCommand, parse_login_message
from iamdebug.panels.webview import Panel

logger = logging.getLogger(__name__)


class LoginState(str, Enum):
    IDLE = "idle"
    BROWSER_LAUNCHED = "browser_launched"
    AWAITING_REDIRECT = "awaiting_redirect"
    CODE_CAPTURED = "code_captured"
    CREDENTIALS_RECEIVED = "credentials_received"
    PERSISTED = "persisted"
    FAILED = "failed"


TERMINAL_STATES = frozenset({LoginState.PERSISTED, LoginState.FAILED})


@dataclass
class OAuthSession:
    """State of one login attempt."""

    base_url: str
    client_id: str
    redirect_uri: str
    port: int
    deadline: float  # time.monotonic()
    client_secret: str = field(default="", repr=False)
    scope: str = OAUTH_SCOPE
    state: LoginState = LoginState.IDLE
    code: str | None = field(default=None, repr=False)
    failure: str | None = None

    @property
    def terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def remaining(self) -> float:
        return max(0.0, self.deadline - time.monotonic())

    def is_active(self) -> bool:
        """Non-terminal and within its deadline."""
        return not self.terminal and time.monotonic() < self.deadline


def build_authorization_url(base_url: str, client_id: str, redirect_uri: str, scope: str) -> str:
    """``{base}/authorize?response_type=code&client_id=..&redirect_uri=..&scope=..``"""
    params = {
        "response_type": "code",
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "scope": scope,
    }
    query = urllib.parse.urlencode(params, quote_via=urllib.parse.quote)
    return f"{base_url.rstrip('/')}/authorize?{query}"


class OAuthFlowCoordinator:
    """Runs the login sequence for the single configured identity.

    At most one session is active at a time; it owns the redirect port until
    it reaches ``PERSISTED`` or ``FAILED`` or its deadline passes.
    """

    def __init__(
        self,
        host: HostContext,
        settings: Settings | None = None,
        server_factory: Callable[..., RedirectCaptureServer] = RedirectCaptureServer,
    ) -> None:
        self.host = host
        self.settings = settings or get_settings()
        self._server_factory = server_factory
        self.session: OAuthSession | None = None
        self.login_panel: Panel | None = None
        self._server: RedirectCaptureServer | None = None
        self._waiter: asyncio.Task | None = None

    @property
    def state(self) -> LoginState:
        return self.session.state if self.session else LoginState.IDLE

    def attach_panel(self, panel: Panel | None) -> None:
        """Set the login surface that receives the captured code."""
        self.login_panel = panel

    # ------------------------------------------------------------------
    # Login sequence
    # ------------------------------------------------------------------

    async def start_login(
        self, base_url: str, client_id: str, client_secret: str = ""
    ) -> OAuthSession:
        """Bind the redirect listener, open the authorization page, await the redirect.

        Raises:
            SessionInProgress: another login is still within its deadline.
            PortInUse: the redirect port is held by another process.
            RedirectError: the redirect listener failed to start.
        """
        current = self.session
        if current is not None and current.is_active():
            raise SessionInProgress("A login is already in progress")
        if current is not None and not current.terminal:
            await self._fail(current, "login timed out")

        session = OAuthSession(
            base_url=base_url,
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=self.settings.redirect_uri,
            port=self.settings.redirect_port,
            deadline=time.monotonic() + self.settings.login_timeout,
        )
        self.session = session

        server = self._server_factory(
            port=self.settings.redirect_port,
            host=self.settings.redirect_host,
            path=self.settings.redirect_path,
        )
        try:
            await server.start()
        except (PortInUse, RedirectError) as e:
            await self._fail(session, str(e))
            self.host.notifier.error(f"Login failed: {e}")
            raise
        self._server = server

        url = build_authorization_url(base_url, client_id, session.redirect_uri, session.scope)
        try:
            opened = await self.host.open_url(url)
        except Exception as e:
            await self._fail(session, f"could not open the browser: {e}")
            self.host.notifier.error(f"Login failed: could not open the browser ({e})")
            raise
        session.state = LoginState.BROWSER_LAUNCHED
        if opened is False:
            # Listener stays up; the user can still complete the login by hand
            self.host.notifier.warning(f"No browser available. Open this URL to log in: {url}")
        else:
            logger.info("Opened authorization page for client %s", client_id)

        session.state = LoginState.AWAITING_REDIRECT
        self._waiter = asyncio.create_task(self._await_redirect(session, server))
        return session

    async def _await_redirect(self, session: OAuthSession, server: RedirectCaptureServer) -> None:
        try:
            code = await server.wait_for_code(session.remaining())
        except (RedirectTimeout, RedirectError) as e:
            if session is self.session and not session.terminal:
                await self._fail(session, str(e))
                self.host.notifier.error(f"Login failed: {e}")
            return
        finally:
            await self._release(server)

        if session.terminal:
            return
        session.code = code
        session.state = LoginState.CODE_CAPTURED
        logger.info("Authorization code captured")
        panel = self.login_panel
        if panel is not None and not panel.disposed:
            await panel.post_message({"command": COMMAND_CODE, "code": code})

    async def _release(self, server: RedirectCaptureServer | None) -> None:
        if server is None:
            return
        if server is self._server:
            self._server = None
        await server.stop()

    async def _fail(self, session: OAuthSession, reason: str) -> None:
        session.state = LoginState.FAILED
        session.failure = reason
        logger.warning("Login failed: %s", reason)
        await self._stop_waiting()

    async def _stop_waiting(self) -> None:
        waiter, self._waiter = self._waiter, None
        if waiter is not None and waiter is not asyncio.current_task() and not waiter.done():
            waiter.cancel()
            try:
                await waiter
            except asyncio.CancelledError:
                pass
        await self._release(self._server)

    async def cancel(self, reason: str = "login surface closed") -> None:
        """Abandon the active session, if any, and release the port."""
        session = self.session
        if session is None or session.terminal:
            return
        await self._fail(session, reason)

    async def close(self) -> None:
        """Release everything on shutdown."""
        await self.cancel("shutting down")
        await self._stop_waiting()
        self.login_panel = None

    # ------------------------------------------------------------------
    # Login surface messages
    # ------------------------------------------------------------------

    async def on_host_message(self, message: Any) -> None:
        """Handle a message posted by the login surface."""
        command = parse_login_message(message)
        if isinstance(command, LoginCommand):
            await self._handle_login(command)
        elif isinstance(command, AccessCommand):
            await self._handle_access(command)
        else:
            logger.debug("Ignoring login surface message: %s", command.reason)

    async def _handle_login(self, command: LoginCommand) -> None:
        # A rejected login must not touch the running session's credentials
        current = self.session
        if current is not None and current.is_active():
            e = SessionInProgress("A login is already in progress")
            self.host.notifier.warning(str(e))
            raise e

        self.host.config.update(IAM_BASE_URL, command.base_url)
        self.host.config.update(IAM_SERVICE_CLIENT_ID, command.client_id)
        try:
            await self.host.vault.set(CLIENT_SECRET, CLIENT_SECRET, command.client_secret)
        except VaultError as e:
            self.host.notifier.error(str(e))
            raise

        try:
            await self.start_login(command.base_url, command.client_id, command.client_secret)
        except SessionInProgress as e:
            self.host.notifier.warning(str(e))
            raise

    async def _handle_access(self, command: AccessCommand) -> None:
        session = self.session
        if session is not None and not session.terminal:
            session.state = LoginState.CREDENTIALS_RECEIVED

        try:
            await self.host.vault.set(ACCESS_TOKEN, ACCESS_TOKEN, command.access_token)
        except VaultError as e:
            if session is not None and not session.terminal:
                await self._fail(session, str(e))
            self.host.notifier.error(str(e))
            raise

        if session is not None and not session.terminal:
            session.state = LoginState.PERSISTED
        await self._stop_waiting()

        panel, self.login_panel = self.login_panel, None
        if panel is not None:
            await panel.dispose()
        self.host.notifier.info(MESSAGE_CONFIGURATION_SUCCESS)
