"""Preview coordinator — the entry points the host wires to its commands.

``show_resource_preview`` renders a debug-session file into a diagram panel
(one per resource key). ``show_login_surface`` opens the login panel whose
messages drive ``OAuthFlowCoordinator``.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from iamdebug.config import Settings, get_settings
from iamdebug.constants import (
    AUTHENTICATION_HTML_NAME,
    CLIENT_SECRET,
    DEBUG_LABELS,
    DIAGRAM_HTML_NAME,
    DIAGRAM_VIEW_TYPE,
    IAM_BASE_URL,
    IAM_SERVICE_CLIENT_ID,
    LOGIN_TITLE,
    LOGIN_VIEW_TYPE,
)
from iamdebug.errors import ResourceReadError, TemplateError, VaultError
from iamdebug.files import resource_key
from iamdebug.host import HostContext
from iamdebug.integrations.oauth import OAuthFlowCoordinator
from iamdebug.panels.registry import PanelHandle, PanelRegistry, get_panel_registry
from iamdebug.panels.webview import Panel
from iamdebug.templates import TemplateRenderer

logger = logging.getLogger(__name__)


class PreviewCoordinator:
    def __init__(
        self,
        host: HostContext,
        registry: PanelRegistry | None = None,
        renderer: TemplateRenderer | None = None,
        oauth: OAuthFlowCoordinator | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.host = host
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else get_panel_registry()
        self.renderer = renderer or TemplateRenderer(host.read_file)
        self.oauth = oauth or OAuthFlowCoordinator(host, self.settings)

    def _asset_root(self, asset_root: str | Path | None) -> Path:
        return Path(asset_root or self.settings.asset_root).resolve()

    # ------------------------------------------------------------------
    # Diagram previews
    # ------------------------------------------------------------------

    async def show_resource_preview(
        self, resource_path: str | Path, asset_root: str | Path | None = None
    ) -> PanelHandle:
        """Render ``resource_path`` into its diagram panel and register it.

        Raises:
            ResourceReadError: the resource or the diagram template is unreadable.
            TemplateError: the diagram template is malformed.
        """
        path = str(resource_path)
        key = resource_key(path)
        root = self._asset_root(asset_root)
        try:
            html = await self._render_diagram(path, root)
        except (ResourceReadError, TemplateError) as e:
            logger.warning("Preview of %s failed: %s", path, e)
            self.host.notifier.error(str(e))
            raise

        current = self.registry.get(key)
        if (
            current is not None
            and not current.panel.disposed
            and current.resource_path == path
        ):
            panel = current.panel
        else:
            panel = self.host.panels.create_panel(DIAGRAM_VIEW_TYPE, key)
            self._wire_diagram_panel(key, panel, path)

        panel.html = html
        handle = PanelHandle(panel=panel, html=html, resource_path=path)
        self.registry.upsert(key, handle)
        logger.info("Showing diagram for %s", key)
        return handle

    async def _render_diagram(self, path: str, root: Path) -> str:
        code = await self.host.read_file(path)
        placeholders = {
            **DEBUG_LABELS,
            "myXML": code,
            "myfilepath": path,
            "resourcePath": root.as_uri(),
        }
        return await self.renderer.render_file(root / DIAGRAM_HTML_NAME, placeholders)

    def _wire_diagram_panel(self, key: str, panel: Panel, path: str) -> None:
        async def on_message(message: dict[str, Any]) -> None:
            # Panel was replaced under the same key; its actions are stale
            if not self.registry.is_current(key, panel):
                logger.debug("Dropping message from replaced panel for %s", key)
                return
            try:
                result = self.host.on_button_click(message, path)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.exception("Diagram action failed for %s", path)
                self.host.notifier.error(f"Action failed for {key}: {e}")

        panel.on_did_receive_message(on_message)
        panel.on_did_dispose(lambda: self.registry.remove(key, panel))

    async def refresh_all(self, asset_root: str | Path | None = None) -> int:
        """Re-render every open diagram from disk. Returns the number refreshed."""
        root = self._asset_root(asset_root)
        refreshed = 0
        for key, handle in self.registry.all().items():
            if handle.panel.disposed:
                self.registry.remove(key, handle.panel)
                continue
            try:
                html = await self._render_diagram(handle.resource_path, root)
            except (ResourceReadError, TemplateError) as e:
                logger.warning("Refresh of %s failed: %s", key, e)
                self.host.notifier.error(str(e))
                continue
            if not self.registry.is_current(key, handle.panel):
                continue
            handle.panel.html = html
            self.registry.upsert(key, PanelHandle(handle.panel, html, handle.resource_path))
            refreshed += 1
        return refreshed

    # ------------------------------------------------------------------
    # Login surface
    # ------------------------------------------------------------------

    async def show_login_surface(self, asset_root: str | Path | None = None) -> Panel:
        """Open (or re-render) the login panel seeded with the saved configuration."""
        root = self._asset_root(asset_root)
        placeholders = {
            "clientId": self.host.config.get(IAM_SERVICE_CLIENT_ID) or "",
            "clientSecret": await self._stored_client_secret(),
            "baseUrl": self.host.config.get(IAM_BASE_URL) or "",
            # Token exchange must repeat the redirect URI of the authorization request
            "redirectUri": self.settings.redirect_uri,
        }
        try:
            html = await self.renderer.render_file(root / AUTHENTICATION_HTML_NAME, placeholders)
        except (ResourceReadError, TemplateError) as e:
            logger.warning("Login surface failed to render: %s", e)
            self.host.notifier.error(str(e))
            raise

        panel = self.oauth.login_panel
        if panel is None or panel.disposed:
            panel = self.host.panels.create_panel(LOGIN_VIEW_TYPE, LOGIN_TITLE)
            panel.on_did_receive_message(self.oauth.on_host_message)
            panel.on_did_dispose(lambda: self._on_login_closed(panel))
            self.oauth.attach_panel(panel)
        panel.html = html
        return panel

    async def _on_login_closed(self, panel: Panel) -> None:
        if self.oauth.login_panel is panel:
            self.oauth.attach_panel(None)
            await self.oauth.cancel()

    async def _stored_client_secret(self) -> str:
        """Stored client secret, or "" if the vault fails or is slow to answer."""
        try:
            secret = await asyncio.wait_for(
                self.host.vault.get(CLIENT_SECRET, CLIENT_SECRET),
                self.settings.secret_lookup_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Timed out reading the stored client secret")
            self.host.notifier.warning("Could not read the saved client secret in time")
            return ""
        except VaultError as e:
            self.host.notifier.warning(str(e))
            return ""
        return secret or ""

    async def close(self) -> None:
        await self.oauth.close()
