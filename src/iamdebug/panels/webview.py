# Webview panel — in-process rendering surface with a two-way message channel.
# Created: 2026-10-18
#
# The embedding UI sets/reads ``html``, pushes user actions in through
# ``receive()`` and drains ``outbox`` (messages posted to the page).

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)

MessageListener = Callable[[dict[str, Any]], Awaitable[None] | None]
DisposeListener = Callable[[], Awaitable[None] | None]


class Panel(Protocol):
    """What the coordinators need from a rendering surface."""

    panel_id: str
    title: str
    html: str

    @property
    def disposed(self) -> bool: ...

    def on_did_receive_message(self, listener: MessageListener) -> Callable[[], None]: ...

    def on_did_dispose(self, listener: DisposeListener) -> Callable[[], None]: ...

    async def post_message(self, message: dict[str, Any]) -> None: ...

    async def dispose(self) -> None: ...


class PanelFactory(Protocol):
    def create_panel(self, view_type: str, title: str) -> Panel: ...


async def _call(listener: Callable[..., Any], *args: Any) -> None:
    result = listener(*args)
    if asyncio.iscoroutine(result):
        await result


class WebviewPanel:
    """A rendering surface hosting generated HTML.

    Message listeners run in registration order, one message at a time, so
    messages from a single panel are handled in the order the page sent them.
    """

    def __init__(self, view_type: str, title: str) -> None:
        self.panel_id = uuid.uuid4().hex[:12]
        self.view_type = view_type
        self.title = title
        self.html = ""
        self.outbox: list[dict[str, Any]] = []
        self._message_listeners: list[MessageListener] = []
        self._dispose_listeners: list[DisposeListener] = []
        self._disposed = False
        self._inbound = asyncio.Lock()

    def __repr__(self) -> str:
        return f"WebviewPanel(id={self.panel_id!r}, title={self.title!r}, disposed={self._disposed})"

    @property
    def disposed(self) -> bool:
        return self._disposed

    def on_did_receive_message(self, listener: MessageListener) -> Callable[[], None]:
        self._message_listeners.append(listener)
        return lambda: self._discard(self._message_listeners, listener)

    def on_did_dispose(self, listener: DisposeListener) -> Callable[[], None]:
        self._dispose_listeners.append(listener)
        return lambda: self._discard(self._dispose_listeners, listener)

    @staticmethod
    def _discard(listeners: list, listener: Callable) -> None:
        if listener in listeners:
            listeners.remove(listener)

    async def receive(self, message: dict[str, Any]) -> None:
        """Deliver a message posted by the page to every listener."""
        if self._disposed:
            logger.debug("Dropping message for disposed panel %s", self.panel_id)
            return
        async with self._inbound:
            for listener in list(self._message_listeners):
                await _call(listener, message)

    async def post_message(self, message: dict[str, Any]) -> None:
        """Post a message to the page."""
        if self._disposed:
            return
        self.outbox.append(message)

    async def dispose(self) -> None:
        """Close the surface. Dispose listeners fire exactly once."""
        if self._disposed:
            return
        self._disposed = True
        self._message_listeners.clear()
        listeners, self._dispose_listeners = self._dispose_listeners, []
        for listener in listeners:
            try:
                await _call(listener)
            except Exception:
                logger.warning("Dispose listener failed for panel %s", self.panel_id, exc_info=True)


class WebviewPanelFactory:
    """Creates ``WebviewPanel`` instances and keeps track of the live ones."""

    def __init__(self) -> None:
        self.panels: list[WebviewPanel] = []

    def create_panel(self, view_type: str, title: str) -> WebviewPanel:
        panel = WebviewPanel(view_type, title)
        self.panels.append(panel)
        panel.on_did_dispose(lambda: self.panels.remove(panel))
        logger.debug("Created %s panel %s (%s)", view_type, panel.panel_id, title)
        return panel
