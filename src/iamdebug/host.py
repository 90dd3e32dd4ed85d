# Host capabilities — what the coordinators need from the embedding editor.
# Created: 2026-10-18
#
# Everything is passed in through ``HostContext`` so tests can swap any
# capability for a double.

from __future__ import annotations

import asyncio
import logging
import webbrowser
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from iamdebug.config import JsonConfigStore
from iamdebug.files import log_button_click, read_text_file
from iamdebug.integrations.credential_store import SecureCredentialStore
from iamdebug.panels.webview import PanelFactory, WebviewPanelFactory

logger = logging.getLogger(__name__)

UrlOpener = Callable[[str], Awaitable[bool]]
FileReader = Callable[[str | Path], Awaitable[str]]
ButtonClickHandler = Callable[[dict[str, Any], str], Awaitable[None] | None]


class ConfigStore(Protocol):
    """Host settings store (plain string values)."""

    def get(self, key: str) -> str | None: ...

    def update(self, key: str, value: str) -> None: ...


class Notifier(Protocol):
    """User-visible notifications."""

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Notifier for hosts without a notification UI."""

    def info(self, message: str) -> None:
        logger.info(message)

    def warning(self, message: str) -> None:
        logger.warning(message)

    def error(self, message: str) -> None:
        logger.error(message)


async def open_in_browser(url: str) -> bool:
    """Open ``url`` in the system browser."""
    opened = await asyncio.to_thread(webbrowser.open, url)
    if not opened:
        logger.warning("No browser available to open the login page")
    return opened


@dataclass
class HostContext:
    panels: PanelFactory
    config: ConfigStore
    notifier: Notifier
    vault: SecureCredentialStore = field(default_factory=SecureCredentialStore)
    open_url: UrlOpener = open_in_browser
    read_file: FileReader = read_text_file
    on_button_click: ButtonClickHandler = log_button_click


def default_host() -> HostContext:
    """Host wired to the OS vault, the system browser and ~/.iamdebug settings."""
    return HostContext(
        panels=WebviewPanelFactory(),
        config=JsonConfigStore(),
        notifier=LoggingNotifier(),
    )
