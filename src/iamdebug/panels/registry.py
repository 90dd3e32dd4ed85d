# Panel registry — at most one live diagram panel per resource key.
# Created: 2026-10-18

from __future__ import annotations

import logging
from dataclasses import dataclass

from iamdebug.panels.webview import Panel

logger = logging.getLogger(__name__)


@dataclass
class PanelHandle:
    """A registered rendering surface and the HTML last rendered into it."""

    panel: Panel
    html: str
    resource_path: str = ""


class PanelRegistry:
    """Maps a resource key to the panel currently showing that resource.

    Not thread-safe: all mutation happens on the event loop between awaits.
    """

    def __init__(self) -> None:
        self._panels: dict[str, PanelHandle] = {}

    def upsert(self, key: str, handle: PanelHandle) -> None:
        """Register ``handle`` under ``key``, replacing any previous handle."""
        previous = self._panels.get(key)
        self._panels[key] = handle
        if previous is not None and previous.panel is not handle.panel:
            logger.debug("Replaced panel for %s", key)

    def get(self, key: str) -> PanelHandle | None:
        return self._panels.get(key)

    def all(self) -> dict[str, PanelHandle]:
        """Snapshot of every registered panel."""
        return dict(self._panels)

    def remove(self, key: str, panel: Panel | None = None) -> bool:
        """Drop the entry for ``key``.

        If ``panel`` is given, the entry is only dropped while that panel is
        still the registered one; a newer panel under the same key is kept.
        """
        handle = self._panels.get(key)
        if handle is None:
            return False
        if panel is not None and handle.panel is not panel:
            return False
        del self._panels[key]
        logger.debug("Removed panel for %s", key)
        return True

    def is_current(self, key: str, panel: Panel) -> bool:
        handle = self._panels.get(key)
        return handle is not None and handle.panel is panel

    def clear(self) -> None:
        self._panels.clear()

    def __len__(self) -> int:
        return len(self._panels)

    def __contains__(self, key: object) -> bool:
        return key in self._panels


_registry_instance: PanelRegistry | None = None


def get_panel_registry() -> PanelRegistry:
    """Process-wide registry, created on first use."""
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = PanelRegistry()
    return _registry_instance


def reset_panel_registry() -> None:
    """Forget the process-wide registry (tests)."""
    global _registry_instance
    _registry_instance = None


__all__ = [
    "PanelHandle",
    "PanelRegistry",
    "get_panel_registry",
    "reset_panel_registry",
]
