"""Rendering surfaces and the per-resource panel registry."""

from iamdebug.panels.registry import (
    PanelHandle,
    PanelRegistry,
    get_panel_registry,
    reset_panel_registry,
)
from iamdebug.panels.webview import Panel, PanelFactory, WebviewPanel, WebviewPanelFactory

__all__ = [
    "Panel",
    "PanelFactory",
    "PanelHandle",
    "PanelRegistry",
    "WebviewPanel",
    "WebviewPanelFactory",
    "get_panel_registry",
    "reset_panel_registry",
]
