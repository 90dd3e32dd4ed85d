"""iamdebug — diagram previews and OAuth login for an identity-server debugger."""

from iamdebug.host import HostContext, default_host
from iamdebug.integrations.oauth import LoginState, OAuthFlowCoordinator, OAuthSession
from iamdebug.panels.registry import PanelHandle, PanelRegistry, get_panel_registry
from iamdebug.preview import PreviewCoordinator

__all__ = [
    "HostContext",
    "LoginState",
    "OAuthFlowCoordinator",
    "OAuthSession",
    "PanelHandle",
    "PanelRegistry",
    "PreviewCoordinator",
    "default_host",
    "get_panel_registry",
]
