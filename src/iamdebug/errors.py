"""Exception hierarchy for the preview and login flows.

Every error is reported to the user at the boundary where it is detected
(see ``PreviewCoordinator`` and ``OAuthFlowCoordinator``). None of these
messages ever carry a secret value.
"""

from __future__ import annotations


class IAMDebugError(Exception):
    """Base class for all iamdebug errors."""


class VaultError(IAMDebugError):
    """The OS credential vault refused or failed a get/set."""

    def __init__(self, service: str, account: str, operation: str = "access"):
        self.service = service
        self.account = account
        self.operation = operation
        super().__init__(f"Could not {operation} credential {service}/{account} in the OS vault")


class SessionInProgress(IAMDebugError):
    """A login attempt is already active."""


class RedirectTimeout(IAMDebugError):
    """No authorization redirect arrived within the login timeout."""


class RedirectError(IAMDebugError):
    """The identity server redirected back with an OAuth error."""


class PortInUse(IAMDebugError):
    """The loopback redirect port is held by another process."""

    def __init__(self, port: int):
        self.port = port
        super().__init__(f"Port {port} is already in use")


class TemplateError(IAMDebugError):
    """A template could not be parsed or rendered."""


class ResourceReadError(IAMDebugError):
    """A resource file is missing or unreadable."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        msg = f"Could not read {path}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
