# Webview messages posted by the login surface, parsed into a closed set of commands.
# Created: 2026-10-18

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from iamdebug.constants import COMMAND_ACCESS, COMMAND_LOGIN

logger = logging.getLogger(__name__)


class LoginCommand(BaseModel):
    """User submitted identity server details on the login surface."""

    model_config = ConfigDict(populate_by_name=True)

    command: Literal["login"] = COMMAND_LOGIN
    base_url: str = Field(alias="baseUrl", min_length=1)
    client_id: str = Field(alias="clientID", min_length=1)
    client_secret: str = Field(alias="clientSecret", repr=False)


class AccessCommand(BaseModel):
    """The login page exchanged the authorization code for an access token."""

    model_config = ConfigDict(populate_by_name=True)

    command: Literal["access"] = COMMAND_ACCESS
    access_token: str = Field(alias="accessToken", min_length=1, repr=False)


class IgnoredCommand(BaseModel):
    """Anything the login surface sent that is not a known command."""

    command: str | None = None
    reason: str = "unknown command"


LoginSurfaceCommand = LoginCommand | AccessCommand | IgnoredCommand


def parse_login_message(message: Any) -> LoginSurfaceCommand:
    """Map a raw webview payload onto a command variant.

    Unknown or malformed payloads become ``IgnoredCommand`` instead of raising.
    """
    if not isinstance(message, dict):
        return IgnoredCommand(reason="payload is not an object")

    command = message.get("command")
    if not isinstance(command, str):
        return IgnoredCommand(reason="missing command")

    # Command names are matched case-insensitively ("LOGIN" == "login")
    command = command.lower()
    model: type[LoginCommand] | type[AccessCommand]
    if command == COMMAND_LOGIN:
        model = LoginCommand
    elif command == COMMAND_ACCESS:
        model = AccessCommand
    else:
        return IgnoredCommand(command=command)

    try:
        return model.model_validate({**message, "command": command})
    except ValidationError as e:
        # Field names only; values may be secrets
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        logger.warning("Malformed %s message, invalid fields: %s", command, fields)
        return IgnoredCommand(command=command, reason=f"invalid fields: {fields}")
