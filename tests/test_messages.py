# Tests for messages.py
# Created: 2026-10-18

import pytest

from iamdebug.messages import AccessCommand, IgnoredCommand, LoginCommand, parse_login_message


def test_login_command():
    cmd = parse_login_message(
        {"command": "login", "baseUrl": "https://idp.example", "clientID": "abc", "clientSecret": "s"}
    )
    assert isinstance(cmd, LoginCommand)
    assert cmd.base_url == "https://idp.example"
    assert cmd.client_id == "abc"
    assert cmd.client_secret == "s"


def test_command_names_are_case_insensitive():
    cmd = parse_login_message({"command": "ACCESS", "accessToken": "tok123"})
    assert isinstance(cmd, AccessCommand)
    assert cmd.access_token == "tok123"


def test_secrets_hidden_from_repr():
    cmd = parse_login_message(
        {"command": "login", "baseUrl": "https://idp", "clientID": "abc", "clientSecret": "s3cr3t"}
    )
    assert "s3cr3t" not in repr(cmd)
    assert "tok123" not in repr(parse_login_message({"command": "access", "accessToken": "tok123"}))


@pytest.mark.parametrize(
    "payload",
    [
        {"command": "PING"},
        {"nothing": True},
        {"command": 42},
        "login",
        None,
    ],
)
def test_unknown_payloads_are_ignored(payload):
    assert isinstance(parse_login_message(payload), IgnoredCommand)


def test_malformed_known_command_is_ignored_without_leaking_values():
    cmd = parse_login_message({"command": "login", "baseUrl": "", "clientSecret": "s3cr3t"})
    assert isinstance(cmd, IgnoredCommand)
    assert cmd.command == "login"
    assert "clientID" in cmd.reason
    assert "s3cr3t" not in cmd.reason
