# Shared doubles for the host capabilities.
# Created: 2026-10-18

import asyncio
from unittest.mock import AsyncMock

import pytest

from iamdebug.config import JsonConfigStore, Settings
from iamdebug.errors import PortInUse, RedirectError, RedirectTimeout, VaultError
from iamdebug.host import HostContext
from iamdebug.panels.registry import PanelRegistry
from iamdebug.panels.webview import WebviewPanelFactory


class InMemoryVault:
    """Stands in for SecureCredentialStore; can be told to fail."""

    def __init__(self):
        self.secrets: dict[tuple[str, str], str] = {}
        self.fail_on_set = False
        self.fail_on_get = False
        self.get_delay = 0.0

    async def get(self, service, account):
        if self.get_delay:
            await asyncio.sleep(self.get_delay)
        if self.fail_on_get:
            raise VaultError(service, account, "read")
        return self.secrets.get((service, account))

    async def set(self, service, account, value):
        if self.fail_on_set:
            raise VaultError(service, account, "write")
        self.secrets[(service, account)] = value


class RecordingNotifier:
    def __init__(self):
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def info(self, message):
        self.infos.append(message)

    def warning(self, message):
        self.warnings.append(message)

    def error(self, message):
        self.errors.append(message)


class FakeRedirectServer:
    """RedirectCaptureServer double; tests deliver the redirect by hand."""

    instances: list["FakeRedirectServer"] = []
    fail_start = False

    def __init__(self, port, host, path):
        self.port = port
        self.host = host
        self.path = path
        self.started = False
        self.stopped = False
        self._event = asyncio.Event()
        self._code = None
        self._error = None
        FakeRedirectServer.instances.append(self)

    async def start(self):
        if FakeRedirectServer.fail_start:
            raise PortInUse(self.port)
        self.started = True

    def deliver(self, code=None, error=None):
        self._code = code
        self._error = error
        self._event.set()

    async def wait_for_code(self, timeout=None):
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except asyncio.TimeoutError:
            raise RedirectTimeout("no redirect") from None
        if self._error:
            raise RedirectError(self._error)
        return self._code

    async def stop(self):
        self.stopped = True


@pytest.fixture(autouse=True)
def _reset_fake_server():
    FakeRedirectServer.instances = []
    FakeRedirectServer.fail_start = False
    yield


@pytest.fixture
def settings(tmp_path):
    return Settings(login_timeout=5.0, secret_lookup_timeout=0.1)


@pytest.fixture
def vault():
    return InMemoryVault()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def config_store(tmp_path):
    return JsonConfigStore(tmp_path / "workspace.json")


@pytest.fixture
def host(vault, notifier, config_store):
    return HostContext(
        panels=WebviewPanelFactory(),
        config=config_store,
        notifier=notifier,
        vault=vault,
        open_url=AsyncMock(return_value=True),
        on_button_click=AsyncMock(),
    )


@pytest.fixture
def registry():
    return PanelRegistry()
