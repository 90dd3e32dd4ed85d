"""Configuration for iamdebug.

``Settings`` holds tool-level knobs (redirect port, timeouts, asset root) and
reads ``IAMDEBUG_*`` environment variables on top of ``~/.iamdebug/config.json``.

``JsonConfigStore`` is the host settings store that the login flow writes the
identity server base URL and client id into. It is a flat key/value JSON file.

Created: 2026-10-18
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

from iamdebug.constants import REDIRECT_PATH, REDIRECT_PORT

logger = logging.getLogger(__name__)

_PACKAGE_UI_DIR = Path(__file__).parent / "ui"


def get_config_dir() -> Path:
    """Get/create the config directory (~/.iamdebug)."""
    d = Path.home() / ".iamdebug"
    d.mkdir(exist_ok=True)
    return d


def get_config_path() -> Path:
    return get_config_dir() / "config.json"


class Settings(BaseSettings):
    """Tool settings, persisted to ~/.iamdebug/config.json."""

    model_config = SettingsConfigDict(env_prefix="IAMDEBUG_", extra="ignore")

    redirect_host: str = "127.0.0.1"
    redirect_port: int = REDIRECT_PORT
    redirect_path: str = REDIRECT_PATH

    # Seconds a login may wait for the redirect + access token
    login_timeout: float = 300.0
    # Seconds the login surface waits for the stored client secret
    secret_lookup_timeout: float = 5.0

    asset_root: Path = _PACKAGE_UI_DIR

    @property
    def redirect_uri(self) -> str:
        return f"http://localhost:{self.redirect_port}{self.redirect_path}"

    @classmethod
    def load(cls, path: Path | None = None) -> Settings:
        """Load settings from disk, falling back to defaults + env."""
        path = path or get_config_path()
        data: dict[str, Any] = {}
        if path.exists():
            try:
                data = json.loads(path.read_text())
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return cls(**data)

    def save(self, path: Path | None = None) -> None:
        path = path or get_config_path()
        path.write_text(self.model_dump_json(indent=2))
        logger.debug("Saved settings to %s", path)


@lru_cache
def get_settings() -> Settings:
    """Cached settings accessor."""
    return Settings.load()


class JsonConfigStore:
    """Flat key/value settings store backed by a JSON file.

    Reads go to disk every time so that a value written by another process is
    picked up; there is no in-memory cache.
    """

    def __init__(self, path: Path | None = None):
        self._path = path

    @property
    def path(self) -> Path:
        if self._path is not None:
            return self._path
        return get_config_dir() / "workspace.json"

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to read settings store %s: %s", self.path, e)
            return {}

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return None if value is None else str(value)

    def update(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.write_text(json.dumps(data, indent=2))
        logger.info("Updated setting %s", key)
