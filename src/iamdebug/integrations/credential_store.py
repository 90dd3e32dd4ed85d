# Credential Store — OS vault persistence for the client secret and access token.
# Created: 2026-10-18
#
# Backed by ``keyring`` (macOS Keychain, Windows Credential Manager, Secret
# Service). Keyring calls block, so they run in a worker thread.

from __future__ import annotations

import asyncio
import logging

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from iamdebug.errors import VaultError

logger = logging.getLogger(__name__)


class SecureCredentialStore:
    """Get/set secrets by (service, account).

    There is no in-memory cache; the vault is the source of truth. Errors
    name the (service, account) pair but never the secret value.
    """

    async def get(self, service: str, account: str) -> str | None:
        try:
            return await asyncio.to_thread(keyring.get_password, service, account)
        except KeyringError as e:
            logger.error("Vault read failed for %s/%s: %s", service, account, type(e).__name__)
            raise VaultError(service, account, "read") from e

    async def set(self, service: str, account: str, value: str) -> None:
        try:
            await asyncio.to_thread(keyring.set_password, service, account, value)
        except KeyringError as e:
            logger.error("Vault write failed for %s/%s: %s", service, account, type(e).__name__)
            raise VaultError(service, account, "write") from e
        logger.info("Stored credential %s/%s", service, account)

    async def delete(self, service: str, account: str) -> bool:
        """Remove a secret. Returns False if nothing was stored."""
        try:
            await asyncio.to_thread(keyring.delete_password, service, account)
        except PasswordDeleteError:
            return False
        except KeyringError as e:
            raise VaultError(service, account, "delete") from e
        logger.info("Deleted credential %s/%s", service, account)
        return True
