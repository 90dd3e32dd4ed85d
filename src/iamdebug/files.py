# Resource-file helpers — reading debug-session files and deriving registry keys.
# Created: 2026-10-18

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from iamdebug.errors import ResourceReadError

logger = logging.getLogger(__name__)


async def read_text_file(path: str | Path) -> str:
    """Read a UTF-8 file without blocking the event loop."""
    try:
        return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ResourceReadError(str(path), e.__class__.__name__) from e


def extract_file_name(path: str | Path) -> str:
    """File name without directory or extension."""
    return Path(path).stem


def resource_key(path: str | Path) -> str:
    """Registry key for a resource: its file name with an escaped space decoded.

    Only the first ``%20`` is decoded, so ``My%20Service.xml`` → ``My Service``.
    """
    return extract_file_name(path).replace("%20", " ", 1)


def log_button_click(message: dict[str, Any], resource_path: str) -> None:
    """Fallback diagram button handler used when the host does not supply one."""
    logger.info("Diagram action %s from %s", message.get("command", "?"), resource_path)
