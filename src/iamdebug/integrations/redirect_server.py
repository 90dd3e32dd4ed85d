"""Loopback listener that captures a single OAuth authorization redirect.

The identity server redirects the browser to ``http://localhost:<port>/callback``
with ``?code=...`` (or ``?error=...``). The first redirect resolves the
capture; the server is then stopped by its owner, which releases the port.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from html import escape

import uvicorn
from fastapi import FastAPI, Query
from fastapi.responses import HTMLResponse

from iamdebug.constants import REDIRECT_PATH, REDIRECT_PORT
from iamdebug.errors import PortInUse, RedirectError, RedirectTimeout

logger = logging.getLogger(__name__)

_DONE_PAGE = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>{title}</title></head>
<body style="font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; text-align: center; padding: 48px;">
  <h2>{title}</h2>
  <p>{detail}</p>
  <p>You can close this window and return to the editor.</p>
</body>
</html>
"""


def _page(title: str, detail: str = "") -> HTMLResponse:
    return HTMLResponse(_DONE_PAGE.format(title=escape(title), detail=escape(detail)))


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind ``host:port`` for listening, or raise ``PortInUse``."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    # Same option uvicorn binds with, so a TIME_WAIT port counts as free
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        raise PortInUse(port) from e
    return sock


def ensure_port_free(host: str, port: int) -> None:
    """Raise ``PortInUse`` if nothing can bind ``host:port`` right now."""
    if port == 0:
        return
    bind_socket(host, port).close()


class RedirectCaptureServer:
    """Serve one redirect endpoint on the loopback interface until stopped.

    Usage:
        async with RedirectCaptureServer(port=8010) as server:
            code = await server.wait_for_code(timeout=300)
    """

    def __init__(
        self,
        port: int = REDIRECT_PORT,
        host: str = "127.0.0.1",
        path: str = REDIRECT_PATH,
    ) -> None:
        self.host = host
        self.port = port
        self.path = path
        self._captured = asyncio.Event()
        self._code: str | None = None
        self._error: str | None = None
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task | None = None
        self.app = self._create_app()

    @property
    def running(self) -> bool:
        return self._server is not None

    @property
    def captured(self) -> bool:
        return self._captured.is_set()

    @property
    def bound_port(self) -> int:
        """The port actually bound (differs from ``port`` only when ``port`` is 0)."""
        if self._server is not None and self._server.servers:
            sockets = self._server.servers[0].sockets
            if sockets:
                return sockets[0].getsockname()[1]
        return self.port

    def _create_app(self) -> FastAPI:
        app = FastAPI(title="iamdebug redirect capture", docs_url=None, redoc_url=None)

        @app.get(self.path, response_class=HTMLResponse)
        async def callback(
            code: str = Query(""),
            error: str = Query(""),
            error_description: str = Query(""),
        ):
            """OAuth redirect target: records the first code or error."""
            if self._captured.is_set():
                return _page("Login already completed")

            if error:
                self._error = error_description or error
                self._captured.set()
                logger.warning("Identity server returned OAuth error: %s", error)
                return _page("Login failed", self._error)

            if not code:
                return _page("Missing authorization code")

            self._code = code
            self._captured.set()
            logger.info("Captured authorization code on port %s", self.bound_port)
            return _page("Login received")

        return app

    async def start(self) -> None:
        """Bind the port and start serving. Returns once uvicorn is accepting.

        Raises:
            PortInUse: the port is held by another socket.
            RedirectError: uvicorn stopped before it began serving.
        """
        if self._server is not None:
            return
        # uvicorn exits the process when its own bind fails, so it gets a bound socket
        sock = bind_socket(self.host, self.port)

        config = uvicorn.Config(self.app, host=self.host, port=self.port, log_level="warning")
        server = uvicorn.Server(config)
        task = asyncio.create_task(server.serve(sockets=[sock]))

        while not server.started:
            if task.done():
                sock.close()
                exc = task.exception()
                raise RedirectError(f"Redirect listener failed to start: {exc}") from exc
            await asyncio.sleep(0.05)
        self._server = server
        self._task = task
        logger.info("Redirect capture listening on %s:%s", self.host, self.bound_port)

    async def wait_for_code(self, timeout: float | None = None) -> str:
        """Wait for the redirect and return its authorization code."""
        try:
            await asyncio.wait_for(self._captured.wait(), timeout)
        except asyncio.TimeoutError:
            raise RedirectTimeout(
                f"No authorization redirect received within {timeout:g} seconds"
            ) from None
        if self._error is not None:
            raise RedirectError(self._error)
        assert self._code is not None
        return self._code

    async def stop(self) -> None:
        """Shut the server down and release the port. Safe to call twice."""
        server, task = self._server, self._task
        self._server = None
        self._task = None
        if server is None:
            return
        server.should_exit = True
        if task is not None:
            await task
        logger.info("Redirect capture on port %s stopped", self.port)

    async def __aenter__(self) -> RedirectCaptureServer:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
