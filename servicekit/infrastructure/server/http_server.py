"""
HTTP server handle backed by uvicorn.

The listener socket is bound when the handle is constructed, so bind
errors surface to the caller before any serving begins. Signal handling
is left to the lifecycle coordinator.
"""

import contextlib
import logging
import socket
from collections.abc import Iterator

import uvicorn
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

LISTEN_BACKLOG = 2048


def bind_listener(host: str, port: int) -> socket.socket:
    """Create a bound, listening TCP socket.

    Raises:
        OSError: If the address cannot be bound.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.create_server((host, port), family=family, backlog=LISTEN_BACKLOG)
    sock.set_inheritable(True)
    logger.info("Listening on %s:%d", *sock.getsockname()[:2])
    return sock


class _LifecycleManagedServer(uvicorn.Server):
    """uvicorn server that does not install its own signal handlers."""

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class HttpServer:
    """One bound listener plus the uvicorn server that serves it.

    Args:
        app: The ASGI application to serve.
        host: Interface to bind.
        port: Port to bind; 0 picks a free port.
    """

    def __init__(self, app: ASGIApp, host: str = "0.0.0.0", port: int = 8080) -> None:
        self.listener = bind_listener(host, port)
        config = uvicorn.Config(
            app,
            log_config=None,
            access_log=False,
            lifespan="auto",
        )
        self._server = _LifecycleManagedServer(config)

    @property
    def address(self) -> tuple[str, int]:
        host, port = self.listener.getsockname()[:2]
        return host, port

    @property
    def started(self) -> bool:
        return self._server.started

    async def serve(self) -> None:
        try:
            await self._server.serve(sockets=[self.listener])
        finally:
            self.listener.close()

    async def shutdown(self, grace_period: float) -> None:
        logger.info("Closing listener, waiting up to %.1fs for open connections", grace_period)
        self._server.should_exit = True

    def abandon(self) -> None:
        self._server.force_exit = True
