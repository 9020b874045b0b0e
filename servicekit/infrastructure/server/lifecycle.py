"""
Graceful server lifecycle.

Drives one server handle through::

    STARTING -> SERVING -> SHUTTING_DOWN -> STOPPED
                   |
                   +-----> FAILED

The coordinator waits on two things at once: a stop request (SIGINT /
SIGTERM or ``request_stop``) and the serve task finishing on its own.
Whichever comes first decides the path. Shutdown is requested from the
server at most once and bounded by the grace period; work still running
after that is abandoned.

Usage:
    state = serve(lambda: HttpServer(app, port=8080), grace_period=5.0)
"""

import asyncio
import logging
import signal
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD = 5.0
ABANDON_WAIT_SECONDS = 1.0
TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class Servable(Protocol):
    """A server that owns a bound listener."""

    async def serve(self) -> None:
        """Accept and dispatch until shut down. Raises on listener failure."""

    async def shutdown(self, grace_period: float) -> None:
        """Stop accepting and let in-flight work finish.

        Must return promptly; completion is observed through ``serve``.
        """

    def abandon(self) -> None:
        """Stop waiting for in-flight work that outlived the grace period."""


class LifecycleState(Enum):
    STARTING = "starting"
    SERVING = "serving"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (LifecycleState.STOPPED, LifecycleState.FAILED)


class ServerLifecycle:
    """Runs a server until a termination signal, then stops it gracefully.

    Args:
        server: The handle to drive. Its listener must already be bound.
        grace_period: Ceiling, in seconds, on in-flight work after a stop.
        signals: OS signals that trigger shutdown.
    """

    def __init__(
        self,
        server: Servable,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        signals: Iterable[signal.Signals] = TERMINATION_SIGNALS,
    ) -> None:
        self._server = server
        self._grace_period = grace_period
        self._signals = tuple(signals)
        self._state = LifecycleState.STARTING
        self._stop_requested = asyncio.Event()
        self._installed: list[signal.Signals] = []
        self.error: Optional[BaseException] = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def grace_period(self) -> float:
        return self._grace_period

    def request_stop(self, signum: Optional[int] = None) -> None:
        """Ask the coordinator to shut down. Repeated calls are no-ops."""
        name = signal.Signals(signum).name if signum is not None else "request"
        if self._stop_requested.is_set():
            logger.info("Shutdown already in progress, ignoring %s", name)
            return
        logger.info("Received %s, server is being shut down...", name)
        self._stop_requested.set()

    async def run(self) -> LifecycleState:
        """Serve until stopped or failed and return the final state."""
        if self._state is not LifecycleState.STARTING:
            raise RuntimeError(f"Lifecycle already ran (state: {self._state.value})")

        loop = asyncio.get_running_loop()
        self._install_signal_handlers(loop)
        logger.info("Starting service...")

        serve_task = asyncio.create_task(self._server.serve(), name="serve")
        stop_task = asyncio.create_task(self._stop_requested.wait(), name="stop")
        self._state = LifecycleState.SERVING

        try:
            done, _ = await asyncio.wait(
                {serve_task, stop_task}, return_when=asyncio.FIRST_COMPLETED
            )
            if serve_task in done:
                stop_task.cancel()
                self._finish_serve(serve_task)
            else:
                await self._shut_down(serve_task)
        finally:
            self._remove_signal_handlers(loop)

        return self._state

    async def _shut_down(self, serve_task: asyncio.Task) -> None:
        self._state = LifecycleState.SHUTTING_DOWN
        await self._server.shutdown(self._grace_period)

        done, _ = await asyncio.wait({serve_task}, timeout=self._grace_period)
        if not done:
            logger.warning(
                "Grace period of %.1fs elapsed, abandoning in-flight requests",
                self._grace_period,
            )
            self._server.abandon()
            done, _ = await asyncio.wait({serve_task}, timeout=ABANDON_WAIT_SECONDS)

        if done and not serve_task.cancelled() and serve_task.exception() is not None:
            self.error = serve_task.exception()
            logger.error("Server stopped with error: %s", self.error)
        self._state = LifecycleState.STOPPED
        logger.info("Server has been shut down")

    def _finish_serve(self, serve_task: asyncio.Task) -> None:
        if serve_task.cancelled():
            self.error = asyncio.CancelledError("serve task cancelled")
        else:
            self.error = serve_task.exception()
            if self.error is None and not self._stop_requested.is_set():
                self.error = RuntimeError("serve loop exited without a stop request")

        if self.error is None:
            self._state = LifecycleState.STOPPED
            logger.info("Server gracefully stopped")
            return

        self._state = LifecycleState.FAILED
        logger.error("Server failed: %s", self.error, exc_info=self.error)

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in self._signals:
            try:
                loop.add_signal_handler(sig, self.request_stop, sig)
            except NotImplementedError:
                # Windows event loops have no add_signal_handler.
                signal.signal(
                    sig,
                    lambda signum, _frame: loop.call_soon_threadsafe(self.request_stop, signum),
                )
            except RuntimeError:
                logger.warning("Cannot handle %s outside the main thread", sig.name)
                continue
            self._installed.append(sig)

    def _remove_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in self._installed:
            try:
                loop.remove_signal_handler(sig)
            except NotImplementedError:
                signal.signal(sig, signal.SIG_DFL)
        self._installed.clear()


def serve(
    make_server: Callable[[], Servable],
    grace_period: float = DEFAULT_GRACE_PERIOD,
) -> LifecycleState:
    """Build a server inside a fresh event loop and run it to completion.

    Listener bind errors raised by ``make_server`` propagate before any
    serving begins.
    """

    async def _main() -> LifecycleState:
        server = make_server()
        lifecycle = ServerLifecycle(server, grace_period)
        return await lifecycle.run()

    return asyncio.run(_main())
