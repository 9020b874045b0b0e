"""
gRPC server handle.

Creates a ``grpc.aio`` server with the standard keepalive options, binds
its port immediately and registers server reflection. Services are added
by the caller before the lifecycle starts::

    rpc = RpcServer("[::]:5000", reflection_services=[SERVICE_NAME])
    product_pb2_grpc.add_ProductServiceServicer_to_server(Controller(), rpc.server)
    await ServerLifecycle(rpc).run()
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import Optional

import grpc
from grpc_reflection.v1alpha import reflection

logger = logging.getLogger(__name__)

# Fixed keepalive configuration shared by every service.
SERVER_KEEPALIVE_OPTIONS: tuple[tuple[str, int], ...] = (
    # Ping an idle client after this long to check the transport is alive.
    ("grpc.keepalive_time_ms", 30_000),
    # Close the connection if the ping is not answered within this window.
    ("grpc.keepalive_timeout_ms", 60_000),
    ("grpc.max_connection_age_ms", 5 * 60_000),
    # Extra time after max age before the connection is forcibly closed.
    ("grpc.max_connection_age_grace_ms", 60_000),
)


class RpcServer:
    """One bound port plus the grpc.aio server that serves it.

    Must be constructed inside a running event loop.

    Args:
        address: ``host:port`` to bind; port 0 picks a free port.
        options: Extra channel options, appended after the keepalive ones.
        reflection_services: Fully-qualified names of the services that
            will be registered, advertised through server reflection.

    Raises:
        OSError: If the address cannot be bound.
    """

    def __init__(
        self,
        address: str,
        options: Iterable[tuple[str, int]] = (),
        reflection_services: Iterable[str] = (),
    ) -> None:
        self.server = grpc.aio.server(options=[*SERVER_KEEPALIVE_OPTIONS, *options])
        try:
            self.port = self.server.add_insecure_port(address)
        except RuntimeError as exc:
            raise OSError(f"Cannot bind gRPC server to {address}: {exc}") from exc
        if self.port == 0:
            raise OSError(f"Cannot bind gRPC server to {address}")

        service_names = (*reflection_services, reflection.SERVICE_NAME)
        reflection.enable_server_reflection(service_names, self.server)
        self._stopping: Optional[asyncio.Task] = None
        logger.info("gRPC server bound to port %d", self.port)

    async def serve(self) -> None:
        await self.server.start()
        await self.server.wait_for_termination()
        if self._stopping is not None:
            await self._stopping

    async def shutdown(self, grace_period: float) -> None:
        # grpc enforces the grace period itself and cancels RPCs past it.
        self._stopping = asyncio.ensure_future(self.server.stop(grace_period))

    def abandon(self) -> None:
        logger.debug("gRPC stop already bounded by its grace period")
