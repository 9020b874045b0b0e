"""
Server handles and the lifecycle that drives them.
"""

from servicekit.infrastructure.server.http_server import HttpServer, bind_listener
from servicekit.infrastructure.server.lifecycle import (
    DEFAULT_GRACE_PERIOD,
    LifecycleState,
    Servable,
    ServerLifecycle,
    serve,
)
from servicekit.infrastructure.server.rpc_server import SERVER_KEEPALIVE_OPTIONS, RpcServer

__all__ = [
    "DEFAULT_GRACE_PERIOD",
    "HttpServer",
    "LifecycleState",
    "RpcServer",
    "SERVER_KEEPALIVE_OPTIONS",
    "Servable",
    "ServerLifecycle",
    "bind_listener",
    "serve",
]
