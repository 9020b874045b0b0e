"""
Command-line entry point.

Usage:
    python -m servicekit http [--host HOST] [--port PORT] [--grace SECONDS]
    python -m servicekit rpc [--address ADDRESS] [--grace SECONDS]

Both commands run until SIGINT/SIGTERM and then shut down gracefully.
"""

import argparse
import logging
import sys

from servicekit.core.config import settings
from servicekit.infrastructure.server import HttpServer, LifecycleState, RpcServer, serve
from servicekit.shared.logging import configure_logging

logger = logging.getLogger(__name__)


def cmd_http(args: argparse.Namespace) -> LifecycleState:
    """Serve the default application over HTTP."""
    from servicekit.main import app

    logger.info("Starting HTTP service at http://%s:%d", args.host, args.port)
    return serve(lambda: HttpServer(app, args.host, args.port), grace_period=args.grace)


def cmd_rpc(args: argparse.Namespace) -> LifecycleState:
    """Serve an empty gRPC server (reflection only)."""
    configure_logging(level=settings.effective_log_level())
    logger.info("Starting gRPC service at %s", args.address)
    return serve(lambda: RpcServer(args.address), grace_period=args.grace)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="servicekit server runner")
    subparsers = parser.add_subparsers(dest="command", required=True)

    http_parser = subparsers.add_parser("http", help="Run the HTTP service")
    http_parser.add_argument("--host", default=settings.host)
    http_parser.add_argument("--port", type=int, default=settings.port)
    http_parser.add_argument(
        "--grace", type=float, default=settings.shutdown_grace_seconds,
        help="Seconds in-flight requests may run after a stop signal",
    )
    http_parser.set_defaults(func=cmd_http)

    rpc_parser = subparsers.add_parser("rpc", help="Run the gRPC service")
    rpc_parser.add_argument("--address", default=settings.rpc_address)
    rpc_parser.add_argument(
        "--grace", type=float, default=settings.shutdown_grace_seconds,
        help="Seconds in-flight calls may run after a stop signal",
    )
    rpc_parser.set_defaults(func=cmd_rpc)

    args = parser.parse_args(argv)
    try:
        state = args.func(args)
    except OSError as exc:
        logger.error("Cannot start server: %s", exc)
        return 1
    return 0 if state is LifecycleState.STOPPED else 1


if __name__ == "__main__":
    sys.exit(main())
