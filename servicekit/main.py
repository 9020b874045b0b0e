"""
Application entry point.

Creates the FastAPI application and wires together:
- The Responder (negotiation + encoding, with the template configuration)
- Error handlers (every failure rendered in the negotiated format)
- Middleware (access log, CORS preflight, shared-token authorization)
- The health route
- Logging configuration

Services pass their own routers in. No business logic belongs here.
"""

from collections.abc import Iterable
from typing import Optional

from fastapi import APIRouter, FastAPI

from servicekit.core.config import Settings, settings
from servicekit.interfaces.health import router as health_router
from servicekit.interfaces.http.responses import Responder
from servicekit.shared.errors.handlers import register_error_handlers
from servicekit.shared.logging import configure_logging
from servicekit.shared.middleware import AccessLogMiddleware, PreflightMiddleware
from servicekit.shared.security import AuthorizationMiddleware


def create_app(
    config: Optional[Settings] = None,
    routers: Iterable[APIRouter] = (),
) -> FastAPI:
    """Create and configure the FastAPI application.

    This is the composition root of a service.

    Args:
        config: Settings to use; defaults to the environment-loaded ones.
        routers: Service routers to mount after the built-in routes.

    Returns:
        A fully configured FastAPI application instance.
    """
    config = config or settings
    configure_logging(level=config.effective_log_level())

    app = FastAPI(
        title=config.project_name,
        version=config.version,
        docs_url="/docs" if config.debug else None,
        redoc_url="/redoc" if config.debug else None,
    )

    app.state.settings = config
    app.state.responder = Responder(config.template_paths())

    # --- Middleware (last added runs first) ---
    if config.service_key:
        app.add_middleware(AuthorizationMiddleware, service_key=config.service_key)
    app.add_middleware(PreflightMiddleware)
    app.add_middleware(AccessLogMiddleware, log_health=config.debug_with_health)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router)
    for router in routers:
        app.include_router(router)

    return app


app = create_app()
