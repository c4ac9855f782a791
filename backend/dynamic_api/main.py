"""Dynamic API — FastAPI application factory.

Invariants:
    - Every route is compiled inside create_app(), before the app can serve traffic
    - Registration errors (InvalidCapabilityType, NoCapabilityInterfaces,
      DuplicateRoute) escape create_app() — a misconfigured process never starts
    - Global error handlers map DynamicApiError → structured JSON responses

Design Decisions:
    - Factory over module-level app: interfaces and implementations are inputs
    - Lifespan over @app.on_event: logging configured once per process start
"""

import logging
from contextlib import asynccontextmanager
from types import ModuleType

from fastapi import FastAPI

from dynamic_api.api.client_registry import ClientRegistry
from dynamic_api.api.error_handlers import register_error_handlers
from dynamic_api.api.route_compiler import map_all_clients
from dynamic_api.config import Settings, get_settings
from dynamic_api.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    registry: ClientRegistry,
    *modules: ModuleType,
    settings: Settings | None = None,
) -> FastAPI:
    """Build an app exposing every capability interface found in `modules`."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        logger.info(
            f"Dynamic API started with {len(entries)} route(s) under "
            f"'{settings.base_route or '/'}'",
        )
        yield
        logger.info("Dynamic API shutting down")

    app = FastAPI(title="Dynamic API", version="1.0.0", lifespan=lifespan)
    register_error_handlers(app)
    entries = map_all_clients(
        app, settings.base_route, registry, *modules,
        limits=settings.binding_limits(),
    )
    return app
