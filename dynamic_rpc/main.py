"""Dynamic RPC API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map DynamicRPCError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - The PresenceRuntime is built on startup and closed on shutdown; a runtime
      already present on app.state (tests) is left alone

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Autostart fires the enable hook once on startup, like a plugin being switched on
    - A domain error during autostart is logged, not raised: the API must come up
      so the settings that caused it can be fixed
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dynamic_rpc.api.error_handlers import register_error_handlers
from dynamic_rpc.api.routes import health, presence, settings as settings_routes
from dynamic_rpc.config import get_settings
from dynamic_rpc.core.errors import DynamicRPCError
from dynamic_rpc.infrastructure.observability import setup_logging
from dynamic_rpc.runtime import PresenceRuntime, build_runtime

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    owned = getattr(app.state, "runtime", None) is None
    if owned:
        app.state.runtime = build_runtime(settings)
    if settings.autostart:
        await _autostart(app.state.runtime)
    logger.info("Dynamic RPC started")
    yield
    logger.info("Dynamic RPC shutting down")
    if owned:
        await app.state.runtime.aclose()
        app.state.runtime = None


async def _autostart(runtime: PresenceRuntime) -> None:
    """Enable presence; a failed first publish leaves rotation armed."""
    try:
        await runtime.scheduler.on_enable()
    except DynamicRPCError as e:
        logger.error(
            f"Autostart publish failed: {e.message}",
            extra={"error_code": e.code, "asset_key": e.context.asset_key},
        )


def create_app() -> FastAPI:
    app = FastAPI(title="Dynamic RPC", version="1.0.0", lifespan=lifespan)
    app.state.runtime = None

    settings = get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(presence.router)
    app.include_router(settings_routes.router)

    register_error_handlers(app)
    return app


app = create_app()
