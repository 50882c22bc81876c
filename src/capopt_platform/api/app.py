"""
capopt_platform.api.app

FastAPI app factory for the CapOpt Platform service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Initialize and dispose shared infrastructure (DB engine/session factory, reference data).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from capopt_platform import __version__
from capopt_platform.api.errors import register_error_handlers
from capopt_platform.api.routers import (
    assets,
    auth,
    business_canvas,
    canvas_items,
    controls,
    enums,
    health,
    operating_models,
    processes,
    reference,
    users,
)
from capopt_platform.db.init_db import init_db
from capopt_platform.db.reference_data import seed_on_startup
from capopt_platform.db.session import create_engine, create_sessionmaker
from capopt_platform.observability.logging import configure_logging, get_logger
from capopt_platform.observability.middleware import RequestContextMiddleware
from capopt_platform.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(
        service_name=settings.service_name, level=settings.log_level, fmt=settings.log_format
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        # One engine + session factory per app; routers get sessions via `api.deps.db_session`.
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod uses Alembic migrations.
            await init_db(engine)
        if settings.seed_reference_data:
            await seed_on_startup(app.state.sessionmaker)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="CapOpt Platform API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(business_canvas.router)
    for section_router in canvas_items.routers:
        app.include_router(section_router)
    app.include_router(assets.router)
    app.include_router(controls.router)
    app.include_router(processes.router)
    app.include_router(operating_models.router)
    app.include_router(reference.router)
    app.include_router(enums.router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; business rules live in `canvas`, persistence in `db`, and
# multi-row transactions in `services`.
