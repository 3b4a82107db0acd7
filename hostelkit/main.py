from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hostelkit.api.deps import ServiceContainer
from hostelkit.api.errors import register_exception_handlers
from hostelkit.api.v1.router import router as api_v1_router
from hostelkit.config.settings import settings
from hostelkit.core.logging import get_logger, setup_logging
from hostelkit.core.middleware import register_middlewares
from hostelkit.db.init_db import init_db
from hostelkit.db.session import SessionLocal
from hostelkit.services.common import SessionFactory

logger = get_logger(__name__)


def create_app(session_factory: Optional[SessionFactory] = None, create_schema: Optional[bool] = None) -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Builds the services on `session_factory` (the configured database
      when omitted) and includes the versioned API router under /api/v1.
    """
    setup_logging()

    if session_factory is None:
        session_factory = SessionLocal
    if create_schema is None:
        create_schema = not settings.is_production()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        # For dev/demo only; production schemas are migrated
        if create_schema:
            # sessionmaker keeps its engine in kw; other factories use the default engine
            init_db(getattr(session_factory, "kw", {}).get("bind"))
        logger.info("Application started", extra={"environment": settings.ENVIRONMENT})
        yield
        logger.info("Application stopped")

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_middlewares(app)
    register_exception_handlers(app)

    app.state.services = ServiceContainer.build(session_factory)
    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    return app


app = create_app()
