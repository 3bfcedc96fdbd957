# src/flexpro/main.py
from __future__ import annotations

import logging.config
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from flexpro.api.routers import ALL_ROUTERS
from flexpro.app_logger import get_logger, json_logging_config
from flexpro.auth.routes import router as auth_router
from flexpro.core.config import settings
from flexpro.db.session import get_engine
from flexpro.services.portal_settings import PortalSettingsService

logging.config.dictConfig(json_logging_config())
log = get_logger("main")


def _integrity_reason(exc: IntegrityError) -> str:
    low = str(getattr(exc, "orig", None) or exc).lower()
    if "unique" in low or "duplicate key" in low:
        return "A record with these values already exists"
    if "foreign key" in low:
        return "A referenced record does not exist"
    return "The change conflicts with existing data"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        """Constraint violations (usually a concurrent duplicate) surface as 409 Conflict."""
        log.warning(
            "IntegrityError on %s %s: %s",
            request.method, request.url.path, getattr(exc, "orig", exc),
        )
        return JSONResponse(status_code=409, content={"detail": _integrity_reason(exc)})

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
        # full traceback in the log, nothing about the database in the response
        log.exception("Database error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Handles startup/shutdown tasks for the app (runs once on start, once on stop).
        """
        log.info("starting %s %s", settings.APP_NAME, settings.APP_VERSION)
        try:
            yield
        finally:
            await get_engine().dispose()
            log.info("stopped %s", settings.APP_NAME)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.portal_settings = PortalSettingsService(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(o).rstrip("/") for o in settings.cors_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth_router)
    for router in ALL_ROUTERS:
        app.include_router(router)

    return app


app = create_app()
