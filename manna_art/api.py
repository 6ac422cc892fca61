"""
FastAPI application for Manna Art.
"""

from __future__ import annotations

import importlib.metadata
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .billing.routes import router as billing_router
from .catalog.routes import router as catalog_router
from .config import Settings, get_settings
from .errors import MannaError
from .logging_config import configure_logging
from .registration.routes import router as registration_router
from .registry.routes import router as registry_router
from .services import Services, build_services

logger = structlog.get_logger()

PACKAGE_NAME = "manna-art"


def package_version() -> str:
    try:
        return importlib.metadata.version(PACKAGE_NAME)
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    logger.info("Starting Manna Art", environment=settings.environment)

    owns_services = getattr(app.state, "services", None) is None
    if owns_services:
        try:
            app.state.services = build_services(settings)
        except Exception as e:
            logger.error("Failed to start application", error=str(e))
            raise

    yield

    logger.info("Shutting down Manna Art")
    if owns_services:
        await app.state.services.aclose()
        app.state.services = None
    logger.info("Shutdown complete")


async def manna_error_handler(request: Request, exc: MannaError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log("Request failed", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
    logger.info("Invalid request", path=request.url.path, fields=fields)
    return JSONResponse(
        {"error": f"Solicitud inválida: {', '.join(fields)}", "code": "VALIDATION_ERROR"},
        status_code=400,
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error", path=request.url.path, error=str(exc), exc_info=exc
    )
    return JSONResponse({"error": str(exc) or "Error interno"}, status_code=500)


def create_app(
    settings: Optional[Settings] = None, services: Optional[Services] = None
) -> FastAPI:
    """Build the application; tests pass their own settings and services."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Permanent storage and IP registration for creators",
        version=package_version(),
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MannaError, manna_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health", tags=["system"])
    async def health() -> dict:
        """Basic health check endpoint."""
        return {"status": "ok"}

    @app.get("/version", tags=["system"])
    def version() -> dict[str, str]:
        """Return the version of the application."""
        return {"version": package_version()}

    app.include_router(catalog_router)
    app.include_router(registration_router)
    app.include_router(billing_router)
    app.include_router(registry_router)

    return app


app = create_app()
