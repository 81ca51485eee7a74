import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from favorites_app.db.connection import sanitize_database_url
from favorites_app.errors import StorageFault, UpstreamFault
from favorites_app.services.dependencies import create_container
from favorites_app.settings import AppSettings, get_settings

from .api import favorites, movies
from .schemas.error import ErrorType, ValidationErrorDetail
from .utils.error_responses import (
    build_error_response,
    build_validation_error_response,
    clear_request_id,
    get_request_id,
    set_request_id,
)
from .utils.log_config import configure_logging

logger = logging.getLogger(__name__)


def validate_environment(settings: AppSettings) -> None:
    """Log warnings for optional configuration that is missing."""
    warnings = settings.optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning(f"  • {warning}")
        logger.warning("=" * 60)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the application container on startup and close it on shutdown."""
    settings: AppSettings = app.state.settings
    validate_environment(settings)

    logger.info("=" * 60)
    logger.info("Movie Favorites API - Storage Preflight Check")
    logger.info("=" * 60)
    logger.info(f"Store backend: {settings.store_backend}")
    if settings.store_backend == "sql":
        logger.info(f"Database Type: {settings.database_type.upper()}")
        logger.info(
            f"Database URL: {sanitize_database_url(settings.resolved_database_url)}"
        )
    logger.info("=" * 60)

    container = await create_container(settings)
    app.state.container = container

    try:
        yield
    finally:
        logger.info("Shutting down Movie Favorites API")
        app.state.container = None
        await container.aclose()


def _default_origins() -> list[str]:
    ports = [3000, 5173, 8081]
    origins = []
    for host in ("localhost", "127.0.0.1"):
        origins.extend([f"http://{host}:{port}" for port in ports])
    return origins


def _combine_origins(*origin_groups: list[str]) -> list[str]:
    """Merge origins preserving order and removing duplicates."""
    seen: set[str] = set()
    combined: list[str] = []
    for group in origin_groups:
        for origin in group:
            if origin and origin not in seen:
                seen.add(origin)
                combined.append(origin)
    return combined


async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    token = set_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        clear_request_id(token)
    response.headers["X-Request-ID"] = request_id
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors."""
    errors = [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )

    error_response = build_validation_error_response(
        message="Request validation failed",
        detail=f"{len(errors)} validation error(s)",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=str(request.url.path),
        errors=errors,
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump(mode="json"),
    )


async def storage_fault_handler(request: Request, exc: StorageFault):
    """Surface favorites storage failures; they are not retried."""
    logger.error(
        "Storage fault for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )

    error_response = build_error_response(
        error_type=ErrorType.DATABASE_ERROR,
        message="Favorites storage failed",
        detail=str(exc),
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        path=str(request.url.path),
    )

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=error_response.model_dump(mode="json"),
    )


async def upstream_fault_handler(request: Request, exc: UpstreamFault):
    """Surface movie catalog failures as a gateway error."""
    logger.error(
        "Upstream fault for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )

    error_response = build_error_response(
        error_type=ErrorType.NETWORK_ERROR,
        message="Movie catalog unavailable",
        detail=str(exc),
        status_code=status.HTTP_502_BAD_GATEWAY,
        path=str(request.url.path),
    )

    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=error_response.model_dump(mode="json"),
    )


async def health() -> dict[str, object]:
    return {"ok": True}


def create_app(settings: AppSettings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Movie Favorites API",
        version="0.1.0",
        description="Popular movies from TMDB and a locally persisted favorites list.",
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.container = None

    allow_origins = _combine_origins(_default_origins(), settings.cors_allow_origins)
    logger.debug("Configured CORS allow_origins: %s", ", ".join(allow_origins))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(add_request_id)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StorageFault, storage_fault_handler)
    app.add_exception_handler(UpstreamFault, upstream_fault_handler)

    app.add_api_route("/health", health, methods=["GET"])
    app.include_router(movies.router, prefix="/movies", tags=["movies"])
    app.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
    return app


app = create_app()
