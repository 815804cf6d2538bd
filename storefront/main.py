"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api.v1 import router as v1_router
from storefront.core.config import get_settings
from storefront.core.database import Database
from storefront.core.errors import StorefrontError, UpstreamFailure
from storefront.core.logging import configure_logging
from storefront.schemas.envelope import Envelope
from storefront.services.uploads import ASSETS_URL_PATH

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = UpstreamFailure().message


def _envelope_response(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _envelope_response(exc.status_code, INTERNAL_ERROR_MESSAGE)
    return _envelope_response(exc.status_code, exc.message, headers)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _envelope_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = sorted({".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()} - {""})
    message = "Invalid request."
    if fields:
        message = f"Invalid request: {', '.join(fields)}."
    return _envelope_response(422, message)


async def upstream_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Database and storage failures: log the detail, tell the caller nothing."""
    logger.exception("%s %s failed", request.method, request.url.path)
    return _envelope_response(500, INTERNAL_ERROR_MESSAGE)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the database at startup (unless one was injected) and close it at shutdown."""
    settings = get_settings()
    Path(settings.ASSETS_DIR).mkdir(parents=True, exist_ok=True)
    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = Database(settings.DATABASE_URL, echo=settings.DEBUG).open()
    logger.info("Storefront API started (env=%s)", settings.APP_ENV)
    try:
        yield
    finally:
        if owns_database:
            app.state.database.close()
            app.state.database = None
        logger.info("Storefront API stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Storefront API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.database = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, upstream_error_handler)
    app.add_exception_handler(OSError, upstream_error_handler)
    app.add_exception_handler(Exception, upstream_error_handler)

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)
    app.mount(
        ASSETS_URL_PATH,
        StaticFiles(directory=settings.ASSETS_DIR, check_dir=False),
        name="assets",
    )

    @app.get("/", response_model=Envelope)
    def root() -> Envelope:
        """Root route; minimal payload for discovery."""
        return Envelope(message="Storefront API")

    return app


app = create_app()
