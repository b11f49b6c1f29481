"""
FastAPI application entry point.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketing_api.auth.jwt import TokenService
from marketing_api.auth.passwords import PasswordHasher
from marketing_api.auth.router import router as auth_router
from marketing_api.campaigns.router import router as campaigns_router
from marketing_api.config import Settings, get_settings
from marketing_api.shared.database import DatabaseManager
from marketing_api.shared.exceptions import AppException
from marketing_api.shared.logging import get_logger, setup_logging
from marketing_api.shared.middleware import RequestLoggingMiddleware
from marketing_api.shared.schemas import envelope

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    setup_logging(settings)

    logger.info("Application starting", extra={"env": settings.app_env})

    if settings.is_development:
        await app.state.db.init_models()
        logger.info("Database tables ensured")

    yield

    logger.info("Shutting down application")
    await app.state.db.close()
    logger.info("Application shutdown complete")


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}

        if exc.status_code >= 500:
            logger.error(
                "Request failed",
                exc_info=exc,
                extra={"code": exc.code, "path": request.url.path},
            )
            content = envelope(error=GENERIC_ERROR_MESSAGE)
        else:
            content = envelope(error=exc.message, details=exc.details)

        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append(
                {
                    "field": field,
                    "message": error["msg"],
                    "type": error["type"],
                }
            )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=envelope(message="Request validation failed", error=errors),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=envelope(error=GENERIC_ERROR_MESSAGE),
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use; defaults to the cached environment settings.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Marketing Dashboard API",
        description="User accounts and marketing campaigns behind JWT auth",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.state.settings = settings
    app.state.db = DatabaseManager(settings)
    app.state.token_service = TokenService(settings)
    app.state.password_hasher = PasswordHasher(settings)

    _register_exception_handlers(app)

    app.add_middleware(
        RequestLoggingMiddleware,
        timeout_seconds=settings.request_timeout_seconds,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(campaigns_router)

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"message": "pong"}

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "marketing_api.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
