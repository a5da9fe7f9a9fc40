"""
Receipegram Backend Service - Main API Server
Social recipe sharing: feed, recipes, likes, comments and follows
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
import logging
import structlog
import time
from typing import AsyncGenerator

from core.config import settings
from core.database import init_db, close_db
from core.exceptions import AppError, StorageError
from api.routes import api_router
from middleware.security import SecurityMiddleware
from middleware.logging import LoggingMiddleware, get_request_id
from services.media_storage import ensure_upload_dir

logger = structlog.get_logger()


def configure_logging() -> None:
    """Configure structured logging"""
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} Backend Service", environment=settings.ENVIRONMENT)

    if settings.uses_default_secret:
        logger.warning("JWT_SECRET_KEY is the built-in development secret; set it for any real deployment")

    try:
        await init_db()
        logger.info("Database connection established")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")

    upload_path = ensure_upload_dir()
    logger.info("Upload directory ready", path=str(upload_path))

    logger.info("Backend service startup complete")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME} Backend Service")
    await close_db()
    logger.info("Backend service shutdown complete")


async def app_error_handler(request: Request, exc: AppError):
    """Render application errors as {"message": ...}"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message},
        headers=exc.headers
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request validation failures are client errors (400)"""
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "errors": errors}
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Storage failures are logged in full and reported generically"""
    logger.error(
        "Database error",
        exception=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        request_id=get_request_id()
    )
    error = StorageError()
    return JSONResponse(
        status_code=error.status_code,
        content={"message": error.message}
    )


async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(
        "Unhandled exception",
        exception=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        request_id=get_request_id()
    )
    return JSONResponse(
        status_code=500,
        content={"message": "Something went wrong!"}
    )


def create_app() -> FastAPI:
    """Build the FastAPI application from the current settings"""
    configure_logging()

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Recipe sharing with a visibility-aware social feed",
        version=settings.VERSION,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan
    )

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Process-Time", "X-Request-ID"]
    )

    # Custom Middleware
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(LoggingMiddleware)

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add response time header"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(api_router, prefix="/api")

    # Stored media, served by file name
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

    return app


app = create_app()


if __name__ == "__main__":
    from startup import start_server

    start_server()
