"""
FastAPI application entry point.
Main application setup and configuration.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from homelyhub.config import settings
from homelyhub.database import test_database_connection, close_db_connection
from homelyhub.routers import (
    auth_router,
    bookings_router,
    properties_router,
    reviews_router,
    upload_router,
)
from homelyhub.utils.exceptions import APIException
from homelyhub.services.error_handler import ErrorHandlerService
from homelyhub.middleware.validation import ValidationMiddleware

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    db_connected = await test_database_connection()
    if not db_connected:
        logger.error("Failed to connect to database on startup")

    yield

    logger.info("Shutting down application")
    await close_db_connection()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Vacation-rental marketplace API.

    ## Features

    * **Properties**: hosts list stays with location, nightly price, amenities and images
    * **Search**: filter with `field[op]=value` (gt, gte, lt, lte, in), free-text search, sorting, projection and paging
    * **Bookings**: nightly pricing snapshotted at booking time, guest and host views
    * **Reviews**: one review per booking, host responses and aggregate ratings
    * **Uploads**: image storage with inline fallback when storage is unavailable

    ## Authentication

    Use `/api/v1/auth/login` to obtain a JWT, then send it as `Authorization: Bearer <token>`.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Authentication", "description": "Registration, login and profile"},
        {"name": "Properties", "description": "Listing management and search"},
        {"name": "Bookings", "description": "Reservations for guests and hosts"},
        {"name": "Reviews", "description": "Guest reviews and host responses"},
        {"name": "Upload", "description": "Image upload and deletion"},
        {"name": "Health", "description": "Service and database health"},
    ],
    lifespan=lifespan,
)

app.add_middleware(
    ValidationMiddleware,
    max_request_size=settings.max_request_size,
    enable_request_logging=not settings.is_testing
)

# Added last so it wraps the request middleware and decorates its error responses too
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.include_router(auth_router, prefix=settings.api_v1_prefix)
app.include_router(properties_router, prefix=settings.api_v1_prefix)
app.include_router(bookings_router, prefix=settings.api_v1_prefix)
app.include_router(reviews_router, prefix=settings.api_v1_prefix)
app.include_router(upload_router, prefix=settings.api_v1_prefix)

app.mount(
    settings.media_url_prefix,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="media",
)


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies, query and path parameters are VALIDATION errors (400)."""
    return ErrorHandlerService.handle_validation_error(exc.errors(), request)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    return ErrorHandlerService.handle_database_error(exc, request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    return ErrorHandlerService.handle_unexpected_error(exc, request)


@app.get("/", tags=["Health"])
async def root():
    """Basic API information."""
    return {
        "success": True,
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "api_prefix": settings.api_v1_prefix
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe."""
    return {
        "success": True,
        "status": "healthy",
        "environment": settings.environment,
    }


@app.get("/health/db", tags=["Health"])
async def database_health_check():
    """Readiness probe: runs a trivial query against the database."""
    if not await test_database_connection():
        raise HTTPException(status_code=503, detail="Database connection failed")

    return {
        "success": True,
        "status": "healthy",
        "database": "connected",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "homelyhub.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
