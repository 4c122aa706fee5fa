"""
Main application module for VentureConnect.

This module initializes the FastAPI application and includes all routes.
It also sets up CORS, request logging, static avatar files and error handlers.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
import os
import time
from datetime import datetime

from .routes import auth, oidc, users, projects, resources, skills, posts, connections, messages, dashboard
from .utils.config import settings
from .utils.logger import configure_loggers
from .utils.logger import app_logger as logger
from .db.session import check_db_connection, get_storage, init_db


# Request logging middleware
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging request information."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        logger.info(
            f"Incoming request: {request.method} {request.url.path} "
            f"Client: {request.client.host if request.client else 'unknown'}"
        )

        try:
            response = await call_next(request)
            process_time = time.time() - start_time

            logger.info(
                f"Request completed: {request.method} {request.url.path} "
                f"Status: {response.status_code} "
                f"Duration: {process_time:.3f}s"
            )

            return response

        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {request.method} {request.url.path} "
                f"Error: {str(e)} "
                f"Duration: {process_time:.3f}s"
            )
            raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize application services on startup and release them on shutdown."""
    for dir_path in [settings.UPLOAD_DIR, settings.LOGS_DIR]:
        os.makedirs(dir_path, exist_ok=True)

    configure_loggers(settings.LOGS_DIR)
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION} ({settings.ENVIRONMENT})")

    if settings.STORAGE_BACKEND == "database":
        try:
            await init_db()
        except Exception as e:
            logger.error(f"Failed to initialize database: {str(e)}")
            raise

    yield

    logger.info(f"Shutting down {settings.PROJECT_NAME}")
    await get_storage().close()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    VentureConnect API

    Key Features:
    - Profiles, projects, skills and resource grids
    - Connection requests and direct messaging
    - Social feed
    - Password and OpenID Connect login
    """,
    version=settings.VERSION,
    lifespan=lifespan,
)

# Add middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router)
app.include_router(oidc.router)
for module in (users, projects, resources, skills, posts, connections, messages, dashboard):
    app.include_router(module.router, prefix="/api")

# Uploaded avatars
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


def error_body(code: int, message, error_type: str) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "type": error_type
        }
    }


# Custom exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions with detailed error responses."""
    if exc.status_code >= 500:
        logger.error(f"HTTP error: {exc.status_code} - {exc.detail}")
    else:
        logger.info(f"HTTP error: {exc.status_code} - {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.detail, "http_error"),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request validation failures as 400."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    logger.info(f"Validation error on {request.url.path}: {errors}")

    content = error_body(status.HTTP_400_BAD_REQUEST, "Invalid request data", "validation_error")
    content["error"]["errors"] = errors
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with sanitized error messages."""
    logger.error(f"Unexpected error: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred", "internal_error")
    )


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "documentation": "/docs",
        "health": "/health"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint with storage status."""
    if settings.STORAGE_BACKEND == "database":
        storage_ok = await check_db_connection()
    else:
        storage_ok = True

    return {
        "status": "healthy" if storage_ok else "degraded",
        "version": settings.VERSION,
        "components": {
            "storage": {
                "backend": settings.STORAGE_BACKEND,
                "status": "connected" if storage_ok else "disconnected"
            },
            "oidc": {
                "status": "enabled" if settings.oidc_enabled else "disabled"
            }
        },
        "timestamp": datetime.now().isoformat()
    }


# For local development
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("ventureconnect.main:app", host="0.0.0.0", port=8000, reload=True)
