"""ASGI entry point for the RentEvent service catalog.

Run with ``uvicorn rentevent.main:app``.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from rentevent.api.exception_handlers import register_exception_handlers
from rentevent.api.middleware import PrometheusMiddleware, RequestLoggingMiddleware
from rentevent.api.v1 import customers, health, metrics, providers, services
from rentevent.core.config import settings
from rentevent.core.logging_config import get_logger, setup_logging
from rentevent.db.session import engine, init_models


# Must run before the first logger is used
setup_logging(debug=settings.is_debug_mode, json_logs=settings.use_json_logs)
logger = get_logger(__name__)

SLOW_REQUEST_THRESHOLD_MS = 2000.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema on startup, release the connection pool on shutdown."""
    logger.info(
        "application_startup",
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        debug_mode=settings.is_debug_mode,
        image_store_backend=settings.IMAGE_STORE_BACKEND,
    )

    await init_models()
    logger.info("database_initialized", database_url=engine.url.render_as_string(hide_password=True))

    yield

    await engine.dispose()
    logger.info("application_shutdown")


def mount_local_storage(app: FastAPI) -> None:
    """Serve files written by the local image store under /storage."""
    directory = Path(settings.STORAGE_PATH)
    directory.mkdir(parents=True, exist_ok=True)
    app.mount("/storage", StaticFiles(directory=str(directory)), name="storage")
    logger.info("static_files_mounted", mount_path="/storage", directory=str(directory))


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.SERVICE_NAME,
        description="Catalog of rentable event services with CDN-hosted images",
        version=settings.VERSION,
        lifespan=lifespan,
    )

    register_exception_handlers(application)

    # Last added runs first: CORS, then request logging, then metrics
    application.add_middleware(PrometheusMiddleware)
    application.add_middleware(RequestLoggingMiddleware, slow_request_threshold_ms=SLOW_REQUEST_THRESHOLD_MS)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for module in (services, providers, customers, health, metrics):
        application.include_router(module.router)

    if settings.IMAGE_STORE_BACKEND == "local":
        mount_local_storage(application)

    return application


app = create_app()


@app.get("/")
async def root():
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
        "documentation": "/docs",
        "health_check": "/api/v1/health",
    }


@app.get("/info")
async def service_info():
    """Non-sensitive runtime configuration."""
    cloudinary = settings.IMAGE_STORE_BACKEND == "cloudinary"
    return {
        "service": {
            "name": settings.SERVICE_NAME,
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
        },
        "image_store": {
            "backend": settings.IMAGE_STORE_BACKEND,
            "folder": settings.CLOUDINARY_FOLDER if cloudinary else None,
        },
        "limits": {
            "max_upload_size_mb": settings.MAX_UPLOAD_SIZE_MB,
            "allowed_image_pattern": settings.ALLOWED_IMAGE_PATTERN,
        },
    }
