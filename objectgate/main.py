"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order
- Each app instance owns its own store client and post register

For local development:
    uvicorn objectgate.main:app --reload

For production:
    gunicorn objectgate.main:app -w 4 -k uvicorn.workers.UvicornWorker

Note that each worker process keeps its own in-memory post register.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import files, health, posts, presigned
from .config.settings import Settings, get_settings
from .core.objects.access import ObjectAccessLayer
from .core.objects.provisioner import BucketProvisioner
from .core.posts.register import PostRegister
from .infrastructure.storage.client import StorageConfig, create_storage_client

logger = logging.getLogger(__name__)

ENDPOINTS = [
    ("POST", "/upload", "Upload a file"),
    ("GET", "/file/{filename}", "Download a file"),
    ("GET", "/files", "List all files"),
    ("DELETE", "/file/{filename}", "Delete a file"),
    ("GET", "/upload-url/{filename}", "Get presigned upload URL"),
    ("GET", "/download-url/{fileKey}", "Get presigned download URL"),
    ("POST", "/posts", "Create a post for an uploaded file"),
    ("GET", "/posts", "List posts"),
    ("GET", "/health", "Health check"),
]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )


def build_lifespan(settings: Settings):
    """
    Build the lifespan manager for one application instance.

    On startup:
    - Create the object store client (real or in-memory)
    - Make sure the bucket exists; any failure aborts startup
    - Create the access layer and an empty post register on app.state
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "objectgate starting",
            extra={
                "version": settings.api_version,
                "bucket": settings.storage_bucket,
                "mock_mode": settings.storage_mock_mode,
            }
        )

        missing_fields = settings.validate_required_fields()
        if missing_fields:
            logger.error(
                "Missing required configuration",
                extra={"missing_fields": missing_fields}
            )

        client = create_storage_client(
            config=StorageConfig(
                endpoint_url=settings.storage_endpoint_url,
                access_key_id=settings.storage_access_key,
                secret_access_key=settings.storage_secret_key,
                region=settings.storage_region,
            ),
            mock_mode=settings.storage_mock_mode,
        )

        try:
            await BucketProvisioner(client, region=settings.storage_region).ensure(
                settings.storage_bucket
            )
        except Exception:
            logger.exception(
                "Bucket provisioning failed, refusing to start",
                extra={"bucket": settings.storage_bucket},
            )
            raise

        app.state.storage_client = client
        app.state.access_layer = ObjectAccessLayer(
            client,
            bucket=settings.storage_bucket,
            url_expiry_seconds=settings.presigned_url_expiry_seconds,
        )
        app.state.post_register = PostRegister()

        logger.info("Available endpoints:")
        for method, path, purpose in ENDPOINTS:
            logger.info("  %s %s - %s", method, path, purpose)

        yield

        logger.info(
            "objectgate shutting down",
            extra={"posts_recorded": len(app.state.post_register)}
        )

    return lifespan


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application. Tests pass their own
    Settings; production reads them from the environment.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        HTTP gateway over an S3-compatible object store.

        ## Proxied transfer

        - `POST /upload` stores a file under a timestamped key
        - `GET /file/{key}` streams it back with its original filename
        - `GET /files` lists the bucket, `DELETE /file/{key}` removes an object

        ## Direct transfer

        1. `GET /upload-url/{filename}` returns a pre-signed PUT URL
        2. Upload straight to the object store
        3. `POST /posts` records title and description for the key
        4. `GET /download-url/{fileKey}` returns a pre-signed GET URL
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=build_lifespan(settings),
    )
    app.state.settings = settings

    # CORS middleware
    # Configure allowed origins via CORS_ORIGINS environment variable
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        files.router,
        tags=["Files"],
    )

    app.include_router(
        presigned.router,
        tags=["Presigned URLs"],
    )

    app.include_router(
        posts.router,
        prefix="/posts",
        tags=["Posts"],
    )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Prevents stack traces from leaking to clients. The full error is
        logged server-side; the client gets a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "objectgate.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
