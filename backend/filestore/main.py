"""filestore application.

This is the main entry point for the filestore service: a small HTTP file
store that accepts multipart uploads, lists what it holds and serves files
back by name.

Routes:
    - POST /upload: store the multipart field ``file``
    - GET /files: JSON array of stored filenames
    - GET /files/{name}: download a stored file
    - everything else: static assets from the public directory

Run with ``filestore`` (console script), ``python -m filestore`` or
``uvicorn --factory filestore.main:create_app``.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from filestore.config import AppConfig, get_config
from filestore.errors import register_error_handlers
from filestore.files.router import router as files_router
from filestore.files.service import FileStorageService, ensure_storage_dir
from filestore.static import mount_public

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# The multipart parser logs every part it sees at DEBUG.
for _noisy in ("multipart", "python_multipart"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    config: AppConfig = app.state.config

    # Apply configured log level to root logger so that
    # `logging.level: "debug"` in filestore.settings.yaml activates DEBUG output.
    configured_level = getattr(logging, config.logging.level.upper(), None)
    if configured_level is not None:
        logging.getLogger().setLevel(configured_level)
        logger.info("Root logger level set to %s", config.logging.level.upper())

    # No storage root, no service: let the error abort startup.
    ensure_storage_dir(config.storage.data_dir)
    logger.info("Storage root ready at %s", config.storage.data_dir)

    yield  # Application runs here

    logger.info("Application shutdown complete")


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Settings to use; defaults to the process-wide config
            loaded from filestore.settings.yaml.
    """
    if config is None:
        config = get_config()

    app = FastAPI(
        title="filestore API",
        description="Upload, list and download files kept in a local directory",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.storage = FileStorageService(config.storage.data_dir)

    register_error_handlers(app)
    app.include_router(files_router)

    # Catch-all mount goes last.
    mount_public(app, config.storage.public_dir)

    return app


def run() -> None:
    """Start the server and block until it exits.

    A failure to listen is fatal: it is logged and the process exits with
    status 1.
    """
    config = get_config()
    app = create_app(config)

    logger.info("Server starting on port %d...", config.server.port)
    try:
        uvicorn.run(
            app,
            host=config.server.host,
            port=config.server.port,
            log_level=config.logging.level,
        )
    except OSError as exc:
        logger.critical("Failed to start server: %s", exc)
        raise SystemExit(1)
