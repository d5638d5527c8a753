"""Static asset serving for every path the API does not claim."""
import logging
from pathlib import Path
from typing import Union

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

logger = logging.getLogger(__name__)


def mount_public(app: FastAPI, directory: Union[str, Path]) -> bool:
    """Serve ``directory`` at ``/``.

    Must be called after all API routers are included: the mount matches
    every path, so anything registered later is unreachable. ``index.html``
    is served for directory requests.

    Returns:
        False if the directory is missing and nothing was mounted; unmatched
        paths then fall through to the application's 404.
    """
    public_dir = Path(directory)
    if not public_dir.is_dir():
        logger.warning("Public directory %s not found; static assets disabled", public_dir)
        return False

    app.mount("/", StaticFiles(directory=public_dir, html=True), name="public")
    logger.info("Serving static assets from %s", public_dir)
    return True
