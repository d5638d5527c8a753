"""File storage service for filestore.

Handles the storage root on disk. Files are stored flat in: {data_dir}/{filename}
"""
import logging
import os
import shutil
import stat
from pathlib import Path
from typing import BinaryIO, List, Union

from ..errors import BadRequest, InternalError, NotFound
from .schemas import (
    MSG_INVALID_FILENAME,
    MSG_IS_DIRECTORY,
    MSG_NOT_FOUND,
    MSG_READ_DIR_FAILED,
    MSG_SAVE_FAILED,
    MSG_STAT_FAILED,
)

logger = logging.getLogger(__name__)

STORAGE_DIR_MODE = 0o755


def ensure_storage_dir(path: Union[str, Path]) -> Path:
    """Create the storage root if it does not exist yet.

    Safe to call repeatedly. A failure to create the directory is logged
    and re-raised: the service cannot run without it.

    Raises:
        NotADirectoryError: If ``path`` exists but is not a directory.
        OSError: If the directory cannot be created.
    """
    root = Path(path)
    if root.exists():
        if not root.is_dir():
            raise NotADirectoryError(f"Storage path is not a directory: {root}")
        return root

    try:
        root.mkdir(mode=STORAGE_DIR_MODE)
    except FileExistsError:
        # Created concurrently by another worker.
        pass
    except OSError:
        logger.exception("Could not create storage directory %s", root)
        raise
    logger.info("Created storage directory %s", root)
    return root


def resolve_path(root: Union[str, Path], filename: str) -> Path:
    """Map ``filename`` to a path directly under ``root``.

    Any name containing ``..`` is refused outright; everything else is
    joined onto the canonical root and must still be a direct child of it
    once symlinks and separators are resolved.

    Raises:
        BadRequest: If the name is empty or would escape the storage root.
        InternalError: If the path cannot be resolved.
    """
    if not filename or ".." in filename or "\x00" in filename:
        raise BadRequest(MSG_INVALID_FILENAME)

    try:
        base = Path(root).resolve()
        candidate = (base / filename).resolve()
    except (OSError, RuntimeError):
        # Symlink loops: RuntimeError before Python 3.13, OSError after.
        logger.exception("Failed to resolve %r under %s", filename, root)
        raise InternalError(MSG_STAT_FAILED)
    if candidate.parent != base:
        raise BadRequest(MSG_INVALID_FILENAME)
    return candidate


class FileStorageService:
    """Reads and writes files in a single flat storage directory."""

    def __init__(self, root: Union[str, Path]) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def save(self, filename: str, source: BinaryIO) -> Path:
        """Copy ``source`` into the storage root as ``filename``.

        An existing file of the same name is overwritten.

        Raises:
            BadRequest: If ``filename`` is not a safe storage key.
            InternalError: If the file cannot be written.
        """
        path = resolve_path(self._root, filename)
        try:
            with path.open("wb") as dst:
                shutil.copyfileobj(source, dst)
                size = dst.tell()
        except OSError:
            logger.exception("Failed to write %s", path)
            raise InternalError(MSG_SAVE_FAILED)

        logger.info("Saved file: %s (%d bytes)", path, size)
        return path

    def locate(self, filename: str) -> Path:
        """Return the on-disk path of a stored regular file.

        Directories are reported exactly like missing files.

        Raises:
            BadRequest: If ``filename`` is not a safe storage key.
            NotFound: If nothing is stored under that name.
            InternalError: If the file cannot be inspected.
        """
        path = resolve_path(self._root, filename)
        try:
            info = path.stat()
        except FileNotFoundError:
            raise NotFound(MSG_NOT_FOUND)
        except OSError:
            logger.exception("Failed to stat %s", path)
            raise InternalError(MSG_STAT_FAILED)

        if stat.S_ISDIR(info.st_mode):
            raise NotFound(MSG_IS_DIRECTORY)
        return path

    def list_names(self) -> List[str]:
        """Names of all non-directory entries in the storage root, sorted.

        Symlinks are listed as entries of their own, whatever they point to.
        """
        try:
            with os.scandir(self._root) as entries:
                names = [entry.name for entry in entries if not entry.is_dir(follow_symlinks=False)]
        except OSError:
            logger.exception("Failed to read storage directory %s", self._root)
            raise InternalError(MSG_READ_DIR_FAILED)
        return sorted(names)
