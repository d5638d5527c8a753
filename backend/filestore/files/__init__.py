"""Upload, list and download endpoints.

Files live flat in the storage root (``data/`` by default) under the name
they were uploaded with. Uploading a name that already exists replaces the
old content; nothing is ever deleted by the service.
"""

from .router import router
from .service import FileStorageService, ensure_storage_dir, resolve_path

__all__ = [
    "FileStorageService",
    "ensure_storage_dir",
    "resolve_path",
    "router",
]
