"""Pydantic schemas and fixed messages for the file endpoints.

The API itself is deliberately thin: uploads answer with plain text,
listings with a bare JSON array of names. The models here exist so the
OpenAPI document describes those shapes and the error envelope.
"""
from typing import List

from pydantic import BaseModel, Field, RootModel


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str = Field(..., description="Human-readable error message")


class FileListing(RootModel[List[str]]):
    """Names of the files in the storage root."""
    root: List[str] = Field(default_factory=list)


# Name of the multipart form field carrying the upload.
UPLOAD_FIELD = "file"

UPLOAD_SUCCESS_PREFIX = "File uploaded successfully: "

# Client-facing error messages
MSG_METHOD_NOT_ALLOWED = "Only POST method is allowed"
MSG_BAD_FORM = "Error parsing upload form"
MSG_MISSING_FILE = "Error retrieving the file"
MSG_SAVE_FAILED = "Failed to save file"
MSG_INVALID_FILENAME = "Invalid filename"
MSG_NOT_FOUND = "File not found"
MSG_IS_DIRECTORY = "Requested resource is a directory, not a file"
MSG_STAT_FAILED = "Error accessing file"
MSG_READ_DIR_FAILED = "Failed to read directory"
MSG_ENCODE_FAILED = "Error generating JSON response"
