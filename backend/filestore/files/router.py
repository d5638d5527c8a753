"""FastAPI router for the upload, list and download endpoints."""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from ..errors import BadRequest, InternalError, MethodNotAllowed
from .schemas import (
    MSG_BAD_FORM,
    MSG_ENCODE_FAILED,
    MSG_METHOD_NOT_ALLOWED,
    MSG_MISSING_FILE,
    UPLOAD_FIELD,
    UPLOAD_SUCCESS_PREFIX,
    ErrorResponse,
    FileListing,
)
from .service import FileStorageService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_storage(request: Request) -> FileStorageService:
    """Storage service created for this application in ``create_app``."""
    return request.app.state.storage


def _is_multipart(request: Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower() == "multipart/form-data"


@router.post(
    "/upload",
    response_class=PlainTextResponse,
    responses={k: _ERROR_RESPONSES[k] for k in (400, 500)},
)
async def upload_file(
    request: Request,
    storage: FileStorageService = Depends(get_storage),
) -> PlainTextResponse:
    """Store the multipart field ``file`` under its original filename.

    An existing file with the same name is replaced.

    Raises:
        BadRequest 400: Body is not a valid multipart form, the ``file``
            field is missing, or its filename is unsafe
        InternalError 500: The file could not be written
    """
    if not _is_multipart(request):
        raise BadRequest(MSG_BAD_FORM)

    max_memory_bytes = request.app.state.config.storage.max_memory_bytes
    try:
        form = await request.form(max_part_size=max_memory_bytes)
    except (MultiPartException, StarletteHTTPException) as e:
        logger.warning(f"Upload form rejected: {e}")
        raise BadRequest(MSG_BAD_FORM)

    try:
        upload = form.get(UPLOAD_FIELD)
        if not isinstance(upload, UploadFile) or not upload.filename:
            raise BadRequest(MSG_MISSING_FILE)

        filename = upload.filename
        await run_in_threadpool(storage.save, filename, upload.file)
    finally:
        await form.close()

    logger.info(f"File uploaded: {filename}")
    return PlainTextResponse(UPLOAD_SUCCESS_PREFIX + filename)


async def upload_wrong_method(request: Request) -> None:
    raise MethodNotAllowed(MSG_METHOD_NOT_ALLOWED)


# A plain route without a method filter: POST matches upload_file first,
# every other method, including ones FastAPI has no decorator for, lands here.
router.add_route("/upload", upload_wrong_method, include_in_schema=False)


@router.get(
    "/files",
    response_model=None,
    responses={200: {"model": FileListing}, 500: _ERROR_RESPONSES[500]},
)
def list_files(storage: FileStorageService = Depends(get_storage)) -> JSONResponse:
    """List the names of all stored files as a JSON array."""
    names = storage.list_names()
    try:
        return JSONResponse(content=names)
    except (TypeError, ValueError):
        logger.exception("Could not encode file listing")
        raise InternalError(MSG_ENCODE_FAILED)


@router.api_route(
    "/files/{filename:path}",
    methods=["GET", "HEAD"],
    response_class=FileResponse,
    responses={
        200: {
            "description": "The file content.",
            "content": {"application/octet-stream": {"schema": {"type": "string", "format": "binary"}}},
        },
        **{k: _ERROR_RESPONSES[k] for k in (400, 404, 500)},
    },
)
def download_file(
    filename: str,
    storage: FileStorageService = Depends(get_storage),
) -> FileResponse:
    """Download a stored file by name.

    Args:
        filename: Everything after ``/files/`` in the request path

    Raises:
        BadRequest 400: Empty or unsafe filename
        NotFound 404: No such file, or the name refers to a directory
        InternalError 500: The file could not be inspected
    """
    path = storage.locate(filename)
    return FileResponse(path)
