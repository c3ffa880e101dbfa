"""File upload, link and delete routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from starlette.datastructures import UploadFile

from services.file_gateway.app.api.deps import get_file_service
from services.file_gateway.app.api.errors import GatewayError
from services.file_gateway.app.core.schemas import FileLink, UploadedFile
from services.file_gateway.app.core.service import FileService, FileTooLargeError
from shared.schemas.api_responses import APIResponse, ErrorResponse
from shared.utils.logging import get_logger
from shared.utils.storage import StorageError

logger = get_logger(__name__)

router = APIRouter(tags=["Files"])

FILE_FIELD = "file"

Files = Annotated[FileService, Depends(get_file_service)]

_UPLOAD_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "required": [FILE_FIELD],
                    "properties": {
                        FILE_FIELD: {"type": "string", "format": "binary"},
                    },
                },
            },
        },
    },
}

_ERRORS = {
    400: {"model": ErrorResponse},
    502: {"model": ErrorResponse, "description": "Storage service failure"},
}


async def _read_single_file(request: Request) -> tuple[bytes, str | None, str | None]:
    """Read the one file part from a multipart form.

    Returns the part's bytes, content type and filename. The parsed form is
    closed before returning, whichever way the request is rejected.
    """
    async with request.form() as form:
        parts = form.getlist(FILE_FIELD)
        files = [part for part in parts if isinstance(part, UploadFile)]

        if not files:
            raise GatewayError("MISSING_FILE", f"A file is required in form field '{FILE_FIELD}'")
        if len(parts) > 1:
            raise GatewayError("TOO_MANY_FILES", "Only one file may be uploaded per request")

        upload = files[0]
        return await upload.read(), upload.content_type, upload.filename


@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    response_model=APIResponse[UploadedFile],
    response_model_exclude_none=True,
    responses={**_ERRORS, 413: {"model": ErrorResponse}},
    openapi_extra=_UPLOAD_BODY,
)
async def upload_file(request: Request, files: Files) -> APIResponse[UploadedFile]:
    """Upload a single file.

    The file is stored under a new random 64-character key, which is
    returned as ``data.fileId``. Keep it: nothing else records it.
    """
    content, content_type, filename = await _read_single_file(request)

    try:
        uploaded = await files.upload_file(
            content=content,
            content_type=content_type,
            filename=filename,
        )
    except FileTooLargeError as e:
        raise GatewayError(
            "FILE_TOO_LARGE",
            str(e),
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )

    return APIResponse(data=uploaded)


@router.get(
    "/{file_id}",
    response_model=APIResponse[FileLink],
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def get_file_link(file_id: str, files: Files) -> APIResponse[FileLink]:
    """Get a time-limited download link for a stored file.

    The key is not checked for existence; a link to a missing object is
    still returned and fails when followed.
    """
    link = await files.create_download_link(file_id)
    return APIResponse(data=link)


@router.delete(
    "/{file_id}",
    response_model=APIResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def delete_file(file_id: str, files: Files) -> APIResponse:
    """Delete a stored file.

    A failed storage delete is reported as 502 unless the gateway is
    configured to suppress delete errors, in which case it still reports
    success. A key the backend cannot represent is always a 400.
    """
    result = await files.delete_file(file_id)

    if not result.deleted:
        if files.suppress_delete_errors:
            logger.warning("file_delete_failure_suppressed", key=file_id)
        else:
            raise StorageError(result.error or "Delete failed", operation="delete_object", key=file_id)

    return APIResponse()
