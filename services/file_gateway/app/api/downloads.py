"""Signed download route for the local filesystem backend."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import FileResponse

from services.file_gateway.app.api.deps import get_storage
from shared.utils.logging import get_logger
from shared.utils.storage import LocalStorageClient, StorageClient

router = APIRouter(prefix="/files", tags=["Files"])

logger = get_logger(__name__)


@router.get("/{key}")
async def download_file(
    key: str,
    storage: Annotated[StorageClient, Depends(get_storage)],
    expires: Annotated[int, Query(description="Unix time the link expires at")],
    signature: Annotated[str, Query(description="Link signature")],
) -> FileResponse:
    """Serve a file through a link minted by the local backend.

    S3-backed deployments hand out S3 URLs instead, so this route only
    answers when the local backend is active.
    """
    if not isinstance(storage, LocalStorageClient):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    if not storage.verify_signature(key, expires, signature):
        logger.warning("invalid_download_signature", key=key, expires=expires)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired download link",
        )

    file_path = await storage.get_object_path(key)
    if file_path is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    logger.info("file_downloaded", key=key)

    return FileResponse(path=file_path, media_type=await storage.get_content_type(key))
