"""File gateway service: upload, link and delete against object storage."""

import time

from services.file_gateway.app.core.keys import generate_file_key
from services.file_gateway.app.core.schemas import (
    DeleteOutcome,
    DeleteResult,
    FileLink,
    UploadedFile,
)
from shared.utils.logging import get_logger
from shared.utils.metrics import record_storage_operation
from shared.utils.storage import (
    DEFAULT_CONTENT_TYPE,
    InvalidKeyError,
    StorageClient,
    StorageError,
)

logger = get_logger(__name__)


class FileTooLargeError(Exception):
    """Upload exceeds the configured size cap."""

    def __init__(self, size_bytes: int, max_size_bytes: int):
        super().__init__(
            f"File size {size_bytes} bytes exceeds maximum of {max_size_bytes} bytes"
        )
        self.size_bytes = size_bytes
        self.max_size_bytes = max_size_bytes


class FileService:
    """Forwards gateway requests to the storage service.

    Built once at startup and shared by all requests; holds no per-request
    state.
    """

    def __init__(
        self,
        storage_client: StorageClient,
        link_expiry_seconds: int = 3600,
        max_upload_size_bytes: int | None = None,
        suppress_delete_errors: bool = False,
    ):
        """Initialize file service.

        Args:
            storage_client: Storage client (S3 or local)
            link_expiry_seconds: Validity window of generated download links
            max_upload_size_bytes: Optional upload size cap
            suppress_delete_errors: Report failed deletes as successful
        """
        self.storage_client = storage_client
        self.link_expiry_seconds = link_expiry_seconds
        self.max_upload_size_bytes = max_upload_size_bytes
        self.suppress_delete_errors = suppress_delete_errors

    async def upload_file(
        self,
        content: bytes,
        content_type: str | None = None,
        filename: str | None = None,
    ) -> UploadedFile:
        """Store file content under a freshly generated key.

        Args:
            content: Raw file bytes
            content_type: MIME type declared by the uploader
            filename: Original filename, used for logging only

        Returns:
            Payload with the new key

        Raises:
            FileTooLargeError: If a size cap is configured and exceeded
            StorageError: If the storage service rejects the write
        """
        size = len(content)
        if self.max_upload_size_bytes is not None and size > self.max_upload_size_bytes:
            raise FileTooLargeError(size, self.max_upload_size_bytes)

        key = generate_file_key()
        content_type = content_type or DEFAULT_CONTENT_TYPE

        started = time.perf_counter()
        try:
            await self.storage_client.upload_bytes(
                key=key,
                data=content,
                content_type=content_type,
            )
        except StorageError as e:
            record_storage_operation("put_object", "failure", time.perf_counter() - started)
            logger.error(
                "file_upload_failed",
                key=key,
                filename=filename,
                size=size,
                error=str(e),
            )
            raise
        record_storage_operation("put_object", "success", time.perf_counter() - started)

        logger.info(
            "file_uploaded",
            key=key,
            filename=filename,
            size=size,
            content_type=content_type,
        )
        return UploadedFile(file_id=key)

    async def create_download_link(self, key: str) -> FileLink:
        """Mint a time-limited download link for key.

        The key is used verbatim and its existence is not checked: a link to a
        missing object is generated all the same and fails when followed.

        Raises:
            InvalidKeyError: If the backend cannot represent key
            StorageError: If the storage service cannot sign the link
        """
        started = time.perf_counter()
        try:
            result = await self.storage_client.generate_presigned_download_url(
                key=key,
                expires_in=self.link_expiry_seconds,
            )
        except InvalidKeyError as e:
            logger.info("download_link_rejected", key=key, error=str(e))
            raise
        except StorageError as e:
            record_storage_operation(
                "generate_presigned_url", "failure", time.perf_counter() - started
            )
            logger.error("download_link_failed", key=key, error=str(e))
            raise
        record_storage_operation(
            "generate_presigned_url", "success", time.perf_counter() - started
        )

        logger.info(
            "download_link_created",
            key=key,
            expires_at=result["expires_at"].isoformat(),
        )
        return FileLink(file_url=result["presigned_url"], expires_at=result["expires_at"])

    async def delete_file(self, key: str) -> DeleteResult:
        """Delete the object stored under key.

        Storage failures are logged and reported through the result rather
        than raised. A key the backend cannot represent is the caller's
        mistake and raises InvalidKeyError.
        """
        started = time.perf_counter()
        try:
            await self.storage_client.delete_object(key)
        except InvalidKeyError as e:
            logger.info("file_delete_rejected", key=key, error=str(e))
            raise
        except StorageError as e:
            record_storage_operation("delete_object", "failure", time.perf_counter() - started)
            logger.error("file_delete_failed", key=key, error=str(e))
            return DeleteResult(key=key, outcome=DeleteOutcome.FAILED, error=str(e))
        record_storage_operation("delete_object", "success", time.perf_counter() - started)

        logger.info("file_deleted", key=key)
        return DeleteResult(key=key, outcome=DeleteOutcome.DELETED)
