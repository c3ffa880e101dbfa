"""Storage client wrappers for S3 and local filesystem."""

import hashlib
import hmac
import json
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from urllib.parse import quote, urlencode

import aiofiles
import aiofiles.os
from aiobotocore.config import AioConfig
from aiobotocore.session import get_session
from botocore.exceptions import BotoCoreError, ClientError

from shared.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class StorageError(Exception):
    """Storage backend operation failed."""

    def __init__(self, message: str, operation: str, key: str | None = None):
        super().__init__(message)
        self.operation = operation
        self.key = key


class InvalidKeyError(StorageError):
    """Key cannot be represented by the storage backend."""

    pass


class StorageClient(ABC):
    """Abstract base class for storage clients."""

    storage_type: str = ""

    @abstractmethod
    async def upload_bytes(
        self,
        key: str,
        data: bytes,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> None:
        """Store bytes under key."""
        pass

    @abstractmethod
    async def delete_object(self, key: str) -> None:
        """Delete the object stored under key."""
        pass

    @abstractmethod
    async def generate_presigned_download_url(
        self,
        key: str,
        expires_in: int = 3600,
    ) -> dict[str, Any]:
        """Generate a time-limited URL for downloading."""
        pass


class LocalStorageClient(StorageClient):
    """Local filesystem storage client with the same interface as S3Client.

    Download links are signed with HMAC-SHA256 over the key and expiry, so the
    gateway can verify them without keeping any token state.
    """

    storage_type = "local"
    META_DIR = ".meta"

    def __init__(
        self,
        base_path: str,
        bucket: str = "file-gateway",
        serve_url: str = "http://localhost:5000/files",
        signing_secret: str = "change-me-in-production",
    ):
        """Initialize local storage client.

        Args:
            base_path: Base directory for file storage
            bucket: Virtual bucket name (used as subdirectory)
            serve_url: Base URL the signed download route is reachable at
            signing_secret: Secret used to sign download links
        """
        self.base_path = Path(base_path)
        self.bucket = bucket
        self.serve_url = serve_url.rstrip("/")
        self._signing_secret = signing_secret.encode()
        self._storage_dir = self.base_path / bucket
        self._meta_dir = self._storage_dir / self.META_DIR
        self._meta_dir.mkdir(parents=True, exist_ok=True)
        logger.info(
            "local_storage_initialized",
            base_path=str(self.base_path),
            bucket=bucket,
            storage_dir=str(self._storage_dir),
        )

    def _get_full_path(self, key: str, operation: str) -> Path:
        """Get full filesystem path for a key.

        Keys map to a single file directly under the bucket directory.
        """
        if not key or "/" in key or "\\" in key or "\x00" in key or key.startswith("."):
            raise InvalidKeyError(
                f"Key cannot be stored on the local backend: {key!r}",
                operation=operation,
                key=key,
            )
        return self._storage_dir / key

    def _get_meta_path(self, key: str) -> Path:
        return self._meta_dir / f"{key}.json"

    def sign(self, key: str, expires: int) -> str:
        """Sign a key/expiry pair."""
        message = f"{key}:{expires}".encode()
        return hmac.new(self._signing_secret, message, hashlib.sha256).hexdigest()

    def verify_signature(self, key: str, expires: int, signature: str) -> bool:
        """Check a download link signature and its expiry."""
        if expires < int(time.time()):
            return False
        return hmac.compare_digest(self.sign(key, expires), signature)

    async def upload_bytes(
        self,
        key: str,
        data: bytes,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> None:
        """Write bytes and the content type sidecar to local storage."""
        full_path = self._get_full_path(key, "put_object")
        try:
            async with aiofiles.open(full_path, "wb") as f:
                await f.write(data)
            async with aiofiles.open(self._get_meta_path(key), "w") as f:
                await f.write(json.dumps({"content_type": content_type}))
        except OSError as e:
            raise StorageError(str(e), operation="put_object", key=key) from e

        logger.info("local_storage_upload_complete", bucket=self.bucket, key=key)

    async def delete_object(self, key: str) -> None:
        """Delete a file from local storage. Missing files are not an error."""
        full_path = self._get_full_path(key, "delete_object")
        try:
            for path in (full_path, self._get_meta_path(key)):
                if await aiofiles.os.path.exists(path):
                    await aiofiles.os.remove(path)
        except OSError as e:
            raise StorageError(str(e), operation="delete_object", key=key) from e

        logger.info("local_storage_delete_complete", bucket=self.bucket, key=key)

    async def generate_presigned_download_url(
        self,
        key: str,
        expires_in: int = 3600,
    ) -> dict[str, Any]:
        """Generate a signed download URL served by the gateway itself."""
        full_path = self._get_full_path(key, "generate_presigned_url")
        issued_at = datetime.now(timezone.utc)
        expires = int(issued_at.timestamp()) + expires_in
        query = urlencode({"expires": expires, "signature": self.sign(key, expires)})

        return {
            "presigned_url": f"{self.serve_url}/{quote(key, safe='')}?{query}",
            "expires_at": issued_at + timedelta(seconds=expires_in),
            "local_path": str(full_path),
        }

    async def get_object_path(self, key: str) -> Path | None:
        """Return the file path for key, or None if nothing is stored."""
        full_path = self._get_full_path(key, "get_object")
        if not await aiofiles.os.path.exists(full_path):
            return None
        return full_path

    async def get_content_type(self, key: str) -> str:
        """Return the content type recorded at upload time."""
        meta_path = self._get_meta_path(key)
        try:
            async with aiofiles.open(meta_path, "r") as f:
                meta = json.loads(await f.read())
        except (OSError, ValueError):
            return DEFAULT_CONTENT_TYPE
        return meta.get("content_type") or DEFAULT_CONTENT_TYPE


class S3Client(StorageClient):
    """Async S3 client wrapper."""

    storage_type = "s3"

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
    ):
        """Initialize S3 client.

        Args:
            bucket: S3 bucket name
            region: AWS region
            endpoint_url: Custom endpoint (for LocalStack/MinIO)
            access_key: AWS access key (or fake for LocalStack)
            secret_key: AWS secret key (or fake for LocalStack)
        """
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        # Use fake credentials for LocalStack if endpoint_url is set but no credentials
        self.access_key = access_key or ("test" if endpoint_url else None)
        self.secret_key = secret_key or ("test" if endpoint_url else None)
        self._session = get_session()

    def _create_client(self):
        # SigV4 so presigned URLs carry X-Amz-Expires
        return self._session.create_client(
            "s3",
            region_name=self.region,
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            config=AioConfig(signature_version="s3v4"),
        )

    async def upload_bytes(
        self,
        key: str,
        data: bytes,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> None:
        """Upload bytes to S3.

        Args:
            key: S3 object key
            data: Bytes to upload
            content_type: MIME type of the content

        Raises:
            StorageError: If the put fails
        """
        try:
            async with self._create_client() as client:
                await client.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=data,
                    ContentType=content_type,
                )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(str(e), operation="put_object", key=key) from e

        logger.info("s3_upload_complete", bucket=self.bucket, key=key)

    async def delete_object(self, key: str) -> None:
        """Delete an object from S3.

        Args:
            key: S3 object key

        Raises:
            StorageError: If the delete fails
        """
        try:
            async with self._create_client() as client:
                await client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(str(e), operation="delete_object", key=key) from e

        logger.info("s3_delete_complete", bucket=self.bucket, key=key)

    async def generate_presigned_download_url(
        self,
        key: str,
        expires_in: int = 3600,
    ) -> dict[str, Any]:
        """Generate a pre-signed URL for downloading.

        Args:
            key: S3 object key
            expires_in: URL expiration time in seconds

        Returns:
            Dict with presigned_url and expires_at
        """
        try:
            async with self._create_client() as client:
                url = await client.generate_presigned_url(
                    "get_object",
                    Params={
                        "Bucket": self.bucket,
                        "Key": key,
                    },
                    ExpiresIn=expires_in,
                )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(str(e), operation="generate_presigned_url", key=key) from e

        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)

        return {
            "presigned_url": url,
            "expires_at": expires_at,
        }


def get_storage_client(
    storage_type: str = "s3",
    bucket: str = "file-gateway",
    region: str = "us-east-1",
    endpoint_url: str | None = None,
    access_key: str | None = None,
    secret_key: str | None = None,
    local_path: str | None = None,
    serve_url: str = "http://localhost:5000/files",
    signing_secret: str = "change-me-in-production",
) -> StorageClient:
    """Factory function to create the appropriate storage client.

    Args:
        storage_type: Type of storage ('s3' or 'local')
        bucket: S3 bucket name or virtual bucket for local storage
        region: AWS region (S3 only)
        endpoint_url: Custom endpoint URL (S3 only, for LocalStack/MinIO)
        access_key: AWS access key (S3 only)
        secret_key: AWS secret key (S3 only)
        local_path: Base path for local storage (required if storage_type='local')
        serve_url: Base URL for signed download links (local storage only)
        signing_secret: Secret for signing download links (local storage only)

    Returns:
        StorageClient instance (either S3Client or LocalStorageClient)

    Raises:
        ValueError: If storage_type is invalid or required params are missing
    """
    storage_type = storage_type.lower()

    if storage_type == "local":
        if not local_path:
            raise ValueError("local_path is required for local storage")
        logger.info(
            "creating_storage_client",
            storage_type="local",
            local_path=local_path,
            bucket=bucket,
        )
        return LocalStorageClient(
            base_path=local_path,
            bucket=bucket or "file-gateway",
            serve_url=serve_url,
            signing_secret=signing_secret,
        )
    elif storage_type == "s3":
        logger.info(
            "creating_storage_client",
            storage_type="s3",
            bucket=bucket,
            endpoint_url=endpoint_url,
        )
        return S3Client(
            bucket=bucket,
            region=region,
            endpoint_url=endpoint_url,
            access_key=access_key,
            secret_key=secret_key,
        )
    else:
        raise ValueError(f"Invalid storage_type: {storage_type}. Use 's3' or 'local'")
