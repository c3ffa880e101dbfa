"""Test fixtures for the file gateway service."""

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from services.file_gateway.app.api import deps
from services.file_gateway.app.core.service import FileService
from services.file_gateway.app.main import app
from shared.utils.storage import LocalStorageClient, StorageClient, StorageError


@pytest.fixture
def storage(tmp_path) -> LocalStorageClient:
    """Local storage backend rooted in a temporary directory."""
    return LocalStorageClient(
        base_path=str(tmp_path),
        bucket="test-bucket",
        serve_url="http://test/files",
        signing_secret="test-secret",
    )


@pytest.fixture
def file_service(storage) -> FileService:
    """File service over the local backend."""
    return FileService(storage_client=storage, link_expiry_seconds=3600)


@pytest.fixture
def failing_storage() -> AsyncMock:
    """Storage mock whose every call fails."""
    mock = AsyncMock(spec=StorageClient)
    mock.storage_type = "s3"
    mock.upload_bytes.side_effect = StorageError(
        "AccessDenied", operation="put_object", key="k"
    )
    mock.delete_object.side_effect = StorageError(
        "AccessDenied", operation="delete_object", key="k"
    )
    mock.generate_presigned_download_url.side_effect = StorageError(
        "Unable to locate credentials", operation="generate_presigned_url", key="k"
    )
    return mock


@pytest_asyncio.fixture
async def client(storage, file_service) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client against the gateway app."""
    app.dependency_overrides[deps.get_storage] = lambda: storage
    app.dependency_overrides[deps.get_file_service] = lambda: file_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def use_file_service(client):
    """Point the running test app at another FileService."""

    def _use(service: FileService) -> None:
        app.dependency_overrides[deps.get_file_service] = lambda: service

    return _use
