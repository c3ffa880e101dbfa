"""API dependencies."""

from fastapi import Request

from services.file_gateway.app.core.service import FileService
from shared.utils.storage import StorageClient


def get_storage(request: Request) -> StorageClient:
    """Get the storage client built at startup."""
    return request.app.state.storage


def get_file_service(request: Request) -> FileService:
    """Get the file service built at startup."""
    return request.app.state.file_service
