"""Core file gateway logic."""

from services.file_gateway.app.core.keys import generate_file_key
from services.file_gateway.app.core.schemas import (
    DeleteOutcome,
    DeleteResult,
    FileLink,
    UploadedFile,
)
from services.file_gateway.app.core.service import FileService

__all__ = [
    "generate_file_key",
    "DeleteOutcome",
    "DeleteResult",
    "FileLink",
    "UploadedFile",
    "FileService",
]
