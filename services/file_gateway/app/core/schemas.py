"""File gateway request/response schemas."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UploadedFile(BaseModel):
    """Payload returned after a successful upload."""

    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(..., alias="fileId", description="Storage key of the new object")


class FileLink(BaseModel):
    """Payload carrying a time-limited download link."""

    model_config = ConfigDict(populate_by_name=True)

    file_url: str = Field(..., alias="fileUrl", description="Pre-signed download URL")
    expires_at: datetime = Field(..., alias="expiresAt", description="When the URL stops working")


class DeleteOutcome(str, Enum):
    """Result of a delete attempt against the storage service."""

    DELETED = "deleted"
    FAILED = "failed"


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of FileService.delete_file."""

    key: str
    outcome: DeleteOutcome
    error: Optional[str] = None

    @property
    def deleted(self) -> bool:
        return self.outcome is DeleteOutcome.DELETED
