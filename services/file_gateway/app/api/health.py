"""Health check route."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from services.file_gateway.app.api.deps import get_storage
from services.file_gateway.app.config import get_settings
from shared.utils.storage import StorageClient

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy"]
    service: str
    storage: str
    version: str = "0.1.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    storage: Annotated[StorageClient, Depends(get_storage)],
) -> HealthResponse:
    """Basic health check - returns if the service is running.

    Storage is not contacted.
    """
    return HealthResponse(
        status="healthy",
        service=get_settings().service_name,
        storage=storage.storage_type,
    )
