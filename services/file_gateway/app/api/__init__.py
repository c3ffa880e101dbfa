"""API routes for the file gateway."""

from services.file_gateway.app.api.downloads import router as downloads_router
from services.file_gateway.app.api.files import router as files_router
from services.file_gateway.app.api.health import router as health_router

__all__ = [
    "downloads_router",
    "files_router",
    "health_router",
]
