"""File Gateway - FastAPI application entry point."""

from contextlib import asynccontextmanager
from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.file_gateway.app.api import downloads_router, files_router, health_router
from services.file_gateway.app.api.errors import GatewayError
from services.file_gateway.app.config import Settings, get_settings
from services.file_gateway.app.core.service import FileService
from services.file_gateway.app.middleware.correlation import CorrelationMiddleware
from shared.schemas.api_responses import ErrorResponse
from shared.utils.logging import configure_logging, get_correlation_id, get_logger
from shared.utils.metrics import MetricsMiddleware, metrics_endpoint
from shared.utils.storage import (
    InvalidKeyError,
    StorageClient,
    StorageError,
    get_storage_client,
)

settings = get_settings()

configure_logging(
    service_name=settings.service_name,
    log_level=settings.log_level,
    json_format=settings.log_json,
)

logger = get_logger(__name__)


def build_storage(settings: Settings) -> StorageClient:
    """Create the storage client described by settings."""
    return get_storage_client(
        storage_type=settings.storage_type,
        bucket=settings.s3_bucket_name,
        region=settings.s3_region,
        endpoint_url=settings.s3_endpoint_url,
        access_key=settings.s3_access_key,
        secret_key=settings.s3_secret_key,
        local_path=settings.local_storage_path,
        serve_url=settings.local_public_url,
        signing_secret=settings.local_signing_secret,
    )


def build_file_service(settings: Settings, storage: StorageClient) -> FileService:
    """Create the request handler service on top of a storage client."""
    return FileService(
        storage_client=storage,
        link_expiry_seconds=settings.presigned_url_expiry_seconds,
        max_upload_size_bytes=settings.max_upload_size_bytes,
        suppress_delete_errors=settings.suppress_delete_errors,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("starting_service", service=settings.service_name)

    # Credentials are not checked here; a bad config fails on the first storage call
    if settings.storage_type.lower() == "s3" and not settings.s3_bucket_name:
        logger.warning("s3_bucket_not_configured")

    storage = build_storage(settings)
    app.state.storage = storage
    app.state.file_service = build_file_service(settings, storage)
    logger.info("storage_initialized", storage_type=storage.storage_type)

    yield

    logger.info("service_shutdown_complete")


def _error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: dict | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        error_message=message,
        details=details,
        correlation_id=get_correlation_id() or None,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


app = FastAPI(
    title="File Gateway",
    description="Upload files to object storage and hand out time-limited download links",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(CorrelationMiddleware)
app.add_middleware(MetricsMiddleware)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    """Client errors raised by the routes."""
    logger.info("request_rejected", error_code=exc.error_code, error=exc.message)
    return _error_response(exc.status_code, exc.error_code, exc.message)


@app.exception_handler(InvalidKeyError)
async def invalid_key_handler(request: Request, exc: InvalidKeyError):
    """Keys the storage backend cannot represent."""
    return _error_response(status.HTTP_400_BAD_REQUEST, "INVALID_KEY", str(exc))


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    """Storage service failures surface as 502."""
    logger.error(
        "storage_request_failed",
        operation=exc.operation,
        key=exc.key,
        error=str(exc),
    )
    return _error_response(
        status.HTTP_502_BAD_GATEWAY,
        "STORAGE_ERROR",
        f"Storage service error during {exc.operation}",
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render framework HTTP errors in the standard error envelope."""
    try:
        error_code = HTTPStatus(exc.status_code).name
    except ValueError:
        error_code = "HTTP_ERROR"
    return _error_response(exc.status_code, error_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Render request validation errors in the standard error envelope."""
    return _error_response(
        HTTPStatus.UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed",
        details={"errors": [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.exception("unhandled_exception", error=str(exc))
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )


# Fixed paths go first: GET /{file_id} would otherwise capture them
app.include_router(health_router)
app.include_router(downloads_router)
app.add_route("/metrics", metrics_endpoint)
app.include_router(files_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.file_gateway.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
