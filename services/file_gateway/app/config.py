"""File Gateway configuration via environment variables."""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """File Gateway configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="GATEWAY_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Service settings
    service_name: str = "file-gateway"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    # Storage settings
    storage_type: str = "s3"  # 's3' or 'local'

    # S3 settings; the unprefixed S3_* names are also accepted
    s3_bucket_name: str = Field(
        default="",
        validation_alias=AliasChoices("GATEWAY_S3_BUCKET_NAME", "S3_BUCKET_NAME"),
    )
    s3_region: str = Field(
        default="us-east-1",
        validation_alias=AliasChoices("GATEWAY_S3_REGION", "S3_REGION"),
    )
    s3_access_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GATEWAY_S3_ACCESS_KEY", "S3_ACCESS_KEY"),
    )
    s3_secret_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GATEWAY_S3_SECRET_KEY", "S3_SECRET_KEY"),
    )
    s3_endpoint_url: str | None = None  # For LocalStack/MinIO

    # Local storage settings (used when storage_type='local')
    local_storage_path: str = "/data/file-gateway"
    local_public_url: str = "http://localhost:5000/files"
    local_signing_secret: str = Field(
        default="change-me-in-production",
        description="HMAC key for local download links",
    )

    # Request handling
    presigned_url_expiry_seconds: int = Field(default=3600, gt=0)
    max_upload_size_bytes: int | None = Field(
        default=None,
        description="Reject larger uploads with 413; unset means unconstrained",
    )
    suppress_delete_errors: bool = Field(
        default=False,
        description="Report success on DELETE even when the storage call failed",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
