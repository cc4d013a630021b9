"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

The AWS variable names match the ones the storefront already uses, so the
same .env file works for both.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.images.models import StorageConfig


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like api_keys), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Product Image API"
    api_version: str = "v1"
    api_keys: str = Field(
        default="dev-key-1,dev-key-2",
        description="Comma-separated API keys."
    )

    # Image Storage
    default_image_path: str = Field(
        default="/images/default-product.png",
        description="Catalog default image served when a product has no image of its own."
    )
    local_upload_root: str = Field(
        default="public",
        description="Directory local uploads are written under (the web server's public root)."
    )
    remote_path_root: str = Field(
        default="/",
        description="Path the remote object key is resolved against when building public URLs."
    )

    # AWS S3 Configuration
    aws_access_key_id: str = Field(
        default="",
        description="S3 access key ID"
    )
    aws_secret_access_key: str = Field(
        default="",
        description="S3 secret access key"
    )
    aws_default_region: str = Field(
        default="us-east-1",
        description="S3 region"
    )
    aws_bucket: str = Field(
        default="",
        description="S3 bucket holding product images"
    )
    aws_endpoint_url: Optional[str] = Field(
        default=None,
        description="Endpoint for S3-compatible stores (R2, MinIO). Leave unset for AWS."
    )
    aws_s3_url: str = Field(
        default="",
        description="Public base URL of the bucket, prefixed to object paths."
    )
    s3_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of real S3. Enables local dev without object storage."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def api_keys_list(self) -> list[str]:
        """Parse comma-separated API keys into a list."""
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def aws_creds_exist(self) -> bool:
        """
        Whether remote storage is usable.

        Mock mode counts as credentialed so the remote code path can be
        exercised locally.
        """
        if self.s3_mock_mode:
            return True
        return bool(
            self.aws_access_key_id
            and self.aws_secret_access_key
            and self.aws_bucket
        )

    def storage_config(self) -> StorageConfig:
        """Build the read-only storage configuration the image core uses."""
        return StorageConfig(
            default_image_path=self.default_image_path,
            remote_credentials_present=self.aws_creds_exist,
            local_upload_root=self.local_upload_root,
            remote_base_url=self.aws_s3_url or None,
            remote_path_root=self.remote_path_root,
        )

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set.

        Returns list of missing required fields. Remote storage is
        optional as a whole, but a partial S3 configuration is reported
        because it silently disables remote storage.
        """
        missing = []

        if not self.default_image_path:
            missing.append("DEFAULT_IMAGE_PATH")

        if self.s3_mock_mode:
            return missing

        aws_fields = {
            "AWS_ACCESS_KEY_ID": self.aws_access_key_id,
            "AWS_SECRET_ACCESS_KEY": self.aws_secret_access_key,
            "AWS_BUCKET": self.aws_bucket,
        }
        if any(aws_fields.values()):
            missing.extend(name for name, value in aws_fields.items() if not value)

        if self.aws_creds_exist and not self.aws_s3_url:
            missing.append("AWS_S3_URL")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    This is safe because settings don't change during runtime.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
