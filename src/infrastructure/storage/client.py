"""
Object storage client for product images.

Supports S3 (and S3-compatible stores such as R2 or MinIO) with a mock mode
for local development.

Remote failures are logged and reported as "not found" / "not written"
rather than raised. Callers fall back to local disk or the default image,
so an unreachable bucket never breaks a page.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from src.core.images.models import UploadedImage
from src.core.images.resolver import RemoteImageStore

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


@dataclass
class S3Config:
    """
    Configuration for S3-compatible storage.

    endpoint_url is only needed for non-AWS stores.
    """
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None


def build_object_key(image: UploadedImage, prefix: str) -> str:
    """
    Build the object key for an upload under prefix.

    Object keys never start with '/', so the leading separator of the
    prefix is dropped here. Only the base name of the client's filename is
    used; uploads without a usable one get a random name.
    """
    name = image.basename
    if not name:
        ext = image.extension or "jpg"
        name = f"{uuid4().hex}.{ext}"
    return f"{prefix.strip('/')}/{name}"


class S3ImageStore:
    """
    S3 object storage for product images.

    All methods are async to match the RemoteImageStore protocol even though
    boto3 is synchronous.
    """

    def __init__(self, config: S3Config, s3_client=None) -> None:
        """
        Initialize the store with boto3.

        An existing client can be passed in (tests use a stub). Otherwise
        boto3 is imported here, not at module level, so mock mode doesn't
        need it.
        """
        self._config = config

        if s3_client is None:
            try:
                import boto3
                from botocore.config import Config
            except ImportError:
                raise ImportError(
                    "boto3 is required for S3 storage. Install with: pip install boto3"
                )

            s3_client = boto3.client(
                's3',
                endpoint_url=config.endpoint_url,
                aws_access_key_id=config.access_key_id,
                aws_secret_access_key=config.secret_access_key,
                region_name=config.region,
                config=Config(signature_version='s3v4'),
            )

        self._s3_client = s3_client

        logger.info(
            "Initialized S3 image store",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url,
            }
        )

    async def exists(self, key: str) -> bool:
        """
        Check whether an object is stored under key.

        A 404 is the normal "absent" answer. Any other failure (bad
        credentials, network) is logged and also reported as absent.
        """
        try:
            self._s3_client.head_object(
                Bucket=self._config.bucket_name,
                Key=key,
            )
            return True

        except Exception as e:
            if _error_code(e) in ("404", "NoSuchKey", "NotFound"):
                return False

            logger.warning(
                "Failed to check image existence",
                extra={"key": key, "error": str(e)}
            )
            return False

    async def write_public(
        self,
        image: UploadedImage,
        prefix: str,
    ) -> Optional[str]:
        """
        Upload a publicly readable image under prefix.

        Returns the object key, or None if the upload failed.
        """
        if image.content is None:
            return None

        key = build_object_key(image, prefix)

        try:
            self._s3_client.put_object(
                Bucket=self._config.bucket_name,
                Key=key,
                Body=image.content,
                ACL='public-read',
                ContentType=image.content_type or 'application/octet-stream',
            )

            logger.debug(
                "Uploaded image",
                extra={"key": key, "size_bytes": len(image.content)}
            )

            return key

        except Exception as e:
            logger.error(
                "Failed to upload image",
                extra={"key": key, "error": str(e)}
            )
            return None

    async def delete(self, key: str) -> None:
        """Delete an object. Failures are logged, never raised."""
        try:
            self._s3_client.delete_object(
                Bucket=self._config.bucket_name,
                Key=key,
            )

            logger.info("Deleted image", extra={"key": key})

        except Exception as e:
            logger.error(
                "Failed to delete image",
                extra={"key": key, "error": str(e)}
            )


def _error_code(error: Exception) -> Optional[str]:
    """Extract the S3 error code from a botocore ClientError, if any."""
    response = getattr(error, "response", None)
    if not isinstance(response, dict):
        return None
    return response.get("Error", {}).get("Code")


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockImageStore:
    """
    In-memory image storage for local development.

    Set `available` to False to simulate an unreachable bucket: every
    check then reports absent and every write fails.
    """

    def __init__(self) -> None:
        self._objects: dict[str, bytes] = {}
        self.available = True
        logger.info("Initialized mock image store (in-memory)")

    async def exists(self, key: str) -> bool:
        return self.available and key in self._objects

    async def write_public(
        self,
        image: UploadedImage,
        prefix: str,
    ) -> Optional[str]:
        """Store image in memory."""
        if not self.available or image.content is None:
            return None

        key = build_object_key(image, prefix)
        self._objects[key] = image.content

        logger.debug(
            "Stored image in mock storage",
            extra={"key": key, "size_bytes": len(image.content)}
        )

        return key

    async def delete(self, key: str) -> None:
        if self.available:
            self._objects.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._objects)


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_remote_store(
    config: Optional[S3Config] = None,
    mock_mode: bool = False,
) -> RemoteImageStore:
    """
    Create the remote image store based on configuration.

    Args:
        config: S3 configuration (required if not mock_mode)
        mock_mode: If True, return mock store for testing

    Returns:
        RemoteImageStore implementation (S3 or Mock)
    """
    if mock_mode:
        return MockImageStore()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3ImageStore(config)
