"""
FastAPI dependencies for the product image routes.

Routes receive the read-only StorageConfig built from settings, the remote
image store (a shared in-memory store in mock mode, S3 when credentials are
set, None otherwise), the local disk writer and the process-wide product
repository. Tests swap any of these through app.dependency_overrides.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.images.models import StorageConfig
from ..core.images.resolver import RemoteImageStore
from ..infrastructure.products.repository import (
    InMemoryProductRepository,
    ProductRepository,
)
from ..infrastructure.storage.client import S3Config, create_remote_store
from ..infrastructure.storage.local import LocalImageStore

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Process-wide instances (shared across requests)
_mock_remote_store = None
_product_repository = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8] if api_key else ""}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Storage Dependencies
# ---------------------------------------------------------------------------

def get_storage_config(
    settings: Annotated[Settings, Depends(get_settings)],
) -> StorageConfig:
    return settings.storage_config()


def get_remote_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Optional[RemoteImageStore]:
    """
    Provide the remote image store, or None without credentials.

    In mock mode, we reuse the same store across requests so that
    uploaded images persist during the testing session.
    """
    global _mock_remote_store

    if settings.s3_mock_mode:
        if _mock_remote_store is None:
            _mock_remote_store = create_remote_store(mock_mode=True)
            logger.info("Created shared mock image store for session")
        return _mock_remote_store

    if not settings.aws_creds_exist:
        logger.debug("No S3 credentials configured, remote storage disabled")
        return None

    config = S3Config(
        access_key_id=settings.aws_access_key_id,
        secret_access_key=settings.aws_secret_access_key,
        bucket_name=settings.aws_bucket,
        region=settings.aws_default_region,
        endpoint_url=settings.aws_endpoint_url,
    )
    return create_remote_store(config=config)


def get_local_store() -> LocalImageStore:
    return LocalImageStore()


def get_product_repository() -> ProductRepository:
    """Provide the process-wide product repository."""
    global _product_repository

    if _product_repository is None:
        _product_repository = InMemoryProductRepository()
        logger.info("Created in-memory product repository")

    return _product_repository


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
StorageConfigDep = Annotated[StorageConfig, Depends(get_storage_config)]
RemoteStoreDep = Annotated[Optional[RemoteImageStore], Depends(get_remote_store)]
LocalStoreDep = Annotated[LocalImageStore, Depends(get_local_store)]
ProductRepositoryDep = Annotated[ProductRepository, Depends(get_product_repository)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
