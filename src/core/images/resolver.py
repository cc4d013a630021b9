"""
Image location resolution for product images.

A product image lives in one of three places: the catalog default image,
a file on local disk, or an object in remote storage. This module decides
where a new upload is written, which public path is served for an existing
reference, and when a stale remote object is removed.

Every remote failure degrades to the default image instead of surfacing
as an error, so the UI always receives a usable path. Only local disk
failures propagate.

The guards below are evaluated strictly in order. The credential check
always runs before the existence check, so no unauthenticated remote call
is ever made.
"""

import logging
import re
from typing import Optional, Protocol

from .models import (
    SkipReason,
    Skipped,
    StorageConfig,
    UploadedImage,
    WriteOutcome,
    Written,
)

logger = logging.getLogger(__name__)

STORAGE_PREFIX_TEMPLATE = "/uploads/companies/{company_id}/images/"

_REPEATED_SEPARATORS = re.compile(r"/{2,}")


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class RemoteImageStore(Protocol):
    """
    Interface for remote object storage holding product images.

    Implementations absorb their own transport errors: a failed existence
    check reports False, a failed write reports None.
    """

    async def exists(self, key: str) -> bool:
        """Whether an object is stored under key."""
        ...

    async def write_public(
        self,
        image: UploadedImage,
        prefix: str,
    ) -> Optional[str]:
        """Store a publicly readable object under prefix. Returns its key."""
        ...

    async def delete(self, key: str) -> None:
        """Remove the object stored under key."""
        ...


class LocalImageWriter(Protocol):
    """Interface for writing images to local disk."""

    def write(self, content: bytes, absolute_path: str) -> None:
        ...


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

def build_storage_prefix(company_id: int) -> str:
    """Directory every image of a company is stored under."""
    return STORAGE_PREFIX_TEMPLATE.format(company_id=company_id)


def collapse_separators(path: str) -> str:
    """Replace any run of '/' with a single '/'."""
    return _REPEATED_SEPARATORS.sub("/", path)


def remote_storage_path(key: str, config: StorageConfig) -> str:
    return collapse_separators(f"{config.remote_path_root}/{key}")


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

async def resolve_public_image_path(
    current_reference: Optional[str],
    config: StorageConfig,
    remote: Optional[RemoteImageStore],
) -> str:
    """
    Public path to serve for a product's image reference.

    Returns the remote URL only when the reference is a stored (non-default)
    image, remote credentials are configured and the remote store confirms
    the object exists. Anything else falls back to the default image.
    """
    result = config.default_image_path

    if current_reference is None:
        return result
    if current_reference == config.default_image_path:
        return result
    if not config.remote_credentials_present or remote is None:
        return result
    if not await remote.exists(current_reference):
        logger.debug(
            "Stored image not found remotely, serving default",
            extra={"image_path": current_reference},
        )
        return result

    return (config.remote_base_url or "") + remote_storage_path(
        current_reference, config
    )


async def write_uploaded_image(
    company_id: Optional[int],
    uploaded: Optional[UploadedImage],
    config: StorageConfig,
    remote: Optional[RemoteImageStore],
    local: LocalImageWriter,
) -> WriteOutcome:
    """
    Store an uploaded image, remote first, then local disk.

    The remote store is tried only when credentials are configured. Local
    disk is used when there are no credentials or the remote write failed;
    the two are never both written.
    """
    if uploaded is None:
        return Skipped(SkipReason.MISSING_FILE)
    if company_id is None:
        return Skipped(SkipReason.MISSING_COMPANY)

    storage_path = build_storage_prefix(company_id)

    if config.remote_credentials_present and remote is not None:
        # The remote store strips the leading '/' from the prefix, so the
        # key it reports differs from storage_path. Keep its key as-is.
        key = await remote.write_public(uploaded, storage_path)
        if key:
            logger.info(
                "Stored image remotely",
                extra={"company_id": company_id, "key": key},
            )
            return Written(key=key, remote=True)

        logger.warning(
            "Remote image write failed, falling back to local disk",
            extra={"company_id": company_id},
        )

    filename = uploaded.basename
    if uploaded.content is None or filename is None:
        return Skipped(SkipReason.MISSING_FILE)

    reference = storage_path + filename
    local.write(uploaded.content, config.local_upload_root.rstrip("/") + reference)

    logger.info(
        "Stored image on local disk",
        extra={"company_id": company_id, "image_path": reference},
    )

    return Written(key=reference)


async def store_uploaded_image(
    company_id: Optional[int],
    uploaded: Optional[UploadedImage],
    config: StorageConfig,
    remote: Optional[RemoteImageStore],
    local: LocalImageWriter,
) -> str:
    """
    Store an uploaded image and return the reference to persist.

    Returns the default image path when nothing could be stored.
    """
    outcome = await write_uploaded_image(company_id, uploaded, config, remote, local)

    if isinstance(outcome, Written):
        return outcome.key

    logger.debug(
        "Image upload skipped, using default image",
        extra={"company_id": company_id, "reason": outcome.reason.value},
    )
    return config.default_image_path


async def delete_stale_image(
    current_reference: Optional[str],
    company_id: Optional[int],
    config: StorageConfig,
    remote: Optional[RemoteImageStore],
) -> None:
    """
    Remove a product's stored image from remote storage.

    A no-op unless the reference is a non-default image that the remote
    store confirms exists. Images on local disk are left in place.
    """
    if current_reference is None or company_id is None:
        return
    if current_reference == config.default_image_path:
        return
    if not config.remote_credentials_present or remote is None:
        return
    if not await remote.exists(current_reference):
        return

    await remote.delete(current_reference)

    logger.info(
        "Deleted stale remote image",
        extra={"company_id": company_id, "key": current_reference},
    )
