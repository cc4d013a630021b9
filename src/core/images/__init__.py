"""
Product image storage logic.

Contains the image value objects, the location resolver and the product
image update workflow.
"""

from .models import (
    ProductImageState,
    SkipReason,
    Skipped,
    StorageConfig,
    UploadedImage,
    WriteOutcome,
    Written,
)
from .resolver import (
    LocalImageWriter,
    RemoteImageStore,
    build_storage_prefix,
    collapse_separators,
    delete_stale_image,
    resolve_public_image_path,
    store_uploaded_image,
    write_uploaded_image,
)
from .workflow import (
    ImageChoiceError,
    reset_product_image,
    update_product_image,
    validate_image_choice,
)

__all__ = [
    "ProductImageState",
    "SkipReason",
    "Skipped",
    "StorageConfig",
    "UploadedImage",
    "WriteOutcome",
    "Written",
    "LocalImageWriter",
    "RemoteImageStore",
    "build_storage_prefix",
    "collapse_separators",
    "delete_stale_image",
    "resolve_public_image_path",
    "store_uploaded_image",
    "write_uploaded_image",
    "ImageChoiceError",
    "reset_product_image",
    "update_product_image",
    "validate_image_choice",
]
