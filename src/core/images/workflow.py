"""
Product image update workflow.

Drives a product's image reference through its lifecycle:

    UNSET -> DEFAULT -> STORED_LOCAL | STORED_REMOTE -> DEFAULT ...

A replaced image is deleted only after its successor is stored, and
only when it lives in remote storage.
"""

import logging
from typing import Optional

from .models import ProductImageState, StorageConfig, UploadedImage
from .resolver import (
    LocalImageWriter,
    RemoteImageStore,
    delete_stale_image,
    store_uploaded_image,
)

logger = logging.getLogger(__name__)

MISSING_IMAGE_MESSAGE = (
    "You have opted to not use a default image but you have not provided one."
)
UNEXPECTED_IMAGE_MESSAGE = (
    "You have opted to use a default image but you provided one anyway."
)


class ImageChoiceError(ValueError):
    """Raised when the requested image choice contradicts the upload."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


def validate_image_choice(
    state: ProductImageState,
    use_default_image: bool,
    uploaded: Optional[UploadedImage],
) -> list[str]:
    """
    Check the default-image flag against the uploaded file.

    Opting out of the default image is fine without an upload as long as
    the product already has an image of its own.
    """
    errors = []

    if not use_default_image and uploaded is None and state.image_path is None:
        errors.append(MISSING_IMAGE_MESSAGE)

    if use_default_image and uploaded is not None:
        errors.append(UNEXPECTED_IMAGE_MESSAGE)

    return errors


async def update_product_image(
    state: ProductImageState,
    use_default_image: bool,
    uploaded: Optional[UploadedImage],
    config: StorageConfig,
    remote: Optional[RemoteImageStore],
    local: LocalImageWriter,
) -> ProductImageState:
    """
    Apply an image change to a product and return its new state.

    Raises:
        ImageChoiceError: if the flag and the upload contradict each other
    """
    errors = validate_image_choice(state, use_default_image, uploaded)
    if errors:
        raise ImageChoiceError(errors)

    if use_default_image:
        await delete_stale_image(state.image_path, state.company_id, config, remote)
        return state.with_image(config.default_image_path)

    if uploaded is not None:
        # Store before deleting: a failed store must leave the old image intact.
        image_path = await store_uploaded_image(
            state.company_id, uploaded, config, remote, local
        )
        if image_path != state.image_path:
            await delete_stale_image(state.image_path, state.company_id, config, remote)
        logger.info(
            "Updated product image",
            extra={"product_id": state.product_id, "image_path": image_path},
        )
        return state.with_image(image_path)

    if state.image_path is None:
        return state.with_image(config.default_image_path)

    return state


async def reset_product_image(
    state: ProductImageState,
    config: StorageConfig,
    remote: Optional[RemoteImageStore],
) -> ProductImageState:
    """Delete a product's stored image and point it back at the default."""
    await delete_stale_image(state.image_path, state.company_id, config, remote)
    return state.with_image(config.default_image_path)
