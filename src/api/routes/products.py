"""
Product image API endpoints.

The product update form posts here with an optional image file and the
"use default image" flag. Responses always carry a usable public path:
when remote storage can't confirm an image, the default image is served.
"""

import logging
from dataclasses import replace
from typing import Annotated, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from pydantic import BaseModel, Field

from ...core.images.models import ProductImageState, StorageConfig, UploadedImage
from ...core.images.resolver import RemoteImageStore, resolve_public_image_path
from ...core.images.workflow import (
    ImageChoiceError,
    reset_product_image,
    update_product_image,
)
from ...infrastructure.storage.client import StorageError
from ..dependencies import (
    AuthenticatedUser,
    LocalStoreDep,
    ProductRepositoryDep,
    RemoteStoreDep,
    StorageConfigDep,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class ProductImageResponse(BaseModel):
    """Image details for a product."""
    product_id: int = Field(description="Product identifier")
    company_id: Optional[int] = Field(None, description="Owning company")
    image_path: str = Field(description="Public path to display")
    stored_reference: Optional[str] = Field(
        None,
        description="Reference persisted on the product record"
    )
    using_default_image: bool = Field(description="Whether the catalog default image is assigned")


async def _build_response(
    state: ProductImageState,
    config: StorageConfig,
    remote: Optional[RemoteImageStore],
) -> ProductImageResponse:
    image_path = await resolve_public_image_path(state.image_path, config, remote)

    return ProductImageResponse(
        product_id=state.product_id,
        company_id=state.company_id,
        image_path=image_path,
        stored_reference=state.image_path,
        using_default_image=state.using_default_image(config),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/{product_id}/image",
    response_model=ProductImageResponse,
    status_code=status.HTTP_200_OK,
    summary="Get product image",
    description="Resolve the public image path for a product",
)
async def get_product_image(
    product_id: int,
    api_key: AuthenticatedUser,
    config: StorageConfigDep,
    remote: RemoteStoreDep,
    repository: ProductRepositoryDep,
) -> ProductImageResponse:
    state = repository.get(product_id)
    if state is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product {product_id} not found"
        )

    return await _build_response(state, config, remote)


@router.post(
    "/{product_id}/image",
    response_model=ProductImageResponse,
    status_code=status.HTTP_200_OK,
    summary="Update product image",
    description="Upload a new product image or switch to the default image",
)
async def update_image(
    product_id: int,
    api_key: AuthenticatedUser,
    config: StorageConfigDep,
    remote: RemoteStoreDep,
    local: LocalStoreDep,
    repository: ProductRepositoryDep,
    company_id: Annotated[Optional[int], Form()] = None,
    use_default_image: Annotated[bool, Form()] = False,
    image: Optional[UploadFile] = File(None),
) -> ProductImageResponse:
    """
    Apply an image change to a product.

    Creates the product record on first use, and assigns the submitted
    company to a record that has none. A replaced remote image is deleted
    once the new one is stored; images on local disk are kept.
    """
    state = repository.get(product_id)

    if state is None:
        state = ProductImageState(product_id=product_id, company_id=company_id)
    elif company_id is not None and state.company_id not in (None, company_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Product belongs to another company"
        )
    elif state.company_id is None and company_id is not None:
        state = replace(state, company_id=company_id)

    uploaded = None
    if image is not None:
        uploaded = UploadedImage(
            filename=image.filename,
            content=await image.read(),
            content_type=image.content_type,
        )

    try:
        new_state = await update_product_image(
            state, use_default_image, uploaded, config, remote, local
        )

    except ImageChoiceError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors
        )

    except StorageError as e:
        logger.error(
            "Failed to store product image",
            extra={"product_id": product_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store image"
        )

    repository.save(new_state)

    logger.info(
        "Product image updated",
        extra={
            "product_id": product_id,
            "image_path": new_state.image_path,
        }
    )

    return await _build_response(new_state, config, remote)


@router.delete(
    "/{product_id}/image",
    response_model=ProductImageResponse,
    status_code=status.HTTP_200_OK,
    summary="Remove product image",
    description="Delete the product's stored image and assign the default image",
)
async def delete_image(
    product_id: int,
    api_key: AuthenticatedUser,
    config: StorageConfigDep,
    remote: RemoteStoreDep,
    repository: ProductRepositoryDep,
) -> ProductImageResponse:
    state = repository.get(product_id)
    if state is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product {product_id} not found"
        )

    new_state = await reset_product_image(state, config, remote)
    repository.save(new_state)

    return await _build_response(new_state, config, remote)
