"""
Repository for product image records.

Translates between stored product rows and ProductImageState snapshots.
Rows are kept in memory; the application code only ever sees domain
objects, so a database-backed repository can replace this one without
touching the routes.
"""

import logging
from typing import Optional, Protocol

from src.core.images.models import ProductImageState

logger = logging.getLogger(__name__)


class ProductRepository(Protocol):
    """Interface for loading and saving product image state."""

    def get(self, product_id: int) -> Optional[ProductImageState]:
        ...

    def save(self, state: ProductImageState) -> None:
        ...


class InMemoryProductRepository:
    """
    Product records held in a dict keyed by product id.

    Rows store plain values rather than the frozen states themselves,
    mirroring how a table would hold them.
    """

    def __init__(self) -> None:
        self._rows: dict[int, dict] = {}

    def get(self, product_id: int) -> Optional[ProductImageState]:
        row = self._rows.get(product_id)
        if row is None:
            return None

        return ProductImageState(
            product_id=product_id,
            company_id=row["company_id"],
            image_path=row["image_path"],
        )

    def save(self, state: ProductImageState) -> None:
        self._rows[state.product_id] = {
            "company_id": state.company_id,
            "image_path": state.image_path,
        }

        logger.debug(
            "Saved product image state",
            extra={
                "product_id": state.product_id,
                "image_path": state.image_path,
            }
        )
