"""Product record persistence."""

from .repository import InMemoryProductRepository, ProductRepository

__all__ = ["InMemoryProductRepository", "ProductRepository"]
