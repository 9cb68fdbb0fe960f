"""
Abstract interface for the product catalog.

The catalog is owned by another service; the ledger only reads from it
to seed new inventory records and refresh product snapshots.
"""

from abc import ABC, abstractmethod

from stockledger.core.entities.product import ProductInfo


class IProductCatalog(ABC):
    """Read-only access to catalog products."""

    @abstractmethod
    async def get_product(self, product_id: str) -> ProductInfo | None:
        """Get product by ID."""
