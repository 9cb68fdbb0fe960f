"""Core interfaces (ports) for dependency injection."""

from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.core.interfaces.product_catalog import IProductCatalog

__all__ = [
    "IInventoryStore",
    "IProductCatalog",
]
