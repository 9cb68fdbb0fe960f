"""SQLite storage implementations."""

from stockledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from stockledger.infrastructure.storage.sqlite.inventory_store import SQLiteInventoryStore
from stockledger.infrastructure.storage.sqlite.product_catalog import SQLiteProductCatalog

# Singleton instances
_inventory_store: SQLiteInventoryStore | None = None
_product_catalog: SQLiteProductCatalog | None = None


async def get_inventory_store() -> SQLiteInventoryStore:
    """Get singleton inventory store instance."""
    global _inventory_store
    if _inventory_store is None:
        _inventory_store = SQLiteInventoryStore()
    return _inventory_store


async def get_product_catalog() -> SQLiteProductCatalog:
    """Get singleton product catalog instance."""
    global _product_catalog
    if _product_catalog is None:
        _product_catalog = SQLiteProductCatalog()
    return _product_catalog


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteInventoryStore",
    "SQLiteProductCatalog",
    # Factory functions
    "get_inventory_store",
    "get_product_catalog",
]
