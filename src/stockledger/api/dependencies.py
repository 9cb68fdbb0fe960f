"""
Dependency injection container for FastAPI.

Provides stores and use cases to route handlers. Tests replace these
through app.dependency_overrides.
"""

from functools import lru_cache

from stockledger.application.use_cases import (
    AddStockUseCase,
    AdjustStockUseCase,
    CreateInventoryRecordUseCase,
    ProcessReturnUseCase,
    RefreshProductSnapshotsUseCase,
    ReleaseStockUseCase,
    RemoveStockUseCase,
    ReserveStockUseCase,
    SettleSaleUseCase,
    TransferStockUseCase,
)
from stockledger.config import Settings, get_settings
from stockledger.core.interfaces import IInventoryStore
from stockledger.infrastructure.storage.sqlite import get_inventory_store


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Store dependencies
async def get_inv_store() -> IInventoryStore:
    """Get inventory store."""
    return await get_inventory_store()


# Inventory use case dependencies
def get_create_record_use_case() -> CreateInventoryRecordUseCase:
    """Get create inventory record use case."""
    return CreateInventoryRecordUseCase()


def get_add_stock_use_case() -> AddStockUseCase:
    """Get add stock use case."""
    return AddStockUseCase()


def get_remove_stock_use_case() -> RemoveStockUseCase:
    """Get remove stock use case."""
    return RemoveStockUseCase()


def get_adjust_stock_use_case() -> AdjustStockUseCase:
    """Get adjust stock use case."""
    return AdjustStockUseCase()


def get_reserve_stock_use_case() -> ReserveStockUseCase:
    """Get reserve stock use case."""
    return ReserveStockUseCase()


def get_release_stock_use_case() -> ReleaseStockUseCase:
    """Get release stock use case."""
    return ReleaseStockUseCase()


def get_transfer_stock_use_case() -> TransferStockUseCase:
    """Get transfer stock use case."""
    return TransferStockUseCase()


def get_refresh_snapshots_use_case() -> RefreshProductSnapshotsUseCase:
    """Get product snapshot refresh use case."""
    return RefreshProductSnapshotsUseCase()


# Transaction use case dependencies
def get_settle_sale_use_case() -> SettleSaleUseCase:
    """Get sale settlement use case."""
    return SettleSaleUseCase()


def get_process_return_use_case() -> ProcessReturnUseCase:
    """Get return processing use case."""
    return ProcessReturnUseCase()
