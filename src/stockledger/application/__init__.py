"""
Application layer - Use cases, DTOs, and service factories.

Use cases load inventory records, apply ledger operations and persist
the result. They are the only entry point for API handlers.
"""

from stockledger.application.services import get_stock_ledger, reset_services
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

__all__ = [
    # Use Cases
    "CreateInventoryRecordUseCase",
    "AddStockUseCase",
    "RemoveStockUseCase",
    "AdjustStockUseCase",
    "ReserveStockUseCase",
    "ReleaseStockUseCase",
    "TransferStockUseCase",
    "SettleSaleUseCase",
    "ProcessReturnUseCase",
    "RefreshProductSnapshotsUseCase",
    # Service factories
    "get_stock_ledger",
    "reset_services",
]
