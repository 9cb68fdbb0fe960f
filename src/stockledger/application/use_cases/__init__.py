"""Application use cases."""

from stockledger.application.use_cases.add_stock import AddStockUseCase
from stockledger.application.use_cases.adjust_stock import AdjustStockUseCase
from stockledger.application.use_cases.create_inventory_record import (
    CreateInventoryRecordUseCase,
)
from stockledger.application.use_cases.process_return import ProcessReturnUseCase
from stockledger.application.use_cases.refresh_snapshots import (
    RefreshProductSnapshotsUseCase,
    SnapshotRefreshResult,
)
from stockledger.application.use_cases.remove_stock import RemoveStockUseCase
from stockledger.application.use_cases.reserve_stock import (
    ReleaseStockUseCase,
    ReserveStockUseCase,
)
from stockledger.application.use_cases.settle_sale import SettleSaleUseCase
from stockledger.application.use_cases.stock_operation import (
    StockOperationResult,
    StockOperationUseCase,
)
from stockledger.application.use_cases.transfer_stock import (
    TransferStockResult,
    TransferStockUseCase,
)

__all__ = [
    "StockOperationUseCase",
    "StockOperationResult",
    "CreateInventoryRecordUseCase",
    "AddStockUseCase",
    "RemoveStockUseCase",
    "AdjustStockUseCase",
    "ReserveStockUseCase",
    "ReleaseStockUseCase",
    "TransferStockUseCase",
    "TransferStockResult",
    "SettleSaleUseCase",
    "ProcessReturnUseCase",
    "RefreshProductSnapshotsUseCase",
    "SnapshotRefreshResult",
]
