"""Reserve and release stock held for pending orders."""

from stockledger.application.dto.requests import ReserveStockRequest
from stockledger.application.use_cases.stock_operation import (
    StockOperationResult,
    StockOperationUseCase,
)
from stockledger.config import get_logger
from stockledger.core.entities.inventory import InventoryRecord

logger = get_logger(__name__)


class ReserveStockUseCase(StockOperationUseCase):
    """Hold available units without moving physical stock."""

    async def execute(self, request: ReserveStockRequest) -> StockOperationResult:
        ledger = self._get_ledger()

        def mutate(record: InventoryRecord) -> InventoryRecord:
            return ledger.reserve_stock(record, request.quantity)

        record, _, _ = await self._apply(request.product_id, request.store_id, mutate)

        logger.info(
            "stock_reserved",
            record_id=record.id,
            quantity=request.quantity,
            reserved_stock=record.reserved_stock,
            available_stock=record.available_stock,
        )
        return StockOperationResult(record=record)


class ReleaseStockUseCase(StockOperationUseCase):
    """Release a hold placed by ReserveStockUseCase."""

    async def execute(self, request: ReserveStockRequest) -> StockOperationResult:
        ledger = self._get_ledger()

        def mutate(record: InventoryRecord) -> InventoryRecord:
            return ledger.release_reserved_stock(record, request.quantity)

        record, _, _ = await self._apply(request.product_id, request.store_id, mutate)

        logger.info(
            "stock_released",
            record_id=record.id,
            quantity=request.quantity,
            reserved_stock=record.reserved_stock,
        )
        return StockOperationResult(record=record)
