"""Adjust Stock Use Case: set stock to a counted value."""

from stockledger.application.dto.requests import AdjustStockRequest
from stockledger.application.use_cases.stock_operation import (
    StockOperationResult,
    StockOperationUseCase,
)
from stockledger.config import get_logger
from stockledger.core.entities.inventory import InventoryRecord, MovementEntry

logger = get_logger(__name__)


class AdjustStockUseCase(StockOperationUseCase):
    """Overwrite current stock after a physical count."""

    async def execute(self, request: AdjustStockRequest) -> StockOperationResult:
        """Execute adjust stock use case."""
        ledger = self._get_ledger()

        def mutate(record: InventoryRecord) -> MovementEntry:
            return ledger.adjust_stock(
                record,
                request.new_quantity,
                reason=request.reason,
                performed_by=request.performed_by,
                reference_id=request.reference_id,
                notes=request.notes,
            )

        record, movement, _ = await self._apply(request.product_id, request.store_id, mutate)

        logger.info(
            "adjust_stock_complete",
            record_id=record.id,
            delta=movement.quantity,
            current_stock=record.current_stock,
        )
        return StockOperationResult(record=record, movement=movement)
