"""Remove Stock Use Case: OUT or DAMAGE movement with floor check."""

from stockledger.application.dto.requests import RemoveStockRequest
from stockledger.application.use_cases.stock_operation import (
    StockOperationResult,
    StockOperationUseCase,
)
from stockledger.config import get_logger
from stockledger.core.entities.inventory import (
    InventoryRecord,
    MovementEntry,
    MovementType,
    ReferenceType,
)
from stockledger.core.exceptions import ValidationError

logger = get_logger(__name__)

REMOVABLE_TYPES = {
    MovementType.OUT: None,
    MovementType.DAMAGE: ReferenceType.DAMAGE,
}


class RemoveStockUseCase(StockOperationUseCase):
    """Take stock out of a store, or write it off as damaged."""

    async def execute(self, request: RemoveStockRequest) -> StockOperationResult:
        """Execute remove stock use case."""
        if request.movement_type not in REMOVABLE_TYPES:
            raise ValidationError(
                "movement_type",
                "Only out and damage movements can be recorded here",
                request.movement_type.value,
            )

        logger.info(
            "remove_stock_started",
            product_id=request.product_id,
            store_id=request.store_id,
            quantity=request.quantity,
            type=request.movement_type.value,
        )
        ledger = self._get_ledger()

        def mutate(record: InventoryRecord) -> MovementEntry:
            return ledger.remove_stock(
                record,
                request.quantity,
                reason=request.reason,
                performed_by=request.performed_by,
                reference_id=request.reference_id,
                reference_type=REMOVABLE_TYPES[request.movement_type],
                movement_type=request.movement_type,
                notes=request.notes,
            )

        record, movement, _ = await self._apply(request.product_id, request.store_id, mutate)

        logger.info(
            "remove_stock_complete",
            record_id=record.id,
            current_stock=record.current_stock,
            available_stock=record.available_stock,
        )
        return StockOperationResult(record=record, movement=movement)
