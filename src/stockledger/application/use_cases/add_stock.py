"""Add Stock Use Case: IN movement, creating the record on first receipt."""

from stockledger.application.dto.requests import AddStockRequest
from stockledger.application.use_cases.stock_operation import (
    StockOperationResult,
    StockOperationUseCase,
)
from stockledger.config import get_logger
from stockledger.core.entities.inventory import InventoryRecord, MovementEntry, ReferenceType
from stockledger.core.exceptions import ProductNotFoundError

logger = get_logger(__name__)


class AddStockUseCase(StockOperationUseCase):
    """Receive stock into a store, with weighted average cost when costed."""

    async def execute(self, request: AddStockRequest) -> StockOperationResult:
        """Execute add stock use case."""
        logger.info(
            "add_stock_started",
            product_id=request.product_id,
            store_id=request.store_id,
            quantity=request.quantity,
        )
        ledger = self._get_ledger()

        async def create_from_catalog() -> InventoryRecord:
            catalog = await self._get_product_catalog()
            product = await catalog.get_product(request.product_id)
            if product is None:
                raise ProductNotFoundError(request.product_id)
            return self._build_record(request.product_id, request.store_id, product)

        def mutate(record: InventoryRecord) -> MovementEntry:
            return ledger.add_stock(
                record,
                request.quantity,
                reason=request.reason,
                performed_by=request.performed_by,
                reference_id=request.reference_id,
                reference_type=ReferenceType.PURCHASE if request.reference_id else None,
                unit_cost=request.unit_cost,
                notes=request.notes,
            )

        record, movement, created = await self._apply(
            request.product_id, request.store_id, mutate, on_missing=create_from_catalog
        )

        logger.info(
            "add_stock_complete",
            record_id=record.id,
            created=created,
            current_stock=record.current_stock,
            average_cost=round(record.average_cost, 4),
        )
        return StockOperationResult(record=record, movement=movement, created=created)
