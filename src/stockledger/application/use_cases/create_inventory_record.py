"""Create Inventory Record Use Case: zero-stock record seeded from the catalog."""

from stockledger.application.dto.requests import CreateInventoryRecordRequest
from stockledger.application.use_cases.stock_operation import (
    StockOperationResult,
    StockOperationUseCase,
)
from stockledger.config import get_logger
from stockledger.core.exceptions import InventoryRecordExistsError, ProductNotFoundError

logger = get_logger(__name__)


class CreateInventoryRecordUseCase(StockOperationUseCase):
    """Start tracking a catalog product in a store."""

    async def execute(self, request: CreateInventoryRecordRequest) -> StockOperationResult:
        """Execute create inventory record use case."""
        store = await self._get_inventory_store()
        if await store.get_record_by_key(request.product_id, request.store_id) is not None:
            raise InventoryRecordExistsError(request.product_id, request.store_id)

        catalog = await self._get_product_catalog()
        product = await catalog.get_product(request.product_id)
        if product is None:
            raise ProductNotFoundError(request.product_id)

        record = self._build_record(
            request.product_id,
            request.store_id,
            product,
            reorder_point=request.reorder_point,
            reorder_quantity=request.reorder_quantity,
            max_stock_level=request.max_stock_level,
        )
        record = await store.create_record(record)

        logger.info(
            "create_record_complete",
            record_id=record.id,
            product_id=record.product_id,
            store_id=record.store_id,
            reorder_point=record.reorder_point,
        )
        return StockOperationResult(record=record, created=True)
