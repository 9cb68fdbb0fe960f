"""Process Return Use Case: restock items returned against a sale."""

from stockledger.application.dto.requests import ProcessReturnRequest
from stockledger.application.dto.responses import SettlementResponse
from stockledger.application.use_cases.stock_operation import StockOperationUseCase
from stockledger.config import get_logger
from stockledger.core.entities.inventory import (
    InventoryRecord,
    MovementEntry,
    MovementType,
    ReferenceType,
)
from stockledger.core.entities.settlement import (
    LineItem,
    LineItemOutcome,
    LineItemStatus,
    SettlementResult,
)
from stockledger.core.exceptions import LedgerError

logger = get_logger(__name__)


def return_reason(bill_number: str) -> str:
    return f"Return - Bill #{bill_number}"


class ProcessReturnUseCase(StockOperationUseCase):
    """
    Add returned units back to stock.

    Movements reference the original sale transaction. Untracked products
    are skipped and per-item failures are reported, not raised.
    """

    async def commit(
        self,
        transaction_id: str,
        store_id: str,
        bill_number: str,
        performed_by: str,
        items: list[LineItem],
    ) -> SettlementResult:
        logger.info(
            "return_started",
            transaction_id=transaction_id,
            store_id=store_id,
            items=len(items),
        )
        store = await self._get_inventory_store()
        ledger = self._get_ledger()
        result = SettlementResult(transaction_id=transaction_id, store_id=store_id)

        for item in items:
            try:
                record = await store.get_record_by_key(item.product_id, store_id)
                if record is None:
                    logger.warning(
                        "return_item_untracked",
                        product_id=item.product_id,
                        store_id=store_id,
                        transaction_id=transaction_id,
                    )
                    result.outcomes.append(
                        LineItemOutcome(
                            product_id=item.product_id,
                            quantity=item.quantity,
                            status=LineItemStatus.UNTRACKED,
                        )
                    )
                    continue

                def mutate(current: InventoryRecord, item: LineItem = item) -> MovementEntry:
                    return ledger.add_stock(
                        current,
                        item.quantity,
                        reason=return_reason(bill_number),
                        performed_by=performed_by,
                        reference_id=transaction_id,
                        reference_type=ReferenceType.RETURN,
                        movement_type=MovementType.RETURN,
                    )

                saved, movement, _ = await self._apply(item.product_id, store_id, mutate)
                result.outcomes.append(
                    LineItemOutcome(
                        product_id=item.product_id,
                        quantity=item.quantity,
                        status=LineItemStatus.APPLIED,
                        movement_id=movement.id,
                        remaining_stock=saved.current_stock,
                    )
                )
            except LedgerError as e:
                logger.error(
                    "return_line_item_failed",
                    transaction_id=transaction_id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    error_code=e.code,
                    error=e.message,
                )
                result.outcomes.append(
                    LineItemOutcome(
                        product_id=item.product_id,
                        quantity=item.quantity,
                        status=LineItemStatus.FAILED,
                        error_code=e.code,
                        error_message=e.message,
                    )
                )

        logger.info(
            "return_complete",
            transaction_id=transaction_id,
            applied=len(result.applied),
            untracked=len(result.untracked),
            failed=len(result.failed),
        )
        return result

    async def execute(self, transaction_id: str, request: ProcessReturnRequest) -> SettlementResult:
        """Execute return use case for an API request."""
        return await self.commit(
            transaction_id,
            request.store_id,
            request.bill_number,
            request.performed_by,
            [LineItem(product_id=i.product_id, quantity=i.quantity) for i in request.items],
        )

    def to_response(self, result: SettlementResult) -> SettlementResponse:  # type: ignore[override]
        """Convert result to API response."""
        return SettlementResponse.from_result(result)
