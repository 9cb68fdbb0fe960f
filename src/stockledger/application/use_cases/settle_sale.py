"""
Settle Sale Use Case.

Two phases around the billing layer's own transaction write:

1. validate: check every tracked line item has enough available stock.
   Runs before the transaction document exists; raises on shortfall.
2. commit: deduct stock once the transaction document is stored. The sale
   already happened, so per-item failures are logged and reported instead
   of raised, and never undo the items that did succeed.

Sale movements carry the transaction id as reference. Lines for the same
product are merged first, so each product gets one sale movement per
transaction. Products that already have it are skipped, so re-running a
partially failed settlement only applies what is missing.
"""

from stockledger.application.dto.requests import (
    SettleTransactionRequest,
    ValidateTransactionRequest,
)
from stockledger.application.dto.responses import (
    LineItemOutcomeResponse,
    SettlementResponse,
    ValidationResultResponse,
)
from stockledger.application.use_cases.stock_operation import StockOperationUseCase
from stockledger.config import get_logger
from stockledger.core.entities.inventory import InventoryRecord, MovementEntry, ReferenceType
from stockledger.core.entities.settlement import (
    LineItem,
    LineItemOutcome,
    LineItemStatus,
    SettlementResult,
)
from stockledger.core.exceptions import (
    InsufficientAvailableStockError,
    InvalidQuantityError,
    LedgerError,
)

logger = get_logger(__name__)


def sale_reason(bill_number: str) -> str:
    return f"Sale - Bill #{bill_number}"


def merge_line_items(items: list[LineItem]) -> list[LineItem]:
    """
    Sum quantities of lines for the same product, keeping first-seen order.

    Non-positive lines are passed through unmerged so they are rejected on
    their own instead of shrinking a valid line.
    """
    totals: dict[str, int] = {}
    rejected: list[LineItem] = []
    for item in items:
        if item.quantity <= 0:
            rejected.append(item)
            continue
        totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity
    return [LineItem(product_id=p, quantity=q) for p, q in totals.items()] + rejected


class SettleSaleUseCase(StockOperationUseCase):
    """Validate and commit the stock effect of a sale."""

    async def validate(self, store_id: str, items: list[LineItem]) -> list[LineItemOutcome]:
        """
        Check availability for every line item without mutating anything.

        Raises:
            InvalidQuantityError: If a quantity is not positive
            InsufficientAvailableStockError: If a tracked product is short
        """
        store = await self._get_inventory_store()
        outcomes: list[LineItemOutcome] = []

        for item in items:
            if item.quantity <= 0:
                raise InvalidQuantityError(item.quantity, "validate_sale")

        for item in merge_line_items(items):
            record = await store.get_record_by_key(item.product_id, store_id)
            if record is None:
                logger.warning(
                    "sale_item_untracked",
                    product_id=item.product_id,
                    store_id=store_id,
                )
                outcomes.append(
                    LineItemOutcome(
                        product_id=item.product_id,
                        quantity=item.quantity,
                        status=LineItemStatus.UNTRACKED,
                    )
                )
                continue

            if record.available_stock < item.quantity:
                raise InsufficientAvailableStockError(
                    item.product_id, store_id, item.quantity, record.available_stock
                )

            outcomes.append(
                LineItemOutcome(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    status=LineItemStatus.AVAILABLE,
                    remaining_stock=record.available_stock - item.quantity,
                )
            )

        return outcomes

    async def commit(
        self,
        transaction_id: str,
        store_id: str,
        bill_number: str,
        performed_by: str,
        items: list[LineItem],
    ) -> SettlementResult:
        """Deduct stock for a stored sale transaction."""
        logger.info(
            "settlement_started",
            transaction_id=transaction_id,
            store_id=store_id,
            items=len(items),
        )
        result = SettlementResult(transaction_id=transaction_id, store_id=store_id)

        for item in merge_line_items(items):
            try:
                outcome = await self._settle_item(
                    transaction_id, store_id, bill_number, performed_by, item
                )
            except LedgerError as e:
                logger.error(
                    "settlement_line_item_failed",
                    transaction_id=transaction_id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    error_code=e.code,
                    error=e.message,
                )
                outcome = LineItemOutcome(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    status=LineItemStatus.FAILED,
                    error_code=e.code,
                    error_message=e.message,
                )
            result.outcomes.append(outcome)

        logger.info(
            "settlement_complete",
            transaction_id=transaction_id,
            applied=len(result.applied),
            already_applied=len(result.already_applied),
            untracked=len(result.untracked),
            failed=len(result.failed),
        )
        return result

    async def _settle_item(
        self,
        transaction_id: str,
        store_id: str,
        bill_number: str,
        performed_by: str,
        item: LineItem,
    ) -> LineItemOutcome:
        if item.quantity <= 0:
            raise InvalidQuantityError(item.quantity, "settle_sale")

        store = await self._get_inventory_store()
        record = await store.get_record_by_key(item.product_id, store_id)
        if record is None:
            logger.warning(
                "sale_item_untracked",
                product_id=item.product_id,
                store_id=store_id,
                transaction_id=transaction_id,
            )
            return LineItemOutcome(
                product_id=item.product_id,
                quantity=item.quantity,
                status=LineItemStatus.UNTRACKED,
            )

        if await store.has_movement(record.id, ReferenceType.SALE, transaction_id):  # type: ignore[arg-type]
            logger.info(
                "sale_item_already_applied",
                product_id=item.product_id,
                transaction_id=transaction_id,
            )
            return LineItemOutcome(
                product_id=item.product_id,
                quantity=item.quantity,
                status=LineItemStatus.ALREADY_APPLIED,
                remaining_stock=record.current_stock,
            )

        ledger = self._get_ledger()

        def mutate(current: InventoryRecord) -> MovementEntry:
            return ledger.remove_stock(
                current,
                item.quantity,
                reason=sale_reason(bill_number),
                performed_by=performed_by,
                reference_id=transaction_id,
                reference_type=ReferenceType.SALE,
            )

        saved, movement, _ = await self._apply(item.product_id, store_id, mutate)
        return LineItemOutcome(
            product_id=item.product_id,
            quantity=item.quantity,
            status=LineItemStatus.APPLIED,
            movement_id=movement.id,
            remaining_stock=saved.current_stock,
        )

    async def execute(
        self, transaction_id: str, request: SettleTransactionRequest
    ) -> SettlementResult:
        """Execute the commit phase for an API request."""
        return await self.commit(
            transaction_id,
            request.store_id,
            request.bill_number,
            request.performed_by,
            [LineItem(product_id=i.product_id, quantity=i.quantity) for i in request.items],
        )

    async def execute_validation(
        self, request: ValidateTransactionRequest
    ) -> ValidationResultResponse:
        """Execute the validate phase for an API request."""
        outcomes = await self.validate(
            request.store_id,
            [LineItem(product_id=i.product_id, quantity=i.quantity) for i in request.items],
        )
        return ValidationResultResponse(
            store_id=request.store_id,
            valid=True,
            items=[LineItemOutcomeResponse.from_outcome(o) for o in outcomes],
        )

    def to_response(self, result: SettlementResult) -> SettlementResponse:  # type: ignore[override]
        """Convert result to API response."""
        return SettlementResponse.from_result(result)
