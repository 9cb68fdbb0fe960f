"""Transfer Stock Use Case: move units from one store to another."""

import uuid
from dataclasses import dataclass

from stockledger.application.dto.requests import TransferStockRequest
from stockledger.application.dto.responses import (
    InventoryRecordResponse,
    MovementResponse,
    TransferResponse,
)
from stockledger.application.use_cases.stock_operation import StockOperationUseCase
from stockledger.config import get_logger
from stockledger.core.entities.inventory import (
    InventoryRecord,
    MovementEntry,
    MovementType,
    ReferenceType,
)
from stockledger.core.exceptions import (
    InsufficientAvailableStockError,
    InvalidQuantityError,
    LedgerError,
    ValidationError,
)

logger = get_logger(__name__)


def new_transfer_reference() -> str:
    return f"TRANSFER-{uuid.uuid4().hex[:12].upper()}"


@dataclass
class TransferStockResult:
    """Result of a completed transfer."""

    reference_id: str
    quantity: int
    source: InventoryRecord
    target: InventoryRecord
    outgoing: MovementEntry
    incoming: MovementEntry
    target_created: bool = False


class TransferStockUseCase(StockOperationUseCase):
    """
    Remove stock from the source store and add it to the target store.

    The two records are saved separately. If the target step fails after
    the source was debited, the failure is logged with the transfer
    reference and raised; nothing is compensated automatically.
    """

    async def execute(self, request: TransferStockRequest) -> TransferStockResult:
        """Execute transfer stock use case."""
        quantity = request.quantity
        if isinstance(quantity, bool) or quantity <= 0:
            raise InvalidQuantityError(quantity, "transfer_stock")
        if request.source_store_id == request.target_store_id:
            raise ValidationError(
                "target_store_id",
                "Source and target store must differ",
                request.target_store_id,
            )

        reference_id = new_transfer_reference()
        ledger = self._get_ledger()
        logger.info(
            "stock_transfer_started",
            reference_id=reference_id,
            product_id=request.product_id,
            source_store_id=request.source_store_id,
            target_store_id=request.target_store_id,
            quantity=quantity,
        )

        def debit(record: InventoryRecord) -> MovementEntry:
            # Checked on every attempt; reserved units never move.
            if record.available_stock < quantity:
                raise InsufficientAvailableStockError(
                    record.product_id, record.store_id, quantity, record.available_stock
                )
            return ledger.remove_stock(
                record,
                quantity,
                reason=f"Transfer to store {request.target_store_id}: {request.reason}",
                performed_by=request.performed_by,
                reference_id=reference_id,
                reference_type=ReferenceType.TRANSFER,
                movement_type=MovementType.TRANSFER_OUT,
                allow_negative=False,
            )

        def credit(record: InventoryRecord) -> MovementEntry:
            return ledger.add_stock(
                record,
                quantity,
                reason=f"Transfer from store {request.source_store_id}: {request.reason}",
                performed_by=request.performed_by,
                reference_id=reference_id,
                reference_type=ReferenceType.TRANSFER,
                movement_type=MovementType.TRANSFER_IN,
            )

        async def create_target() -> InventoryRecord:
            catalog = await self._get_product_catalog()
            product = await catalog.get_product(request.product_id)
            return self._build_record(request.product_id, request.target_store_id, product)

        saved_source, outgoing, _ = await self._apply(
            request.product_id, request.source_store_id, debit
        )

        try:
            saved_target, incoming, created = await self._apply(
                request.product_id, request.target_store_id, credit, on_missing=create_target
            )
        except LedgerError as e:
            logger.error(
                "stock_transfer_incomplete",
                reference_id=reference_id,
                product_id=request.product_id,
                source_store_id=request.source_store_id,
                target_store_id=request.target_store_id,
                quantity=quantity,
                error_code=e.code,
                error=e.message,
            )
            raise

        logger.info(
            "stock_transfer_complete",
            reference_id=reference_id,
            source_stock=saved_source.current_stock,
            target_stock=saved_target.current_stock,
            target_created=created,
        )
        return TransferStockResult(
            reference_id=reference_id,
            quantity=quantity,
            source=saved_source,
            target=saved_target,
            outgoing=outgoing,
            incoming=incoming,
            target_created=created,
        )

    def to_response(self, result: TransferStockResult) -> TransferResponse:  # type: ignore[override]
        """Convert result to API response."""
        return TransferResponse(
            reference_id=result.reference_id,
            quantity=result.quantity,
            source=InventoryRecordResponse.from_record(result.source),
            target=InventoryRecordResponse.from_record(result.target),
            outgoing=MovementResponse.from_entry(result.outgoing),
            incoming=MovementResponse.from_entry(result.incoming),
            target_created=result.target_created,
        )
