"""
Stock Ledger Service.

The only sanctioned way to change stock counters on an InventoryRecord.
Every operation validates first and mutates second, so a rejected call
leaves the record untouched. Physical changes append exactly one
MovementEntry; reservations only move reserved_stock.

Persistence is not done here; use cases save the record afterwards.
"""

from datetime import datetime

from stockledger.config import get_logger
from stockledger.core.entities.inventory import (
    INCOMING_TYPES,
    OUTGOING_TYPES,
    InventoryRecord,
    MovementEntry,
    MovementType,
    ReferenceType,
    utcnow,
)
from stockledger.core.exceptions import (
    InsufficientAvailableStockError,
    InsufficientStockError,
    InvalidQuantityError,
    ValidationError,
)
from stockledger.core.services.alert_evaluator import (
    DEFAULT_EXPIRY_WARNING_DAYS,
    evaluate_alerts,
)

logger = get_logger(__name__)


def _require_quantity(quantity: int, operation: str, allow_zero: bool = False) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(quantity, operation, "must be a whole number")
    if quantity < 0 or (quantity == 0 and not allow_zero):
        requirement = "cannot be negative" if allow_zero else "must be positive"
        raise InvalidQuantityError(quantity, operation, requirement)


def _require_actor(performed_by: str | None) -> None:
    if not performed_by or not performed_by.strip():
        raise ValidationError("performed_by", "Acting user is required")


class StockLedgerService:
    """Applies stock mutations to inventory records."""

    def __init__(
        self,
        expiry_warning_days: int = DEFAULT_EXPIRY_WARNING_DAYS,
        allow_negative_stock: bool = False,
    ) -> None:
        self._expiry_warning_days = expiry_warning_days
        self._allow_negative_stock = allow_negative_stock

    @property
    def allow_negative_stock(self) -> bool:
        return self._allow_negative_stock

    def refresh(self, record: InventoryRecord, now: datetime | None = None) -> InventoryRecord:
        """Recompute available stock, valuation and alerts."""
        now = now or utcnow()
        record.available_stock = max(0, record.current_stock - record.reserved_stock)
        record.total_value = record.current_stock * record.unit_cost

        previous = record.alerts
        record.alerts = evaluate_alerts(record, now, self._expiry_warning_days)
        for name in ("low_stock", "out_of_stock", "expiry"):
            was_active = getattr(previous, name).is_active
            is_active = getattr(record.alerts, name).is_active
            if was_active != is_active:
                logger.info(
                    "stock_alert_triggered" if is_active else "stock_alert_resolved",
                    alert=name,
                    product_id=record.product_id,
                    store_id=record.store_id,
                    current_stock=record.current_stock,
                )
        return record

    def add_stock(
        self,
        record: InventoryRecord,
        quantity: int,
        reason: str,
        performed_by: str,
        reference_id: str | None = None,
        reference_type: ReferenceType | None = None,
        movement_type: MovementType = MovementType.IN,
        unit_cost: float | None = None,
        notes: str | None = None,
    ) -> MovementEntry:
        """Increase current stock. Costed receipts update the weighted average cost."""
        _require_quantity(quantity, "add_stock")
        _require_actor(performed_by)
        if movement_type not in INCOMING_TYPES:
            raise ValidationError("movement_type", "Not an incoming movement type", movement_type)
        if unit_cost is not None and unit_cost < 0:
            raise ValidationError("unit_cost", "Unit cost cannot be negative", unit_cost)

        now = utcnow()
        if unit_cost is not None:
            on_hand = max(0, record.current_stock)
            total_qty = on_hand + quantity
            record.average_cost = (on_hand * record.unit_cost + quantity * unit_cost) / total_qty
            record.last_cost = unit_cost

        record.current_stock += quantity
        record.last_restocked = now
        return self._append(
            record,
            now,
            movement_type=movement_type,
            quantity=quantity,
            reason=reason,
            performed_by=performed_by,
            reference_id=reference_id,
            reference_type=reference_type,
            unit_cost=unit_cost,
            notes=notes,
        )

    def remove_stock(
        self,
        record: InventoryRecord,
        quantity: int,
        reason: str,
        performed_by: str,
        reference_id: str | None = None,
        reference_type: ReferenceType | None = None,
        movement_type: MovementType = MovementType.OUT,
        allow_negative: bool | None = None,
        notes: str | None = None,
    ) -> MovementEntry:
        """
        Decrease current stock.

        Fails with InsufficientStockError when stock would go below zero,
        unless negative stock is allowed for this call or by configuration.
        """
        _require_quantity(quantity, "remove_stock")
        _require_actor(performed_by)
        if movement_type not in OUTGOING_TYPES:
            raise ValidationError("movement_type", "Not an outgoing movement type", movement_type)

        if allow_negative is None:
            allow_negative = self._allow_negative_stock
        if not allow_negative and record.current_stock < quantity:
            raise InsufficientStockError(
                record.product_id, record.store_id, quantity, record.current_stock
            )

        now = utcnow()
        record.current_stock -= quantity
        record.last_sold = now
        return self._append(
            record,
            now,
            movement_type=movement_type,
            quantity=-quantity,
            reason=reason,
            performed_by=performed_by,
            reference_id=reference_id,
            reference_type=reference_type,
            unit_cost=record.unit_cost,
            notes=notes,
        )

    def adjust_stock(
        self,
        record: InventoryRecord,
        new_quantity: int,
        reason: str,
        performed_by: str,
        reference_id: str | None = None,
        notes: str | None = None,
    ) -> MovementEntry:
        """Set current stock to a counted value, logging the signed delta."""
        _require_quantity(new_quantity, "adjust_stock", allow_zero=True)
        _require_actor(performed_by)

        now = utcnow()
        delta = new_quantity - record.current_stock
        record.current_stock = new_quantity
        return self._append(
            record,
            now,
            movement_type=MovementType.ADJUSTMENT,
            quantity=delta,
            reason=reason,
            performed_by=performed_by,
            reference_id=reference_id,
            reference_type=ReferenceType.ADJUSTMENT,
            notes=notes,
        )

    def reserve_stock(self, record: InventoryRecord, quantity: int) -> InventoryRecord:
        """Hold units for a pending order. No movement is recorded."""
        _require_quantity(quantity, "reserve_stock")
        if record.available_stock < quantity:
            raise InsufficientAvailableStockError(
                record.product_id, record.store_id, quantity, record.available_stock
            )

        record.reserved_stock += quantity
        record.updated_at = utcnow()
        return self.refresh(record, record.updated_at)

    def release_reserved_stock(self, record: InventoryRecord, quantity: int) -> InventoryRecord:
        """Drop a hold. Releasing more than is reserved clears the reservation."""
        _require_quantity(quantity, "release_reserved_stock")

        record.reserved_stock -= min(quantity, record.reserved_stock)
        record.updated_at = utcnow()
        return self.refresh(record, record.updated_at)

    def _append(
        self,
        record: InventoryRecord,
        now: datetime,
        *,
        movement_type: MovementType,
        quantity: int,
        reason: str,
        performed_by: str,
        reference_id: str | None,
        reference_type: ReferenceType | None,
        unit_cost: float | None = None,
        notes: str | None = None,
    ) -> MovementEntry:
        movement = MovementEntry(
            record_id=record.id,
            type=movement_type,
            quantity=quantity,
            reason=reason,
            reference_id=reference_id,
            reference_type=reference_type,
            performed_by=performed_by,
            unit_cost=unit_cost,
            notes=notes,
            timestamp=now,
        )
        record.movements.append(movement)
        record.last_updated_by = performed_by
        record.updated_at = now
        self.refresh(record, now)
        return movement
