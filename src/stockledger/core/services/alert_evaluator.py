"""
Alert evaluation for inventory records.

Pure functions: the evaluator reads a record and returns the next alert
state without touching the record. A flag only changes (and only gets a new
timestamp) when its condition flips.
"""

import math
from datetime import UTC, date, datetime, time

from stockledger.core.entities.inventory import AlertStatus, InventoryRecord, RecordAlerts

DEFAULT_EXPIRY_WARNING_DAYS = 7


def days_until_expiry(expiry_date: date, now: datetime) -> int:
    """Whole days until expiry, rounded up. Zero or negative once passed."""
    expires_at = datetime.combine(expiry_date, time.min, tzinfo=UTC)
    return math.ceil((expires_at - now).total_seconds() / 86400)


def is_expiring(expiry_date: date | None, now: datetime, warning_days: int) -> bool:
    if expiry_date is None:
        return False
    remaining = days_until_expiry(expiry_date, now)
    return 0 < remaining <= warning_days


def _transition(status: AlertStatus, condition: bool, now: datetime) -> AlertStatus:
    if condition and not status.is_active:
        return AlertStatus(is_active=True, triggered_at=now, resolved_at=status.resolved_at)
    if not condition and status.is_active:
        return AlertStatus(is_active=False, triggered_at=status.triggered_at, resolved_at=now)
    return status.model_copy()


def evaluate_alerts(
    record: InventoryRecord,
    now: datetime | None = None,
    warning_days: int = DEFAULT_EXPIRY_WARNING_DAYS,
) -> RecordAlerts:
    """
    Compute the alert state for a record's current stock.

    Low-stock and out-of-stock are independent: an empty shelf raises both.

    Args:
        record: Record to evaluate
        now: Evaluation time (defaults to current UTC time)
        warning_days: Days ahead of expiry at which the expiry alert fires

    Returns:
        New RecordAlerts value
    """
    now = now or datetime.now(UTC)
    stock = record.current_stock
    current = record.alerts

    return RecordAlerts(
        low_stock=_transition(current.low_stock, stock <= record.reorder_point, now),
        out_of_stock=_transition(current.out_of_stock, stock <= 0, now),
        expiry=_transition(
            current.expiry,
            is_expiring(record.product_snapshot.expiry_date, now, warning_days),
            now,
        ),
    )
