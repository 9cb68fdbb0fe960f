"""Domain entities."""

from stockledger.core.entities.inventory import (
    INCOMING_TYPES,
    OUTGOING_TYPES,
    AlertStatus,
    InventoryRecord,
    InventorySummary,
    MovementEntry,
    MovementType,
    ProductSnapshot,
    RecordAlerts,
    ReferenceType,
)
from stockledger.core.entities.product import ProductInfo
from stockledger.core.entities.settlement import (
    LineItem,
    LineItemOutcome,
    LineItemStatus,
    SettlementResult,
)

__all__ = [
    "INCOMING_TYPES",
    "OUTGOING_TYPES",
    "AlertStatus",
    "InventoryRecord",
    "InventorySummary",
    "MovementEntry",
    "MovementType",
    "ProductSnapshot",
    "RecordAlerts",
    "ReferenceType",
    "ProductInfo",
    "LineItem",
    "LineItemOutcome",
    "LineItemStatus",
    "SettlementResult",
]
