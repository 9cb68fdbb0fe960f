"""Inventory ledger domain entities."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utcnow() -> datetime:
    return datetime.now(UTC)


class MovementType(str, Enum):
    """Types of stock movements."""

    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"
    RETURN = "return"
    DAMAGE = "damage"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"


# Movement types each operation may record
INCOMING_TYPES = frozenset({MovementType.IN, MovementType.RETURN, MovementType.TRANSFER_IN})
OUTGOING_TYPES = frozenset({MovementType.OUT, MovementType.DAMAGE, MovementType.TRANSFER_OUT})


class ReferenceType(str, Enum):
    """What caused a movement."""

    SALE = "sale"
    PURCHASE = "purchase"
    ADJUSTMENT = "adjustment"
    RETURN = "return"
    DAMAGE = "damage"
    TRANSFER = "transfer"


class ProductSnapshot(BaseModel):
    """Copy of catalog product fields taken at last sync.

    May drift from the catalog until refreshed.
    """

    product_name: str | None = None
    barcode: str | None = None
    description: str | None = None
    category: str | None = None
    mrp: float | None = None
    selling_price: float = 0.0
    cost_price: float = 0.0
    unit: str = "pcs"
    is_active: bool = True
    is_returnable: bool = True
    expiry_date: date | None = None
    synced_at: datetime | None = None


class AlertStatus(BaseModel):
    """Trigger/resolve state of a single alert."""

    is_active: bool = False
    triggered_at: datetime | None = None
    resolved_at: datetime | None = None


class RecordAlerts(BaseModel):
    """Derived alert flags of an inventory record."""

    low_stock: AlertStatus = Field(default_factory=AlertStatus)
    out_of_stock: AlertStatus = Field(default_factory=AlertStatus)
    expiry: AlertStatus = Field(default_factory=AlertStatus)

    @property
    def any_active(self) -> bool:
        return self.low_stock.is_active or self.out_of_stock.is_active or self.expiry.is_active


class MovementEntry(BaseModel):
    """A single physical stock change. Never edited once appended."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    record_id: int | None = None  # FK → inventory_records.id
    type: MovementType
    quantity: int  # signed delta
    reason: str
    reference_id: str | None = None
    reference_type: ReferenceType | None = None
    performed_by: str
    unit_cost: float | None = None
    notes: str | None = None
    timestamp: datetime = Field(default_factory=utcnow)


class InventoryRecord(BaseModel):
    """Stock position of one product in one store."""

    id: int | None = None
    product_id: str = Field(..., min_length=1)
    store_id: str = Field(..., min_length=1)

    current_stock: int = 0
    reserved_stock: int = Field(default=0, ge=0)
    available_stock: int = 0  # derived

    reorder_point: int = Field(default=10, ge=0)
    reorder_quantity: int = Field(default=50, ge=0)
    max_stock_level: int = Field(default=1000, ge=0)

    product_snapshot: ProductSnapshot = Field(default_factory=ProductSnapshot)
    alerts: RecordAlerts = Field(default_factory=RecordAlerts)
    movements: list[MovementEntry] = Field(default_factory=list)

    average_cost: float = 0.0
    last_cost: float = 0.0
    total_value: float = 0.0  # derived

    last_restocked: datetime | None = None
    last_sold: datetime | None = None
    last_updated_by: str | None = None

    version: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def compute_derived(self) -> "InventoryRecord":
        """Compute available_stock and total_value from stock and cost."""
        self.available_stock = max(0, self.current_stock - self.reserved_stock)
        self.total_value = self.current_stock * self.unit_cost
        return self

    @property
    def unit_cost(self) -> float:
        """Cost used for valuation: average cost once known, else catalog cost."""
        if self.average_cost > 0:
            return self.average_cost
        return self.product_snapshot.cost_price

    @property
    def pending_movements(self) -> list[MovementEntry]:
        """Movements appended in memory but not yet persisted."""
        return [m for m in self.movements if m.id is None]

    @property
    def key(self) -> tuple[str, str]:
        return (self.product_id, self.store_id)


class InventorySummary(BaseModel):
    """Aggregate stock figures for one store."""

    store_id: str
    total_records: int = 0
    total_current_stock: int = 0
    total_stock_value: float = 0.0
    average_stock_level: float = 0.0
    low_stock_count: int = 0
    out_of_stock_count: int = 0
    expiring_count: int = 0
