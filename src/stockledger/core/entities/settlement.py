"""Sale/return settlement entities."""

from enum import Enum

from pydantic import BaseModel, Field


class LineItem(BaseModel):
    """A product and quantity on a bill."""

    product_id: str = Field(..., min_length=1)
    quantity: int


class LineItemStatus(str, Enum):
    """What happened to one line item during settlement."""

    APPLIED = "applied"
    AVAILABLE = "available"  # validation only: enough stock to sell
    ALREADY_APPLIED = "already_applied"  # retry of a settlement that already moved this item
    UNTRACKED = "untracked"  # no inventory record for the product
    FAILED = "failed"


class LineItemOutcome(BaseModel):
    """Result of settling one line item."""

    product_id: str
    quantity: int
    status: LineItemStatus
    movement_id: int | None = None
    remaining_stock: int | None = None
    error_code: str | None = None
    error_message: str | None = None


class SettlementResult(BaseModel):
    """Result of settling a sale or return against inventory."""

    transaction_id: str
    store_id: str
    settled: bool = True
    outcomes: list[LineItemOutcome] = Field(default_factory=list)

    def _with_status(self, status: LineItemStatus) -> list[LineItemOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def applied(self) -> list[LineItemOutcome]:
        return self._with_status(LineItemStatus.APPLIED)

    @property
    def already_applied(self) -> list[LineItemOutcome]:
        return self._with_status(LineItemStatus.ALREADY_APPLIED)

    @property
    def untracked(self) -> list[LineItemOutcome]:
        return self._with_status(LineItemStatus.UNTRACKED)

    @property
    def failed(self) -> list[LineItemOutcome]:
        return self._with_status(LineItemStatus.FAILED)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)
