"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.

Quantities are plain integers here; the ledger rejects non-positive
values with INVALID_QUANTITY so every entry point reports the same error.
"""

from pydantic import BaseModel, Field

from stockledger.core.entities.inventory import MovementType


class CreateInventoryRecordRequest(BaseModel):
    """Request to create an inventory record for a catalog product."""

    product_id: str = Field(..., min_length=1, description="Catalog product ID")
    store_id: str = Field(..., min_length=1, description="Store ID")
    reorder_point: int | None = Field(
        default=None,
        ge=0,
        description="Low stock threshold (defaults to catalog or ledger settings)",
    )
    reorder_quantity: int | None = Field(default=None, ge=0, description="Suggested reorder size")
    max_stock_level: int | None = Field(default=None, ge=0, description="Maximum stock level")


class AddStockRequest(BaseModel):
    """Request to add stock (IN movement)."""

    product_id: str = Field(..., min_length=1, description="Catalog product ID")
    store_id: str = Field(..., min_length=1, description="Store ID")
    quantity: int = Field(..., description="Units to add")
    reason: str = Field(default="Stock received", description="Reason for the movement")
    performed_by: str = Field(..., min_length=1, description="Acting user ID")
    reference_id: str | None = Field(default=None, description="Purchase or document reference")
    unit_cost: float | None = Field(
        default=None,
        ge=0,
        description="Cost per unit; updates the weighted average cost",
    )
    notes: str | None = Field(default=None, description="Additional notes")


class RemoveStockRequest(BaseModel):
    """Request to remove stock (OUT or DAMAGE movement)."""

    product_id: str = Field(..., min_length=1, description="Catalog product ID")
    store_id: str = Field(..., min_length=1, description="Store ID")
    quantity: int = Field(..., description="Units to remove")
    reason: str = Field(default="Stock removed", description="Reason for the movement")
    performed_by: str = Field(..., min_length=1, description="Acting user ID")
    movement_type: MovementType = Field(
        default=MovementType.OUT,
        description="out or damage",
    )
    reference_id: str | None = Field(default=None, description="Reference number")
    notes: str | None = Field(default=None, description="Additional notes")


class AdjustStockRequest(BaseModel):
    """Request to set stock to a counted value."""

    product_id: str = Field(..., min_length=1, description="Catalog product ID")
    store_id: str = Field(..., min_length=1, description="Store ID")
    new_quantity: int = Field(..., description="Counted units on hand")
    reason: str = Field(default="Stock count", description="Reason for the adjustment")
    performed_by: str = Field(..., min_length=1, description="Acting user ID")
    reference_id: str | None = Field(default=None, description="Count sheet reference")
    notes: str | None = Field(default=None, description="Additional notes")


class ReserveStockRequest(BaseModel):
    """Request to reserve or release units for a pending order."""

    product_id: str = Field(..., min_length=1, description="Catalog product ID")
    store_id: str = Field(..., min_length=1, description="Store ID")
    quantity: int = Field(..., description="Units to reserve or release")


class TransferStockRequest(BaseModel):
    """Request to move stock between two stores."""

    product_id: str = Field(..., min_length=1, description="Catalog product ID")
    source_store_id: str = Field(..., min_length=1, description="Store giving the stock")
    target_store_id: str = Field(..., min_length=1, description="Store receiving the stock")
    quantity: int = Field(..., description="Units to transfer")
    reason: str = Field(default="Stock transfer", description="Reason for the transfer")
    performed_by: str = Field(..., min_length=1, description="Acting user ID")


class LineItemRequest(BaseModel):
    """One product line of a sale or return."""

    product_id: str = Field(..., min_length=1, description="Catalog product ID")
    quantity: int = Field(..., description="Units sold or returned")


class ValidateTransactionRequest(BaseModel):
    """Request to check stock availability before a sale is created."""

    store_id: str = Field(..., min_length=1, description="Store ID")
    items: list[LineItemRequest] = Field(..., min_length=1, description="Line items")


class SettleTransactionRequest(BaseModel):
    """Request to deduct stock for a durably created sale."""

    store_id: str = Field(..., min_length=1, description="Store ID")
    bill_number: str = Field(..., min_length=1, description="Human-readable bill number")
    performed_by: str = Field(..., min_length=1, description="Cashier or user ID")
    items: list[LineItemRequest] = Field(..., min_length=1, description="Line items")


class ProcessReturnRequest(BaseModel):
    """Request to restock items returned against a sale."""

    store_id: str = Field(..., min_length=1, description="Store ID")
    bill_number: str = Field(..., min_length=1, description="Bill number of the original sale")
    performed_by: str = Field(..., min_length=1, description="Cashier or user ID")
    items: list[LineItemRequest] = Field(..., min_length=1, description="Returned items")


class RefreshSnapshotsRequest(BaseModel):
    """Request to re-copy catalog fields onto inventory records."""

    store_id: str = Field(..., min_length=1, description="Store ID")
    product_ids: list[str] | None = Field(
        default=None,
        description="Limit the refresh to these products (default: whole store)",
    )
