"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from stockledger.core.entities.inventory import (
    AlertStatus,
    InventoryRecord,
    InventorySummary,
    MovementEntry,
)
from stockledger.core.entities.settlement import LineItemOutcome, SettlementResult


class AlertStatusResponse(BaseModel):
    """State of one alert flag."""

    is_active: bool
    triggered_at: datetime | None = None
    resolved_at: datetime | None = None

    @classmethod
    def from_status(cls, alert: AlertStatus) -> "AlertStatusResponse":
        return cls(
            is_active=alert.is_active,
            triggered_at=alert.triggered_at,
            resolved_at=alert.resolved_at,
        )


class AlertsResponse(BaseModel):
    """Alert flags of an inventory record."""

    low_stock: AlertStatusResponse
    out_of_stock: AlertStatusResponse
    expiry: AlertStatusResponse


class ProductSnapshotResponse(BaseModel):
    """Catalog fields copied onto the record."""

    product_name: str | None = None
    barcode: str | None = None
    category: str | None = None
    unit: str = "pcs"
    mrp: float | None = None
    selling_price: float = 0.0
    cost_price: float = 0.0
    expiry_date: date | None = None
    synced_at: datetime | None = None


class MovementResponse(BaseModel):
    """Stock movement entry."""

    id: int | None = Field(default=None, description="Movement ID")
    type: str = Field(..., description="Movement type")
    quantity: int = Field(..., description="Signed change in current stock")
    reason: str
    reference_id: str | None = None
    reference_type: str | None = None
    performed_by: str
    unit_cost: float | None = None
    notes: str | None = None
    timestamp: datetime

    @classmethod
    def from_entry(cls, entry: MovementEntry) -> "MovementResponse":
        return cls(
            id=entry.id,
            type=entry.type.value,
            quantity=entry.quantity,
            reason=entry.reason,
            reference_id=entry.reference_id,
            reference_type=entry.reference_type.value if entry.reference_type else None,
            performed_by=entry.performed_by,
            unit_cost=entry.unit_cost,
            notes=entry.notes,
            timestamp=entry.timestamp,
        )


class InventoryRecordResponse(BaseModel):
    """Inventory record of one product in one store."""

    id: int | None = Field(default=None, description="Record ID")
    product_id: str
    store_id: str
    current_stock: int
    reserved_stock: int
    available_stock: int
    reorder_point: int
    reorder_quantity: int
    max_stock_level: int
    average_cost: float
    last_cost: float
    total_value: float
    product: ProductSnapshotResponse
    alerts: AlertsResponse
    last_restocked: datetime | None = None
    last_sold: datetime | None = None
    last_updated_by: str | None = None
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: InventoryRecord) -> "InventoryRecordResponse":
        snapshot = record.product_snapshot
        return cls(
            id=record.id,
            product_id=record.product_id,
            store_id=record.store_id,
            current_stock=record.current_stock,
            reserved_stock=record.reserved_stock,
            available_stock=record.available_stock,
            reorder_point=record.reorder_point,
            reorder_quantity=record.reorder_quantity,
            max_stock_level=record.max_stock_level,
            average_cost=record.average_cost,
            last_cost=record.last_cost,
            total_value=record.total_value,
            product=ProductSnapshotResponse(
                product_name=snapshot.product_name,
                barcode=snapshot.barcode,
                category=snapshot.category,
                unit=snapshot.unit,
                mrp=snapshot.mrp,
                selling_price=snapshot.selling_price,
                cost_price=snapshot.cost_price,
                expiry_date=snapshot.expiry_date,
                synced_at=snapshot.synced_at,
            ),
            alerts=AlertsResponse(
                low_stock=AlertStatusResponse.from_status(record.alerts.low_stock),
                out_of_stock=AlertStatusResponse.from_status(record.alerts.out_of_stock),
                expiry=AlertStatusResponse.from_status(record.alerts.expiry),
            ),
            last_restocked=record.last_restocked,
            last_sold=record.last_sold,
            last_updated_by=record.last_updated_by,
            version=record.version,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class StockOperationResponse(BaseModel):
    """Result of a stock mutation."""

    record: InventoryRecordResponse
    movement: MovementResponse | None = Field(
        default=None,
        description="Recorded movement (absent for reservations)",
    )
    created: bool = Field(default=False, description="True if the record was created")


class PaginatedResponse(BaseModel):
    """Base for paginated responses."""

    total: int
    limit: int
    offset: int
    has_more: bool


class InventoryListResponse(PaginatedResponse):
    """Inventory overview of a store."""

    store_id: str
    records: list[InventoryRecordResponse]


class MovementPageResponse(PaginatedResponse):
    """Movement history page of a record."""

    product_id: str
    store_id: str
    movements: list[MovementResponse]


class StockAlertsResponse(BaseModel):
    """Records with active alerts, grouped by alert kind."""

    store_id: str
    low_stock: list[InventoryRecordResponse]
    out_of_stock: list[InventoryRecordResponse]
    expiring: list[InventoryRecordResponse]
    total_alerts: int


class InventorySummaryResponse(BaseModel):
    """Aggregate stock figures for a store."""

    store_id: str
    total_records: int
    total_current_stock: int
    total_stock_value: float
    average_stock_level: float
    low_stock_count: int
    out_of_stock_count: int
    expiring_count: int

    @classmethod
    def from_summary(cls, summary: InventorySummary) -> "InventorySummaryResponse":
        return cls(**summary.model_dump())


class TransferResponse(BaseModel):
    """Result of a stock transfer."""

    reference_id: str = Field(..., description="Shared TRANSFER-<hex> reference")
    quantity: int
    source: InventoryRecordResponse
    target: InventoryRecordResponse
    outgoing: MovementResponse
    incoming: MovementResponse
    target_created: bool = False


class LineItemOutcomeResponse(BaseModel):
    """Outcome of one line item during settlement or return."""

    product_id: str
    quantity: int
    status: str
    movement_id: int | None = None
    remaining_stock: int | None = None
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def from_outcome(cls, outcome: LineItemOutcome) -> "LineItemOutcomeResponse":
        return cls(
            product_id=outcome.product_id,
            quantity=outcome.quantity,
            status=outcome.status.value,
            movement_id=outcome.movement_id,
            remaining_stock=outcome.remaining_stock,
            error_code=outcome.error_code,
            error_message=outcome.error_message,
        )


class SettlementResponse(BaseModel):
    """Result of settling or returning a transaction."""

    transaction_id: str
    store_id: str
    settled: bool
    applied: int
    already_applied: int
    untracked: int
    failed: int
    items: list[LineItemOutcomeResponse]

    @classmethod
    def from_result(cls, result: SettlementResult) -> "SettlementResponse":
        return cls(
            transaction_id=result.transaction_id,
            store_id=result.store_id,
            settled=result.settled,
            applied=len(result.applied),
            already_applied=len(result.already_applied),
            untracked=len(result.untracked),
            failed=len(result.failed),
            items=[LineItemOutcomeResponse.from_outcome(o) for o in result.outcomes],
        )


class ValidationResultResponse(BaseModel):
    """Result of a pre-sale availability check."""

    store_id: str
    valid: bool = True
    items: list[LineItemOutcomeResponse]


class SnapshotRefreshResponse(BaseModel):
    """Result of a product snapshot refresh."""

    store_id: str
    refreshed: int
    missing_products: list[str] = Field(default_factory=list)
    untracked_products: list[str] = Field(
        default_factory=list, description="In the catalog but without a record in this store"
    )
    failed_products: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: bool | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
