"""Inventory ledger endpoints."""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from stockledger.api.dependencies import (
    get_add_stock_use_case,
    get_adjust_stock_use_case,
    get_app_settings,
    get_create_record_use_case,
    get_inv_store,
    get_refresh_snapshots_use_case,
    get_release_stock_use_case,
    get_remove_stock_use_case,
    get_reserve_stock_use_case,
    get_transfer_stock_use_case,
)
from stockledger.application.dto.requests import (
    AddStockRequest,
    AdjustStockRequest,
    CreateInventoryRecordRequest,
    RefreshSnapshotsRequest,
    RemoveStockRequest,
    ReserveStockRequest,
    TransferStockRequest,
)
from stockledger.application.dto.responses import (
    ErrorResponse,
    InventoryListResponse,
    InventoryRecordResponse,
    InventorySummaryResponse,
    MovementPageResponse,
    MovementResponse,
    SnapshotRefreshResponse,
    StockAlertsResponse,
    StockOperationResponse,
    TransferResponse,
)
from stockledger.application.use_cases import (
    AddStockUseCase,
    AdjustStockUseCase,
    CreateInventoryRecordUseCase,
    RefreshProductSnapshotsUseCase,
    ReleaseStockUseCase,
    RemoveStockUseCase,
    ReserveStockUseCase,
    TransferStockUseCase,
)
from stockledger.config import Settings
from stockledger.core.entities.inventory import MovementType
from stockledger.core.exceptions import InventoryRecordNotFoundError
from stockledger.core.interfaces import IInventoryStore

router = APIRouter(prefix="/api/inventory", tags=["inventory"])

MUTATION_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


@router.get("", response_model=InventoryListResponse)
async def list_inventory(
    store_id: str = Query(..., min_length=1),
    low_stock: bool = False,
    out_of_stock: bool = False,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: IInventoryStore = Depends(get_inv_store),
) -> InventoryListResponse:
    """Inventory overview for a store with stock level filters."""
    records = await store.list_records(
        store_id, low_stock=low_stock, out_of_stock=out_of_stock, limit=limit, offset=offset
    )
    total = await store.count_records(store_id, low_stock=low_stock, out_of_stock=out_of_stock)
    return InventoryListResponse(
        store_id=store_id,
        records=[InventoryRecordResponse.from_record(r) for r in records],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(records) < total,
    )


@router.get("/summary", response_model=InventorySummaryResponse)
async def get_inventory_summary(
    store_id: str = Query(..., min_length=1),
    store: IInventoryStore = Depends(get_inv_store),
) -> InventorySummaryResponse:
    """Aggregate stock figures for a store."""
    summary = await store.get_summary(store_id)
    return InventorySummaryResponse.from_summary(summary)


@router.get("/alerts", response_model=StockAlertsResponse)
async def get_stock_alerts(
    store_id: str = Query(..., min_length=1),
    store: IInventoryStore = Depends(get_inv_store),
) -> StockAlertsResponse:
    """Records with active alerts, grouped by kind."""
    records = await store.list_alert_records(store_id)

    low_stock = [
        r for r in records if r.alerts.low_stock.is_active and r.current_stock > 0
    ]
    out_of_stock = [r for r in records if r.alerts.out_of_stock.is_active]
    expiring = [r for r in records if r.alerts.expiry.is_active]

    return StockAlertsResponse(
        store_id=store_id,
        low_stock=[InventoryRecordResponse.from_record(r) for r in low_stock],
        out_of_stock=[InventoryRecordResponse.from_record(r) for r in out_of_stock],
        expiring=[InventoryRecordResponse.from_record(r) for r in expiring],
        total_alerts=len(low_stock) + len(out_of_stock) + len(expiring),
    )


@router.post(
    "/records",
    response_model=StockOperationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=MUTATION_ERRORS,
)
async def create_inventory_record(
    request: CreateInventoryRecordRequest,
    use_case: CreateInventoryRecordUseCase = Depends(get_create_record_use_case),
) -> StockOperationResponse:
    """Start tracking a catalog product in a store."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post("/add", response_model=StockOperationResponse, responses=MUTATION_ERRORS)
async def add_stock(
    request: AddStockRequest,
    use_case: AddStockUseCase = Depends(get_add_stock_use_case),
) -> StockOperationResponse:
    """Add stock (IN movement), creating the record for catalog products."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post("/remove", response_model=StockOperationResponse, responses=MUTATION_ERRORS)
async def remove_stock(
    request: RemoveStockRequest,
    use_case: RemoveStockUseCase = Depends(get_remove_stock_use_case),
) -> StockOperationResponse:
    """Remove stock (OUT or DAMAGE movement)."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post("/adjust", response_model=StockOperationResponse, responses=MUTATION_ERRORS)
async def adjust_stock(
    request: AdjustStockRequest,
    use_case: AdjustStockUseCase = Depends(get_adjust_stock_use_case),
) -> StockOperationResponse:
    """Set stock to a counted value (ADJUSTMENT movement)."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post("/reserve", response_model=StockOperationResponse, responses=MUTATION_ERRORS)
async def reserve_stock(
    request: ReserveStockRequest,
    use_case: ReserveStockUseCase = Depends(get_reserve_stock_use_case),
) -> StockOperationResponse:
    """Reserve available units for a pending order."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post("/release", response_model=StockOperationResponse, responses=MUTATION_ERRORS)
async def release_stock(
    request: ReserveStockRequest,
    use_case: ReleaseStockUseCase = Depends(get_release_stock_use_case),
) -> StockOperationResponse:
    """Release reserved units."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post("/transfer", response_model=TransferResponse, responses=MUTATION_ERRORS)
async def transfer_stock(
    request: TransferStockRequest,
    use_case: TransferStockUseCase = Depends(get_transfer_stock_use_case),
) -> TransferResponse:
    """Move stock between two stores."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post("/snapshots/refresh", response_model=SnapshotRefreshResponse)
async def refresh_snapshots(
    request: RefreshSnapshotsRequest,
    use_case: RefreshProductSnapshotsUseCase = Depends(get_refresh_snapshots_use_case),
) -> SnapshotRefreshResponse:
    """Re-copy catalog product fields onto inventory records."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get(
    "/{store_id}/{product_id}",
    response_model=InventoryRecordResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_inventory_record(
    store_id: str,
    product_id: str,
    store: IInventoryStore = Depends(get_inv_store),
) -> InventoryRecordResponse:
    """Get the inventory record of a product in a store."""
    record = await store.get_record_by_key(product_id, store_id)
    if record is None:
        raise InventoryRecordNotFoundError(product_id, store_id)
    return InventoryRecordResponse.from_record(record)


@router.get(
    "/{store_id}/{product_id}/movements",
    response_model=MovementPageResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_movements(
    store_id: str,
    product_id: str,
    movement_type: MovementType | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    order: Literal["asc", "desc"] = "desc",
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: IInventoryStore = Depends(get_inv_store),
    settings: Settings = Depends(get_app_settings),
) -> MovementPageResponse:
    """Movement history of a record, newest first by default."""
    record = await store.get_record_by_key(product_id, store_id)
    if record is None:
        raise InventoryRecordNotFoundError(product_id, store_id)

    limit = limit or settings.ledger.movement_page_size
    movements = await store.get_movements(
        record.id,  # type: ignore[arg-type]
        movement_type=movement_type,
        start=start,
        end=end,
        newest_first=order == "desc",
        limit=limit,
        offset=offset,
    )
    total = await store.count_movements(
        record.id,  # type: ignore[arg-type]
        movement_type=movement_type,
        start=start,
        end=end,
    )
    return MovementPageResponse(
        product_id=product_id,
        store_id=store_id,
        movements=[MovementResponse.from_entry(m) for m in movements],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(movements) < total,
    )
