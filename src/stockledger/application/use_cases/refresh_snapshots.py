"""Refresh Product Snapshots Use Case: re-copy catalog fields onto records."""

from collections.abc import Callable
from dataclasses import dataclass, field

from stockledger.application.dto.requests import RefreshSnapshotsRequest
from stockledger.application.dto.responses import SnapshotRefreshResponse
from stockledger.application.use_cases.stock_operation import StockOperationUseCase
from stockledger.config import get_logger
from stockledger.core.entities.inventory import InventoryRecord, utcnow
from stockledger.core.entities.product import ProductInfo
from stockledger.core.exceptions import InventoryRecordNotFoundError, LedgerError

logger = get_logger(__name__)

PAGE_SIZE = 200


@dataclass
class SnapshotRefreshResult:
    """Result of a snapshot refresh run."""

    store_id: str
    refreshed: int = 0
    missing_products: list[str] = field(default_factory=list)
    untracked_products: list[str] = field(default_factory=list)
    failed_products: list[str] = field(default_factory=list)


class RefreshProductSnapshotsUseCase(StockOperationUseCase):
    """
    Maintenance job for the denormalized product snapshot.

    Records keep a copy of catalog fields that goes stale when the catalog
    changes. Stock counters are not touched, but alerts are re-evaluated
    because the expiry date may have changed.
    """

    async def execute(self, request: RefreshSnapshotsRequest) -> SnapshotRefreshResult:
        store = await self._get_inventory_store()
        catalog = await self._get_product_catalog()
        result = SnapshotRefreshResult(store_id=request.store_id)

        product_ids = request.product_ids
        if product_ids is None:
            product_ids = []
            offset = 0
            while True:
                page = await store.list_records(request.store_id, limit=PAGE_SIZE, offset=offset)
                product_ids.extend(r.product_id for r in page)
                if len(page) < PAGE_SIZE:
                    break
                offset += PAGE_SIZE

        for product_id in product_ids:
            product = await catalog.get_product(product_id)
            if product is None:
                logger.warning(
                    "snapshot_product_missing",
                    product_id=product_id,
                    store_id=request.store_id,
                )
                result.missing_products.append(product_id)
                continue

            try:
                await self._apply(product_id, request.store_id, self._refresher(product))
            except InventoryRecordNotFoundError:
                logger.warning(
                    "snapshot_record_missing",
                    product_id=product_id,
                    store_id=request.store_id,
                )
                result.untracked_products.append(product_id)
                continue
            except LedgerError as e:
                logger.error(
                    "snapshot_refresh_failed",
                    product_id=product_id,
                    store_id=request.store_id,
                    error_code=e.code,
                    error=e.message,
                )
                result.failed_products.append(product_id)
                continue
            result.refreshed += 1

        logger.info(
            "snapshots_refreshed",
            store_id=request.store_id,
            refreshed=result.refreshed,
            missing=len(result.missing_products),
            untracked=len(result.untracked_products),
            failed=len(result.failed_products),
        )
        return result

    def _refresher(self, product: ProductInfo) -> Callable[[InventoryRecord], InventoryRecord]:
        ledger = self._get_ledger()

        def refresh(record: InventoryRecord) -> InventoryRecord:
            now = utcnow()
            record.product_snapshot = product.to_snapshot(synced_at=now)
            record.updated_at = now
            return ledger.refresh(record, now)

        return refresh

    def to_response(self, result: SnapshotRefreshResult) -> SnapshotRefreshResponse:  # type: ignore[override]
        """Convert result to API response."""
        return SnapshotRefreshResponse(
            store_id=result.store_id,
            refreshed=result.refreshed,
            missing_products=result.missing_products,
            untracked_products=result.untracked_products,
            failed_products=result.failed_products,
        )
