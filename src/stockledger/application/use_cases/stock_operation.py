"""Shared load-apply-save cycle for use cases that mutate inventory records."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stockledger.application.dto.responses import (
    InventoryRecordResponse,
    MovementResponse,
    StockOperationResponse,
)
from stockledger.application.services import get_stock_ledger
from stockledger.config import get_logger, get_settings
from stockledger.core.entities.inventory import InventoryRecord, MovementEntry, utcnow
from stockledger.core.entities.product import ProductInfo
from stockledger.core.exceptions import (
    InventoryRecordExistsError,
    InventoryRecordNotFoundError,
    StockConflictError,
)
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.core.interfaces.product_catalog import IProductCatalog
from stockledger.core.services.stock_ledger import StockLedgerService

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class StockOperationResult:
    """Result of a single stock mutation."""

    record: InventoryRecord
    movement: MovementEntry | None = None
    created: bool = False  # True if the record was created by this operation


class StockOperationUseCase:
    """
    Base for use cases that change an inventory record.

    Each attempt reads the record, applies a ledger operation in memory and
    saves it with a version check. A concurrent writer makes the save fail
    with StockConflictError; the whole attempt is then retried with
    exponential backoff and the conflict surfaces once retries run out.
    """

    def __init__(
        self,
        inventory_store: IInventoryStore | None = None,
        product_catalog: IProductCatalog | None = None,
        ledger: StockLedgerService | None = None,
    ):
        self._inventory_store = inventory_store
        self._product_catalog = product_catalog
        self._ledger = ledger

    async def _get_inventory_store(self) -> IInventoryStore:
        if self._inventory_store is None:
            from stockledger.infrastructure.storage.sqlite import get_inventory_store

            self._inventory_store = await get_inventory_store()
        return self._inventory_store

    async def _get_product_catalog(self) -> IProductCatalog:
        if self._product_catalog is None:
            from stockledger.infrastructure.storage.sqlite import get_product_catalog

            self._product_catalog = await get_product_catalog()
        return self._product_catalog

    def _get_ledger(self) -> StockLedgerService:
        if self._ledger is None:
            self._ledger = get_stock_ledger()
        return self._ledger

    def _get_retry_decorator(self, retry_on: tuple[type[Exception], ...]) -> Any:
        """Get tenacity retry decorator for version conflicts."""
        settings = get_settings()
        delay = settings.ledger.conflict_retry_delay
        return retry(
            stop=stop_after_attempt(settings.ledger.conflict_max_retries),
            wait=wait_exponential(multiplier=delay, min=delay, max=delay * 8),
            retry=retry_if_exception_type(retry_on),
            before_sleep=self._log_retry,
            reraise=True,
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        """Log retry attempts."""
        logger.warning(
            "stock_conflict_retry",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    async def _apply(
        self,
        product_id: str,
        store_id: str,
        mutate: Callable[[InventoryRecord], T],
        on_missing: Callable[[], Awaitable[InventoryRecord]] | None = None,
    ) -> tuple[InventoryRecord, T, bool]:
        """
        Run mutate against the stored record and persist the result.

        Args:
            product_id: Product of the record
            store_id: Store of the record
            mutate: Ledger call applied to the freshly loaded record
            on_missing: Builds an unsaved record when none exists;
                without it a missing record raises InventoryRecordNotFoundError

        Returns:
            Saved record, the value returned by mutate, and whether the
            record was created
        """
        store = await self._get_inventory_store()

        async def attempt() -> tuple[InventoryRecord, T, bool]:
            created = False
            record = await store.get_record_by_key(product_id, store_id)
            if record is None:
                if on_missing is None:
                    raise InventoryRecordNotFoundError(product_id, store_id)
                record = await on_missing()
                created = True

            outcome = mutate(record)
            saved = await store.save_record(record)
            if isinstance(outcome, MovementEntry) and saved.movements:
                outcome = saved.movements[-1]  # type: ignore[assignment]
            return saved, outcome, created

        # A record created concurrently by another request shows up as a
        # uniqueness violation; reloading picks it up.
        retry_on: tuple[type[Exception], ...] = (StockConflictError,)
        if on_missing is not None:
            retry_on = (StockConflictError, InventoryRecordExistsError)
        result: tuple[InventoryRecord, T, bool] = await self._get_retry_decorator(retry_on)(
            attempt
        )()
        return result

    def _build_record(
        self,
        product_id: str,
        store_id: str,
        product: ProductInfo | None = None,
        reorder_point: int | None = None,
        reorder_quantity: int | None = None,
        max_stock_level: int | None = None,
    ) -> InventoryRecord:
        """Build an unsaved zero-stock record seeded from catalog data and settings."""
        defaults = get_settings().ledger
        now = utcnow()

        def pick(explicit: int | None, attr: str, fallback: int) -> int:
            if explicit is not None:
                return explicit
            if product is not None and getattr(product, attr) is not None:
                return int(getattr(product, attr))
            return fallback

        record = InventoryRecord(
            product_id=product_id,
            store_id=store_id,
            reorder_point=pick(reorder_point, "reorder_point", defaults.default_reorder_point),
            reorder_quantity=pick(
                reorder_quantity, "reorder_quantity", defaults.default_reorder_quantity
            ),
            max_stock_level=pick(
                max_stock_level, "max_stock_level", defaults.default_max_stock_level
            ),
            created_at=now,
            updated_at=now,
        )
        if product is not None:
            record.product_snapshot = product.to_snapshot(synced_at=now)
        return self._get_ledger().refresh(record, now)

    def to_response(self, result: StockOperationResult) -> StockOperationResponse:
        """Convert result to API response."""
        return StockOperationResponse(
            record=InventoryRecordResponse.from_record(result.record),
            movement=MovementResponse.from_entry(result.movement) if result.movement else None,
            created=result.created,
        )
