"""Tests for SQLiteInventoryStore against a real temporary database."""

from datetime import timedelta

import aiosqlite
import pytest

from stockledger.core.entities.inventory import (
    InventoryRecord,
    MovementType,
    ProductSnapshot,
    ReferenceType,
    utcnow,
)
from stockledger.core.exceptions import InventoryRecordExistsError, StockConflictError
from stockledger.core.services.stock_ledger import StockLedgerService
from stockledger.infrastructure.storage.sqlite.inventory_store import SQLiteInventoryStore


@pytest.fixture
def store(ledger_db) -> SQLiteInventoryStore:
    return SQLiteInventoryStore()


def _new_record(product_id: str = "P1", store_id: str = "S1", **kwargs) -> InventoryRecord:
    return InventoryRecord(
        product_id=product_id,
        store_id=store_id,
        product_snapshot=ProductSnapshot(product_name=f"Product {product_id}", cost_price=2.0),
        **kwargs,
    )


async def _stocked(store, ledger, product_id: str, quantity: int, reorder_point: int = 10):
    record = await store.create_record(_new_record(product_id, reorder_point=reorder_point))
    if quantity:
        ledger.add_stock(record, quantity, reason="Opening stock", performed_by="u1")
    else:
        ledger.refresh(record)
    return await store.save_record(record)


class TestCreateAndLoad:
    async def test_create_assigns_id_and_version(self, store):
        record = await store.create_record(_new_record())

        assert record.id is not None
        assert record.version == 0

        loaded = await store.get_record(record.id)
        assert loaded.product_id == "P1"
        assert loaded.product_snapshot.product_name == "Product P1"
        assert loaded.version == 0

    async def test_duplicate_key_rejected(self, store):
        await store.create_record(_new_record())

        with pytest.raises(InventoryRecordExistsError):
            await store.create_record(_new_record())

    async def test_same_product_other_store(self, store):
        await store.create_record(_new_record(store_id="S1"))
        other = await store.create_record(_new_record(store_id="S2"))

        assert other.id is not None

    async def test_missing_record(self, store):
        assert await store.get_record(999) is None
        assert await store.get_record_by_key("nope", "S1") is None

    async def test_save_without_id_creates(self, store, ledger):
        record = _new_record()
        ledger.add_stock(record, 5, reason="Opening stock", performed_by="u1")

        saved = await store.save_record(record)

        assert saved.id is not None
        assert saved.movements[0].id is not None
        assert saved.movements[0].record_id == saved.id


class TestSaveRecord:
    async def test_persists_state_and_movements(self, store, ledger):
        record = await store.create_record(_new_record())
        ledger.add_stock(record, 50, reason="Stock received", performed_by="u1", unit_cost=3.0)
        ledger.remove_stock(record, 8, reason="Sale", performed_by="u1")

        saved = await store.save_record(record)

        assert saved.version == 1
        assert saved.pending_movements == []
        assert [m.quantity for m in saved.movements] == [50, -8]

        loaded = await store.get_record_by_key("P1", "S1", with_movements=True)
        assert loaded.current_stock == 42
        assert loaded.available_stock == 42
        assert loaded.average_cost == 3.0
        assert loaded.total_value == pytest.approx(126.0)
        assert loaded.version == 1
        assert sum(m.quantity for m in loaded.movements) == loaded.current_stock

    async def test_stale_version_conflicts(self, store, ledger):
        created = await store.create_record(_new_record())
        first = await store.get_record(created.id)
        second = await store.get_record(created.id)

        ledger.add_stock(first, 5, reason="r", performed_by="u1")
        await store.save_record(first)

        ledger.add_stock(second, 7, reason="r", performed_by="u2")
        with pytest.raises(StockConflictError):
            await store.save_record(second)

        loaded = await store.get_record_by_key("P1", "S1", with_movements=True)
        assert loaded.current_stock == 5
        assert len(loaded.movements) == 1

    async def test_alert_state_round_trip(self, store):
        record = await _stocked(store, StockLedgerService(), "P1", 0)

        loaded = await store.get_record(record.id)
        assert loaded.alerts.out_of_stock.is_active is True
        assert loaded.alerts.out_of_stock.triggered_at is not None
        assert loaded.alerts.low_stock.is_active is True

    async def test_movement_log_is_append_only(self, store, ledger, ledger_db):
        await _stocked(store, ledger, "P1", 5)

        async with aiosqlite.connect(ledger_db) as conn:
            with pytest.raises(aiosqlite.IntegrityError):
                await conn.execute("UPDATE stock_movements SET quantity = 500")
            with pytest.raises(aiosqlite.IntegrityError):
                await conn.execute("DELETE FROM stock_movements")


class TestQueries:
    @pytest.fixture
    async def stocked_store(self, store, ledger):
        await _stocked(store, ledger, "FULL", 100)
        await _stocked(store, ledger, "LOW", 4)
        await _stocked(store, ledger, "EMPTY", 0)
        return store

    async def test_list_and_count(self, stocked_store):
        records = await stocked_store.list_records("S1")

        assert {r.product_id for r in records} == {"FULL", "LOW", "EMPTY"}
        assert await stocked_store.count_records("S1") == 3
        assert await stocked_store.list_records("S2") == []

    async def test_low_stock_filter_excludes_empty(self, stocked_store):
        records = await stocked_store.list_records("S1", low_stock=True)

        assert [r.product_id for r in records] == ["LOW"]
        assert await stocked_store.count_records("S1", low_stock=True) == 1

    async def test_out_of_stock_filter(self, stocked_store):
        records = await stocked_store.list_records("S1", out_of_stock=True)

        assert [r.product_id for r in records] == ["EMPTY"]

    async def test_pagination(self, stocked_store):
        first = await stocked_store.list_records("S1", limit=2)
        rest = await stocked_store.list_records("S1", limit=2, offset=2)

        assert len(first) == 2
        assert len(rest) == 1
        assert {r.product_id for r in first + rest} == {"FULL", "LOW", "EMPTY"}

    async def test_alert_records(self, stocked_store):
        records = await stocked_store.list_alert_records("S1")

        assert {r.product_id for r in records} == {"LOW", "EMPTY"}

    async def test_summary(self, stocked_store):
        summary = await stocked_store.get_summary("S1")

        assert summary.total_records == 3
        assert summary.total_current_stock == 104
        assert summary.low_stock_count == 1
        assert summary.out_of_stock_count == 1
        assert summary.total_stock_value == pytest.approx(208.0)

    async def test_empty_summary(self, store):
        summary = await store.get_summary("S9")

        assert summary.total_records == 0
        assert summary.total_current_stock == 0


class TestMovements:
    @pytest.fixture
    async def record(self, store, ledger):
        record = await store.create_record(_new_record())
        ledger.add_stock(record, 20, reason="Stock received", performed_by="u1")
        ledger.remove_stock(
            record,
            3,
            reason="Sale - Bill #7",
            performed_by="u1",
            reference_id="T7",
            reference_type=ReferenceType.SALE,
        )
        ledger.adjust_stock(record, 15, reason="Count", performed_by="u2")
        return await store.save_record(record)

    async def test_newest_first_by_default(self, store, record):
        movements = await store.get_movements(record.id)

        assert [m.type for m in movements] == [
            MovementType.ADJUSTMENT,
            MovementType.OUT,
            MovementType.IN,
        ]

    async def test_oldest_first(self, store, record):
        movements = await store.get_movements(record.id, newest_first=False)

        assert [m.quantity for m in movements] == [20, -3, -2]

    async def test_type_filter_and_count(self, store, record):
        movements = await store.get_movements(record.id, movement_type=MovementType.OUT)

        assert len(movements) == 1
        assert movements[0].reference_id == "T7"
        assert await store.count_movements(record.id) == 3
        assert await store.count_movements(record.id, movement_type=MovementType.IN) == 1

    async def test_time_window(self, store, record):
        now = utcnow()

        assert await store.count_movements(record.id, start=now - timedelta(hours=1)) == 3
        assert await store.count_movements(record.id, start=now + timedelta(hours=1)) == 0
        assert await store.count_movements(record.id, end=now - timedelta(hours=1)) == 0

    async def test_limit_offset(self, store, record):
        page = await store.get_movements(record.id, newest_first=False, limit=1, offset=1)

        assert [m.quantity for m in page] == [-3]

    async def test_has_movement(self, store, record):
        assert await store.has_movement(record.id, ReferenceType.SALE, "T7") is True
        assert await store.has_movement(record.id, ReferenceType.SALE, "T8") is False
        assert await store.has_movement(record.id, ReferenceType.RETURN, "T7") is False
