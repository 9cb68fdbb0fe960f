"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import aiosqlite
import pytest

from stockledger.core.entities.inventory import InventoryRecord, ProductSnapshot
from stockledger.core.entities.product import ProductInfo
from stockledger.core.services.stock_ledger import StockLedgerService
from stockledger.infrastructure.storage.sqlite.migrations.migrator import MIGRATIONS_DIR

MIGRATION_SQL = MIGRATIONS_DIR / "v001_inventory_ledger.sql"



@pytest.fixture
def ledger() -> StockLedgerService:
    """Ledger with the default rules (negative stock not allowed)."""
    return StockLedgerService()


@pytest.fixture
def make_record():
    """Factory for inventory records with sensible defaults."""

    def _make(
        current_stock: int = 0,
        reserved_stock: int = 0,
        reorder_point: int = 10,
        record_id: int | None = 1,
        product_id: str = "P1",
        store_id: str = "S1",
        cost_price: float = 2.5,
        expiry_date: date | None = None,
        version: int = 0,
    ) -> InventoryRecord:
        return InventoryRecord(
            id=record_id,
            product_id=product_id,
            store_id=store_id,
            current_stock=current_stock,
            reserved_stock=reserved_stock,
            reorder_point=reorder_point,
            product_snapshot=ProductSnapshot(
                product_name="Basmati Rice 1kg",
                cost_price=cost_price,
                selling_price=4.0,
                expiry_date=expiry_date,
            ),
            version=version,
        )

    return _make


@pytest.fixture
def sample_product() -> ProductInfo:
    """Catalog product used to seed new records."""
    return ProductInfo(
        product_id="P1",
        store_id="S1",
        product_name="Basmati Rice 1kg",
        barcode="8901234567890",
        category="Grocery",
        mrp=5.0,
        selling_price=4.0,
        cost_price=2.5,
        reorder_point=5,
        reorder_quantity=40,
    )


@pytest.fixture
def mock_inventory_store() -> AsyncMock:
    """Inventory store mock that echoes saved records back."""
    store = AsyncMock()
    store.save_record.side_effect = lambda record: record
    store.create_record.side_effect = lambda record: record
    store.has_movement.return_value = False
    return store


@pytest.fixture
def mock_product_catalog(sample_product: ProductInfo) -> AsyncMock:
    catalog = AsyncMock()
    catalog.get_product.return_value = sample_product
    return catalog


@pytest.fixture
async def ledger_db(tmp_path: Path) -> AsyncGenerator[Path, None]:
    """
    Temporary database with the ledger schema, wired into the global pool.

    The pool reads its path from settings, so settings are patched for the
    duration of the test and the pool is closed afterwards.
    """
    import stockledger.infrastructure.storage.sqlite.connection as conn_module

    db_path = tmp_path / "ledger.db"
    async with aiosqlite.connect(db_path) as conn:
        await conn.executescript(MIGRATION_SQL.read_text(encoding="utf-8"))
        await conn.commit()

    conn_module._pool = None
    mock_settings = MagicMock()
    mock_settings.storage.db_path = db_path
    mock_settings.storage.pool_size = 2
    mock_settings.storage.busy_timeout = 5000

    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield db_path
        finally:
            await conn_module.close_pool()


@pytest.fixture
def insert_product():
    """Write a catalog row the way the catalog service would."""

    async def _insert(db_path: Path, product: ProductInfo) -> None:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute(
                """
                INSERT INTO products (
                    product_id, store_id, product_name, barcode, category, mrp,
                    selling_price, cost_price, unit, reorder_point, reorder_quantity,
                    expiry_date
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    product.product_id,
                    product.store_id,
                    product.product_name,
                    product.barcode,
                    product.category,
                    product.mrp,
                    product.selling_price,
                    product.cost_price,
                    product.unit,
                    product.reorder_point,
                    product.reorder_quantity,
                    product.expiry_date.isoformat() if product.expiry_date else None,
                ),
            )
            await conn.commit()

    return _insert
