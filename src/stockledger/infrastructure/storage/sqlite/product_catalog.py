"""SQLite-backed read access to catalog products."""

from datetime import date

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.product import ProductInfo
from stockledger.core.exceptions import PersistenceError
from stockledger.core.interfaces.product_catalog import IProductCatalog
from stockledger.infrastructure.storage.sqlite.connection import get_connection

logger = get_logger(__name__)


class SQLiteProductCatalog(IProductCatalog):
    """Reads the products table maintained by the catalog service."""

    async def get_product(self, product_id: str) -> ProductInfo | None:
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM products WHERE product_id = ?", (product_id,)
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError("get_product", str(e)) from e

        if row is None:
            logger.debug("catalog_product_missing", product_id=product_id)
            return None
        return self._row_to_product(row)

    @staticmethod
    def _row_to_product(row: aiosqlite.Row) -> ProductInfo:
        expiry = row["expiry_date"]
        return ProductInfo(
            product_id=row["product_id"],
            store_id=row["store_id"],
            product_name=row["product_name"],
            barcode=row["barcode"],
            description=row["description"],
            category=row["category"],
            mrp=row["mrp"],
            selling_price=row["selling_price"],
            cost_price=row["cost_price"],
            unit=row["unit"],
            is_active=bool(row["is_active"]),
            is_returnable=bool(row["is_returnable"]),
            reorder_point=row["reorder_point"],
            reorder_quantity=row["reorder_quantity"],
            max_stock_level=row["max_stock_level"],
            expiry_date=date.fromisoformat(expiry[:10]) if expiry else None,
        )
