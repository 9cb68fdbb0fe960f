"""Catalog product as seen by the ledger (read-only)."""

from datetime import UTC, date, datetime

from pydantic import BaseModel

from stockledger.core.entities.inventory import ProductSnapshot


class ProductInfo(BaseModel):
    """Product fields consumed from the catalog service."""

    product_id: str
    store_id: str
    product_name: str
    barcode: str | None = None
    description: str | None = None
    category: str | None = None
    mrp: float | None = None
    selling_price: float = 0.0
    cost_price: float = 0.0
    unit: str = "pcs"
    is_active: bool = True
    is_returnable: bool = True
    reorder_point: int | None = None
    reorder_quantity: int | None = None
    max_stock_level: int | None = None
    expiry_date: date | None = None

    def to_snapshot(self, synced_at: datetime | None = None) -> ProductSnapshot:
        """Build the denormalized copy stored on inventory records."""
        return ProductSnapshot(
            product_name=self.product_name,
            barcode=self.barcode,
            description=self.description,
            category=self.category,
            mrp=self.mrp,
            selling_price=self.selling_price,
            cost_price=self.cost_price,
            unit=self.unit,
            is_active=self.is_active,
            is_returnable=self.is_returnable,
            expiry_date=self.expiry_date,
            synced_at=synced_at or datetime.now(UTC),
        )
