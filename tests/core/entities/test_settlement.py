"""Tests for settlement entities."""

from stockledger.core.entities.product import ProductInfo
from stockledger.core.entities.settlement import (
    LineItemOutcome,
    LineItemStatus,
    SettlementResult,
)


class TestSettlementResult:
    def test_groups_outcomes_by_status(self):
        result = SettlementResult(
            transaction_id="T1",
            store_id="S1",
            outcomes=[
                LineItemOutcome(product_id="A", quantity=1, status=LineItemStatus.APPLIED),
                LineItemOutcome(product_id="B", quantity=2, status=LineItemStatus.FAILED),
                LineItemOutcome(product_id="C", quantity=3, status=LineItemStatus.UNTRACKED),
                LineItemOutcome(
                    product_id="D", quantity=4, status=LineItemStatus.ALREADY_APPLIED
                ),
            ],
        )
        assert [o.product_id for o in result.applied] == ["A"]
        assert [o.product_id for o in result.failed] == ["B"]
        assert [o.product_id for o in result.untracked] == ["C"]
        assert [o.product_id for o in result.already_applied] == ["D"]
        assert result.has_failures is True
        assert result.settled is True

    def test_no_failures(self):
        result = SettlementResult(transaction_id="T1", store_id="S1")
        assert result.has_failures is False


class TestProductInfo:
    def test_to_snapshot_copies_catalog_fields(self, sample_product: ProductInfo):
        snapshot = sample_product.to_snapshot()
        assert snapshot.product_name == "Basmati Rice 1kg"
        assert snapshot.barcode == "8901234567890"
        assert snapshot.cost_price == 2.5
        assert snapshot.selling_price == 4.0
        assert snapshot.synced_at is not None
