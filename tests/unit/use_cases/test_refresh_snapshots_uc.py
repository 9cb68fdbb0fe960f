"""Tests for RefreshProductSnapshotsUseCase."""

from datetime import date

from stockledger.application.dto.requests import RefreshSnapshotsRequest
from stockledger.application.use_cases.refresh_snapshots import (
    PAGE_SIZE,
    RefreshProductSnapshotsUseCase,
)
from stockledger.core.exceptions import PersistenceError


class TestRefreshProductSnapshotsUseCase:
    async def test_refreshes_listed_products(
        self, mock_inventory_store, mock_product_catalog, sample_product, ledger, make_record
    ):
        mock_inventory_store.get_record_by_key.return_value = make_record(
            current_stock=30, cost_price=1.0
        )
        sample_product.product_name = "Basmati Rice 1kg (new pack)"
        sample_product.expiry_date = date(2099, 1, 1)
        use_case = RefreshProductSnapshotsUseCase(
            inventory_store=mock_inventory_store,
            product_catalog=mock_product_catalog,
            ledger=ledger,
        )

        result = await use_case.execute(
            RefreshSnapshotsRequest(store_id="S1", product_ids=["P1"])
        )

        assert result.refreshed == 1
        saved = mock_inventory_store.save_record.call_args[0][0]
        assert saved.product_snapshot.product_name == "Basmati Rice 1kg (new pack)"
        assert saved.product_snapshot.expiry_date == date(2099, 1, 1)
        assert saved.current_stock == 30
        assert saved.movements == []
        mock_inventory_store.list_records.assert_not_awaited()

    async def test_whole_store_pages_through_records(
        self, mock_inventory_store, mock_product_catalog, sample_product, ledger, make_record
    ):
        first_page = [make_record(product_id=f"P{i}", record_id=i) for i in range(PAGE_SIZE)]
        second_page = [make_record(product_id="GONE", record_id=PAGE_SIZE + 1)]
        mock_inventory_store.list_records.side_effect = [first_page, second_page]
        mock_inventory_store.get_record_by_key.return_value = make_record()
        mock_product_catalog.get_product.side_effect = lambda product_id: (
            None if product_id == "GONE" else sample_product
        )
        use_case = RefreshProductSnapshotsUseCase(
            inventory_store=mock_inventory_store,
            product_catalog=mock_product_catalog,
            ledger=ledger,
        )

        result = await use_case.execute(RefreshSnapshotsRequest(store_id="S1"))
        response = use_case.to_response(result)

        assert result.refreshed == PAGE_SIZE
        assert result.missing_products == ["GONE"]
        assert response.missing_products == ["GONE"]
        assert mock_inventory_store.list_records.await_count == 2
        second_call = mock_inventory_store.list_records.await_args_list[1]
        assert second_call.kwargs["offset"] == PAGE_SIZE

    async def test_untracked_product_does_not_stop_the_run(
        self, mock_inventory_store, mock_product_catalog, ledger, make_record
    ):
        async def by_key(product_id, store_id):
            return None if product_id == "P2" else make_record(product_id=product_id)

        mock_inventory_store.get_record_by_key.side_effect = by_key
        use_case = RefreshProductSnapshotsUseCase(
            inventory_store=mock_inventory_store,
            product_catalog=mock_product_catalog,
            ledger=ledger,
        )

        result = await use_case.execute(
            RefreshSnapshotsRequest(store_id="S1", product_ids=["P2", "P1"])
        )
        response = use_case.to_response(result)

        assert result.refreshed == 1
        assert result.untracked_products == ["P2"]
        assert response.untracked_products == ["P2"]
        assert response.failed_products == []
        assert mock_inventory_store.save_record.await_count == 1

    async def test_failed_save_is_reported(
        self, mock_inventory_store, mock_product_catalog, ledger, make_record
    ):
        mock_inventory_store.get_record_by_key.return_value = make_record()
        mock_inventory_store.save_record.side_effect = PersistenceError(
            "save_record", "disk I/O error"
        )
        use_case = RefreshProductSnapshotsUseCase(
            inventory_store=mock_inventory_store,
            product_catalog=mock_product_catalog,
            ledger=ledger,
        )

        result = await use_case.execute(
            RefreshSnapshotsRequest(store_id="S1", product_ids=["P1"])
        )

        assert result.refreshed == 0
        assert result.failed_products == ["P1"]
