"""Tests for SettleSaleUseCase and ProcessReturnUseCase."""

import pytest

from stockledger.application.dto.requests import (
    LineItemRequest,
    SettleTransactionRequest,
    ValidateTransactionRequest,
)
from stockledger.application.use_cases.process_return import ProcessReturnUseCase
from stockledger.application.use_cases.settle_sale import SettleSaleUseCase
from stockledger.core.entities.inventory import MovementType, ReferenceType
from stockledger.core.entities.settlement import LineItem, LineItemStatus
from stockledger.core.exceptions import (
    InsufficientAvailableStockError,
    InvalidQuantityError,
    PersistenceError,
)


@pytest.fixture
def records(make_record):
    """Records keyed by product, served by get_record_by_key."""
    return {
        "A": make_record(current_stock=10, record_id=1, product_id="A"),
        "B": make_record(current_stock=5, record_id=2, product_id="B"),
    }


@pytest.fixture
def store(mock_inventory_store, records):
    async def by_key(product_id, store_id):
        record = records.get(product_id)
        return record.model_copy(deep=True) if record else None

    mock_inventory_store.get_record_by_key.side_effect = by_key
    return mock_inventory_store


@pytest.fixture
def settle(store, ledger):
    return SettleSaleUseCase(inventory_store=store, ledger=ledger)


class TestValidate:
    async def test_all_available(self, settle):
        outcomes = await settle.validate(
            "S1", [LineItem(product_id="A", quantity=4), LineItem(product_id="B", quantity=5)]
        )

        assert [o.status for o in outcomes] == [LineItemStatus.AVAILABLE] * 2
        assert outcomes[0].remaining_stock == 6
        assert outcomes[1].remaining_stock == 0

    async def test_untracked_item_passes(self, settle):
        outcomes = await settle.validate("S1", [LineItem(product_id="Z", quantity=1)])

        assert outcomes[0].status == LineItemStatus.UNTRACKED

    async def test_shortfall_raises(self, settle, store):
        with pytest.raises(InsufficientAvailableStockError) as exc_info:
            await settle.validate("S1", [LineItem(product_id="B", quantity=6)])

        assert exc_info.value.details["available_stock"] == 5
        store.save_record.assert_not_awaited()

    async def test_reserved_units_not_sellable(self, settle, records, make_record):
        records["A"] = make_record(current_stock=10, reserved_stock=8, product_id="A")

        with pytest.raises(InsufficientAvailableStockError):
            await settle.validate("S1", [LineItem(product_id="A", quantity=3)])

    async def test_zero_quantity(self, settle):
        with pytest.raises(InvalidQuantityError):
            await settle.validate("S1", [LineItem(product_id="A", quantity=0)])

    async def test_split_lines_checked_against_combined_quantity(self, settle):
        with pytest.raises(InsufficientAvailableStockError) as exc_info:
            await settle.validate(
                "S1", [LineItem(product_id="B", quantity=3), LineItem(product_id="B", quantity=3)]
            )

        assert exc_info.value.details["requested"] == 6

    async def test_execute_validation(self, settle):
        response = await settle.execute_validation(
            ValidateTransactionRequest(
                store_id="S1", items=[LineItemRequest(product_id="A", quantity=2)]
            )
        )

        assert response.valid is True
        assert response.items[0].status == "available"


class TestCommit:
    async def test_deducts_each_item(self, settle, store):
        result = await settle.commit(
            "T1",
            "S1",
            "1001",
            "cashier",
            [LineItem(product_id="A", quantity=3), LineItem(product_id="B", quantity=5)],
        )

        assert len(result.applied) == 2
        assert result.has_failures is False
        assert [o.remaining_stock for o in result.outcomes] == [7, 0]

        saved = [call.args[0] for call in store.save_record.call_args_list]
        movement = saved[0].movements[-1]
        assert movement.type == MovementType.OUT
        assert movement.quantity == -3
        assert movement.reference_id == "T1"
        assert movement.reference_type == ReferenceType.SALE
        assert movement.reason == "Sale - Bill #1001"
        assert saved[1].alerts.out_of_stock.is_active is True

    async def test_partial_failure_keeps_successful_items(self, settle, store):
        async def save(record):
            if record.product_id == "B":
                raise PersistenceError("save_record", "disk I/O error")
            return record

        store.save_record.side_effect = save

        result = await settle.commit(
            "T2",
            "S1",
            "1002",
            "cashier",
            [LineItem(product_id="A", quantity=2), LineItem(product_id="B", quantity=1)],
        )

        assert [o.status for o in result.outcomes] == [
            LineItemStatus.APPLIED,
            LineItemStatus.FAILED,
        ]
        assert result.failed[0].error_code == "PERSISTENCE_FAILURE"
        assert result.has_failures is True

    async def test_insufficient_stock_reported_not_raised(self, settle):
        result = await settle.commit(
            "T3", "S1", "1003", "cashier", [LineItem(product_id="B", quantity=9)]
        )

        assert result.failed[0].error_code == "INSUFFICIENT_STOCK"

    async def test_already_applied_is_skipped(self, settle, store):
        store.has_movement.side_effect = lambda record_id, ref_type, ref_id: record_id == 1

        result = await settle.commit(
            "T4",
            "S1",
            "1004",
            "cashier",
            [LineItem(product_id="A", quantity=2), LineItem(product_id="B", quantity=2)],
        )

        assert [o.status for o in result.outcomes] == [
            LineItemStatus.ALREADY_APPLIED,
            LineItemStatus.APPLIED,
        ]
        assert store.save_record.await_count == 1
        store.has_movement.assert_any_await(1, ReferenceType.SALE, "T4")

    async def test_untracked_item(self, settle, store):
        result = await settle.commit(
            "T5", "S1", "1005", "cashier", [LineItem(product_id="Z", quantity=1)]
        )

        assert result.untracked[0].product_id == "Z"
        store.save_record.assert_not_awaited()

    async def test_repeated_product_lines_settle_as_one_movement(self, settle, store):
        result = await settle.commit(
            "T7",
            "S1",
            "1007",
            "cashier",
            [LineItem(product_id="A", quantity=2), LineItem(product_id="A", quantity=3)],
        )

        assert len(result.outcomes) == 1
        assert result.outcomes[0].quantity == 5
        assert result.outcomes[0].remaining_stock == 5
        store.save_record.assert_awaited_once()
        movement = store.save_record.call_args[0][0].movements[-1]
        assert movement.quantity == -5

    async def test_non_positive_line_fails_alone(self, settle, store):
        result = await settle.commit(
            "T8",
            "S1",
            "1008",
            "cashier",
            [LineItem(product_id="A", quantity=2), LineItem(product_id="A", quantity=-1)],
        )

        assert [o.status for o in result.outcomes] == [
            LineItemStatus.APPLIED,
            LineItemStatus.FAILED,
        ]
        assert result.failed[0].error_code == "INVALID_QUANTITY"
        assert result.applied[0].quantity == 2

    async def test_execute_and_response(self, settle):
        request = SettleTransactionRequest(
            store_id="S1",
            bill_number="1006",
            performed_by="cashier",
            items=[LineItemRequest(product_id="A", quantity=1)],
        )

        response = settle.to_response(await settle.execute("T6", request))

        assert response.transaction_id == "T6"
        assert response.applied == 1
        assert response.failed == 0


class TestProcessReturn:
    async def test_restocks_with_return_movement(self, store, ledger):
        use_case = ProcessReturnUseCase(inventory_store=store, ledger=ledger)

        result = await use_case.commit(
            "T1",
            "S1",
            "1001",
            "cashier",
            [LineItem(product_id="A", quantity=2), LineItem(product_id="Z", quantity=1)],
        )

        assert [o.status for o in result.outcomes] == [
            LineItemStatus.APPLIED,
            LineItemStatus.UNTRACKED,
        ]
        assert result.outcomes[0].remaining_stock == 12
        movement = store.save_record.call_args[0][0].movements[-1]
        assert movement.type == MovementType.RETURN
        assert movement.reference_type == ReferenceType.RETURN
        assert movement.reference_id == "T1"
        assert movement.reason == "Return - Bill #1001"

    async def test_invalid_quantity_reported(self, store, ledger):
        use_case = ProcessReturnUseCase(inventory_store=store, ledger=ledger)

        result = await use_case.commit(
            "T1", "S1", "1001", "cashier", [LineItem(product_id="A", quantity=-1)]
        )

        assert result.failed[0].error_code == "INVALID_QUANTITY"
