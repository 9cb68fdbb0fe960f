"""Tests for RemoveStockUseCase and AdjustStockUseCase."""

import pytest

from stockledger.application.dto.requests import AdjustStockRequest, RemoveStockRequest
from stockledger.application.use_cases.adjust_stock import AdjustStockUseCase
from stockledger.application.use_cases.remove_stock import RemoveStockUseCase
from stockledger.core.entities.inventory import MovementType, ReferenceType
from stockledger.core.exceptions import (
    InsufficientStockError,
    InventoryRecordNotFoundError,
    ValidationError,
)
from stockledger.core.services.stock_ledger import StockLedgerService


def _remove(**overrides) -> RemoveStockRequest:
    data = {"product_id": "P1", "store_id": "S1", "quantity": 5, "performed_by": "u1"}
    data.update(overrides)
    return RemoveStockRequest(**data)


class TestRemoveStockUseCase:
    async def test_removes(self, mock_inventory_store, ledger, make_record):
        mock_inventory_store.get_record_by_key.return_value = make_record(current_stock=10)
        use_case = RemoveStockUseCase(inventory_store=mock_inventory_store, ledger=ledger)

        result = await use_case.execute(_remove(quantity=4))

        assert result.record.current_stock == 6
        assert result.movement.quantity == -4
        assert result.movement.type == MovementType.OUT

    async def test_insufficient_stock(self, mock_inventory_store, ledger, make_record):
        mock_inventory_store.get_record_by_key.return_value = make_record(current_stock=3)
        use_case = RemoveStockUseCase(inventory_store=mock_inventory_store, ledger=ledger)

        with pytest.raises(InsufficientStockError):
            await use_case.execute(_remove(quantity=4))
        mock_inventory_store.save_record.assert_not_awaited()

    async def test_negative_allowed_by_configuration(self, mock_inventory_store, make_record):
        mock_inventory_store.get_record_by_key.return_value = make_record(current_stock=3)
        use_case = RemoveStockUseCase(
            inventory_store=mock_inventory_store,
            ledger=StockLedgerService(allow_negative_stock=True),
        )

        result = await use_case.execute(_remove(quantity=4))

        assert result.record.current_stock == -1

    async def test_damage_write_off(self, mock_inventory_store, ledger, make_record):
        mock_inventory_store.get_record_by_key.return_value = make_record(current_stock=10)
        use_case = RemoveStockUseCase(inventory_store=mock_inventory_store, ledger=ledger)

        result = await use_case.execute(_remove(movement_type="damage", reason="Crushed"))

        assert result.movement.type == MovementType.DAMAGE
        assert result.movement.reference_type == ReferenceType.DAMAGE

    async def test_rejects_incoming_type(self, mock_inventory_store, ledger):
        use_case = RemoveStockUseCase(inventory_store=mock_inventory_store, ledger=ledger)

        with pytest.raises(ValidationError):
            await use_case.execute(_remove(movement_type="in"))
        mock_inventory_store.get_record_by_key.assert_not_awaited()

    async def test_missing_record(self, mock_inventory_store, ledger):
        mock_inventory_store.get_record_by_key.return_value = None
        use_case = RemoveStockUseCase(inventory_store=mock_inventory_store, ledger=ledger)

        with pytest.raises(InventoryRecordNotFoundError):
            await use_case.execute(_remove())


class TestAdjustStockUseCase:
    async def test_adjusts_to_count(self, mock_inventory_store, ledger, make_record):
        mock_inventory_store.get_record_by_key.return_value = make_record(current_stock=10)
        use_case = AdjustStockUseCase(inventory_store=mock_inventory_store, ledger=ledger)

        result = await use_case.execute(
            AdjustStockRequest(
                product_id="P1", store_id="S1", new_quantity=14, performed_by="auditor"
            )
        )

        assert result.record.current_stock == 14
        assert result.movement.quantity == 4
        assert result.movement.type == MovementType.ADJUSTMENT
        assert result.record.last_updated_by == "auditor"
