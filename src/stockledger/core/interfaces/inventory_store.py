"""Abstract interface for inventory ledger storage."""

from abc import ABC, abstractmethod
from datetime import datetime

from stockledger.core.entities.inventory import (
    InventoryRecord,
    InventorySummary,
    MovementEntry,
    MovementType,
    ReferenceType,
)


class IInventoryStore(ABC):
    """Interface for inventory record and movement log persistence."""

    @abstractmethod
    async def create_record(self, record: InventoryRecord) -> InventoryRecord:
        """Create a new inventory record. Fails if (product, store) already exists."""
        pass

    @abstractmethod
    async def get_record(self, record_id: int) -> InventoryRecord | None:
        """Get inventory record by ID."""
        pass

    @abstractmethod
    async def get_record_by_key(
        self,
        product_id: str,
        store_id: str,
        with_movements: bool = False,
    ) -> InventoryRecord | None:
        """Get inventory record for a product in a store."""
        pass

    @abstractmethod
    async def save_record(self, record: InventoryRecord) -> InventoryRecord:
        """
        Persist record state and its pending movements atomically.

        Raises StockConflictError if the stored version differs from
        record.version.
        """
        pass

    @abstractmethod
    async def list_records(
        self,
        store_id: str,
        low_stock: bool = False,
        out_of_stock: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> list[InventoryRecord]:
        """List records of a store, optionally only low or empty ones."""
        pass

    @abstractmethod
    async def count_records(
        self,
        store_id: str,
        low_stock: bool = False,
        out_of_stock: bool = False,
    ) -> int:
        """Count records matching the list_records filters."""
        pass

    @abstractmethod
    async def list_alert_records(self, store_id: str) -> list[InventoryRecord]:
        """List records with any active alert."""
        pass

    @abstractmethod
    async def get_summary(self, store_id: str) -> InventorySummary:
        """Aggregate stock figures for a store."""
        pass

    @abstractmethod
    async def get_movements(
        self,
        record_id: int,
        movement_type: MovementType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        newest_first: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[MovementEntry]:
        """Get movements for a record, filtered and paginated."""
        pass

    @abstractmethod
    async def count_movements(
        self,
        record_id: int,
        movement_type: MovementType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> int:
        """Count movements matching the get_movements filters."""
        pass

    @abstractmethod
    async def has_movement(
        self,
        record_id: int,
        reference_type: ReferenceType,
        reference_id: str,
    ) -> bool:
        """Check whether a movement with this reference was already recorded."""
        pass
