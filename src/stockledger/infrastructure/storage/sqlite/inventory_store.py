"""SQLite implementation of inventory ledger storage."""

from datetime import UTC, datetime
from typing import Any

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.inventory import (
    AlertStatus,
    InventoryRecord,
    InventorySummary,
    MovementEntry,
    MovementType,
    ProductSnapshot,
    RecordAlerts,
    ReferenceType,
    utcnow,
)
from stockledger.core.exceptions import (
    InventoryRecordExistsError,
    PersistenceError,
    StockConflictError,
)
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)

ALERT_NAMES = ("low_stock", "out_of_stock", "expiry")

RECORD_COLUMNS = (
    "product_id",
    "store_id",
    "current_stock",
    "reserved_stock",
    "available_stock",
    "reorder_point",
    "reorder_quantity",
    "max_stock_level",
    "product_snapshot",
    "low_stock_active",
    "low_stock_triggered_at",
    "low_stock_resolved_at",
    "out_of_stock_active",
    "out_of_stock_triggered_at",
    "out_of_stock_resolved_at",
    "expiry_active",
    "expiry_triggered_at",
    "expiry_resolved_at",
    "average_cost",
    "last_cost",
    "total_value",
    "last_restocked",
    "last_sold",
    "last_updated_by",
    "created_at",
    "updated_at",
)

MUTABLE_COLUMNS = RECORD_COLUMNS[2:-2] + ("updated_at",)


def _iso(value: datetime | None) -> str | None:
    """Serialize as UTC ISO-8601 so stored timestamps sort lexically."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def _parse_dt(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None


def _stock_filters(low_stock: bool, out_of_stock: bool) -> str:
    clauses = []
    if low_stock:
        clauses.append("current_stock <= reorder_point AND current_stock > 0")
    if out_of_stock:
        clauses.append("current_stock <= 0")
    return "".join(f" AND ({clause})" for clause in clauses)


def _movement_filters(
    movement_type: MovementType | None,
    start: datetime | None,
    end: datetime | None,
) -> tuple[str, list[Any]]:
    sql = ""
    params: list[Any] = []
    if movement_type is not None:
        sql += " AND type = ?"
        params.append(movement_type.value)
    if start is not None:
        sql += " AND timestamp >= ?"
        params.append(_iso(start))
    if end is not None:
        sql += " AND timestamp <= ?"
        params.append(_iso(end))
    return sql, params


class SQLiteInventoryStore(IInventoryStore):
    """SQLite implementation of inventory record and movement log storage."""

    async def create_record(self, record: InventoryRecord) -> InventoryRecord:
        """Create a new inventory record together with any pending movements."""
        now = utcnow()
        record.created_at = now
        record.updated_at = now
        record.version = 0
        placeholders = ", ".join("?" for _ in RECORD_COLUMNS)
        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    f"""
                    INSERT INTO inventory_records ({", ".join(RECORD_COLUMNS)}, version)
                    VALUES ({placeholders}, 0)
                    """,
                    self._record_params(record, RECORD_COLUMNS),
                )
                record.id = cursor.lastrowid
                record.movements = await self._insert_pending(conn, record)
        except aiosqlite.IntegrityError as e:
            if "UNIQUE" in str(e):
                raise InventoryRecordExistsError(record.product_id, record.store_id) from e
            raise PersistenceError("create_record", str(e)) from e
        except aiosqlite.Error as e:
            raise PersistenceError("create_record", str(e)) from e

        logger.info(
            "inventory_record_created",
            record_id=record.id,
            product_id=record.product_id,
            store_id=record.store_id,
        )
        return record

    async def get_record(self, record_id: int) -> InventoryRecord | None:
        """Get inventory record by ID."""
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM inventory_records WHERE id = ?", (record_id,)
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError("get_record", str(e)) from e
        if row is None:
            return None
        return self._row_to_record(row)

    async def get_record_by_key(
        self,
        product_id: str,
        store_id: str,
        with_movements: bool = False,
    ) -> InventoryRecord | None:
        """Get inventory record for a product in a store."""
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM inventory_records WHERE product_id = ? AND store_id = ?",
                    (product_id, store_id),
                )
                row = await cursor.fetchone()
                if row is None:
                    return None
                record = self._row_to_record(row)
                if with_movements:
                    cursor = await conn.execute(
                        "SELECT * FROM stock_movements WHERE record_id = ? ORDER BY id",
                        (record.id,),
                    )
                    record.movements = [
                        self._row_to_movement(r) for r in await cursor.fetchall()
                    ]
        except aiosqlite.Error as e:
            raise PersistenceError("get_record_by_key", str(e)) from e
        return record

    async def save_record(self, record: InventoryRecord) -> InventoryRecord:
        """
        Persist record state and pending movements in one transaction.

        The update only applies if the stored version still matches the
        version the record was read at.
        """
        if record.id is None:
            return await self.create_record(record)

        record.available_stock = max(0, record.current_stock - record.reserved_stock)
        record.total_value = record.current_stock * record.unit_cost
        expected_version = record.version
        assignments = ", ".join(f"{col} = ?" for col in MUTABLE_COLUMNS)
        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    f"""
                    UPDATE inventory_records
                    SET {assignments}, version = version + 1
                    WHERE id = ? AND version = ?
                    """,
                    (
                        *self._record_params(record, MUTABLE_COLUMNS),
                        record.id,
                        expected_version,
                    ),
                )
                if cursor.rowcount == 0:
                    raise StockConflictError(record.id, expected_version)
                movements = await self._insert_pending(conn, record)
        except aiosqlite.Error as e:
            raise PersistenceError("save_record", str(e)) from e

        record.movements = movements
        record.version = expected_version + 1
        logger.debug(
            "inventory_record_saved",
            record_id=record.id,
            version=record.version,
            current_stock=record.current_stock,
        )
        return record

    async def list_records(
        self,
        store_id: str,
        low_stock: bool = False,
        out_of_stock: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> list[InventoryRecord]:
        """List records of a store, ordered by product."""
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"""
                    SELECT * FROM inventory_records
                    WHERE store_id = ?{_stock_filters(low_stock, out_of_stock)}
                    ORDER BY product_id
                    LIMIT ? OFFSET ?
                    """,
                    (store_id, limit, offset),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise PersistenceError("list_records", str(e)) from e
        return [self._row_to_record(row) for row in rows]

    async def count_records(
        self,
        store_id: str,
        low_stock: bool = False,
        out_of_stock: bool = False,
    ) -> int:
        """Count records matching the list filters."""
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"""
                    SELECT COUNT(*) FROM inventory_records
                    WHERE store_id = ?{_stock_filters(low_stock, out_of_stock)}
                    """,
                    (store_id,),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError("count_records", str(e)) from e
        return int(row[0]) if row else 0

    async def list_alert_records(self, store_id: str) -> list[InventoryRecord]:
        """List records with any active alert."""
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT * FROM inventory_records
                    WHERE store_id = ?
                      AND (low_stock_active = 1 OR out_of_stock_active = 1 OR expiry_active = 1)
                    ORDER BY updated_at DESC
                    """,
                    (store_id,),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise PersistenceError("list_alert_records", str(e)) from e
        return [self._row_to_record(row) for row in rows]

    async def get_summary(self, store_id: str) -> InventorySummary:
        """Aggregate stock figures for a store."""
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT
                        COUNT(*) AS total_records,
                        COALESCE(SUM(current_stock), 0) AS total_current_stock,
                        COALESCE(SUM(total_value), 0.0) AS total_stock_value,
                        COALESCE(AVG(current_stock), 0.0) AS average_stock_level,
                        COALESCE(SUM(CASE WHEN current_stock <= reorder_point
                                          AND current_stock > 0 THEN 1 ELSE 0 END), 0)
                            AS low_stock_count,
                        COALESCE(SUM(CASE WHEN current_stock <= 0 THEN 1 ELSE 0 END), 0)
                            AS out_of_stock_count,
                        COALESCE(SUM(expiry_active), 0) AS expiring_count
                    FROM inventory_records
                    WHERE store_id = ?
                    """,
                    (store_id,),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError("get_summary", str(e)) from e

        return InventorySummary(
            store_id=store_id,
            total_records=row["total_records"],
            total_current_stock=row["total_current_stock"],
            total_stock_value=float(row["total_stock_value"]),
            average_stock_level=float(row["average_stock_level"]),
            low_stock_count=row["low_stock_count"],
            out_of_stock_count=row["out_of_stock_count"],
            expiring_count=row["expiring_count"],
        )

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
        """Get movements for a record in log order (or reversed)."""
        filters, params = _movement_filters(movement_type, start, end)
        order = "DESC" if newest_first else "ASC"
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"""
                    SELECT * FROM stock_movements
                    WHERE record_id = ?{filters}
                    ORDER BY id {order}
                    LIMIT ? OFFSET ?
                    """,
                    (record_id, *params, limit, offset),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise PersistenceError("get_movements", str(e)) from e
        return [self._row_to_movement(row) for row in rows]

    async def count_movements(
        self,
        record_id: int,
        movement_type: MovementType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> int:
        """Count movements matching the filters."""
        filters, params = _movement_filters(movement_type, start, end)
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"SELECT COUNT(*) FROM stock_movements WHERE record_id = ?{filters}",
                    (record_id, *params),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError("count_movements", str(e)) from e
        return int(row[0]) if row else 0

    async def has_movement(
        self,
        record_id: int,
        reference_type: ReferenceType,
        reference_id: str,
    ) -> bool:
        """Check whether a movement with this reference was already recorded."""
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT 1 FROM stock_movements
                    WHERE record_id = ? AND reference_type = ? AND reference_id = ?
                    LIMIT 1
                    """,
                    (record_id, reference_type.value, reference_id),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError("has_movement", str(e)) from e
        return row is not None

    async def _insert_pending(
        self, conn: aiosqlite.Connection, record: InventoryRecord
    ) -> list[MovementEntry]:
        """Insert unsaved movements; returns the log with ids assigned."""
        saved: list[MovementEntry] = []
        for movement in record.movements:
            if movement.id is None:
                cursor = await conn.execute(
                    """
                    INSERT INTO stock_movements (
                        record_id, type, quantity, reason, reference_id,
                        reference_type, performed_by, unit_cost, notes, timestamp
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.id,
                        movement.type.value,
                        movement.quantity,
                        movement.reason,
                        movement.reference_id,
                        movement.reference_type.value if movement.reference_type else None,
                        movement.performed_by,
                        movement.unit_cost,
                        movement.notes,
                        _iso(movement.timestamp),
                    ),
                )
                movement = movement.model_copy(
                    update={"id": cursor.lastrowid, "record_id": record.id}
                )
                logger.info(
                    "stock_movement_recorded",
                    movement_id=movement.id,
                    record_id=record.id,
                    type=movement.type.value,
                    qty=movement.quantity,
                    reference_id=movement.reference_id,
                )
            saved.append(movement)
        return saved

    @staticmethod
    def _record_params(record: InventoryRecord, columns: tuple[str, ...]) -> tuple:
        values: dict[str, Any] = {
            "product_id": record.product_id,
            "store_id": record.store_id,
            "current_stock": record.current_stock,
            "reserved_stock": record.reserved_stock,
            "available_stock": record.available_stock,
            "reorder_point": record.reorder_point,
            "reorder_quantity": record.reorder_quantity,
            "max_stock_level": record.max_stock_level,
            "product_snapshot": record.product_snapshot.model_dump_json(),
            "average_cost": record.average_cost,
            "last_cost": record.last_cost,
            "total_value": record.total_value,
            "last_restocked": _iso(record.last_restocked),
            "last_sold": _iso(record.last_sold),
            "last_updated_by": record.last_updated_by,
            "created_at": _iso(record.created_at),
            "updated_at": _iso(record.updated_at),
        }
        for name in ALERT_NAMES:
            status: AlertStatus = getattr(record.alerts, name)
            values[f"{name}_active"] = int(status.is_active)
            values[f"{name}_triggered_at"] = _iso(status.triggered_at)
            values[f"{name}_resolved_at"] = _iso(status.resolved_at)
        return tuple(values[col] for col in columns)

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> InventoryRecord:
        """Convert a database row to an InventoryRecord entity."""
        alerts = RecordAlerts(
            **{
                name: AlertStatus(
                    is_active=bool(row[f"{name}_active"]),
                    triggered_at=_parse_dt(row[f"{name}_triggered_at"]),
                    resolved_at=_parse_dt(row[f"{name}_resolved_at"]),
                )
                for name in ALERT_NAMES
            }
        )
        return InventoryRecord(
            id=row["id"],
            product_id=row["product_id"],
            store_id=row["store_id"],
            current_stock=row["current_stock"],
            reserved_stock=row["reserved_stock"],
            reorder_point=row["reorder_point"],
            reorder_quantity=row["reorder_quantity"],
            max_stock_level=row["max_stock_level"],
            product_snapshot=ProductSnapshot.model_validate_json(row["product_snapshot"] or "{}"),
            alerts=alerts,
            average_cost=float(row["average_cost"]),
            last_cost=float(row["last_cost"]),
            last_restocked=_parse_dt(row["last_restocked"]),
            last_sold=_parse_dt(row["last_sold"]),
            last_updated_by=row["last_updated_by"],
            version=row["version"],
            created_at=_parse_dt(row["created_at"]) or utcnow(),
            updated_at=_parse_dt(row["updated_at"]) or utcnow(),
        )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> MovementEntry:
        """Convert a database row to a MovementEntry."""
        return MovementEntry(
            id=row["id"],
            record_id=row["record_id"],
            type=MovementType(row["type"]),
            quantity=row["quantity"],
            reason=row["reason"],
            reference_id=row["reference_id"],
            reference_type=ReferenceType(row["reference_type"]) if row["reference_type"] else None,
            performed_by=row["performed_by"],
            unit_cost=row["unit_cost"],
            notes=row["notes"],
            timestamp=_parse_dt(row["timestamp"]) or utcnow(),
        )
