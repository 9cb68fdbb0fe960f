"""
Ledger schema migrations.

SQL files named ``v<NNN>_<name>.sql`` next to this module are applied in
version order and recorded with a checksum in ``schema_migrations``. After
the pending files run, the schema must hold the ledger tables and the
triggers that keep ``stock_movements`` append-only; a database without them
cannot back the ledger and startup stops with a ConfigurationError.
"""

import hashlib
import re
import time
from dataclasses import dataclass
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings
from stockledger.core.exceptions import ConfigurationError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

MIGRATION_FILENAME = re.compile(r"v(\d+)_(.+)\.sql")

SCHEMA_MIGRATIONS_DDL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    checksum TEXT NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
)
"""

# (sqlite_master type, name) pairs the stores rely on
LEDGER_OBJECTS = (
    ("table", "inventory_records"),
    ("table", "stock_movements"),
    ("table", "products"),
    ("trigger", "stock_movements_no_update"),
    ("trigger", "stock_movements_no_delete"),
)


@dataclass
class MigrationInfo:
    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = MIGRATION_FILENAME.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")

        checksum = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=checksum)


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration files in version order; badly named files are logged and skipped."""
    migrations = []
    for path in sorted(migrations_dir.glob("v*.sql")):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    try:
        cursor = await conn.execute(
            "SELECT version FROM schema_migrations ORDER BY version DESC LIMIT 1"
        )
    except aiosqlite.OperationalError:
        return None
    row = await cursor.fetchone()
    return row[0] if row else None


async def missing_ledger_objects(conn: aiosqlite.Connection) -> list[str]:
    """Names from LEDGER_OBJECTS that the schema does not define."""
    cursor = await conn.execute("SELECT type, name FROM sqlite_master")
    present = {(row[0], row[1]) for row in await cursor.fetchall()}
    return [name for kind, name in LEDGER_OBJECTS if (kind, name) not in present]


async def _apply(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    logger.info("applying_migration", version=migration.version, name=migration.name)
    started = time.monotonic()

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            "INSERT INTO schema_migrations (version, name, checksum) VALUES (?, ?, ?)",
            (migration.version, migration.name, migration.checksum),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        elapsed = int((time.monotonic() - started) * 1000)
        logger.error(
            "migration_failed", version=migration.version, name=migration.name, error=str(e)
        )
        return MigrationResult(migration.version, migration.name, False, elapsed, str(e))

    elapsed = int((time.monotonic() - started) * 1000)
    logger.info("migration_applied", version=migration.version, execution_time_ms=elapsed)
    return MigrationResult(migration.version, migration.name, True, elapsed)


async def initialize_database(
    db_path: Path | None = None,
    migrations_dir: Path = MIGRATIONS_DIR,
) -> list[MigrationResult]:
    """
    Apply pending migrations and check the ledger schema.

    Args:
        db_path: Database file; defaults to the STORAGE_DB_PATH setting
        migrations_dir: Directory holding the v<NNN>_*.sql files

    Returns:
        One result per migration attempted in this run; stops after the
        first failure.

    Raises:
        ConfigurationError: If every migration applied but the ledger
            tables or append-only triggers are missing
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    results: list[MigrationResult] = []
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        await conn.execute(SCHEMA_MIGRATIONS_DDL)
        await conn.commit()

        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
        applied = {row[0]: row[1] for row in await cursor.fetchall()}

        for migration in discover_migrations(migrations_dir):
            if migration.version in applied:
                if applied[migration.version] != migration.checksum:
                    logger.warning("migration_checksum_changed", version=migration.version)
                continue

            result = await _apply(conn, migration)
            results.append(result)
            if not result.success:
                return results

        missing = await missing_ledger_objects(conn)
        if missing:
            logger.error("ledger_schema_incomplete", missing=missing)
            raise ConfigurationError(
                f"Ledger schema is missing: {', '.join(missing)}",
                details={"missing": missing},
            )

        logger.info(
            "ledger_schema_ready",
            version=await get_current_version(conn),
            applied=len(results),
        )

    return results


run_migrations = initialize_database
