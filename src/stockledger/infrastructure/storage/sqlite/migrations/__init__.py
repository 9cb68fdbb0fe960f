"""Versioned SQL migrations for the ledger database."""

from stockledger.infrastructure.storage.sqlite.migrations.migrator import (
    MigrationResult,
    initialize_database,
    run_migrations,
)

__all__ = ["MigrationResult", "initialize_database", "run_migrations"]
