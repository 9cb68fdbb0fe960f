"""
Service factory functions for dependency injection.

Wires configuration into core services. Use cases import from here.
"""

from stockledger.config import get_settings
from stockledger.core.services import StockLedgerService

# Singleton service instances
_stock_ledger: StockLedgerService | None = None


def get_stock_ledger() -> StockLedgerService:
    """
    Get or create the StockLedgerService instance.

    The negative stock policy and expiry window come from ledger settings.
    """
    global _stock_ledger
    if _stock_ledger is None:
        settings = get_settings()
        _stock_ledger = StockLedgerService(
            expiry_warning_days=settings.ledger.expiry_warning_days,
            allow_negative_stock=settings.ledger.allow_negative_stock,
        )
    return _stock_ledger


def reset_services() -> None:
    """
    Reset all singleton service instances.

    Useful for testing or when configuration changes.
    """
    global _stock_ledger
    _stock_ledger = None


__all__ = [
    "get_stock_ledger",
    "reset_services",
]
