"""Core domain services."""

from stockledger.core.services.alert_evaluator import evaluate_alerts
from stockledger.core.services.stock_ledger import StockLedgerService

__all__ = [
    "evaluate_alerts",
    "StockLedgerService",
]
