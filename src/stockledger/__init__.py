"""Inventory stock ledger for multi-store point-of-sale."""

__version__ = "1.0.0"
