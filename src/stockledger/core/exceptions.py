"""
Domain exceptions for the stock ledger.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class LedgerError(Exception):
    """Base exception for all stock ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(LedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InvalidQuantityError(ValidationError):
    """Quantity is not acceptable for the requested operation."""

    def __init__(self, quantity: Any, operation: str, requirement: str = "must be positive"):
        super().__init__(
            field="quantity",
            message=f"Quantity {requirement} for {operation}",
            value=quantity,
        )
        self.code = "INVALID_QUANTITY"
        self.details.update({"quantity": quantity, "operation": operation})


# Stock Exceptions
class StockError(LedgerError):
    """Base exception for stock level violations."""

    pass


class InsufficientStockError(StockError):
    """Removing stock would drive current stock below zero."""

    def __init__(self, product_id: str, store_id: str, requested: int, current: int):
        super().__init__(
            f"Insufficient stock for product {product_id} in store {store_id}: "
            f"requested {requested}, on hand {current}",
            code="INSUFFICIENT_STOCK",
            details={
                "product_id": product_id,
                "store_id": store_id,
                "requested": requested,
                "current_stock": current,
            },
        )


class InsufficientAvailableStockError(StockError):
    """Requested quantity exceeds stock that is not already reserved."""

    def __init__(self, product_id: str, store_id: str, requested: int, available: int):
        super().__init__(
            f"Insufficient available stock for product {product_id} in store {store_id}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_AVAILABLE_STOCK",
            details={
                "product_id": product_id,
                "store_id": store_id,
                "requested": requested,
                "available_stock": available,
            },
        )


# Storage Exceptions
class StorageError(LedgerError):
    """Base exception for storage operations."""

    pass


class InventoryRecordNotFoundError(StorageError):
    """No inventory record exists for a product/store pair."""

    def __init__(self, product_id: str, store_id: str):
        super().__init__(
            f"Inventory record not found for product {product_id} in store {store_id}",
            code="INVENTORY_RECORD_NOT_FOUND",
            details={"product_id": product_id, "store_id": store_id},
        )


class InventoryRecordExistsError(StorageError):
    """An inventory record already exists for a product/store pair."""

    def __init__(self, product_id: str, store_id: str):
        super().__init__(
            f"Inventory record already exists for product {product_id} in store {store_id}",
            code="INVENTORY_RECORD_EXISTS",
            details={"product_id": product_id, "store_id": store_id},
        )


class ProductNotFoundError(StorageError):
    """Product not found in the catalog."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )


class StockConflictError(StorageError):
    """Record was modified by another writer since it was read."""

    def __init__(self, record_id: int | None, expected_version: int):
        super().__init__(
            f"Inventory record {record_id} changed concurrently "
            f"(expected version {expected_version})",
            code="STOCK_CONFLICT",
            details={"record_id": record_id, "expected_version": expected_version},
        )


class PersistenceError(StorageError):
    """Underlying storage write or read failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Persistence failure during {operation}: {error}",
            code="PERSISTENCE_FAILURE",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(LedgerError):
    """Configuration error."""

    pass
