"""API routes."""

from stockledger.api.routes.health import router as health_router
from stockledger.api.routes.inventory import router as inventory_router
from stockledger.api.routes.transactions import router as transactions_router

__all__ = [
    "health_router",
    "inventory_router",
    "transactions_router",
]
