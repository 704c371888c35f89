"""
Routes Package for Sushi Orders
===============================

API route definitions organized by domain. Each module defines a FastAPI
APIRouter with a prefix and tags for OpenAPI documentation.

- pricing.py: Interactive line preview, sauce rules and set editing
- orders.py: Placing and reading orders

Route Dependencies:
-------------------
- get_db: Database session
- limiter.limit(): Rate limiting of the preview

Usage:
------
    from sushi_orders.routes import pricing_router, orders_router

    app.include_router(pricing_router)
    app.include_router(orders_router)
"""

from .pricing import pricing_router, limiter
from .orders import orders_router

__all__ = [
    "pricing_router",
    "orders_router",
    "limiter",
]
