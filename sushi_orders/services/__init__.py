"""
Services Package for Sushi Orders
=================================

This package holds the adapters between the pricing engine and the
application: where product data comes from and what happens to a priced
line.

Available Services:
-------------------
- **catalog**: Product lookup backed by the products table
- **pricing**: Engine construction with configured prices
- **preview**: Memoized interactive preview and set editing
- **order**: Authoritative recomputation and persistence of orders

Both the preview and the order service price lines with the same engine;
they differ only in the catalog they read and in what they do with the
result.

Usage:
------
    from sushi_orders.services.preview import get_preview_service
    from sushi_orders.services.order import create_order

Or import the entire module:

    from sushi_orders.services import catalog, order, preview
"""

from . import catalog
from . import pricing
from . import preview
from . import order

__all__ = ["catalog", "pricing", "preview", "order"]
