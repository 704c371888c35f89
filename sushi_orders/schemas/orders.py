"""
Order Schemas for Sushi Orders
==============================

Pydantic models for placing and reading orders.

Endpoint Coverage:
------------------
- POST /orders: Place an order (lines are re-priced on the server)
- GET /orders/{id}: Get a stored order with its items

Pricing:
--------
Prices sent by the client (``unit_price``, ``line_total``, ``total``) are
accepted in the request but ignored; the server recomputes every line from
the catalog. ``line_total`` in responses is
``(unit_price + addons_cost) * quantity``.

Usage:
------
    order = create_order(db, [item for item in payload.items], slug)
    return OrderOut.model_validate(order)
"""

from typing import Any, Dict, List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class OrderCreate(BaseModel):
    """
    Request body for placing an order.

    Attributes:
        restaurant_slug: Restaurant (city); defaults to the configured one
        items: Cart lines; each needs a product id or name and may carry
               quantity, addons, swaps, set_swaps, options and a note
    """
    restaurant_slug: Optional[str] = None
    items: List[Dict[str, Any]] = Field(min_length=1)


class OrderItemOut(BaseModel):
    """
    Response model for a stored order line.

    Attributes:
        id: Database primary key
        product_id: Catalog product
        name: Product name at the time of ordering
        quantity: Units ordered
        unit_price: Catalog price per unit
        addons_cost: Per-unit cost of addons, sauces and set changes
        line_total: (unit_price + addons_cost) * quantity
        addons: Normalized addon strings as priced
        display_addons: Collapsed labels shown to the customer
        swaps: Swap pairs
        set_swaps: Per-row summary for the kitchen
        note: Customer note and the set swap summary
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[int] = None
    name: str
    quantity: int
    unit_price: float
    addons_cost: float
    line_total: float
    addons: Optional[List[str]] = None
    display_addons: Optional[List[str]] = None
    swaps: Optional[List[Dict[str, Any]]] = None
    set_swaps: Optional[List[Dict[str, Any]]] = None
    note: Optional[str] = None


class OrderOut(BaseModel):
    """Response model for an order with its items."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: str
    restaurant_slug: str
    total_price: float
    created_at: Optional[datetime] = None
    items: List[OrderItemOut] = Field(default_factory=list)
