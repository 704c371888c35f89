"""
Order Routes for Sushi Orders
=============================

Endpoints:
----------
- POST /orders: Place an order; every line is re-priced from the catalog
- GET /orders/{order_id}: Get a stored order

Error Handling:
---------------
- 400: A line references a product that is not on the menu
- 404: Unknown order id
- 500: Invalid sauce rule configuration (logged with traceback)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..config import DEFAULT_RESTAURANT_SLUG
from ..db import get_db
from ..pricing import SauceRuleError
from ..schemas.orders import OrderCreate, OrderOut
from ..services.order import UnknownProductError, create_order, get_order


logger = logging.getLogger(__name__)

orders_router = APIRouter(prefix="/orders", tags=["Orders"])


@orders_router.post("", response_model=OrderOut, status_code=201)
def place_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
) -> OrderOut:
    """Place an order. Client-side prices are ignored."""
    slug = payload.restaurant_slug or DEFAULT_RESTAURANT_SLUG
    try:
        order = create_order(db, payload.items, slug)
    except UnknownProductError as exc:
        db.rollback()
        logger.info("Rejected order: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    except SauceRuleError:
        db.rollback()
        logger.exception("Invalid sauce rule while pricing an order")
        raise HTTPException(status_code=500, detail="Invalid sauce rule configuration")
    return OrderOut.model_validate(order)


@orders_router.get("/{order_id}", response_model=OrderOut)
def read_order(
    order_id: int,
    db: Session = Depends(get_db),
) -> OrderOut:
    """Get a stored order with its items."""
    order = get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderOut.model_validate(order)
