"""
Order Recomputation and Persistence
===================================

Authoritative pricing of an order at creation. Every line is re-priced on
the server with the database catalog; prices submitted by the client are
never trusted.

Line Total:
-----------
    line_total = (unit_price + addons_cost) * quantity

``unit_price`` is the catalog base price of the product and ``addons_cost``
is the per-unit cost from the pricing engine. The order total is the sum of
the line totals.

Stored Line Fields:
-------------------
- addons: normalized addon strings, catalog tokens encoded
- swaps: parsed ``{"from", "to"}`` pairs
- set_swaps: per-row summary for the kitchen (sets only)
- display_addons: collapsed labels as shown to the customer
- note: customer's note, followed by ``" | "`` and the set swap summary when
  the set was customized
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.orm import Session

from ..models import Order, OrderItem
from ..pricing import LinePricing, PricingEngine, ProductRecord, collect_line_addons
from ..pricing.labels import render_all
from ..pricing.notes import build_set_swaps_payload, customer_note, read_set_swaps, set_swaps_note
from ..pricing.sauce_rules import is_set_like
from ..pricing.set_composition import parse_swaps
from .catalog import DatabaseCatalog
from .pricing import build_pricing_engine

logger = logging.getLogger(__name__)


class UnknownProductError(ValueError):
    """Raised when an order line references no product in the catalog."""


@dataclass
class PricedLine:
    product: ProductRecord
    quantity: int
    unit_price: float
    pricing: LinePricing
    addons: List[str] = field(default_factory=list)
    swaps: List[Dict[str, str]] = field(default_factory=list)
    set_swaps: List[Dict[str, Any]] = field(default_factory=list)
    note: Optional[str] = None

    @property
    def line_total(self) -> float:
        return round((self.unit_price + self.pricing.addons_cost) * self.quantity, 2)


def _quantity(line: Mapping[str, Any]) -> int:
    try:
        qty = int(line.get("quantity") or 1)
    except (TypeError, ValueError):
        qty = 1
    return max(qty, 1)


def price_order_line(engine: PricingEngine, line: Mapping[str, Any], restaurant_slug: str) -> PricedLine:
    """
    Re-price one submitted line.

    Raises:
        UnknownProductError: The line does not resolve to a catalog product
    """
    product = engine.find_product(line)
    if product is None:
        raise UnknownProductError(f"Unknown product: {engine.item_name(line) or '<unnamed>'}")

    pricing = engine.price_line(line, restaurant_slug)
    addons = render_all(collect_line_addons(line))
    swaps = parse_swaps(line.get("swaps") or [])

    details = build_set_swaps_payload(product, swaps, addons, engine.vocabulary)
    if not details and line.get("set_swaps"):
        details = read_set_swaps(line.get("set_swaps"), line.get("swaps"))

    is_set = is_set_like(product.name, product.subcategory)
    note = customer_note(line, is_set=is_set)
    summary = set_swaps_note(details)
    if summary:
        note = f"{note} | {summary}" if note else summary

    return PricedLine(
        product=product,
        quantity=_quantity(line),
        unit_price=float(product.base_price),
        pricing=pricing,
        addons=addons,
        swaps=[{"from": s.from_key, "to": s.to} for s in swaps],
        set_swaps=[d.as_payload() for d in details],
        note=note,
    )


def recompute_order_total(lines: Iterable[PricedLine]) -> float:
    return round(sum(line.line_total for line in lines), 2)


def create_order(db: Session, lines: List[Mapping[str, Any]], restaurant_slug: str) -> Order:
    """
    Price and persist a new order.

    Args:
        db: Database session
        lines: Submitted cart lines
        restaurant_slug: Restaurant the order is placed in

    Returns:
        The committed Order with its items

    Raises:
        UnknownProductError: A line references no catalog product; nothing
                             is written
    """
    engine = build_pricing_engine(DatabaseCatalog(db, restaurant_slug))
    priced = [price_order_line(engine, line, restaurant_slug) for line in lines]

    order = Order(
        status="new",
        restaurant_slug=restaurant_slug,
        total_price=recompute_order_total(priced),
    )
    db.add(order)
    db.flush()

    for line in priced:
        db.add(OrderItem(
            order_id=order.id,
            product_id=int(line.product.id) if str(line.product.id).isdigit() else None,
            name=line.product.name,
            quantity=line.quantity,
            unit_price=line.unit_price,
            addons=line.addons,
            swaps=line.swaps,
            set_swaps=line.set_swaps or None,
            display_addons=line.pricing.display_addons,
            note=line.note,
            addons_cost=line.pricing.addons_cost,
            line_total=line.line_total,
        ))

    db.commit()
    db.refresh(order)
    logger.info(
        "Order #%d created for %s: %d line(s), total %.2f",
        order.id, restaurant_slug, len(priced), order.total_price,
    )
    return order


def get_order(db: Session, order_id: int) -> Optional[Order]:
    return db.get(Order, order_id)
