"""
Database-backed product lookup.

Loads the products offered in one restaurant into an in-memory catalog the
first time it is asked for anything, so one request reads the products
table once no matter how many lines and addons it prices.
"""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..models import Product
from ..pricing import ProductRecord, StaticCatalog

logger = logging.getLogger(__name__)


def product_to_record(product: Product) -> ProductRecord:
    """Convert a Product row into the record the pricing engine reads."""
    option_prices = {}
    for name, cents in (product.option_prices or {}).items():
        try:
            option_prices[str(name)] = int(cents)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric option price %r on product %s", cents, product.id)
    return ProductRecord(
        id=str(product.id),
        name=product.name,
        subcategory=product.subcategory or "",
        description=product.description or "",
        base_price=float(product.base_price or 0.0),
        option_prices=option_prices,
    )


def load_products(db: Session, restaurant_slug: Optional[str] = None) -> List[ProductRecord]:
    """
    Products offered in a restaurant (shared products included).

    Args:
        db: Database session
        restaurant_slug: Restaurant to load; None loads every product

    Returns:
        Product records, restaurant-specific ones first, then by id
    """
    query = db.query(Product)
    if restaurant_slug:
        query = query.filter(or_(Product.restaurant_slug.is_(None), Product.restaurant_slug == restaurant_slug))
    query = query.order_by(Product.restaurant_slug.is_(None), Product.id)
    return [product_to_record(p) for p in query.all()]


class DatabaseCatalog:
    """
    Product lookup over the products table.

    Restaurant-specific products are loaded before shared ones are
    considered, so a local product wins a name clash.
    """

    def __init__(self, db: Session, restaurant_slug: Optional[str] = None):
        self._db = db
        self._restaurant_slug = restaurant_slug
        self._catalog: Optional[StaticCatalog] = None

    def _load(self) -> StaticCatalog:
        if self._catalog is None:
            records = load_products(self._db, self._restaurant_slug)
            self._catalog = StaticCatalog(records)
            logger.debug(
                "Loaded %d product(s) for restaurant %s", len(records), self._restaurant_slug or "*",
            )
        return self._catalog

    def lookup(self, key: Optional[str]) -> Optional[ProductRecord]:
        return self._load().lookup(key)
