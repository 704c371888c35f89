"""
Product lookup contract and an in-memory implementation.

The engine only needs a product's name, subcategory, description and the
prices of its option-group options. Where those come from (the database, a
menu snapshot shipped to the preview, a test fixture) is the caller's
business.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Protocol

from .text import label_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductRecord:
    id: str
    name: str
    subcategory: str = ""
    description: str = ""
    base_price: float = 0.0
    # option name -> price in grosze
    option_prices: Mapping[str, int] = field(default_factory=dict)


class ProductLookup(Protocol):
    def lookup(self, key: str | None) -> ProductRecord | None:
        """Find a product by id or by name."""


class PriceLookup(Protocol):
    def price_for(self, label: str, item_name_hint: str | None = None) -> float:
        """Unit price of one addon label, optionally for a given host dish."""


class StaticCatalog:
    """
    Product lookup over a fixed list of records.

    Names match case- and diacritic-insensitively.
    """

    def __init__(self, products: Iterable[ProductRecord] = ()):
        self._by_id: dict[str, ProductRecord] = {}
        self._by_name: dict[str, ProductRecord] = {}
        for product in products:
            self.add(product)

    def add(self, product: ProductRecord) -> None:
        self._by_id[str(product.id)] = product
        self._by_name.setdefault(label_key(product.name), product)

    def lookup(self, key: str | None) -> ProductRecord | None:
        if key is None or key == "":
            return None
        key = str(key)
        return self._by_id.get(key) or self._by_name.get(label_key(key))

    def products(self) -> list[ProductRecord]:
        return list(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)
