"""
Interactive Pricing Preview
===========================

Backs the cart panel of the ordering UI. The UI re-prices a line on every
change (a sauce added, a row swapped, the set baked), so results are
memoized on the canonical JSON of the request.

Each restaurant gets its own service over a snapshot of the products that
restaurant offers, the same products the order service prices with, so a
preview and the order placed from it agree on every amount. Lines whose
product the restaurant does not offer are rejected, as orders reject them.
Call ``reset_preview_service()`` after the menu changes.

Set editing:
------------
``PreviewService.edit`` applies one customization of a set line and returns
the updated line, keeping swap fee and bake markers consistent with the
swaps. The UI then previews the returned line.

    service = get_preview_service(db, "ciechanow")
    line = service.edit(line, "swap", row_key="Futomaki łosoś", target="Tamago")
    pricing = service.preview(line)
"""

import json
import logging
import threading
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from .. import config
from ..pricing import LinePricing, PricingVocabulary, ProductRecord, SauceRule, StaticCatalog, default_free_sauces
from ..pricing import set_editor
from ..pricing.sauce_rules import is_set_month
from ..pricing.set_composition import CATEGORY_PREFIX, parse_set_composition, swap_candidates, with_category_prefix
from .catalog import load_products
from .pricing import build_pricing_engine

logger = logging.getLogger(__name__)

EDIT_ACTIONS = ("swap", "bake_set", "bake_row", "upgrade", "extra", "row_extra")


class PreviewError(ValueError):
    """Raised when a line cannot be previewed or a set edit cannot be applied."""


def canonical_request_key(line: Mapping[str, Any], restaurant_slug: str) -> str:
    """Stable cache key: the same line and restaurant always give the same key."""
    return json.dumps(
        {"line": line, "restaurant": restaurant_slug},
        sort_keys=True,
        ensure_ascii=False,
        default=str,
    )


class PreviewService:
    """
    Memoized pricing over one restaurant's menu snapshot.

    Cached LinePricing objects are shared between callers and must not be
    mutated.
    """

    def __init__(
        self,
        catalog: StaticCatalog,
        restaurant_slug: str,
        cache_size: int = 512,
        vocabulary: Optional[PricingVocabulary] = None,
    ):
        self.catalog = catalog
        self.restaurant_slug = restaurant_slug
        self.engine = build_pricing_engine(catalog, vocabulary)
        self._cached_preview = lru_cache(maxsize=cache_size)(self._preview_from_key)

    def _preview_from_key(self, key: str) -> LinePricing:
        request = json.loads(key)
        return self.engine.price_line(request["line"], request["restaurant"])

    def _require_product(self, line: Mapping[str, Any]) -> ProductRecord:
        product = self.engine.find_product(line)
        if product is None:
            raise PreviewError(f"Line does not reference a product offered in {self.restaurant_slug}")
        return product

    def preview(self, line: Mapping[str, Any]) -> LinePricing:
        self._require_product(line)
        return self._cached_preview(canonical_request_key(line, self.restaurant_slug))

    def rules(self, line: Mapping[str, Any]) -> Tuple[SauceRule, List[str]]:
        """Resolved sauce rule of a line and the sauces to pre-select for it."""
        self._require_product(line)
        rule = self.engine.resolve_rule(line, self.restaurant_slug)
        return rule, default_free_sauces(rule, self.engine.vocabulary)

    def swap_options(self, line: Mapping[str, Any]) -> Dict[str, List[str]]:
        """
        Swap targets for each row of a set line, keyed by row key.

        Targets are the restaurant's rolls named with their category, minus
        the row's own ingredient and its synonyms. Sets of the month take
        no swaps and get no options.
        """
        product = self._require_product(line)
        rows = parse_set_composition(product.description)
        if not rows or is_set_month(product.name):
            return {}
        targets = [
            with_category_prefix(p.name, p.subcategory)
            for p in self.catalog.products()
            if p.subcategory.lower() in CATEGORY_PREFIX
        ]
        return {row.key: swap_candidates(row, targets) for row in rows}

    def cache_info(self):
        return self._cached_preview.cache_info()

    def edit(
        self,
        line: Mapping[str, Any],
        action: str,
        row_key: Optional[str] = None,
        target: Optional[str] = None,
        enabled: bool = True,
        extra: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Apply one set customization and return the updated line.

        Args:
            line: Current cart line
            action: One of EDIT_ACTIONS
            row_key: Set row for swap, bake_row and row_extra
            target: Swap target; None restores the row
            enabled: On/off for bake_set, bake_row and upgrade
            extra: Extra name for extra and row_extra

        Raises:
            PreviewError: Unknown action, missing argument or unknown product
        """
        vocab = self.engine.vocabulary
        describe = self._describe

        if action == "bake_set":
            return set_editor.toggle_whole_set_bake(line, enabled, vocab)
        if action in ("extra", "row_extra"):
            if not extra:
                raise PreviewError(f"Action {action!r} requires an extra")
            if action == "row_extra" and not row_key:
                raise PreviewError("Action 'row_extra' requires a row_key")
            try:
                if action == "extra":
                    return set_editor.toggle_extra(line, extra, vocab)
                return set_editor.toggle_row_extra(line, row_key, extra, vocab)
            except ValueError as exc:
                raise PreviewError(str(exc)) from exc

        if action not in EDIT_ACTIONS:
            raise PreviewError(f"Unknown action {action!r}")

        product = self._require_product(line)

        if action == "upgrade":
            return set_editor.set_upgrade(line, product, enabled, vocab)
        if not row_key:
            raise PreviewError(f"Action {action!r} requires a row_key")
        if action == "swap":
            return set_editor.apply_row_swap(line, product, row_key, target, vocab, describe)
        return set_editor.toggle_row_bake(line, product, row_key, enabled, vocab, describe)

    def _describe(self, name: str) -> Optional[str]:
        product = self.catalog.lookup(name)
        return product.description if product else None


# =============================================================================
# Process-wide instances, one per restaurant
# =============================================================================

_services: Dict[str, PreviewService] = {}
_service_lock = threading.Lock()


def get_preview_service(db: Session, restaurant_slug: str) -> PreviewService:
    """Return the restaurant's preview service, snapshotting its menu on first use."""
    service = _services.get(restaurant_slug)
    if service is None:
        with _service_lock:
            service = _services.get(restaurant_slug)
            if service is None:
                catalog = StaticCatalog(load_products(db, restaurant_slug))
                service = PreviewService(catalog, restaurant_slug, cache_size=config.PREVIEW_CACHE_SIZE)
                _services[restaurant_slug] = service
                logger.info("Preview service for %s ready with %d product(s)", restaurant_slug, len(catalog))
    return service


def reset_preview_service() -> None:
    """Drop every restaurant's service so the next request snapshots the menu again."""
    with _service_lock:
        _services.clear()
