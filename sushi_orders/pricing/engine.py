"""
Line Pricing Engine
===================

Prices one cart/order line: the cost of its addons on top of the unit price,
the free/charged split of its sauces and the collapsed labels shown to the
customer and the kitchen.

The same engine backs the interactive preview and the authoritative
recomputation at order creation; only the price and product lookups handed
to it differ.

Cost formula (per unit of the line):
------------------------------------
    plain addons (price lookup x qty)
  + extras (once each)
  + charged sauces
  + whole-set bake surcharge, or the per-row bake surcharges
  + swap fee x rows whose ingredient was swapped
  + size upgrade
  + per-row extras

Whole-set bake and per-row bakes are mutually exclusive. When the set's
composition is known, the swap fee count is recomputed from the rows and
swaps; otherwise the number of swap fee markers on the line is used.
"""

import logging
from typing import Any, Mapping

from .catalog import PriceLookup, ProductLookup, ProductRecord
from .classifier import ClassifiedAddons, classify, row_bake_label
from .display import DisplayEntry, annotate, collapse, free_sauce_note, is_sauce_label, pretty_label, swap_label
from .labels import collect_line_addons
from .models import LinePricing, NormalizedAddon, RowMatch, SauceRule, SetMeta
from .sauce_rules import RULE_PER_SAUCE, allocate_sauces, is_set_month, resolve_sauce_rule
from .set_composition import find_row, is_noop_swap, match_swaps, parse_set_composition, parse_swaps
from .text import strip_price_note
from .vocabulary import DEFAULT_VOCABULARY, PricingVocabulary

logger = logging.getLogger(__name__)

NAME_KEYS = ("name", "product_name", "productName", "title", "label")
PRODUCT_ID_KEYS = ("product_id", "productId", "id")


class PricingEngine:
    """
    Computes addon costs and display labels for order lines.

    Requires a price lookup and a product lookup. Both are consulted
    synchronously and are expected to be cheap.
    """

    def __init__(
        self,
        price_lookup: PriceLookup,
        product_lookup: ProductLookup | None = None,
        vocabulary: PricingVocabulary = DEFAULT_VOCABULARY,
    ):
        """
        Initialize the pricing engine.

        Args:
            price_lookup: Prices one addon label, optionally for a host dish.
                          Signature: price_for(label, item_name_hint) -> float
            product_lookup: Finds products by id or name.
                            Signature: lookup(key) -> ProductRecord | None
            vocabulary: Sauce names, markers and price tables
        """
        self._prices = price_lookup
        self._products = product_lookup
        self.vocabulary = vocabulary

    # =========================================================================
    # Line context
    # =========================================================================

    def find_product(self, line: Mapping[str, Any]) -> ProductRecord | None:
        if self._products is None:
            return None
        for key in PRODUCT_ID_KEYS:
            value = line.get(key)
            if value not in (None, ""):
                product = self._products.lookup(str(value))
                if product is not None:
                    return product
        product_info = line.get("product")
        if isinstance(product_info, Mapping) and product_info.get("id") is not None:
            product = self._products.lookup(str(product_info["id"]))
            if product is not None:
                return product
        name = self.item_name(line)
        return self._products.lookup(name) if name else None

    @staticmethod
    def item_name(line: Mapping[str, Any], product: ProductRecord | None = None) -> str:
        if product is not None:
            return product.name
        for key in NAME_KEYS:
            value = line.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        product_info = line.get("product")
        if isinstance(product_info, Mapping) and isinstance(product_info.get("name"), str):
            return product_info["name"]
        return ""

    @staticmethod
    def subcategory(line: Mapping[str, Any], product: ProductRecord | None = None) -> str:
        if product is not None and product.subcategory:
            return product.subcategory
        for key in ("subcategory", "category"):
            if isinstance(line.get(key), str):
                return line[key]
        product_info = line.get("product")
        if isinstance(product_info, Mapping):
            return str(product_info.get("subcategory") or product_info.get("category") or "")
        return ""

    def _describe(self, name: str) -> str | None:
        if self._products is None:
            return None
        product = self._products.lookup(name)
        return product.description if product else None

    def _price(self, label: str, item_name: str) -> float:
        return float(self._prices.price_for(label, item_name))

    def _sauce_price(self, sauce: str, item_name: str, classified: ClassifiedAddons) -> float:
        token = classified.sauce_tokens.get(sauce)
        return self._price(token.encode() if token else sauce, item_name)

    # =========================================================================
    # Pricing
    # =========================================================================

    def resolve_rule(self, line: Mapping[str, Any], restaurant_slug: str = "") -> SauceRule:
        product = self.find_product(line)
        return resolve_sauce_rule(
            self.item_name(line, product),
            self.subcategory(line, product),
            restaurant_slug,
            vocabulary=self.vocabulary,
        )

    def price_line(self, line: Mapping[str, Any], restaurant_slug: str = "") -> LinePricing:
        """
        Price one line.

        Args:
            line: Raw cart/order line. Addons may be spread over ``addons``,
                  ``extras``, ``sauces``, ``selected_addons``, ``toppings``
                  and the same fields under ``options``; swaps come from
                  ``swaps`` (or ``options.swaps``).
            restaurant_slug: Restaurant (city) the order is placed in

        Returns:
            LinePricing with the per-unit addons cost
        """
        vocab = self.vocabulary
        product = self.find_product(line)
        item_name = self.item_name(line, product)
        subcategory = self.subcategory(line, product)

        addons = collect_line_addons(line)
        classified = classify(addons, vocab)

        rule = resolve_sauce_rule(item_name, subcategory, restaurant_slug, vocabulary=vocab)
        allocation = allocate_sauces(
            classified.sauces, rule, lambda sauce: self._sauce_price(sauce, item_name, classified), vocab,
        )

        cost = allocation.cost
        for addon in classified.plain + classified.tartar_bases:
            label = addon.token.encode() if addon.token else addon.base
            cost += self._price(label, item_name) * addon.qty
        for extra in classified.extras:
            cost += self._price(extra, item_name)

        set_meta, set_cost, display_swaps = self._price_set(line, product, item_name, classified)
        cost += set_cost

        display = self._display(addons, classified)
        soy = allocation.for_sauce(vocab.soy_sauce)
        if rule.kind == RULE_PER_SAUCE and rule.free_by_sauce.get(vocab.soy_sauce, 0) > 0 and soy:
            display = annotate(display, vocab.soy_sauce, free_sauce_note(soy))

        result = LinePricing(
            addons_cost=round(cost, 2),
            display_addons=display,
            display_swaps=display_swaps,
            set_meta=set_meta,
            sauce_rule=rule,
            sauce_allocation=allocation,
        )
        logger.debug(
            "Priced %r: addons_cost=%.2f rule=%s swap_fees=%d",
            item_name, result.addons_cost, rule.kind, set_meta.swap_fee_count if set_meta else 0,
        )
        return result

    def _price_set(
        self,
        line: Mapping[str, Any],
        product: ProductRecord | None,
        item_name: str,
        classified: ClassifiedAddons,
    ) -> tuple[SetMeta | None, float, list[str]]:
        vocab = self.vocabulary
        set_month = is_set_month(item_name)
        options = line.get("options") if isinstance(line.get("options"), Mapping) else {}
        swaps = [] if set_month else parse_swaps(line.get("swaps") or options.get("swaps") or [])
        rows = parse_set_composition(product.description) if product else []

        if not rows and not swaps and not classified.has_set_markers:
            return None, 0.0, []

        meta = SetMeta(
            whole_set_baked=classified.whole_set_bake is not None,
            upgraded=classified.upgraded,
        )
        matches: list[RowMatch] = match_swaps(rows, swaps, self._describe) if rows else []

        if rows:
            meta.swap_fee_count = sum(1 for m in matches if m.fee_applies)
            meta.swaps = [swap_label(m.row.label, m.effective_ingredient) for m in matches if m.fee_applies]
        else:
            meta.swap_fee_count = classified.swap_fee_markers
            meta.swaps = [swap_label(s.from_key, s.to) for s in swaps if not is_noop_swap(s.from_key, s.to)]
        if set_month:
            meta.swap_fee_count = 0

        if not meta.whole_set_baked:
            meta.baked_rows = self._valid_baked_rows(classified.baked_rows, rows, matches)
        elif classified.baked_rows:
            logger.debug("Whole set baked; ignoring %d row bake marker(s)", len(classified.baked_rows))

        for extra in classified.row_extras:
            meta.row_extras.setdefault(extra.row_key, []).append(extra.extra)

        cost = 0.0
        if meta.whole_set_baked:
            cost += self._price(classified.whole_set_bake, item_name)
        for row_key in meta.baked_rows:
            cost += self._price(row_bake_label(row_key, vocab), item_name)
        if meta.swap_fee_count:
            cost += meta.swap_fee_count * self._price(vocab.swap_fee_name, item_name)
        if meta.upgraded:
            cost += self._price(vocab.upgrade_name, item_name)
        for extra in classified.row_extras:
            cost += self._price(extra.label, item_name)

        return meta, cost, list(meta.swaps)

    @staticmethod
    def _valid_baked_rows(baked_rows: list[str], rows, matches: list[RowMatch]) -> list[str]:
        if not rows:
            return list(baked_rows)
        valid = []
        for row_key in baked_rows:
            row = find_row(rows, row_key)
            match = next((m for m in matches if m.row == row), None) if row else None
            if match is None or not match.bake_allowed:
                logger.info("Dropping bake marker for row %r: row missing or not bakeable", row_key)
                continue
            valid.append(row_key)
        return valid

    def _display(self, addons: list[NormalizedAddon], classified: ClassifiedAddons) -> list[str]:
        vocab = self.vocabulary
        hidden_rows = {extra.label for extra in classified.row_extras}
        entries = []
        seen_extras = set()

        for addon in addons:
            base = addon.base
            if addon.token is None and (
                base == vocab.swap_fee_name
                or base in vocab.whole_set_bake_names
                or base.startswith(vocab.row_bake_prefix)
                or base in hidden_rows
            ):
                continue
            sauce = vocab.canonical_sauce(base)
            if sauce is not None:
                entries.append(DisplayEntry(sauce, addon.qty, True))
                continue
            extra = vocab.extra_name(strip_price_note(base)) if addon.token is None else None
            if extra is not None:
                if extra not in seen_extras:
                    seen_extras.add(extra)
                    entries.append(DisplayEntry(extra, 1))
                continue
            name = pretty_label(addon)
            entries.append(DisplayEntry(name, addon.qty, is_sauce_label(name, vocab)))

        return collapse(entries)
