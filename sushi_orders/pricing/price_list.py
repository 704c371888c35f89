"""
Menu Price List.

Default implementation of the price lookup the engine depends on. Lookup
order for one label:

1. catalog tokens: the price embedded in the token
2. the host product's own option-group prices
3. sauces, set markers, tartar bases and extras from the vocabulary
4. anything else is unknown and priced at the vocabulary's unknown price
"""

import logging

from .catalog import ProductLookup, ProductRecord
from .classifier import parse_row_extra
from .labels import extract_explicit_qty
from .models import CatalogToken
from .sauce_rules import is_set_month, parse_set_number
from .set_composition import parse_set_upgrade
from .text import clean_label
from .vocabulary import DEFAULT_VOCABULARY, PricingVocabulary

logger = logging.getLogger(__name__)


class MenuPriceList:
    """
    Prices addon labels, optionally in the context of a host dish.

    The host dish matters for the whole-set bake surcharge (per set number),
    the size upgrade (parsed from the set description), the swap fee (waived
    for the set of the month) and product-specific option prices.
    """

    def __init__(
        self,
        vocabulary: PricingVocabulary = DEFAULT_VOCABULARY,
        products: ProductLookup | None = None,
    ):
        self.vocabulary = vocabulary
        self._products = products

    def _product(self, item_name_hint: str | None) -> ProductRecord | None:
        if not item_name_hint or self._products is None:
            return None
        return self._products.lookup(item_name_hint)

    def set_bake_price(self, item_name: str | None) -> float:
        number = parse_set_number(item_name or "")
        if number is not None and number in self.vocabulary.set_bake_prices:
            return float(self.vocabulary.set_bake_prices[number])
        return self.vocabulary.set_bake_fallback_price

    def upgrade_price(self, item_name: str | None) -> float:
        product = self._product(item_name)
        upgrade = parse_set_upgrade(product.description if product else None)
        return upgrade.price if upgrade else self.vocabulary.upgrade_fallback_price

    def price_for(self, label: str, item_name_hint: str | None = None) -> float:
        vocab = self.vocabulary
        text = clean_label(label)

        token = CatalogToken.parse(text)
        if token is not None:
            return token.price
        if CatalogToken.looks_like_token(text):
            logger.warning("Malformed catalog token %r priced at 0", text)
            return 0.0

        product = self._product(item_name_hint)
        if product is not None and text in product.option_prices:
            return product.option_prices[text] / 100

        if vocab.canonical_sauce(text):
            return vocab.sauce_price
        if text == vocab.swap_fee_name:
            if is_set_month(item_name_hint):
                return 0.0
            return vocab.swap_fee_price
        if text in vocab.tartar_bases or text.startswith(vocab.free_prefixes):
            return 0.0
        if text in vocab.whole_set_bake_names:
            return self.set_bake_price(item_name_hint)
        if text == vocab.upgrade_name:
            return self.upgrade_price(item_name_hint)
        if text.startswith(vocab.row_bake_prefix):
            return vocab.row_bake_price

        row_extra = parse_row_extra(text, vocab)
        if row_extra is not None:
            extra = vocab.extra_in_text(row_extra.extra)
            if extra is not None:
                return vocab.extra_prices[extra]

        extra = vocab.extra_name(text)
        if extra is not None:
            return vocab.extra_prices[extra]

        base, qty = extract_explicit_qty(text)
        if qty is not None and base != text:
            return self.price_for(base, item_name_hint)

        logger.warning("Unknown addon label %r priced at %.2f", text, vocab.unknown_addon_price)
        return vocab.unknown_addon_price
