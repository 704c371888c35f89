"""
Pricing engine construction.

Both the preview and the order recomputation get their engine from here, so
they share one vocabulary and one price list configuration.
"""

import logging
from typing import Optional

from .. import config
from ..pricing import DEFAULT_VOCABULARY, MenuPriceList, PricingEngine, PricingVocabulary, ProductLookup

logger = logging.getLogger(__name__)


def configured_vocabulary() -> PricingVocabulary:
    """Default vocabulary with the prices overridden by configuration."""
    if config.SAUCE_FALLBACK_PRICE <= 0:
        logger.warning(
            "SAUCE_FALLBACK_PRICE=%s is not positive, keeping %.2f",
            config.SAUCE_FALLBACK_PRICE, DEFAULT_VOCABULARY.sauce_fallback_price,
        )
        fallback = DEFAULT_VOCABULARY.sauce_fallback_price
    else:
        fallback = config.SAUCE_FALLBACK_PRICE
    return DEFAULT_VOCABULARY.with_prices(
        sauce_fallback_price=fallback,
        swap_fee_price=config.SWAP_FEE_PRICE,
    )


def build_pricing_engine(
    product_lookup: Optional[ProductLookup] = None,
    vocabulary: Optional[PricingVocabulary] = None,
) -> PricingEngine:
    """
    Build an engine over a product lookup.

    Args:
        product_lookup: Catalog used for line context and option prices
        vocabulary: Overrides the configured vocabulary (tests)

    Returns:
        PricingEngine whose price list reads the same catalog
    """
    vocabulary = vocabulary or configured_vocabulary()
    price_list = MenuPriceList(vocabulary=vocabulary, products=product_lookup)
    return PricingEngine(price_list, product_lookup, vocabulary)
