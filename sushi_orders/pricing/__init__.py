"""
Order-line pricing and free-sauce allocation.

    from sushi_orders.pricing import PricingEngine, MenuPriceList, StaticCatalog

    catalog = StaticCatalog(products)
    engine = PricingEngine(MenuPriceList(products=catalog), catalog)
    engine.price_line({"name": "Zestaw 5", "addons": ["Sos sojowy ×3"]})
"""

from .catalog import PriceLookup, ProductLookup, ProductRecord, StaticCatalog
from .engine import PricingEngine
from .labels import collect_line_addons, merge_sources, normalize
from .models import CatalogToken, LinePricing, NormalizedAddon, SauceAllocation, SauceRule, SetMeta
from .price_list import MenuPriceList
from .sauce_rules import SauceRuleError, allocate_sauces, default_free_sauces, resolve_sauce_rule
from .set_composition import match_swaps, parse_set_composition
from .vocabulary import DEFAULT_VOCABULARY, PricingVocabulary

__all__ = [
    "CatalogToken",
    "DEFAULT_VOCABULARY",
    "LinePricing",
    "MenuPriceList",
    "NormalizedAddon",
    "PriceLookup",
    "PricingEngine",
    "PricingVocabulary",
    "ProductLookup",
    "ProductRecord",
    "SauceAllocation",
    "SauceRule",
    "SauceRuleError",
    "SetMeta",
    "StaticCatalog",
    "allocate_sauces",
    "collect_line_addons",
    "default_free_sauces",
    "match_swaps",
    "merge_sources",
    "normalize",
    "parse_set_composition",
    "resolve_sauce_rule",
]
