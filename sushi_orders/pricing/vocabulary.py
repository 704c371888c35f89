"""
Pricing Vocabulary
==================

Every name and price the pricing engine recognizes lives on one immutable
``PricingVocabulary`` instance that is handed to the engine, the resolver
and the price list. Nothing in the engine reads these values from module
globals, so a deployment can swap the whole table (another region, a price
change) without touching code.

Sections:
---------
- **Sauces**: the base list, the regional dessert sauces offered with sweet
  potato fries, spelling aliases and the order in which pooled free units
  are consumed.
- **Extras**: one-shot toppings charged once per line.
- **Set markers**: literal addon labels the ordering UI writes to describe
  structural set changes (bake, swap fee, upgrade, per-row extras).
- **Price tables**: sauce price, swap fee, bake surcharges, upgrade fallback.

Usage:
------
    from sushi_orders.pricing.vocabulary import DEFAULT_VOCABULARY

    vocab = DEFAULT_VOCABULARY.with_prices(sauce_price=2.5)
    vocab.canonical_sauce("teriyaki")  # -> "Teryiaki"
"""

from dataclasses import dataclass, field, replace
from typing import Mapping

from .text import compact_key, strip_price_note


# =============================================================================
# Sauces
# =============================================================================

BASE_SAUCES = (
    "Sos sojowy",
    "Teryiaki",
    "Spicy Mayo",
    "Mango",
    "Sriracha",
    "Żurawina",
)

# Only offered with sweet potato fries in the regional restaurants
REGIONAL_SAUCES = ("Sos czekoladowy", "Sos toffi")

SWEET_POTATO_SAUCES = ("Spicy Mayo", "Teryiaki", "Sos czekoladowy", "Sos toffi")

SAUCE_ALIASES = {
    "Teriyaki": "Teryiaki",
    "Teriyaki sauce": "Teryiaki",
}

SOY_SAUCE = "Sos sojowy"


# =============================================================================
# Extras
# =============================================================================

EXTRA_PRICES = {
    "Tempura": 4.0,
    "Płatek sojowy": 3.0,
    "Tamago": 4.0,
    "Ryba pieczona": 2.0,
}


# =============================================================================
# Set markers
# =============================================================================

SWAP_FEE_NAME = "Zamiana w zestawie"
WHOLE_SET_BAKE = "Zamiana całego zestawu na pieczony"
WHOLE_SET_BAKE_LEGACY = "Zamiana całego zestawu surowego na pieczony (+5 zł)"
ROW_BAKE_PREFIX = "Zamiana surowej rolki na pieczoną: "
ROW_EXTRA_PREFIX = "Dodatek do rolki: "
ROW_EXTRA_SEPARATOR = "—"
SET_UPGRADE_NAME = "Powiększenie zestawu"
SUSHI_SPECIAL_PREFIX = "SUSHI SPECJAŁ: "

TARTAR_BASES = (
    "Podanie: na awokado",
    "Podanie: na ryżu",
    "Podanie: na chipsach krewetkowych",
)


# =============================================================================
# Price tables
# =============================================================================

# Whole-set bake surcharge by set number
SET_BAKE_PRICES = {2: 2.0, 5: 6.0, 7: 2.0, 10: 2.0, 11: 8.0, 12: 4.0, 13: 8.0}


@dataclass(frozen=True)
class PricingVocabulary:
    base_sauces: tuple[str, ...] = BASE_SAUCES
    regional_sauces: tuple[str, ...] = REGIONAL_SAUCES
    sweet_potato_sauces: tuple[str, ...] = SWEET_POTATO_SAUCES
    regional_restaurants: tuple[str, ...] = ("szczytno", "przasnysz")
    sauce_aliases: Mapping[str, str] = field(default_factory=lambda: dict(SAUCE_ALIASES))
    soy_sauce: str = SOY_SAUCE
    extra_prices: Mapping[str, float] = field(default_factory=lambda: dict(EXTRA_PRICES))

    swap_fee_name: str = SWAP_FEE_NAME
    whole_set_bake_names: tuple[str, ...] = (WHOLE_SET_BAKE, WHOLE_SET_BAKE_LEGACY)
    row_bake_prefix: str = ROW_BAKE_PREFIX
    row_extra_prefix: str = ROW_EXTRA_PREFIX
    row_extra_separator: str = ROW_EXTRA_SEPARATOR
    upgrade_name: str = SET_UPGRADE_NAME
    free_prefixes: tuple[str, ...] = (SUSHI_SPECIAL_PREFIX,)
    tartar_bases: tuple[str, ...] = TARTAR_BASES

    sauce_price: float = 2.0
    sauce_fallback_price: float = 2.0
    swap_fee_price: float = 5.0
    row_bake_price: float = 2.0
    set_bake_prices: Mapping[int, float] = field(default_factory=lambda: dict(SET_BAKE_PRICES))
    set_bake_fallback_price: float = 5.0
    upgrade_fallback_price: float = 1.0
    unknown_addon_price: float = 0.0

    @property
    def all_sauces(self) -> tuple[str, ...]:
        return self.base_sauces + tuple(s for s in self.regional_sauces if s not in self.base_sauces)

    @property
    def sauce_priority(self) -> tuple[str, ...]:
        """Order in which a pooled free allowance is consumed."""
        return self.all_sauces

    @property
    def whole_set_bake_name(self) -> str:
        return self.whole_set_bake_names[0]

    def canonical_sauce(self, label: str) -> str | None:
        """
        Resolve a sauce label to its canonical name.

        Comparison ignores case, diacritics, punctuation and a trailing price
        note, so "Teriyaki (+2 zł)" resolves to "Teryiaki".
        """
        key = compact_key(strip_price_note(label or ""))
        if not key:
            return None
        for name in self.all_sauces:
            if compact_key(name) == key:
                return name
        for alias, name in self.sauce_aliases.items():
            if compact_key(alias) == key:
                return name
        return None

    def extra_name(self, label: str) -> str | None:
        """Return the canonical extra name for an exact (case-insensitive) match."""
        wanted = (label or "").strip().lower()
        for name in self.extra_prices:
            if name.lower() == wanted:
                return name
        return None

    def extra_in_text(self, text: str) -> str | None:
        """Find the first extra whose name occurs anywhere in ``text``."""
        lowered = (text or "").lower()
        for name in self.extra_prices:
            if name.lower() in lowered:
                return name
        return None

    def with_prices(self, **prices) -> "PricingVocabulary":
        """Copy of this vocabulary with some prices overridden."""
        return replace(self, **prices)


DEFAULT_VOCABULARY = PricingVocabulary()
