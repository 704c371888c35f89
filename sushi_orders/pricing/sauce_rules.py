"""
Sauce Rules and Free-Quota Allocation
=====================================

Most dishes come with some sauce included. How much depends on the dish:

- **per_sauce**: a fixed number of free units of specific sauces. Tempura
  mix gets one Teryiaki and one Spicy Mayo; sets get soy sauce scaled by
  set size.
- **count**: a pool of free units spent across any eligible sauce in a
  fixed priority order. Single rolls get one, sweet potato fries in the
  regional restaurants get one from their own dessert-sauce list.
- **none**: every sauce is charged.

Sauces outside a rule's eligible list are always charged in full. Charged
units use the price list; when it fails or answers with a non-positive
price the vocabulary's fallback price is used so a sauce is never silently
free.

Rule resolution is a pure function of the item's name, subcategory and
restaurant, evaluated first-match-wins.
"""

import logging
import math
import re
from typing import Callable, Iterable, Mapping

from .models import SauceAllocation, SauceLine, SauceRule
from .text import fold
from .vocabulary import DEFAULT_VOCABULARY, PricingVocabulary

logger = logging.getLogger(__name__)

RULE_NONE = "none"
RULE_COUNT = "count"
RULE_PER_SAUCE = "per_sauce"
RULE_KINDS = (RULE_NONE, RULE_COUNT, RULE_PER_SAUCE)


class SauceRuleError(ValueError):
    """Raised for a structurally invalid sauce rule."""


# =============================================================================
# Item recognition
# =============================================================================

TEMPURA_DISHES = ("tempura mix", "krewetki w tempurze", "krewetka w tempurze")
SWEET_POTATO_FRIES = ("frytki z batat", "frytki batat")
SINGLE_ROLL_MARKERS = ("rolk", "california", "uramaki", "futomaki", "futomak", "hosomaki", "hosomak", "maki")
SINGLE_ROLL_NAME_MARKERS = SINGLE_ROLL_MARKERS[1:] + ("roll",)

_SET_NUMBER_RE = re.compile(r"\bzestaw[\s\-]*([0-9]{1,3})\b")
_HUNDRED_PIECES_RE = re.compile(r"\b100\s*szt\b")
_SET_WORD_RE = re.compile(r"\bset\b")


def parse_set_number(name: str) -> int | None:
    """Set number from names like "Zestaw 10", "zestaw10", "Zestaw-5"."""
    match = _SET_NUMBER_RE.search(fold(name))
    return int(match.group(1)) if match else None


def is_set_month(name: str | None) -> bool:
    """Whether this is the rotating set-of-the-month product."""
    plain = re.sub(r"[\s\-_]+", " ", fold(name)).strip()
    return "zestaw miesiac" in plain


def is_set_like(item_name: str, subcategory: str = "") -> bool:
    name = fold(item_name)
    sub = fold(subcategory)
    return (
        sub == "zestawy"
        or "specja" in sub
        or "zestaw" in name
        or " set " in name
        or "lunch" in name
        or bool(_SET_WORD_RE.search(name))
    )


def is_single_roll(item_name: str, subcategory: str = "") -> bool:
    name = fold(item_name)
    sub = fold(subcategory)
    return any(m in sub for m in SINGLE_ROLL_MARKERS) or any(m in name for m in SINGLE_ROLL_NAME_MARKERS)


def is_sweet_potato_fries(item_name: str, restaurant_slug: str, vocabulary: PricingVocabulary) -> bool:
    city = (restaurant_slug or "").strip().lower()
    name = fold(item_name)
    return city in vocabulary.regional_restaurants and any(m in name for m in SWEET_POTATO_FRIES)


def free_soy_for_set(item_name: str) -> int:
    """
    Free soy sauce units for one set.

    Numbered sets 1-7 get one, 8-12 two, set 13 three; the 100-piece set
    gets four. Named sets and anything else set-like get one, except the
    "Tutaj Specjał" set which gets two.
    """
    name = fold(item_name)
    if _HUNDRED_PIECES_RE.search(name) or "100szt" in name:
        return 4

    number = parse_set_number(name)
    if number is not None:
        if 1 <= number <= 7:
            return 1
        if 8 <= number <= 12:
            return 2
        if number == 13:
            return 3

    # "turtaj" is a common misspelling on printed menus
    if "tutaj specjal" in name or "turtaj specjal" in name:
        return 2
    # set of the month, nigiri set, lunch 1-3, vege set 1-2 and any other set
    return 1


def sauces_for_item(item_name: str, restaurant_slug: str, vocabulary: PricingVocabulary) -> tuple[str, ...]:
    """Sauces that can be chosen (and priced under the rule) for an item."""
    if is_sweet_potato_fries(item_name, restaurant_slug, vocabulary):
        return vocabulary.sweet_potato_sauces
    return vocabulary.base_sauces


# =============================================================================
# Resolution
# =============================================================================

def resolve_sauce_rule(
    item_name: str,
    subcategory: str = "",
    restaurant_slug: str = "",
    vocabulary: PricingVocabulary = DEFAULT_VOCABULARY,
) -> SauceRule:
    """
    Decide the free sauce policy for one unit of an item.

    Allowances are per unit: addons and addons_cost are per unit of a line
    and the line total multiplies both by the quantity.

    Args:
        item_name: Display name of the dish
        subcategory: Menu subcategory, may be empty when the product is unknown
        restaurant_slug: Restaurant (city) identifier

    Returns:
        The first matching SauceRule; ``none`` when nothing matches
    """
    eligible = sauces_for_item(item_name, restaurant_slug, vocabulary)
    name = fold(item_name)

    if any(m in name for m in TEMPURA_DISHES):
        return SauceRule(
            kind=RULE_PER_SAUCE,
            eligible=eligible,
            free_by_sauce={"Teryiaki": 1, "Spicy Mayo": 1},
            hint="W cenie: 1× Teryiaki + 1× Spicy Mayo gratis.",
        )

    if is_sweet_potato_fries(item_name, restaurant_slug, vocabulary):
        return SauceRule(
            kind=RULE_COUNT,
            eligible=eligible,
            free_count=1,
            hint="W cenie: 1 wybrany sos gratis (z puli do batatów).",
        )

    if is_set_like(item_name, subcategory):
        free = free_soy_for_set(item_name)
        return SauceRule(
            kind=RULE_PER_SAUCE,
            eligible=eligible,
            free_by_sauce={vocabulary.soy_sauce: free},
            hint=f"W cenie: {free}× {vocabulary.soy_sauce} gratis.",
        )

    if is_single_roll(item_name, subcategory):
        return SauceRule(kind=RULE_COUNT, eligible=eligible, free_count=1, hint="W cenie: 1 sos gratis.")

    return SauceRule(kind=RULE_NONE, eligible=eligible)


def validate_rule(rule: SauceRule) -> None:
    if rule.kind not in RULE_KINDS:
        raise SauceRuleError(f"Unknown sauce rule kind: {rule.kind!r}")
    if rule.free_count < 0:
        raise SauceRuleError(f"Negative free count in sauce rule: {rule.free_count}")
    for sauce, free in rule.free_by_sauce.items():
        if free < 0:
            raise SauceRuleError(f"Negative free units for {sauce!r}: {free}")


# =============================================================================
# Allocation
# =============================================================================

def _ordered(sauces: Iterable[str], priority: Iterable[str]) -> list[str]:
    sauces = set(sauces)
    priority = list(priority)
    head = [s for s in priority if s in sauces]
    tail = sorted(s for s in sauces if s not in priority)
    return head + tail


def allocate_sauces(
    counts: Mapping[str, int],
    rule: SauceRule,
    unit_price: Callable[[str], float],
    vocabulary: PricingVocabulary = DEFAULT_VOCABULARY,
) -> SauceAllocation:
    """
    Split requested sauce units into free and charged.

    Args:
        counts: Canonical sauce name -> requested units
        rule: Resolved rule for the item
        unit_price: Price lookup for one unit of a canonical sauce

    Returns:
        A SauceAllocation with one line per requested sauce, in priority
        order. The result does not depend on the iteration order of
        ``counts``.

    Raises:
        SauceRuleError: If the rule is structurally invalid
    """
    validate_rule(rule)
    eligible = set(rule.eligible)
    pool = rule.free_count if rule.kind == RULE_COUNT else 0
    lines = []

    for sauce in _ordered((s for s, q in counts.items() if q > 0), vocabulary.sauce_priority):
        requested = int(counts[sauce])
        free = 0
        if sauce in eligible:
            if rule.kind == RULE_PER_SAUCE:
                free = min(requested, int(rule.free_by_sauce.get(sauce, 0)))
            elif rule.kind == RULE_COUNT:
                free = min(requested, pool)
                pool -= free
        charged = requested - free
        price = _safe_unit_price(sauce, unit_price, vocabulary) if charged else 0.0
        lines.append(SauceLine(sauce=sauce, requested=requested, free=free, charged=charged, unit_price=price))

    return SauceAllocation(lines=tuple(lines))


def _safe_unit_price(sauce: str, unit_price: Callable[[str], float], vocabulary: PricingVocabulary) -> float:
    try:
        price = float(unit_price(sauce))
    except Exception:
        logger.warning("Price lookup failed for sauce %r, using fallback", sauce, exc_info=True)
        return vocabulary.sauce_fallback_price
    if not math.isfinite(price) or price <= 0:
        logger.warning("Non-positive price %r for sauce %r, using fallback", price, sauce)
        return vocabulary.sauce_fallback_price
    return price


def default_free_sauces(rule: SauceRule, vocabulary: PricingVocabulary = DEFAULT_VOCABULARY) -> list[str]:
    """
    Sauces to pre-select on a new line so the customer sees the free ones.

    ``per_sauce`` yields each configured sauce its free number of times;
    ``count`` cycles through the eligible sauces in priority order.
    """
    validate_rule(rule)
    eligible = list(rule.eligible)
    out: list[str] = []

    if rule.kind == RULE_PER_SAUCE:
        for sauce, free in rule.free_by_sauce.items():
            if sauce in eligible:
                out.extend([sauce] * int(free))
    elif rule.kind == RULE_COUNT and eligible:
        ordered = [s for s in vocabulary.sauce_priority if s in eligible]
        ordered += [s for s in eligible if s not in ordered]
        out = [ordered[i % len(ordered)] for i in range(rule.free_count)]
    return out
