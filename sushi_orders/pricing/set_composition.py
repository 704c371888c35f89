"""
Set-Composition Matcher
=======================

Sets declare their rows in the product description, e.g.::

    "16 szt, SUROWY: 6x Futomaki łosoś surowy, 8x Hosomaki ogórek,
     +6x Futomaki krewetka w tempurze za 1 zł!"

This module parses those rows, gives each a stable key, applies the
customer's swaps to them and decides per row whether the swap fee applies
and whether the row may still be baked.

The swap fee count is always derived from the current rows and swaps, never
kept as a running counter, so swapping a row back to its original
ingredient drops the fee again.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from .models import RowMatch, SetRow, SwapIntent
from .text import clean_label, collapse_spaces, fold

logger = logging.getLogger(__name__)


SET_CATEGORIES = ("Futomaki", "California", "Hosomaki", "Nigiri")

_ROW_RE = re.compile(
    r"[+\-–•]?\s*(\d+)\s*x\s*(Futomaki|California|Hosomaki|Nigiri)\s+(.+?)"
    r"(?=(?:[,;\n]|[+\-–•]\s*\d+\s*x\s*(?:Futomaki|California|Hosomaki|Nigiri)|$))",
    re.IGNORECASE,
)
_PRICE_TAIL_RE = re.compile(r"\s+za\s*\d+\s*z[łl].*$", re.IGNORECASE)
_BAKED_NOTE_RE = re.compile(r"\s*\**\(?wersja pieczona[^)]*\)?\s*\**\s*(?:\+\s*\d+\s*z[łl])?", re.IGNORECASE)

_LEADING_QTY_RE = re.compile(r"^\d+\s*[x×]\s*", re.IGNORECASE)
_CATEGORY_PREFIX_RE = re.compile(
    r"^(?:futomaki|futomak|hosomaki|hosomak|uramaki|maki|nigiri|gunkan|california)\b\s*",
    re.IGNORECASE,
)

_UPGRADE_RE = re.compile(r"(\d+)\s*szt[^+\d]*\+\s*(\d+)\s*szt\s*za\s*(\d+)\s*zł[^=]*=\s*(\d+)\s*szt")

# Display prefix per category for swap targets named without one
CATEGORY_PREFIX = {
    "futomaki": "Futomak",
    "hosomaki": "Hosomak",
    "california": "California",
    "nigiri": "Nigiri",
}

# Different names for the same ingredient; never offered as swaps for each other
INGREDIENT_SYNONYMS = (
    ("surimi", "paluszek krabowy", "paluszkiem krabowym", "krab"),
)


def parse_set_composition(description: str | None) -> list[SetRow]:
    """Parse the ``N x <Category> <ingredient>`` rows of a set description."""
    if not description:
        return []
    _, sep, tail = description.partition(":")
    text = tail if sep and tail.strip() else description

    rows = []
    for match in _ROW_RE.finditer(text):
        ingredient = _PRICE_TAIL_RE.sub("", match.group(3))
        ingredient = _BAKED_NOTE_RE.sub("", ingredient).strip()
        if not ingredient:
            continue
        rows.append(SetRow(qty=int(match.group(1)) or 1, category=match.group(2), ingredient=ingredient))
    return rows


def swap_compare_key(text: str | None) -> str:
    """
    Comparison form of a row ingredient or swap target.

    A leading quantity and a known category name are ignored, so
    "Hosomaki Łosoś surowy" and "łosoś surowy" compare equal.
    """
    value = clean_label(text)
    value = _LEADING_QTY_RE.sub("", value)
    value = _CATEGORY_PREFIX_RE.sub("", value)
    return collapse_spaces(value).lower()


def is_noop_swap(original: str, target: str) -> bool:
    return swap_compare_key(original) == swap_compare_key(target)


def _matches_row(row: SetRow, from_key: str) -> bool:
    wanted = collapse_spaces(from_key).lower()
    return wanted in (row.key.lower(), row.label.lower(), collapse_spaces(row.ingredient).lower())


def find_row(rows: Iterable[SetRow], key: str) -> SetRow | None:
    for row in rows:
        if _matches_row(row, key):
            return row
    return None


def row_bake_allowed(text: str) -> bool:
    """A row can be baked when it is raw or fish and not already baked or in tempura."""
    plain = fold(text)
    raw_or_fish = "surow" in plain or "losos" in plain or "tunczyk" in plain
    already = "pieczon" in plain or "tempur" in plain
    return raw_or_fish and not already


def match_swaps(
    rows: Iterable[SetRow],
    swaps: Iterable[SwapIntent],
    describe: Callable[[str], str | None] | None = None,
) -> list[RowMatch]:
    """
    Apply swaps to set rows.

    Args:
        rows: Parsed set rows
        swaps: Swap intents; the last one matching a row wins, unmatched ones
               are ignored
        describe: Optional lookup returning the product description of a
                  swap target, consulted for bake eligibility

    Returns:
        One RowMatch per row, in row order
    """
    swaps = list(swaps)
    matches = []
    for row in rows:
        effective = row.ingredient
        swapped = False
        for swap in swaps:
            if not _matches_row(row, swap.from_key) or not clean_label(swap.to):
                continue
            if is_noop_swap(row.ingredient, swap.to):
                effective, swapped = row.ingredient, False
            else:
                effective, swapped = clean_label(swap.to), True

        bake_text = effective if swapped else row.label
        if swapped and describe is not None:
            bake_text = f"{bake_text} {describe(effective) or ''}"
        matches.append(RowMatch(
            row=row,
            effective_ingredient=effective,
            fee_applies=swapped,
            bake_allowed=row_bake_allowed(bake_text),
        ))

    unmatched = [s.from_key for s in swaps if not any(_matches_row(m.row, s.from_key) for m in matches)]
    if unmatched:
        logger.debug("Ignoring swaps with no matching set row: %s", unmatched)
    return matches


def swap_fee_count(matches: Iterable[RowMatch]) -> int:
    return sum(1 for m in matches if m.fee_applies)


def parse_swaps(raw: Any) -> list[SwapIntent]:
    """
    Read swap intents from a line's ``swaps`` field.

    Accepts ``{"from": .., "to": ..}`` objects and ``"A → B"`` strings.
    """
    out = []
    items = raw if isinstance(raw, (list, tuple)) else [raw]
    for item in items:
        if isinstance(item, Mapping):
            src, dst = item.get("from"), item.get("to")
        elif isinstance(item, str):
            src, dst = split_arrow(item)
        else:
            continue
        src, dst = clean_label(src), clean_label(dst)
        if src and dst:
            out.append(SwapIntent(from_key=src, to=dst))
    return out


_ARROW_RE = re.compile(r"\s*(?:→|->|=>)\s*")


def split_arrow(text: str) -> tuple[str, str]:
    """Split ``"A → B"`` (or ``->``) into its sides; no arrow gives ``("", text)``."""
    parts = _ARROW_RE.split(text or "", maxsplit=1)
    if len(parts) == 2:
        return parts[0].strip(), parts[1].strip()
    return "", (text or "").strip()


# =============================================================================
# Swap targets
# =============================================================================

def with_category_prefix(name: str, subcategory: str | None = None) -> str:
    """Prefix a roll name with its category ("Łosoś" -> "Futomak Łosoś")."""
    base = (name or "").strip()
    if not base:
        return base
    lowered = base.lower()
    if lowered.startswith(("futomak ", "futomaki ", "hosomak ", "hosomaki ", "california ", "nigiri ")):
        return base

    category = None
    for prefix, key in (("futomak", "futomaki"), ("hosomak", "hosomaki"), ("california", "california"), ("nigiri", "nigiri")):
        if lowered.startswith(prefix):
            category = key
            break
    prefix = CATEGORY_PREFIX.get(category or (subcategory or "").lower())
    if not prefix:
        return base
    return f"{prefix} {base[0].upper()}{base[1:]}"


def are_ingredient_synonyms(first: str, second: str) -> bool:
    a, b = (first or "").lower(), (second or "").lower()
    if a == b:
        return False
    return any(
        any(s in a for s in group) and any(s in b for s in group)
        for group in INGREDIENT_SYNONYMS
    )


def swap_candidates(row: SetRow, product_names: Iterable[str]) -> list[str]:
    """Products a row can be swapped to: not the row itself, not a synonym of it."""
    out = []
    for name in product_names:
        if is_noop_swap(row.ingredient, name) or are_ingredient_synonyms(row.ingredient, name):
            continue
        if name not in out:
            out.append(name)
    return out


# =============================================================================
# Set size upgrade
# =============================================================================

@dataclass(frozen=True)
class SetUpgrade:
    base_pieces: int
    extra_pieces: int
    total_pieces: int
    price: float


def parse_set_upgrade(description: str | None) -> SetUpgrade | None:
    """Parse "28 szt + 6 szt za 1 zł = 34 szt" from a set description."""
    if not description:
        return None
    match = _UPGRADE_RE.search(description.lower().replace(",", ".", 1))
    if not match:
        return None
    base, extra, price, total = (int(g) for g in match.groups())
    return SetUpgrade(base_pieces=base, extra_pieces=extra, total_pieces=total, price=float(price))
