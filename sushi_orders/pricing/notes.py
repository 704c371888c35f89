"""
Set swap summaries and note reconciliation.

Older clients described set swaps three different ways: structured
``set_swaps`` entries, plain ``swaps`` pairs and a generated summary written
into the line's free-text note. This module builds the structured form for
the kitchen and reads every legacy shape back, so a swap is shown once and
an auto-generated summary is not mistaken for a customer's note.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .catalog import ProductRecord
from .classifier import parse_row_extra
from .labels import normalize
from .models import SwapIntent
from .sauce_rules import is_set_month
from .set_composition import is_noop_swap, parse_set_composition, split_arrow, swap_compare_key
from .text import clean_label, fold
from .vocabulary import PricingVocabulary

logger = logging.getLogger(__name__)

OPTION_NOTE_FIELDS = ("note", "customer_note", "client_note", "comment")
LINE_NOTE_FIELDS = ("item_note", "customer_note", "client_note", "note", "comment")

_QTY_WORD_RE = re.compile(r"\b\d+\s*[x×]\s*\S+")


@dataclass
class SetSwapDetail:
    to: str
    from_label: str | None = None
    qty: int | None = None
    addons: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.from_label) and not is_noop_swap(self.from_label, self.to)

    def line(self) -> str:
        """``"2× Futomaki łosoś → Futomak Vege (+ Tempura)"``; unchanged rows show their label."""
        prefix = f"{self.qty}× " if self.qty and self.qty > 1 else ""
        body = f"{self.from_label} → {self.to}" if self.changed else (self.from_label or self.to)
        extras = f" (+ {', '.join(self.addons)})" if self.addons else ""
        return f"{prefix}{body}{extras}"

    def as_payload(self) -> dict:
        payload: dict[str, Any] = {"qty": self.qty, "from": self.from_label, "to": self.to}
        if self.addons:
            payload["addons"] = list(self.addons)
        return payload


def build_set_swaps_payload(
    product: ProductRecord | None,
    swaps: Iterable[SwapIntent],
    addons: Iterable[str],
    vocabulary: PricingVocabulary,
) -> list[SetSwapDetail]:
    """
    Per-row swap summary of a set line for the kitchen.

    Every declared row is listed with its target (the original ingredient
    when unswapped) and its per-row extras. Returns an empty list for
    anything that is not a set, and for the set of the month.
    """
    if product is None or is_set_month(product.name):
        return []
    if fold(product.subcategory).strip() != "zestawy":
        return []
    rows = parse_set_composition(product.description)
    if not rows:
        return []

    swaps = list(swaps)
    extras = [parse_row_extra(a.base, vocabulary) for a in normalize(list(addons))]
    extras = [e for e in extras if e is not None]

    details = []
    for row in rows:
        found = next((s for s in swaps if s.from_key.lower() == row.key.lower()), None)
        details.append(SetSwapDetail(
            qty=row.qty,
            from_label=row.label,
            to=found.to if found else row.ingredient,
            addons=[e.extra for e in extras if e.row_key.lower() == row.key.lower()],
        ))
    return details


def set_swaps_note(details: Iterable[SetSwapDetail]) -> str:
    """One-line kitchen note listing the swapped rows and rows with extras."""
    return "; ".join(d.line() for d in details if d.changed or d.addons)


def has_arrow(text: str | None) -> bool:
    return "→" in (text or "") or "->" in (text or "")


def _parse_qty(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        digits = re.sub(r"[^\d]", "", value)
        return int(digits) if digits else None
    return None


def read_set_swaps(raw_set_swaps: Any, raw_swaps: Any = None) -> list[SetSwapDetail]:
    """
    Read stored ``set_swaps`` entries, repairing legacy shapes.

    - ``"FROM → TO"`` written into ``to`` (or into ``label``) is split
    - a missing ``from`` is filled from the plain ``swaps`` pair with the
      same target
    - no-op entries ("Futomaki X" -> "X") are dropped

    When there are no ``set_swaps`` at all the plain swaps are used instead.
    """
    plain = [s for s in (raw_swaps or []) if isinstance(s, Mapping)]
    details = []

    for entry in raw_set_swaps or []:
        if not isinstance(entry, Mapping):
            continue
        label = clean_label(entry.get("label")) if isinstance(entry.get("label"), str) else ""
        src = clean_label(entry.get("from")) if isinstance(entry.get("from"), str) else ""
        dst = clean_label(entry.get("to")) if isinstance(entry.get("to"), str) else ""

        if not src and has_arrow(dst):
            left, right = split_arrow(dst)
            if right:
                src, dst = clean_label(left), clean_label(right)
        if (not src or not dst) and has_arrow(label):
            left, right = split_arrow(label)
            src = src or clean_label(left)
            dst = dst or clean_label(right)
        if not dst and label and not has_arrow(label):
            dst = label
        if not dst:
            continue

        if not src:
            hit = next(
                (s for s in plain if isinstance(s.get("to"), str) and swap_compare_key(s["to"]) == swap_compare_key(dst)),
                None,
            )
            if hit and isinstance(hit.get("from"), str):
                src = clean_label(hit["from"])
        if src and is_noop_swap(src, dst):
            continue

        addons = [a.render() for a in normalize([entry.get(k) for k in ("addons", "extras", "toppings", "sauces")])]
        details.append(SetSwapDetail(to=dst, from_label=src or None, qty=_parse_qty(entry.get("qty")), addons=addons))

    if details or raw_set_swaps:
        return details

    for swap in plain:
        src = clean_label(swap.get("from")) if isinstance(swap.get("from"), str) else ""
        dst = clean_label(swap.get("to")) if isinstance(swap.get("to"), str) else ""
        if not src and not dst:
            continue
        if src and dst and is_noop_swap(src, dst):
            continue
        details.append(SetSwapDetail(to=dst or src, from_label=src or None))
    return details


def looks_like_swap_summary(text: str | None) -> bool:
    """Whether a note looks generated from swaps rather than typed by a customer."""
    value = (text or "").strip()
    arrows = value.count("→") + value.count("->")
    if not arrows:
        return False
    if arrows >= 2 or ";" in value or "\n" in value:
        return True
    return bool(_QTY_WORD_RE.search(value))


def customer_note(line: Mapping, is_set: bool = False) -> str | None:
    """
    The customer's own note for a line.

    Generated notes store the customer's text left of a ``|``; that part
    always wins. Otherwise the note is dropped on sets when it is only an
    auto-generated swap summary.
    """
    options = line.get("options") if isinstance(line.get("options"), Mapping) else {}
    candidate = next(
        (
            value for value in (
                *(options.get(k) for k in OPTION_NOTE_FIELDS),
                *(line.get(k) for k in LINE_NOTE_FIELDS),
            )
            if isinstance(value, str) and value
        ),
        None,
    )
    if candidate is None:
        return None
    if "|" in candidate:
        left = candidate.split("|", 1)[0].strip()
        if left:
            return left
    if is_set and looks_like_swap_summary(candidate):
        logger.debug("Suppressing generated swap summary in set note")
        return None
    return candidate.strip() or None
