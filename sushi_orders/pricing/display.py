"""
Display labels for priced lines.

Kitchen tickets and the order panel show one entry per distinct addon with
an explicit count, e.g. ``["Sos sojowy ×3 (gratis: 1, płatne: 2)",
"Tempura"]``.
"""

import re
from dataclasses import dataclass
from typing import Iterable

from .models import NormalizedAddon, SauceLine
from .text import fold, label_key
from .vocabulary import PricingVocabulary

_SAUCE_WORD_RE = re.compile(r"\b(sos|sauce)\b")


@dataclass(frozen=True)
class DisplayEntry:
    name: str
    qty: int
    is_sauce: bool = False


def pretty_label(addon: NormalizedAddon) -> str:
    return addon.token.pretty() if addon.token else addon.base


def is_sauce_label(name: str, vocabulary: PricingVocabulary) -> bool:
    return vocabulary.canonical_sauce(name) is not None or bool(_SAUCE_WORD_RE.search(fold(name)))


def collapse(entries: Iterable[DisplayEntry]) -> list[str]:
    """
    Collapse duplicate names into one entry each, in first-appearance order.

    The count is shown as ``×N`` when N > 1, and always for sauces.
    """
    order: list[str] = []
    merged: dict[str, DisplayEntry] = {}
    for entry in entries:
        key = label_key(entry.name)
        if not key:
            continue
        if key in merged:
            prev = merged[key]
            merged[key] = DisplayEntry(prev.name, prev.qty + entry.qty, prev.is_sauce or entry.is_sauce)
        else:
            order.append(key)
            merged[key] = entry

    out = []
    for key in order:
        entry = merged[key]
        if entry.qty > 1 or entry.is_sauce:
            out.append(f"{entry.name} ×{entry.qty}")
        else:
            out.append(entry.name)
    return out


def free_sauce_note(line: SauceLine) -> str:
    """``" (gratis)"``, ``" (gratis: 2)"`` or ``" (gratis: 1, płatne: 2)"``."""
    if line.free <= 0:
        return ""
    if line.charged == 0:
        return " (gratis)" if line.requested == 1 else f" (gratis: {line.free})"
    return f" (gratis: {line.free}, płatne: {line.charged})"


def annotate(labels: list[str], sauce: str, note: str) -> list[str]:
    """Append ``note`` to the collapsed entry for ``sauce``."""
    if not note:
        return labels
    prefix = f"{sauce} ×"
    return [f"{label}{note}" if label.startswith(prefix) else label for label in labels]


def swap_label(source: str, target: str) -> str:
    return f"Zamiana: {source} → {target}"
