"""
Set Editor
==========

Pure editing operations behind the set customization panel. Each takes a
cart line (a plain dict) and returns an updated copy; the input is never
mutated.

The operations keep the structural markers in ``addons`` consistent with
the line's swaps:

- after every swap the swap fee markers are rewritten to the recomputed
  fee count
- a per-row bake marker whose row stopped being bakeable is removed
- baking the whole set removes every per-row bake marker
- the set of the month accepts no swaps
"""

from copy import deepcopy
import logging
from typing import Any, Callable, Mapping

from .catalog import ProductRecord
from .classifier import parse_row_extra, row_bake_label, row_extra_label
from .labels import normalize
from .sauce_rules import is_set_month
from .set_composition import find_row, is_noop_swap, match_swaps, parse_set_composition, parse_set_upgrade, parse_swaps
from .vocabulary import PricingVocabulary

logger = logging.getLogger(__name__)

Describe = Callable[[str], str | None]


def _addons(line: Mapping[str, Any]) -> list[str]:
    return [a.render() for a in normalize(line.get("addons"))]


def _without(addons: list[str], predicate: Callable[[str], bool]) -> list[str]:
    return [a for a in addons if not predicate(a)]


def _copy(line: Mapping[str, Any]) -> dict:
    updated = deepcopy(dict(line))
    updated["addons"] = _addons(line)
    return updated


def _sync_set_markers(
    line: dict,
    product: ProductRecord,
    vocabulary: PricingVocabulary,
    describe: Describe | None,
) -> dict:
    rows = parse_set_composition(product.description)
    swaps = parse_swaps(line.get("swaps") or [])
    matches = match_swaps(rows, swaps, describe)
    fee_count = 0 if is_set_month(product.name) else sum(1 for m in matches if m.fee_applies)

    addons = _without(line["addons"], lambda a: normalize(a)[0].base == vocabulary.swap_fee_name)
    addons.extend([vocabulary.swap_fee_name] * fee_count)

    def stale_bake(label: str) -> bool:
        if not label.startswith(vocabulary.row_bake_prefix):
            return False
        row = find_row(rows, label[len(vocabulary.row_bake_prefix):])
        match = next((m for m in matches if m.row == row), None)
        if match is None or not match.bake_allowed:
            logger.info("Clearing bake marker %r after swap", label)
            return True
        return False

    line["addons"] = _without(addons, stale_bake)
    return line


def apply_row_swap(
    line: Mapping[str, Any],
    product: ProductRecord,
    row_key: str,
    target: str | None,
    vocabulary: PricingVocabulary,
    describe: Describe | None = None,
) -> dict:
    """
    Swap one set row to ``target``; ``None`` (or the original ingredient)
    restores the row.
    """
    if is_set_month(product.name):
        logger.debug("Ignoring swap on set of the month %r", product.name)
        return _copy(line)

    rows = parse_set_composition(product.description)
    row = find_row(rows, row_key)
    if row is None:
        logger.debug("Ignoring swap for unknown row %r", row_key)
        return _copy(line)

    updated = _copy(line)
    swaps = [
        {"from": s.from_key, "to": s.to}
        for s in parse_swaps(updated.get("swaps") or [])
        if find_row(rows, s.from_key) != row
    ]
    if target and not is_noop_swap(row.ingredient, target):
        swaps.append({"from": row.key, "to": target.strip()})
    updated["swaps"] = swaps
    return _sync_set_markers(updated, product, vocabulary, describe)


def toggle_whole_set_bake(line: Mapping[str, Any], enabled: bool, vocabulary: PricingVocabulary) -> dict:
    updated = _copy(line)
    addons = _without(updated["addons"], lambda a: a in vocabulary.whole_set_bake_names)
    if enabled:
        addons = _without(addons, lambda a: a.startswith(vocabulary.row_bake_prefix))
        addons.append(vocabulary.whole_set_bake_name)
    updated["addons"] = addons
    return updated


def toggle_row_bake(
    line: Mapping[str, Any],
    product: ProductRecord,
    row_key: str,
    enabled: bool,
    vocabulary: PricingVocabulary,
    describe: Describe | None = None,
) -> dict:
    """
    Mark one row as baked.

    Refused (line returned unchanged) when the whole set is already baked or
    the row's current ingredient cannot be baked.
    """
    updated = _copy(line)
    rows = parse_set_composition(product.description)
    row = find_row(rows, row_key)
    if row is None:
        return updated
    label = row_bake_label(row.key, vocabulary)
    addons = _without(updated["addons"], lambda a: a == label)

    if enabled:
        if any(a in vocabulary.whole_set_bake_names for a in addons):
            logger.debug("Row bake refused: whole set already baked")
            return updated
        matches = match_swaps(rows, parse_swaps(updated.get("swaps") or []), describe)
        match = next(m for m in matches if m.row == row)
        if not match.bake_allowed:
            logger.debug("Row bake refused: %r is not bakeable", match.effective_ingredient)
            return updated
        addons.append(label)

    updated["addons"] = addons
    return updated


def set_upgrade(
    line: Mapping[str, Any],
    product: ProductRecord,
    enabled: bool,
    vocabulary: PricingVocabulary,
) -> dict:
    """Toggle the set size upgrade; only offered when the description advertises one."""
    updated = _copy(line)
    addons = _without(updated["addons"], lambda a: a == vocabulary.upgrade_name)
    if enabled and parse_set_upgrade(product.description) is not None:
        addons.append(vocabulary.upgrade_name)
    updated["addons"] = addons
    return updated


def toggle_extra(line: Mapping[str, Any], extra: str, vocabulary: PricingVocabulary) -> dict:
    """Add a one-shot extra, or remove it when it is already on the line."""
    name = vocabulary.extra_name(extra)
    if name is None:
        raise ValueError(f"Unknown extra: {extra!r}")
    updated = _copy(line)
    addons = updated["addons"]
    present = [a for a in addons if vocabulary.extra_name(normalize(a)[0].base) == name]
    if present:
        updated["addons"] = [a for a in addons if a not in present]
    else:
        updated["addons"] = addons + [name]
    return updated


def toggle_row_extra(
    line: Mapping[str, Any],
    row_key: str,
    extra: str,
    vocabulary: PricingVocabulary,
) -> dict:
    """Add or remove an extra on a single set row."""
    name = vocabulary.extra_name(extra)
    if name is None:
        raise ValueError(f"Unknown extra: {extra!r}")
    updated = _copy(line)
    addons = updated["addons"]
    existing = []
    for addon in addons:
        parsed = parse_row_extra(addon, vocabulary)
        if parsed is not None and parsed.row_key == row_key and parsed.extra == name:
            existing.append(addon)
    if existing:
        updated["addons"] = [a for a in addons if a not in existing]
    else:
        updated["addons"] = addons + [row_extra_label(row_key, name, vocabulary)]
    return updated
