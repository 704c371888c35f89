"""
Addon Label Normalizer
======================

Order lines reach us from several generations of clients, and the "same"
addon can be written as any of:

- a bare string: ``"Sos sojowy"``
- a string with a quantity marker: ``"Sos sojowy ×2"``, ``"2x Sos sojowy"``
- a list of any of these
- a map of name to count: ``{"Sos sojowy": 2, "Tempura": true}``
- an object with label/qty fields: ``{"label": "Mango", "qty": 3}``
- a catalog token: ``"DBMOD|grp|opt|300|Podwójny ser"``

``normalize`` converges all of them on one ordered list of
``NormalizedAddon(base, qty)``. Quantity markers are stripped from the base
and folded into ``qty``; empty and placeholder entries are dropped; a
malformed quantity counts as 1.

The rendering of a normalized list normalizes back to the same pairs, so
lines that have been priced once can be priced again from their stored
strings.
"""

import logging
import math
import re
from typing import Any, Iterable, Mapping

from .models import CatalogToken, NormalizedAddon
from .text import clean_label, label_key, strip_price_note

logger = logging.getLogger(__name__)


# =============================================================================
# Field names
# =============================================================================

LABEL_KEYS = (
    "label", "name", "title", "value", "option", "variant",
    "sauce", "sos", "sauce_name", "sos_name",
)

QTY_KEYS = ("qty", "quantity", "count", "times", "amount", "x")

# "amount"/"x" may be a surcharge rather than a repeat count when one of these
# keys sits on the same object
AMBIGUOUS_QTY_KEYS = ("amount", "x")
PRICE_LIKE_KEYS = (
    "price", "unit_price", "total_price", "amount_price", "value_price",
    "cost", "fee", "surcharge", "dopłata",
)

# Bookkeeping keys of a name -> value map that are never addon names
IGNORED_MAP_KEYS = frozenset(
    QTY_KEYS + (
        "id", "sku", "price", "unit_price", "total_price", "amount_price",
        "note", "comment", "type", "items",
    )
)

PRIMARY_FIELDS = ("addons", "extras", ("sauces", "sosy", "sos"), "selected_addons", "toppings")
SECONDARY_FIELDS = ("addons", "extras", ("sauces", "sosy", "sos"))


# =============================================================================
# Quantity markers
# =============================================================================

# "Sos ×2", "Sos × 2"
_SUFFIX_TIMES_RE = re.compile(r"^(.*?)\s*×\s*(\d+)\s*$")
# "Sos x2", "Sos x 2"; the x must follow whitespace so "Mix2" stays a name
_SUFFIX_X_RE = re.compile(r"^(.*?\S)\s+[xX]\s*(\d+)\s*$")
# "2× Sos", "2x Sos", "2 x Sos"
_PREFIX_RE = re.compile(r"^(\d+)\s*(?:×|[xX](?=\s))\s*(.+)$")

# Strings that carry nothing but a quantity
_QTY_TOKENS_RE = re.compile(r"^(?:[×xX]\s*\d+\s*)+$")
_QTY_TOKEN_RE = re.compile(r"[×xX]\s*(\d+)")
_QTY_LITERAL_RE = re.compile(r"^(\d+)\s*[×xX]?$")


def _to_qty(digits: str) -> int:
    qty = int(digits)
    return qty if qty > 0 else 1


def extract_explicit_qty(text: str) -> tuple[str, int | None]:
    """
    Split a label into its base and explicit quantity.

    Returns ``(base, None)`` when the label has no marker. Stacked markers
    ("2x Sos ×3") multiply.
    """
    base = clean_label(text)
    qty = None
    while base:
        match = _SUFFIX_TIMES_RE.match(base) or _SUFFIX_X_RE.match(base)
        if match and match.group(1).strip():
            found, base = _to_qty(match.group(2)), match.group(1).strip()
        else:
            match = _PREFIX_RE.match(base)
            if not match or not match.group(2).strip():
                break
            found, base = _to_qty(match.group(1)), match.group(2).strip()
        qty = found if qty is None else qty * found
    return base, qty


def parse_qty_token(text: str) -> int | None:
    """
    Read a quantity-only string.

    ``"x1x1"`` sums to 2, ``"×2"``, ``"2"`` and ``"2x"`` are literal counts.
    Anything else returns None.
    """
    value = clean_label(text)
    if not value:
        return None
    if _QTY_TOKENS_RE.match(value):
        return sum(int(d) for d in _QTY_TOKEN_RE.findall(value)) or None
    match = _QTY_LITERAL_RE.match(value)
    if match:
        return int(match.group(1)) or None
    return None


def _coerce_qty(value: Any) -> int | None:
    if isinstance(value, bool):
        return 1 if value else None
    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value < 1:
            return None
        return int(value)
    if isinstance(value, str):
        return parse_qty_token(value)
    return None


# =============================================================================
# Normalization
# =============================================================================

def normalize(raw: Any) -> list[NormalizedAddon]:
    """Flatten any raw addon representation into ordered (base, qty) pairs."""
    out: list[NormalizedAddon] = []
    _ingest(raw, out)
    return out


def _ingest(raw: Any, out: list[NormalizedAddon]) -> None:
    if raw is None or isinstance(raw, bool):
        return
    if isinstance(raw, NormalizedAddon):
        out.append(raw)
    elif isinstance(raw, CatalogToken):
        out.append(NormalizedAddon(base=raw.name, qty=1, token=raw))
    elif isinstance(raw, str):
        addon = _from_string(raw)
        if addon:
            out.append(addon)
    elif isinstance(raw, Mapping):
        _from_object(raw, out)
    elif isinstance(raw, (list, tuple)):
        for item in raw:
            _ingest(item, out)
    else:
        logger.debug("Ignoring addon of unsupported type %s", type(raw).__name__)


def _from_string(text: str, qty_override: int | None = None) -> NormalizedAddon | None:
    value = clean_label(text)
    if not value or value == "0" or parse_qty_token(value) is not None:
        return None

    if CatalogToken.looks_like_token(value):
        match = _SUFFIX_TIMES_RE.match(value)
        token_text, qty = (match.group(1).strip(), _to_qty(match.group(2))) if match else (value, None)
        token = CatalogToken.parse(token_text)
        if token is None:
            logger.warning("Malformed catalog token %r", token_text)
        elif token.name:
            return NormalizedAddon(base=token.name, qty=qty or qty_override or 1, token=token)
        else:
            return None

    base, qty = extract_explicit_qty(value)
    if not base or base == "0" or parse_qty_token(base) is not None:
        return None
    return NormalizedAddon(base=base, qty=qty or qty_override or 1)


def _from_object(obj: Mapping, out: list[NormalizedAddon]) -> None:
    label = None
    for key in LABEL_KEYS:
        value = obj.get(key)
        if isinstance(value, str) and value.strip():
            label = value
            break

    if label is not None:
        addon = _from_string(label, qty_override=_object_qty(obj))
        if addon:
            out.append(addon)
        return

    produced = len(out)
    for key, value in obj.items():
        if not isinstance(key, str) or key.lower() in IGNORED_MAP_KEYS:
            continue
        _from_map_entry(key, value, out)

    if len(out) == produced and "items" in obj:
        _ingest(obj["items"], out)


def _object_qty(obj: Mapping) -> int | None:
    keys = {str(k).lower() for k in obj}
    price_like = any(k in keys for k in PRICE_LIKE_KEYS)
    for key in QTY_KEYS:
        if key not in obj:
            continue
        if key in AMBIGUOUS_QTY_KEYS and price_like:
            continue
        qty = _coerce_qty(obj[key])
        if qty is not None:
            return qty
    return None


def _from_map_entry(key: str, value: Any, out: list[NormalizedAddon]) -> None:
    if isinstance(value, (Mapping, list, tuple)):
        _ingest(value, out)
        return
    if value is None or value is False or value == "" or value == 0:
        return

    qty = _coerce_qty(value)
    if qty is None and isinstance(value, str):
        # Not a count; the value is itself the label
        addon = _from_string(value)
        if addon:
            out.append(addon)
        return
    if qty is None:
        return

    base, key_qty = extract_explicit_qty(key)
    if not base:
        return
    if qty == 1 and key_qty:
        qty = key_qty
    addon = _from_string(base, qty_override=qty)
    if addon:
        out.append(NormalizedAddon(base=addon.base, qty=qty, token=addon.token))


def render_all(addons: Iterable[NormalizedAddon]) -> list[str]:
    return [addon.render() for addon in addons]


# =============================================================================
# Merging source fields
# =============================================================================

def canonical_key(addon: NormalizedAddon | str) -> str:
    """
    Key under which two reports of the same choice compare equal.

    Catalog tokens compare by name, price notes and quantity markers are
    ignored.
    """
    if isinstance(addon, NormalizedAddon):
        text = addon.base
    else:
        token = CatalogToken.parse(clean_label(addon))
        text = token.name if token else addon
    base, _ = extract_explicit_qty(strip_price_note(clean_label(text)))
    return label_key(base) or label_key(text)


def merge_sources(
    primary: Iterable[NormalizedAddon],
    secondary: Iterable[NormalizedAddon],
) -> list[NormalizedAddon]:
    """
    Merge addons reported by two groups of fields.

    Everything from ``primary`` is kept. An addon from ``secondary`` is added
    only when nothing in ``primary`` shares its canonical key, so one choice
    reported under both groups is counted once.
    """
    primary = list(primary)
    secondary = list(secondary)
    if not primary:
        return secondary
    seen = {canonical_key(a) for a in primary}
    extra = [a for a in secondary if canonical_key(a) not in seen]
    if extra:
        logger.debug("Merged %d addon(s) only present under options", len(extra))
    return primary + extra


def _read_fields(source: Mapping, fields) -> list[NormalizedAddon]:
    out: list[NormalizedAddon] = []
    for key in fields:
        if isinstance(key, tuple):
            # first present alias wins
            value = next((source.get(k) for k in key if source.get(k) is not None), None)
        else:
            value = source.get(key)
        _ingest(value, out)
    return out


def collect_line_addons(line: Mapping) -> list[NormalizedAddon]:
    """Gather a cart line's addons from every field clients write them to."""
    primary = _read_fields(line, PRIMARY_FIELDS)
    options = line.get("options")
    secondary = _read_fields(options, SECONDARY_FIELDS) if isinstance(options, Mapping) else []
    return merge_sources(primary, secondary)
