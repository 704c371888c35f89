"""
Text normalization helpers shared by the pricing modules.

Menu labels arrive typed by hand, pasted from the admin panel or copied from
older orders, so the same sauce can show up as "Żurawina", "zurawina" or
"ŻURAWINA ". These helpers give every module the same notion of equality.
"""

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")

# Trailing price notes like "(+2 zł)" or "+2,50 zł"
_PRICE_NOTE_PAREN_RE = re.compile(r"\s*\(\s*\+\s*\d+[.,]?\d*\s*zł\s*\)\s*$", re.IGNORECASE)
_PRICE_NOTE_RE = re.compile(r"\s*\+\s*\d+[.,]?\d*\s*zł\s*$", re.IGNORECASE)


def clean_label(text: str | None) -> str:
    """NFKC-normalize, trim and collapse inner whitespace."""
    if not text:
        return ""
    text = unicodedata.normalize("NFKC", str(text))
    return _WHITESPACE_RE.sub(" ", text).strip()


def fold(text: str | None) -> str:
    """
    Lower-case and strip diacritics.

    Polish "ł" has no combining form in NFD, so it is mapped explicitly.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", str(text))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.replace("ł", "l").replace("Ł", "l").lower()


def compact_key(text: str | None) -> str:
    """Folded text with everything except ASCII letters and digits removed."""
    return _NON_ALNUM_RE.sub("", fold(text))


def label_key(text: str | None) -> str:
    """Folded, whitespace-collapsed key used to compare display labels."""
    return _WHITESPACE_RE.sub(" ", fold(clean_label(text))).strip()


def strip_price_note(text: str) -> str:
    """Remove a trailing "(+2 zł)" / "+2 zł" price note from a label."""
    text = _PRICE_NOTE_PAREN_RE.sub("", text or "")
    return _PRICE_NOTE_RE.sub("", text).strip()


def collapse_spaces(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text or "").strip()
