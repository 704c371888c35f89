"""
Addon Classifier.

Splits a line's normalized addons into sauces (subject to free allowances),
one-shot extras, set-structural markers and plain priced addons.
"""

import logging
from dataclasses import dataclass, field

from .models import CatalogToken, NormalizedAddon
from .text import strip_price_note
from .vocabulary import PricingVocabulary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowExtra:
    row_key: str
    extra: str
    label: str


@dataclass
class ClassifiedAddons:
    sauces: dict[str, int] = field(default_factory=dict)
    extras: list[str] = field(default_factory=list)
    whole_set_bake: str | None = None
    baked_rows: list[str] = field(default_factory=list)
    swap_fee_markers: int = 0
    upgraded: bool = False
    row_extras: list[RowExtra] = field(default_factory=list)
    tartar_bases: list[NormalizedAddon] = field(default_factory=list)
    plain: list[NormalizedAddon] = field(default_factory=list)
    # canonical sauce -> catalog token it was picked as; charged units use its price
    sauce_tokens: dict[str, CatalogToken] = field(default_factory=dict)

    @property
    def has_set_markers(self) -> bool:
        return bool(
            self.whole_set_bake
            or self.baked_rows
            or self.swap_fee_markers
            or self.upgraded
            or self.row_extras
        )


def parse_row_extra(base: str, vocabulary: PricingVocabulary) -> RowExtra | None:
    """Split ``"Dodatek do rolki: <rowKey> — <extra>"`` into its parts."""
    if not base.startswith(vocabulary.row_extra_prefix):
        return None
    rest = base[len(vocabulary.row_extra_prefix):]
    row_key, sep, extra = rest.partition(vocabulary.row_extra_separator)
    row_key, extra = row_key.strip(), extra.strip()
    if not sep or not row_key or not extra:
        return None
    return RowExtra(row_key=row_key, extra=extra, label=base)


def row_extra_label(row_key: str, extra: str, vocabulary: PricingVocabulary) -> str:
    return f"{vocabulary.row_extra_prefix}{row_key} {vocabulary.row_extra_separator} {extra}"


def row_bake_label(row_key: str, vocabulary: PricingVocabulary) -> str:
    return f"{vocabulary.row_bake_prefix}{row_key}"


def classify(addons: list[NormalizedAddon], vocabulary: PricingVocabulary) -> ClassifiedAddons:
    """
    Partition normalized addons.

    Sauces are summed under their canonical name no matter which label
    spelling or catalog token they arrived as; a token keeps its embedded
    price for the charged units. Extras and structural markers
    are binary: repeating them does not charge them twice.
    """
    result = ClassifiedAddons()

    for addon in addons:
        base = addon.base

        if addon.token is None:
            if base in vocabulary.whole_set_bake_names:
                result.whole_set_bake = result.whole_set_bake or base
                continue
            if base.startswith(vocabulary.row_bake_prefix):
                row_key = base[len(vocabulary.row_bake_prefix):].strip()
                if row_key and row_key not in result.baked_rows:
                    result.baked_rows.append(row_key)
                continue
            if base == vocabulary.swap_fee_name:
                result.swap_fee_markers += addon.qty
                continue
            if base == vocabulary.upgrade_name:
                result.upgraded = True
                continue
            row_extra = parse_row_extra(base, vocabulary)
            if row_extra is not None:
                if row_extra not in result.row_extras:
                    result.row_extras.append(row_extra)
                continue
            if base in vocabulary.tartar_bases:
                result.tartar_bases.append(addon)
                continue

        sauce = vocabulary.canonical_sauce(base)
        if sauce is not None:
            result.sauces[sauce] = result.sauces.get(sauce, 0) + addon.qty
            if addon.token is not None:
                result.sauce_tokens.setdefault(sauce, addon.token)
            continue

        if addon.token is None:
            extra = vocabulary.extra_name(strip_price_note(base))
            if extra is not None:
                if extra not in result.extras:
                    result.extras.append(extra)
                continue

        result.plain.append(addon)

    logger.debug(
        "Classified %d addon(s): %d sauce kind(s), %d extra(s), %d plain",
        len(addons), len(result.sauces), len(result.extras), len(result.plain),
    )
    return result
