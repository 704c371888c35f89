"""
Value objects passed between the pricing modules.

All of these are recomputed on every pricing pass and never persisted as
separate entities; only the final addons cost and the raw addon list end up
in the order record.
"""

from dataclasses import dataclass, field
from typing import Mapping

from .text import collapse_spaces


CATALOG_MODIFIER = "catalog_modifier"
CATALOG_VARIANT = "catalog_variant"

_TOKEN_PREFIXES = {CATALOG_MODIFIER: "DBMOD", CATALOG_VARIANT: "DBVAR"}


@dataclass(frozen=True)
class CatalogToken:
    """
    A modifier or variant picked from the product option catalog.

    The price travels with the token; it is never looked up by name.
    Persisted as ``DBMOD|group|id|priceCents|name`` or
    ``DBVAR|id|priceCents|name``.
    """
    kind: str
    option_id: str
    price_cents: int
    name: str
    group_id: str | None = None

    @property
    def price(self) -> float:
        return max(0, self.price_cents) / 100

    def encode(self) -> str:
        prefix = _TOKEN_PREFIXES[self.kind]
        if self.kind == CATALOG_MODIFIER:
            return f"{prefix}|{self.group_id}|{self.option_id}|{self.price_cents}|{self.name}"
        return f"{prefix}|{self.option_id}|{self.price_cents}|{self.name}"

    def pretty(self) -> str:
        """Display form, e.g. ``"Podwójny ser +3.00 zł"``."""
        if self.price_cents > 0:
            return f"{self.name} +{self.price:.2f} zł"
        return self.name

    @classmethod
    def looks_like_token(cls, text: str) -> bool:
        return isinstance(text, str) and text.startswith(("DBMOD|", "DBVAR|"))

    @classmethod
    def parse(cls, text: str) -> "CatalogToken | None":
        """Decode the persisted string form. Malformed tokens return None."""
        if not cls.looks_like_token(text):
            return None
        parts = text.split("|")
        if parts[0] == "DBMOD":
            if len(parts) < 5:
                return None
            group_id, option_id, cents, name_parts = parts[1], parts[2], parts[3], parts[4:]
            kind = CATALOG_MODIFIER
        else:
            if len(parts) < 4:
                return None
            group_id, option_id, cents, name_parts = None, parts[1], parts[2], parts[3:]
            kind = CATALOG_VARIANT
        try:
            price_cents = int(float(cents or 0))
        except ValueError:
            return None
        return cls(
            kind=kind,
            option_id=option_id,
            price_cents=price_cents,
            name="|".join(name_parts).strip(),
            group_id=group_id,
        )


@dataclass(frozen=True)
class NormalizedAddon:
    """One addon with its explicit quantity marker folded into ``qty``."""
    base: str
    qty: int = 1
    token: CatalogToken | None = None

    def render(self) -> str:
        """String form that normalizes back to the same (base, qty) pair."""
        text = self.token.encode() if self.token else self.base
        return f"{text} ×{self.qty}" if self.qty > 1 else text


@dataclass(frozen=True)
class SauceRule:
    """
    Free sauce policy for one menu item.

    ``kind`` is one of ``none``, ``count`` (``free_count`` units pooled
    across ``eligible``) or ``per_sauce`` (``free_by_sauce`` per name).
    """
    kind: str
    eligible: tuple[str, ...]
    free_count: int = 0
    free_by_sauce: Mapping[str, int] = field(default_factory=dict)
    hint: str | None = None


@dataclass(frozen=True)
class SauceLine:
    sauce: str
    requested: int
    free: int
    charged: int
    unit_price: float

    @property
    def cost(self) -> float:
        return self.charged * self.unit_price


@dataclass(frozen=True)
class SauceAllocation:
    lines: tuple[SauceLine, ...] = ()

    @property
    def cost(self) -> float:
        return round(sum(line.cost for line in self.lines), 2)

    def for_sauce(self, sauce: str) -> SauceLine | None:
        for line in self.lines:
            if line.sauce == sauce:
                return line
        return None

    @property
    def free_by_sauce(self) -> dict[str, int]:
        return {line.sauce: line.free for line in self.lines if line.free}

    @property
    def charged_by_sauce(self) -> dict[str, int]:
        return {line.sauce: line.charged for line in self.lines if line.charged}


@dataclass(frozen=True)
class SetRow:
    """One declared row of a set, e.g. ``6x Futomaki łosoś surowy``."""
    qty: int
    category: str
    ingredient: str

    @property
    def label(self) -> str:
        return collapse_spaces(f"{self.category} {self.ingredient}")

    @property
    def key(self) -> str:
        parts = [p.strip() for p in self.ingredient.split("+") if p.strip()]
        if len(parts) > 1:
            fish = [p for p in parts if _is_fish(p)]
            rest = [p for p in parts if not _is_fish(p)]
            parts = fish + rest
            return collapse_spaces(f"{self.category} {' + '.join(parts)}")
        return self.label


def _is_fish(text: str) -> bool:
    lowered = text.lower()
    return any(name in lowered for name in ("łosoś", "losos", "tuńczyk", "tunczyk"))


@dataclass(frozen=True)
class SwapIntent:
    from_key: str
    to: str


@dataclass(frozen=True)
class RowMatch:
    row: SetRow
    effective_ingredient: str
    fee_applies: bool
    bake_allowed: bool = False


@dataclass
class SetMeta:
    whole_set_baked: bool = False
    baked_rows: list[str] = field(default_factory=list)
    upgraded: bool = False
    row_extras: dict[str, list[str]] = field(default_factory=dict)
    swap_fee_count: int = 0
    swaps: list[str] = field(default_factory=list)


@dataclass
class LinePricing:
    addons_cost: float
    display_addons: list[str]
    display_swaps: list[str]
    set_meta: SetMeta | None
    sauce_rule: SauceRule
    sauce_allocation: SauceAllocation
