"""
Pricing Schemas for Sushi Orders
================================

Pydantic models for the interactive pricing endpoints used by the cart
panel of the ordering UI.

Endpoint Coverage:
------------------
- POST /pricing/preview: Price one cart line
- POST /pricing/rules: Free sauce rule and swap targets of a menu item
- POST /pricing/set-edit: Apply one set customization and re-price

Cart Lines:
-----------
Lines are accepted as free-form objects. Clients have written addons into
``addons``, ``extras``, ``sauces``/``sosy``/``sos``, ``selected_addons``,
``toppings`` and the same fields under ``options``, as strings, objects,
maps and catalog tokens; the pricing engine reads all of them.

Usage:
------
    request = PricePreviewRequest(line={"name": "Zestaw 5", "addons": ["Sos sojowy ×3"]})
    response = LinePricingOut.from_pricing(pricing)
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..pricing import LinePricing, SauceRule


class PricePreviewRequest(BaseModel):
    """
    Request body for previewing one line.

    Attributes:
        line: The cart line as stored by the client
        restaurant_slug: Restaurant (city); defaults to the configured one
    """
    line: Dict[str, Any]
    restaurant_slug: Optional[str] = None


class SauceRuleOut(BaseModel):
    """Free sauce policy of a menu item."""
    kind: str
    eligible: List[str]
    free_count: int = 0
    free_by_sauce: Dict[str, int] = Field(default_factory=dict)
    hint: Optional[str] = None

    @classmethod
    def from_rule(cls, rule: SauceRule) -> "SauceRuleOut":
        return cls(
            kind=rule.kind,
            eligible=list(rule.eligible),
            free_count=rule.free_count,
            free_by_sauce=dict(rule.free_by_sauce),
            hint=rule.hint,
        )


class SauceLineOut(BaseModel):
    sauce: str
    requested: int
    free: int
    charged: int
    unit_price: float
    cost: float


class SetMetaOut(BaseModel):
    """
    Set customization state derived from the line's addons and swaps.

    Attributes:
        whole_set_baked: The whole set is baked
        baked_rows: Keys of individually baked rows
        upgraded: The size upgrade is taken
        row_extras: Row key -> extras added to that row
        swap_fee_count: Rows charged a swap fee
        swaps: Human-readable swap labels
    """
    whole_set_baked: bool = False
    baked_rows: List[str] = Field(default_factory=list)
    upgraded: bool = False
    row_extras: Dict[str, List[str]] = Field(default_factory=dict)
    swap_fee_count: int = 0
    swaps: List[str] = Field(default_factory=list)


class LinePricingOut(BaseModel):
    """
    Response model for a priced line.

    ``addons_cost`` is per unit of the line; multiply by quantity together
    with the unit price for the line total.
    """
    model_config = ConfigDict(from_attributes=True)

    addons_cost: float
    display_addons: List[str]
    display_swaps: List[str] = Field(default_factory=list)
    set_meta: Optional[SetMetaOut] = None
    sauce_rule: SauceRuleOut
    sauces: List[SauceLineOut] = Field(default_factory=list)
    sauce_cost: float = 0.0

    @classmethod
    def from_pricing(cls, pricing: LinePricing) -> "LinePricingOut":
        meta = pricing.set_meta
        return cls(
            addons_cost=pricing.addons_cost,
            display_addons=list(pricing.display_addons),
            display_swaps=list(pricing.display_swaps),
            set_meta=SetMetaOut.model_validate(meta, from_attributes=True) if meta else None,
            sauce_rule=SauceRuleOut.from_rule(pricing.sauce_rule),
            sauces=[
                SauceLineOut(
                    sauce=line.sauce,
                    requested=line.requested,
                    free=line.free,
                    charged=line.charged,
                    unit_price=line.unit_price,
                    cost=round(line.cost, 2),
                )
                for line in pricing.sauce_allocation.lines
            ],
            sauce_cost=pricing.sauce_allocation.cost,
        )


class SauceRulesResponse(BaseModel):
    """
    Resolved rule and what the UI pre-fills for a new line.

    Attributes:
        rule: Free sauce policy of the item
        default_sauces: Sauces pre-selected as free
        swap_options: Set row key -> products the row can be swapped to
    """
    rule: SauceRuleOut
    default_sauces: List[str] = Field(default_factory=list)
    swap_options: Dict[str, List[str]] = Field(default_factory=dict)


class SetEditRequest(BaseModel):
    """
    Request body for one set customization.

    Attributes:
        line: Current cart line
        action: What to change
        row_key: Set row (swap, bake_row, row_extra)
        target: Swap target; omitted or null restores the row
        enabled: On/off for bake_set, bake_row and upgrade
        extra: Extra name (extra, row_extra)
        restaurant_slug: Restaurant used to price the updated line
    """
    line: Dict[str, Any]
    action: Literal["swap", "bake_set", "bake_row", "upgrade", "extra", "row_extra"]
    row_key: Optional[str] = None
    target: Optional[str] = None
    enabled: bool = True
    extra: Optional[str] = None
    restaurant_slug: Optional[str] = None


class SetEditResponse(BaseModel):
    line: Dict[str, Any]
    pricing: LinePricingOut
