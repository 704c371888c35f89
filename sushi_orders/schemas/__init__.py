"""
Schemas Package for Sushi Orders
================================

Pydantic models used for API request validation and response serialization.

Schema Organization:
--------------------
- **pricing.py**: Line preview, sauce rule and set edit schemas
- **orders.py**: Order and order item schemas

Naming Conventions:
-------------------
- *Out: Response models (e.g., OrderOut) - what API returns
- *Create: Request models for POST (e.g., OrderCreate)
- *Request: Complex request bodies (e.g., PricePreviewRequest)
- *Response: Complex response structures (e.g., SetEditResponse)

Usage:
------
    from sushi_orders.schemas import PricePreviewRequest, LinePricingOut
"""

# Pricing schemas
from .pricing import (
    PricePreviewRequest,
    SauceRuleOut,
    SauceLineOut,
    SetMetaOut,
    LinePricingOut,
    SauceRulesResponse,
    SetEditRequest,
    SetEditResponse,
)

# Order schemas
from .orders import (
    OrderCreate,
    OrderItemOut,
    OrderOut,
)

__all__ = [
    # Pricing
    "PricePreviewRequest",
    "SauceRuleOut",
    "SauceLineOut",
    "SetMetaOut",
    "LinePricingOut",
    "SauceRulesResponse",
    "SetEditRequest",
    "SetEditResponse",
    # Orders
    "OrderCreate",
    "OrderItemOut",
    "OrderOut",
]
