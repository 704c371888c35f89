"""
Pricing Routes for Sushi Orders
===============================

Endpoints behind the cart panel of the ordering UI. They never write to the
database; prices shown here are recomputed when the order is placed.

Endpoints:
----------
- POST /pricing/preview: Price one line (memoized)
- POST /pricing/rules: Free sauce rule, default sauces and set swap targets of a menu item
- POST /pricing/set-edit: Apply one set customization and price the result

Rate Limiting:
--------------
The preview is rate limited per client IP (default: 120/minute); the UI
calls it on every change to a line.

Error Handling:
---------------
- 400: Product not offered in the restaurant, or a set edit that cannot be
  applied (action arguments)
- 422: Malformed request body (FastAPI validation)
- 429: Too many requests
- 500: Invalid sauce rule configuration (logged with traceback)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from ..config import DEFAULT_RESTAURANT_SLUG, RATE_LIMIT_ENABLED, get_rate_limit_preview
from ..db import get_db
from ..pricing import SauceRuleError
from ..schemas.pricing import (
    LinePricingOut,
    PricePreviewRequest,
    SauceRuleOut,
    SauceRulesResponse,
    SetEditRequest,
    SetEditResponse,
)
from ..services.preview import PreviewError, get_preview_service


logger = logging.getLogger(__name__)

# Router definition
pricing_router = APIRouter(prefix="/pricing", tags=["Pricing"])


# =============================================================================
# Rate Limiting Setup
# =============================================================================

# In-memory storage; use storage_uri="redis://..." with multiple workers
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)


# =============================================================================
# Endpoints
# =============================================================================

@pricing_router.post("/preview", response_model=LinePricingOut)
@limiter.limit(get_rate_limit_preview)
def preview_line(
    request: Request,
    payload: PricePreviewRequest,
    db: Session = Depends(get_db),
) -> LinePricingOut:
    """Price one cart line for display."""
    slug = payload.restaurant_slug or DEFAULT_RESTAURANT_SLUG
    service = get_preview_service(db, slug)
    try:
        pricing = service.preview(payload.line)
    except PreviewError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except SauceRuleError:
        logger.exception("Invalid sauce rule while previewing a line")
        raise HTTPException(status_code=500, detail="Invalid sauce rule configuration")
    return LinePricingOut.from_pricing(pricing)


@pricing_router.post("/rules", response_model=SauceRulesResponse)
def sauce_rules(
    payload: PricePreviewRequest,
    db: Session = Depends(get_db),
) -> SauceRulesResponse:
    """Free sauce rule of the line's item, the sauces to pre-select and swap targets."""
    slug = payload.restaurant_slug or DEFAULT_RESTAURANT_SLUG
    service = get_preview_service(db, slug)
    try:
        rule, defaults = service.rules(payload.line)
        swap_options = service.swap_options(payload.line)
    except PreviewError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except SauceRuleError:
        logger.exception("Invalid sauce rule for a line")
        raise HTTPException(status_code=500, detail="Invalid sauce rule configuration")
    return SauceRulesResponse(
        rule=SauceRuleOut.from_rule(rule),
        default_sauces=defaults,
        swap_options=swap_options,
    )


@pricing_router.post("/set-edit", response_model=SetEditResponse)
def set_edit(
    payload: SetEditRequest,
    db: Session = Depends(get_db),
) -> SetEditResponse:
    """Apply one set customization and return the updated, re-priced line."""
    slug = payload.restaurant_slug or DEFAULT_RESTAURANT_SLUG
    service = get_preview_service(db, slug)
    try:
        line = service.edit(
            payload.line,
            payload.action,
            row_key=payload.row_key,
            target=payload.target,
            enabled=payload.enabled,
            extra=payload.extra,
        )
        pricing = service.preview(line)
    except PreviewError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except SauceRuleError:
        logger.exception("Invalid sauce rule while editing a set")
        raise HTTPException(status_code=500, detail="Invalid sauce rule configuration")
    return SetEditResponse(line=line, pricing=LinePricingOut.from_pricing(pricing))
