"""
Configuration Module for Sushi Orders
=====================================

This module centralizes the environment variables and defaults used by the
ordering service. Values are read once at import time; ``main.py`` loads a
``.env`` file with python-dotenv before anything imports this module.

Configuration Categories:
-------------------------
- **Database**: SQLAlchemy connection URL for products and orders.

- **Rate Limiting**: Throttling of the interactive pricing preview, which the
  ordering UI calls on every change to a cart line.

- **Pricing**: Prices that differ between deployments (sauce fallback price,
  swap fee) and the size of the preview memoization cache.

- **Restaurants**: Default restaurant slug when a request omits it.

- **CORS Settings**: Allowed origins for the ordering frontend.

Environment Variables:
----------------------
- DATABASE_URL: SQLAlchemy URL (default: "sqlite:///./sushi_orders.db")
- RATE_LIMIT_PREVIEW: Preview endpoint rate limit (default: "120 per minute")
- RATE_LIMIT_ENABLED: Enable/disable rate limiting (default: "true")
- PREVIEW_CACHE_SIZE: Memoized preview results (default: 512)
- SAUCE_FALLBACK_PRICE: Sauce price when the price list fails (default: 2.00)
- SWAP_FEE_PRICE: Fee per swapped set row (default: 5.00)
- DEFAULT_RESTAURANT_SLUG: Restaurant used when none is given (default: "ciechanow")
- CORS_ORIGINS: Comma-separated allowed origins (default: "*")

Usage:
------
    from sushi_orders.config import (
        DATABASE_URL,
        RATE_LIMIT_PREVIEW,
        PREVIEW_CACHE_SIZE,
    )
"""

import os
from typing import List


# =============================================================================
# Database Configuration
# =============================================================================

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./sushi_orders.db")


# =============================================================================
# Rate Limiting Configuration
# =============================================================================
# Uses slowapi with in-memory storage (use Redis for multi-worker prod).

# Rate limit format: "X per Y" where Y is second, minute, hour, or day
RATE_LIMIT_PREVIEW: str = os.getenv("RATE_LIMIT_PREVIEW", "120 per minute")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"


def get_rate_limit_preview() -> str:
    """
    Return the current preview rate limit.

    This function allows dynamic override in tests without modifying
    the module-level constant.

    Returns:
        Rate limit string in "X per Y" format
    """
    return RATE_LIMIT_PREVIEW


# =============================================================================
# Pricing Configuration
# =============================================================================

# Number of distinct preview requests kept in the memoization cache
PREVIEW_CACHE_SIZE: int = int(os.getenv("PREVIEW_CACHE_SIZE", "512"))

# Used when the price list cannot price a charged sauce; must stay above zero
SAUCE_FALLBACK_PRICE: float = float(os.getenv("SAUCE_FALLBACK_PRICE", "2.00"))

SWAP_FEE_PRICE: float = float(os.getenv("SWAP_FEE_PRICE", "5.00"))


# =============================================================================
# Restaurant Configuration
# =============================================================================

DEFAULT_RESTAURANT_SLUG: str = os.getenv("DEFAULT_RESTAURANT_SLUG", "ciechanow")


# =============================================================================
# CORS Configuration
# =============================================================================
# Format: comma-separated list of origins, e.g., "https://sushi.pl,https://admin.sushi.pl"
# Default "*" allows all origins (suitable for development only)

_cors_origins_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in _cors_origins_env.split(",")
    if origin.strip()
] or ["*"]
