"""
Storefront client configuration.

Everything is read from the environment once, at import time.
"""

import os
from typing import Optional


def _optional_float(name: str) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    return float(raw)


# Remote cart/wishlist service
STOREFRONT_API_URL = os.environ.get(
    "STOREFRONT_API_URL", "https://backend-e-commerce-beta.vercel.app/api"
)
# None means "wait as long as the server takes"
STOREFRONT_API_TIMEOUT: Optional[float] = _optional_float("STOREFRONT_API_TIMEOUT")

# Upstash Redis - standard env var names per docs
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

# How long an alert stays visible
ALERT_TTL_SECONDS = float(os.environ.get("ALERT_TTL_SECONDS", "3"))


class CacheKeys:
    """Record names in the local cache."""

    CART = "cart"
    WISHLIST = "wishlist"
    SESSION_ID = "sessionId"  # guest cart identity
    TOKEN = "token"  # bearer token written by the auth layer


class TTL:
    """Time-to-live constants for cache records (in seconds)."""

    LIST_SNAPSHOT = 86400  # 24 hours
    SESSION_ID = 2592000  # 30 days
