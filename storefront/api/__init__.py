"""Remote cart/wishlist service client."""
from .client import StorefrontAPI
from .schemas import ListPayload, parse_cart_payload, parse_wishlist_payload

__all__ = [
    "StorefrontAPI",
    "ListPayload",
    "parse_cart_payload",
    "parse_wishlist_payload",
]
