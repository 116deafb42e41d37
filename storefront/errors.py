"""
Error taxonomy and user-facing messages.

Every error raised below the state managers derives from StorefrontError.
The managers catch them all and turn them into OperationResult values.
"""

from typing import Optional

# Validation
ERROR_QUANTITY_TOO_LOW = "Quantity must be at least 1. Remove the item instead."
ERROR_INVALID_QUANTITY = "Quantity must be a whole number"

# Transport / routing
ERROR_NETWORK = "Could not reach the store. Check your connection and try again."
ERROR_ROUTING = "API request was routed to frontend instead of backend"
ERROR_UNEXPECTED_RESPONSE = "Unexpected response from the store"

# Cart
ERROR_LOAD_CART = "Failed to load cart"
ERROR_ADD_TO_CART = "Failed to add to cart"
ERROR_UPDATE_CART = "Failed to update cart"
ERROR_REMOVE_FROM_CART = "Failed to remove from cart"
ERROR_CLEAR_CART = "Failed to clear cart"
ERROR_STILL_IN_CART = "Item is still in the cart"

# Wishlist
ERROR_LOAD_WISHLIST = "Failed to load wishlist"
ERROR_ADD_TO_WISHLIST = "Failed to add to wishlist"
ERROR_REMOVE_FROM_WISHLIST = "Failed to remove from wishlist"
ERROR_STILL_IN_WISHLIST = "Item is still in the wishlist"


class StorefrontError(Exception):
    """Base class for cart/wishlist failures.

    ``message`` is what the shopper should see. It may be None when the
    server gave no usable text; callers then fall back to their own wording.
    """

    def __init__(self, message: Optional[str] = None):
        self.message = message
        super().__init__(message or type(self).__name__)


class ValidationError(StorefrontError):
    """Request rejected on the client before any network call."""


class NetworkError(StorefrontError):
    """No response was received from the remote service."""

    def __init__(self, message: Optional[str] = ERROR_NETWORK):
        super().__init__(message)


class ServerError(StorefrontError):
    """The remote service answered with a non-2xx status."""

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RoutingError(StorefrontError):
    """The body was HTML or not the expected envelope."""

    def __init__(self, message: Optional[str] = ERROR_ROUTING):
        super().__init__(message)


__all__ = [
    "StorefrontError",
    "ValidationError",
    "NetworkError",
    "ServerError",
    "RoutingError",
]
