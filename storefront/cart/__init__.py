"""Cart package: line item model and state manager."""
from .models import CartLineItem
from .service import CartManager

__all__ = [
    "CartLineItem",
    "CartManager",
]
