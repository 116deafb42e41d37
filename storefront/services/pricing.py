"""
Pricing calculator.

Totals are derived from the line items every time they are asked for; nothing
here stores a total, so a total can never drift from the items it came from.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable

from storefront.services.money import add, compare, format_money, multiply

if TYPE_CHECKING:
    from storefront.cart.models import CartLineItem

FREE_DELIVERY_THRESHOLD = Decimal("1000")  # strictly above this ships free
DELIVERY_CHARGE = Decimal("99")


@dataclass(frozen=True)
class Totals:
    """Price breakdown for a list of cart line items."""
    items_price: Decimal
    delivery_charge: Decimal
    total_price: Decimal

    @property
    def free_delivery(self) -> bool:
        return self.delivery_charge == 0

    def to_dict(self) -> dict:
        """Convert to dictionary (strings keep Decimal precision in JSON)."""
        return {
            "items_price": str(self.items_price),
            "delivery_charge": str(self.delivery_charge),
            "total_price": str(self.total_price),
        }

    def formatted(self, currency: str = "INR") -> dict:
        """Display strings, with "Free" for a waived delivery charge."""
        return {
            "items_price": format_money(self.items_price, currency),
            "delivery_charge": "Free" if self.free_delivery else format_money(self.delivery_charge, currency),
            "total_price": format_money(self.total_price, currency),
        }


def delivery_charge_for(items_price: Decimal) -> Decimal:
    """Flat delivery fee, waived above the threshold and for an empty cart."""
    if compare(items_price, FREE_DELIVERY_THRESHOLD) > 0:
        return Decimal("0")
    if compare(items_price, 0) > 0:
        return DELIVERY_CHARGE
    return Decimal("0")


def compute_totals(items: Iterable["CartLineItem"]) -> Totals:
    """
    Compute subtotal, delivery charge and grand total.

    Args:
        items: Cart line items (any iterable, consumed once)

    Returns:
        Totals with exact Decimal amounts
    """
    items_price = Decimal("0")
    for item in items:
        items_price = add(items_price, multiply(item.unit_price, item.quantity))

    delivery = delivery_charge_for(items_price)
    return Totals(
        items_price=items_price,
        delivery_charge=delivery,
        total_price=add(items_price, delivery),
    )


def total_quantity(items: Iterable["CartLineItem"]) -> int:
    """Number of units across all line items (the cart badge count)."""
    return sum(item.quantity for item in items)
