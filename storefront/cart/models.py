"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass, field
from decimal import Decimal

from storefront.models import LineItemKey, ProductSummary
from storefront.services.money import multiply, to_decimal


@dataclass(frozen=True)
class CartLineItem:
    """Single line in the cart, exactly as the server last reported it."""
    key: LineItemKey
    quantity: int
    unit_price: Decimal
    summary: ProductSummary = field(default_factory=ProductSummary)

    def __post_init__(self):
        # A zero quantity is a removal, never a line item
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValueError("quantity must be a positive integer")
        if not isinstance(self.unit_price, Decimal):
            object.__setattr__(self, "unit_price", to_decimal(self.unit_price))
        if self.unit_price < 0:
            raise ValueError("unit_price must be a non-negative number")

    @property
    def product_id(self) -> str:
        return self.key.product_id

    @property
    def variant(self):
        return self.key.variant

    @property
    def line_total(self) -> Decimal:
        """Total price for all units."""
        return multiply(self.unit_price, self.quantity)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "key": self.key.to_dict(),
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "summary": self.summary.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLineItem":
        """Create from dictionary."""
        return cls(
            key=LineItemKey.from_dict(data["key"]),
            quantity=int(data["quantity"]),
            unit_price=to_decimal(data["unit_price"]),
            summary=ProductSummary.from_dict(data.get("summary")),
        )
