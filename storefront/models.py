"""Types shared by the cart and the wishlist."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from storefront.services.money import to_decimal

ProductRef = str


@dataclass(frozen=True)
class LineItemKey:
    """
    Identity of a cart or wishlist entry.

    ``variant=None`` (no size picked) and ``variant=""`` are different keys.
    """
    product_id: ProductRef
    variant: Optional[str] = None

    def __post_init__(self):
        if not self.product_id or not isinstance(self.product_id, str):
            raise ValueError("product_id must be a non-empty string")
        if self.variant is not None and not isinstance(self.variant, str):
            raise ValueError("variant must be a string or None")

    def to_dict(self) -> dict:
        return {"product_id": self.product_id, "variant": self.variant}

    @classmethod
    def from_dict(cls, data: dict) -> "LineItemKey":
        return cls(product_id=data["product_id"], variant=data.get("variant"))


@dataclass(frozen=True)
class ProductSummary:
    """Display fields copied from the server's product representation.

    ``price`` is the price shown on the product card. Cart totals always use
    the line item's ``unit_price``.
    """
    name: str = ""
    image: Optional[str] = None
    price: Optional[Decimal] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "image": self.image,
            "price": str(self.price) if self.price is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ProductSummary":
        data = data or {}
        price = data.get("price")
        return cls(
            name=data.get("name", ""),
            image=data.get("image"),
            price=to_decimal(price) if price is not None else None,
        )
