"""Wishlist models."""
from dataclasses import dataclass, field

from storefront.models import LineItemKey, ProductSummary


@dataclass(frozen=True)
class WishlistItem:
    """Saved product. No quantity; the key never carries a variant."""
    key: LineItemKey
    summary: ProductSummary = field(default_factory=ProductSummary)

    @property
    def product_id(self) -> str:
        return self.key.product_id

    def to_dict(self) -> dict:
        return {"key": self.key.to_dict(), "summary": self.summary.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "WishlistItem":
        return cls(
            key=LineItemKey.from_dict(data["key"]),
            summary=ProductSummary.from_dict(data.get("summary")),
        )
