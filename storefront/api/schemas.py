"""
Wire schemas for the remote cart/wishlist service.

Every response arrives as ``{"data": {...}}``. These helpers validate the
envelope, turn individual entries into domain items, and raise RoutingError
when the body is not what the API returns (a misrouted HTML page, a different
JSON document). A missing list is never read as an empty one.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Generic, Optional, TypeVar

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic import ValidationError as SchemaError

from storefront.cart.models import CartLineItem
from storefront.errors import ERROR_UNEXPECTED_RESPONSE, RoutingError
from storefront.logging import format_key, get_logger
from storefront.models import LineItemKey, ProductSummary
from storefront.services.money import to_decimal
from storefront.wishlist.models import WishlistItem

logger = get_logger(__name__)

T = TypeVar("T")


class RemoteProductRef(BaseModel):
    """Product as embedded in a wishlist entry; price is optional there."""
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    image: Optional[str] = None
    price: Optional[Decimal] = None

    class Config:
        extra = "ignore"

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        if v is None:
            return None
        if isinstance(v, bool):
            raise ValueError("price must be a number")
        return to_decimal(v)

    def summary(self) -> ProductSummary:
        return ProductSummary(name=self.name, image=self.image, price=self.price)


class RemoteProduct(RemoteProductRef):
    """Populated product inside a cart entry."""
    price: Decimal

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        if v is None or isinstance(v, bool):
            raise ValueError("price is required")
        return to_decimal(v)


class RemoteCartEntry(BaseModel):
    """``{product, quantity, size}`` as returned under ``data.cart.items``."""
    product: RemoteProduct
    quantity: int
    size: Optional[str] = None

    class Config:
        extra = "ignore"

    def to_line_item(self) -> CartLineItem:
        return CartLineItem(
            key=LineItemKey(self.product.id, self.size),
            quantity=self.quantity,
            unit_price=self.product.price,
            summary=self.product.summary(),
        )


@dataclass(frozen=True)
class ListPayload(Generic[T]):
    """Parsed list plus the optional server message."""
    items: tuple[T, ...]
    message: Optional[str] = None


def _unwrap(body: Any) -> dict:
    if not isinstance(body, dict) or not isinstance(body.get("data"), dict):
        raise RoutingError(ERROR_UNEXPECTED_RESPONSE)
    return body["data"]


def _message(data: dict) -> Optional[str]:
    message = data.get("message")
    return message if isinstance(message, str) and message else None


def parse_cart_entry(raw: Any) -> Optional[CartLineItem]:
    """One server entry, or None if it cannot be a valid line item."""
    try:
        return RemoteCartEntry.model_validate(raw).to_line_item()
    except (SchemaError, ValueError) as e:
        logger.warning(f"Dropping malformed cart entry: {type(e).__name__}")
        return None


def parse_wishlist_entry(raw: Any) -> Optional[WishlistItem]:
    """
    Wishlist entries come in several shapes: ``{product: {...}}``,
    ``{product: "<id>"}``, a bare product object or a bare id string.
    """
    if isinstance(raw, str) and raw:
        return WishlistItem(key=LineItemKey(raw))
    if isinstance(raw, dict) and "product" in raw:
        raw = raw["product"]
        if isinstance(raw, str) and raw:
            return WishlistItem(key=LineItemKey(raw))
    try:
        product = RemoteProductRef.model_validate(raw)
        return WishlistItem(key=LineItemKey(product.id), summary=product.summary())
    except (SchemaError, ValueError) as e:
        logger.warning(f"Dropping malformed wishlist entry: {type(e).__name__}")
        return None


def _dedupe(items: list, kind: str) -> tuple:
    seen = set()
    unique = []
    for item in items:
        if item.key in seen:
            logger.warning(f"Duplicate {kind} entry for {format_key(item.key)}, keeping first")
            continue
        seen.add(item.key)
        unique.append(item)
    return tuple(unique)


def parse_cart_payload(body: Any) -> ListPayload[CartLineItem]:
    """Parse ``{"data": {"cart": {"items": [...]}, "message": ...}}``."""
    data = _unwrap(body)
    cart = data.get("cart")
    if not isinstance(cart, dict) or not isinstance(cart.get("items"), list):
        raise RoutingError(ERROR_UNEXPECTED_RESPONSE)

    parsed = [parse_cart_entry(raw) for raw in cart["items"]]
    items = _dedupe([item for item in parsed if item is not None], "cart")
    return ListPayload(items=items, message=_message(data))


def parse_wishlist_payload(body: Any) -> ListPayload[WishlistItem]:
    """Parse ``{"data": {"wishlist": [...], "message": ...}}``."""
    data = _unwrap(body)
    entries = data.get("wishlist")
    # Some deployments nest the list like the cart does
    if isinstance(entries, dict):
        entries = entries.get("items")
    if not isinstance(entries, list):
        raise RoutingError(ERROR_UNEXPECTED_RESPONSE)

    parsed = [parse_wishlist_entry(raw) for raw in entries]
    items = _dedupe([item for item in parsed if item is not None], "wishlist")
    return ListPayload(items=items, message=_message(data))
