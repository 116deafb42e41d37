"""Pytest configuration and fixtures"""
import asyncio
import os
from decimal import Decimal
from typing import Optional

import pytest

# Set test environment variables before storefront.config is imported
os.environ.setdefault("STOREFRONT_API_URL", "https://store.test/api")
os.environ.setdefault("ALERT_TTL_SECONDS", "3")

from storefront.api.schemas import ListPayload
from storefront.cache import InMemoryCache
from storefront.cart.models import CartLineItem
from storefront.errors import StorefrontError
from storefront.models import LineItemKey, ProductSummary
from storefront.services.notifications import AlertNotifier
from storefront.wishlist.models import WishlistItem

PRODUCTS = {
    "prod-shirt": {"name": "Linen Shirt", "price": Decimal("499"), "image": "shirt.jpg"},
    "prod-jeans": {"name": "Slim Jeans", "price": Decimal("1200"), "image": "jeans.jpg"},
    "prod-cap": {"name": "Cap", "price": Decimal("250"), "image": None},
}


class FakeStorefrontAPI:
    """
    In-memory remote service.

    Each request is applied to server state when it arrives, like the real
    backend. ``hold_arrival`` keeps a request in transit so a later request
    reaches the server first; ``hold_next`` delays only the response, so an
    earlier request answers after a later one.
    """

    def __init__(self, products: Optional[dict] = None):
        self.products = dict(products or PRODUCTS)
        self.cart: dict[LineItemKey, int] = {}
        self.wishlist: list[str] = []
        self.calls: list[str] = []
        self.failures: dict[str, StorefrontError] = {}
        self.gates: dict[str, list[asyncio.Event]] = {}
        self.arrival_gates: dict[str, list[asyncio.Event]] = {}
        self.closed = False

    def fail_next(self, method: str, error: StorefrontError) -> None:
        self.failures[method] = error

    def hold_arrival(self, method: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.arrival_gates.setdefault(method, []).append(gate)
        return gate

    def hold_next(self, method: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates.setdefault(method, []).append(gate)
        return gate

    def _summary(self, product_id: str) -> ProductSummary:
        product = self.products[product_id]
        return ProductSummary(name=product["name"], image=product["image"])

    def _cart_payload(self, message: Optional[str] = None) -> ListPayload:
        items = tuple(
            CartLineItem(
                key=key,
                quantity=quantity,
                unit_price=self.products[key.product_id]["price"],
                summary=self._summary(key.product_id),
            )
            for key, quantity in self.cart.items()
        )
        return ListPayload(items=items, message=message)

    def _wishlist_payload(self) -> ListPayload:
        items = tuple(
            WishlistItem(key=LineItemKey(product_id), summary=self._summary(product_id))
            for product_id in self.wishlist
        )
        return ListPayload(items=items)

    async def _respond(self, method: str, build):
        self.calls.append(method)
        error = self.failures.pop(method, None)
        if error is not None:
            raise error
        arrivals = self.arrival_gates.get(method)
        arrival = arrivals.pop(0) if arrivals else None
        gates = self.gates.get(method)
        gate = gates.pop(0) if gates else None
        if arrival is not None:
            await arrival.wait()
        # Snapshot at arrival time, deliver later if held
        payload = build()
        if gate is not None:
            await gate.wait()
        return payload

    # Cart

    async def get_cart(self):
        return await self._respond("get_cart", self._cart_payload)

    async def add_to_cart(self, key: LineItemKey, quantity: int = 1):
        def build():
            self.cart[key] = self.cart.get(key, 0) + quantity
            return self._cart_payload()
        return await self._respond("add_to_cart", build)

    async def update_cart_item(self, key: LineItemKey, quantity: int):
        def build():
            self.cart[key] = quantity
            return self._cart_payload()
        return await self._respond("update_cart_item", build)

    async def remove_from_cart(self, key: LineItemKey):
        def build():
            self.cart.pop(key, None)
            return self._cart_payload()
        return await self._respond("remove_from_cart", build)

    async def clear_cart(self):
        def build():
            self.cart.clear()
            return self._cart_payload()
        return await self._respond("clear_cart", build)

    # Wishlist

    async def get_wishlist(self):
        return await self._respond("get_wishlist", self._wishlist_payload)

    async def add_to_wishlist(self, key: LineItemKey):
        def build():
            if key.product_id not in self.wishlist:
                self.wishlist.append(key.product_id)
            return self._wishlist_payload()
        return await self._respond("add_to_wishlist", build)

    async def remove_from_wishlist(self, key: LineItemKey):
        def build():
            if key.product_id in self.wishlist:
                self.wishlist.remove(key.product_id)
            return self._wishlist_payload()
        return await self._respond("remove_from_wishlist", build)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def fake_api():
    """In-memory remote service"""
    return FakeStorefrontAPI()


@pytest.fixture
def cache():
    """Empty local cache"""
    return InMemoryCache()


@pytest.fixture
def notifier():
    """Alert notifier with the default expiry"""
    return AlertNotifier(ttl=3)


@pytest.fixture
def shirt_m():
    """Linen shirt, size M"""
    return LineItemKey("prod-shirt", "M")


@pytest.fixture
def sample_cart_item(shirt_m):
    """Two medium shirts"""
    return CartLineItem(
        key=shirt_m,
        quantity=2,
        unit_price=Decimal("499"),
        summary=ProductSummary(name="Linen Shirt", image="shirt.jpg"),
    )


@pytest.fixture
def sample_api_product():
    """Product as the remote service embeds it"""
    return {
        "_id": "prod-shirt",
        "name": "Linen Shirt",
        "price": 499,
        "image": "shirt.jpg",
        "countInStock": 12,
    }
