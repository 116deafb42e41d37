"""Tests for moving items between wishlist and cart"""
import pytest

from storefront.cart import CartManager
from storefront.errors import ServerError
from storefront.models import LineItemKey
from storefront.services.transfer import move_to_cart, move_to_wishlist
from storefront.wishlist import WishlistManager


@pytest.fixture
def managers(fake_api, cache, notifier):
    return WishlistManager(fake_api, cache, notifier), CartManager(fake_api, cache, notifier)


@pytest.mark.asyncio
async def test_move_to_cart(managers, fake_api):
    wishlist, cart = managers
    fake_api.wishlist = ["prod-jeans"]
    await wishlist.load()

    result = await move_to_cart(wishlist, cart, LineItemKey("prod-jeans", "32"))

    assert result.success
    assert cart.contains(LineItemKey("prod-jeans", "32"))
    assert not wishlist.contains(LineItemKey("prod-jeans"))
    assert fake_api.calls == ["get_wishlist", "add_to_cart", "remove_from_wishlist"]


@pytest.mark.asyncio
async def test_move_to_cart_remove_failure_keeps_both(managers, fake_api, notifier):
    """Never dropped from both lists; partial move is reported."""
    wishlist, cart = managers
    fake_api.wishlist = ["prod-jeans"]
    await wishlist.load()
    fake_api.fail_next("remove_from_wishlist", ServerError("Wishlist is locked", status_code=423))

    result = await move_to_cart(wishlist, cart, LineItemKey("prod-jeans"))

    assert not result.success
    assert "Wishlist is locked" in result.message
    assert cart.contains(LineItemKey("prod-jeans"))
    assert wishlist.contains(LineItemKey("prod-jeans"))


@pytest.mark.asyncio
async def test_move_to_cart_add_failure_stops(managers, fake_api):
    wishlist, cart = managers
    fake_api.wishlist = ["prod-jeans"]
    await wishlist.load()
    fake_api.fail_next("add_to_cart", ServerError("Out of stock", status_code=409))

    result = await move_to_cart(wishlist, cart, LineItemKey("prod-jeans"))

    assert not result.success
    assert result.message == "Out of stock"
    assert "remove_from_wishlist" not in fake_api.calls
    assert wishlist.contains(LineItemKey("prod-jeans"))


@pytest.mark.asyncio
async def test_move_to_wishlist(managers, fake_api):
    wishlist, cart = managers
    key = LineItemKey("prod-shirt", "M")
    fake_api.cart[key] = 2
    await cart.load()

    result = await move_to_wishlist(cart, wishlist, key)

    assert result.success
    assert wishlist.contains(key)
    assert not cart.contains(key)


@pytest.mark.asyncio
async def test_move_to_wishlist_remove_failure_keeps_both(managers, fake_api):
    wishlist, cart = managers
    key = LineItemKey("prod-shirt", "M")
    fake_api.cart[key] = 2
    await cart.load()
    fake_api.fail_next("remove_from_cart", ServerError(None, status_code=500))

    result = await move_to_wishlist(cart, wishlist, key)

    assert not result.success
    assert cart.contains(key)
    assert wishlist.contains(key)
