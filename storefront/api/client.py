"""
Remote cart/wishlist service client.

Thin async wrapper over httpx. Every method returns the authoritative list the
server sends back after the call; failures surface as the StorefrontError
taxonomy:
- NetworkError: no response at all
- RoutingError: an HTML page or a body that is not the API envelope
- ServerError: non-2xx with the server's ``message`` when it sent one
"""

import time
from typing import Any, Optional
from urllib.parse import quote

import httpx

from storefront.api.schemas import ListPayload, parse_cart_payload, parse_wishlist_payload
from storefront.cache import LocalCache
from storefront.cart.models import CartLineItem
from storefront.config import STOREFRONT_API_TIMEOUT, STOREFRONT_API_URL, TTL, CacheKeys
from storefront.errors import NetworkError, RoutingError, ServerError
from storefront.logging import get_logger, sanitize_for_logging
from storefront.models import LineItemKey
from storefront.wishlist.models import WishlistItem

logger = get_logger(__name__)

HTML_MARKERS = ("<!doctype html", "<html")


# =============================================================================
# Helper Functions
# =============================================================================


def _looks_like_html(response: httpx.Response) -> bool:
    """Detect a frontend page served where the API should have answered."""
    content_type = response.headers.get("content-type", "").lower()
    if "text/html" in content_type:
        return True
    head = response.text.lstrip()[:512].lower()
    return head.startswith(HTML_MARKERS) or "<!doctype html>" in head


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def new_session_id() -> str:
    """Guest cart identity, ``session_<epoch ms>``."""
    return f"session_{int(time.time() * 1000)}"


class StorefrontAPI:
    """Client for the cart and wishlist endpoints."""

    def __init__(
        self,
        base_url: str = STOREFRONT_API_URL,
        cache: Optional[LocalCache] = None,
        timeout: Optional[float] = STOREFRONT_API_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: API root, e.g. ``https://host/api``
            cache: Where the guest session id and bearer token live
            timeout: Seconds per request; None waits indefinitely
            transport: Custom httpx transport (tests use MockTransport)
        """
        self.base_url = base_url
        self.cache = cache
        self._session_id: Optional[str] = None
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    # -------------------------------------------------------------------------
    # Request plumbing
    # -------------------------------------------------------------------------

    async def _read_cache(self, key: str) -> Optional[str]:
        if self.cache is None:
            return None
        try:
            return await self.cache.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}: {type(e).__name__}")
            return None

    async def session_id(self) -> str:
        """Guest session id, created once and persisted in the cache."""
        if self._session_id:
            return self._session_id

        session_id = await self._read_cache(CacheKeys.SESSION_ID)
        if not session_id:
            session_id = new_session_id()
            if self.cache is not None:
                try:
                    await self.cache.set(CacheKeys.SESSION_ID, session_id, ex=TTL.SESSION_ID)
                except Exception as e:
                    logger.warning(f"Failed to persist session id: {type(e).__name__}")
        self._session_id = session_id
        return session_id

    async def _headers(self) -> dict:
        headers = {
            "Accept": "application/json",
            "x-session-id": await self.session_id(),
        }
        # Token is written by the auth layer; read it per request so login/logout apply immediately
        token = await self._read_cache(CacheKeys.TOKEN)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(self, method: str, path: str, *, json: Optional[dict] = None,
                       params: Optional[dict] = None) -> Any:
        headers = await self._headers()
        try:
            response = await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed without response: {type(e).__name__}")
            raise NetworkError() from e

        if _looks_like_html(response):
            logger.error(f"{method} {path} returned an HTML page (status {response.status_code})")
            raise RoutingError()

        body = _decode_json(response)
        if not response.is_success:
            message = _error_message(body)
            logger.warning(
                f"{method} {path} -> {response.status_code}: {sanitize_for_logging(message)}"
            )
            raise ServerError(message, status_code=response.status_code)

        if body is None:
            logger.error(f"{method} {path} returned a non-JSON body")
            raise RoutingError()
        return body

    # -------------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------------

    async def get_cart(self) -> ListPayload[CartLineItem]:
        return parse_cart_payload(await self._request("GET", "/cart"))

    async def add_to_cart(self, key: LineItemKey, quantity: int = 1) -> ListPayload[CartLineItem]:
        body = {"productId": key.product_id, "quantity": quantity, "size": key.variant}
        return parse_cart_payload(await self._request("POST", "/cart/add", json=body))

    async def update_cart_item(self, key: LineItemKey, quantity: int) -> ListPayload[CartLineItem]:
        body = {"productId": key.product_id, "quantity": quantity, "size": key.variant}
        return parse_cart_payload(await self._request("PUT", "/cart/update", json=body))

    async def remove_from_cart(self, key: LineItemKey) -> ListPayload[CartLineItem]:
        params = {"size": key.variant} if key.variant is not None else None
        path = f"/cart/remove/{quote(key.product_id, safe='')}"
        return parse_cart_payload(await self._request("DELETE", path, params=params))

    async def clear_cart(self) -> ListPayload[CartLineItem]:
        return parse_cart_payload(await self._request("DELETE", "/cart/clear"))

    # -------------------------------------------------------------------------
    # Wishlist
    # -------------------------------------------------------------------------

    async def get_wishlist(self) -> ListPayload[WishlistItem]:
        return parse_wishlist_payload(await self._request("GET", "/wishlist"))

    async def add_to_wishlist(self, key: LineItemKey) -> ListPayload[WishlistItem]:
        body = {"productId": key.product_id}
        return parse_wishlist_payload(await self._request("POST", "/wishlist/add", json=body))

    async def remove_from_wishlist(self, key: LineItemKey) -> ListPayload[WishlistItem]:
        path = f"/wishlist/remove/{quote(key.product_id, safe='')}"
        return parse_wishlist_payload(await self._request("DELETE", path))
