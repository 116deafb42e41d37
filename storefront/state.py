"""
Reconciliation core shared by the cart and wishlist managers.

The manager owns the canonical list. Every remote call goes through here:

1. A request takes a sequence number before it goes out. A mutation records
   it as the newest request for its key; ``clear()`` and ``load()`` record it
   for the whole list, and ``clear()`` also for every key with a request in
   flight.
2. A response is applied only if its number is still the newest recorded for
   its target; anything older is dropped as stale.
3. An applied response is the server's word on the key(s) it targeted, and
   those keys take the server's state as returned. The rest of the returned
   list also replaces canonical state, except for keys whose own targeted
   response was applied with a newer number.

The merge never invents data; every item comes from some server response.
Once nothing is in flight both tables are empty again.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from storefront.cache import LocalCache
from storefront.config import TTL
from storefront.errors import StorefrontError, ValidationError
from storefront.logging import WHOLE_LIST, get_list_logger, sanitize_for_logging
from storefront.models import LineItemKey
from storefront.services.notifications import Notifier, Severity

ItemT = TypeVar("ItemT")

# Pending-table slots for requests that answer for every key
_EVERY_KEY = object()  # clear
_LOAD = object()


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a manager operation."""
    success: bool
    message: str
    error: Optional[StorefrontError] = None
    stale: bool = False

    def __bool__(self) -> bool:
        return self.success


class ListStateManager(ABC, Generic[ItemT]):
    """
    Canonical list + sequence tables + cache write-through.

    Subclasses set ``kind``, ``cache_key``, ``item_type`` and the load
    messages, and implement ``_fetch``.
    """

    kind = "list"
    cache_key = ""
    item_type: type = object
    load_message = "Loaded"
    load_error = "Failed to load"

    def __init__(self, api, cache: Optional[LocalCache] = None, notifier: Optional[Notifier] = None):
        self.api = api
        self.cache = cache
        self.notifier = notifier
        self.log = get_list_logger(__name__, self.kind)

        self._items: tuple = ()
        self._index: dict[LineItemKey, ItemT] = {}
        # Newest request issued per key or whole-list slot; removed when it settles
        self._pending: dict = {}
        # Number of the newest applied response that targeted each key
        self._stamps: dict[LineItemKey, int] = {}
        self._open: set[int] = set()
        self._counter = 0
        self._synced = False
        self._degraded = False
        self._last_error: Optional[str] = None
        self._cache_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def items(self) -> tuple:
        """Snapshot of the canonical list."""
        return self._items

    @property
    def busy(self) -> bool:
        """True while any request is in flight. A hint only; nothing waits on it."""
        return bool(self._open)

    @property
    def degraded(self) -> bool:
        """True when the list came from the cache because the remote failed."""
        return self._degraded

    @property
    def synced(self) -> bool:
        return self._synced

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def contains(self, key: LineItemKey) -> bool:
        return key in self._index

    def get_item(self, key: LineItemKey) -> Optional[ItemT]:
        return self._index.get(key)

    # -------------------------------------------------------------------------
    # Sequence tables
    # -------------------------------------------------------------------------

    def _issue(self, target) -> int:
        self._counter += 1
        self._pending[target] = self._counter
        return self._counter

    def _issue_all(self) -> int:
        """Number for a clear: supersedes every in-flight request."""
        seq = self._issue(_EVERY_KEY)
        for target in self._pending:
            self._pending[target] = seq
        return seq

    def _is_current(self, target, seq: int) -> bool:
        return self._pending.get(target) == seq

    def _settle(self, seq: int) -> None:
        """Request ``seq`` has finished; forget what no response can still need."""
        self._open.discard(seq)
        for slot in [s for s, issued in self._pending.items() if issued == seq]:
            del self._pending[slot]

        # A stamp only matters against responses older than it
        oldest = min(self._open, default=None)
        for key in [k for k, stamp in self._stamps.items() if oldest is None or stamp < oldest]:
            del self._stamps[key]

    async def _call(self, seq: int, call: Callable[[], Awaitable]):
        self._open.add(seq)
        try:
            return await call()
        finally:
            self._open.discard(seq)

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    def _merge(self, items: tuple, seq: int, target) -> tuple:
        """Server list for response ``seq`` applied with authority over ``target``."""
        whole_list = target is _EVERY_KEY or target is _LOAD

        def server_wins(key) -> bool:
            return whole_list or key == target or self._stamps.get(key, 0) < seq

        incoming = {item.key: item for item in items}
        merged = []
        for item in items:
            if server_wins(item.key):
                merged.append(item)
            elif item.key in self._index:
                merged.append(self._index[item.key])
        for key, item in self._index.items():
            if key not in incoming and not server_wins(key):
                merged.append(item)

        targeted = incoming.keys() | self._index.keys() if whole_list else (target,)
        for key in targeted:
            self._stamps[key] = max(self._stamps.get(key, 0), seq)
        return tuple(merged)

    async def _reconcile(self, items: tuple, seq: int, target) -> None:
        # State changes happen before the first await so readers never see half an update
        self._items = self._merge(items, seq, target)
        self._index = {item.key: item for item in self._items}
        self._synced = True
        self._degraded = False
        self._last_error = None
        await self._write_snapshot()

    async def _write_snapshot(self) -> None:
        if self.cache is None:
            return
        async with self._cache_lock:
            # Serialize whatever is canonical now, not what the caller saw
            snapshot = json.dumps([item.to_dict() for item in self._items])
            try:
                await self.cache.set(self.cache_key, snapshot, ex=TTL.LIST_SNAPSHOT)
            except Exception as e:
                self.log.warning(f"Failed to write snapshot: {type(e).__name__}")

    async def _read_snapshot(self) -> Optional[tuple]:
        if self.cache is None:
            return None
        try:
            data = await self.cache.get(self.cache_key)
        except Exception as e:
            self.log.warning(f"Failed to read snapshot: {type(e).__name__}")
            return None
        if not data:
            return None

        try:
            return tuple(self.item_type.from_dict(entry) for entry in json.loads(data))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            # Corrupted data - clear it and behave as if there was none
            self.log.warning(f"Corrupted snapshot: {type(e).__name__}")
            try:
                await self.cache.delete(self.cache_key)
            except Exception as delete_error:
                self.log.warning(f"Failed to delete snapshot: {type(delete_error).__name__}")
            return None

    def _notify(self, message: str, severity: Severity) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(message, severity)
        except Exception:
            self.log.exception("Notifier failed")

    def _fail(self, error: StorefrontError, fallback: str, key=None, seq: Optional[int] = None) -> OperationResult:
        message = error.message or fallback
        self._last_error = message
        severity = Severity.WARNING if isinstance(error, ValidationError) else Severity.DANGER
        self.log.warning(f"{type(error).__name__}: {sanitize_for_logging(message)}", key=key, seq=seq)
        self._notify(message, severity)
        return OperationResult(success=False, message=message, error=error)

    def _reject(self, message: str) -> OperationResult:
        """Client-side validation failure; nothing is sent."""
        return self._fail(ValidationError(message), message)

    async def _mutate(
        self,
        key,
        call: Callable[[], Awaitable],
        *,
        success_message: str,
        failure_message: str,
        prefer_server_message: bool = True,
        verify: Optional[Callable[[], Optional[StorefrontError]]] = None,
        whole_list: bool = False,
    ) -> OperationResult:
        """
        Issue one remote mutation and reconcile its response.

        Args:
            key: Line item the mutation targets
            call: Zero-argument coroutine factory performing the request
            success_message: Message when the server sends none
            failure_message: Message when the error carries none
            prefer_server_message: Use ``data.message`` when present
            verify: Checked after reconciliation; an error it returns turns
                the result into a failure (state stays reconciled)
            whole_list: The mutation touches every key (clear)
        """
        if whole_list:
            target, seq = _EVERY_KEY, self._issue_all()
        else:
            target, seq = key, self._issue(key)
        log_key = WHOLE_LIST if whole_list else key

        try:
            try:
                payload = await self._call(seq, call)
            except StorefrontError as e:
                if not self._is_current(target, seq):
                    self.log.debug("Ignoring stale failure", key=log_key, seq=seq)
                    return OperationResult(success=False, message=e.message or failure_message, error=e, stale=True)
                return self._fail(e, failure_message, key=log_key, seq=seq)

            if not self._is_current(target, seq):
                self.log.debug("Dropping stale response", key=log_key, seq=seq)
                return OperationResult(success=True, message=success_message, stale=True)

            await self._reconcile(payload.items, seq, target)

            if verify is not None:
                problem = verify()
                if problem is not None:
                    return self._fail(problem, failure_message, key=log_key, seq=seq)

            message = (payload.message if prefer_server_message else None) or success_message
            self.log.debug(f"Applied, {len(self._items)} items", key=log_key, seq=seq)
            self._notify(message, Severity.SUCCESS)
            return OperationResult(success=True, message=message)
        finally:
            self._settle(seq)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @abstractmethod
    async def _fetch(self):
        """Fetch the list from the remote service."""

    async def load(self) -> OperationResult:
        """
        Fetch the list from the remote service.

        On failure before anything was synced this session, the cache snapshot
        (or an empty list) becomes canonical and ``degraded`` is set.
        """
        seq = self._issue(_LOAD)
        try:
            try:
                payload = await self._call(seq, self._fetch)
            except StorefrontError as e:
                if not self._is_current(_LOAD, seq):
                    return OperationResult(success=False, message=e.message or self.load_error, error=e, stale=True)
                return await self._load_failed(e, seq)

            if not self._is_current(_LOAD, seq):
                self.log.debug("Dropping stale load", key=WHOLE_LIST, seq=seq)
                return OperationResult(success=True, message=self.load_message, stale=True)

            await self._reconcile(payload.items, seq, _LOAD)
            self.log.info(f"Loaded {len(self._items)} items", key=WHOLE_LIST, seq=seq)
            return OperationResult(success=True, message=payload.message or self.load_message)
        finally:
            self._settle(seq)

    async def _load_failed(self, error: StorefrontError, seq: int) -> OperationResult:
        message = error.message or self.load_error
        self._last_error = message

        if self._synced:
            # The remote answered earlier this session; the cache is no longer authoritative
            self.log.warning(f"Reload failed: {type(error).__name__}", key=WHOLE_LIST, seq=seq)
            self._notify(message, Severity.DANGER)
            return OperationResult(success=False, message=message, error=error)

        snapshot = await self._read_snapshot()
        if not self._synced:
            self._items = snapshot or ()
            self._index = {item.key: item for item in self._items}
            self._degraded = True
            self.log.warning(
                f"Load failed ({type(error).__name__}), using {'cached snapshot' if snapshot else 'empty list'}",
                key=WHOLE_LIST,
                seq=seq,
            )
        self._notify(message, Severity.WARNING)
        return OperationResult(success=False, message=message, error=error)

    async def hydrate(self) -> bool:
        """
        Paint the list from the cache snapshot before the first remote fetch.

        Returns:
            True if a snapshot was applied
        """
        if self._synced:
            return False
        snapshot = await self._read_snapshot()
        if snapshot is None or self._synced:
            return False
        self._items = snapshot
        self._index = {item.key: item for item in snapshot}
        return True

    def reset(self) -> None:
        """Drop in-memory state; responses still in flight will be discarded."""
        self._items = ()
        self._index = {}
        self._pending.clear()
        self._stamps.clear()
        self._synced = False
        self._degraded = False
        self._last_error = None
