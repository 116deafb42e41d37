"""
Notification emitter.

State managers report outcomes through ``notify(message, severity)``. The call
returns immediately; whatever renders alerts reads ``AlertNotifier.current``.
An alert clears itself after ALERT_TTL_SECONDS.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from storefront.config import ALERT_TTL_SECONDS
from storefront.logging import get_logger, sanitize_for_logging

logger = get_logger(__name__)


class Severity(str, Enum):
    """Alert variants understood by the UI."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    DANGER = "danger"


class Notifier(Protocol):
    def notify(self, message: str, severity: Severity = Severity.SUCCESS) -> None: ...


@dataclass(frozen=True)
class Alert:
    """One visible alert."""
    id: int
    message: str
    severity: Severity


class AlertNotifier:
    """Holds the single visible alert; a newer one replaces the older."""

    def __init__(self, ttl: float = ALERT_TTL_SECONDS):
        self.ttl = ttl
        self.current: Optional[Alert] = None
        self._counter = 0
        self._expiry: Optional[asyncio.TimerHandle] = None

    def notify(self, message: str, severity: Severity = Severity.SUCCESS) -> None:
        self._counter += 1
        alert = Alert(id=self._counter, message=message, severity=Severity(severity))
        self.current = alert
        logger.debug(f"Alert [{alert.severity.value}] {sanitize_for_logging(message)}")

        if self._expiry is not None:
            self._expiry.cancel()
            self._expiry = None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Outside an event loop the alert stays until dismissed
            return
        self._expiry = loop.call_later(self.ttl, self._expire, alert.id)

    def _expire(self, alert_id: int) -> None:
        # An older timer must not clear a newer alert
        if self.current is not None and self.current.id == alert_id:
            self.current = None
        self._expiry = None

    def dismiss(self) -> None:
        if self._expiry is not None:
            self._expiry.cancel()
            self._expiry = None
        self.current = None
