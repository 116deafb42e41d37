"""
Logging for the storefront client.

Records written by the list managers carry three extra fields, passed with
``extra=`` through ``ListLogger``:

- ``list_kind``: "cart" or "wishlist"
- ``line_key``: the targeted key as ``product/variant``, or "*" for
  whole-list requests (load, clear)
- ``seq``: sequence number of the request

so overlapping requests for the same line can be told apart in the output.
Set ``STOREFRONT_LOG_FORMAT=json`` for one JSON object per line.
"""

import json
import logging
import os
import sys
from functools import cache
from typing import Any, Optional

CONTEXT_FIELDS = ("list_kind", "line_key", "seq")
WHOLE_LIST = "*"

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def sanitize_for_logging(value: Any, max_length: int = 50) -> str:
    """Server-supplied text on one line, truncated (CWE-117)."""
    if value is None or value == "":
        return "N/A"
    text = str(value).replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t").replace("\x00", "")
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def format_key(key: Any) -> str:
    """``prod-shirt/M`` for a line item key, ``prod-cap`` when it has no variant."""
    if key is None:
        return "-"
    if isinstance(key, str):
        return key if key == WHOLE_LIST else sanitize_for_logging(key, 24)
    product = sanitize_for_logging(key.product_id, 24)
    if key.variant is None:
        return product
    return f"{product}/{sanitize_for_logging(key.variant, 12)}"


class ListContextFormatter(logging.Formatter):
    """Appends ``[kind key #seq]`` to records that carry list context."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        kind = getattr(record, "list_kind", None)
        if kind is None:
            return line
        return f"{line} [{kind} {getattr(record, 'line_key', '-')} #{getattr(record, 'seq', '-')}]"


class JSONListFormatter(logging.Formatter):
    """Single-line JSON with the list context as top-level fields."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                data[field] = getattr(record, field)
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


class ListLogger(logging.LoggerAdapter):
    """
    Logger bound to one list kind.

    ``key=`` and ``seq=`` are accepted on every call and become the
    ``line_key`` and ``seq`` record fields:

        self.log.debug("Dropping stale response", key=key, seq=seq)
    """

    def __init__(self, logger: logging.Logger, kind: str):
        super().__init__(logger, {"list_kind": kind})

    def process(self, msg, kwargs):
        key = kwargs.pop("key", None)
        seq = kwargs.pop("seq", None)
        extra = dict(self.extra)
        extra["line_key"] = format_key(key)
        extra["seq"] = "-" if seq is None else seq
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Attach one stdout handler to the root logger, unless it already has one.

    Args:
        level: Level name; defaults to ``LOG_LEVEL`` (INFO)
        fmt: "text" or "json"; defaults to ``STOREFRONT_LOG_FORMAT`` (text)
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    if (fmt or os.environ.get("STOREFRONT_LOG_FORMAT", "text")) == "json":
        handler.setFormatter(JSONListFormatter())
    else:
        handler.setFormatter(ListContextFormatter(TEXT_FORMAT))
    root.addHandler(handler)

    # One HTTP request per cart click
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_list_logger(name: str, kind: str) -> ListLogger:
    return ListLogger(get_logger(name), kind)


__all__ = [
    "ListLogger",
    "ListContextFormatter",
    "JSONListFormatter",
    "configure_logging",
    "format_key",
    "get_list_logger",
    "get_logger",
    "sanitize_for_logging",
]
