from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Mapping, MutableMapping
from uuid import uuid4


_CORRELATION_ID: ContextVar[str | None] = ContextVar("normconv_correlation_id", default=None)
_SERVICE_NAME = "normconv"


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - override
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": _SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }
        correlation_id = _CORRELATION_ID.get()
        if correlation_id:
            payload["correlation_id"] = correlation_id
        structured = getattr(record, "structured_data", None)
        if isinstance(structured, Mapping):
            payload.update(structured)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


class StructuredAdapter(logging.LoggerAdapter):
    """Merge adapter defaults and per-call ``structured_data`` into one payload."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        merged: Dict[str, Any] = dict(self.extra or {})
        extra = kwargs.get("extra")
        if isinstance(extra, dict):
            structured = extra.get("structured_data")
            if isinstance(structured, Mapping):
                merged.update(structured)
        else:
            extra = {}
        extra["structured_data"] = merged
        kwargs["extra"] = extra
        return msg, kwargs


_STRUCTURED_ATTR = "_normconv_structured_configured"


def resolve_level(environment: str, debug: bool = False) -> int:
    """Root level for a deployment: DEBUG in dev and test or when ``debug`` is set, never below INFO in prod."""
    if environment == "prod":
        return logging.INFO
    if debug or environment in ("dev", "test"):
        return logging.DEBUG
    return logging.INFO


def configure_logging(*, environment: str = "dev", debug: bool = False) -> None:
    """Install the JSON handler on the root logger once; later calls are no-ops."""
    root = logging.getLogger()
    if bool(getattr(root, _STRUCTURED_ATTR, False)):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolve_level(environment, debug))
    setattr(root, _STRUCTURED_ATTR, True)


def get_logger(name: str, **defaults: Any) -> StructuredAdapter:
    """Return a structured logger adapter injecting default structured fields."""

    return StructuredAdapter(logging.getLogger(name), defaults)


def get_correlation_id() -> str | None:
    return _CORRELATION_ID.get()


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block."""

    cid = correlation_id or str(uuid4())
    token = _CORRELATION_ID.set(cid)
    try:
        yield cid
    finally:
        _CORRELATION_ID.reset(token)


__all__ = [
    "JsonFormatter",
    "StructuredAdapter",
    "configure_logging",
    "resolve_level",
    "get_logger",
    "get_correlation_id",
    "correlation_context",
]
