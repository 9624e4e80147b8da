from __future__ import annotations

import json
import logging
import sys
from typing import Any

_REQUEST_KEYS = ("method", "path", "nonce", "pair", "txid", "attempt", "status_code")
# Credential material is written as a marker, never as its value.
_SECRET_KEYS = ("secret", "api_secret", "kraken_api_secret")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in _REQUEST_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        for key in _SECRET_KEYS:
            if getattr(record, key, None):
                payload[key] = "***"
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    # Per-request httpx logs would repeat every signed body; keep them for DEBUG.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
