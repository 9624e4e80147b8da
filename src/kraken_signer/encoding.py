from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any


def _normalize_value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def encode(params: Mapping[str, Any]) -> tuple[str, bytes]:
    # Values are not URL-escaped: the exchange hashes the body exactly as sent.
    items: list[str] = []
    for key in sorted(params.keys()):
        value = params[key]
        if value is None:
            continue
        items.append(f"{key}={_normalize_value(value)}")
    body = "&".join(items)
    return body, body.encode("utf-8")
