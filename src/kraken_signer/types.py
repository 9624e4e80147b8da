from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Literal

OrderDirection = Literal["buy", "sell"]

OrderType = Literal[
    "market",
    # price = limit price
    "limit",
    # price = stop loss price
    "stop-loss",
    # price = take profit price
    "take-profit",
    # price = trigger price, price2 = triggered limit price
    "stop-loss-limit",
    "take-profit-limit",
    "settle-position",
]

PRICELESS_ORDER_TYPES: frozenset[str] = frozenset({"market", "settle-position"})
TWO_PRICE_ORDER_TYPES: frozenset[str] = frozenset({"stop-loss-limit", "take-profit-limit"})


@dataclass(frozen=True)
class Credential:
    key: str
    secret: str = field(repr=False)


@dataclass(frozen=True)
class NewOrder:
    pair: str
    direction: OrderDirection
    order_type: OrderType
    price: Decimal | None = None
    price2: Decimal | None = None
    # Order volume in lots.
    volume: Decimal | None = None
    leverage: str | None = None
    # Comma delimited flags: viqc, fcib, fciq, nompp, post.
    oflags: str | None = None
    # 0 = now, +<n> = n seconds from now, <n> = unix timestamp.
    starttm: int | None = None
    expiretm: int | None = None
    userref: int | None = None
    # Validate inputs only, do not submit.
    validate: bool = False

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {
            "pair": self.pair,
            "type": self.direction,
            "ordertype": self.order_type,
            "price": self.price,
            "price2": self.price2,
            "volume": self.volume,
            "leverage": self.leverage,
            "oflags": self.oflags,
            "starttm": self.starttm,
            "expiretm": self.expiretm,
            "userref": self.userref,
        }
        if self.validate:
            params["validate"] = True
        return params
