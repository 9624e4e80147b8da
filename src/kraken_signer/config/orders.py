from __future__ import annotations

import tomllib
from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from kraken_signer.types import (
    PRICELESS_ORDER_TYPES,
    TWO_PRICE_ORDER_TYPES,
    NewOrder,
    OrderDirection,
    OrderType,
)


class OrderConfig(BaseModel):
    pair: str = Field(min_length=1)
    direction: OrderDirection = "buy"
    order_type: OrderType = "limit"
    price: Optional[Decimal] = None
    price2: Optional[Decimal] = None
    volume: Optional[Decimal] = Field(default=None, gt=0)
    leverage: Optional[str] = None
    oflags: Optional[str] = None
    starttm: Optional[int] = None
    expiretm: Optional[int] = None
    userref: Optional[int] = None
    validate_only: bool = Field(default=True, alias="validate")

    def validate_logic(self) -> None:
        if self.order_type not in PRICELESS_ORDER_TYPES and self.price is None:
            raise ValueError(f"{self.pair}: price is required for {self.order_type} orders")
        if self.order_type in TWO_PRICE_ORDER_TYPES and self.price2 is None:
            raise ValueError(f"{self.pair}: price2 is required for {self.order_type} orders")

    def to_order(self) -> NewOrder:
        return NewOrder(
            pair=self.pair,
            direction=self.direction,
            order_type=self.order_type,
            price=self.price,
            price2=self.price2,
            volume=self.volume,
            leverage=self.leverage,
            oflags=self.oflags,
            starttm=self.starttm,
            expiretm=self.expiretm,
            userref=self.userref,
            validate=self.validate_only,
        )


class OrderBatchConfig(BaseModel):
    orders: list[OrderConfig] = Field(default_factory=list)

    def validate_logic(self) -> None:
        if not self.orders:
            raise ValueError("orders must not be empty")
        for order in self.orders:
            order.validate_logic()


def load_order_batch_config(path: Path) -> OrderBatchConfig:
    raw = tomllib.loads(path.read_text(encoding="utf-8"))
    cfg = OrderBatchConfig.model_validate(raw)
    cfg.validate_logic()
    return cfg
