"""Order routing interface and an in-process paper router."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Protocol

from loguru import logger

from utils.errors import InvalidInputError

from .execution_engine import BUY, SELL


@dataclass(frozen=True, slots=True)
class Fill:
    order_id: str
    symbol: str
    side: str
    quantity: float
    price: float
    timestamp: datetime


FillCallback = Callable[[Fill], None]


class OrderRouter(Protocol):
    def send_order(self, symbol: str, side: str, quantity: float, price: float) -> str:
        ...


class PaperOrderRouter:
    """Fill every limit order immediately at its limit price."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._listeners: List[FillCallback] = []
        self.orders: List[dict[str, object]] = []
        self.fills: List[Fill] = []

    def subscribe_fills(self, callback: FillCallback) -> None:
        self._listeners.append(callback)

    def send_order(self, symbol: str, side: str, quantity: float, price: float) -> str:
        if side not in (BUY, SELL):
            raise InvalidInputError(f"Unknown order side {side!r}", context={"symbol": symbol})
        if quantity <= 0 or price <= 0:
            msg = "Order quantity and price must be positive"
            raise InvalidInputError(msg, context={"symbol": symbol, "quantity": quantity, "price": price})

        order_id = f"ORD{next(self._ids)}"
        self.orders.append(
            {"id": order_id, "symbol": symbol, "side": side, "quantity": quantity, "price": price}
        )
        logger.info("Routed order {} {} {:.4f} {} @ {:.4f}", order_id, side, quantity, symbol, price)

        fill = Fill(order_id, symbol, side, quantity, price, datetime.now(timezone.utc))
        self.fills.append(fill)
        for listener in self._listeners:
            listener(fill)
        return order_id


__all__ = ["Fill", "FillCallback", "OrderRouter", "PaperOrderRouter"]
