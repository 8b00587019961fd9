"""Translate target weights into orders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np
from loguru import logger

from utils.errors import InvalidInputError

BUY = "B"
SELL = "S"


@dataclass(frozen=True, slots=True)
class Order:
    symbol: str
    side: str
    quantity: float
    price: float


class ExecutionEngine:
    """Diff target against current weights and size limit orders."""

    def __init__(self, min_trade_size: float = 0.01) -> None:
        if min_trade_size < 0:
            raise InvalidInputError("min_trade_size must be non-negative")
        self.min_trade_size = min_trade_size

    def construct_orders(
        self,
        symbols: Sequence[str],
        target_weights: Sequence[float] | np.ndarray,
        current_weights: Sequence[float] | np.ndarray,
        prices: Sequence[float] | np.ndarray,
        portfolio_value: float,
    ) -> List[Order]:
        targets = np.asarray(target_weights, dtype=float)
        current = np.asarray(current_weights, dtype=float)
        price_arr = np.asarray(prices, dtype=float)
        expected = (len(symbols),)
        if targets.shape != expected or current.shape != expected or price_arr.shape != expected:
            msg = "Weights and prices must match the symbol list"
            raise InvalidInputError(
                msg,
                context={
                    "symbols": len(symbols),
                    "targets": targets.shape,
                    "current": current.shape,
                    "prices": price_arr.shape,
                },
            )

        orders: List[Order] = []
        for symbol, target, held, price in zip(symbols, targets, current, price_arr):
            weight_diff = target - held
            if abs(weight_diff) <= self.min_trade_size:
                continue
            if not price > 0:
                logger.warning("Skipping {} due to invalid price", symbol)
                continue
            quantity = abs(weight_diff) * portfolio_value / price
            side = BUY if weight_diff > 0 else SELL
            orders.append(Order(symbol, side, float(quantity), float(price)))
        logger.debug("Constructed {} orders", len(orders))
        return orders


__all__ = ["ExecutionEngine", "Order", "BUY", "SELL"]
