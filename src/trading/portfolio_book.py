"""Position bookkeeping driven by order fills."""

from __future__ import annotations

from typing import Dict, Mapping, Sequence

import numpy as np
from loguru import logger

from .execution_engine import BUY
from .order_router import Fill


class PortfolioBook:
    """Track cash and per-symbol quantities and derive current weights."""

    def __init__(self, cash: float, positions: Mapping[str, float] | None = None) -> None:
        self.cash = float(cash)
        self.positions: Dict[str, float] = dict(positions or {})

    def apply_fill(self, fill: Fill) -> None:
        signed = fill.quantity if fill.side == BUY else -fill.quantity
        self.positions[fill.symbol] = self.positions.get(fill.symbol, 0.0) + signed
        self.cash -= signed * fill.price
        logger.debug("Applied fill {}: {} now {}", fill.order_id, fill.symbol, self.positions[fill.symbol])

    def total_value(self, symbols: Sequence[str], prices: Sequence[float] | np.ndarray) -> float:
        holdings = sum(self.positions.get(s, 0.0) * float(p) for s, p in zip(symbols, prices))
        return self.cash + holdings

    def current_weights(self, symbols: Sequence[str], prices: Sequence[float] | np.ndarray) -> np.ndarray:
        value = self.total_value(symbols, prices)
        if value <= 0:
            return np.zeros(len(symbols))
        return np.array(
            [self.positions.get(s, 0.0) * float(p) / value for s, p in zip(symbols, prices)],
            dtype=float,
        )


__all__ = ["PortfolioBook"]
