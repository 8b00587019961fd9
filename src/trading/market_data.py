"""Market snapshot buffering and return/covariance derivation."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Deque, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd
from loguru import logger

from utils.errors import InsufficientDataError, InvalidInputError

MIN_PRICE_HISTORY = 3


@dataclass(frozen=True, slots=True)
class MarketSnapshot:
    """One quote update delivered by the market-data feed."""

    symbol: str
    price: float
    volume: float = 0.0
    bid: float = 0.0
    ask: float = 0.0
    timestamp: datetime | None = None


@dataclass(slots=True)
class MarketState:
    """Consistent view of the buffered history for one allocation cycle."""

    symbols: List[str]
    prices: np.ndarray
    returns_history: pd.DataFrame
    expected_returns: np.ndarray
    covariance: np.ndarray
    as_of: datetime


class MarketDataBuffer:
    """Keep a rolling price history per symbol and derive return statistics.

    ``update`` may be called from a feed thread while ``snapshot`` is called
    from the allocation cycle; both take the same lock.
    """

    def __init__(self, symbols: Iterable[str], history: int = 252) -> None:
        self.symbols = list(symbols)
        if not self.symbols:
            raise InvalidInputError("MarketDataBuffer requires at least one symbol")
        if len(set(self.symbols)) != len(self.symbols):
            raise InvalidInputError("Symbols must be unique", context={"symbols": self.symbols})
        if history < MIN_PRICE_HISTORY:
            msg = f"history must keep at least {MIN_PRICE_HISTORY} prices"
            raise InvalidInputError(msg, context={"history": history})

        self.history = history
        self._prices: Dict[str, Deque[float]] = {s: deque(maxlen=history) for s in self.symbols}
        self._latest: Dict[str, MarketSnapshot] = {}
        self._lock = threading.Lock()

    def update(self, snapshot: MarketSnapshot) -> None:
        if snapshot.symbol not in self._prices:
            logger.warning("Ignoring market data for unsubscribed symbol {}", snapshot.symbol)
            return
        if not np.isfinite(snapshot.price) or snapshot.price <= 0:
            msg = f"Invalid price for {snapshot.symbol}: {snapshot.price}"
            raise InvalidInputError(msg, context={"symbol": snapshot.symbol})

        with self._lock:
            self._prices[snapshot.symbol].append(float(snapshot.price))
            self._latest[snapshot.symbol] = snapshot

    def latest(self, symbol: str) -> Optional[MarketSnapshot]:
        with self._lock:
            return self._latest.get(symbol)

    def price_frame(self) -> pd.DataFrame:
        """Aligned price history, trimmed to the shortest symbol history."""

        with self._lock:
            depth = min(len(prices) for prices in self._prices.values())
            data = {symbol: list(prices)[-depth:] if depth else [] for symbol, prices in self._prices.items()}
        return pd.DataFrame(data, columns=self.symbols, dtype=float)

    def snapshot(self) -> MarketState:
        prices = self.price_frame()
        if len(prices) < MIN_PRICE_HISTORY:
            msg = f"Need at least {MIN_PRICE_HISTORY} aligned prices per symbol"
            raise InsufficientDataError(msg, context={"available": len(prices)})

        returns = prices.pct_change().dropna().reset_index(drop=True)
        expected = returns.mean().to_numpy(dtype=float)
        covariance = returns.cov().to_numpy(dtype=float)
        state = MarketState(
            symbols=list(self.symbols),
            prices=prices.iloc[-1].to_numpy(dtype=float),
            returns_history=returns,
            expected_returns=expected,
            covariance=covariance,
            as_of=datetime.now(timezone.utc),
        )
        logger.debug("Market snapshot with {} return periods for {} symbols", len(returns), len(self.symbols))
        return state


__all__ = ["MarketSnapshot", "MarketState", "MarketDataBuffer", "MIN_PRICE_HISTORY"]
