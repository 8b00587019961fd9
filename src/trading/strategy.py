"""Strategy overrides supplied by user scripts before each optimization."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from quantum_engine.annealing_optimizer import OptimizationParameters
from utils.errors import InvalidInputError


@dataclass(frozen=True, slots=True)
class StrategyContext:
    """Read-only view handed to a strategy hook."""

    symbols: Tuple[str, ...]
    prices: np.ndarray
    expected_returns: np.ndarray
    volatility: np.ndarray
    params: OptimizationParameters


@dataclass(frozen=True, slots=True)
class StrategyOverrides:
    """Risk-aversion override and per-symbol ``(lower, upper)`` weight bounds."""

    risk_aversion: Optional[float] = None
    weight_bounds: Mapping[str, Tuple[float, float]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for symbol, (lower, upper) in self.weight_bounds.items():
            if not 0.0 <= lower <= upper <= 1.0:
                msg = f"Invalid weight bounds for {symbol}: ({lower}, {upper})"
                raise InvalidInputError(msg, context={"symbol": symbol})

    def apply_to_parameters(self, params: OptimizationParameters) -> OptimizationParameters:
        if self.risk_aversion is None:
            return params
        return dataclasses.replace(params, risk_aversion=self.risk_aversion)

    def clip_weights(self, symbols: Sequence[str], weights: Sequence[float] | np.ndarray) -> np.ndarray:
        clipped = np.asarray(weights, dtype=float).copy()
        if clipped.shape != (len(symbols),):
            msg = "Length of weights must equal number of symbols"
            raise InvalidInputError(msg, context={"symbols": len(symbols), "weights": clipped.shape})
        for index, symbol in enumerate(symbols):
            bounds = self.weight_bounds.get(symbol)
            if bounds is not None:
                clipped[index] = min(max(clipped[index], bounds[0]), bounds[1])
        return clipped


StrategyHook = Callable[[StrategyContext], Optional[StrategyOverrides]]


def volatility_regime_hook(
    threshold: float = 0.2,
    defensive: float = 0.8,
    aggressive: float = 0.4,
    bounds: Dict[str, Tuple[float, float]] | None = None,
) -> StrategyHook:
    """Build a hook raising risk aversion when average volatility exceeds ``threshold``."""

    def hook(context: StrategyContext) -> StrategyOverrides:
        level = float(np.mean(context.volatility)) if context.volatility.size else 0.0
        risk_aversion = defensive if level > threshold else aggressive
        return StrategyOverrides(risk_aversion=risk_aversion, weight_bounds=dict(bounds or {}))

    return hook


__all__ = [
    "StrategyContext",
    "StrategyOverrides",
    "StrategyHook",
    "volatility_regime_hook",
]
