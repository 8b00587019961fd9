"""Risk metrics used to gate proposed allocations."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd
from loguru import logger

from utils.errors import InsufficientDataError, InvalidInputError

# Constant series can leave rounding residue of ~1e-18 in the sample std.
MIN_VOLATILITY = 1e-12


@dataclass(frozen=True, slots=True)
class RiskMetrics:
    """Risk scores for one candidate weight vector."""

    var: float
    cvar: float
    sharpe_ratio: float
    max_drawdown: float

    def as_dict(self) -> dict[str, float]:
        return {
            "var": self.var,
            "cvar": self.cvar,
            "sharpe_ratio": self.sharpe_ratio,
            "max_drawdown": self.max_drawdown,
        }


class RiskEvaluator:
    """Score candidate weights against historical period returns."""

    def __init__(self, confidence: float = 0.95, window: int = 252) -> None:
        if not 0.0 < confidence < 1.0:
            msg = "confidence must be between 0 and 1"
            raise InvalidInputError(msg, context={"confidence": confidence})
        if window < 2:
            msg = "window must contain at least two periods"
            raise InvalidInputError(msg, context={"window": window})
        self.confidence = confidence
        self.window = window

    def calculate_risk_metrics(
        self,
        returns: Sequence[float] | Sequence[Sequence[float]] | np.ndarray | pd.Series | pd.DataFrame,
        weights: Sequence[float] | np.ndarray,
    ) -> RiskMetrics:
        """Compute VaR, CVaR, Sharpe ratio and maximum drawdown.

        Parameters
        ----------
        returns:
            Period returns, one row per period and one column per asset. A
            one-dimensional series is treated as a single asset.
        weights:
            Candidate weight per asset.
        """

        portfolio = self.portfolio_returns(returns, weights)
        values = portfolio.to_numpy(dtype=float)
        sorted_returns = np.sort(values)

        var_index = self.var_index(values.size)
        if var_index == 0:
            msg = "Too few observations for the configured confidence level"
            raise InsufficientDataError(
                msg,
                context={"observations": int(values.size), "confidence": self.confidence},
            )

        var = -float(sorted_returns[var_index])
        cvar = -float(sorted_returns[:var_index].mean())

        std = float(portfolio.std(ddof=1))
        if not std > MIN_VOLATILITY:
            msg = "Portfolio returns have zero variance; Sharpe ratio undefined"
            raise InsufficientDataError(msg, context={"observations": int(values.size)})
        sharpe = float(portfolio.mean()) / std

        metrics = RiskMetrics(
            var=var,
            cvar=cvar,
            sharpe_ratio=sharpe,
            max_drawdown=self.maximum_drawdown(values),
        )
        logger.debug("Risk metrics over {} periods: {}", values.size, metrics.as_dict())
        return metrics

    def portfolio_returns(
        self,
        returns: Sequence[float] | Sequence[Sequence[float]] | np.ndarray | pd.Series | pd.DataFrame,
        weights: Sequence[float] | np.ndarray,
    ) -> pd.Series:
        """Weighted combination of per-asset returns over the trailing window."""

        frame = returns if isinstance(returns, pd.DataFrame) else pd.DataFrame(returns)
        if frame.empty:
            raise InsufficientDataError("Returns series cannot be empty")

        try:
            matrix = frame.to_numpy(dtype=float)
            weights_arr = np.asarray(weights, dtype=float)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError("returns and weights must be numeric") from exc

        if weights_arr.ndim != 1 or weights_arr.size != matrix.shape[1]:
            msg = "Length of weights must equal number of assets in returns"
            raise InvalidInputError(
                msg, context={"assets": int(matrix.shape[1]), "weights": int(weights_arr.size)}
            )
        if not (np.all(np.isfinite(matrix)) and np.all(np.isfinite(weights_arr))):
            raise InvalidInputError("returns and weights must be finite")

        combined = matrix[-self.window :] @ weights_arr
        return pd.Series(combined, name="portfolio")

    def var_index(self, observations: int) -> int:
        # Rounded first so (1 - 0.8) * 5 lands on 1 rather than 0.9999999999999998.
        return math.floor(round((1.0 - self.confidence) * observations, 9))

    @staticmethod
    def maximum_drawdown(values: np.ndarray) -> float:
        """Largest ``(peak - value) / peak`` against the running peak.

        Points whose running peak is not positive have no defined relative
        drawdown and are skipped.
        """

        if values.size == 0:
            raise InsufficientDataError("Returns series cannot be empty")
        peaks = np.maximum.accumulate(values)
        with np.errstate(divide="ignore", invalid="ignore"):
            drawdowns = np.where(peaks > 0.0, (peaks - values) / peaks, 0.0)
        return max(float(drawdowns.max()), 0.0)


__all__ = ["RiskEvaluator", "RiskMetrics"]
