"""Risk gate deciding whether proposed weights must be shrunk."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import numpy as np
from loguru import logger

from analytics.risk_analytics import RiskMetrics
from utils.errors import InvalidInputError


AlertCallback = Callable[[str, str], None]


@dataclass(slots=True)
class RiskLimits:
    max_drawdown: float
    shrink_factor: float = 0.5
    max_var: Optional[float] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.shrink_factor <= 1.0:
            msg = "shrink_factor must be between 0 and 1"
            raise InvalidInputError(msg, context={"shrink_factor": self.shrink_factor})


@dataclass(slots=True)
class GateDecision:
    weights: np.ndarray
    reduced: bool
    reasons: List[str] = field(default_factory=list)


class RiskGate:
    """Accept proposed weights or shrink them proportionally on limit breach."""

    def __init__(self, limits: RiskLimits, notifier: AlertCallback | None = None) -> None:
        self.limits = limits
        self.notify = notifier

    def review(self, weights: Sequence[float] | np.ndarray, metrics: RiskMetrics) -> GateDecision:
        proposed = np.asarray(weights, dtype=float)
        reasons: list[str] = []

        if metrics.max_drawdown > self.limits.max_drawdown:
            reasons.append(
                f"Drawdown limit breached: {metrics.max_drawdown:.4f} > {self.limits.max_drawdown:.4f}"
            )
        if self.limits.max_var is not None and metrics.var > self.limits.max_var:
            reasons.append(f"VaR limit breached: {metrics.var:.4f} > {self.limits.max_var:.4f}")

        if not reasons:
            return GateDecision(weights=proposed.copy(), reduced=False)

        for reason in reasons:
            logger.warning(reason)
            if self.notify is not None:
                self.notify("risk", reason)

        reduced = proposed * self.limits.shrink_factor
        logger.info("Reducing risk: weights scaled by {}", self.limits.shrink_factor)
        return GateDecision(weights=reduced, reduced=True, reasons=reasons)


__all__ = ["RiskGate", "RiskLimits", "GateDecision"]
