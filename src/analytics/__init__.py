"""Analytics toolkit for the allocation engine."""

from .risk_analytics import RiskEvaluator, RiskMetrics

__all__ = ["RiskEvaluator", "RiskMetrics"]
