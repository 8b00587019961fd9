"""Trading integrations around the allocation engine."""

from .allocation_system import AllocationSystem, CycleReport
from .execution_engine import ExecutionEngine, Order
from .market_data import MarketDataBuffer, MarketSnapshot, MarketState
from .order_router import Fill, OrderRouter, PaperOrderRouter
from .portfolio_book import PortfolioBook
from .risk_monitor import GateDecision, RiskGate, RiskLimits
from .strategy import StrategyContext, StrategyOverrides, volatility_regime_hook

__all__ = [
    "AllocationSystem",
    "CycleReport",
    "ExecutionEngine",
    "Order",
    "MarketDataBuffer",
    "MarketSnapshot",
    "MarketState",
    "Fill",
    "OrderRouter",
    "PaperOrderRouter",
    "PortfolioBook",
    "GateDecision",
    "RiskGate",
    "RiskLimits",
    "StrategyContext",
    "StrategyOverrides",
    "volatility_regime_hook",
]
