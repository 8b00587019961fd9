"""One allocation cycle: market snapshot to routed orders."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import numpy as np
from loguru import logger

from analytics.risk_analytics import RiskEvaluator, RiskMetrics
from quantum_engine.annealing_optimizer import AllocationOptimizer, OptimizationParameters
from utils.config import SystemConfig
from utils.logger import log_allocation_event

from .execution_engine import ExecutionEngine, Order
from .market_data import MarketDataBuffer, MarketState
from .order_router import OrderRouter, PaperOrderRouter
from .portfolio_book import PortfolioBook
from .risk_monitor import AlertCallback, GateDecision, RiskGate, RiskLimits
from .strategy import StrategyContext, StrategyHook, StrategyOverrides


@dataclass(slots=True)
class CycleReport:
    as_of: datetime
    raw_weights: Dict[str, float]
    target_weights: Dict[str, float]
    metrics: RiskMetrics
    decision: GateDecision
    params: OptimizationParameters
    orders: List[Order] = field(default_factory=list)
    order_ids: List[str] = field(default_factory=list)


class AllocationSystem:
    """Coordinate optimizer, risk gate and order routing for one portfolio."""

    def __init__(
        self,
        config: SystemConfig,
        *,
        router: OrderRouter | None = None,
        buffer: MarketDataBuffer | None = None,
        book: PortfolioBook | None = None,
        strategy_hook: StrategyHook | None = None,
        notifier: AlertCallback | None = None,
    ) -> None:
        self.config = config
        self.buffer = buffer or MarketDataBuffer(config.market.symbols, history=config.market.history)
        self.router = router or PaperOrderRouter()
        self.book = book or PortfolioBook(cash=config.trading.portfolio_value)
        self.strategy_hook = strategy_hook

        opt = config.optimization
        self.params = OptimizationParameters(
            risk_aversion=opt.risk_aversion,
            temperature=opt.initial_temperature,
            num_iterations=opt.num_iterations,
            learning_rate=opt.learning_rate,
        )
        self.optimizer = AllocationOptimizer(len(self.buffer.symbols), self.params)
        self.risk_evaluator = RiskEvaluator(
            confidence=config.risk.var_confidence,
            window=config.risk.var_window,
        )
        self.risk_gate = RiskGate(
            RiskLimits(
                max_drawdown=config.risk.max_drawdown_limit,
                shrink_factor=config.risk.shrink_factor,
                max_var=config.risk.max_var,
            ),
            notifier=notifier,
        )
        self.execution = ExecutionEngine(min_trade_size=config.trading.min_trade_size)

        subscribe = getattr(self.router, "subscribe_fills", None)
        if callable(subscribe):
            subscribe(self.book.apply_fill)

    def run_cycle(self) -> CycleReport:
        state = self.buffer.snapshot()
        symbols = state.symbols
        self.optimizer.resize(len(symbols))

        overrides = self._strategy_overrides(state)
        params = overrides.apply_to_parameters(self.params)

        raw = self.optimizer.optimize(state.expected_returns, state.covariance, params=params)
        targets = self._apply_position_policy(symbols, raw, overrides)

        metrics = self.risk_evaluator.calculate_risk_metrics(state.returns_history, targets)
        decision = self.risk_gate.review(targets, metrics)
        if decision.reduced:
            log_allocation_event("risk_reduced", reasons=decision.reasons)

        portfolio_value = self.book.total_value(symbols, state.prices)
        current = self.book.current_weights(symbols, state.prices)
        orders = self.execution.construct_orders(
            symbols,
            decision.weights,
            current,
            state.prices,
            portfolio_value,
        )
        order_ids = [
            self.router.send_order(order.symbol, order.side, order.quantity, order.price)
            for order in orders
        ]

        report = CycleReport(
            as_of=state.as_of,
            raw_weights=dict(zip(symbols, raw.tolist())),
            target_weights=dict(zip(symbols, decision.weights.tolist())),
            metrics=metrics,
            decision=decision,
            params=params,
            orders=orders,
            order_ids=order_ids,
        )
        log_allocation_event(
            "cycle_completed",
            weights=report.target_weights,
            orders=len(orders),
            **metrics.as_dict(),
        )
        return report

    def _strategy_overrides(self, state: MarketState) -> StrategyOverrides:
        if self.strategy_hook is None:
            return StrategyOverrides()
        volatility = np.sqrt(np.clip(np.diag(state.covariance), 0.0, None))
        context = StrategyContext(
            symbols=tuple(state.symbols),
            prices=state.prices.copy(),
            expected_returns=state.expected_returns.copy(),
            volatility=volatility,
            params=self.params,
        )
        overrides: Optional[StrategyOverrides] = self.strategy_hook(context)
        if overrides is None:
            return StrategyOverrides()
        logger.debug("Strategy overrides: {}", overrides)
        return overrides

    def _apply_position_policy(
        self,
        symbols: List[str],
        weights: np.ndarray,
        overrides: StrategyOverrides,
    ) -> np.ndarray:
        policy = weights.astype(float)
        total = policy.sum()
        if self.config.trading.normalize_weights and total > 0:
            policy = policy / total
        policy = np.minimum(policy, self.config.trading.max_position_size)
        return overrides.clip_weights(symbols, policy)


__all__ = ["AllocationSystem", "CycleReport"]
