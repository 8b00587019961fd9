"""Risk evaluator test suite."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from analytics.risk_analytics import RiskEvaluator, RiskMetrics
from utils.errors import ErrorCode, InsufficientDataError, InvalidInputError


def test_single_asset_var_scenario() -> None:
    evaluator = RiskEvaluator(confidence=0.8)
    returns = [-0.05, -0.03, -0.01, 0.02, 0.04]

    metrics = evaluator.calculate_risk_metrics(returns, [1.0])

    assert isinstance(metrics, RiskMetrics)
    assert metrics.var == pytest.approx(0.03)
    assert metrics.cvar == pytest.approx(0.05)
    assert metrics.cvar >= metrics.var


def test_sharpe_uses_sample_standard_deviation() -> None:
    evaluator = RiskEvaluator(confidence=0.8)
    returns = np.array([-0.05, -0.03, -0.01, 0.02, 0.04])

    metrics = evaluator.calculate_risk_metrics(returns, [1.0])

    expected = returns.mean() / returns.std(ddof=1)
    assert metrics.sharpe_ratio == pytest.approx(expected)


def test_portfolio_series_combines_assets() -> None:
    evaluator = RiskEvaluator(confidence=0.75)
    returns = pd.DataFrame(
        {
            "AAPL": [0.01, -0.02, 0.03, 0.015, -0.01, 0.02, 0.005, -0.03],
            "MSFT": [0.02, -0.01, 0.01, -0.005, 0.0, 0.01, 0.02, -0.02],
        }
    )
    weights = [0.6, 0.4]

    combined = evaluator.portfolio_returns(returns, weights)
    np.testing.assert_allclose(combined.to_numpy(), returns.to_numpy() @ np.array(weights))

    metrics = evaluator.calculate_risk_metrics(returns, weights)
    ordered = np.sort(combined.to_numpy())
    assert metrics.var == pytest.approx(-ordered[2])
    assert metrics.cvar == pytest.approx(-ordered[:2].mean())


def test_cvar_not_below_var_for_random_series() -> None:
    rng = np.random.default_rng(123)
    evaluator = RiskEvaluator(confidence=0.95)
    for _ in range(20):
        returns = rng.normal(0.001, 0.02, size=(250, 3))
        weights = rng.uniform(0.0, 1.0, size=3)
        metrics = evaluator.calculate_risk_metrics(returns, weights)
        assert metrics.cvar >= metrics.var


def test_max_drawdown_tracks_running_peak() -> None:
    values = np.array([0.02, 0.04, 0.01, 0.03, 0.05, 0.02])
    # peak 0.04 -> 0.01 gives 0.75; peak 0.05 -> 0.02 gives 0.6
    assert RiskEvaluator.maximum_drawdown(values) == pytest.approx(0.75)


def test_max_drawdown_skips_non_positive_peaks() -> None:
    values = np.array([-0.05, -0.03, -0.01, 0.02, 0.04])
    assert RiskEvaluator.maximum_drawdown(values) == 0.0


def test_window_limits_history() -> None:
    evaluator = RiskEvaluator(confidence=0.5, window=4)
    returns = [0.5, -0.9, 0.01, -0.02, 0.03, -0.01]

    combined = evaluator.portfolio_returns(returns, [1.0])

    assert combined.tolist() == pytest.approx([0.01, -0.02, 0.03, -0.01])


@pytest.mark.parametrize(
    "returns",
    [
        [],
        [0.01, 0.02],
        [0.01] * 10,
    ],
)
def test_degenerate_inputs_report_insufficient_data(returns: list[float]) -> None:
    evaluator = RiskEvaluator(confidence=0.8)
    with pytest.raises(InsufficientDataError) as excinfo:
        evaluator.calculate_risk_metrics(returns, [1.0])
    assert excinfo.value.error_code is ErrorCode.INSUFFICIENT_DATA


def test_weight_length_mismatch_is_invalid_input() -> None:
    evaluator = RiskEvaluator(confidence=0.8)
    returns = np.zeros((10, 2))
    with pytest.raises(InvalidInputError) as excinfo:
        evaluator.calculate_risk_metrics(returns, [0.5, 0.3, 0.2])
    assert excinfo.value.error_code is ErrorCode.INVALID_INPUT


@pytest.mark.parametrize(("confidence", "window"), [(1.0, 252), (0.0, 252), (0.95, 1)])
def test_configuration_validated(confidence: float, window: int) -> None:
    with pytest.raises(InvalidInputError):
        RiskEvaluator(confidence=confidence, window=window)
