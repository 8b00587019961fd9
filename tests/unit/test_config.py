"""Configuration loading tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from utils.config import load_config
from utils.errors import ConfigurationError, ErrorCode

CONFIG_TEXT = """
market:
  host: feed.example.com
  port: "9443"
  symbols: [AAPL, GOOGL, MSFT]
optimization:
  risk_aversion: 0.5
  initial_temperature: 0.1
  num_iterations: 50
  learning_rate: 0.05
trading:
  rebalance_interval: 30
  min_trade_size: 0.02
  max_position_size: 0.4
risk:
  var_confidence: 0.95
  max_drawdown_limit: 0.15
"""


def write_config(tmp_path: Path, text: str = CONFIG_TEXT) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config_reads_all_sections(tmp_path: Path) -> None:
    config = load_config(write_config(tmp_path), environ={})

    assert config.market.symbols == ["AAPL", "GOOGL", "MSFT"]
    assert config.market.port == "9443"
    assert config.optimization.num_iterations == 50
    assert config.trading.max_position_size == 0.4
    assert config.risk.max_drawdown_limit == 0.15
    assert config.risk.var_window == 252


def test_environment_overrides_file_values(tmp_path: Path) -> None:
    environ = {
        "QALLOC_OPTIMIZATION__RISK_AVERSION": "0.8",
        "QALLOC_OPTIMIZATION__NUM_ITERATIONS": "10",
        "QALLOC_MARKET__SYMBOLS": "AAPL, TSLA",
        "QALLOC_TRADING__NORMALIZE_WEIGHTS": "false",
        "QALLOC_RISK__MAX_VAR": "0.03",
    }
    config = load_config(write_config(tmp_path), environ=environ)

    assert config.optimization.risk_aversion == 0.8
    assert config.optimization.num_iterations == 10
    assert config.market.symbols == ["AAPL", "TSLA"]
    assert config.trading.normalize_weights is False
    assert config.risk.max_var == 0.03


def test_env_file_is_loaded(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("QALLOC_RISK__SHRINK_FACTOR=0.25\n", encoding="utf-8")

    try:
        config = load_config(write_config(tmp_path), env_file=env_file)
    finally:
        os.environ.pop("QALLOC_RISK__SHRINK_FACTOR", None)

    assert config.risk.shrink_factor == 0.25


def test_numeric_strings_are_coerced(tmp_path: Path) -> None:
    text = "market:\n  symbols: [AAPL]\nrisk:\n  max_drawdown_limit: 1e9\n"
    config = load_config(write_config(tmp_path, text), environ={})
    assert config.risk.max_drawdown_limit == 1e9


@pytest.mark.parametrize(
    "text",
    [
        "market:\n  symbols: []\n",
        "market:\n  symbols: [AAPL]\noptimization:\n  num_iterations: 0\n",
        "market:\n  symbols: [AAPL]\nrisk:\n  var_confidence: 1.5\n",
        "market:\n  symbols: [AAPL]\ntrading:\n  unknown_key: 1\n",
        "market:\n  symbols: [AAPL]\nextra: {}\n",
        "market: [unclosed\n",
    ],
)
def test_invalid_configuration_rejected(tmp_path: Path, text: str) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        load_config(write_config(tmp_path, text), environ={})
    assert excinfo.value.error_code is ErrorCode.CONFIG_INVALID


def test_missing_file_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "absent.yaml")
