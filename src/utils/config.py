"""Static configuration for the allocation system.

Configuration is read from a YAML document with four sections (``market``,
``optimization``, ``trading`` and ``risk``). Any value may be overridden with
an environment variable named ``QALLOC_<SECTION>__<KEY>``; a ``.env`` file is
honoured when supplied.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv
from loguru import logger

from .errors import ConfigurationError

ENV_PREFIX = "QALLOC"


@dataclass(slots=True)
class MarketConfig:
    """Market data settings."""

    symbols: list[str] = field(default_factory=list)
    host: str = "localhost"
    port: str = "8080"
    history: int = 252

    def __post_init__(self) -> None:
        if not self.symbols:
            raise ConfigurationError("market.symbols must list at least one symbol")
        if len(set(self.symbols)) != len(self.symbols):
            raise ConfigurationError("market.symbols must be unique", context={"symbols": self.symbols})
        if self.history < 3:
            raise ConfigurationError("market.history must be at least 3")


@dataclass(slots=True)
class OptimizationConfig:
    """Annealing optimizer settings."""

    risk_aversion: float = 0.5
    initial_temperature: float = 0.1
    num_iterations: int = 100
    learning_rate: float = 0.1

    def __post_init__(self) -> None:
        if self.num_iterations < 1:
            raise ConfigurationError("optimization.num_iterations must be positive")
        if self.initial_temperature < 0:
            raise ConfigurationError("optimization.initial_temperature must be non-negative")


@dataclass(slots=True)
class TradingConfig:
    """Rebalancing and order sizing settings."""

    rebalance_interval: int = 60
    min_trade_size: float = 0.01
    max_position_size: float = 1.0
    portfolio_value: float = 1_000_000.0
    normalize_weights: bool = True

    def __post_init__(self) -> None:
        if self.min_trade_size < 0:
            raise ConfigurationError("trading.min_trade_size must be non-negative")
        if not 0.0 < self.max_position_size <= 1.0:
            raise ConfigurationError("trading.max_position_size must be in (0, 1]")
        if self.portfolio_value <= 0:
            raise ConfigurationError("trading.portfolio_value must be positive")


@dataclass(slots=True)
class RiskConfig:
    """Risk evaluation and gating settings."""

    var_confidence: float = 0.95
    var_window: int = 252
    max_drawdown_limit: float = 0.2
    shrink_factor: float = 0.5
    max_var: float | None = None

    def __post_init__(self) -> None:
        if not 0.0 < self.var_confidence < 1.0:
            raise ConfigurationError("risk.var_confidence must be in (0, 1)")
        if self.var_window < 2:
            raise ConfigurationError("risk.var_window must be at least 2")
        if not 0.0 <= self.shrink_factor <= 1.0:
            raise ConfigurationError("risk.shrink_factor must be in [0, 1]")


@dataclass(slots=True)
class SystemConfig:
    """Top-level configuration describing one allocation system."""

    market: MarketConfig
    optimization: OptimizationConfig = field(default_factory=OptimizationConfig)
    trading: TradingConfig = field(default_factory=TradingConfig)
    risk: RiskConfig = field(default_factory=RiskConfig)

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        environ: Mapping[str, str] | None = None,
    ) -> "SystemConfig":
        env = os.environ if environ is None else environ
        sections = {
            "market": MarketConfig,
            "optimization": OptimizationConfig,
            "trading": TradingConfig,
            "risk": RiskConfig,
        }
        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {sorted(unknown)}")

        built: dict[str, Any] = {}
        for name, section_cls in sections.items():
            raw = data.get(name) or {}
            if not isinstance(raw, Mapping):
                raise ConfigurationError(f"Section '{name}' must be a mapping")
            values = _coerce_strings(name, section_cls, raw)
            values.update(_env_overrides(name, section_cls, env))
            try:
                built[name] = section_cls(**values)
            except TypeError as exc:
                raise ConfigurationError(f"Invalid keys in section '{name}': {exc}") from exc
        return cls(**built)


def _coerce_strings(section: str, section_cls: type, raw: Mapping[str, Any]) -> dict[str, Any]:
    # YAML 1.1 reads exponents without a sign (``1e9``) as strings.
    defaults = _section_defaults(section_cls)
    values: dict[str, Any] = {}
    for key, value in raw.items():
        if isinstance(value, str) and key in defaults:
            value = _coerce(value, defaults[key], f"{section}.{key}")
        values[key] = value
    return values


def _env_overrides(section: str, section_cls: type, env: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    defaults = _section_defaults(section_cls)
    for item in fields(section_cls):
        key = f"{ENV_PREFIX}_{section}__{item.name}".upper()
        if key not in env:
            continue
        overrides[item.name] = _coerce(env[key], defaults.get(item.name), key)
        logger.debug("Configuration override {}={}", key, overrides[item.name])
    return overrides


def _section_defaults(section_cls: type) -> dict[str, Any]:
    if section_cls is MarketConfig:
        return {"symbols": [], "host": "", "port": "", "history": 0}
    return {item.name: getattr(section_cls(), item.name) for item in fields(section_cls)}


def _coerce(raw: str, template: Any, key: str) -> Any:
    try:
        if isinstance(template, bool):
            return raw.strip().lower() in {"1", "true", "yes", "on"}
        if isinstance(template, list):
            return [part.strip() for part in raw.split(",") if part.strip()]
        if isinstance(template, int):
            return int(raw)
        if isinstance(template, float) or template is None:
            return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Configuration value {key} is not numeric: {raw!r}") from exc
    return raw


def load_config(
    path: str | Path,
    *,
    env_file: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> SystemConfig:
    """Load and validate a YAML configuration file.

    Parameters
    ----------
    path:
        Location of the YAML document.
    env_file:
        Optional ``.env`` file whose values are exported before overrides are
        resolved. Existing environment variables take precedence.
    environ:
        Mapping used instead of ``os.environ`` for overrides.
    """

    config_path = Path(path).expanduser()
    if env_file is not None:
        load_dotenv(env_file, override=False)

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Configuration file not found: {config_path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration {config_path}: {exc}") from exc

    if not isinstance(data, Mapping):
        raise ConfigurationError("Configuration root must be a mapping")

    config = SystemConfig.from_mapping(data, environ=environ)
    logger.info(
        "Loaded configuration from {} ({} symbols, {} iterations)",
        config_path,
        len(config.market.symbols),
        config.optimization.num_iterations,
    )
    return config


__all__ = [
    "MarketConfig",
    "OptimizationConfig",
    "TradingConfig",
    "RiskConfig",
    "SystemConfig",
    "load_config",
]
