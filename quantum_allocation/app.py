"""Command-line entry point replaying a price history through one allocation cycle."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

import pandas as pd
from dotenv import load_dotenv
from loguru import logger

# Ensure repository paths are available when running from source checkout
_ROOT = Path(__file__).resolve().parents[1]
_SRC = _ROOT / "src"
for candidate in (_ROOT, _SRC):
    candidate_str = str(candidate)
    if candidate_str not in sys.path:
        sys.path.insert(0, candidate_str)

# Load environment variables from project .env if present
load_dotenv(_ROOT / ".env", override=False)

from trading.allocation_system import AllocationSystem, CycleReport  # noqa: E402
from trading.market_data import MarketSnapshot  # noqa: E402
from utils.config import load_config  # noqa: E402
from utils.errors import AllocationError  # noqa: E402
from utils.logger import setup_logging  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run one quantum-inspired allocation cycle")
    parser.add_argument("config", type=Path, help="YAML configuration file")
    parser.add_argument("prices", type=Path, help="CSV of prices, one column per symbol")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-dir", default=None, help="Directory for the serialized log file")
    return parser


def replay_prices(system: AllocationSystem, prices: pd.DataFrame) -> int:
    """Feed every row of ``prices`` into the system's market buffer."""

    missing = [symbol for symbol in system.buffer.symbols if symbol not in prices.columns]
    if missing:
        raise AllocationError(f"Price file is missing symbols: {missing}")

    rows = 0
    for timestamp, row in prices.iterrows():
        for symbol in system.buffer.symbols:
            price = float(row[symbol])
            system.buffer.update(
                MarketSnapshot(
                    symbol=symbol,
                    price=price,
                    bid=price,
                    ask=price,
                    timestamp=timestamp if isinstance(timestamp, pd.Timestamp) else None,
                )
            )
        rows += 1
    return rows


def format_report(report: CycleReport) -> str:
    lines = ["Current optimal allocation:"]
    for symbol, weight in report.target_weights.items():
        lines.append(f"  {symbol}: {weight * 100:.2f}%")
    metrics = report.metrics
    lines.append(
        f"VaR={metrics.var:.4f} CVaR={metrics.cvar:.4f} "
        f"Sharpe={metrics.sharpe_ratio:.4f} MaxDD={metrics.max_drawdown:.4f}"
    )
    if report.decision.reduced:
        lines.append("Risk reduced: " + "; ".join(report.decision.reasons))
    lines.append(f"Orders routed: {len(report.order_ids)}")
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    setup_logging(console_level=args.log_level, log_directory=args.log_dir)

    try:
        config = load_config(args.config)
        prices = pd.read_csv(args.prices, index_col=0, parse_dates=True)
        system = AllocationSystem(config)
        rows = replay_prices(system, prices)
        logger.info("Replayed {} price rows", rows)
        report = system.run_cycle()
    except AllocationError as exc:
        logger.error("Allocation cycle failed: {}", exc)
        return 1

    print(format_report(report))
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
