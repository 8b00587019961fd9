"""Centralized logging configuration using Loguru."""

from __future__ import annotations

import pathlib
import sys
from typing import Any

from loguru import logger


def setup_logging(
    *,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_directory: str | None = "logs",
    log_filename: str = "quantum_allocation.log",
) -> None:
    """Configure application-wide logging sinks.

    Parameters
    ----------
    console_level:
        Minimum log level for console output.
    file_level:
        Minimum log level for file output.
    log_directory:
        Directory for the serialized log file. ``None`` disables the file sink.
    log_filename:
        Name of the file that captures structured log output.

    Existing handlers are removed so repeated calls do not duplicate entries.
    """

    logger.remove()

    logger.add(
        sys.stderr,
        level=console_level.upper(),
        backtrace=True,
        diagnose=False,
        colorize=True,
    )

    if log_directory is None:
        logger.debug("Logging configured without file sink")
        return

    log_path = pathlib.Path(log_directory).expanduser().resolve()
    log_path.mkdir(parents=True, exist_ok=True)
    file_path = log_path / log_filename

    logger.add(
        file_path,
        level=file_level.upper(),
        enqueue=True,
        backtrace=False,
        diagnose=False,
        rotation="10 MB",
        retention="30 days",
        compression="zip",
        serialize=True,
    )

    logger.bind(
        console_level=console_level,
        file_level=file_level,
        log_file=str(file_path),
    ).debug("Logging configured")


def log_allocation_event(event: str, **metadata: Any) -> None:
    """Emit a structured log entry for an allocation cycle event.

    Parameters
    ----------
    event:
        Short event name such as ``"risk_reduced"`` or ``"orders_routed"``.
    **metadata:
        Additional context (symbols, weights, order counts).
    """

    logger.bind(event=event, **metadata).info("allocation_event")


def log_performance_metric(metric: str, value: float, **context: Any) -> None:
    """Log performance metrics for optimization routines.

    Parameters
    ----------
    metric:
        Name of the metric, e.g., ``"annealing_execution_time"``.
    value:
        Numeric value associated with the metric.
    **context:
        Optional context (asset count, iterations) to aid analysis.
    """

    payload = {"metric": metric, "value": value, **context}
    logger.bind(**payload).info("performance_metric")


__all__ = ["setup_logging", "log_allocation_event", "log_performance_metric"]
