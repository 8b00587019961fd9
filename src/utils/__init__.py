"""Shared utilities: logging, configuration and error types."""

from .errors import (
    AllocationError,
    ConfigurationError,
    ErrorCode,
    InsufficientDataError,
    InvalidInputError,
    InvariantViolationError,
)
from .logger import log_allocation_event, log_performance_metric, setup_logging

__all__ = [
    "AllocationError",
    "ConfigurationError",
    "ErrorCode",
    "InsufficientDataError",
    "InvalidInputError",
    "InvariantViolationError",
    "log_allocation_event",
    "log_performance_metric",
    "setup_logging",
]
