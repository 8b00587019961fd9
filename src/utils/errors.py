"""Error codes and exception hierarchy for the allocation engine."""

from __future__ import annotations

from enum import IntEnum, unique
from types import MappingProxyType
from typing import Any, Mapping


@unique
class ErrorCode(IntEnum):
    """Machine-readable failure categories reported to callers."""

    INVALID_INPUT = 1000
    INSUFFICIENT_DATA = 1100
    FATAL_INVARIANT = 1200
    CONFIG_INVALID = 1300


ERROR_CODE_DESCRIPTIONS: dict[ErrorCode, str] = {
    ErrorCode.INVALID_INPUT: "Input shape or value does not match the asset universe",
    ErrorCode.INSUFFICIENT_DATA: "Not enough data to compute a well-defined result",
    ErrorCode.FATAL_INVARIANT: "Internal numerical invariant violated",
    ErrorCode.CONFIG_INVALID: "Configuration could not be loaded or validated",
}


class AllocationError(Exception):
    """Base class for all failures raised by the allocation engine.

    Attributes
    ----------
    message:
        Human readable description.
    error_code:
        :class:`ErrorCode` identifying the failure category.
    context:
        Read-only mapping with values that help diagnose the failure.
    """

    default_code = ErrorCode.INVALID_INPUT

    def __init__(
        self,
        message: str,
        error_code: ErrorCode | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self._context = MappingProxyType(dict(context or {}))

    @property
    def context(self) -> Mapping[str, Any]:
        return self._context

    @property
    def error_description(self) -> str:
        return ERROR_CODE_DESCRIPTIONS[self.error_code]

    def __str__(self) -> str:
        return f"[{self.error_code.name}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured log records."""

        return {
            "exception_type": type(self).__name__,
            "message": self.message,
            "error_code": int(self.error_code),
            "error_name": self.error_code.name,
            "context": dict(self._context),
        }


class InvalidInputError(AllocationError, ValueError):
    """Vector lengths or values do not match the configured asset count."""

    default_code = ErrorCode.INVALID_INPUT


class InsufficientDataError(AllocationError, ValueError):
    """Inputs are too short or degenerate for the requested statistic."""

    default_code = ErrorCode.INSUFFICIENT_DATA


class InvariantViolationError(AllocationError, RuntimeError):
    """A numerical invariant of the simulator no longer holds."""

    default_code = ErrorCode.FATAL_INVARIANT


class ConfigurationError(AllocationError):
    """Static configuration is missing or malformed."""

    default_code = ErrorCode.CONFIG_INVALID


__all__ = [
    "ErrorCode",
    "ERROR_CODE_DESCRIPTIONS",
    "AllocationError",
    "InvalidInputError",
    "InsufficientDataError",
    "InvariantViolationError",
    "ConfigurationError",
]
