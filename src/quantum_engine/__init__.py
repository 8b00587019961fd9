"""Quantum engine package exposing allocation components."""

from .annealing_optimizer import (
    AllocationOptimizer,
    AllocationResult,
    OptimizationParameters,
    annealing_angle,
)
from .state_vector import MAX_QUBITS, StateVectorCircuit

__all__ = [
    "AllocationOptimizer",
    "AllocationResult",
    "OptimizationParameters",
    "StateVectorCircuit",
    "MAX_QUBITS",
    "annealing_angle",
]
