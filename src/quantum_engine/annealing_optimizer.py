"""Annealing-schedule allocation optimizer driven by a state-vector circuit."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
from loguru import logger
from qiskit import QuantumCircuit

from utils.errors import InvalidInputError
from utils.logger import log_performance_metric

from .state_vector import StateVectorCircuit


@dataclass(frozen=True, slots=True)
class OptimizationParameters:
    """Immutable knobs of the annealing schedule.

    Attributes
    ----------
    risk_aversion:
        Scales the covariance-driven two-qubit phase coupling.
    temperature:
        Initial magnitude of the annealing perturbation.
    num_iterations:
        Number of schedule rounds.
    learning_rate:
        Scales the return-driven single-qubit phase rotation.
    """

    risk_aversion: float
    temperature: float
    num_iterations: int
    learning_rate: float

    def __post_init__(self) -> None:
        if self.num_iterations < 1:
            msg = "num_iterations must be positive"
            raise InvalidInputError(msg, context={"num_iterations": self.num_iterations})
        values = (self.risk_aversion, self.temperature, self.learning_rate)
        if not all(math.isfinite(value) for value in values):
            msg = "Optimization parameters must be finite"
            raise InvalidInputError(msg)


@dataclass(slots=True)
class AllocationResult:
    """Target weights together with run diagnostics."""

    weights: np.ndarray
    iterations: int
    execution_time: float
    metadata: dict[str, object] = field(default_factory=dict)


def annealing_angle(temperature: float, progress: float) -> float:
    """Perturbation angle at ``progress`` in ``[0, 1)`` of the schedule.

    ``temperature * (1 - progress)`` decays linearly and the sine envelope
    vanishes at both ends, so the term shrinks to zero as progress approaches 1.
    """

    current_temperature = temperature * (1.0 - progress)
    return current_temperature * math.sin(math.pi * progress)


class AllocationOptimizer:
    """Map expected returns and covariances to per-asset target weights."""

    def __init__(self, num_assets: int, params: OptimizationParameters) -> None:
        self.params = params
        self.num_assets = num_assets
        self.circuit = StateVectorCircuit(num_assets)
        self._prepare_superposition()

    def resize(self, num_assets: int) -> None:
        """Rebuild the circuit for a changed asset universe."""

        if num_assets == self.num_assets:
            return
        circuit = StateVectorCircuit(num_assets)
        logger.info("Resizing allocation circuit from {} to {} assets", self.num_assets, num_assets)
        self.circuit = circuit
        self.num_assets = num_assets
        self._prepare_superposition()

    def annealing_angle(self, iteration: int, params: OptimizationParameters | None = None) -> float:
        active = params or self.params
        return annealing_angle(active.temperature, iteration / active.num_iterations)

    def optimize(
        self,
        returns: Sequence[float],
        covariance: Sequence[Sequence[float]],
        *,
        params: OptimizationParameters | None = None,
    ) -> np.ndarray:
        """Run the annealing schedule and return marginal weights.

        Parameters
        ----------
        returns:
            Expected return per asset.
        covariance:
            Square covariance matrix matching the asset count.
        params:
            Optional parameter object replacing the constructor parameters for
            this call only.
        """

        return self.optimize_allocation(returns, covariance, params=params).weights

    def optimize_allocation(
        self,
        returns: Sequence[float],
        covariance: Sequence[Sequence[float]],
        *,
        params: OptimizationParameters | None = None,
    ) -> AllocationResult:
        active = params or self.params
        returns_arr, cov_matrix = self._validate_inputs(returns, covariance)

        start_time = time.perf_counter()
        circuit = self.circuit
        try:
            for iteration in range(active.num_iterations):
                self._encode_market(circuit, returns_arr, cov_matrix, active)
                angle = self.annealing_angle(iteration, active)
                for asset in range(self.num_assets):
                    circuit.phase(asset, angle)

            weights = circuit.measure()
        finally:
            self._prepare_superposition()

        elapsed = time.perf_counter() - start_time
        log_performance_metric(
            "annealing_execution_time",
            elapsed,
            assets=self.num_assets,
            iterations=active.num_iterations,
        )
        logger.debug("Annealing produced weights {}", np.round(weights, 6).tolist())

        return AllocationResult(
            weights=weights,
            iterations=active.num_iterations,
            execution_time=elapsed,
            metadata={
                "risk_aversion": active.risk_aversion,
                "temperature": active.temperature,
                "learning_rate": active.learning_rate,
                "weight_sum": float(weights.sum()),
            },
        )

    def build_circuit(
        self,
        returns: Sequence[float],
        covariance: Sequence[Sequence[float]],
        *,
        params: OptimizationParameters | None = None,
    ) -> QuantumCircuit:
        """Express the full schedule as a qiskit circuit.

        Qubit ordering matches :class:`StateVectorCircuit`, so the circuit's
        statevector equals the simulator state just before measurement.
        """

        active = params or self.params
        returns_arr, cov_matrix = self._validate_inputs(returns, covariance)

        circuit = QuantumCircuit(self.num_assets)
        circuit.h(range(self.num_assets))
        for iteration in range(active.num_iterations):
            for i in range(self.num_assets):
                circuit.p(returns_arr[i] * active.learning_rate, i)
            for i in range(self.num_assets - 1):
                for j in range(i + 1, self.num_assets):
                    circuit.cp(cov_matrix[i, j] * active.risk_aversion, i, j)
            angle = self.annealing_angle(iteration, active)
            for i in range(self.num_assets):
                circuit.p(angle, i)
        return circuit

    def _prepare_superposition(self) -> None:
        self.circuit.reset()
        for qubit in range(self.num_assets):
            self.circuit.hadamard(qubit)

    def _encode_market(
        self,
        circuit: StateVectorCircuit,
        returns_arr: np.ndarray,
        cov_matrix: np.ndarray,
        params: OptimizationParameters,
    ) -> None:
        for i in range(self.num_assets):
            circuit.phase(i, returns_arr[i] * params.learning_rate)
        for i in range(self.num_assets - 1):
            for j in range(i + 1, self.num_assets):
                circuit.controlled_phase(i, j, cov_matrix[i, j] * params.risk_aversion)

    def _validate_inputs(
        self,
        returns: Sequence[float],
        covariance: Sequence[Sequence[float]],
    ) -> tuple[np.ndarray, np.ndarray]:
        try:
            returns_arr = np.asarray(returns, dtype=float)
            cov_matrix = np.asarray(covariance, dtype=float)
        except (TypeError, ValueError) as exc:
            msg = "returns and covariance must be numeric"
            raise InvalidInputError(msg) from exc

        if returns_arr.shape != (self.num_assets,):
            msg = "Length of returns must equal number of assets"
            raise InvalidInputError(
                msg, context={"expected": self.num_assets, "shape": returns_arr.shape}
            )
        if cov_matrix.shape != (self.num_assets, self.num_assets):
            msg = "Covariance matrix must be square with size equal to num_assets"
            raise InvalidInputError(
                msg, context={"expected": self.num_assets, "shape": cov_matrix.shape}
            )
        if not (np.all(np.isfinite(returns_arr)) and np.all(np.isfinite(cov_matrix))):
            msg = "returns and covariance must be finite"
            raise InvalidInputError(msg)
        return returns_arr, cov_matrix


__all__ = [
    "AllocationOptimizer",
    "AllocationResult",
    "OptimizationParameters",
    "annealing_angle",
]
