"""Unit tests for the annealing allocation optimizer."""

from __future__ import annotations

import numpy as np
import pytest
from qiskit.quantum_info import Statevector

from quantum_engine.annealing_optimizer import (
    AllocationOptimizer,
    OptimizationParameters,
    annealing_angle,
)
from utils.errors import ErrorCode, InvalidInputError


@pytest.fixture
def params() -> OptimizationParameters:
    return OptimizationParameters(
        risk_aversion=0.1,
        temperature=0.05,
        num_iterations=10,
        learning_rate=0.2,
    )


def test_construction_prepares_uniform_superposition(params: OptimizationParameters) -> None:
    optimizer = AllocationOptimizer(4, params)
    np.testing.assert_allclose(optimizer.circuit.measure(), np.full(4, 0.5), atol=1e-9)


def test_two_asset_scenario(params: OptimizationParameters) -> None:
    optimizer = AllocationOptimizer(2, params)
    returns = [0.01, -0.02]
    covariance = [[0.0004, 0.0001], [0.0001, 0.0009]]

    weights = optimizer.optimize(returns, covariance)

    assert weights.shape == (2,)
    assert np.all((weights >= 0.0) & (weights <= 1.0))

    # The encoded state carries the market phases even though the magnitudes
    # of a diagonal-only schedule stay uniform.
    state = Statevector(optimizer.build_circuit(returns, covariance))
    assert not np.allclose(state.data, np.full(4, 0.5))
    for qubit, weight in enumerate(weights):
        assert weight == pytest.approx(state.probabilities([qubit])[1], abs=1e-12)


def test_optimize_is_deterministic(
    params: OptimizationParameters,
    sample_returns: np.ndarray,
    sample_covariances: np.ndarray,
) -> None:
    first = AllocationOptimizer(5, params).optimize(sample_returns, sample_covariances)
    second = AllocationOptimizer(5, params).optimize(sample_returns, sample_covariances)
    np.testing.assert_allclose(first, second, atol=1e-9)


def test_repeated_calls_start_from_fresh_state(
    params: OptimizationParameters,
    sample_returns: np.ndarray,
    sample_covariances: np.ndarray,
) -> None:
    optimizer = AllocationOptimizer(5, params)
    first = optimizer.optimize(sample_returns, sample_covariances)
    second = optimizer.optimize(sample_returns, sample_covariances)
    np.testing.assert_allclose(first, second, atol=1e-9)
    np.testing.assert_allclose(optimizer.circuit.measure(), np.full(5, 0.5), atol=1e-9)


def test_schedule_matches_qiskit_reference(
    params: OptimizationParameters,
    sample_returns: np.ndarray,
    sample_covariances: np.ndarray,
) -> None:
    optimizer = AllocationOptimizer(5, params)
    circuit = optimizer.build_circuit(sample_returns, sample_covariances)
    weights = optimizer.optimize(sample_returns, sample_covariances)

    expected = Statevector(circuit)
    assert circuit.num_qubits == 5
    for qubit in range(5):
        assert weights[qubit] == pytest.approx(expected.probabilities([qubit])[1], abs=1e-9)


def test_annealing_perturbation_decays_in_back_half() -> None:
    temperature = 0.3
    iterations = 25
    magnitudes = [abs(annealing_angle(temperature, k / iterations)) for k in range(iterations)]

    assert magnitudes[0] == 0.0
    for k in range(iterations // 2 + 1, iterations):
        assert magnitudes[k] <= magnitudes[k - 1]
    assert magnitudes[-1] < 0.05 * max(magnitudes)


def test_annealing_angle_uses_optimizer_schedule(params: OptimizationParameters) -> None:
    optimizer = AllocationOptimizer(2, params)
    assert optimizer.annealing_angle(5) == pytest.approx(annealing_angle(0.05, 0.5))
    assert optimizer.annealing_angle(5) == pytest.approx(0.05 * 0.5 * 1.0)


def test_parameter_override_changes_encoding(
    params: OptimizationParameters,
    sample_returns: np.ndarray,
    sample_covariances: np.ndarray,
) -> None:
    optimizer = AllocationOptimizer(5, params)
    override = OptimizationParameters(
        risk_aversion=0.9,
        temperature=0.0,
        num_iterations=3,
        learning_rate=0.2,
    )
    result = optimizer.optimize_allocation(sample_returns, sample_covariances, params=override)
    assert result.iterations == 3
    assert result.metadata["risk_aversion"] == 0.9
    assert optimizer.params is params


def test_resize_rebuilds_circuit(params: OptimizationParameters) -> None:
    optimizer = AllocationOptimizer(2, params)
    optimizer.resize(3)
    assert optimizer.circuit.num_qubits == 3
    weights = optimizer.optimize([0.01, 0.02, 0.03], np.eye(3) * 0.001)
    assert weights.shape == (3,)


@pytest.mark.parametrize(
    ("returns", "covariance"),
    [
        ([0.01], [[0.0004, 0.0001], [0.0001, 0.0009]]),
        ([0.01, 0.02, 0.03], [[0.0004, 0.0001], [0.0001, 0.0009]]),
        ([0.01, 0.02], [[0.0004, 0.0001]]),
        ([0.01, float("nan")], [[0.0004, 0.0001], [0.0001, 0.0009]]),
    ],
)
def test_mismatched_inputs_rejected_without_mutation(
    params: OptimizationParameters,
    returns: list[float],
    covariance: list[list[float]],
) -> None:
    optimizer = AllocationOptimizer(2, params)
    before = optimizer.circuit.amplitudes

    with pytest.raises(InvalidInputError) as excinfo:
        optimizer.optimize(returns, covariance)

    assert excinfo.value.error_code is ErrorCode.INVALID_INPUT
    np.testing.assert_array_equal(optimizer.circuit.amplitudes, before)


def test_parameters_validate_iterations() -> None:
    with pytest.raises(InvalidInputError):
        OptimizationParameters(risk_aversion=0.1, temperature=0.1, num_iterations=0, learning_rate=0.1)
