"""Dense state-vector simulator for small quantum-inspired circuits."""

from __future__ import annotations

import numpy as np

from utils.errors import InvalidInputError, InvariantViolationError

#: Largest supported register. Memory grows as 16 bytes * 2**n, so 20 qubits
#: already hold 16 MiB of amplitudes and every gate touches all of them.
MAX_QUBITS = 20

NORMALIZATION_TOLERANCE = 1e-9

_INV_SQRT2 = 1.0 / np.sqrt(2.0)


class StateVectorCircuit:
    """Normalized complex amplitude vector over ``2**num_qubits`` basis states.

    Bit ``q`` of a basis index is the "active" state of qubit ``q``, so qubit 0
    is the least significant bit. Gates mutate the vector in place.
    """

    def __init__(self, num_qubits: int) -> None:
        if not 1 <= num_qubits <= MAX_QUBITS:
            msg = f"StateVectorCircuit supports between 1 and {MAX_QUBITS} qubits"
            raise InvalidInputError(msg, context={"num_qubits": num_qubits})

        self.num_qubits = num_qubits
        self._state = np.zeros(1 << num_qubits, dtype=np.complex128)
        self._state[0] = 1.0
        self._indices = np.arange(self._state.size, dtype=np.int64)

    @property
    def dimension(self) -> int:
        return self._state.size

    @property
    def amplitudes(self) -> np.ndarray:
        """Copy of the current amplitude vector."""

        return self._state.copy()

    def reset(self) -> None:
        """Return to the all-zero basis state."""

        self._state.fill(0.0)
        self._state[0] = 1.0

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------
    def hadamard(self, qubit: int) -> None:
        """Apply a Hadamard gate to ``qubit``.

        The vector is viewed as ``(high, bit, low)`` so every pair of indices
        differing only in ``qubit`` is combined exactly once.
        """

        self._check_qubit(qubit)
        pairs = self._state.reshape(-1, 2, 1 << qubit)
        cleared = pairs[:, 0, :].copy()
        set_ = pairs[:, 1, :]
        pairs[:, 0, :] = (cleared + set_) * _INV_SQRT2
        pairs[:, 1, :] = (cleared - set_) * _INV_SQRT2

    def phase(self, qubit: int, angle: float) -> None:
        """Multiply amplitudes with ``qubit`` set by ``exp(i * angle)``."""

        self._check_qubit(qubit)
        pairs = self._state.reshape(-1, 2, 1 << qubit)
        pairs[:, 1, :] *= np.exp(1j * angle)

    def controlled_phase(self, control: int, target: int, angle: float) -> None:
        """Multiply amplitudes with both ``control`` and ``target`` set by ``exp(i * angle)``."""

        self._check_qubit(control)
        self._check_qubit(target)
        if control == target:
            msg = "control and target qubits must differ"
            raise InvalidInputError(msg, context={"qubit": control})

        mask = (1 << control) | (1 << target)
        selected = (self._indices & mask) == mask
        self._state[selected] *= np.exp(1j * angle)

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    def norm(self) -> float:
        """Sum of squared amplitude magnitudes."""

        return float(np.sum(np.abs(self._state) ** 2))

    def check_normalization(self, tolerance: float = NORMALIZATION_TOLERANCE) -> float:
        norm = self.norm()
        if not abs(norm - 1.0) <= tolerance:
            msg = "State vector normalization drifted beyond tolerance"
            raise InvariantViolationError(
                msg,
                context={"norm": norm, "tolerance": tolerance, "num_qubits": self.num_qubits},
            )
        return norm

    def measure(self) -> np.ndarray:
        """Return the marginal "on" probability of every qubit.

        Each entry sums the squared magnitudes of the basis states in which
        that qubit is set. The entries are independent marginals and do not
        sum to one in general. The state is not collapsed.
        """

        self.check_normalization()
        probabilities = np.abs(self._state) ** 2
        marginals = np.empty(self.num_qubits, dtype=float)
        for qubit in range(self.num_qubits):
            marginals[qubit] = probabilities.reshape(-1, 2, 1 << qubit)[:, 1, :].sum()
        return np.clip(marginals, 0.0, 1.0)

    def _check_qubit(self, qubit: int) -> None:
        if not 0 <= qubit < self.num_qubits:
            msg = f"Qubit index {qubit} out of range for {self.num_qubits}-qubit circuit"
            raise InvalidInputError(msg, context={"qubit": qubit, "num_qubits": self.num_qubits})


__all__ = ["StateVectorCircuit", "MAX_QUBITS", "NORMALIZATION_TOLERANCE"]
