# qstate/statevector.py

"""
Exact state-vector model: one 2^n complex128 array for the joint state.

Basis index i is a bitmask where bit k holds qubit k.  Gates are applied by
contracting their matrix against the bits of the addressed qubits, always into
a fresh output array.
"""

import math
import numbers
import warnings

import numpy as np

from qstate import random_source
from qstate.errors import (CapacityError, InvalidStateError, QubitIndexError,
                           ShapeError)
from qstate.formatting import format_qubit_state


def _pair_strides(n):
    """
    For each qubit k, the (low, high) index arrays of basis states that
    differ only in bit k.
    """
    dim = 1 << n
    strides = []
    for k in range(n):
        bit = 1 << k
        low = (
            np.arange(dim, dtype=np.intp)[:: 2 * bit].repeat(bit)
            + np.tile(np.arange(bit, dtype=np.intp), 1 << (n - k - 1))
        )
        strides.append((low, low | bit))
    return strides


class StateVector:
    MAX_QUBITS = 15
    NORM_TOLERANCE = 1e-10
    # floor for the collapse denominator
    MIN_NORM = 1e-12

    def __init__(self, num_qubits: int, rng=None):
        if num_qubits > self.MAX_QUBITS:
            raise CapacityError(
                f"StateVector supports up to {self.MAX_QUBITS} qubits, got {num_qubits}")
        if num_qubits < 0:
            raise ShapeError(f"Qubit count must be non-negative, got {num_qubits}")
        self._n = int(num_qubits)
        self.rng = rng
        self._data = np.zeros((1 << self._n,), dtype=np.complex128)
        self._data[0] = 1.0
        self._strides = _pair_strides(self._n)

    # ----------------------------------------------------------------
    # Accessors
    # ----------------------------------------------------------------

    @property
    def num_qubits(self) -> int:
        return self._n

    @property
    def dimension(self) -> int:
        return 1 << self._n

    @property
    def state_vector(self) -> np.ndarray:
        return self._data.copy()

    def probabilities(self) -> np.ndarray:
        return np.abs(self._data) ** 2

    def _validate_qubit(self, *idxs):
        for i in idxs:
            if isinstance(i, bool) or not isinstance(i, numbers.Integral):
                raise TypeError(f"Invalid qubit index: {i!r}")
            if not (0 <= i < self._n):
                raise QubitIndexError(f"Invalid qubit index: {i}")

    # ----------------------------------------------------------------
    # State loading
    # ----------------------------------------------------------------

    def reset(self):
        self._data = np.zeros((self.dimension,), dtype=np.complex128)
        self._data[0] = 1.0

    def set_state(self, vector):
        """
        Load a full amplitude vector.

        Requires:
             len(vector) == 2**num_qubits and sum |v_i|^2 == 1 (within 1e-10).
        Ensures:
             The register holds a copy of ``vector``.
        """
        vec = np.array(vector, dtype=np.complex128)
        if vec.shape != (self.dimension,):
            raise ShapeError(f"State vector must have dimension {self.dimension}, "
                             f"got shape {vec.shape}")
        norm = float(np.sum(np.abs(vec) ** 2))
        if not math.isfinite(norm) or abs(norm - 1) > self.NORM_TOLERANCE:
            raise InvalidStateError(f"State vector must be normalized (norm² = {norm})")
        self._data = vec

    # ----------------------------------------------------------------
    # Gate application
    # ----------------------------------------------------------------

    def apply_single_qubit_gate(self, gate, qubit_index: int):
        if gate.num_qubits != 1:
            raise ShapeError(f"Expected single-qubit gate, got {gate.name} "
                             f"with {gate.num_qubits} qubits")
        self._validate_qubit(qubit_index)
        m = gate.matrix
        lo, hi = self._strides[qubit_index]
        a = self._data[lo]
        b = self._data[hi]
        new = np.zeros_like(self._data)
        new[lo] = m[0, 0] * a + m[0, 1] * b
        new[hi] = m[1, 0] * a + m[1, 1] * b
        self._data = new

    def apply_two_qubit_gate(self, gate, qubit_indices):
        """
        Apply a 4x4 gate to two qubits.

        The lower index acts as the control (high bit of the 2-bit sub-state)
        and the higher as the target; an input sub-state s feeds output
        sub-state j through matrix[s][j].
        """
        if gate.num_qubits != 2:
            raise ShapeError(f"Expected two-qubit gate, got {gate.name} "
                             f"with {gate.num_qubits} qubits")
        if len(qubit_indices) != 2:
            raise ShapeError(f"Expected two qubit indices, got {len(qubit_indices)}")
        q1, q2 = qubit_indices
        self._validate_qubit(q1, q2)
        if q1 == q2:
            raise InvalidStateError("Cannot apply two-qubit gate to the same qubit")
        control, target = min(q1, q2), max(q1, q2)
        cbit, tbit = 1 << control, 1 << target

        idx = np.arange(self.dimension, dtype=np.intp)
        base = idx[(idx & (cbit | tbit)) == 0]
        sub = [base | (cbit if s & 2 else 0) | (tbit if s & 1 else 0)
               for s in range(4)]

        m = gate.matrix
        new = np.zeros_like(self._data)
        for j in range(4):
            acc = np.zeros(base.shape, dtype=np.complex128)
            for s in range(4):
                if m[s, j] != 0:
                    acc += self._data[sub[s]] * m[s, j]
            new[sub[j]] = acc
        self._data = new

    def apply_gate(self, gate, qubits):
        """Dispatch on gate arity."""
        if isinstance(qubits, int):
            qubits = [qubits]
        if gate.num_qubits == 1:
            if len(qubits) != 1:
                raise ShapeError(f"Gate {gate.name} requires 1 qubit, got {len(qubits)}")
            self.apply_single_qubit_gate(gate, qubits[0])
        else:
            self.apply_two_qubit_gate(gate, qubits)

    # ----------------------------------------------------------------
    # Measurement
    # ----------------------------------------------------------------

    def measure(self, qubit_index: int) -> int:
        """
        Measure one qubit in the computational basis and collapse.

        If the drawn branch carries no probability mass, or dividing by its
        norm would overflow, the denominator is clamped to MIN_NORM and a
        RuntimeWarning is issued instead of spreading NaN through the state.
        Tiny but non-zero branches are renormalised exactly.
        """
        self._validate_qubit(qubit_index)
        lo, hi = self._strides[qubit_index]
        probs = np.abs(self._data) ** 2
        p1 = float(probs[hi].sum())
        result = 1 if random_source.draw(self.rng) < p1 else 0

        keep = hi if result else lo
        new = np.zeros_like(self._data)
        new[keep] = self._data[keep]
        norm = math.sqrt(float(probs[keep].sum()))
        with np.errstate(over="ignore", invalid="ignore"):
            collapsed = new / norm if norm > 0 else None
        if collapsed is None or not np.all(np.isfinite(collapsed)):
            warnings.warn(
                f"Measured qubit {qubit_index} -> {result} on a branch with "
                f"norm {norm:.3e}; clamping to {self.MIN_NORM}", RuntimeWarning)
            collapsed = new / self.MIN_NORM
        self._data = collapsed
        return result

    def measure_all(self):
        """
        Sample one basis state from the Born distribution and collapse to it.
        Returns the bits of the sampled index, qubit 0 first.
        """
        probs = np.abs(self._data) ** 2
        cumulative = np.cumsum(probs)
        r = random_source.draw(self.rng)
        outcome = int(np.searchsorted(cumulative, r, side="right"))
        if outcome >= self.dimension:
            # r fell past the accumulated total through rounding drift
            support = np.flatnonzero(probs)
            outcome = int(support[-1]) if support.size else 0
        self._data = np.zeros_like(self._data)
        self._data[outcome] = 1.0
        return [(outcome >> k) & 1 for k in range(self._n)]

    def get_probability(self, basis_state) -> float:
        basis_state = list(basis_state)
        if len(basis_state) != self._n:
            raise ShapeError(f"Basis state must have {self._n} qubits")
        index = 0
        for k, bit in enumerate(basis_state):
            if bit not in (0, 1):
                raise InvalidStateError("Basis state must contain only 0s and 1s")
            index |= int(bit) << k
        return float(abs(self._data[index]) ** 2)

    def clone(self):
        new = StateVector.__new__(StateVector)
        new._n = self._n
        new.rng = self.rng
        new._data = self._data.copy()
        new._strides = self._strides
        return new

    def __str__(self):
        return format_qubit_state(self._data)

    def __repr__(self):
        return f"StateVector(num_qubits={self._n})"
