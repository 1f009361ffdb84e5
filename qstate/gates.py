# qstate/gates.py

"""
Unitary gate descriptors.

Each gate carries a read-only numpy matrix (authoritative for the exact
StateVector model) and an ``apply`` method that mutates Qubit objects directly
for the local QuantumCircuit model.  For the entangling gates ``apply`` is only
an approximation: without a joint state it blends the target amplitudes using
the control's |1⟩ probability.
"""

import math
from abc import ABC, abstractmethod

import numpy as np

from qstate.complex_utils import add, multiply
from qstate.errors import InvalidStateError, ShapeError


def _freeze(rows) -> np.ndarray:
    m = np.array(rows, dtype=np.complex128)
    m.setflags(write=False)
    return m


def is_unitary(matrix, tol: float = 1e-10) -> bool:
    """Return ``True`` if ``matrix``† ``matrix`` = I within ``tol``."""
    m = np.asarray(matrix, dtype=np.complex128)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        return False
    return bool(np.allclose(m.conj().T @ m, np.eye(m.shape[0]), atol=tol))


class Gate(ABC):
    """
    Immutable gate: name, arity and unitary matrix.

    Abstract; concrete gates say how they act on local qubits via ``apply``.
    """
    num_qubits = 1

    def __init__(self, name: str, matrix):
        self._name = name
        self._matrix = _freeze(matrix)
        dim = 1 << self.num_qubits
        if self._matrix.shape != (dim, dim):
            raise ShapeError(f"Gate {name} needs a {dim}x{dim} matrix, "
                             f"got {self._matrix.shape}")
        if not is_unitary(self._matrix):
            raise InvalidStateError(f"Gate {name} matrix is not unitary")

    @property
    def name(self) -> str:
        return self._name

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix

    def _check_arity(self, qubits):
        if len(qubits) != self.num_qubits:
            raise ShapeError(f"{self._name} gate requires exactly "
                             f"{self.num_qubits} qubit(s), got {len(qubits)}")

    @abstractmethod
    def apply(self, qubits):
        """Mutate the given Qubit objects in place."""

    def __repr__(self):
        return f"<Gate {self._name} on {self.num_qubits} qubit(s)>"


class SingleQubitGate(Gate):
    num_qubits = 1

    def apply(self, qubits):
        """(alpha, beta) <- M (alpha, beta) on the single given qubit."""
        self._check_arity(qubits)
        q = qubits[0]
        m = self._matrix
        new_alpha = add(multiply(m[0, 0], q.alpha), multiply(m[0, 1], q.beta))
        new_beta = add(multiply(m[1, 0], q.alpha), multiply(m[1, 1], q.beta))
        q.set_state(new_alpha, new_beta)


class RotationGate(SingleQubitGate):
    """
    Single-qubit gate built from an angle; ``with_params`` makes a new one.
    """

    def __init__(self, name: str, theta: float, builder):
        self._theta = float(theta)
        self._builder = builder
        super().__init__(name, builder(self._theta))

    @property
    def theta(self) -> float:
        return self._theta

    def with_params(self, theta: float):
        return RotationGate(self._name, theta, self._builder)

    def __repr__(self):
        return f"<Gate {self._name}({self._theta:g})>"


class CNOTGate(Gate):
    num_qubits = 2

    def __init__(self):
        super().__init__("CNOT", [[1, 0, 0, 0],
                                  [0, 1, 0, 0],
                                  [0, 0, 0, 1],
                                  [0, 0, 1, 0]])

    def apply(self, qubits):
        """
        Linear blend of the target toward its bit-flipped amplitudes,
        weighted by the control's current P(|1⟩).
        """
        self._check_arity(qubits)
        control, target = qubits
        p1 = control.probability_one()
        if p1 > 0:
            a, b = target.alpha, target.beta
            new_alpha = complex(a.real * (1 - p1) + b.real * p1,
                                a.imag * (1 - p1) + b.imag * p1)
            new_beta = complex(b.real * (1 - p1) + a.real * p1,
                               b.imag * (1 - p1) + a.imag * p1)
            target.set_state(new_alpha, new_beta)


class CZGate(Gate):
    num_qubits = 2

    def __init__(self):
        super().__init__("CZ", [[1, 0, 0, 0],
                                [0, 1, 0, 0],
                                [0, 0, 1, 0],
                                [0, 0, 0, -1]])

    def apply(self, qubits):
        """Scale the target's |1⟩ amplitude by (1 - 2 P_control(|1⟩))."""
        self._check_arity(qubits)
        control, target = qubits
        p1 = control.probability_one()
        if p1 > 0:
            b = target.beta
            factor = 1 - 2 * p1
            target.set_state(target.alpha, complex(b.real * factor, b.imag * factor))


class SWAPGate(Gate):
    num_qubits = 2

    def __init__(self):
        super().__init__("SWAP", [[1, 0, 0, 0],
                                  [0, 0, 1, 0],
                                  [0, 1, 0, 0],
                                  [0, 0, 0, 1]])

    def apply(self, qubits):
        self._check_arity(qubits)
        q1, q2 = qubits
        alpha, beta = q1.alpha, q1.beta
        q1.set_state(q2.alpha, q2.beta)
        q2.set_state(alpha, beta)


# ----------------------------------------------------------------
# Rotation matrices
# ----------------------------------------------------------------

def _rx(theta):
    c, s = math.cos(theta / 2), math.sin(theta / 2)
    return [[c, -1j * s], [-1j * s, c]]


def _ry(theta):
    c, s = math.cos(theta / 2), math.sin(theta / 2)
    return [[c, -s], [s, c]]


def _rz(theta):
    half = theta / 2
    return [[complex(math.cos(half), -math.sin(half)), 0],
            [0, complex(math.cos(half), math.sin(half))]]


def RX(theta: float) -> RotationGate:
    return RotationGate("RX", theta, _rx)


def RY(theta: float) -> RotationGate:
    return RotationGate("RY", theta, _ry)


def RZ(theta: float) -> RotationGate:
    return RotationGate("RZ", theta, _rz)


# Standard gates
_S2 = 1 / math.sqrt(2)
H = SingleQubitGate("H", [[_S2, _S2], [_S2, -_S2]])
X = SingleQubitGate("X", [[0, 1], [1, 0]])
Y = SingleQubitGate("Y", [[0, -1j], [1j, 0]])
Z = SingleQubitGate("Z", [[1, 0], [0, -1]])
S = SingleQubitGate("S", [[1, 0], [0, 1j]])
T = SingleQubitGate("T", [[1, 0], [0, complex(math.cos(math.pi / 4), math.sin(math.pi / 4))]])
CNOT = CNOTGate()
CZ = CZGate()
SWAP = SWAPGate()

GATES = {
    "H": H, "X": X, "Y": Y, "Z": Z, "S": S, "T": T,
    "CNOT": CNOT, "CZ": CZ, "SWAP": SWAP,
}
ROTATIONS = {"RX": RX, "RY": RY, "RZ": RZ}


def gate_from_name(name: str, params=None) -> Gate:
    """
    Look up a gate by (case-insensitive) name.

    Requires:
         name in GATES or ROTATIONS; rotations need exactly one angle.
    Ensures:
         Returns the shared fixed gate, or a new rotation gate.
    """
    key = name.upper()
    params = list(params or [])
    if key in ROTATIONS:
        if len(params) != 1:
            raise ShapeError(f"{key} takes exactly one angle, got {len(params)}")
        return ROTATIONS[key](float(params[0]))
    if key in GATES:
        if params:
            raise ShapeError(f"{key} takes no parameters")
        return GATES[key]
    raise ValueError(f"Unknown gate {name}")
