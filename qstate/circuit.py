# qstate/circuit.py

"""
Local circuit model: a recorded gate list replayed over independent qubits.

No joint state is stored, so entangling gates follow the approximate
``Gate.apply`` rules.  Use StateVector where exact correlations matter.
"""

import numbers
from dataclasses import dataclass
from typing import Tuple

from qstate.complex_utils import ONE, ZERO
from qstate.errors import QubitIndexError, ShapeError
from qstate.gates import Gate
from qstate.qubit import Qubit


@dataclass(frozen=True)
class Operation:
    gate: Gate
    qubits: Tuple[int, ...]


class QuantumCircuit:
    """
    Owns ``num_qubits`` Qubit objects and an ordered operation list.
    Qubits are only ever handed out as copies.
    """

    def __init__(self, num_qubits: int = 1, rng=None):
        if num_qubits < 0:
            raise ShapeError(f"Qubit count must be non-negative, got {num_qubits}")
        self._qubits = [Qubit() for _ in range(num_qubits)]
        self._operations = []
        self.rng = rng

    @property
    def num_qubits(self) -> int:
        return len(self._qubits)

    @property
    def qubits(self):
        return [q.clone() for q in self._qubits]

    @property
    def operations(self):
        return list(self._operations)

    def qubit(self, index: int) -> Qubit:
        self._validate_qubit(index)
        return self._qubits[index].clone()

    def _validate_qubit(self, *idxs):
        for i in idxs:
            if isinstance(i, bool) or not isinstance(i, numbers.Integral):
                raise TypeError(f"Invalid qubit index: {i!r}")
            if not (0 <= i < len(self._qubits)):
                raise QubitIndexError(f"Invalid qubit index: {i}")

    def reset(self):
        for q in self._qubits:
            q.set_state(ONE, ZERO)
        self._operations = []

    def initialize(self, index: int, alpha, beta):
        """Load one qubit directly; nothing is recorded."""
        self._validate_qubit(index)
        self._qubits[index].set_state(alpha, beta)

    def add_gate(self, gate: Gate, qubit_indices):
        if isinstance(qubit_indices, int):
            qubit_indices = [qubit_indices]
        qubit_indices = tuple(qubit_indices)
        if len(qubit_indices) != gate.num_qubits:
            raise ShapeError(f"Gate {gate.name} requires {gate.num_qubits} qubits, "
                             f"but {len(qubit_indices)} were provided")
        self._validate_qubit(*qubit_indices)
        self._operations.append(Operation(gate, qubit_indices))

    def execute(self):
        """
        Replay every recorded operation in order.

        Qubits mutate in place, so a second call applies the gates again.
        """
        for op in self._operations:
            op.gate.apply([self._qubits[i] for i in op.qubits])

    def measure(self, index: int) -> int:
        self._validate_qubit(index)
        return self._qubits[index].measure(self.rng)

    def measure_all(self):
        return [q.measure(self.rng) for q in self._qubits]

    def clone(self):
        new = QuantumCircuit(0, rng=self.rng)
        new._qubits = [q.clone() for q in self._qubits]
        new._operations = list(self._operations)
        return new

    def __str__(self):
        lines = [f"Quantum Circuit with {self.num_qubits} qubits:"]
        for i, q in enumerate(self._qubits):
            lines.append(f"Qubit {i}: {q}")
        lines.append(f"Operations: {len(self._operations)}")
        for i, op in enumerate(self._operations):
            lines.append(f"  {i}: {op.gate.name} on qubits "
                         f"[{', '.join(str(q) for q in op.qubits)}]")
        return "\n".join(lines)
