# qstate/errors.py

"""
Exception families raised by the register simulators.

Every error also derives from the builtin a caller would normally catch
(ValueError / IndexError), so ``except ValueError`` keeps working.
"""


class QuantumStateError(Exception):
    """Base class for all simulator errors."""


class CapacityError(QuantumStateError, ValueError):
    """Register larger than the state-vector simulator supports."""


class ShapeError(QuantumStateError, ValueError):
    """Gate arity or vector length does not match the register."""


class QubitIndexError(QuantumStateError, IndexError):
    """Qubit index outside [0, num_qubits)."""


class InvalidStateError(QuantumStateError, ValueError):
    """State that cannot be loaded or a gate placement that makes no sense."""
