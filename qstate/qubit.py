# qstate/qubit.py

"""
Single two-amplitude qubit used by the local circuit model.
"""

import math

from qstate import random_source
from qstate.complex_utils import ONE, ZERO, magnitude, scale


class Qubit:
    """
    alpha|0⟩ + beta|1⟩, renormalised after every mutation.

    The all-zero state is left as is; it is not a physical state but must not
    blow up with a division by zero either.
    """

    def __init__(self, alpha=ONE, beta=ZERO):
        self._alpha = complex(alpha)
        self._beta = complex(beta)
        self.normalize()

    @property
    def alpha(self) -> complex:
        return self._alpha

    @property
    def beta(self) -> complex:
        return self._beta

    def set_state(self, alpha, beta):
        self._alpha = complex(alpha)
        self._beta = complex(beta)
        self.normalize()

    def normalize(self):
        norm = math.sqrt(magnitude(self._alpha) ** 2 + magnitude(self._beta) ** 2)
        if norm > 0:
            self._alpha = scale(self._alpha, 1 / norm)
            self._beta = scale(self._beta, 1 / norm)

    def probability_zero(self) -> float:
        return magnitude(self._alpha) ** 2

    def probability_one(self) -> float:
        return magnitude(self._beta) ** 2

    def measure(self, rng=None) -> int:
        """
        Collapse to |0⟩ or |1⟩ following the Born rule.

        Requires:
             rng: optional uniform source (see qstate.random_source).
        Ensures:
             Returns 0 or 1; the qubit is left in the matching basis state.
        """
        if random_source.draw(rng) < self.probability_zero():
            self.set_state(ONE, ZERO)
            return 0
        self.set_state(ZERO, ONE)
        return 1

    def clone(self):
        # bypass __init__ so a second normalisation cannot perturb the bits
        new = Qubit.__new__(Qubit)
        new._alpha = self._alpha
        new._beta = self._beta
        return new

    def as_array(self):
        """Amplitudes as a length-2 list, for formatting helpers."""
        return [self._alpha, self._beta]

    def __str__(self):
        a, b = self._alpha, self._beta
        return (f"({a.real:.3f}+{a.imag:.3f}i)|0⟩ + "
                f"({b.real:.3f}+{b.imag:.3f}i)|1⟩")

    def __repr__(self):
        return f"Qubit(alpha={self._alpha!r}, beta={self._beta!r})"
