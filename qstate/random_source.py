# qstate/random_source.py

"""
Uniform random sources used by measurement.

A source is anything with a ``random()`` method returning a float in [0, 1):
``random.Random``, ``secrets.SystemRandom`` and ``numpy.random.Generator``
all qualify.
"""

import random
import secrets

_SYSTEM_RANDOM = secrets.SystemRandom()


def resolve(rng):
    """The injected source, or the process-wide SystemRandom."""
    return _SYSTEM_RANDOM if rng is None else rng


def seeded(seed) -> random.Random:
    """
    Deterministic source for reproducible collapse outcomes.

    Requires:
         seed (int | str | bytes).
    Ensures:
         Returns a fresh random.Random seeded with ``seed``.
    """
    return random.Random(seed)


def draw(rng=None) -> float:
    return float(resolve(rng).random())
