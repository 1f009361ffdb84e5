# qstate/complex_utils.py

"""
Complex arithmetic on Python's builtin ``complex`` values.

All helpers are pure and total: NaN and Inf propagate the way IEEE floats do.
Products are written out component-wise so results do not depend on how the
interpreter mixes real and complex operands.
"""

import math
import numbers

ZERO = complex(0.0, 0.0)
ONE = complex(1.0, 0.0)
I = complex(0.0, 1.0)


def add(a: complex, b: complex) -> complex:
    return complex(a.real + b.real, a.imag + b.imag)


def subtract(a: complex, b: complex) -> complex:
    return complex(a.real - b.real, a.imag - b.imag)


def multiply(a: complex, b: complex) -> complex:
    return complex(a.real * b.real - a.imag * b.imag,
                   a.real * b.imag + a.imag * b.real)


def scale(a: complex, scalar) -> complex:
    """
    Scale ``a`` by a real number, or multiply by a complex ``scalar``.
    """
    if isinstance(scalar, numbers.Real):
        return complex(a.real * scalar, a.imag * scalar)
    return multiply(a, complex(scalar))


def conjugate(a: complex) -> complex:
    return complex(a.real, -a.imag)


def magnitude(a: complex) -> float:
    return math.sqrt(a.real * a.real + a.imag * a.imag)


def phase(a: complex) -> float:
    return math.atan2(a.imag, a.real)


def exp(a: complex) -> complex:
    """e^(re) * (cos(im) + i sin(im))"""
    r = math.exp(a.real)
    return complex(r * math.cos(a.imag), r * math.sin(a.imag))
