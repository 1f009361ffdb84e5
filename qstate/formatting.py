# qstate/formatting.py

import math

import numpy as np


def _fmt_amp(z, tol):
    re, im = z.real, z.imag
    if abs(im) < tol:
        return f"{re:.3f}"
    if abs(re) < tol:
        return f"{im:.3f}j"
    sign = '+' if im >= 0 else '-'
    return f"{re:.3f}{sign}{abs(im):.3f}j"


def format_qubit_state(state, tol=1e-6) -> str:
    """
    Nicely format a 1- or multi-qubit state vector for debugging.

    Kets are written most-significant qubit first, so qubit 0 is the
    rightmost character.
    """
    state = np.asarray(state, dtype=complex)
    if state.ndim != 1:
        return str(state)
    d = state.shape[0]
    if d == 2:
        return f"{_fmt_amp(state[0], tol)}|0⟩ + {_fmt_amp(state[1], tol)}|1⟩"
    n = int(math.log2(d)) if d > 1 else 0
    terms = []
    for k, amp in enumerate(state):
        if abs(amp) < tol:
            continue
        bits = format(k, f"0{n}b") if n else ""
        terms.append(f"({_fmt_amp(amp, tol)})|{bits}⟩")
    return " + ".join(terms) if terms else "0"


def format_probabilities(probs, tol=1e-9, width=40) -> str:
    """
    One bar per basis state with non-negligible probability.
    """
    probs = np.asarray(probs, dtype=float)
    d = probs.shape[0]
    n = int(math.log2(d)) if d > 1 else 0
    lines = []
    for k, p in enumerate(probs):
        if p < tol:
            continue
        bits = format(k, f"0{n}b") if n else "-"
        lines.append(f"{bits}: {'#' * int(round(p * width)):<{width}} {p:.4f}")
    return "\n".join(lines)
