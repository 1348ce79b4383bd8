"""Factory functions for single-degree Pauli terms.

>>> from qobserve import spin
>>> h = 5.907 - 2.1433 * spin.x(0) * spin.x(1) - 6.125 * spin.z(1)
"""

from __future__ import annotations

from .pauli import PauliTerm, canonicalize, from_word


def i(degree: int) -> PauliTerm:
    """Explicit identity on ``degree``."""
    return PauliTerm(1.0, ((degree, "I"),))


def x(degree: int) -> PauliTerm:
    """Pauli X on ``degree``."""
    return PauliTerm(1.0, ((degree, "X"),))


def y(degree: int) -> PauliTerm:
    """Pauli Y on ``degree``."""
    return PauliTerm(1.0, ((degree, "Y"),))


def z(degree: int) -> PauliTerm:
    """Pauli Z on ``degree``."""
    return PauliTerm(1.0, ((degree, "Z"),))


__all__ = ["i", "x", "y", "z", "from_word", "canonicalize"]
