"""Operators package: Pauli terms, Hamiltonians and measurement grouping."""

from . import spin
from .grouping import (
    GROUPING_STRATEGIES,
    MeasurementGroup,
    group_terms,
    qubitwise_compatible,
)
from .pauli import PauliSum, PauliTerm, as_terms, canonicalize, from_word

__all__ = [
    "PauliTerm",
    "PauliSum",
    "as_terms",
    "canonicalize",
    "from_word",
    "spin",
    "GROUPING_STRATEGIES",
    "MeasurementGroup",
    "group_terms",
    "qubitwise_compatible",
]
