"""Sanity checks run by the backends while debug mode is on."""

from ..config import debug_context, is_debug_enabled, set_debug_enabled
from .core import (
    assert_density_matrix,
    assert_normalized,
    assert_probability_vector,
    is_hermitian,
    state_norm,
)

__all__ = [
    "state_norm",
    "assert_normalized",
    "is_hermitian",
    "assert_density_matrix",
    "assert_probability_vector",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
]
