"""Gate matrices."""

from .standard import (
    FIXED_GATES,
    PARAMETRIC_GATES,
    R1,
    RX,
    RY,
    RZ,
    H,
    I,
    S,
    Sdg,
    T,
    Tdg,
    X,
    Y,
    Z,
    gate_matrix,
)

__all__ = [
    "I",
    "X",
    "Y",
    "Z",
    "H",
    "S",
    "Sdg",
    "T",
    "Tdg",
    "RX",
    "RY",
    "RZ",
    "R1",
    "FIXED_GATES",
    "PARAMETRIC_GATES",
    "gate_matrix",
]
