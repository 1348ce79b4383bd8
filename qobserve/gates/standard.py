"""Single-qubit gate matrices used by the reference simulation backends.

Controlled gates are not separate matrices here: a circuit records the
control qubits next to the single-qubit target matrix and the backends apply
the matrix only on the control-satisfied subspace.
"""

from __future__ import annotations

import cmath
import math
from typing import Callable, Sequence

import torch

_DEFAULT_DTYPE = torch.complex128


def _resolve(dtype: torch.dtype | None, device: torch.device | None):
    return dtype or _DEFAULT_DTYPE, device or torch.device("cpu")


def _matrix(
    rows: list[list[complex]],
    dtype: torch.dtype | None,
    device: torch.device | None,
) -> torch.Tensor:
    dtype, device = _resolve(dtype, device)
    return torch.tensor(rows, dtype=dtype, device=device)


def I(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Identity gate."""
    return _matrix([[1.0, 0.0], [0.0, 1.0]], dtype, device)


def X(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-X gate (bit flip)."""
    return _matrix([[0.0, 1.0], [1.0, 0.0]], dtype, device)


def Y(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-Y gate."""
    return _matrix([[0.0, -1.0j], [1.0j, 0.0]], dtype, device)


def Z(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-Z gate (phase flip)."""
    return _matrix([[1.0, 0.0], [0.0, -1.0]], dtype, device)


def H(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Hadamard gate."""
    s = 1.0 / math.sqrt(2.0)
    return _matrix([[s, s], [s, -s]], dtype, device)


def S(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """S gate, the square root of Z."""
    return _matrix([[1.0, 0.0], [0.0, 1.0j]], dtype, device)


def Sdg(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Adjoint of the S gate."""
    return _matrix([[1.0, 0.0], [0.0, -1.0j]], dtype, device)


def T(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """T gate, the square root of S."""
    return _matrix([[1.0, 0.0], [0.0, cmath.exp(1.0j * math.pi / 4.0)]], dtype, device)


def Tdg(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Adjoint of the T gate."""
    return _matrix([[1.0, 0.0], [0.0, cmath.exp(-1.0j * math.pi / 4.0)]], dtype, device)


def RX(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Rotation about the X axis: RX(θ) = exp(-iθX/2).

        [[cos(θ/2), -i sin(θ/2)],
         [-i sin(θ/2), cos(θ/2)]]
    """
    c, s = math.cos(float(theta) / 2.0), math.sin(float(theta) / 2.0)
    return _matrix([[c, -1.0j * s], [-1.0j * s, c]], dtype, device)


def RY(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Rotation about the Y axis: RY(θ) = exp(-iθY/2).

        [[cos(θ/2), -sin(θ/2)],
         [sin(θ/2), cos(θ/2)]]
    """
    c, s = math.cos(float(theta) / 2.0), math.sin(float(theta) / 2.0)
    return _matrix([[c, -s], [s, c]], dtype, device)


def RZ(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Rotation about the Z axis: RZ(θ) = exp(-iθZ/2).

        [[exp(-iθ/2), 0],
         [0, exp(iθ/2)]]
    """
    half = float(theta) / 2.0
    return _matrix([[cmath.exp(-1.0j * half), 0.0], [0.0, cmath.exp(1.0j * half)]], dtype, device)


def R1(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """Phase gate diag(1, exp(iθ))."""
    return _matrix([[1.0, 0.0], [0.0, cmath.exp(1.0j * float(theta))]], dtype, device)


FIXED_GATES: dict[str, Callable[..., torch.Tensor]] = {
    "i": I,
    "x": X,
    "y": Y,
    "z": Z,
    "h": H,
    "s": S,
    "sdg": Sdg,
    "t": T,
    "tdg": Tdg,
}

PARAMETRIC_GATES: dict[str, Callable[..., torch.Tensor]] = {
    "rx": RX,
    "ry": RY,
    "rz": RZ,
    "r1": R1,
}


def gate_matrix(
    name: str,
    params: Sequence[float] | None = None,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Resolve a gate name to its (2, 2) matrix.

    Args:
        name: Case-insensitive gate name, one of FIXED_GATES or PARAMETRIC_GATES.
        params: Rotation angle for parametric gates; must be empty otherwise.
        dtype: Complex dtype. Defaults to torch.complex128.
        device: PyTorch device. Defaults to CPU.

    Raises:
        ValueError: For unknown gates or a wrong number of parameters.
    """
    key = name.lower()
    params = tuple(params or ())
    if key in FIXED_GATES:
        if params:
            raise ValueError(f"Gate {name!r} takes no parameters, got {params}.")
        return FIXED_GATES[key](dtype=dtype, device=device)
    if key in PARAMETRIC_GATES:
        if len(params) != 1:
            raise ValueError(f"Gate {name!r} requires exactly one parameter, got {params}.")
        return PARAMETRIC_GATES[key](params[0], dtype=dtype, device=device)
    supported = sorted(FIXED_GATES) + sorted(PARAMETRIC_GATES)
    raise ValueError(f"Unsupported gate name {name!r}. Supported gates: {supported}.")

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
