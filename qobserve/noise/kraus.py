"""Kraus-form noise channels.

A channel acts as E(ρ) = ∑_i K_i ρ K_i†. The factories below build the
standard single-qubit channels that a :class:`~qobserve.noise.NoiseModel`
attaches to gates.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import torch

from ..gates.standard import I, X, Y, Z

_TP_ATOL = {torch.complex128: 1e-7, torch.complex64: 1e-5}


@dataclass(frozen=True)
class KrausChannel:
    """
    Trace-preserving quantum channel in Kraus form.

    Attributes
    ----------
    name:
        Human-readable label, e.g. "depolarization(p=0.1)".
    kraus_ops:
        Kraus operators, each of shape (2**num_qubits, 2**num_qubits).
        Real inputs are promoted to complex128.
    num_qubits:
        Number of qubits the channel acts on.

    Raises
    ------
    ValueError
        For empty or mis-shaped operators, or if ∑ K† K ≠ I.
    """

    name: str
    kraus_ops: tuple[torch.Tensor, ...]
    num_qubits: int = 1

    def __post_init__(self) -> None:
        if self.num_qubits < 1:
            raise ValueError("num_qubits must be at least 1.")
        if len(self.kraus_ops) == 0:
            raise ValueError("kraus_ops must contain at least one operator.")

        dim = 1 << self.num_qubits
        first = self.kraus_ops[0]
        if not isinstance(first, torch.Tensor):
            raise ValueError(f"Kraus operator 0 must be a torch.Tensor, got {type(first)}")
        dtype = first.dtype if torch.is_complex(first) else torch.complex128

        ops = []
        for i, K in enumerate(self.kraus_ops):
            if not isinstance(K, torch.Tensor):
                raise ValueError(f"Kraus operator {i} must be a torch.Tensor, got {type(K)}")
            if K.shape != (dim, dim):
                raise ValueError(
                    f"Kraus operator {i} must have shape ({dim}, {dim}), got {tuple(K.shape)}"
                )
            ops.append(K.to(dtype=dtype, device=first.device))
        object.__setattr__(self, "kraus_ops", tuple(ops))

        if not self.is_trace_preserving():
            raise ValueError(
                f"Kraus operators of {self.name!r} do not define a trace-preserving "
                "channel (∑K†K ≠ I)."
            )

    def is_trace_preserving(self, atol: Optional[float] = None) -> bool:
        """Check ∑ K_i† K_i ≈ I within ``atol`` (default set by the operator precision)."""
        dim = 1 << self.num_qubits
        K0 = self.kraus_ops[0]
        if atol is None:
            atol = _TP_ATOL.get(K0.dtype, 1e-5)
        total = torch.zeros((dim, dim), dtype=K0.dtype, device=K0.device)
        for K in self.kraus_ops:
            total = total + K.conj().T @ K
        identity = torch.eye(dim, dtype=K0.dtype, device=K0.device)
        return torch.max(torch.abs(total - identity)).item() <= atol

    def __len__(self) -> int:
        return len(self.kraus_ops)


def _check_probability(value: float, label: str) -> float:
    value = float(value)
    if value < 0.0 or value > 1.0:
        raise ValueError(f"{label} must be in [0, 1], got {value}")
    return value


def _pauli_mixture(
    name: str,
    p: float,
    paulis: Sequence[torch.Tensor],
) -> KrausChannel:
    """sqrt(1-p) I plus sqrt(p/len(paulis)) P for each P in ``paulis``."""
    weight = math.sqrt(p / len(paulis))
    ops = [math.sqrt(1.0 - p) * I()] + [weight * P for P in paulis]
    return KrausChannel(name=name, kraus_ops=tuple(ops), num_qubits=1)


def depolarization_channel(p: float) -> KrausChannel:
    """
    Single-qubit depolarizing channel:

        E(ρ) = (1 - p) ρ + (p / 3) (X ρ X + Y ρ Y + Z ρ Z)

    At p = 1 the identity branch vanishes and every application replaces the
    gate's output with a uniform Pauli error.
    """
    p = _check_probability(p, "Depolarization probability")
    return _pauli_mixture(f"depolarization(p={p})", p, (X(), Y(), Z()))


def bit_flip_channel(p: float) -> KrausChannel:
    """E(ρ) = (1 - p) ρ + p X ρ X."""
    p = _check_probability(p, "Bit-flip probability")
    return _pauli_mixture(f"bit_flip(p={p})", p, (X(),))


def phase_flip_channel(p: float) -> KrausChannel:
    """E(ρ) = (1 - p) ρ + p Z ρ Z."""
    p = _check_probability(p, "Phase-flip probability")
    return _pauli_mixture(f"phase_flip(p={p})", p, (Z(),))


def amplitude_damping_channel(gamma: float) -> KrausChannel:
    """
    Decay |1> -> |0> with probability ``gamma``.

        K0 = [[1, 0], [0, sqrt(1 - gamma)]]
        K1 = [[0, sqrt(gamma)], [0, 0]]
    """
    gamma = _check_probability(gamma, "Amplitude damping parameter gamma")
    k0 = torch.tensor([[1.0, 0.0], [0.0, math.sqrt(1.0 - gamma)]], dtype=torch.complex128)
    k1 = torch.tensor([[0.0, math.sqrt(gamma)], [0.0, 0.0]], dtype=torch.complex128)
    return KrausChannel(
        name=f"amplitude_damping(gamma={gamma})", kraus_ops=(k0, k1), num_qubits=1
    )


def phase_damping_channel(gamma: float) -> KrausChannel:
    """
    Damp off-diagonal coherence without changing populations.

        K0 = [[1, 0], [0, sqrt(1 - gamma)]]
        K1 = [[0, 0], [0, sqrt(gamma)]]
    """
    gamma = _check_probability(gamma, "Phase damping parameter gamma")
    k0 = torch.tensor([[1.0, 0.0], [0.0, math.sqrt(1.0 - gamma)]], dtype=torch.complex128)
    k1 = torch.tensor([[0.0, 0.0], [0.0, math.sqrt(gamma)]], dtype=torch.complex128)
    return KrausChannel(
        name=f"phase_damping(gamma={gamma})", kraus_ops=(k0, k1), num_qubits=1
    )


__all__ = [
    "KrausChannel",
    "depolarization_channel",
    "bit_flip_channel",
    "phase_flip_channel",
    "amplitude_damping_channel",
    "phase_damping_channel",
]
