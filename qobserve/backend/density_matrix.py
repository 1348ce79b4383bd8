"""Density-matrix backend for mixed states and gate-triggered noise.

Storage is O(4^n), so this backend is intended for small registers. Gates
and Kraus operators reuse the statevector routines on the rows and columns
of ρ:

    U ρ    = apply(ρᵀ)ᵀ
    A U†   = conj(apply(conj(A)))
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

import torch

from ..circuit import QuantumCircuit
from ..core.device import Device
from ..diagnostics import assert_density_matrix, is_debug_enabled
from ..logging import get_logger
from ..noise import KrausChannel, NoiseModel
from .base import ExecutionBackend
from .statevector import apply_gate, apply_op, zero_state

logger = get_logger(__name__)

LastDimOp = Callable[[torch.Tensor], torch.Tensor]


def zero_dm_state(
    n_qubits: int,
    device: Device | torch.device | str | None = None,
    dtype: Optional[torch.dtype] = None,
) -> torch.Tensor:
    """Return |0...0⟩⟨0...0| as a (2**n, 2**n) complex tensor."""
    return dm_from_statevector(zero_state(n_qubits, device=device, dtype=dtype))


def dm_from_statevector(state: torch.Tensor) -> torch.Tensor:
    """Outer product |ψ⟩⟨ψ| of a statevector of shape (..., dim)."""
    if not torch.is_complex(state):
        raise ValueError(f"state must be complex dtype, got {state.dtype}")
    return state.unsqueeze(-1) * state.conj().unsqueeze(-2)


def conjugate_by(rho: torch.Tensor, apply: LastDimOp) -> torch.Tensor:
    """
    Return U ρ U† where ``apply`` maps a vector (last dimension) v to U v.

    ``apply`` must be linear; it is called twice on (dim, dim) tensors.
    """
    left = apply(rho.transpose(-2, -1)).transpose(-2, -1)
    return apply(left.conj()).conj()


def apply_unitary_dm(
    rho: torch.Tensor,
    gate: torch.Tensor,
    targets: int | Sequence[int],
    controls: Sequence[int] = (),
    n_qubits: Optional[int] = None,
) -> torch.Tensor:
    """ρ -> U ρ U† for a (controlled) gate on ``targets``."""
    return conjugate_by(
        rho, lambda v: apply_gate(v, gate, targets, controls, n_qubits=n_qubits)
    )


def apply_kraus(
    rho: torch.Tensor,
    channel: KrausChannel,
    qubits: Sequence[int],
    n_qubits: Optional[int] = None,
) -> torch.Tensor:
    """
    ρ -> ∑_k K_k ρ K_k† with the channel acting on ``qubits``.

    Raises:
        ValueError: If the channel arity does not match ``qubits``.
    """
    qubits = tuple(qubits)
    if channel.num_qubits != len(qubits):
        raise ValueError(
            f"Channel {channel.name!r} acts on {channel.num_qubits} qubit(s), "
            f"got qubits {qubits}"
        )
    out = torch.zeros_like(rho)
    for K in channel.kraus_ops:
        out = out + apply_unitary_dm(rho, K, qubits, n_qubits=n_qubits)
    return out


def measure_probs_dm(rho: torch.Tensor) -> torch.Tensor:
    """
    Diagonal of ρ as outcome probabilities, shape (..., dim).

    Tiny negative entries from rounding are clipped before renormalizing.
    """
    if rho.dim() < 2 or rho.shape[-1] != rho.shape[-2]:
        raise ValueError(
            f"rho must be square in last two dimensions, got shape {tuple(rho.shape)}"
        )
    diag = torch.clamp(rho.diagonal(dim1=-2, dim2=-1).real, min=0.0)
    return diag / torch.clamp(diag.sum(dim=-1, keepdim=True), min=1e-12)


def simulate_circuit_dm(
    circuit: QuantumCircuit,
    noise: Optional[NoiseModel] = None,
    device: Device | torch.device | str | None = None,
    dtype: Optional[torch.dtype] = None,
) -> torch.Tensor:
    """
    Run ``circuit`` on |0...0⟩⟨0...0|, applying ``noise`` after matching gates.

    After each gate the channels returned by
    ``noise.get_channels(op.name, op.qubits)`` act on the gate's operand
    qubits in registration order.
    """
    n = circuit.n_qubits
    rho = zero_dm_state(n, device=device, dtype=dtype)
    applied = 0
    for op in circuit.ops:
        rho = conjugate_by(rho, lambda v, op=op: apply_op(v, op, n))
        if noise is not None:
            for channel in noise.get_channels(op.name, op.qubits):
                rho = apply_kraus(rho, channel, op.qubits, n_qubits=n)
                applied += 1
        if is_debug_enabled():
            assert_density_matrix(rho, atol=1e-4)
    if applied:
        logger.debug("density-matrix: applied %d noise channel(s)", applied)
    return rho


class DensityMatrixBackend(ExecutionBackend):
    """Mixed-state simulation; the only reference backend that applies noise."""

    name = "density-matrix"
    supports_exact = True
    supports_shots = True
    supports_noise = True

    def probabilities(self, circuit, noise=None) -> torch.Tensor:
        logger.debug(
            "density-matrix: simulating %d ops on %d qubits", len(circuit), circuit.n_qubits
        )
        rho = simulate_circuit_dm(circuit, noise=noise, device=self.device, dtype=self.dtype)
        return measure_probs_dm(rho)


__all__ = [
    "zero_dm_state",
    "dm_from_statevector",
    "conjugate_by",
    "apply_unitary_dm",
    "apply_kraus",
    "measure_probs_dm",
    "simulate_circuit_dm",
    "DensityMatrixBackend",
]
