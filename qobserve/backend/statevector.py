"""Statevector backend for pure quantum states.

Convention: qubit 0 is the least significant bit of the computational basis
index. A state of shape (..., 2**n) is viewed as (batch, 2, ..., 2) where the
axis of qubit q is ``n - q`` (axis 0 is the flattened batch).

Every gate routine acts on the last dimension only, so the density-matrix
backend reuses them on the rows and columns of ρ.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

import torch

from ..circuit import GateOp, QuantumCircuit
from ..core.device import Device, resolve_device
from ..diagnostics import assert_normalized, is_debug_enabled
from ..gates.standard import X, Y, Z, gate_matrix
from ..logging import get_logger
from .base import ExecutionBackend

logger = get_logger(__name__)

_PAULI_MATRICES = {"X": X, "Y": Y, "Z": Z}


def _num_qubits(state: torch.Tensor, n_qubits: Optional[int]) -> int:
    dim = state.shape[-1]
    if n_qubits is None:
        n_qubits = int(math.log2(dim))
        if 2**n_qubits != dim:
            raise ValueError(
                f"state dimension {dim} is not a power of 2. "
                "Please specify n_qubits explicitly."
            )
    elif 2**n_qubits != dim:
        raise ValueError(
            f"state dimension {dim} does not match 2**n_qubits = {2**n_qubits}"
        )
    return n_qubits


def _axis(qubit: int, n_qubits: int) -> int:
    return n_qubits - qubit


def _contract(tensor: torch.Tensor, gate: torch.Tensor, axes: Sequence[int]) -> torch.Tensor:
    """Apply ``gate`` to the given axes; the first axis is the gate's most significant bit."""
    k = len(axes)
    nd = tensor.dim()
    dest = list(range(nd - k, nd))
    moved = torch.movedim(tensor, list(axes), dest)
    shape = tuple(moved.shape)
    out = moved.reshape(shape[:-k] + (2**k,)) @ gate.transpose(0, 1)
    return torch.movedim(out.reshape(shape), dest, list(axes))


def zero_state(
    n_qubits: int,
    device: Device | torch.device | str | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    """
    Create |0...0⟩ on ``n_qubits`` qubits as a tensor of shape (2**n_qubits,).

    Raises:
        ValueError: If n_qubits < 1.
    """
    if n_qubits < 1:
        raise ValueError(f"n_qubits must be >= 1, got {n_qubits}")
    qdevice = resolve_device(device)
    state = torch.zeros(
        2**n_qubits,
        dtype=dtype or qdevice.complex_dtype,
        device=qdevice.as_torch_device(),
    )
    state[0] = 1.0
    return state


def apply_gate(
    state: torch.Tensor,
    gate: torch.Tensor,
    targets: int | Sequence[int],
    controls: Sequence[int] = (),
    n_qubits: int | None = None,
) -> torch.Tensor:
    """
    Apply a (2**k, 2**k) matrix to ``targets``, conditioned on ``controls``.

    The first target is the most significant bit of the gate's row index,
    so ``torch.kron(A, B)`` applied to (q1, q2) puts A on q1. The gate only
    acts on the subspace where every control qubit is |1⟩.

    Args:
        state: Complex tensor of shape (..., 2**n_qubits).
        gate: Gate matrix.
        targets: Target qubit or qubits.
        controls: Control qubits, disjoint from the targets.
        n_qubits: Number of qubits. If None, inferred from state.shape[-1].

    Returns:
        A new tensor of the same shape as ``state``.

    Raises:
        ValueError: On shape mismatches or invalid qubit indices.
    """
    if not torch.is_complex(state):
        raise ValueError(f"state must be complex dtype, got {state.dtype}")
    n = _num_qubits(state, n_qubits)
    targets = (targets,) if isinstance(targets, int) else tuple(targets)
    controls = tuple(controls)
    k = len(targets)
    if k == 0 or gate.shape != (2**k, 2**k):
        raise ValueError(
            f"gate of shape {tuple(gate.shape)} does not act on targets {targets}"
        )
    touched = targets + controls
    for q in touched:
        if q < 0 or q >= n:
            raise ValueError(f"qubit index {q} out of range [0, {n})")
    if len(set(touched)) != len(touched):
        raise ValueError(f"targets {targets} and controls {controls} overlap")

    gate = gate.to(dtype=state.dtype, device=state.device)
    psi = state.reshape((-1,) + (2,) * n)

    if not controls:
        psi = _contract(psi, gate, [_axis(t, n) for t in targets])
        return psi.reshape(state.shape)

    psi = psi.clone()
    control_axes = {_axis(c, n) for c in controls}
    index = tuple(1 if a in control_axes else slice(None) for a in range(n + 1))
    remaining = [a for a in range(n + 1) if a not in control_axes]
    block_axes = [remaining.index(_axis(t, n)) for t in targets]
    psi[index] = _contract(psi[index], gate, block_axes)
    return psi.reshape(state.shape)


def apply_pauli_word(
    state: torch.Tensor,
    qubits: Sequence[int],
    word: str,
    n_qubits: int | None = None,
) -> torch.Tensor:
    """Apply the Pauli product described by ``word`` over ``qubits``."""
    out = state
    for q, letter in zip(qubits, word):
        if letter == "I":
            continue
        pauli = _PAULI_MATRICES[letter](dtype=state.dtype, device=state.device)
        out = apply_gate(out, pauli, q, n_qubits=n_qubits)
    return out


def apply_exp_pauli(
    state: torch.Tensor,
    theta: float,
    qubits: Sequence[int],
    word: str,
    n_qubits: int | None = None,
) -> torch.Tensor:
    """
    Apply exp(iθP) for the Pauli product P = ``word`` laid over ``qubits``.

    Since P² = I, exp(iθP)|ψ⟩ = cos θ |ψ⟩ + i sin θ P|ψ⟩.
    """
    if len(word) != len(qubits):
        raise ValueError(
            f"Pauli word {word!r} has {len(word)} letters for {len(qubits)} qubits."
        )
    flipped = apply_pauli_word(state, qubits, word, n_qubits=n_qubits)
    return math.cos(theta) * state + 1j * math.sin(theta) * flipped


def apply_op(state: torch.Tensor, op: GateOp, n_qubits: int) -> torch.Tensor:
    """Apply one recorded circuit operation to the last dimension of ``state``."""
    if op.name == "exp_pauli":
        if op.controls:
            raise ValueError("exp_pauli does not support control qubits.")
        return apply_exp_pauli(state, op.params[0], op.targets, op.word, n_qubits=n_qubits)
    gate = gate_matrix(op.name, op.params, dtype=state.dtype, device=state.device)
    return apply_gate(state, gate, op.targets, op.controls, n_qubits=n_qubits)


def measure_probs(state: torch.Tensor, n_qubits: int | None = None) -> torch.Tensor:
    """
    Born-rule probabilities |⟨i|ψ⟩|² over the computational basis.

    Returns a real tensor of the same shape as ``state``, renormalized to
    absorb floating-point drift.
    """
    if not torch.is_complex(state):
        raise ValueError(f"state must be complex dtype, got {state.dtype}")
    _num_qubits(state, n_qubits)
    probs = torch.abs(state) ** 2
    return probs / torch.clamp(probs.sum(dim=-1, keepdim=True), min=1e-12)


def simulate_circuit(
    circuit: QuantumCircuit,
    device: Device | torch.device | str | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    """Run ``circuit`` from |0...0⟩ and return the final statevector."""
    n = circuit.n_qubits
    state = zero_state(n, device=device, dtype=dtype)
    for op in circuit.ops:
        state = apply_op(state, op, n)
        if is_debug_enabled():
            assert_normalized(state, atol=1e-4)
    return state


class StatevectorBackend(ExecutionBackend):
    """
    Noise-free pure-state simulation.

    Supports exact and sampled execution; a noise model passed here is not
    applied (the caller is warned by the driver).
    """

    name = "statevector"
    supports_exact = True
    supports_shots = True
    supports_noise = False

    def probabilities(self, circuit, noise=None) -> torch.Tensor:
        logger.debug(
            "statevector: simulating %d ops on %d qubits", len(circuit), circuit.n_qubits
        )
        state = simulate_circuit(circuit, device=self.device, dtype=self.dtype)
        return measure_probs(state, circuit.n_qubits)


__all__ = [
    "zero_state",
    "apply_gate",
    "apply_pauli_word",
    "apply_exp_pauli",
    "apply_op",
    "measure_probs",
    "simulate_circuit",
    "StatevectorBackend",
]
