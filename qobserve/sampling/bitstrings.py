"""Bitstring sampling from computational-basis probability vectors."""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

import torch

from .counts import CountsMap, ProbabilityTable


def _resolve_qubits(n_qubits: int, qubits: Optional[Sequence[int]]) -> Tuple[int, ...]:
    if qubits is None:
        return tuple(range(n_qubits))
    qubits_tuple = tuple(int(q) for q in qubits)
    for q in qubits_tuple:
        if q < 0 or q >= n_qubits:
            raise ValueError(
                f"Requested qubit index {q} is out of bounds for n_qubits={n_qubits}."
            )
    return qubits_tuple


def _check_probs(probs: torch.Tensor, n_qubits: int) -> torch.Tensor:
    if probs.dim() != 1:
        raise ValueError(f"probs must be 1D, got shape {tuple(probs.shape)}")
    dim = probs.shape[-1]
    if dim != 2 ** n_qubits:
        raise ValueError(
            f"probs last dimension {dim} does not match 2**n_qubits={2**n_qubits}."
        )
    total = probs.sum()
    if not total > 0:
        raise ValueError("Probability distribution has zero total mass.")
    return probs / total


def index_to_bitstring(index: int, qubits: Sequence[int]) -> str:
    """Bits of ``index`` at ``qubits`` (qubit 0 is the least significant bit)."""
    return "".join("1" if (index >> q) & 1 else "0" for q in qubits)


def sample_counts(
    probs: torch.Tensor,
    n_qubits: int,
    n_shots: int,
    qubits: Optional[Sequence[int]] = None,
    generator: Optional[torch.Generator] = None,
) -> CountsMap:
    """
    Draw ``n_shots`` outcomes and histogram them as a :class:`CountsMap`.

    Bitstrings list the bits of ``qubits`` (default: all qubits, ascending).
    The counts always sum to ``n_shots``.
    """
    if n_shots <= 0:
        raise ValueError("n_shots must be a positive integer.")
    qubits_tuple = _resolve_qubits(n_qubits, qubits)
    probs_norm = _check_probs(probs, n_qubits)
    indices = torch.multinomial(
        probs_norm.to(torch.float64),
        num_samples=n_shots,
        replacement=True,
        generator=generator,
    )
    hist = torch.bincount(indices, minlength=probs.shape[-1])
    out: Dict[str, int] = {}
    for index in torch.nonzero(hist).flatten().tolist():
        key = index_to_bitstring(index, qubits_tuple)
        out[key] = out.get(key, 0) + int(hist[index])
    return CountsMap(out)


def probability_table(
    probs: torch.Tensor,
    n_qubits: int,
    qubits: Optional[Sequence[int]] = None,
    cutoff: float = 1e-15,
) -> ProbabilityTable:
    """
    Exact outcome distribution over ``qubits`` as a :class:`ProbabilityTable`.

    Outcomes with probability at or below ``cutoff`` are omitted.
    """
    qubits_tuple = _resolve_qubits(n_qubits, qubits)
    probs_norm = _check_probs(probs, n_qubits)
    out: Dict[str, float] = {}
    for index, p in enumerate(probs_norm.tolist()):
        if p <= cutoff:
            continue
        key = index_to_bitstring(index, qubits_tuple)
        out[key] = out.get(key, 0.0) + p
    return ProbabilityTable(out)


__all__ = [
    "index_to_bitstring",
    "sample_counts",
    "probability_table",
]
