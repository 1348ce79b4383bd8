"""Sanity checks for simulated states."""

from __future__ import annotations

import torch


def state_norm(state: torch.Tensor) -> torch.Tensor:
    """Return the L2 norm of each statevector in a ``(..., dim)`` batch."""
    if state.dim() < 1:
        raise ValueError("state_norm expects a tensor with at least 1 dimension.")
    return torch.linalg.vector_norm(state, dim=-1)


def assert_normalized(state: torch.Tensor, atol: float = 1e-6) -> None:
    """Raise ValueError unless every statevector in the batch has unit norm."""
    norms = state_norm(state)
    deviation = (norms - 1.0).abs()
    if not torch.all(torch.isfinite(deviation)) or torch.any(deviation > atol):
        raise ValueError(
            f"State is not normalized within {atol}: norms {norms.detach().cpu().tolist()}"
        )


def is_hermitian(mat: torch.Tensor, atol: float = 1e-6) -> bool:
    """Check whether a matrix (or batch of matrices) is Hermitian."""
    if mat.dim() < 2 or mat.shape[-1] != mat.shape[-2]:
        return False

    max_dev = (mat - mat.conj().transpose(-2, -1)).abs().max()
    if not torch.isfinite(max_dev):
        return False
    return bool(max_dev <= atol)


def assert_density_matrix(rho: torch.Tensor, atol: float = 1e-6) -> None:
    """
    Assert that rho is Hermitian with unit trace.

    Raises
    ------
    ValueError
        If either property is violated within the tolerance.
    """
    if not is_hermitian(rho, atol=atol):
        raise ValueError(f"Density matrix is not Hermitian within tolerance {atol}.")

    trace = rho.diagonal(dim1=-2, dim2=-1).sum(dim=-1).real
    if not torch.allclose(trace, torch.ones_like(trace), atol=atol, rtol=0.0):
        raise ValueError(
            f"Density matrix trace is not 1 within tolerance {atol}. "
            f"Trace found: {trace.detach().cpu().tolist()}"
        )


def assert_probability_vector(probs: torch.Tensor, atol: float = 1e-6) -> None:
    """
    Assert that a backend distribution is non-negative and sums to 1.

    Raises
    ------
    ValueError
        On negative entries or a total off by more than ``atol``.
    """
    if torch.any(probs < -atol):
        raise ValueError(f"Distribution has negative entries (min {probs.min().item()}).")
    total = probs.sum(dim=-1)
    if not torch.allclose(total, torch.ones_like(total), atol=atol, rtol=0.0):
        raise ValueError(f"Distribution sums to {total.detach().cpu().tolist()}, expected 1.")
