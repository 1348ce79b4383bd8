"""Reduction of group evidence to per-term and aggregate expectation values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Union

from ..errors import ShotCountMismatchError
from ..operators.pauli import PauliSum, PauliTerm, as_terms
from ..sampling import GLOBAL_REGISTER_NAME, CountsMap, Evidence
from .driver import GroupResult


def term_expectation(
    evidence: Evidence,
    term: PauliTerm,
    measured_degrees: Sequence[int],
) -> float:
    """
    Unweighted ⟨P⟩ of ``term`` from evidence taken in a basis diagonalizing it.

    ``measured_degrees[k]`` is the degree recorded by bitstring position k.
    The value is ∑ over outcomes of ∏_{d ∈ term} (1 - 2 bit_d) · weight / total,
    the same formula for counts and probabilities. Identity terms give 1.

    Raises:
        ValueError: If a non-identity degree of ``term`` was not measured.
    """
    if term.is_identity():
        return 1.0
    position = {d: k for k, d in enumerate(measured_degrees)}
    missing = [d for d, _ in term.measurement_basis() if d not in position]
    if missing:
        raise ValueError(
            f"Degrees {missing} of term {term.term_id!r} were not measured "
            f"(measured: {tuple(measured_degrees)})"
        )
    return evidence.parity_expectation([position[d] for d, _ in term.measurement_basis()])


@dataclass(frozen=True)
class Reduction:
    """
    Output of :func:`reduce`.

    Attributes:
        value: Real part of ∑ coeff · ⟨term⟩ over the whole Hamiltonian.
        expectations: term_id -> unweighted ⟨term⟩.
        registers: term_id -> evidence marginalized to the term's
            non-identity degrees (ascending). Identity terms have none.
        global_counts: Full-width outcomes of every group (shots mode only).
    """

    value: float
    expectations: Dict[str, float] = field(default_factory=dict)
    registers: Dict[str, Evidence] = field(default_factory=dict)
    global_counts: Optional[CountsMap] = None


def check_shot_totals(registers: Dict[str, Evidence], shots: int) -> None:
    """
    Raises:
        ShotCountMismatchError: If any register does not hold ``shots`` outcomes.
    """
    for name, evidence in registers.items():
        total = evidence.total()
        if total != shots:
            raise ShotCountMismatchError(name, shots, int(total))


def reduce(
    hamiltonian: Union[PauliTerm, PauliSum],
    identity_terms: Sequence[PauliTerm],
    group_results: Sequence[GroupResult],
    shots: Optional[int],
) -> Reduction:
    """
    Combine identity terms and group evidence into a :class:`Reduction`.

    In shots mode every per-term register must sum to ``shots``; the global
    register sums to ``shots * len(group_results)``.
    """
    expectations: Dict[str, float] = {t.term_id: 1.0 for t in identity_terms}
    registers: Dict[str, Evidence] = {}
    global_counts = CountsMap() if shots is not None else None

    for result in sorted(group_results, key=lambda r: r.index):
        evidence = result.evidence
        measured = tuple(range(evidence.n_bits))
        if global_counts is not None:
            global_counts = global_counts.merge(evidence)
        for term in result.group.terms:
            tid = term.term_id
            if tid in registers:
                continue
            registers[tid] = evidence.marginal([d for d, _ in term.measurement_basis()])
            expectations[tid] = term_expectation(evidence, term, measured)

    if shots is not None:
        check_shot_totals(registers, shots)
        expected_global = shots * len(group_results)
        if group_results and global_counts.total() != expected_global:
            raise ShotCountMismatchError(
                GLOBAL_REGISTER_NAME, expected_global, global_counts.total()
            )

    total = sum(term.coeff * expectations[term.term_id] for term in as_terms(hamiltonian))
    return Reduction(
        value=float(complex(total).real),
        expectations=expectations,
        registers=registers,
        global_counts=global_counts,
    )


__all__ = ["term_expectation", "Reduction", "check_shot_totals", "reduce"]
