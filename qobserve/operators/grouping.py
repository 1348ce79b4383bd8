"""Grouping of Hamiltonian terms into jointly measurable sets.

Every non-identity term is measured after rotating each of its degrees so
that its Pauli letter becomes Z. Terms whose rotations agree can share one
execution of the kernel; a :class:`MeasurementGroup` records the shared
basis and the terms served by it. Identity terms need no execution and are
returned separately.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple, Union

from .pauli import PauliSum, PauliTerm, as_terms

GROUPING_STRATEGIES = ("basis", "qubitwise", "term")


@dataclass(frozen=True)
class MeasurementGroup:
    """
    A measurement basis and the Hamiltonian terms evaluated from it.

    Attributes:
        basis: Sorted (degree, letter) pairs, one per measured degree, with
            letters in {X, Y, Z}.
        terms: Terms served by this group, in Hamiltonian order.
    """

    basis: Tuple[Tuple[int, str], ...]
    terms: Tuple[PauliTerm, ...]

    @property
    def degrees(self) -> Tuple[int, ...]:
        return tuple(d for d, _ in self.basis)

    @property
    def term_ids(self) -> Tuple[str, ...]:
        """Distinct term ids of this group, first-appearance order."""
        return tuple(dict.fromkeys(t.term_id for t in self.terms))

    @property
    def label(self) -> str:
        return "".join(f"{p}{d}" for d, p in self.basis)


def qubitwise_compatible(a: Dict[int, str], b: Dict[int, str]) -> bool:
    """True if the two bases agree on every degree they share."""
    return all(b.get(d, p) == p for d, p in a.items())


def group_terms(
    hamiltonian: Union[PauliTerm, PauliSum],
    strategy: str = "basis",
) -> Tuple[List[PauliTerm], List[MeasurementGroup]]:
    """
    Split a Hamiltonian into identity terms and measurement groups.

    Strategies:
        - "basis": terms with exactly the same measurement basis share a
          group (e.g. ``z(0)`` and ``from_word("ZI")``, or repeated terms).
        - "qubitwise": greedy first-fit merge of qubit-wise commuting terms;
          one execution then serves, e.g., ``z(0)`` and ``z(1)`` together.
        - "term": one group per distinct term id.

    Group order follows the first appearance of their terms, so the plan is
    deterministic for a given Hamiltonian.

    Returns:
        (identity_terms, groups)

    Raises:
        ValueError: If ``strategy`` is unknown.
    """
    if strategy not in GROUPING_STRATEGIES:
        raise ValueError(
            f"Unknown grouping strategy {strategy!r}. Must be one of {GROUPING_STRATEGIES}"
        )

    identity_terms: List[PauliTerm] = []
    open_groups: List[Tuple[Dict[int, str], List[PauliTerm]]] = []

    for term in as_terms(hamiltonian):
        if term.is_identity():
            identity_terms.append(term)
            continue

        basis = dict(term.measurement_basis())
        for group_basis, group_terms_ in open_groups:
            if strategy == "basis":
                match = group_basis == basis
            elif strategy == "qubitwise":
                match = qubitwise_compatible(basis, group_basis)
            else:
                match = group_terms_[0].term_id == term.term_id
            if match:
                group_basis.update(basis)
                group_terms_.append(term)
                break
        else:
            open_groups.append((basis, [term]))

    groups = [
        MeasurementGroup(basis=tuple(sorted(b.items())), terms=tuple(ts))
        for b, ts in open_groups
    ]
    return identity_terms, groups


__all__ = [
    "GROUPING_STRATEGIES",
    "MeasurementGroup",
    "group_terms",
    "qubitwise_compatible",
]
