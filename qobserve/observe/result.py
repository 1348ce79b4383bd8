"""Immutable outcome of an observe call."""

from __future__ import annotations

import sys
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, TextIO, Union

from ..errors import TermNotFoundError
from ..operators.pauli import PauliSum, PauliTerm
from ..sampling import GLOBAL_REGISTER_NAME, CountsMap, Evidence, ProbabilityTable, SampleResult

TermLike = Union[PauliTerm, PauliSum]


def _term_id(term: TermLike) -> str:
    if isinstance(term, PauliTerm):
        return term.term_id
    if isinstance(term, PauliSum):
        if len(term) != 1:
            raise ValueError(
                f"Expected a single-term PauliSum, got {len(term)} terms"
            )
        return term[0].term_id
    raise TypeError(f"Expected PauliTerm or single-term PauliSum, got {type(term)}")


class ObserveResult:
    """
    Aggregate and per-term expectation values of one observe call.

    Terms are looked up structurally by :attr:`PauliTerm.term_id`: the
    coefficient is ignored but the degree context is not, so ``z(0)`` and
    ``from_word("ZI")`` are different terms.

    Example:
        >>> result = observe(ansatz, h, 0.59)
        >>> float(result)
        -1.748...
        >>> result.expectation(spin.z(1))
        0.830...
    """

    def __init__(
        self,
        value: float,
        hamiltonian: TermLike,
        expectations: Mapping[str, float],
        registers: Mapping[str, Evidence],
        shots: Optional[int] = None,
        global_counts: Optional[CountsMap] = None,
        executions: int = 0,
    ) -> None:
        self._value = float(value)
        self._hamiltonian = hamiltonian
        self._expectations = MappingProxyType(dict(expectations))
        self._registers = MappingProxyType(dict(registers))
        self._shots = shots
        self._executions = executions

        sample_registers: Dict[str, CountsMap] = {}
        if shots is not None:
            if global_counts is not None:
                sample_registers[GLOBAL_REGISTER_NAME] = global_counts
            for name, evidence in self._registers.items():
                if isinstance(evidence, CountsMap):
                    sample_registers[name] = evidence
        self._sample_result = SampleResult(sample_registers)

    # Values

    def expectation(self, term: Optional[TermLike] = None) -> float:
        """
        Aggregate value, or the unweighted ⟨term⟩ of a Hamiltonian term.

        Raises:
            TermNotFoundError: If ``term`` is not structurally present.
        """
        if term is None:
            return self._value
        tid = _term_id(term)
        if tid not in self._expectations:
            raise TermNotFoundError(tid)
        return self._expectations[tid]

    def __float__(self) -> float:
        return self._value

    def expectations(self) -> Dict[str, float]:
        """term_id -> unweighted expectation, Hamiltonian order."""
        return dict(self._expectations)

    # Statistics

    def counts(self, term: Optional[TermLike] = None) -> CountsMap:
        """
        Counts register of ``term`` (default: the global register).

        Exact evaluations and identity terms have no counts and return an
        empty :class:`CountsMap`.

        Raises:
            TermNotFoundError: If ``term`` is not structurally present.
        """
        if term is None:
            if self._sample_result.has_register(GLOBAL_REGISTER_NAME):
                return self._sample_result.counts(GLOBAL_REGISTER_NAME)
            return CountsMap()
        tid = _term_id(term)
        if tid not in self._expectations:
            raise TermNotFoundError(tid)
        if self._sample_result.has_register(tid):
            return self._sample_result.counts(tid)
        return CountsMap()

    def probabilities(self, term: TermLike) -> ProbabilityTable:
        """
        Outcome distribution over the term's measured degrees.

        Exact for exact evaluations, empirical frequencies otherwise; empty
        for identity terms.

        Raises:
            TermNotFoundError: If ``term`` is not structurally present.
        """
        tid = _term_id(term)
        if tid not in self._expectations:
            raise TermNotFoundError(tid)
        evidence = self._registers.get(tid)
        if evidence is None or len(evidence) == 0:
            return ProbabilityTable()
        if isinstance(evidence, CountsMap):
            return evidence.probabilities()
        return evidence

    def raw_data(self) -> SampleResult:
        """All counts registers (empty for exact evaluations)."""
        return self._sample_result

    def register_names(self) -> List[str]:
        return self._sample_result.register_names()

    def term_register_names(self) -> List[str]:
        return self._sample_result.term_register_names()

    # Metadata

    def get_spin(self) -> TermLike:
        """The observed Hamiltonian."""
        return self._hamiltonian

    @property
    def shots(self) -> Optional[int]:
        """Shots per measurement group, or None for exact evaluation."""
        return self._shots

    @property
    def is_exact(self) -> bool:
        return self._shots is None

    @property
    def executions(self) -> int:
        """Number of kernel executions (measurement groups) performed."""
        return self._executions

    def dump(self, stream: Optional[TextIO] = None) -> None:
        """Write a human-readable summary."""
        stream = stream or sys.stdout
        mode = "exact" if self.is_exact else f"{self._shots} shots"
        stream.write(f"ObserveResult({mode}, executions={self._executions})\n")
        stream.write(f"  <H> = {self._value:.10g}\n")
        for tid, value in self._expectations.items():
            stream.write(f"  <{tid or 'I'}> = {value:.10g}\n")
        if not self.is_exact:
            self._sample_result.dump(stream)

    def __repr__(self) -> str:
        mode = "exact" if self.is_exact else f"shots={self._shots}"
        return f"ObserveResult(value={self._value:.6g}, {mode}, terms={len(self._expectations)})"


__all__ = ["ObserveResult"]
