"""Outcome statistics: counts, probability tables and named registers.

Bitstrings list one character per measured qubit, lowest degree first. A
:class:`CountsMap` (sampled shots) and a :class:`ProbabilityTable` (exact
execution) are both :class:`Evidence`: a weighted distribution over
bitstrings that the aggregator reduces with a single parity formula.
"""

from __future__ import annotations

import sys
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, TextIO, TypeVar

GLOBAL_REGISTER_NAME = "__global__"

_E = TypeVar("_E", bound="Evidence")


def _check_bitstring(key: object, n_bits: Optional[int]) -> int:
    if not isinstance(key, str) or (key and set(key) - {"0", "1"}):
        raise ValueError(f"Bitstring keys must be strings over {{0, 1}}, got {key!r}")
    if n_bits is not None and len(key) != n_bits:
        raise ValueError(
            f"Bitstring {key!r} has length {len(key)}, expected {n_bits}"
        )
    return len(key)


class Evidence(Mapping[str, float]):
    """
    Read-only weighted distribution over fixed-length bitstrings.

    Iteration is in sorted bitstring order so renderings and reductions are
    deterministic.
    """

    def __init__(self, weights: Optional[Mapping[str, float]] = None) -> None:
        data: Dict[str, float] = {}
        n_bits: Optional[int] = None
        for key, value in (weights or {}).items():
            n_bits = _check_bitstring(key, n_bits)
            value = self._coerce(value)
            if value < 0:
                raise ValueError(f"Weight for {key!r} must be non-negative, got {value}")
            data[key] = data.get(key, 0) + value
        self._data = dict(sorted(data.items()))
        self._n_bits = n_bits or 0

    @staticmethod
    def _coerce(value: object) -> float:
        return float(value)

    def __getitem__(self, key: str) -> float:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    @property
    def n_bits(self) -> int:
        """Bitstring length (0 for an empty distribution)."""
        return self._n_bits

    def size(self) -> int:
        """Number of distinct bitstrings observed."""
        return len(self._data)

    def total(self) -> float:
        return sum(self._data.values())

    def to_dict(self) -> Dict[str, float]:
        return dict(self._data)

    def probability(self, bitstring: str) -> float:
        total = self.total()
        if total <= 0:
            raise ValueError("Distribution has zero total weight.")
        return self._data.get(bitstring, 0) / total

    def marginal(self: _E, positions: Sequence[int]) -> _E:
        """
        Keep only the bits at ``positions`` (indices into the bitstring),
        summing the weights of bitstrings that become equal.
        """
        positions = tuple(positions)
        for p in positions:
            if p < 0 or p >= self._n_bits:
                raise ValueError(
                    f"Position {p} is out of range for {self._n_bits}-bit strings"
                )
        out: Dict[str, float] = {}
        for key, value in self._data.items():
            sub = "".join(key[p] for p in positions)
            out[sub] = out.get(sub, 0) + value
        return type(self)(out)

    def parity_expectation(self, positions: Optional[Sequence[int]] = None) -> float:
        """
        Signed average of (-1)^(parity of the bits at ``positions``).

        Each bitstring contributes prod(1 - 2 * bit) * weight / total. With
        ``positions`` None every bit is included.

        Raises:
            ValueError: If the distribution has zero total weight.
        """
        total = self.total()
        if total <= 0:
            raise ValueError("Cannot reduce a distribution with zero total weight.")
        if positions is None:
            positions = range(self._n_bits)
        positions = tuple(positions)
        acc = 0.0
        for key, value in self._data.items():
            parity = sum(key[p] == "1" for p in positions) % 2
            acc += -value if parity else value
        return acc / total

    def dump(self, stream: Optional[TextIO] = None) -> None:
        """Write one ``bitstring: weight`` line per entry."""
        stream = stream or sys.stdout
        stream.write("{ ")
        stream.write(" ".join(f"{k}:{v}" for k, v in self._data.items()))
        stream.write(" }\n")


class CountsMap(Evidence):
    """Bitstring -> number of shots. Weights are non-negative integers."""

    @staticmethod
    def _coerce(value: object) -> int:
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"Counts must be integers, got {value}")
        return int(value)

    def total(self) -> int:
        return int(sum(self._data.values()))

    def merge(self, other: "CountsMap") -> "CountsMap":
        """Counts of both maps added together."""
        merged = dict(self._data)
        for key, value in other.items():
            merged[key] = merged.get(key, 0) + value
        return CountsMap(merged)

    def probabilities(self) -> "ProbabilityTable":
        total = self.total()
        if total <= 0:
            raise ValueError("Total count must be positive.")
        return ProbabilityTable({k: v / total for k, v in self._data.items()})


class ProbabilityTable(Evidence):
    """Bitstring -> probability from an exact (analytic) execution."""


class SampleResult:
    """
    Named registers of counts.

    Per-term registers are named after the term id; the register named
    :data:`GLOBAL_REGISTER_NAME` holds full-width outcomes of every
    execution and is skipped by :meth:`term_register_names`.
    """

    def __init__(self, registers: Optional[Mapping[str, CountsMap]] = None) -> None:
        self._registers: Dict[str, CountsMap] = {}
        for name, counts in (registers or {}).items():
            self._registers[name] = counts if isinstance(counts, CountsMap) else CountsMap(counts)

    def register_names(self) -> List[str]:
        return list(self._registers)

    def term_register_names(self) -> List[str]:
        return [name for name in self._registers if name != GLOBAL_REGISTER_NAME]

    def has_register(self, name: str) -> bool:
        return name in self._registers

    def __contains__(self, name: object) -> bool:
        return name in self._registers

    def __len__(self) -> int:
        return len(self._registers)

    def counts(self, name: str = GLOBAL_REGISTER_NAME) -> CountsMap:
        """Counts of register ``name``; unknown names raise KeyError."""
        if name not in self._registers:
            raise KeyError(f"No register named {name!r}")
        return self._registers[name]

    def to_map(self, name: str = GLOBAL_REGISTER_NAME) -> Dict[str, int]:
        return self.counts(name).to_dict()

    def items(self):
        return self._registers.items()

    def dump(self, stream: Optional[TextIO] = None) -> None:
        stream = stream or sys.stdout
        for name, counts in self._registers.items():
            stream.write(f"{name} : ")
            counts.dump(stream)


__all__ = [
    "GLOBAL_REGISTER_NAME",
    "Evidence",
    "CountsMap",
    "ProbabilityTable",
    "SampleResult",
]
