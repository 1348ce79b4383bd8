"""Pauli operator primitives for representing Pauli-sum Hamiltonians.

A :class:`PauliTerm` is a coefficient times a product of single-qubit Pauli
operators, stored sparsely as (degree, letter) pairs. A term remembers every
degree it was built over, including degrees that only carry an explicit
identity: ``from_word("ZI")`` acts on degrees {0, 1} while ``z(0)`` acts on
{0}. The two are different operators and never compare equal. Use
:func:`canonicalize` to drop explicit identities.

A :class:`PauliSum` is an ordered list of terms; the arithmetic operators
build sums without merging duplicates until :meth:`PauliSum.simplify` is
called.
"""

from __future__ import annotations

import numbers
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import torch

from ..errors import MalformedObservableError
from ..gates.standard import I, X, Y, Z

_VALID_PAULI_LABELS = ("I", "X", "Y", "Z")

# Single-qubit Pauli products a * b = phase * c for a != b, both non-identity.
_PRODUCT_TABLE: Dict[Tuple[str, str], Tuple[complex, str]] = {
    ("X", "Y"): (1j, "Z"),
    ("Y", "X"): (-1j, "Z"),
    ("Y", "Z"): (1j, "X"),
    ("Z", "Y"): (-1j, "X"),
    ("Z", "X"): (1j, "Y"),
    ("X", "Z"): (-1j, "Y"),
}

_OPS_PATTERN = re.compile(r"([IXYZ])(\d+)")
_OPS_FULL_PATTERN = re.compile(r"^(?:[IXYZ]\d+)+$")

Scalar = Union[int, float, complex]


def _is_scalar(value: object) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def _normalize_letter(letter: object) -> str:
    if not isinstance(letter, str) or letter.upper() not in _VALID_PAULI_LABELS:
        raise MalformedObservableError(
            f"Invalid Pauli label {letter!r}. Must be one of {_VALID_PAULI_LABELS}"
        )
    return letter.upper()


def _multiply_letters(a: str, b: str) -> Tuple[complex, str]:
    if a == "I":
        return 1.0, b
    if b == "I":
        return 1.0, a
    if a == b:
        return 1.0, "I"
    return _PRODUCT_TABLE[(a, b)]


def _format_coeff(coeff: complex) -> str:
    # Adding 0.0 turns -0.0 into 0.0 so negated terms render as "+0j".
    coeff = complex(coeff)
    return repr(complex(coeff.real + 0.0, coeff.imag + 0.0))


@dataclass(frozen=True)
class PauliTerm:
    """
    A single Pauli term: a coefficient times a product of Pauli operators.

    Args:
        coeff: Scalar coefficient, stored as complex.
        ops: (degree, letter) pairs or a degree -> letter mapping. Letters
            are case-insensitive; explicit "I" entries are kept as part of
            the term's degree context.

    Raises:
        MalformedObservableError: For invalid letters, negative or repeated
            degrees.

    Example:
        >>> term = PauliTerm(-2.1433, [(0, "X"), (1, "X")])
        >>> term.term_id
        'X0X1'
        >>> term.degrees()
        (0, 1)
    """

    coeff: complex = 1.0
    ops: Tuple[Tuple[int, str], ...] = ()

    def __post_init__(self) -> None:
        if not _is_scalar(self.coeff):
            raise TypeError(f"coeff must be a number, got {type(self.coeff)}")
        object.__setattr__(self, "coeff", complex(self.coeff))

        raw = self.ops.items() if isinstance(self.ops, Mapping) else self.ops
        seen: Dict[int, str] = {}
        for degree, letter in raw:
            if isinstance(degree, bool) or not isinstance(degree, numbers.Integral):
                raise MalformedObservableError(f"Degree must be an integer, got {degree!r}")
            degree = int(degree)
            if degree < 0:
                raise MalformedObservableError(f"Degree must be non-negative, got {degree}")
            if degree in seen:
                raise MalformedObservableError(f"Degree {degree} appears more than once")
            seen[degree] = _normalize_letter(letter)
        object.__setattr__(self, "ops", tuple(sorted(seen.items())))

    # Construction

    @classmethod
    def from_word(cls, word: str, coeff: Scalar = 1.0) -> "PauliTerm":
        """
        Parse a dense Pauli word such as "XXIIX"; letter k acts on degree k.

        The word length fixes the term's degree context, so identities in the
        word are kept as explicit identity factors.
        """
        if not isinstance(word, str) or len(word) == 0:
            raise MalformedObservableError(f"Pauli word must be a non-empty string, got {word!r}")
        return cls(coeff, tuple(enumerate(word)))

    @classmethod
    def from_string(cls, text: str) -> "PauliTerm":
        """
        Parse the output of :meth:`to_string`, e.g. "(-2.1433+0j) * X0X1".

        A bare coefficient ("(5.907+0j)") gives an identity term and bare
        operators ("Z0I1") get coefficient 1.
        """
        text = text.strip()
        if " * " in text:
            coeff_text, ops_text = text.split(" * ", 1)
            return cls(_parse_coeff(coeff_text), _parse_ops(ops_text))
        try:
            return cls(complex(text), ())
        except ValueError:
            return cls(1.0, _parse_ops(text))

    # Structure

    def degrees(self) -> Tuple[int, ...]:
        """Sorted degrees this term acts on, explicit identities included."""
        return tuple(d for d, _ in self.ops)

    def letter(self, degree: int) -> str:
        """Pauli letter on ``degree``; "I" for degrees outside the term."""
        for d, p in self.ops:
            if d == degree:
                return p
        return "I"

    @property
    def term_id(self) -> str:
        """Coefficient-free structural key, e.g. "X0X1" or "Z0I1"."""
        return "".join(f"{p}{d}" for d, p in self.ops)

    def n_qubits(self) -> int:
        """Highest degree + 1, or 0 for a term acting on nothing."""
        return self.ops[-1][0] + 1 if self.ops else 0

    def is_identity(self) -> bool:
        """True if every letter is "I" (or the term acts on nothing)."""
        return all(p == "I" for _, p in self.ops)

    def canonicalize(self) -> "PauliTerm":
        """Return this term with its identity factors dropped."""
        return PauliTerm(self.coeff, tuple((d, p) for d, p in self.ops if p != "I"))

    def measurement_basis(self) -> Tuple[Tuple[int, str], ...]:
        """(degree, letter) pairs that must be measured, identities excluded."""
        return tuple((d, p) for d, p in self.ops if p != "I")

    # Rendering

    def to_string(self) -> str:
        """Deterministic, degree-ordered rendering that :meth:`from_string` accepts."""
        if not self.ops:
            return _format_coeff(self.coeff)
        return f"{_format_coeff(self.coeff)} * {self.term_id}"

    def get_pauli_word(self, n_qubits: Optional[int] = None) -> str:
        """Dense word over ``n_qubits`` degrees (default: :meth:`n_qubits`)."""
        if n_qubits is None:
            n_qubits = self.n_qubits()
        if n_qubits < self.n_qubits():
            raise MalformedObservableError(
                f"Term {self.term_id!r} does not fit in {n_qubits} qubits"
            )
        letters = ["I"] * n_qubits
        for d, p in self.ops:
            letters[d] = p
        return "".join(letters)

    def __str__(self) -> str:
        return self.to_string()

    def to_matrix(
        self,
        n_qubits: Optional[int] = None,
        dtype: torch.dtype = torch.complex128,
        device: torch.device | None = None,
    ) -> torch.Tensor:
        """Dense matrix of this term; see :meth:`PauliSum.to_matrix`."""
        return PauliSum([self]).to_matrix(n_qubits=n_qubits, dtype=dtype, device=device)

    # Algebra

    def __mul__(self, other: object):
        if _is_scalar(other):
            return PauliTerm(self.coeff * other, self.ops)
        if isinstance(other, PauliTerm):
            merged = dict(self.ops)
            coeff = self.coeff * other.coeff
            for degree, letter in other.ops:
                if degree in merged:
                    phase, merged[degree] = _multiply_letters(merged[degree], letter)
                    coeff *= phase
                else:
                    merged[degree] = letter
            return PauliTerm(coeff, merged)
        if isinstance(other, PauliSum):
            return PauliSum([self * term for term in other.terms])
        return NotImplemented

    def __rmul__(self, other: object):
        if _is_scalar(other):
            return PauliTerm(other * self.coeff, self.ops)
        return NotImplemented

    def __truediv__(self, other: object):
        if _is_scalar(other):
            return PauliTerm(self.coeff / other, self.ops)
        return NotImplemented

    def __neg__(self) -> "PauliTerm":
        return PauliTerm(-self.coeff, self.ops)

    def __add__(self, other: object):
        return PauliSum([self]) + other

    def __radd__(self, other: object):
        if _is_scalar(other):
            return PauliSum([PauliTerm(other), self])
        return NotImplemented

    def __sub__(self, other: object):
        return PauliSum([self]) - other

    def __rsub__(self, other: object):
        if _is_scalar(other):
            return PauliSum([PauliTerm(other), -self])
        return NotImplemented


def _parse_coeff(text: str) -> complex:
    try:
        return complex(text.strip())
    except ValueError as exc:
        raise MalformedObservableError(f"Invalid coefficient {text!r}") from exc


def _parse_ops(text: str) -> Tuple[Tuple[int, str], ...]:
    text = text.strip().upper()
    if not _OPS_FULL_PATTERN.match(text):
        raise MalformedObservableError(f"Invalid Pauli term {text!r}")
    return tuple((int(d), p) for p, d in _OPS_PATTERN.findall(text))


@dataclass
class PauliSum:
    """
    A Pauli-sum Hamiltonian: an ordered list of PauliTerm objects.

    Terms may act on different degrees. Arithmetic never merges duplicates;
    call :meth:`simplify` (or :func:`canonicalize`) for that.

    Example:
        >>> from qobserve import spin
        >>> h = 5.907 - 2.1433 * spin.x(0) * spin.x(1) + 0.21829 * spin.z(0)
        >>> len(h)
        3
        >>> h.n_qubits()
        2
    """

    terms: List[PauliTerm] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.terms = list(self.terms)
        for i, term in enumerate(self.terms):
            if not isinstance(term, PauliTerm):
                raise TypeError(f"Term {i} must be a PauliTerm, got {type(term)}")

    @classmethod
    def from_terms(cls, terms: Iterable[PauliTerm]) -> "PauliSum":
        return cls(terms=list(terms))

    @classmethod
    def from_word(cls, word: str, coeff: Scalar = 1.0) -> "PauliSum":
        return cls([PauliTerm.from_word(word, coeff)])

    def __len__(self) -> int:
        return len(self.terms)

    def __iter__(self) -> Iterator[PauliTerm]:
        return iter(self.terms)

    def __getitem__(self, index: int) -> PauliTerm:
        return self.terms[index]

    def n_qubits(self) -> int:
        """Highest degree acted on + 1, or 0 for an empty or scalar sum."""
        return max((t.n_qubits() for t in self.terms), default=0)

    def degrees(self) -> Tuple[int, ...]:
        """Sorted union of the degrees of all terms."""
        return tuple(sorted({d for t in self.terms for d in t.degrees()}))

    def is_identity(self) -> bool:
        return all(t.is_identity() for t in self.terms)

    def simplify(self, tol: float = 1e-12) -> "PauliSum":
        """
        Merge terms with identical structure and drop those with |coeff| < tol.

        Terms are merged by :attr:`PauliTerm.term_id`, so ``z(0)`` and
        ``z(0) * i(1)`` stay separate. First-appearance order is preserved.
        """
        coeff_map: Dict[Tuple[Tuple[int, str], ...], complex] = {}
        for term in self.terms:
            coeff_map[term.ops] = coeff_map.get(term.ops, 0.0) + term.coeff
        return PauliSum(
            [PauliTerm(c, ops) for ops, c in coeff_map.items() if abs(c) >= tol]
        )

    def canonicalize(self) -> "PauliSum":
        """Drop identity factors from every term and merge equal results."""
        return PauliSum([t.canonicalize() for t in self.terms]).simplify(tol=0.0)

    def to_string(self) -> str:
        return "\n".join(t.to_string() for t in self.terms)

    def __str__(self) -> str:
        return self.to_string()

    # Algebra

    def __add__(self, other: object):
        if isinstance(other, PauliSum):
            return PauliSum(self.terms + other.terms)
        if isinstance(other, PauliTerm):
            return PauliSum(self.terms + [other])
        if _is_scalar(other):
            return PauliSum(self.terms + [PauliTerm(other)])
        return NotImplemented

    def __radd__(self, other: object):
        if _is_scalar(other):
            return PauliSum([PauliTerm(other)] + self.terms)
        return NotImplemented

    def __neg__(self) -> "PauliSum":
        return PauliSum([-t for t in self.terms])

    def __sub__(self, other: object):
        if isinstance(other, (PauliSum, PauliTerm)) or _is_scalar(other):
            return self + (-other)
        return NotImplemented

    def __rsub__(self, other: object):
        if _is_scalar(other):
            return PauliSum([PauliTerm(other)] + (-self).terms)
        return NotImplemented

    def __mul__(self, other: object):
        if _is_scalar(other) or isinstance(other, PauliTerm):
            return PauliSum([t * other for t in self.terms])
        if isinstance(other, PauliSum):
            return PauliSum([a * b for a in self.terms for b in other.terms])
        return NotImplemented

    def __rmul__(self, other: object):
        if _is_scalar(other):
            return PauliSum([other * t for t in self.terms])
        return NotImplemented

    def __truediv__(self, other: object):
        if _is_scalar(other):
            return PauliSum([t / other for t in self.terms])
        return NotImplemented

    def to_matrix(
        self,
        n_qubits: Optional[int] = None,
        dtype: torch.dtype = torch.complex128,
        device: torch.device | None = None,
    ) -> torch.Tensor:
        """
        Dense 2ⁿ×2ⁿ matrix of this sum.

        Qubit 0 is the least significant bit of the basis index, so each term
        is built as P_{n-1} ⊗ ... ⊗ P_0. Intended for small systems and tests.

        Raises:
            ValueError: If the sum acts on no qubits or on more than 10.
        """
        if device is None:
            device = torch.device("cpu")
        if n_qubits is None:
            n_qubits = self.n_qubits()
        if n_qubits == 0:
            raise ValueError("Cannot compute matrix for a PauliSum acting on no qubits")
        if n_qubits > 10:
            raise ValueError(
                f"to_matrix() is only intended for small systems (n ≤ 10), got {n_qubits}"
            )
        if n_qubits < self.n_qubits():
            raise ValueError(
                f"PauliSum acts on {self.n_qubits()} qubits, cannot embed in {n_qubits}"
            )

        pauli_matrices = {
            "I": I(dtype=dtype, device=device),
            "X": X(dtype=dtype, device=device),
            "Y": Y(dtype=dtype, device=device),
            "Z": Z(dtype=dtype, device=device),
        }
        dim = 2**n_qubits
        matrix = torch.zeros((dim, dim), dtype=dtype, device=device)
        for term in self.terms:
            word = term.get_pauli_word(n_qubits)
            term_matrix = pauli_matrices[word[n_qubits - 1]]
            for q in range(n_qubits - 2, -1, -1):
                term_matrix = torch.kron(term_matrix, pauli_matrices[word[q]])
            matrix = matrix + term.coeff * term_matrix
        return matrix


def canonicalize(op: Union[PauliTerm, PauliSum]) -> Union[PauliTerm, PauliSum]:
    """Return ``op`` with identity factors removed from every term."""
    if isinstance(op, (PauliTerm, PauliSum)):
        return op.canonicalize()
    raise TypeError(f"Cannot canonicalize {type(op)}")


def from_word(word: str) -> PauliTerm:
    """Build a term from a dense Pauli word over {I, X, Y, Z} (any case)."""
    return PauliTerm.from_word(word)


def as_terms(op: Union[PauliTerm, PauliSum]) -> List[PauliTerm]:
    """Terms of a term-or-sum, in order."""
    if isinstance(op, PauliTerm):
        return [op]
    if isinstance(op, PauliSum):
        return list(op.terms)
    raise TypeError(f"Expected PauliTerm or PauliSum, got {type(op)}")


__all__ = [
    "PauliTerm",
    "PauliSum",
    "canonicalize",
    "from_word",
    "as_terms",
]
