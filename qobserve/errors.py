"""Exception and warning types raised by qobserve."""

from __future__ import annotations


class MalformedObservableError(ValueError):
    """A Pauli word or term is invalid for the requested operation.

    Raised for letters outside {I, X, Y, Z}, negative degrees, or degrees
    that exceed the qubit count of the kernel being observed.
    """


class ShotCountMismatchError(RuntimeError):
    """Aggregated register counts do not sum to the requested shot count."""

    def __init__(self, register: str, expected: int, actual: int) -> None:
        self.register = register
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Register {register!r} holds {actual} shots, expected {expected}."
        )


class TermNotFoundError(KeyError):
    """A term was requested that is not part of the observed Hamiltonian."""

    def __init__(self, term_id: str) -> None:
        self.term_id = term_id
        super().__init__(term_id)

    def __str__(self) -> str:
        return (
            f"Term {self.term_id!r} is not present in the observed Hamiltonian. "
            "Terms only match when they act on exactly the same degrees."
        )


class KernelArgumentError(TypeError):
    """Kernel parameters could not be bound to the kernel signature."""


class ObserveCancelledError(RuntimeError):
    """The caller cancelled an observe call; no partial result exists."""


class NoiseUnsupportedWarning(UserWarning):
    """A supplied noise model was not applied during execution."""


__all__ = [
    "MalformedObservableError",
    "ShotCountMismatchError",
    "TermNotFoundError",
    "KernelArgumentError",
    "ObserveCancelledError",
    "NoiseUnsupportedWarning",
]
