"""Per-call observe settings."""

from __future__ import annotations

import numbers
import threading
from dataclasses import dataclass
from typing import Optional

from ..noise import NoiseModel
from ..operators.grouping import GROUPING_STRATEGIES


def is_count(value: object) -> bool:
    """True for integers, numpy integers included, but not bools."""
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


class CancellationToken:
    """
    Thread-safe flag a caller sets to abandon an observe call.

    The driver checks the token before each group execution; a cancelled
    call raises :class:`~qobserve.errors.ObserveCancelledError` and keeps
    no partial result.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"


@dataclass(frozen=True)
class ObserveOptions:
    """
    Options for a single observe call.

    Attributes:
        shots: Shots per measurement group. ``None`` or 0 selects exact
            (analytic) evaluation.
        noise: Noise model applied by noise-capable backends.
        seed: Seed for sampling. ``None`` falls back to
            :func:`qobserve.config.set_random_seed`, then to OS entropy.
        grouping: Term grouping strategy, one of
            :data:`~qobserve.operators.grouping.GROUPING_STRATEGIES`.
        backend: Backend name; ``None`` uses the current target.
        max_workers: Run up to this many groups concurrently. ``None`` or 1
            executes serially.
        cancel_token: Optional :class:`CancellationToken`.
    """

    shots: Optional[int] = None
    noise: Optional[NoiseModel] = None
    seed: Optional[int] = None
    grouping: str = "basis"
    backend: Optional[str] = None
    max_workers: Optional[int] = None
    cancel_token: Optional[CancellationToken] = None

    def __post_init__(self) -> None:
        if self.shots is not None:
            if not is_count(self.shots):
                raise TypeError(f"shots must be an int or None, got {type(self.shots)}")
            object.__setattr__(self, "shots", int(self.shots))
            if self.shots < 0:
                raise ValueError(f"shots must be non-negative, got {self.shots}")
            if self.shots == 0:
                object.__setattr__(self, "shots", None)
        if self.noise is not None and not isinstance(self.noise, NoiseModel):
            raise TypeError(f"noise must be a NoiseModel, got {type(self.noise)}")
        if self.seed is not None:
            if not is_count(self.seed):
                raise TypeError(f"seed must be an int or None, got {type(self.seed)}")
            if self.seed < 0:
                raise ValueError(f"seed must be a non-negative int, got {self.seed!r}")
            object.__setattr__(self, "seed", int(self.seed))
        if self.grouping not in GROUPING_STRATEGIES:
            raise ValueError(
                f"Unknown grouping strategy {self.grouping!r}. "
                f"Must be one of {GROUPING_STRATEGIES}"
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")

    @property
    def is_exact(self) -> bool:
        return self.shots is None


__all__ = ["CancellationToken", "ObserveOptions"]
