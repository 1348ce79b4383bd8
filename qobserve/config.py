"""Process-wide defaults.

Per-call settings belong in :class:`~qobserve.observe.ObserveOptions`; the
values here only fill in what a call leaves unset.

Environment variables:
    QOBSERVE_TARGET: default backend name (default "statevector").
    QOBSERVE_DEVICE: default torch device, see :mod:`qobserve.core.device`.
    QOBSERVE_DEBUG: "1" enables the backend sanity checks of :mod:`qobserve.diagnostics`.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator, Optional

_TARGET_ENV_VAR = "QOBSERVE_TARGET"
_DEBUG_ENV_VAR = "QOBSERVE_DEBUG"
_DEFAULT_TARGET = "statevector"

_target: str = os.getenv(_TARGET_ENV_VAR, _DEFAULT_TARGET)
_random_seed: Optional[int] = None
_debug: bool = os.getenv(_DEBUG_ENV_VAR, "0").lower() in ("1", "true", "yes", "on")


def default_target() -> str:
    """Name of the backend used when a call does not choose one."""
    return _target


def set_default_target(name: str) -> None:
    global _target
    _target = name


def set_random_seed(seed: Optional[int]) -> None:
    """
    Set the seed used by observe calls that do not pass one.

    ``None`` restores fresh OS entropy per call.

    Raises:
        ValueError: If ``seed`` is negative.
    """
    global _random_seed
    if seed is not None:
        seed = int(seed)
        if seed < 0:
            raise ValueError(f"seed must be non-negative, got {seed}")
    _random_seed = seed


def get_random_seed() -> Optional[int]:
    return _random_seed


def is_debug_enabled() -> bool:
    """True while backends verify norm and trace after every gate."""
    return _debug


def set_debug_enabled(enabled: bool) -> None:
    global _debug
    _debug = bool(enabled)


@contextmanager
def debug_context(enabled: bool = True) -> Iterator[None]:
    """
    Temporarily switch debug checks on (or off).

    Example:
        >>> with debug_context():
        ...     result = observe(ansatz, h, 0.59)
    """
    global _debug
    previous = _debug
    _debug = bool(enabled)
    try:
        yield
    finally:
        _debug = previous


__all__ = [
    "default_target",
    "set_default_target",
    "set_random_seed",
    "get_random_seed",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
]
