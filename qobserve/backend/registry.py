"""Backend lookup by name."""

from __future__ import annotations

from typing import Dict, List, Optional, Type

import torch

from .. import config
from ..core.device import Device
from .base import ExecutionBackend
from .density_matrix import DensityMatrixBackend
from .statevector import StatevectorBackend

_BACKENDS: Dict[str, Type[ExecutionBackend]] = {
    StatevectorBackend.name: StatevectorBackend,
    DensityMatrixBackend.name: DensityMatrixBackend,
}


def available_backends() -> List[str]:
    return sorted(_BACKENDS)


def register_backend(name: str, backend_cls: Type[ExecutionBackend]) -> None:
    """Make ``backend_cls`` available under ``name``."""
    if not (isinstance(backend_cls, type) and issubclass(backend_cls, ExecutionBackend)):
        raise TypeError(f"backend_cls must subclass ExecutionBackend, got {backend_cls!r}")
    _BACKENDS[name] = backend_cls


def get_backend(
    name: Optional[str] = None,
    device: Device | torch.device | str | None = None,
    dtype: Optional[torch.dtype] = None,
) -> ExecutionBackend:
    """
    Instantiate the backend registered under ``name`` (default: current target).

    Raises:
        ValueError: For unknown names.
    """
    name = name or config.default_target()
    if name not in _BACKENDS:
        raise ValueError(
            f"Unknown backend {name!r}. Available backends: {available_backends()}"
        )
    return _BACKENDS[name](device=device, dtype=dtype)


def set_target(name: str) -> None:
    """Select the default backend for subsequent observe calls."""
    if name not in _BACKENDS:
        raise ValueError(
            f"Unknown backend {name!r}. Available backends: {available_backends()}"
        )
    config.set_default_target(name)


def get_target() -> str:
    return config.default_target()


__all__ = [
    "available_backends",
    "register_backend",
    "get_backend",
    "set_target",
    "get_target",
]
