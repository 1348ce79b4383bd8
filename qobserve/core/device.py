"""Device abstraction for simulation tensors."""

from __future__ import annotations

import os

import torch

_DEVICE_ENV_VAR = "QOBSERVE_DEVICE"


class Device:
    """
    A logical simulation device: an underlying PyTorch device plus the
    dtypes used for amplitudes and probabilities.

    Observe results are compared against fixed tolerances as tight as 1e-6,
    so the default complex dtype is complex128.
    """

    def __init__(
        self,
        name: str,
        torch_device: torch.device,
        dtype: torch.dtype = torch.float64,
        complex_dtype: torch.dtype = torch.complex128,
    ) -> None:
        self.name = name
        self.torch_device = torch_device
        self.dtype = dtype
        self.complex_dtype = complex_dtype

    def __repr__(self) -> str:
        return (
            f"Device(name={self.name!r}, torch_device={self.torch_device}, "
            f"complex_dtype={self.complex_dtype})"
        )

    def as_torch_device(self) -> torch.device:
        """Return the underlying PyTorch device."""
        return self.torch_device


def device(name: str) -> Device:
    """
    Create a Device instance from a device name.

    Supported device names:
        - "cpu": CPU tensors
        - "cuda": CUDA tensors (only if CUDA is available)

    Raises:
        RuntimeError: If "cuda" is requested but CUDA is not available.
        ValueError: If the device name is not supported.
    """
    if name == "cpu":
        return Device(name="cpu", torch_device=torch.device("cpu"))
    if name == "cuda":
        if not torch.cuda.is_available():
            raise RuntimeError(
                "CUDA device requested but torch.cuda.is_available() is False"
            )
        return Device(name="cuda", torch_device=torch.device("cuda"))
    raise ValueError(
        f"Unsupported device name: {name!r}. Supported devices: ['cpu', 'cuda']"
    )


def default_device() -> Device:
    """Return the default device, taken from QOBSERVE_DEVICE (default "cpu")."""
    return device(os.getenv(_DEVICE_ENV_VAR, "cpu"))


def resolve_device(dev: Device | torch.device | str | None) -> Device:
    """Normalize the accepted device spellings into a Device."""
    if dev is None:
        return default_device()
    if isinstance(dev, Device):
        return dev
    if isinstance(dev, str):
        return device(dev)
    if isinstance(dev, torch.device):
        return device(dev.type)
    raise TypeError(
        f"device must be Device, str, torch.device, or None, got {type(dev)}"
    )
