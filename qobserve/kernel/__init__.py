"""Kernels: Python functions traced into gate-level circuits."""

from .core import Kernel, as_kernel, kernel

__all__ = ["Kernel", "kernel", "as_kernel"]
