"""Capability-described execution backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Tuple

import torch

from ..circuit import QuantumCircuit
from ..core.device import Device, resolve_device
from ..diagnostics import assert_probability_vector, is_debug_enabled
from ..noise import NoiseModel
from ..sampling import Evidence, probability_table, sample_counts


class ExecutionBackend(ABC):
    """
    Executes a circuit under a measurement basis and returns outcome evidence.

    Callers dispatch on the capability flags, never on the concrete class:

    - ``supports_exact``: :meth:`execute` accepts ``shots=None``.
    - ``supports_shots``: :meth:`execute` accepts a positive shot count.
    - ``supports_noise``: a :class:`~qobserve.noise.NoiseModel` is applied.

    Subclasses implement :meth:`probabilities`; sampling and basis rotation
    are shared.
    """

    name: str = "base"
    supports_exact: bool = True
    supports_shots: bool = True
    supports_noise: bool = False

    def __init__(
        self,
        device: Device | torch.device | str | None = None,
        dtype: Optional[torch.dtype] = None,
    ) -> None:
        self.device = resolve_device(device)
        self.dtype = dtype or self.device.complex_dtype

    @abstractmethod
    def probabilities(
        self,
        circuit: QuantumCircuit,
        noise: Optional[NoiseModel] = None,
    ) -> torch.Tensor:
        """Final computational-basis distribution of ``circuit``, shape (2**n,)."""

    def execute(
        self,
        circuit: QuantumCircuit,
        basis: Iterable[Tuple[int, str]] = (),
        shots: Optional[int] = None,
        noise: Optional[NoiseModel] = None,
        generator: Optional[torch.Generator] = None,
    ) -> Evidence:
        """
        Rotate ``circuit`` into ``basis``, run it, and report outcomes.

        Bitstrings are full width (every qubit, lowest degree first). With
        ``shots`` None the result is a :class:`~qobserve.sampling.ProbabilityTable`;
        otherwise a :class:`~qobserve.sampling.CountsMap` summing to ``shots``.

        Raises:
            ValueError: If the requested mode is not supported, or the circuit
                has no qubits.
        """
        if circuit.n_qubits < 1:
            raise ValueError("Cannot execute a circuit without qubits.")
        if shots is None and not self.supports_exact:
            raise ValueError(f"Backend {self.name!r} does not support exact execution.")
        if shots is not None and not self.supports_shots:
            raise ValueError(f"Backend {self.name!r} does not support sampling.")

        rotated = circuit.append_basis_change(basis)
        probs = self.probabilities(rotated, noise if self.supports_noise else None)
        if is_debug_enabled():
            assert_probability_vector(probs, atol=1e-4)
        if shots is None:
            return probability_table(probs, rotated.n_qubits)
        return sample_counts(probs, rotated.n_qubits, shots, generator=generator)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(device={self.device.name!r}, dtype={self.dtype})"


__all__ = ["ExecutionBackend"]
