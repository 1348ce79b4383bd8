"""Execution driver: one backend execution per measurement group."""

from __future__ import annotations

import warnings
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import torch

from ..backend import ExecutionBackend, available_backends, get_backend, get_target
from ..circuit import QuantumCircuit
from ..errors import NoiseUnsupportedWarning, ObserveCancelledError
from ..logging import get_logger
from ..noise import NoiseModel
from ..operators.grouping import MeasurementGroup
from ..sampling import Evidence
from .options import CancellationToken

logger = get_logger(__name__)


@dataclass(frozen=True)
class GroupResult:
    """Full-width evidence produced by executing one measurement group."""

    index: int
    group: MeasurementGroup
    evidence: Evidence


def select_backend(name: Optional[str], needs_noise: bool) -> ExecutionBackend:
    """
    Resolve the backend for a call.

    An explicit ``name`` always wins. Otherwise the current target is used,
    unless noise must be applied and the target cannot do so; then the first
    noise-capable registered backend is chosen instead.
    """
    if name is not None:
        return get_backend(name)
    backend = get_backend(get_target())
    if needs_noise and not backend.supports_noise:
        for candidate in available_backends():
            alternative = get_backend(candidate)
            if alternative.supports_noise:
                logger.info(
                    "target %r cannot apply noise; using %r", backend.name, alternative.name
                )
                return alternative
    return backend


def _warn_noise_ignored(reason: str) -> None:
    message = f"Noise model ignored: {reason}"
    logger.warning(message)
    warnings.warn(message, NoiseUnsupportedWarning, stacklevel=4)


def resolve_noise(
    noise: Optional[NoiseModel],
    backend: ExecutionBackend,
    shots: Optional[int],
) -> Optional[NoiseModel]:
    """Return the noise model to apply, warning when a supplied one is dropped."""
    if noise is None or noise.is_empty():
        return None
    if shots is None:
        _warn_noise_ignored("exact evaluation does not sample noise channels.")
        return None
    if not backend.supports_noise:
        _warn_noise_ignored(f"backend {backend.name!r} does not support noise.")
        return None
    return noise


def group_seeds(seed: Optional[int], n_groups: int) -> List[int]:
    """Independent per-group seeds spawned from one root seed."""
    children = np.random.SeedSequence(seed).spawn(n_groups)
    return [int(child.generate_state(1, dtype=np.uint64)[0]) for child in children]


def run_group(
    circuit: QuantumCircuit,
    group: MeasurementGroup,
    shots: Optional[int],
    noise: Optional[NoiseModel],
    generator: Optional[torch.Generator],
    backend: ExecutionBackend,
) -> Evidence:
    """Execute ``circuit`` once in the basis of ``group``."""
    return backend.execute(
        circuit, group.basis, shots=shots, noise=noise, generator=generator
    )


def execute_groups(
    circuit: QuantumCircuit,
    groups: Sequence[MeasurementGroup],
    backend: ExecutionBackend,
    shots: Optional[int] = None,
    noise: Optional[NoiseModel] = None,
    seed: Optional[int] = None,
    max_workers: Optional[int] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> List[GroupResult]:
    """
    Execute every group and return the results in group order.

    Each group samples from its own ``torch.Generator`` seeded by
    :func:`group_seeds`, so serial and concurrent runs agree for a fixed
    seed.

    Raises:
        ObserveCancelledError: If ``cancel_token`` is set before a group runs.
    """
    if not groups:
        return []
    seeds = group_seeds(seed, len(groups))
    torch_device = backend.device.as_torch_device()

    def run(index: int) -> GroupResult:
        if cancel_token is not None and cancel_token.cancelled:
            raise ObserveCancelledError(
                f"observe cancelled before group {index} of {len(groups)}"
            )
        group = groups[index]
        generator = None
        if shots is not None:
            generator = torch.Generator(device=torch_device)
            generator.manual_seed(seeds[index])
        logger.debug(
            "group %d/%d: basis %s serving %d term(s)",
            index + 1,
            len(groups),
            group.label,
            len(group.terms),
        )
        evidence = run_group(circuit, group, shots, noise, generator, backend)
        return GroupResult(index=index, group=group, evidence=evidence)

    if max_workers is None or max_workers <= 1 or len(groups) == 1:
        return [run(i) for i in range(len(groups))]

    with ThreadPoolExecutor(max_workers=min(max_workers, len(groups))) as pool:
        futures = [pool.submit(run, i) for i in range(len(groups))]
        try:
            results = [f.result() for f in futures]
        except BaseException:
            for f in futures:
                f.cancel()
            raise
    return sorted(results, key=lambda r: r.index)


__all__ = [
    "GroupResult",
    "select_backend",
    "resolve_noise",
    "group_seeds",
    "run_group",
    "execute_groups",
]
