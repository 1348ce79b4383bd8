"""Public observe entry points."""

from __future__ import annotations

import dataclasses
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Optional, Sequence, Tuple, Union

from .. import config
from ..errors import MalformedObservableError
from ..kernel import Kernel, as_kernel
from ..logging import get_logger
from ..operators.grouping import group_terms
from ..operators.pauli import PauliSum, PauliTerm, as_terms
from .aggregate import reduce
from .driver import execute_groups, resolve_noise, select_backend
from .options import ObserveOptions, is_count
from .result import ObserveResult

logger = get_logger(__name__)

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def _split_args(
    args: Sequence[Any],
) -> Tuple[Optional[ObserveOptions], Optional[int], Any, Any, Tuple[Any, ...]]:
    if not args:
        raise TypeError("observe() requires a kernel and a Hamiltonian")
    options = None
    shots = None
    rest = tuple(args)
    if isinstance(rest[0], ObserveOptions):
        options, rest = rest[0], rest[1:]
    elif is_count(rest[0]):
        shots, rest = rest[0], rest[1:]
    if len(rest) < 2:
        raise TypeError("observe() requires a kernel and a Hamiltonian")
    return options, shots, rest[0], rest[1], rest[2:]


def _build_options(
    options: Optional[ObserveOptions],
    shots: Optional[int],
    overrides: dict,
) -> ObserveOptions:
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if shots is not None:
        if "shots" in overrides:
            raise TypeError("shots given both positionally and as shots_count")
        overrides["shots"] = shots
    if options is None:
        return ObserveOptions(**overrides)
    return dataclasses.replace(options, **overrides) if overrides else options


def check_degrees(hamiltonian: Union[PauliTerm, PauliSum], n_qubits: int) -> None:
    """
    Raises:
        MalformedObservableError: If a term acts on a degree >= ``n_qubits``.
    """
    for term in as_terms(hamiltonian):
        if term.n_qubits() > n_qubits:
            raise MalformedObservableError(
                f"Term {term.term_id!r} acts on degree {term.n_qubits() - 1} but the "
                f"kernel allocates only {n_qubits} qubit(s)"
            )


def _observe(
    options: ObserveOptions,
    kernel: Union[Kernel, Any],
    hamiltonian: Union[PauliTerm, PauliSum],
    params: Tuple[Any, ...],
) -> ObserveResult:
    if not isinstance(hamiltonian, (PauliTerm, PauliSum)):
        raise TypeError(f"hamiltonian must be a PauliTerm or PauliSum, got {type(hamiltonian)}")
    kern = as_kernel(kernel)
    circuit = kern.trace(*params)
    check_degrees(hamiltonian, circuit.n_qubits)

    identity_terms, groups = group_terms(hamiltonian, options.grouping)
    shots = options.shots
    needs_noise = options.noise is not None and not options.noise.is_empty() and shots is not None
    backend = select_backend(options.backend, needs_noise)
    noise = resolve_noise(options.noise, backend, shots)
    seed = options.seed if options.seed is not None else config.get_random_seed()

    logger.debug(
        "observe %s: %d term(s), %d identity, %d group(s), %s on %s",
        kern.name,
        len(as_terms(hamiltonian)),
        len(identity_terms),
        len(groups),
        "exact" if shots is None else f"{shots} shots",
        backend.name,
    )
    results = execute_groups(
        circuit,
        groups,
        backend,
        shots=shots,
        noise=noise,
        seed=seed,
        max_workers=options.max_workers,
        cancel_token=options.cancel_token,
    )
    reduction = reduce(hamiltonian, identity_terms, results, shots)
    logger.debug("observe %s: <H> = %.10g", kern.name, reduction.value)

    return ObserveResult(
        value=reduction.value,
        hamiltonian=hamiltonian,
        expectations=reduction.expectations,
        registers=reduction.registers,
        shots=shots,
        global_counts=reduction.global_counts,
        executions=len(results),
    )


def observe(
    *args: Any,
    shots_count: Optional[int] = None,
    noise_model=None,
    seed: Optional[int] = None,
    backend: Optional[str] = None,
    grouping: Optional[str] = None,
    max_workers: Optional[int] = None,
    cancel_token=None,
) -> ObserveResult:
    """
    Compute ⟨ψ(params)|H|ψ(params)⟩ for the state prepared by a kernel.

    Call forms::

        observe(kernel, h, *params)                        # exact
        observe(shots, kernel, h, *params)                 # sampled
        observe(ObserveOptions(...), kernel, h, *params)
        observe(kernel, h, *params, shots_count=1000, noise_model=noise, seed=7)

    Keyword arguments override the fields of a positional ObserveOptions.

    Raises:
        KernelArgumentError: If ``params`` do not bind to the kernel.
        MalformedObservableError: If ``h`` acts beyond the kernel's qubits.
        ObserveCancelledError: If the cancel token is set mid-call.
        ShotCountMismatchError: If a register total differs from the shots.
    """
    options, shots, kernel, hamiltonian, params = _split_args(args)
    options = _build_options(
        options,
        shots,
        {
            "shots": shots_count,
            "noise": noise_model,
            "seed": seed,
            "backend": backend,
            "grouping": grouping,
            "max_workers": max_workers,
            "cancel_token": cancel_token,
        },
    )
    return _observe(options, kernel, hamiltonian, params)


def _shared_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(thread_name_prefix="qobserve")
        return _executor


def observe_async(*args: Any, **kwargs: Any) -> "Future[ObserveResult]":
    """
    Submit :func:`observe` to a shared thread pool.

    Argument errors surface from ``Future.result()``.
    """
    return _shared_executor().submit(observe, *args, **kwargs)


def shutdown_async(wait: bool = True) -> None:
    """
    Shut down the pool behind :func:`observe_async`.

    Pending calls still run when ``wait`` is true. A later
    :func:`observe_async` starts a fresh pool.
    """
    global _executor
    with _executor_lock:
        executor, _executor = _executor, None
    if executor is not None:
        executor.shutdown(wait=wait)


__all__ = ["observe", "observe_async", "shutdown_async", "check_degrees"]
