"""Python-traced quantum kernels.

A kernel is a plain function whose first parameter receives a fresh
:class:`~qobserve.circuit.QuantumCircuit`; the remaining parameters are the
kernel arguments supplied to ``observe``::

    @kernel
    def ansatz(qc, theta: float):
        q, r = qc.qalloc(2)
        qc.x(q)
        qc.ry(theta, r)
        qc.cx(r, q)

Tracing records the gates; it never simulates anything.
"""

from __future__ import annotations

import collections.abc
import functools
import inspect
import numbers
import typing
from typing import Any, Callable, Dict, Optional, Tuple, Union

import numpy as np
import torch

from ..circuit import QuantumCircuit
from ..errors import KernelArgumentError
from ..logging import get_logger

logger = get_logger(__name__)

_SEQUENCE_TYPES = (list, tuple, np.ndarray, torch.Tensor)


def _is_scalar_tensor(value: object) -> bool:
    return isinstance(value, torch.Tensor) and value.numel() == 1 and not value.is_complex()


def _matches(value: object, annotation: Any) -> bool:
    """Best-effort isinstance check against a parameter annotation."""
    if annotation is inspect.Parameter.empty or annotation is Any:
        return True
    origin = typing.get_origin(annotation)
    if origin is Union:
        return any(_matches(value, arg) for arg in typing.get_args(annotation))
    if origin is not None:
        annotation = origin
    if not isinstance(annotation, type):
        return True

    if annotation is float:
        return (
            isinstance(value, numbers.Real) and not isinstance(value, bool)
        ) or _is_scalar_tensor(value)
    if annotation is int:
        return isinstance(value, numbers.Integral) and not isinstance(value, bool)
    if annotation is complex:
        return isinstance(value, numbers.Number) and not isinstance(value, bool)
    if issubclass(annotation, (list, tuple)) or annotation in (
        collections.abc.Sequence,
        collections.abc.Iterable,
    ):
        return isinstance(value, _SEQUENCE_TYPES)
    return isinstance(value, annotation)


def _type_name(annotation: Any) -> str:
    return getattr(annotation, "__name__", None) or str(annotation)


class Kernel:
    """
    A traced state-preparation procedure.

    Args:
        fn: Function ``fn(qc, *params)``.
        name: Display name; defaults to ``fn.__name__``.

    Raises:
        TypeError: If ``fn`` is not callable or takes no circuit parameter.
    """

    def __init__(self, fn: Callable[..., None], name: Optional[str] = None) -> None:
        if not callable(fn):
            raise TypeError(f"kernel expects a callable, got {type(fn)}")
        signature = inspect.signature(fn)
        params = list(signature.parameters.values())
        if not params or params[0].kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            raise TypeError(
                f"Kernel {getattr(fn, '__name__', fn)!r} must take the circuit "
                "as its first positional parameter."
            )
        self._fn = fn
        self._signature = signature.replace(parameters=params[1:])
        self.name = name or getattr(fn, "__name__", "kernel")
        try:
            self._hints: Dict[str, Any] = typing.get_type_hints(fn)
        except (NameError, TypeError) as exc:
            logger.debug(
                "kernel %r: annotations do not resolve (%s); skipping type checks",
                self.name,
                exc,
            )
            self._hints = {}
        functools.update_wrapper(self, fn)

    @property
    def signature(self) -> inspect.Signature:
        """Signature of the kernel arguments (circuit parameter excluded)."""
        return self._signature

    def bind(self, *args: Any, **kwargs: Any) -> inspect.BoundArguments:
        """
        Bind arguments to the kernel signature and check annotated types.

        Raises:
            KernelArgumentError: On arity mismatch or a value that does not
                match its annotation.
        """
        try:
            bound = self._signature.bind(*args, **kwargs)
        except TypeError as exc:
            raise KernelArgumentError(
                f"Cannot bind arguments to kernel {self.name!r}{self._signature}: {exc}"
            ) from exc
        bound.apply_defaults()

        for pname, value in bound.arguments.items():
            annotation = self._hints.get(pname, self._signature.parameters[pname].annotation)
            if self._signature.parameters[pname].kind is inspect.Parameter.VAR_POSITIONAL:
                continue
            if not _matches(value, annotation):
                raise KernelArgumentError(
                    f"Kernel {self.name!r} parameter {pname!r} expects "
                    f"{_type_name(annotation)}, got {type(value).__name__} ({value!r})"
                )
        return bound

    def trace(self, *args: Any, **kwargs: Any) -> QuantumCircuit:
        """
        Run the kernel body against a fresh circuit and return the recording.

        Raises:
            KernelArgumentError: See :meth:`bind`.
            ValueError: If the kernel allocates no qubits.
        """
        bound = self.bind(*args, **kwargs)
        circuit = QuantumCircuit()
        self._fn(circuit, *bound.args, **bound.kwargs)
        if circuit.n_qubits == 0:
            raise ValueError(f"Kernel {self.name!r} did not allocate any qubits.")
        return circuit

    def __call__(self, *args: Any, **kwargs: Any) -> QuantumCircuit:
        return self.trace(*args, **kwargs)

    def __repr__(self) -> str:
        return f"Kernel({self.name}{self._signature})"


def kernel(fn: Optional[Callable[..., None]] = None, *, name: Optional[str] = None):
    """Decorator turning ``fn(qc, *params)`` into a :class:`Kernel`."""
    if fn is None:
        return lambda f: Kernel(f, name=name)
    return Kernel(fn, name=name)


def as_kernel(obj: Union[Kernel, Callable[..., None]]) -> Kernel:
    """Return ``obj`` as a Kernel, wrapping plain functions."""
    return obj if isinstance(obj, Kernel) else Kernel(obj)


__all__ = ["Kernel", "kernel", "as_kernel"]
