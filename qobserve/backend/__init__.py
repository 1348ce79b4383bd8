"""Execution backends for kernel circuits."""

from .base import ExecutionBackend
from .density_matrix import (
    DensityMatrixBackend,
    apply_kraus,
    apply_unitary_dm,
    dm_from_statevector,
    measure_probs_dm,
    simulate_circuit_dm,
    zero_dm_state,
)
from .registry import (
    available_backends,
    get_backend,
    get_target,
    register_backend,
    set_target,
)
from .statevector import (
    StatevectorBackend,
    apply_exp_pauli,
    apply_gate,
    apply_pauli_word,
    measure_probs,
    simulate_circuit,
    zero_state,
)

__all__ = [
    "ExecutionBackend",
    "StatevectorBackend",
    "DensityMatrixBackend",
    "zero_state",
    "apply_gate",
    "apply_pauli_word",
    "apply_exp_pauli",
    "measure_probs",
    "simulate_circuit",
    "zero_dm_state",
    "dm_from_statevector",
    "apply_unitary_dm",
    "apply_kraus",
    "measure_probs_dm",
    "simulate_circuit_dm",
    "available_backends",
    "register_backend",
    "get_backend",
    "set_target",
    "get_target",
]
