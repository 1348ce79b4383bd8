"""qobserve - PyTorch-native expectation values of Pauli-sum Hamiltonians."""

__version__ = "0.1.0"

# Backends
from .backend import (
    DensityMatrixBackend,
    ExecutionBackend,
    StatevectorBackend,
    available_backends,
    get_backend,
    get_target,
    register_backend,
    set_target,
)

# Circuit IR and kernels
from .circuit import GateOp, QuantumCircuit
from .config import get_random_seed, set_random_seed
from .core import Device, default_device, device

# Diagnostics
from .diagnostics import debug_context, is_debug_enabled, set_debug_enabled

# Errors
from .errors import (
    KernelArgumentError,
    MalformedObservableError,
    NoiseUnsupportedWarning,
    ObserveCancelledError,
    ShotCountMismatchError,
    TermNotFoundError,
)
from .kernel import Kernel, kernel

# Logging
from .logging import configure_logging, get_logger, set_log_level

# Noise
from .noise import (
    KrausChannel,
    NoiseModel,
    amplitude_damping_channel,
    bit_flip_channel,
    depolarization_channel,
    phase_damping_channel,
    phase_flip_channel,
)

# Observe engine
from .observe import (
    CancellationToken,
    ObserveOptions,
    ObserveResult,
    observe,
    observe_async,
    shutdown_async,
)

# Operators
from .operators import (
    MeasurementGroup,
    PauliSum,
    PauliTerm,
    canonicalize,
    from_word,
    group_terms,
    spin,
)

# Statistics
from .sampling import (
    GLOBAL_REGISTER_NAME,
    CountsMap,
    ProbabilityTable,
    SampleResult,
)

__all__ = [
    "__version__",
    "observe",
    "observe_async",
    "shutdown_async",
    "ObserveOptions",
    "ObserveResult",
    "CancellationToken",
    "PauliTerm",
    "PauliSum",
    "MeasurementGroup",
    "canonicalize",
    "from_word",
    "group_terms",
    "spin",
    "Kernel",
    "kernel",
    "GateOp",
    "QuantumCircuit",
    "ExecutionBackend",
    "StatevectorBackend",
    "DensityMatrixBackend",
    "available_backends",
    "get_backend",
    "get_target",
    "register_backend",
    "set_target",
    "NoiseModel",
    "KrausChannel",
    "depolarization_channel",
    "bit_flip_channel",
    "phase_flip_channel",
    "amplitude_damping_channel",
    "phase_damping_channel",
    "GLOBAL_REGISTER_NAME",
    "CountsMap",
    "ProbabilityTable",
    "SampleResult",
    "Device",
    "device",
    "default_device",
    "set_random_seed",
    "get_random_seed",
    "debug_context",
    "is_debug_enabled",
    "set_debug_enabled",
    "get_logger",
    "set_log_level",
    "configure_logging",
    "MalformedObservableError",
    "ShotCountMismatchError",
    "TermNotFoundError",
    "KernelArgumentError",
    "ObserveCancelledError",
    "NoiseUnsupportedWarning",
]
