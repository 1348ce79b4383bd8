"""Pytest configuration and shared fixtures for qobserve tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Reset of process-wide observe defaults between tests
- The two-qubit deuteron ansatz and Hamiltonian used across observe tests
"""

import os

import numpy as np
import pytest
import torch

from qobserve import config, spin
from qobserve.kernel import kernel


def _test_seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    return np.random.default_rng(_test_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic torch RNG on the default device."""
    from qobserve.core.device import default_device

    generator = torch.Generator(device=default_device().as_torch_device())
    generator.manual_seed(_test_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Seed global RNGs for every test."""
    np.random.seed(_test_seed())
    torch.manual_seed(_test_seed())
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(_test_seed())


@pytest.fixture(scope="function", autouse=True)
def reset_observe_defaults():
    """Restore the default target, seed and debug flag after each test."""
    target = config.default_target()
    seed = config.get_random_seed()
    debug = config.is_debug_enabled()
    yield
    config.set_default_target(target)
    config.set_random_seed(seed)
    config.set_debug_enabled(debug)


@pytest.fixture
def deuteron_ansatz():
    """x(q); ry(theta, r); cx(r, q) on two qubits."""

    @kernel
    def ansatz(qc, theta: float):
        q, r = qc.qalloc(2)
        qc.x(q)
        qc.ry(theta, r)
        qc.cx(r, q)

    return ansatz


@pytest.fixture
def deuteron_hamiltonian():
    """5.907 - 2.1433 XX - 2.1433 YY + 0.21829 Z0 - 6.125 Z1."""
    return (
        5.907
        - 2.1433 * spin.x(0) * spin.x(1)
        - 2.1433 * spin.y(0) * spin.y(1)
        + 0.21829 * spin.z(0)
        - 6.125 * spin.z(1)
    )
