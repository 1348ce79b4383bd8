"""Tests for kernel tracing and argument checking."""

from typing import Optional

import numpy as np
import pytest
import torch

from qobserve import KernelArgumentError, QuantumCircuit
from qobserve.kernel import Kernel, as_kernel, kernel


@kernel
def rotations(qc, angles: list, flip: bool = False):
    qubits = qc.qalloc(len(angles))
    for q, angle in zip(qubits, angles):
        qc.ry(angle, q)
    if flip:
        qc.x(qubits[0])


def test_trace_records_gates(deuteron_ansatz):
    circuit = deuteron_ansatz(0.59)
    assert isinstance(circuit, QuantumCircuit)
    assert circuit.n_qubits == 2
    assert [op.name for op in circuit.ops] == ["x", "ry", "x"]
    assert circuit.ops[1].params == (0.59,)
    assert circuit.ops[2].controls == (1,)
    assert circuit.ops[2].targets == (0,)


def test_each_trace_is_fresh(deuteron_ansatz):
    first = deuteron_ansatz.trace(0.1)
    second = deuteron_ansatz.trace(0.2)
    assert first is not second
    assert len(first) == len(second) == 3


def test_signature_excludes_circuit(deuteron_ansatz):
    assert list(deuteron_ansatz.signature.parameters) == ["theta"]
    assert deuteron_ansatz.name == "ansatz"
    assert "theta" in repr(deuteron_ansatz)


class TestBind:
    """Tests for argument binding."""

    def test_arity_mismatch(self, deuteron_ansatz):
        with pytest.raises(KernelArgumentError, match="Cannot bind"):
            deuteron_ansatz.trace()
        with pytest.raises(KernelArgumentError, match="Cannot bind"):
            deuteron_ansatz.trace(0.1, 0.2)

    def test_wrong_type(self, deuteron_ansatz):
        with pytest.raises(KernelArgumentError, match="expects float"):
            deuteron_ansatz.trace("0.59")

    def test_bool_is_not_a_float(self, deuteron_ansatz):
        with pytest.raises(KernelArgumentError):
            deuteron_ansatz.trace(True)

    @pytest.mark.parametrize("value", [1, 0.5, np.float64(0.5), torch.tensor(0.5)])
    def test_real_values_accepted(self, deuteron_ansatz, value):
        assert deuteron_ansatz.trace(value).n_qubits == 2

    def test_sequence_annotation(self):
        assert rotations.trace([0.1, 0.2]).n_qubits == 2
        assert rotations.trace((0.1, 0.2, 0.3), flip=True).n_qubits == 3
        with pytest.raises(KernelArgumentError, match="angles"):
            rotations.trace(0.1)

    def test_optional_annotation(self):
        @kernel
        def maybe(qc, theta: Optional[float] = None):
            q = qc.qubit()
            if theta is not None:
                qc.rx(theta, q)

        assert len(maybe.trace()) == 0
        assert len(maybe.trace(0.3)) == 1
        with pytest.raises(KernelArgumentError):
            maybe.trace("x")

    def test_is_a_type_error(self):
        assert issubclass(KernelArgumentError, TypeError)


def test_kernel_without_qubits_raises():
    @kernel
    def empty(qc):
        pass

    with pytest.raises(ValueError, match="did not allocate"):
        empty.trace()


def test_kernel_requires_circuit_parameter():
    with pytest.raises(TypeError, match="first positional parameter"):
        Kernel(lambda: None)
    with pytest.raises(TypeError, match="callable"):
        Kernel(3)


def test_named_decorator_and_as_kernel():
    @kernel(name="prep")
    def bell(qc):
        a, b = qc.qalloc(2)
        qc.h(a)
        qc.cx(a, b)

    assert isinstance(bell, Kernel)
    assert bell.name == "prep"
    assert as_kernel(bell) is bell

    def plain(qc):
        qc.h(qc.qubit())

    wrapped = as_kernel(plain)
    assert isinstance(wrapped, Kernel)
    assert [op.name for op in wrapped.trace().ops] == ["h"]
