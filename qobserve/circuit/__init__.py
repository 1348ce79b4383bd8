"""Circuit IR."""

from .core import GateOp, QuantumCircuit

__all__ = ["GateOp", "QuantumCircuit"]
