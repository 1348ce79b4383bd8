"""Gate-level circuit IR recorded by kernels and consumed by the backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..gates.standard import FIXED_GATES, PARAMETRIC_GATES

QubitArg = Union[int, Sequence[int]]

_PAULI_LETTERS = frozenset("IXYZ")


@dataclass(frozen=True)
class GateOp:
    """
    A single gate application in a quantum circuit.

    Attributes
    ----------
    name:
        Lower-case gate name, e.g. "x", "h", "ry" or "exp_pauli".
    targets:
        Target qubit indices. Single-qubit gates have exactly one target;
        "exp_pauli" targets every qubit of its Pauli word.
    controls:
        Control qubits; the gate acts only where all of them are |1>.
    params:
        Numeric parameters (rotation angles), empty for fixed gates.
    word:
        Dense Pauli word for "exp_pauli", one letter per target.
    """

    name: str
    targets: Tuple[int, ...]
    controls: Tuple[int, ...] = ()
    params: Tuple[float, ...] = ()
    word: Optional[str] = None

    @property
    def qubits(self) -> Tuple[int, ...]:
        """All qubits touched by this operation, controls first."""
        return self.controls + self.targets


class QuantumCircuit:
    """
    An ordered list of gate applications on a growing qubit register.

    Qubits are allocated with :meth:`qalloc`; indices are dense and start
    at 0. Gate methods mirror the usual kernel vocabulary (``x``, ``ry``,
    ``cx``, ``exp_pauli`` ...).
    """

    def __init__(self, n_qubits: int = 0) -> None:
        if n_qubits < 0:
            raise ValueError(f"n_qubits must be >= 0, got {n_qubits}.")
        self._n_qubits = int(n_qubits)
        self._ops: List[GateOp] = []

    @property
    def n_qubits(self) -> int:
        """Number of allocated qubits."""
        return self._n_qubits

    @property
    def ops(self) -> Tuple[GateOp, ...]:
        """Read-only tuple of all gate operations."""
        return tuple(self._ops)

    def qalloc(self, n: int = 1) -> List[int]:
        """Allocate ``n`` fresh qubits and return their indices."""
        if n < 1:
            raise ValueError(f"Cannot allocate {n} qubits.")
        start = self._n_qubits
        self._n_qubits += int(n)
        return list(range(start, self._n_qubits))

    def qubit(self) -> int:
        """Allocate a single qubit and return its index."""
        return self.qalloc(1)[0]

    def _check_qubit(self, q: int) -> int:
        q = int(q)
        if q < 0 or q >= self._n_qubits:
            raise ValueError(
                f"Qubit index {q} is out of range for this circuit "
                f"(n_qubits={self._n_qubits})."
            )
        return q

    def add_gate(
        self,
        name: str,
        targets: Sequence[int],
        controls: Sequence[int] = (),
        params: Optional[Sequence[float]] = None,
        word: Optional[str] = None,
    ) -> None:
        """
        Append a gate application to the circuit.

        Raises
        ------
        ValueError
            For unknown gate names, out-of-range or overlapping qubits.
        """
        key = name.lower()
        if key != "exp_pauli" and key not in FIXED_GATES and key not in PARAMETRIC_GATES:
            raise ValueError(f"Unknown gate {name!r}.")

        t_tuple = tuple(self._check_qubit(q) for q in targets)
        c_tuple = tuple(self._check_qubit(q) for q in controls)
        if not t_tuple:
            raise ValueError("GateOp must act on at least one target qubit.")
        if key != "exp_pauli" and len(t_tuple) != 1:
            raise ValueError(f"Gate {name!r} takes one target, got {t_tuple}.")
        touched = t_tuple + c_tuple
        if len(set(touched)) != len(touched):
            raise ValueError(f"Gate {name!r} uses a qubit twice: {touched}.")

        p_tuple = tuple(float(p) for p in params) if params is not None else ()
        self._ops.append(
            GateOp(name=key, targets=t_tuple, controls=c_tuple, params=p_tuple, word=word)
        )

    def _broadcast(
        self,
        name: str,
        target: QubitArg,
        ctrl: QubitArg,
        params: Sequence[float] = (),
    ) -> None:
        controls = _as_tuple(ctrl)
        targets = _as_tuple(target)
        if controls and len(targets) != 1:
            raise ValueError("Controlled gates take exactly one target qubit.")
        for t in targets:
            self.add_gate(name, [t], controls=controls, params=params)

    # Fixed single-qubit gates; a sequence target applies the gate to each.

    def x(self, target: QubitArg, ctrl: QubitArg = ()) -> None:
        self._broadcast("x", target, ctrl)

    def y(self, target: QubitArg, ctrl: QubitArg = ()) -> None:
        self._broadcast("y", target, ctrl)

    def z(self, target: QubitArg, ctrl: QubitArg = ()) -> None:
        self._broadcast("z", target, ctrl)

    def h(self, target: QubitArg, ctrl: QubitArg = ()) -> None:
        self._broadcast("h", target, ctrl)

    def s(self, target: QubitArg, ctrl: QubitArg = ()) -> None:
        self._broadcast("s", target, ctrl)

    def sdg(self, target: QubitArg, ctrl: QubitArg = ()) -> None:
        self._broadcast("sdg", target, ctrl)

    def t(self, target: QubitArg, ctrl: QubitArg = ()) -> None:
        self._broadcast("t", target, ctrl)

    def tdg(self, target: QubitArg, ctrl: QubitArg = ()) -> None:
        self._broadcast("tdg", target, ctrl)

    # Rotations

    def rx(self, theta: float, target: QubitArg, ctrl: QubitArg = ()) -> None:
        self._broadcast("rx", target, ctrl, (theta,))

    def ry(self, theta: float, target: QubitArg, ctrl: QubitArg = ()) -> None:
        self._broadcast("ry", target, ctrl, (theta,))

    def rz(self, theta: float, target: QubitArg, ctrl: QubitArg = ()) -> None:
        self._broadcast("rz", target, ctrl, (theta,))

    def r1(self, theta: float, target: QubitArg, ctrl: QubitArg = ()) -> None:
        self._broadcast("r1", target, ctrl, (theta,))

    # Two-qubit shorthands

    def cx(self, control: QubitArg, target: int) -> None:
        self.x(target, ctrl=control)

    def cy(self, control: QubitArg, target: int) -> None:
        self.y(target, ctrl=control)

    def cz(self, control: QubitArg, target: int) -> None:
        self.z(target, ctrl=control)

    def swap(self, a: int, b: int) -> None:
        self.cx(a, b)
        self.cx(b, a)
        self.cx(a, b)

    def exp_pauli(self, theta: float, qubits: QubitArg, word: str) -> None:
        """
        Apply exp(iθP) where P is the Pauli word laid over ``qubits``.

        The i-th letter of ``word`` acts on the i-th entry of ``qubits``.
        """
        targets = _as_tuple(qubits)
        word = word.upper()
        if len(word) != len(targets):
            raise ValueError(
                f"Pauli word {word!r} has {len(word)} letters for {len(targets)} qubits."
            )
        bad = sorted(set(word) - _PAULI_LETTERS)
        if bad:
            raise ValueError(f"Pauli word {word!r} contains invalid letters {bad}.")
        self.add_gate("exp_pauli", targets, params=(theta,), word=word)

    def append_basis_change(self, basis: Iterable[Tuple[int, str]]) -> "QuantumCircuit":
        """
        Return a copy with the rotations that make ``basis`` diagonal.

        X is measured after H; Y after S-dagger then H; Z and I need nothing.
        """
        rotated = self.copy()
        for qubit, letter in basis:
            if letter == "X":
                rotated.h(qubit)
            elif letter == "Y":
                rotated.sdg(qubit)
                rotated.h(qubit)
            elif letter not in ("Z", "I"):
                raise ValueError(f"Invalid Pauli letter {letter!r} in measurement basis.")
        return rotated

    def copy(self) -> "QuantumCircuit":
        """Return a copy of this circuit."""
        new = QuantumCircuit(self._n_qubits)
        new._ops.extend(self._ops)
        return new

    def __len__(self) -> int:
        return len(self._ops)

    def __repr__(self) -> str:
        return f"QuantumCircuit(n_qubits={self._n_qubits}, ops={len(self._ops)})"


def _as_tuple(qubits: QubitArg) -> Tuple[int, ...]:
    if isinstance(qubits, int):
        return (qubits,)
    return tuple(int(q) for q in qubits)


__all__ = ["GateOp", "QuantumCircuit"]
