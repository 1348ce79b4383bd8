"""Gate-triggered noise models."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from ..logging import get_logger
from .kraus import KrausChannel

logger = get_logger(__name__)


class NoiseModel:
    """
    Declarative mapping from gate applications to Kraus channels.

    A channel registered for a gate fires right after every application of
    that gate whose operand qubits (controls first, then targets) match. The
    channel then acts on those same operand qubits, so its arity must equal
    the operand count.

    Example:
        >>> noise = NoiseModel()
        >>> noise.add_channel("x", [0], depolarization_channel(0.1))
        >>> noise.add_all_qubit_channel("h", bit_flip_channel(0.01))
    """

    def __init__(self) -> None:
        self._specific: Dict[Tuple[str, Tuple[int, ...]], List[KrausChannel]] = {}
        self._all_qubit: Dict[str, List[KrausChannel]] = {}

    @staticmethod
    def _check(gate_name: str, channel: KrausChannel) -> str:
        if not isinstance(gate_name, str) or not gate_name:
            raise ValueError(f"gate_name must be a non-empty string, got {gate_name!r}")
        if not isinstance(channel, KrausChannel):
            raise TypeError(f"channel must be a KrausChannel, got {type(channel)}")
        return gate_name.lower()

    def add_channel(
        self,
        gate_name: str,
        qubits: Sequence[int],
        channel: KrausChannel,
    ) -> None:
        """
        Apply ``channel`` after ``gate_name`` acts on exactly ``qubits``.

        Raises:
            ValueError: If ``qubits`` is empty, has negative entries, or does
                not match the channel's arity.
        """
        key = self._check(gate_name, channel)
        q_tuple = tuple(int(q) for q in qubits)
        if not q_tuple or any(q < 0 for q in q_tuple):
            raise ValueError(f"qubits must be non-empty and non-negative, got {q_tuple}")
        if len(q_tuple) != channel.num_qubits:
            raise ValueError(
                f"Channel {channel.name!r} acts on {channel.num_qubits} qubit(s), "
                f"got qubits {q_tuple}"
            )
        self._specific.setdefault((key, q_tuple), []).append(channel)
        logger.debug("noise: %s on %s after %r", channel.name, q_tuple, key)

    def add_all_qubit_channel(self, gate_name: str, channel: KrausChannel) -> None:
        """Apply ``channel`` after every ``gate_name`` whose operand count matches."""
        key = self._check(gate_name, channel)
        self._all_qubit.setdefault(key, []).append(channel)
        logger.debug("noise: %s after every %r", channel.name, key)

    def get_channels(self, gate_name: str, qubits: Sequence[int]) -> List[KrausChannel]:
        """Channels to apply after ``gate_name`` acted on ``qubits``, in insertion order."""
        key = gate_name.lower()
        q_tuple = tuple(int(q) for q in qubits)
        channels = [
            ch for ch in self._all_qubit.get(key, ()) if ch.num_qubits == len(q_tuple)
        ]
        channels.extend(self._specific.get((key, q_tuple), ()))
        return channels

    def is_empty(self) -> bool:
        return not self._specific and not self._all_qubit

    def __len__(self) -> int:
        return sum(len(v) for v in self._specific.values()) + sum(
            len(v) for v in self._all_qubit.values()
        )

    def __repr__(self) -> str:
        return f"NoiseModel(channels={len(self)})"


__all__ = ["NoiseModel"]
