"""Noise channels and gate-triggered noise models."""

from .kraus import (
    KrausChannel,
    amplitude_damping_channel,
    bit_flip_channel,
    depolarization_channel,
    phase_damping_channel,
    phase_flip_channel,
)
from .model import NoiseModel

__all__ = [
    "NoiseModel",
    "KrausChannel",
    "depolarization_channel",
    "bit_flip_channel",
    "phase_flip_channel",
    "amplitude_damping_channel",
    "phase_damping_channel",
]
