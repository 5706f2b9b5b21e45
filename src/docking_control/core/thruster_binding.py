"""
Thruster Channel Binding

Classifies thrusters into the twelve operator control channels, once, at
configuration load.

Translation: a thruster whose fire direction lies within 65 degrees of a
principal axis (``|dir . axis| > cos 65``) binds to that axis' translation
channel. The channel is named after the sign of the local fire direction,
so a thruster firing along +Z is on ``PLUS_Z``.

Rotation: each component of ``position x direction`` above the 0.025
deadband binds the matching rotation channel with the component's sign.
Pitch, yaw and roll are rotations about body X, Y and Z.

Translation and rotation bindings are independent; an off-axis thruster
usually lands in both.

Thrusters with ``auto_bind`` disabled use their ``keybind`` labels instead.
Labels are matched case-insensitively against channel names (``plus_z``,
``pitch_minus``), short forms (``+z``, ``pitch-``) and the operator keys
(``w``, ``i``). Unknown labels are ignored.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..config.constants import Constants
from .vehicle_state import Thruster

logger = logging.getLogger(__name__)


class ControlChannel(Enum):
    """Operator control channels; values are the operator keys."""

    PLUS_Z = "w"
    MINUS_Z = "s"
    PLUS_X = "a"
    MINUS_X = "d"
    PLUS_Y = "e"
    MINUS_Y = "q"
    PITCH_PLUS = "k"
    PITCH_MINUS = "i"
    YAW_PLUS = "j"
    YAW_MINUS = "l"
    ROLL_PLUS = "o"
    ROLL_MINUS = "u"

    @property
    def is_translation(self) -> bool:
        return self in TRANSLATION_CHANNELS

    @property
    def is_rotation(self) -> bool:
        return self in ROTATION_CHANNELS

    @property
    def axis(self) -> int:
        """Body axis index (0=x, 1=y, 2=z) the channel acts about or along."""
        return _CHANNEL_AXIS[self]

    @property
    def sign(self) -> float:
        return _CHANNEL_SIGN[self]


TRANSLATION_CHANNELS = (
    ControlChannel.PLUS_X,
    ControlChannel.MINUS_X,
    ControlChannel.PLUS_Y,
    ControlChannel.MINUS_Y,
    ControlChannel.PLUS_Z,
    ControlChannel.MINUS_Z,
)

ROTATION_CHANNELS = (
    ControlChannel.PITCH_PLUS,
    ControlChannel.PITCH_MINUS,
    ControlChannel.YAW_PLUS,
    ControlChannel.YAW_MINUS,
    ControlChannel.ROLL_PLUS,
    ControlChannel.ROLL_MINUS,
)

# (positive channel, negative channel) per body axis
_TRANSLATION_BY_AXIS = (
    (ControlChannel.PLUS_X, ControlChannel.MINUS_X),
    (ControlChannel.PLUS_Y, ControlChannel.MINUS_Y),
    (ControlChannel.PLUS_Z, ControlChannel.MINUS_Z),
)
_ROTATION_BY_AXIS = (
    (ControlChannel.PITCH_PLUS, ControlChannel.PITCH_MINUS),
    (ControlChannel.YAW_PLUS, ControlChannel.YAW_MINUS),
    (ControlChannel.ROLL_PLUS, ControlChannel.ROLL_MINUS),
)

_CHANNEL_AXIS: Dict[ControlChannel, int] = {}
_CHANNEL_SIGN: Dict[ControlChannel, float] = {}
for _axis, (_plus, _minus) in enumerate(_TRANSLATION_BY_AXIS + _ROTATION_BY_AXIS):
    _CHANNEL_AXIS[_plus] = _CHANNEL_AXIS[_minus] = _axis % 3
    _CHANNEL_SIGN[_plus] = 1.0
    _CHANNEL_SIGN[_minus] = -1.0

_SHORT_LABELS = {
    "+x": ControlChannel.PLUS_X,
    "-x": ControlChannel.MINUS_X,
    "+y": ControlChannel.PLUS_Y,
    "-y": ControlChannel.MINUS_Y,
    "+z": ControlChannel.PLUS_Z,
    "-z": ControlChannel.MINUS_Z,
    "pitch+": ControlChannel.PITCH_PLUS,
    "pitch-": ControlChannel.PITCH_MINUS,
    "yaw+": ControlChannel.YAW_PLUS,
    "yaw-": ControlChannel.YAW_MINUS,
    "roll+": ControlChannel.ROLL_PLUS,
    "roll-": ControlChannel.ROLL_MINUS,
}


def parse_channel_label(label: str) -> Optional[ControlChannel]:
    """Resolve a keybind label to a channel, or None if unknown."""
    if not isinstance(label, str):
        return None
    key = label.strip().lower()
    if not key:
        return None
    if key in _SHORT_LABELS:
        return _SHORT_LABELS[key]
    for channel in ControlChannel:
        if key == channel.value or key == channel.name.lower():
            return channel
    return None


def empty_channel_map() -> Dict[ControlChannel, List[int]]:
    return {channel: [] for channel in ControlChannel}


def classify_thruster(
    thruster: Thruster,
    tolerance: float = Constants.TRANSLATION_TOLERANCE,
    deadband: float = Constants.ROTATION_DEADBAND,
) -> List[ControlChannel]:
    """Channels a single thruster belongs to, in channel declaration order."""
    if not thruster.auto_bind:
        channels: List[ControlChannel] = []
        for label in thruster.keybind:
            channel = parse_channel_label(label)
            if channel is None:
                logger.debug("Ignoring unknown keybind %r on %s", label, thruster.label)
            elif channel not in channels:
                channels.append(channel)
        return channels

    direction = np.asarray(thruster.direction, dtype=float)
    channels = []

    for axis in (2, 0, 1):
        component = direction[axis]
        if abs(component) > tolerance:
            plus, minus = _TRANSLATION_BY_AXIS[axis]
            channels.append(plus if component > 0 else minus)

    torque = np.cross(np.asarray(thruster.position, dtype=float), direction)
    for axis in range(3):
        if abs(torque[axis]) > deadband:
            plus, minus = _ROTATION_BY_AXIS[axis]
            channels.append(plus if torque[axis] > 0 else minus)

    return channels


def bind_thruster_channels(
    thrusters: Sequence[Thruster],
    tolerance: float = Constants.TRANSLATION_TOLERANCE,
    deadband: float = Constants.ROTATION_DEADBAND,
) -> Dict[ControlChannel, List[int]]:
    """
    Build the channel map for a thruster set.

    Every channel is present in the result (possibly with an empty list);
    indices within a channel are in ascending thruster order. The result
    depends only on the thruster geometry and keybind configuration.

    Args:
        thrusters: Thrusters with centre-of-mass-relative positions
        tolerance: Translation alignment threshold (cosine)
        deadband: Minimum unit-thrust torque component for rotation binding

    Returns:
        Mapping of channel to thruster indices
    """
    channel_map = empty_channel_map()
    for thruster in thrusters:
        for channel in classify_thruster(thruster, tolerance, deadband):
            channel_map[channel].append(thruster.index)

    unbound = [
        t.label
        for t in thrusters
        if not any(t.index in indices for indices in channel_map.values())
    ]
    if unbound:
        logger.info("Thrusters without a control channel: %s", ", ".join(unbound))
    return channel_map


def format_channel_map(channel_map: Dict[ControlChannel, List[int]]) -> Dict[str, List[int]]:
    """Channel map keyed by channel name, for display and serialization."""
    return {channel.name: list(channel_map.get(channel, [])) for channel in ControlChannel}
