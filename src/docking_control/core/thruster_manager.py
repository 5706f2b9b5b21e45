"""
Thruster Manager Module

Tracks which control channels the operator has engaged and turns them into
thruster indices for the current frame.

Input modes:
- Normal: a channel is active from ``press`` until ``release``.
- Fine control: a press latches the channel for a single frame; it is
  dropped at the end of the frame.
- Fine control with timed firing: a press keeps the channel active for
  ``firing_duration`` seconds, then it expires at the start of a frame.
"""

import logging
import time
from typing import Callable, Dict, Iterable, List, Optional, Set

from ..config.constants import Constants
from .exceptions import ParameterValidationError
from .thruster_binding import ControlChannel, empty_channel_map

logger = logging.getLogger(__name__)


class ThrusterManager:
    """
    Manages operator channel input and timed firings.

    Thruster activation itself is handled by the propulsion model; this
    class only answers "which thrusters should fire this frame".
    """

    def __init__(
        self,
        channel_map: Optional[Dict[ControlChannel, List[int]]] = None,
        firing_duration: float = Constants.DEFAULT_FIRING_DURATION,
        timed_firing_enabled: bool = False,
        time_source: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize thruster manager.

        Args:
            channel_map: Channel to thruster-index mapping
            firing_duration: Timed-firing pulse length [s]
            timed_firing_enabled: Keep fine-control presses active for firing_duration
            time_source: Clock used for timed firing
        """
        self.channel_map = channel_map or empty_channel_map()
        self.firing_duration = firing_duration
        self.timed_firing_enabled = timed_firing_enabled
        self.fine_control_mode = False
        self._now = time_source

        # Channels held down in normal mode
        self.held_channels: Set[ControlChannel] = set()

        # Channels latched in fine-control mode
        self.latched_channels: Set[ControlChannel] = set()

        # Timed-firing start times per latched channel
        self.firing_start_times: Dict[ControlChannel, float] = {}

    def set_channel_map(self, channel_map: Dict[ControlChannel, List[int]]) -> None:
        self.channel_map = channel_map

    def press(self, channel: ControlChannel) -> None:
        if self.fine_control_mode:
            self.latched_channels.add(channel)
            if self.timed_firing_enabled and channel not in self.firing_start_times:
                self.firing_start_times[channel] = self._now()
        else:
            self.held_channels.add(channel)

    def release(self, channel: ControlChannel) -> None:
        # Fine-control latches are dropped by end_frame or expiry, not release
        self.held_channels.discard(channel)

    def toggle_fine_control(self) -> bool:
        self.fine_control_mode = not self.fine_control_mode
        self.latched_channels.clear()
        self.firing_start_times.clear()
        logger.info("Fine control %s", "ON" if self.fine_control_mode else "OFF")
        return self.fine_control_mode

    def set_timed_firing(self, enabled: bool, duration: Optional[float] = None) -> None:
        self.timed_firing_enabled = enabled
        if duration is not None:
            if duration <= 0:
                raise ParameterValidationError("firing_duration", duration, "must be positive")
            self.firing_duration = duration
        if enabled:
            # Channels latched before the switch start their pulse now
            now = self._now()
            for channel in self.latched_channels:
                self.firing_start_times.setdefault(channel, now)
        else:
            self.firing_start_times.clear()

    def expire_timed_firings(self) -> List[ControlChannel]:
        """Drop latched channels whose timed firing has run its course."""
        if not (self.fine_control_mode and self.timed_firing_enabled):
            return []
        now = self._now()
        expired = [
            channel
            for channel, started in self.firing_start_times.items()
            if now - started >= self.firing_duration
        ]
        for channel in expired:
            del self.firing_start_times[channel]
            self.latched_channels.discard(channel)
        return expired

    def active_channels(self) -> List[ControlChannel]:
        """Engaged channels in declaration order."""
        engaged = self.latched_channels if self.fine_control_mode else self.held_channels
        return [channel for channel in ControlChannel if channel in engaged]

    def thruster_indices(self, channels: Iterable[ControlChannel]) -> List[int]:
        """Thruster indices for ``channels``, each at most once, in first-seen order."""
        indices: List[int] = []
        for channel in channels:
            for index in self.channel_map.get(channel, []):
                if index not in indices:
                    indices.append(index)
        return indices

    def end_frame(self) -> None:
        """Clear single-frame latches (timed firings are left to expire)."""
        if self.fine_control_mode and not self.timed_firing_enabled:
            self.latched_channels.clear()

    def reset(self) -> None:
        self.held_channels.clear()
        self.latched_channels.clear()
        self.firing_start_times.clear()
