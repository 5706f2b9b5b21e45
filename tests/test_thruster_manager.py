"""
Unit tests for operator channel input, fine control and timed firing.
"""

import pytest

from docking_control.core.exceptions import ParameterValidationError
from docking_control.core.thruster_binding import ControlChannel
from docking_control.core.thruster_manager import ThrusterManager

CHANNEL_MAP = {
    ControlChannel.PLUS_Z: [8, 9],
    ControlChannel.PITCH_PLUS: [8, 11],
    ControlChannel.MINUS_X: [2, 3],
}


@pytest.fixture
def manager(fake_clock):
    return ThrusterManager(CHANNEL_MAP, firing_duration=0.5, time_source=fake_clock)


@pytest.mark.unit
class TestNormalInput:
    def test_press_and_release(self, manager):
        manager.press(ControlChannel.PLUS_Z)
        assert manager.active_channels() == [ControlChannel.PLUS_Z]
        manager.end_frame()
        assert manager.active_channels() == [ControlChannel.PLUS_Z]
        manager.release(ControlChannel.PLUS_Z)
        assert manager.active_channels() == []

    def test_active_channels_in_declaration_order(self, manager):
        manager.press(ControlChannel.PITCH_PLUS)
        manager.press(ControlChannel.MINUS_X)
        manager.press(ControlChannel.PLUS_Z)
        assert manager.active_channels() == [
            ControlChannel.PLUS_Z,
            ControlChannel.MINUS_X,
            ControlChannel.PITCH_PLUS,
        ]

    def test_thruster_indices_deduplicated(self, manager):
        indices = manager.thruster_indices([ControlChannel.PLUS_Z, ControlChannel.PITCH_PLUS])
        assert indices == [8, 9, 11]

    def test_unbound_channel_has_no_thrusters(self, manager):
        assert manager.thruster_indices([ControlChannel.ROLL_MINUS]) == []

    def test_default_map_is_empty(self, fake_clock):
        assert ThrusterManager(time_source=fake_clock).thruster_indices(list(ControlChannel)) == []


@pytest.mark.unit
class TestFineControl:
    def test_press_latches_one_frame(self, manager):
        assert manager.toggle_fine_control()
        manager.press(ControlChannel.PLUS_Z)
        manager.release(ControlChannel.PLUS_Z)
        assert manager.active_channels() == [ControlChannel.PLUS_Z]
        manager.end_frame()
        assert manager.active_channels() == []

    def test_held_channels_ignored_in_fine_mode(self, manager):
        manager.press(ControlChannel.PLUS_Z)
        manager.toggle_fine_control()
        assert manager.active_channels() == []

    def test_toggle_clears_latches(self, manager):
        manager.toggle_fine_control()
        manager.press(ControlChannel.PLUS_Z)
        assert not manager.toggle_fine_control()
        manager.toggle_fine_control()
        assert manager.active_channels() == []


@pytest.mark.unit
class TestTimedFiring:
    def test_latch_held_for_duration(self, manager, fake_clock):
        manager.toggle_fine_control()
        manager.set_timed_firing(True)
        manager.press(ControlChannel.MINUS_X)

        fake_clock.advance(0.25)
        assert manager.expire_timed_firings() == []
        manager.end_frame()
        assert manager.active_channels() == [ControlChannel.MINUS_X]

        fake_clock.advance(0.25)
        assert manager.expire_timed_firings() == [ControlChannel.MINUS_X]
        assert manager.active_channels() == []

    def test_repress_does_not_restart_timer(self, manager, fake_clock):
        manager.toggle_fine_control()
        manager.set_timed_firing(True)
        manager.press(ControlChannel.PLUS_Z)
        fake_clock.advance(0.375)
        manager.press(ControlChannel.PLUS_Z)
        fake_clock.advance(0.125)
        assert manager.expire_timed_firings() == [ControlChannel.PLUS_Z]

    def test_no_expiry_outside_fine_mode(self, manager, fake_clock):
        manager.set_timed_firing(True)
        manager.press(ControlChannel.PLUS_Z)
        fake_clock.advance(10.0)
        assert manager.expire_timed_firings() == []
        assert manager.active_channels() == [ControlChannel.PLUS_Z]

    def test_duration_update(self, manager):
        manager.set_timed_firing(True, duration=0.25)
        assert manager.firing_duration == 0.25

    @pytest.mark.parametrize("duration", [0.0, -1.0])
    def test_invalid_duration(self, manager, duration):
        with pytest.raises(ParameterValidationError, match="firing_duration"):
            manager.set_timed_firing(True, duration=duration)

    def test_enable_times_existing_latch(self, manager, fake_clock):
        manager.toggle_fine_control()
        manager.press(ControlChannel.PLUS_Z)
        manager.set_timed_firing(True, duration=0.25)
        assert manager.firing_start_times == {ControlChannel.PLUS_Z: fake_clock.now}

        manager.end_frame()
        assert manager.active_channels() == [ControlChannel.PLUS_Z]

        fake_clock.advance(0.25)
        assert manager.expire_timed_firings() == [ControlChannel.PLUS_Z]
        assert manager.active_channels() == []

    def test_disable_clears_timers(self, manager):
        manager.toggle_fine_control()
        manager.set_timed_firing(True)
        manager.press(ControlChannel.PLUS_Z)
        manager.set_timed_firing(False)
        assert manager.firing_start_times == {}
        manager.end_frame()
        assert manager.active_channels() == []

    def test_reset(self, manager):
        manager.press(ControlChannel.PLUS_Z)
        manager.toggle_fine_control()
        manager.set_timed_firing(True)
        manager.press(ControlChannel.MINUS_X)
        manager.reset()
        assert manager.held_channels == set()
        assert manager.latched_channels == set()
        assert manager.firing_start_times == {}
