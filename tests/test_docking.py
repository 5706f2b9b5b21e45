"""
Unit tests for the docking state machine and mission clock.
"""

import numpy as np
import pytest

from docking_control.config.models import DockingParams
from docking_control.core.docking import (
    DockingState,
    DockingStateMachine,
    MissionClock,
    format_elapsed,
)
from docking_control.utils.orientation_utils import euler_xyz_to_quat_wxyz


@pytest.fixture
def machine(fake_clock):
    params = DockingParams(position=(0, 0, 0), orientation=(1, 0, 0, 0))
    return DockingStateMachine(params, time_source=fake_clock)


def _leave_box(machine, body):
    body.set_state(position=[1.0, 0, 0])
    machine.evaluate(body)


@pytest.mark.unit
class TestFormatElapsed:
    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (0.0, "0:00:00.000"),
            (61.5, "0:01:01.500"),
            (3723.25, "1:02:03.250"),
            (-4.0, "0:00:00.000"),
        ],
    )
    def test_format(self, seconds, expected):
        assert format_elapsed(seconds) == expected


@pytest.mark.unit
class TestMissionClock:
    def test_zero_before_undock(self, fake_clock):
        clock = MissionClock(fake_clock)
        fake_clock.advance(10)
        assert clock.elapsed() == 0.0

    def test_pause_time_excluded(self, fake_clock):
        clock = MissionClock(fake_clock)
        clock.start(paused=False)
        fake_clock.advance(5)
        clock.pause()
        fake_clock.advance(10)
        assert clock.elapsed() == pytest.approx(5)
        clock.resume()
        fake_clock.advance(2)
        assert clock.elapsed() == pytest.approx(7)

    def test_start_paused(self, fake_clock):
        clock = MissionClock(fake_clock)
        clock.start(paused=True)
        fake_clock.advance(3)
        assert clock.elapsed() == 0.0
        clock.resume()
        fake_clock.advance(1.5)
        assert clock.formatted() == "0:00:01.500"

    def test_freeze(self, fake_clock):
        clock = MissionClock(fake_clock)
        clock.start(paused=False)
        fake_clock.advance(4)
        clock.freeze()
        fake_clock.advance(100)
        assert clock.elapsed() == pytest.approx(4)


@pytest.mark.unit
class TestCriteria:
    def test_at_reference(self, machine, body):
        status = machine.compute_status(body)
        assert status.all_criteria_met
        assert status.distance == 0.0

    def test_box_is_per_axis(self, machine, body):
        body.set_state(position=[0.09, 0.09, 0.09])
        status = machine.compute_status(body)
        assert status.distance > 0.1
        assert status.in_box
        body.set_state(position=[0.11, 0, 0])
        assert not machine.compute_status(body).in_box

    def test_angle_threshold(self, machine, body):
        body.set_state(quaternion=euler_xyz_to_quat_wxyz([0, 2.5, 0], degrees=True))
        status = machine.compute_status(body)
        assert status.angle_error_deg == pytest.approx(2.5)
        assert status.in_angle
        body.set_state(quaternion=euler_xyz_to_quat_wxyz([0, 0, 4], degrees=True))
        assert not machine.compute_status(body).in_angle

    def test_negated_quaternion_is_same_attitude(self, machine, body):
        body.set_state(quaternion=[-1, 0, 0, 0])
        assert machine.compute_status(body).angle_error_deg == pytest.approx(0.0, abs=1e-6)

    def test_lateral_speed_uses_x_z_plane(self, machine, body):
        body.set_state(velocity=[0, 0.5, 0.05])
        status = machine.compute_status(body)
        assert status.lateral_speed == pytest.approx(0.05)
        assert status.within_speed_limits

        body.set_state(velocity=[0.08, 0, 0.08])
        assert not machine.compute_status(body).within_speed_limits

    def test_angular_speed_in_degrees(self, machine, body):
        body.set_state(angular_velocity=[0, np.radians(2.0), 0])
        status = machine.compute_status(body)
        assert status.angular_speed == pytest.approx(2.0)
        assert not status.within_angular_speed_limit


@pytest.mark.unit
class TestStateMachine:
    def test_initially_docked_and_paused(self, machine, body):
        assert machine.state == DockingState.DOCKED
        assert machine.paused
        machine.evaluate(body)
        assert machine.is_docked

    def test_undock_requires_docked_and_paused(self, machine):
        assert machine.undock()
        assert machine.state == DockingState.UNDOCKED
        assert not machine.undock()

    def test_does_not_redock_before_leaving_box(self, machine, body):
        machine.toggle_pause()
        assert machine.state == DockingState.UNDOCKED
        assert not machine.paused
        machine.evaluate(body)
        assert machine.state == DockingState.UNDOCKED

    def test_round_trip(self, machine, body, fake_clock):
        machine.toggle_pause()
        fake_clock.advance(3.0)
        _leave_box(machine, body)
        assert machine.state == DockingState.ELIGIBLE
        assert machine.has_left_docking_box_once

        body.set_state(position=[0.02, 0, 0], velocity=[0, 0, 0.05], angular_velocity=[0, 0, 0.001])
        fake_clock.advance(2.0)
        status = machine.evaluate(body)

        assert status.all_criteria_met
        assert machine.state == DockingState.DOCKED
        assert machine.paused
        assert np.allclose(body.velocity, 0.0)
        assert np.allclose(body.angular_velocity, 0.0)
        assert machine.elapsed_seconds() == pytest.approx(5.0)
        fake_clock.advance(60.0)
        assert machine.formatted_elapsed() == "0:00:05.000"

    def test_too_fast_does_not_dock(self, machine, body):
        machine.toggle_pause()
        _leave_box(machine, body)
        body.set_state(position=[0, 0, 0], velocity=[0.5, 0, 0])
        machine.evaluate(body)
        assert machine.state == DockingState.ELIGIBLE

    def test_undock_after_dock_clears_latch(self, machine, body):
        machine.toggle_pause()
        _leave_box(machine, body)
        body.set_state(position=[0, 0, 0])
        machine.evaluate(body)
        assert machine.is_docked

        assert machine.toggle_pause() is False
        assert machine.state == DockingState.UNDOCKED
        assert not machine.has_left_docking_box_once

    def test_pause_toggle_while_undocked(self, machine, fake_clock):
        machine.toggle_pause()
        fake_clock.advance(1.0)
        assert machine.toggle_pause() is True
        fake_clock.advance(30.0)
        assert machine.elapsed_seconds() == pytest.approx(1.0)
        assert machine.toggle_pause() is False
        assert machine.state == DockingState.UNDOCKED

    def test_reset(self, machine, body):
        machine.toggle_pause()
        _leave_box(machine, body)
        machine.reset()
        assert machine.is_docked
        assert machine.paused
        assert not machine.has_left_docking_box_once
        assert machine.elapsed_seconds() == 0.0
