"""
Unit tests for thruster-based momentum desaturation.
"""

import numpy as np
import pytest

from docking_control.config.constants import Constants
from docking_control.core.desaturation import DesaturationController
from docking_control.core.momentum_control import ControlMode, MomentumActuatorController
from docking_control.core.propulsion import PropulsionFuelModel
from docking_control.core.vehicle_state import ReactionWheel, VehicleState

# Default layout: PITCH_MINUS thrusters (torque arm -0.7 x)
PITCH_MINUS_THRUSTERS = [9, 10]


@pytest.fixture
def vehicle(fresh_config):
    return VehicleState.from_config(fresh_config.app_config)


@pytest.fixture
def parts(vehicle):
    momentum = MomentumActuatorController(vehicle.body, vehicle.reaction_wheels, vehicle.cmgs)
    propulsion = PropulsionFuelModel(vehicle.fuel, vehicle.body)
    desat = DesaturationController(momentum, propulsion, vehicle.thrusters)
    return momentum, propulsion, desat


def _select(momentum, mode):
    while momentum.mode != mode:
        momentum.toggle_mode()


@pytest.mark.unit
class TestModeGating:
    def test_thruster_mode_is_noop(self, parts):
        momentum, propulsion, desat = parts
        result = desat.start()
        assert not result.active
        assert not desat.active
        assert propulsion.fuel.fuel_mass == propulsion.fuel.max_fuel_mass

    def test_step_when_inactive(self, parts):
        momentum, _, desat = parts
        _select(momentum, ControlMode.REACTION_WHEELS)
        assert not desat.step(Constants.MOMENTUM_DT).active

    def test_mode_change_deactivates(self, parts):
        momentum, _, desat = parts
        _select(momentum, ControlMode.REACTION_WHEELS)
        momentum.reaction_wheels[0].current_angular_momentum = 2.0
        desat.start()
        assert desat.active
        _select(momentum, ControlMode.THRUSTERS)
        assert not desat.step(Constants.MOMENTUM_DT).active
        assert not desat.active


@pytest.mark.unit
class TestWheelDesaturation:
    def test_fires_aligned_thrusters_and_bleeds(self, parts):
        momentum, propulsion, desat = parts
        _select(momentum, ControlMode.REACTION_WHEELS)
        momentum.reaction_wheels[0].current_angular_momentum = 2.0

        result = desat.start()

        assert result.active
        assert result.fired_thrusters == PITCH_MINUS_THRUSTERS
        assert momentum.reaction_wheels[0].current_angular_momentum == pytest.approx(
            2.0 - 2 * 0.7 * Constants.RW_DESAT_BLEED
        )
        assert result.momentum_after < result.momentum_before
        assert propulsion.fuel.fuel_mass < propulsion.fuel.max_fuel_mass

    def test_below_trigger_completes_without_firing(self, parts):
        momentum, propulsion, desat = parts
        _select(momentum, ControlMode.REACTION_WHEELS)
        momentum.reaction_wheels[2].current_angular_momentum = 0.05

        result = desat.start()
        assert not result.active
        assert result.fired_thrusters == []
        assert propulsion.fuel.fuel_mass == propulsion.fuel.max_fuel_mass

    def test_completes_below_stop_level(self, parts):
        momentum, _, desat = parts
        _select(momentum, ControlMode.REACTION_WHEELS)
        momentum.reaction_wheels[0].current_angular_momentum = 0.3

        result = desat.start()
        assert result.fired_thrusters
        assert not result.active

    def test_bleed_does_not_overshoot(self, parts):
        momentum, _, desat = parts
        _select(momentum, ControlMode.REACTION_WHEELS)
        momentum.reaction_wheels[0].current_angular_momentum = 2.0
        momentum.reaction_wheels[1].current_angular_momentum = -0.005

        desat.start()
        assert momentum.reaction_wheels[1].current_angular_momentum == 0.0

    def test_converges(self, parts):
        momentum, _, desat = parts
        _select(momentum, ControlMode.REACTION_WHEELS)
        momentum.reaction_wheels[0].current_angular_momentum = -3.0

        desat.start()
        for _ in range(1000):
            if not desat.active:
                break
            desat.step(Constants.MOMENTUM_DT)

        assert not desat.active
        assert abs(momentum.reaction_wheels[0].current_angular_momentum) < Constants.RW_DESAT_STOP

    def test_cancelling_wheels_end_desaturation(self, vehicle):
        wheels = [
            ReactionWheel(index=0, orientation=np.array([1.0, 0, 0]), position=np.zeros(3)),
            ReactionWheel(index=1, orientation=np.array([-1.0, 0, 0]), position=np.zeros(3)),
        ]
        momentum = MomentumActuatorController(vehicle.body, wheels, [])
        propulsion = PropulsionFuelModel(vehicle.fuel, vehicle.body)
        desat = DesaturationController(momentum, propulsion, vehicle.thrusters)
        _select(momentum, ControlMode.REACTION_WHEELS)
        wheels[0].current_angular_momentum = 1.0
        wheels[1].current_angular_momentum = 1.0

        result = desat.start()
        assert result.fired_thrusters == []
        assert not result.active
        assert not desat.active
        assert wheels[0].current_angular_momentum == 1.0

    def test_no_fuel_no_bleed(self, parts):
        momentum, propulsion, desat = parts
        propulsion.fuel.fuel_mass = 0.0
        _select(momentum, ControlMode.REACTION_WHEELS)
        momentum.reaction_wheels[0].current_angular_momentum = 2.0

        result = desat.start()
        assert result.fired_thrusters == []
        assert momentum.reaction_wheels[0].current_angular_momentum == 2.0
        assert result.active


@pytest.mark.unit
class TestCMGDesaturation:
    def test_first_pass_needs_trigger_level(self, parts):
        momentum, _, desat = parts
        _select(momentum, ControlMode.CMGS)
        momentum.cmgs[0].current_angular_momentum = np.array([8.0, 0, 0])

        result = desat.start()
        assert result.fired_thrusters == []
        assert not desat.active

    def test_bleed_reduces_magnitude(self, parts):
        momentum, _, desat = parts
        _select(momentum, ControlMode.CMGS)
        momentum.cmgs[0].current_angular_momentum = np.array([12.0, 0, 0])

        result = desat.start()
        assert result.fired_thrusters == PITCH_MINUS_THRUSTERS
        assert np.allclose(
            momentum.cmgs[0].current_angular_momentum,
            [12.0 - 2 * Constants.CMG_DESAT_BLEED, 0, 0],
        )
        assert desat.active

    def test_hysteresis_runs_down_to_stop_level(self, parts):
        momentum, _, desat = parts
        _select(momentum, ControlMode.CMGS)
        momentum.cmgs[0].current_angular_momentum = np.array([10.1, 0, 0])

        desat.start()
        passes = 0
        while desat.active and passes < 1000:
            desat.step(Constants.MOMENTUM_DT)
            passes += 1

        magnitude = momentum.cmgs[0].momentum_magnitude
        assert magnitude < Constants.CMG_DESAT_STOP
        assert magnitude > Constants.CMG_DESAT_STOP - 2 * Constants.CMG_DESAT_BLEED - 1e-9

    def test_misaligned_momentum_fires_nothing(self, parts):
        momentum, _, desat = parts
        _select(momentum, ControlMode.CMGS)
        # Opposing direction splits evenly; no single lever arm passes 0.5
        momentum.cmgs[0].current_angular_momentum = np.array([10.0, 10.0, 10.0])

        result = desat.start()
        assert result.fired_thrusters == []
        assert desat.active
