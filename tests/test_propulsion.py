"""
Unit tests for the propulsion and fuel model.
"""

import logging

import numpy as np
import pytest

from docking_control.config.constants import Constants
from docking_control.core.propulsion import PropulsionFuelModel, mass_flow_rate
from docking_control.core.vehicle_state import FuelState


@pytest.fixture
def propulsion(fuel_state, body):
    body.set_mass(fuel_state.total_mass)
    return PropulsionFuelModel(fuel_state, body)


@pytest.mark.unit
class TestMassFlow:
    def test_rocket_equation_rate(self):
        assert mass_flow_rate(50.0, 300.0) == pytest.approx(50.0 / (300.0 * 9.81))

    def test_higher_isp_burns_less(self):
        assert mass_flow_rate(50.0, 400.0) < mass_flow_rate(50.0, 200.0)


@pytest.mark.unit
class TestFire:
    def test_nominal_firing(self, propulsion, thruster_factory):
        thruster = thruster_factory(0, [0, 0, -1], [0, 0, 1])
        result = propulsion.fire(thruster, 0.1)

        expected = mass_flow_rate(50.0, 300.0) * 0.1
        assert result.fired and result.active
        assert result.reason is None
        assert result.fuel_consumed == pytest.approx(expected)
        assert propulsion.fuel.fuel_mass == pytest.approx(5.0 - expected)
        assert propulsion.body.mass == pytest.approx(10.0 - expected)
        assert np.allclose(propulsion.body.accumulated_force, [0, 0, 50])
        assert thruster.active

    def test_offset_thruster_adds_torque(self, propulsion, thruster_factory):
        thruster = thruster_factory(0, [0, 0.7, -1], [0, 0, 1])
        propulsion.fire(thruster, 0.1)
        assert np.allclose(propulsion.body.accumulated_torque, [35, 0, 0])

    def test_throttle_scales_force_and_fuel(self, propulsion, thruster_factory):
        thruster = thruster_factory(0, [0, 0, 0], [1, 0, 0])
        result = propulsion.fire(thruster, 1.0, throttle=0.5)
        assert np.allclose(propulsion.body.accumulated_force, [25, 0, 0])
        assert result.fuel_consumed == pytest.approx(0.5 * mass_flow_rate(50.0, 300.0))

    @pytest.mark.parametrize("throttle, clamped", [(2.0, 1.0), (-1.0, 0.0)])
    def test_throttle_clamped(self, propulsion, thruster_factory, throttle, clamped):
        thruster = thruster_factory(0, [0, 0, 0], [1, 0, 0])
        propulsion.fire(thruster, 1.0, throttle=throttle)
        assert propulsion.body.accumulated_force[0] == pytest.approx(50.0 * clamped)

    def test_negative_dt_consumes_nothing(self, propulsion, thruster_factory):
        thruster = thruster_factory(0, [0, 0, 0], [1, 0, 0])
        result = propulsion.fire(thruster, -1.0)
        assert result.fired
        assert result.fuel_consumed == 0.0
        assert propulsion.fuel.fuel_mass == 5.0

    def test_out_of_fuel(self, body, thruster_factory):
        model = PropulsionFuelModel(FuelState(5.0, 0.0, 5.0), body)
        thruster = thruster_factory(0, [0, 0, 0], [1, 0, 0], active=True)
        result = model.fire(thruster, 0.1)
        assert not result.fired
        assert result.reason == "out of fuel"
        assert not thruster.active
        assert np.allclose(body.accumulated_force, 0.0)

    def test_last_firing_empties_tank(self, body, thruster_factory):
        fuel = FuelState(5.0, 0.001, 5.0)
        model = PropulsionFuelModel(fuel, body)
        thruster = thruster_factory(0, [0, 0, 0], [1, 0, 0])
        result = model.fire(thruster, 10.0)

        assert result.fired
        assert not result.active
        assert result.reason == "fuel exhausted"
        assert result.fuel_consumed == pytest.approx(0.001)
        assert fuel.fuel_mass == 0.0
        assert body.mass == pytest.approx(5.0)
        # The force of the last firing still applies
        assert np.allclose(body.accumulated_force, [50, 0, 0])

        again = model.fire(thruster, 0.1)
        assert again.reason == "out of fuel"

    @pytest.mark.parametrize("thrust, isp", [(0.0, 300.0), (50.0, 0.0), (float("nan"), 300.0)])
    def test_invalid_performance_rejected(self, propulsion, thruster_factory, thrust, isp, caplog):
        thruster = thruster_factory(3, [0, 0, 0], [1, 0, 0], thrust=thrust, isp=isp)
        with caplog.at_level(logging.WARNING):
            result = propulsion.fire(thruster, 0.1)
        assert not result.fired
        assert result.reason == "invalid thrust/isp"
        assert propulsion.fuel.fuel_mass == 5.0
        assert "T3" in caplog.text


@pytest.mark.unit
class TestFuelStatus:
    def test_status_and_reset(self, propulsion, thruster_factory):
        thruster = thruster_factory(0, [0, 0, 0], [1, 0, 0])
        for _ in range(10):
            propulsion.fire(thruster, 1.0)

        status = propulsion.get_fuel_status()
        assert status.fuel_mass < 5.0
        assert status.total_mass == pytest.approx(status.dry_mass + status.fuel_mass)
        assert status.percentage == pytest.approx(status.fuel_mass / 5.0 * 100.0)

        propulsion.reset_fuel()
        assert propulsion.fuel.fuel_mass == 5.0
        assert propulsion.body.mass == pytest.approx(10.0)

    def test_empty_capacity_percentage(self):
        assert FuelState(1.0, 0.0, 0.0).percentage == 0.0

    def test_fuel_fallbacks_match_defaults(self):
        assert Constants.DEFAULT_THRUST == 50.0
        assert Constants.DEFAULT_ISP == 300.0
