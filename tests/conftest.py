"""
Pytest configuration and shared fixtures.

This file provides common fixtures and configuration for all tests.
"""

import numpy as np
import pytest

from docking_control.config.constants import Constants
from docking_control.config.simulation_config import SimulationConfig
from docking_control.core.rigid_body import RigidBodyBackend
from docking_control.core.session import SimulationSession
from docking_control.core.vehicle_state import CMG, FuelState, ReactionWheel, Thruster

# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def fresh_config():
    """Provide a fresh default SimulationConfig."""
    return SimulationConfig.create_default()


@pytest.fixture
def raw_vehicle_document():
    """A vehicle upload in the wrapped (historical) layout."""
    return {
        "spacecraftProperties": {
            "dryMass": 8,
            "fuelMass": 2,
            "maxFuelMass": 2,
            "inertia": {"x": 4, "y": 5, "z": 6},
        },
        "thrusters": {
            "thrusters": [
                {
                    "name": "aft",
                    "position": [0, 0, -1],
                    "direction": [0, 0, 2],
                    "thrust": "40",
                    "isp": 220,
                },
                {
                    "name": "broken",
                    "position": [0, 1, -1],
                    "direction": [0, 0, 1],
                    "thrust": "abc",
                    "isp": -5,
                },
            ]
        },
        "reactionwheels": {
            "wheels": [
                {
                    "name": "RW-A",
                    "orientation": {"x": 0, "y": 0, "z": 3},
                    "maxAngularMomentum": 4,
                    "maxTorque": 0.2,
                }
            ]
        },
        "cmg": {"cmg": {"name": "solo", "maxAngularMomentum": 150, "maxTorque": 3}},
    }


# ============================================================================
# Clock Fixtures
# ============================================================================


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


# ============================================================================
# Vehicle Fixtures
# ============================================================================


@pytest.fixture
def body():
    """A 10 kg body with unit-ish inertia at the origin."""
    return RigidBodyBackend(mass=10.0, inertia=(3.0, 3.0, 3.0), dt=Constants.PHYSICS_DT)


@pytest.fixture
def fuel_state():
    return FuelState(dry_mass=5.0, fuel_mass=5.0, max_fuel_mass=5.0)


def make_thruster(index, position, direction, thrust=50.0, isp=300.0, **kwargs):
    return Thruster(
        index=index,
        position=np.array(position, dtype=float),
        direction=np.array(direction, dtype=float),
        thrust=thrust,
        isp=isp,
        **kwargs,
    )


@pytest.fixture
def thruster_factory():
    return make_thruster


@pytest.fixture
def xyz_wheels():
    return [
        ReactionWheel(index=0, orientation=np.array([1.0, 0, 0]), position=np.zeros(3), name="RW-X"),
        ReactionWheel(index=1, orientation=np.array([0, 1.0, 0]), position=np.zeros(3), name="RW-Y"),
        ReactionWheel(index=2, orientation=np.array([0, 0, 1.0]), position=np.zeros(3), name="RW-Z"),
    ]


@pytest.fixture
def single_cmg():
    return [CMG(index=0, name="CMG-1")]


@pytest.fixture
def session(fresh_config, fake_clock):
    """Default-vehicle session driven by a fake clock."""
    return SimulationSession(fresh_config, time_source=fake_clock)


@pytest.fixture
def undocked_session(session):
    """Session that has been undocked and resumed."""
    session.toggle_pause()
    assert not session.paused
    return session


# ============================================================================
# Pytest Configuration Hooks
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
