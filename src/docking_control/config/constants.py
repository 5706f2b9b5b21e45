"""
System Constants for the Docking Control Core

Read-only physical constants, configuration fallbacks and control
thresholds shared by the propulsion, momentum and docking modules.
These values remain unchanged during execution.

Constant categories:
- Physical: Standard gravity
- Configuration fallbacks: Values substituted for missing/invalid config
- Channel binding: Auto-binding tolerances
- Momentum actuators: Nominal integration step
- Desaturation: Trigger/stop thresholds and throttle fractions
- Docking: Default reference pose and docking envelope
"""

import math


class Constants:
    """
    System-wide constants for the control core.

    This class contains read-only constants that don't change during execution.
    """

    # ========================================================================
    # PHYSICAL CONSTANTS
    # ========================================================================

    G0 = 9.81  # Standard gravity used in the rocket equation (m/s^2)

    # ========================================================================
    # CONFIGURATION FALLBACKS
    # ========================================================================

    DEFAULT_THRUST = 50.0  # N, substituted for invalid thrust values
    DEFAULT_ISP = 300.0  # s, substituted for invalid ISP values

    DEFAULT_RW_MAX_MOMENTUM = 10.0  # N*m*s
    DEFAULT_RW_MAX_TORQUE = 0.5  # N*m
    DEFAULT_CMG_MAX_MOMENTUM = 200.0  # N*m*s
    DEFAULT_CMG_MAX_TORQUE = 5.0  # N*m

    DEFAULT_DRY_MASS = 5.0  # kg
    DEFAULT_FUEL_MASS = 5.0  # kg
    DEFAULT_INERTIA = (3.0, 3.0, 3.0)  # kg*m^2 (principal axes)

    # ========================================================================
    # CHANNEL BINDING
    # ========================================================================

    TRANSLATION_ANGLE_DEG = 90.0 - 25.0
    TRANSLATION_TOLERANCE = math.cos(math.radians(TRANSLATION_ANGLE_DEG))
    ROTATION_DEADBAND = 0.025  # N*m per N of thrust (lever arm magnitude)

    # ========================================================================
    # MOMENTUM ACTUATORS
    # ========================================================================

    MOMENTUM_DT = 1.0 / 60.0  # Nominal momentum bookkeeping step (s)
    FALLBACK_AXIS_TORQUE = 0.5  # N*m, used when the active bank is empty

    # ========================================================================
    # DESATURATION
    # ========================================================================

    RW_DESAT_TRIGGER = 0.1  # Total wheel momentum needed to fire thrusters
    RW_DESAT_STOP = 0.5  # Peak wheel momentum below which desat ends
    RW_DESAT_THROTTLE = 0.5  # Fraction of nominal thrust
    RW_DESAT_BLEED = 0.01  # Momentum bled per unit alignment per firing

    CMG_DESAT_TRIGGER = 10.0
    CMG_DESAT_STOP = 5.0
    CMG_DESAT_THROTTLE = 0.3
    CMG_DESAT_BLEED = 0.02

    DESAT_ALIGNMENT_THRESHOLD = 0.5

    # ========================================================================
    # DOCKING
    # ========================================================================

    DOCKING_POSITION = (0.0, -3.0, 5.5)
    # -90 deg about +X, quaternion [w, x, y, z]
    DOCKING_ORIENTATION = (
        math.cos(-math.pi / 4),
        math.sin(-math.pi / 4),
        0.0,
        0.0,
    )
    DOCKING_BOX_SIZE = 0.1  # m, half-size of the docking box per axis
    DOCKING_ANGLE_THRESHOLD = 3.0  # deg
    MAX_ANGULAR_SPEED = 1.0  # deg/s
    MAX_LATERAL_SPEED = 0.1  # m/s in the X-Z plane
    MAX_AXIAL_SPEED = 1.0  # m/s, upper bound on signed Z velocity

    # ========================================================================
    # TIMING
    # ========================================================================

    PHYSICS_DT = 1.0 / 170.0  # Rigid-body sub-step (s)
    DEFAULT_FIRING_DURATION = 0.1  # s, timed firing pulse
    DEFAULT_TORQUE_PERCENTAGE = 50  # % of bank max torque per axis
