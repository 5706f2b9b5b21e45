"""
Orientation Utilities

Quaternion helpers for the [w, x, y, z] convention used throughout the
package. scipy's Rotation works in [x, y, z, w]; conversions happen here.
"""

from typing import Iterable

import numpy as np
from scipy.spatial.transform import Rotation


def _as_quat(quat_wxyz: Iterable[float]) -> np.ndarray:
    quat = np.array(list(quat_wxyz), dtype=float)
    if quat.shape != (4,):
        raise ValueError(f"Expected 4-element quaternion, got shape {quat.shape}")
    return quat


def quat_wxyz_to_rotation(quat_wxyz: Iterable[float]) -> Rotation:
    """Build a scipy Rotation from quaternion [w, x, y, z]."""
    quat = _as_quat(quat_wxyz)
    return Rotation.from_quat([quat[1], quat[2], quat[3], quat[0]])


def quat_wxyz_from_rotation(rotation: Rotation) -> np.ndarray:
    """Convert a scipy Rotation to quaternion [w, x, y, z]."""
    quat_xyzw = rotation.as_quat()
    return np.array([quat_xyzw[3], quat_xyzw[0], quat_xyzw[1], quat_xyzw[2]], dtype=float)


def euler_xyz_to_quat_wxyz(euler_xyz: Iterable[float], degrees: bool = False) -> np.ndarray:
    """
    Convert 3D Euler angles (roll, pitch, yaw) to quaternion [w, x, y, z].
    """
    euler = np.array(list(euler_xyz), dtype=float)
    if euler.shape != (3,):
        raise ValueError(f"Expected 3-element Euler angles, got shape {euler.shape}")
    return quat_wxyz_from_rotation(Rotation.from_euler("xyz", euler, degrees=degrees))


def normalize_quat(quat_wxyz: Iterable[float]) -> np.ndarray:
    quat = _as_quat(quat_wxyz)
    norm = np.linalg.norm(quat)
    if norm < 1e-12:
        return np.array([1.0, 0.0, 0.0, 0.0])
    return quat / norm


def rotation_matrix(quat_wxyz: Iterable[float]) -> np.ndarray:
    """Body-to-world rotation matrix."""
    return quat_wxyz_to_rotation(normalize_quat(quat_wxyz)).as_matrix()


def rotate_vector(quat_wxyz: Iterable[float], vector: Iterable[float]) -> np.ndarray:
    """Rotate a body-frame vector into the world frame."""
    return rotation_matrix(quat_wxyz) @ np.asarray(list(vector), dtype=float)


def quat_angle_error(q_target: Iterable[float], q_current: Iterable[float]) -> float:
    """
    Compute the shortest-angle error between two quaternions (radians).

    ``q`` and ``-q`` describe the same attitude, hence the absolute dot.
    """
    q1 = normalize_quat(q_target)
    q2 = normalize_quat(q_current)
    dot = float(np.clip(np.abs(np.dot(q1, q2)), 0.0, 1.0))
    return 2.0 * np.arccos(dot)


def integrate_quaternion(
    quat_wxyz: Iterable[float], angular_velocity_world: Iterable[float], dt: float
) -> np.ndarray:
    """
    Advance an attitude by a world-frame angular velocity over ``dt``.

    Uses q_dot = 0.5 * [0, w] * q followed by renormalization.
    """
    q = _as_quat(quat_wxyz)
    wx, wy, wz = np.asarray(list(angular_velocity_world), dtype=float)
    qw, qx, qy, qz = q
    q_dot = 0.5 * np.array(
        [
            -wx * qx - wy * qy - wz * qz,
            wx * qw + wy * qz - wz * qy,
            wy * qw + wz * qx - wx * qz,
            wz * qw + wx * qy - wy * qx,
        ]
    )
    return normalize_quat(q + q_dot * dt)
