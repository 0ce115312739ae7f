#!/usr/bin/env python3
"""
Math Tools Module

Stateless numeric helpers shared by the kinematics solvers, the ROI engine
and the test suites. Quaternions are numpy arrays in (w, x, y, z) order.

Author: Robot Control Team
"""

import numpy as np
from numpy.linalg import norm
from typing import Tuple
from scipy.spatial.transform import Rotation

IDENTITY_QUATERNION = np.array([1.0, 0.0, 0.0, 0.0])
DEFAULT_AXIS = np.array([1.0, 0.0, 0.0])


def normalize_quaternion(q: np.ndarray) -> np.ndarray:
    """Return q scaled to unit norm."""
    q = np.asarray(q, dtype=float)
    n = norm(q)
    if n < 1e-12:
        return IDENTITY_QUATERNION.copy()
    return q / n


def quaternion_conjugate(q: np.ndarray) -> np.ndarray:
    """Conjugate of a (w, x, y, z) quaternion."""
    q = np.asarray(q, dtype=float)
    return np.array([q[0], -q[1], -q[2], -q[3]])


def quaternion_multiply(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    """Hamilton product q1 * q2."""
    w1, x1, y1, z1 = q1
    w2, x2, y2, z2 = q2
    return np.array([
        w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
        w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
        w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2
    ])


def quaternion_from_axis_angle(axis: np.ndarray, angle: float) -> np.ndarray:
    """Unit quaternion for a rotation of `angle` radians about `axis`."""
    axis = np.asarray(axis, dtype=float)
    axis = axis / norm(axis)
    half = angle / 2.0
    return np.array([np.cos(half), *(axis * np.sin(half))])


def quaternion_to_matrix(q: np.ndarray) -> np.ndarray:
    """Convert (w, x, y, z) quaternion to a 3x3 rotation matrix."""
    w, x, y, z = normalize_quaternion(q)
    return Rotation.from_quat([x, y, z, w]).as_matrix()


def matrix_to_quaternion(R: np.ndarray) -> np.ndarray:
    """Convert a 3x3 rotation matrix to a (w, x, y, z) quaternion with w >= 0."""
    x, y, z, w = Rotation.from_matrix(R).as_quat()
    q = np.array([w, x, y, z])
    return -q if q[0] < 0 else q


def rotate_vector(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Rotate 3D vector v by quaternion q."""
    return quaternion_to_matrix(q) @ np.asarray(v, dtype=float)


def quaternion_to_axis_angle(q: np.ndarray) -> Tuple[np.ndarray, float]:
    """
    Extract the axis-angle representation of a quaternion.

    Near the identity rotation the axis is not well defined and defaults
    to (1, 0, 0).

    Args:
        q: Quaternion (w, x, y, z), normalized internally

    Returns:
        axis: Unit rotation axis
        angle: Rotation angle in radians, in [0, 2π]
    """
    w, x, y, z = normalize_quaternion(q)
    w = np.clip(w, -1.0, 1.0)
    angle = 2.0 * np.arccos(w)

    sin_half_angle = np.sqrt(1.0 - w * w)
    if sin_half_angle < 1e-6:
        axis = DEFAULT_AXIS.copy()
    else:
        axis = np.array([x, y, z]) / sin_half_angle

    return axis, float(angle)


def calculate_rotation_difference(q1: np.ndarray, q2: np.ndarray) -> float:
    """
    Angle of the relative rotation between two quaternions.

    Computed from the scalar part of q_rel = conj(q1) * q2. The absolute
    value of the scalar part is used since q and -q encode the same rotation.

    Returns:
        Angle in radians, in [0, π]
    """
    q_rel = quaternion_multiply(quaternion_conjugate(normalize_quaternion(q1)),
                                normalize_quaternion(q2))
    w_rel = np.clip(abs(q_rel[0]), 0.0, 1.0)
    return float(2.0 * np.arccos(w_rel))


def calculate_axis_angle_difference(q1: np.ndarray, q2: np.ndarray) -> Tuple[np.ndarray, float]:
    """Axis-angle of the relative rotation conj(q1) * q2."""
    q_rel = quaternion_multiply(quaternion_conjugate(normalize_quaternion(q1)),
                                normalize_quaternion(q2))
    return quaternion_to_axis_angle(q_rel)


def are_quat_equivalent(q1: np.ndarray, q2: np.ndarray, tolerance: float) -> bool:
    """True if q1 and q2 describe the same rotation within `tolerance` radians."""
    return calculate_rotation_difference(q1, q2) < tolerance


def are_pos_equivalent(p1: np.ndarray, p2: np.ndarray, tolerance: float) -> bool:
    """True if the Euclidean distance between p1 and p2 is below `tolerance`."""
    return float(norm(np.asarray(p1, dtype=float) - np.asarray(p2, dtype=float))) < tolerance


def wrap_to_pi(angles):
    """Wrap angles to (-π, π]."""
    wrapped = np.pi - np.mod(np.pi - np.asarray(angles, dtype=float), 2.0 * np.pi)
    return wrapped


def joint_distance(q1: np.ndarray, q2: np.ndarray) -> float:
    """Largest per-joint angular difference, modulo 2π."""
    diff = wrap_to_pi(np.asarray(q1, dtype=float) - np.asarray(q2, dtype=float))
    return float(np.max(np.abs(diff)))
