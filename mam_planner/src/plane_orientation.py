#!/usr/bin/env python3
"""
Plane-Constrained Orientation

Derives a target end-effector orientation from three points (waypoint start,
waypoint end, robot base) and a fixed reference vector:

1. n = normalize((start - end) x (start - base)), the normal of their plane
2. v' = v rotated by theta about n, with v = start - end
3. the rotation mapping the reference vector onto v' (axis r x v',
   angle acos(r.v' / |r||v'|)), returned as a (w, x, y, z) quaternion

Author: Robot Control Team
"""

import numpy as np
from numpy.linalg import norm
import logging
from typing import Sequence
from scipy.spatial.transform import Rotation

from robotic_arms.src import math_tools

logger = logging.getLogger(__name__)

# Cross products below this fraction of |a||b| are treated as zero
DEGENERACY_EPS = 1e-9


def _orthogonal_axis(r: np.ndarray) -> np.ndarray:
    """Unit axis orthogonal to r, built from the basis vector least aligned with it."""
    basis = np.eye(3)[np.argmin(np.abs(r))]
    axis = np.cross(r, basis)
    return axis / norm(axis)


def rotate_vector_in_plane(points: Sequence[np.ndarray], ref_vector: np.ndarray,
                           theta: float = 0.0) -> np.ndarray:
    """
    Orientation aligning `ref_vector` with the in-plane waypoint direction.

    Args:
        points: (pos_start, pos_end, robot_base)
        ref_vector: Reference direction, non-zero
        theta: In-plane rotation of the waypoint direction (rad)

    Returns:
        Unit quaternion (w, x, y, z). Identity when the three points are
        collinear or the waypoint has zero length.
    """
    pos_start, pos_end, robot_base = (np.asarray(p, dtype=float) for p in points)
    r = np.asarray(ref_vector, dtype=float)

    v = pos_start - pos_end
    w = pos_start - robot_base
    normal = np.cross(v, w)
    if norm(v) == 0.0 or norm(normal) <= DEGENERACY_EPS * norm(v) * norm(w):
        logger.debug("Waypoint and robot base are collinear, plane undefined: identity orientation")
        return math_tools.IDENTITY_QUATERNION.copy()
    normal /= norm(normal)

    v_rot = Rotation.from_rotvec(normal * theta).apply(v)

    cos_angle = np.dot(r, v_rot) / (norm(r) * norm(v_rot))
    angle = float(np.arccos(np.clip(cos_angle, -1.0, 1.0)))
    axis = np.cross(r, v_rot)

    if norm(axis) < DEGENERACY_EPS * norm(r) * norm(v_rot):
        if cos_angle > 0:
            return math_tools.IDENTITY_QUATERNION.copy()
        logger.debug("Reference vector antiparallel to waypoint direction")
        return math_tools.quaternion_from_axis_angle(_orthogonal_axis(r), np.pi)

    return math_tools.quaternion_from_axis_angle(axis, angle)
