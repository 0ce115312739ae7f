#!/usr/bin/env python3
"""
Geometric Kinematics Module for UR-family Manipulators

Closed-form forward and inverse kinematics for 6-DOF arms with the Universal
Robots topology (three parallel middle axes, spherical-offset wrist), using
standard Denavit-Hartenberg parameters:

    A_i = Rz(theta_i) · Tz(d_i) · Tx(a_i) · Rx(alpha_i)

The inverse returns up to eight configurations (shoulder left/right,
wrist up/down, elbow up/down). Every candidate is checked against the forward
chain before being returned.

Author: Robot Control Team
"""

import numpy as np
from numpy.linalg import norm, inv
import logging
from dataclasses import dataclass
from typing import List, Tuple

from .math_tools import wrap_to_pi

logger = logging.getLogger(__name__)

# Domain slack for arccos/arcsin arguments (floating point round-off)
_DOMAIN_EPS = 1e-9


@dataclass(frozen=True)
class DHParameters:
    """Standard DH parameters of a UR-type chain (meters)."""
    d1: float
    a2: float
    a3: float
    d4: float
    d5: float
    d6: float

    @property
    def d(self) -> Tuple[float, ...]:
        return (self.d1, 0.0, 0.0, self.d4, self.d5, self.d6)

    @property
    def a(self) -> Tuple[float, ...]:
        return (0.0, self.a2, self.a3, 0.0, 0.0, 0.0)

    @property
    def alpha(self) -> Tuple[float, ...]:
        return (np.pi / 2, 0.0, 0.0, np.pi / 2, -np.pi / 2, 0.0)


def dh_transform(theta: float, d: float, a: float, alpha: float) -> np.ndarray:
    """Homogeneous transform of one DH link."""
    ct, st = np.cos(theta), np.sin(theta)
    ca, sa = np.cos(alpha), np.sin(alpha)
    return np.array([
        [ct, -st * ca,  st * sa, a * ct],
        [st,  ct * ca, -ct * sa, a * st],
        [0.,       sa,       ca,      d],
        [0.,       0.,       0.,     1.]
    ])


class UrGeometricSolver:
    """Closed-form kinematics for a UR-type chain, joints in chain order."""

    n_joints = 6

    def __init__(self, dh: DHParameters, verify_tolerance: float = 1e-6):
        """
        Args:
            dh: Chain parameters
            verify_tolerance: Max position/rotation residual accepted for an IK candidate
        """
        self.dh = dh
        self.verify_tolerance = verify_tolerance

    def link_transforms(self, q: np.ndarray) -> List[np.ndarray]:
        """Individual DH link transforms A_1..A_6."""
        return [dh_transform(q[i], self.dh.d[i], self.dh.a[i], self.dh.alpha[i])
                for i in range(self.n_joints)]

    def forward(self, q: np.ndarray) -> np.ndarray:
        """
        Base to flange transform.

        Args:
            q: Joint angles (6,) in chain order

        Returns:
            4x4 homogeneous transformation matrix
        """
        T = np.eye(4)
        for A in self.link_transforms(q):
            T = T @ A
        return T

    def inverse(self, T: np.ndarray) -> List[np.ndarray]:
        """
        All closed-form solutions reaching T.

        Args:
            T: Target 4x4 flange pose in the base frame

        Returns:
            List of joint vectors wrapped to (-π, π]; empty if unreachable
        """
        dh = self.dh
        R, p = T[:3, :3], T[:3, 3]
        candidates = []

        # Wrist center: origin of frame 5
        p05 = p - dh.d6 * R[:, 2]
        r = np.hypot(p05[0], p05[1])
        if r < abs(dh.d4) - _DOMAIN_EPS or r < 1e-12:
            logger.debug("Wrist center inside the shoulder cylinder, no solution")
            return []

        psi = np.arctan2(p05[1], p05[0])
        phi = np.arccos(np.clip(dh.d4 / r, -1.0, 1.0))

        for theta1 in (psi + phi + np.pi / 2, psi - phi + np.pi / 2):
            s1, c1 = np.sin(theta1), np.cos(theta1)

            c5 = (p[0] * s1 - p[1] * c1 - dh.d4) / dh.d6
            if abs(c5) > 1.0 + _DOMAIN_EPS:
                continue
            acos5 = np.arccos(np.clip(c5, -1.0, 1.0))

            for theta5 in (acos5, -acos5):
                s5 = np.sin(theta5)
                if abs(s5) < 1e-10:
                    # Wrist singularity: joints 4 and 6 are aligned, pin joint 6
                    theta6 = 0.0
                else:
                    theta6 = np.arctan2((-R[0, 1] * s1 + R[1, 1] * c1) / s5,
                                        (R[0, 0] * s1 - R[1, 0] * c1) / s5)

                candidates.extend(self._solve_planar(T, theta1, theta5, theta6))

        return self._filter_solutions(T, candidates)

    def _solve_planar(self, T: np.ndarray, theta1: float, theta5: float,
                      theta6: float) -> List[np.ndarray]:
        """Solve joints 2-4, which rotate about parallel axes."""
        dh = self.dh
        A1 = dh_transform(theta1, dh.d[0], dh.a[0], dh.alpha[0])
        A5 = dh_transform(theta5, dh.d[4], dh.a[4], dh.alpha[4])
        A6 = dh_transform(theta6, dh.d[5], dh.a[5], dh.alpha[5])

        T14 = inv(A1) @ T @ inv(A5 @ A6)
        x, y = T14[0, 3], T14[1, 3]

        c3 = (x * x + y * y - dh.a2 ** 2 - dh.a3 ** 2) / (2.0 * dh.a2 * dh.a3)
        if abs(c3) > 1.0 + _DOMAIN_EPS:
            return []
        acos3 = np.arccos(np.clip(c3, -1.0, 1.0))

        solutions = []
        for theta3 in (acos3, -acos3):
            theta2 = np.arctan2(y, x) - np.arctan2(dh.a3 * np.sin(theta3),
                                                   dh.a2 + dh.a3 * np.cos(theta3))
            theta4 = np.arctan2(T14[1, 0], T14[0, 0]) - theta2 - theta3
            solutions.append(np.array([theta1, theta2, theta3, theta4, theta5, theta6]))
        return solutions

    def _filter_solutions(self, T: np.ndarray, candidates: List[np.ndarray]) -> List[np.ndarray]:
        """Wrap, verify against FK and drop duplicates."""
        solutions = []
        for q in candidates:
            q = wrap_to_pi(q)
            T_check = self.forward(q)
            pos_err = norm(T_check[:3, 3] - T[:3, 3])
            rot_err = norm(T_check[:3, :3] - T[:3, :3])
            if pos_err > self.verify_tolerance or rot_err > self.verify_tolerance:
                logger.debug(f"Discarding geometric candidate (pos_err={pos_err:.2e}, rot_err={rot_err:.2e})")
                continue
            if any(np.allclose(q, other, atol=1e-9) for other in solutions):
                continue
            solutions.append(q)
        return solutions
