#!/usr/bin/env python3
"""
Forward Kinematics Module for 6-DOF Robot Manipulators

This module implements forward kinematics using the Product of Exponentials (PoE)
formulation with screw theory. It backs the numerical (trac) solver family and is
kept independent from the closed-form DH evaluator so the two can validate each
other.

Key Features:
- Product of Exponentials (PoE) formulation
- Screw axes and home configuration derived from the robot DH chain
- Matrix exponential computation
- Joint limits loaded from YAML configuration

Author: Robot Control Team
"""

import numpy as np
from numpy.linalg import norm
import logging
from typing import Tuple, Optional
import os
import yaml

from .geometric_solver import DHParameters, dh_transform

logger = logging.getLogger(__name__)

class ForwardKinematicsError(Exception):
    """Custom exception for forward kinematics errors."""
    pass

class ForwardKinematics:
    """Forward kinematics implementation using Product of Exponentials."""

    def __init__(self, dh: DHParameters, robot_name: str, config_path: Optional[str] = None):
        """
        Initialize forward kinematics from a DH chain.

        Args:
            dh: DH parameters of the chain
            robot_name: Robot model key in the joint limits file
            config_path: Path to joint limits YAML file
        """
        self.robot_name = robot_name
        self.config_path = config_path or self._get_default_config_path()

        self.S, self.M = self._screw_axes_from_dh(dh)
        self.n_joints = self.S.shape[1]
        self.joint_limits = self._load_joint_limits()

        logger.info(f"Forward kinematics initialized for {robot_name} with {self.n_joints} joints")

    def _get_default_config_path(self) -> str:
        """Get default path to joint limits file."""
        return os.path.join(os.path.dirname(__file__), "..", "config", "joint_limits.yaml")

    def _load_joint_limits_from_config(self) -> dict:
        """Load joint limits of this robot from the configuration file."""
        if not os.path.exists(self.config_path):
            logger.warning(f"Joint limits file not found: {self.config_path}, using default joint limits")
            return {}

        try:
            with open(self.config_path, "r") as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load joint limits from {self.config_path}: {e}")
            return {}

        robots = (config or {}).get('robots', {})
        if self.robot_name not in robots:
            logger.warning(f"Robot {self.robot_name} not found in {self.config_path}, using default joint limits")
            return {}

        logger.debug(f"Joint limits loaded from: {self.config_path}")
        return robots[self.robot_name].get('joint_limits', {}) or {}

    @staticmethod
    def _screw_axes_from_dh(dh: DHParameters) -> Tuple[np.ndarray, np.ndarray]:
        """
        Compute space-frame screw axes and home configuration from DH parameters.

        Joint i rotates about the z axis of DH frame i-1, evaluated at the zero
        configuration.

        Returns:
            S: Screw axes matrix (6 x n_joints), columns [w, v]
            M: Home configuration matrix (4 x 4)
        """
        n_joints = len(dh.d)
        S = np.zeros((6, n_joints))
        T = np.eye(4)

        for i in range(n_joints):
            omega = T[:3, 2]
            p = T[:3, 3]
            S[:, i] = np.hstack([omega, np.cross(p, omega)])
            T = T @ dh_transform(0.0, dh.d[i], dh.a[i], dh.alpha[i])

        return S, T

    def _load_joint_limits(self) -> np.ndarray:
        """Load joint limits from configuration or use defaults."""
        joint_config = self._load_joint_limits_from_config()
        if not joint_config:
            return self._get_default_joint_limits()

        lower_limits = []
        upper_limits = []

        for i in range(self.n_joints):
            joint_name = f'j{i + 1}'
            if joint_name not in joint_config:
                logger.warning(f"Joint {joint_name} not found in config, using ±2π")
                lower_limits.append(-2 * np.pi)
                upper_limits.append(2 * np.pi)
            else:
                joint_limits = joint_config[joint_name]
                # Convert from degrees to radians
                lower_limits.append(np.deg2rad(joint_limits['min']))
                upper_limits.append(np.deg2rad(joint_limits['max']))

        return np.array([lower_limits, upper_limits])

    def _get_default_joint_limits(self) -> np.ndarray:
        """Get default joint limits."""
        return np.vstack([
            np.full(self.n_joints, -2 * np.pi),  # Lower limits
            np.full(self.n_joints, 2 * np.pi)    # Upper limits
        ])

    @staticmethod
    def skew_symmetric(w: np.ndarray) -> np.ndarray:
        """
        Compute skew-symmetric matrix from 3D vector.

        Args:
            w: 3D vector

        Returns:
            3x3 skew-symmetric matrix
        """
        return np.array([
            [0, -w[2], w[1]],
            [w[2], 0, -w[0]],
            [-w[1], w[0], 0]
        ])

    @staticmethod
    def matrix_exp6(xi_theta: np.ndarray) -> np.ndarray:
        """
        Compute matrix exponential of a 6D screw vector.

        Uses the closed-form solution for SE(3) matrix exponential:
        exp([ξ]θ) = [exp([ω]θ)  G·v·θ]
                    [0         1     ]

        Args:
            xi_theta: 6D screw vector [ω·θ, v·θ]

        Returns:
            4x4 homogeneous transformation matrix
        """
        w_theta, v_theta = xi_theta[:3], xi_theta[3:]
        theta = norm(w_theta)

        T = np.eye(4)

        if theta < 1e-12:
            # Pure translation
            T[:3, 3] = v_theta
            return T

        w = w_theta / theta
        v = v_theta / theta
        w_hat = ForwardKinematics.skew_symmetric(w)
        w_hat2 = w_hat @ w_hat

        # Rotation matrix using Rodrigues' formula
        R = np.eye(3) + np.sin(theta) * w_hat + (1 - np.cos(theta)) * w_hat2

        # Translation using G matrix
        G = (np.eye(3) * theta +
             (1 - np.cos(theta)) * w_hat +
             (theta - np.sin(theta)) * w_hat2)
        p = G @ v

        T[:3, :3] = R
        T[:3, 3] = p
        return T

    def compute_forward_kinematics(self, q: np.ndarray) -> np.ndarray:
        """
        Compute forward kinematics using Product of Exponentials.

        T(q) = exp([S₁]q₁) · exp([S₂]q₂) · ... · exp([Sₙ]qₙ) · M

        Args:
            q: Joint angles in radians (n_joints,), chain order

        Returns:
            4x4 homogeneous transformation matrix of end-effector pose

        Raises:
            ForwardKinematicsError: If input dimensions are invalid
        """
        if not isinstance(q, np.ndarray) or q.ndim != 1 or q.shape[0] != self.n_joints:
            raise ForwardKinematicsError(
                f"Input q must be a numpy array of shape ({self.n_joints},), "
                f"got shape {q.shape if hasattr(q, 'shape') else 'invalid'}"
            )

        T = np.eye(4)
        for i in range(self.n_joints):
            T = T @ self.matrix_exp6(self.S[:, i] * q[i])

        return T @ self.M
