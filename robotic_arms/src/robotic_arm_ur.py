#!/usr/bin/env python3
"""
Universal Robots Arm Models

Concrete robotic arms for the UR family. All variants share the same
topology and differ only by their DH chain parameters.

Joint orderings:
- geometric (chain order): shoulder_pan, shoulder_lift, elbow, wrist_1, wrist_2, wrist_3
- trac (ROS joint_states order): elbow, shoulder_lift, shoulder_pan, wrist_1, wrist_2, wrist_3

Author: Robot Control Team
"""

import numpy as np
import logging
from typing import List, Optional, Dict, Any

from .robotic_arm_base import RoboticArmBase, ROSVersion, Pose, IKResult
from .forward_kinematic import ForwardKinematics
from .geometric_solver import DHParameters, UrGeometricSolver
from .inverse_kinematic import NumericalIK

logger = logging.getLogger(__name__)


class RoboticArmUr(RoboticArmBase):
    """Base class of the UR-family arms."""

    ROBOT_NAME = ""
    DH: Optional[DHParameters] = None
    JOINT_NAMES = [
        "shoulder_pan_joint",
        "shoulder_lift_joint",
        "elbow_joint",
        "wrist_1_joint",
        "wrist_2_joint",
        "wrist_3_joint"
    ]

    def __init__(self, ros_version: ROSVersion = ROSVersion.ROS1_NOETIC,
                 config_path: Optional[str] = None, trac_solver=None,
                 ik_params: Optional[Dict[str, Any]] = None):
        """
        Args:
            ros_version: ROS protocol version the arm is driven through
            config_path: Joint limits YAML file (package default if None)
            trac_solver: Numerical IK solver with a `solve(T, q_init)` method
                         working in chain order (NumericalIK if None)
            ik_params: Parameter overrides for the default numerical solver
        """
        if self.DH is None:
            raise TypeError(f"{self.__class__.__name__} does not define DH parameters")

        self.fk_poe = ForwardKinematics(self.DH, self.ROBOT_NAME, config_path)
        self.geo_solver = UrGeometricSolver(self.DH)
        self.trac_solver = trac_solver or NumericalIK(self.fk_poe, ik_params)

        super().__init__(self.ROBOT_NAME, ros_version, self.JOINT_NAMES, self.fk_poe.joint_limits)

        logger.info(f"{self.ROBOT_NAME} robotic arm created for ROS {ros_version.value}")

    @property
    def joint_permutation(self) -> List[int]:
        # Swap shoulder_pan and elbow
        return [2, 1, 0, 3, 4, 5]

    @property
    def trac_joint_limits(self) -> np.ndarray:
        """Joint limits in trac ordering."""
        return self.joint_limits[:, self.joint_permutation]

    def _within_limits(self, q: np.ndarray) -> bool:
        return bool(np.all(q >= self.joint_limits[0] - 1e-9) and np.all(q <= self.joint_limits[1] + 1e-9))

    def _fk_geo(self, q: np.ndarray) -> Pose:
        return Pose.from_matrix(self.geo_solver.forward(q))

    def _fk_trac(self, q: np.ndarray) -> Pose:
        q_chain = self.reorder_joints(q)
        return Pose.from_matrix(self.fk_poe.compute_forward_kinematics(q_chain))

    def _ik_geo(self, pose: Pose) -> IKResult:
        candidates = self.geo_solver.inverse(pose.to_matrix())
        solutions = [q for q in candidates if self._within_limits(q)]
        if not solutions:
            logger.debug(f"{self.name} geometric IK found no solution")
        return IKResult(success=bool(solutions), solutions=solutions)

    def _ik_trac(self, pose: Pose, q_init: Optional[np.ndarray]) -> IKResult:
        q_init_chain = self.reorder_joints(q_init) if q_init is not None else None
        q_solution, success = self.trac_solver.solve(pose.to_matrix(), q_init_chain)

        if not success or q_solution is None:
            logger.debug(f"{self.name} trac IK did not converge")
            return IKResult(success=False)

        return IKResult(success=True, solutions=[self.reorder_joints(q_solution)])


class RoboticArmUr3e(RoboticArmUr):
    ROBOT_NAME = "Ur3e"
    DH = DHParameters(d1=0.15185, a2=-0.24355, a3=-0.2132, d4=0.13105, d5=0.08535, d6=0.0921)


class RoboticArmUr5(RoboticArmUr):
    ROBOT_NAME = "Ur5"
    DH = DHParameters(d1=0.089159, a2=-0.425, a3=-0.39225, d4=0.10915, d5=0.09465, d6=0.0823)


class RoboticArmUr5e(RoboticArmUr):
    ROBOT_NAME = "Ur5e"
    DH = DHParameters(d1=0.1625, a2=-0.425, a3=-0.3922, d4=0.1333, d5=0.0997, d6=0.0996)


class RoboticArmUr10e(RoboticArmUr):
    ROBOT_NAME = "Ur10e"
    DH = DHParameters(d1=0.1807, a2=-0.6127, a3=-0.57155, d4=0.17415, d5=0.11985, d6=0.11655)
