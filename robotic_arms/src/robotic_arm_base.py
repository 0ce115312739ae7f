#!/usr/bin/env python3
"""
Robotic Arm Base Module

Abstract contract shared by every robot model. A robotic arm converts between
joint space and Cartesian pose using two independent solver families:

- GEOMETRIC: closed-form chain equations, possibly several IK solutions
- TRAC: numerical iterative solver, at most one IK solution

The two families number the joints differently. `reorder_joints` applies the
fixed permutation between the two orderings, on plain joint vectors and on
full joint states (position, velocity, torque).

Author: Robot Control Team
"""

import numpy as np
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Union

from . import math_tools

logger = logging.getLogger(__name__)


class RoboticArmError(Exception):
    """Base exception for robotic arm errors."""
    pass


class JointDimensionError(RoboticArmError, ValueError):
    """Raised when a joint vector does not match the robot joint count."""
    pass


class UnknownRobotModelError(RoboticArmError, KeyError):
    """Raised when no robot model matches a (name, version) pair."""

    def __str__(self):
        return str(self.args[0]) if self.args else "no such robot model"


class SolverFamily(Enum):
    """Kinematics solver families."""
    GEOMETRIC = "geometric"
    TRAC = "trac"


class ROSVersion(Enum):
    """Supported ROS protocol versions."""
    ROS1_NOETIC = "noetic"
    ROS2_HUMBLE = "humble"


ROS_VERSIONS_MAP = {version.value: version for version in ROSVersion}


@dataclass(frozen=True, eq=False)
class Pose:
    """End-effector pose: unit quaternion (w, x, y, z) and position."""
    orientation: np.ndarray
    position: np.ndarray

    def __post_init__(self):
        orientation = math_tools.normalize_quaternion(self.orientation)
        position = np.array(self.position, dtype=float).reshape(3)
        orientation.setflags(write=False)
        position.setflags(write=False)
        object.__setattr__(self, 'orientation', orientation)
        object.__setattr__(self, 'position', position)

    @classmethod
    def from_matrix(cls, T: np.ndarray) -> "Pose":
        """Build a pose from a 4x4 homogeneous transformation matrix."""
        return cls(math_tools.matrix_to_quaternion(T[:3, :3]), T[:3, 3])

    def to_matrix(self) -> np.ndarray:
        """4x4 homogeneous transformation matrix of this pose."""
        T = np.eye(4)
        T[:3, :3] = math_tools.quaternion_to_matrix(self.orientation)
        T[:3, 3] = self.position
        return T

    def is_equivalent(self, other: "Pose", tolerance: float) -> bool:
        """Compare orientation by rotation angle and position by distance."""
        return (math_tools.are_quat_equivalent(self.orientation, other.orientation, tolerance)
                and math_tools.are_pos_equivalent(self.position, other.position, tolerance))


@dataclass
class JointState:
    """Per-joint position, velocity and torque channels."""
    position: List[float]
    velocity: List[float] = field(default_factory=list)
    torque: List[float] = field(default_factory=list)


@dataclass
class IKResult:
    """Inverse kinematics outcome. Failure is reported, never raised."""
    success: bool
    solutions: List[np.ndarray] = field(default_factory=list)

    @property
    def num_solutions(self) -> int:
        return len(self.solutions)


class RoboticArmBase(ABC):
    """
    Kinematic model of a robotic arm.

    Subclasses provide the chain parameters, the joint permutation between the
    two solver families and the per-family FK/IK implementations. The object
    is logically immutable once constructed.
    """

    def __init__(self, name: str, ros_version: ROSVersion, joint_names: Sequence[str],
                 joint_limits: np.ndarray):
        self.name = name
        self.ros_version = ros_version
        self.joint_names = list(joint_names)
        self._n_joints = len(self.joint_names)
        self._joint_limits = np.asarray(joint_limits, dtype=float)
        self._joint_limits.setflags(write=False)

    @property
    def n_joints(self) -> int:
        """Number of actuated joints."""
        return self._n_joints

    @property
    def joint_limits(self) -> np.ndarray:
        """Joint limits (2 x n_joints, radians) in geometric ordering."""
        return self._joint_limits

    @property
    @abstractmethod
    def joint_permutation(self) -> List[int]:
        """Index permutation between geometric and trac orderings (self-inverse)."""

    @property
    def trac_joint_names(self) -> List[str]:
        """Joint names in the trac (native) ordering."""
        return [self.joint_names[i] for i in self.joint_permutation]

    def _check_joint_vector(self, joint_positions) -> np.ndarray:
        q = np.asarray(joint_positions, dtype=float).reshape(-1)
        if q.shape[0] != self.n_joints:
            raise JointDimensionError(
                f"{self.name} expects {self.n_joints} joint values, got {q.shape[0]}")
        return q

    def reorder_joints(self, state: Union[JointState, Sequence[float], np.ndarray]):
        """
        Apply the fixed joint permutation between the two solver orderings.

        Works on a JointState (all channels permuted the same way) or on a plain
        joint vector. Returns a new object, the input is left untouched.
        Applying it twice restores the original ordering.
        """
        perm = self.joint_permutation

        if isinstance(state, JointState):
            return JointState(
                position=list(self._check_joint_vector(state.position)[perm]),
                velocity=self._permute_channel(state.velocity, perm),
                torque=self._permute_channel(state.torque, perm)
            )

        q = self._check_joint_vector(state)
        return q[perm]

    def _permute_channel(self, values: Sequence[float], perm: List[int]) -> List[float]:
        # Empty channels are allowed (e.g. no torque feedback)
        if len(values) == 0:
            return []
        if len(values) != self.n_joints:
            raise JointDimensionError(
                f"{self.name} joint state channel has {len(values)} values, expected {self.n_joints}")
        return [values[i] for i in perm]

    def forward_kinematics(self, joint_positions, family: SolverFamily = SolverFamily.TRAC) -> Pose:
        """
        Compute the end-effector pose.

        Args:
            joint_positions: Joint vector in the ordering of `family`
            family: Solver family to evaluate with

        Raises:
            JointDimensionError: If the joint vector length differs from n_joints
        """
        q = self._check_joint_vector(joint_positions)
        if family == SolverFamily.GEOMETRIC:
            return self._fk_geo(q)
        return self._fk_trac(q)

    def inverse_kinematics(self, pose: Pose, family: SolverFamily = SolverFamily.TRAC,
                           q_init: Optional[np.ndarray] = None) -> IKResult:
        """
        Compute joint configurations reaching `pose`.

        GEOMETRIC may return several solutions, TRAC at most one. An unreachable
        pose gives IKResult(success=False) with no solutions.

        Args:
            pose: Target end-effector pose
            family: Solver family
            q_init: Optional seed for the numerical solver, in trac ordering
        """
        if family == SolverFamily.GEOMETRIC:
            return self._ik_geo(pose)
        if q_init is not None:
            q_init = self._check_joint_vector(q_init)
        return self._ik_trac(pose, q_init)

    # Per-family shortcuts
    def get_fk_geo(self, joint_positions) -> Pose:
        return self.forward_kinematics(joint_positions, SolverFamily.GEOMETRIC)

    def get_fk_trac(self, joint_positions) -> Pose:
        return self.forward_kinematics(joint_positions, SolverFamily.TRAC)

    def get_ik_geo(self, pose: Pose) -> IKResult:
        return self.inverse_kinematics(pose, SolverFamily.GEOMETRIC)

    def get_ik_trac(self, pose: Pose, q_init: Optional[np.ndarray] = None) -> IKResult:
        return self.inverse_kinematics(pose, SolverFamily.TRAC, q_init)

    @abstractmethod
    def _fk_geo(self, q: np.ndarray) -> Pose:
        """Closed-form FK, q in geometric ordering."""

    @abstractmethod
    def _fk_trac(self, q: np.ndarray) -> Pose:
        """Numerical-family FK, q in trac ordering."""

    @abstractmethod
    def _ik_geo(self, pose: Pose) -> IKResult:
        """Closed-form IK, solutions in geometric ordering."""

    @abstractmethod
    def _ik_trac(self, pose: Pose, q_init: Optional[np.ndarray]) -> IKResult:
        """Numerical IK, solution in trac ordering."""

    def __repr__(self):
        return f"{self.__class__.__name__}(name={self.name!r}, ros_version={self.ros_version.value!r})"
