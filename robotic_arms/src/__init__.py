#!/usr/bin/env python3
"""
Robotic Arms Package - Source Module

Kinematics abstraction for interchangeable robot models.

This package provides:
- A polymorphic robotic arm contract with two independent solver families
  (closed-form geometric and numerical trac)
- Joint reordering between the two families' joint numbering
- A factory keyed by (robot name, ROS version)
- Quaternion/position math tools and cross-family validation

Author: Robot Control Team
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Robot Control Team"

from .math_tools import are_quat_equivalent, are_pos_equivalent
from .robotic_arm_base import (
    RoboticArmBase, RoboticArmError, JointDimensionError, UnknownRobotModelError,
    SolverFamily, ROSVersion, ROS_VERSIONS_MAP, Pose, JointState, IKResult
)
from .forward_kinematic import ForwardKinematics, ForwardKinematicsError
from .geometric_solver import DHParameters, UrGeometricSolver
from .inverse_kinematic import NumericalIK, InverseKinematicsError
from .robotic_arm_ur import (
    RoboticArmUr, RoboticArmUr3e, RoboticArmUr5, RoboticArmUr5e, RoboticArmUr10e
)
from .robotic_arm_factory import RoboticArmFactory
from .kinematics_validation import KinematicsValidator

__all__ = [
    'are_quat_equivalent',
    'are_pos_equivalent',
    'RoboticArmBase',
    'RoboticArmError',
    'JointDimensionError',
    'UnknownRobotModelError',
    'SolverFamily',
    'ROSVersion',
    'ROS_VERSIONS_MAP',
    'Pose',
    'JointState',
    'IKResult',
    'ForwardKinematics',
    'ForwardKinematicsError',
    'DHParameters',
    'UrGeometricSolver',
    'NumericalIK',
    'InverseKinematicsError',
    'RoboticArmUr',
    'RoboticArmUr3e',
    'RoboticArmUr5',
    'RoboticArmUr5e',
    'RoboticArmUr10e',
    'RoboticArmFactory',
    'KinematicsValidator'
]

# Package metadata
__title__ = "robotic_arms"
__description__ = "Kinematics abstraction for interchangeable robotic arms"
__license__ = "MIT"
