#!/usr/bin/env python3
"""
Kinematics Cross-Validation Utilities

No ground truth is available at this layer, so correctness of a robotic arm is
established by making its two solver families check each other:

- Forward comparison: FK(J, geometric) against FK(reorder(J), trac)
- Inverse comparison: solutions of each family re-evaluated through both FKs
- Solver coherency: FK(IK(pose)) ≈ pose for each family
- Round trip: IK(FK(J)) ≈ J for each family

Author: Robot Control Team
"""

import numpy as np
from typing import List, Dict, Any, Optional
import logging
import time

from . import math_tools
from .robotic_arm_base import RoboticArmBase, Pose, SolverFamily

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 2e-4

class KinematicsValidator:
    """Cross-validation of the solver families of a robotic arm."""

    def __init__(self, arm: RoboticArmBase, tolerance: float = DEFAULT_TOLERANCE,
                 seed: Optional[int] = None):
        """
        Args:
            arm: Robotic arm under test
            tolerance: Position (m) and rotation (rad) tolerance
            seed: Seed of the random generator used for samples
        """
        self.arm = arm
        self.tolerance = tolerance
        self.rng = np.random.default_rng(seed)

        # Sampling box of the random waypoints (meters)
        self.position_range = (-0.5, 0.5)

        self.validation_results = {}

        logger.info(f"Kinematics validator initialized for {arm.name}")

    def random_quaternion(self) -> np.ndarray:
        """Random unit quaternion."""
        return math_tools.normalize_quaternion(self.rng.uniform(-0.5, 0.5, size=4))

    def random_position(self) -> np.ndarray:
        """Random position inside the sampling box."""
        return self.rng.uniform(*self.position_range, size=3)

    def generate_joint_positions(self, num: int) -> List[np.ndarray]:
        """Random joint vectors within the joint limits, geometric ordering."""
        lower, upper = self.arm.joint_limits
        return [self.rng.uniform(lower, upper) for _ in range(num)]

    def generate_reachable_waypoint(self, max_tries: int = 100) -> Pose:
        """
        Random pose for which the trac solver finds a solution.

        Raises:
            RuntimeError: If no reachable pose is found within max_tries
        """
        for _ in range(max_tries):
            pose = Pose(self.random_quaternion(), self.random_position())
            if self.arm.inverse_kinematics(pose, SolverFamily.TRAC).success:
                return pose

        raise RuntimeError(f"Could not find a valid waypoint after {max_tries} tries.")

    def generate_reachable_waypoints(self, num: int, max_tries: int = 100) -> List[Pose]:
        return [self.generate_reachable_waypoint(max_tries) for _ in range(num)]

    def _pose_errors(self, pose_a: Pose, pose_b: Pose):
        pos_err = float(np.linalg.norm(pose_a.position - pose_b.position))
        rot_err = math_tools.calculate_rotation_difference(pose_a.orientation, pose_b.orientation)
        return pos_err, rot_err

    def _summarize(self, name: str, position_errors: List[float], rotation_errors: List[float],
                   failures: int, num_tests: int) -> Dict[str, Any]:
        results = {
            'num_tests': num_tests,
            'failures': failures,
            'position_errors': position_errors,
            'rotation_errors': rotation_errors,
            'max_pos_error': float(np.max(position_errors)) if position_errors else 0.0,
            'max_rot_error': float(np.max(rotation_errors)) if rotation_errors else 0.0,
        }
        results['is_valid'] = (failures == 0
                               and results['max_pos_error'] < self.tolerance
                               and results['max_rot_error'] < self.tolerance)

        if results['is_valid']:
            logger.info(f"{name} PASSED ({num_tests} samples)")
        else:
            logger.warning(f"{name} FAILED: {failures} failures, max position error "
                           f"{results['max_pos_error']:.2e} m, max rotation error "
                           f"{results['max_rot_error']:.2e} rad")

        self.validation_results[name] = results
        return results

    def compare_forward(self, joint_positions: List[np.ndarray]) -> Dict[str, Any]:
        """
        Compare the two FK families on the same configurations.

        Args:
            joint_positions: Joint vectors in geometric ordering
        """
        position_errors, rotation_errors = [], []

        for q in joint_positions:
            geo_pose = self.arm.forward_kinematics(q, SolverFamily.GEOMETRIC)
            trac_pose = self.arm.forward_kinematics(self.arm.reorder_joints(q), SolverFamily.TRAC)
            pos_err, rot_err = self._pose_errors(geo_pose, trac_pose)
            position_errors.append(pos_err)
            rotation_errors.append(rot_err)

        return self._summarize('forward_comparison', position_errors, rotation_errors,
                               0, len(joint_positions))

    def compare_inverse(self, waypoints: List[Pose]) -> Dict[str, Any]:
        """
        Solve each waypoint with both families and compare the resulting poses
        through both forward evaluators.
        """
        position_errors, rotation_errors = [], []
        failures = 0

        for pose in waypoints:
            trac_result = self.arm.inverse_kinematics(pose, SolverFamily.TRAC)
            geo_result = self.arm.inverse_kinematics(pose, SolverFamily.GEOMETRIC)
            if not (trac_result.success and geo_result.success):
                failures += 1
                continue

            trac_q = trac_result.solutions[0]
            geo_q = geo_result.solutions[0]

            # Both solutions expressed in the ordering of each FK family
            pairs = {
                SolverFamily.TRAC: (trac_q, self.arm.reorder_joints(geo_q)),
                SolverFamily.GEOMETRIC: (self.arm.reorder_joints(trac_q), geo_q)
            }
            for family, (q_a, q_b) in pairs.items():
                pos_err, rot_err = self._pose_errors(self.arm.forward_kinematics(q_a, family),
                                                     self.arm.forward_kinematics(q_b, family))
                position_errors.append(pos_err)
                rotation_errors.append(rot_err)

        return self._summarize('inverse_comparison', position_errors, rotation_errors,
                               failures, len(waypoints))

    def check_ik_solver(self, waypoints: List[Pose], family: SolverFamily) -> Dict[str, Any]:
        """FK(IK(pose)) ≈ pose for every solution returned by `family`."""
        position_errors, rotation_errors = [], []
        failures = 0

        for pose in waypoints:
            result = self.arm.inverse_kinematics(pose, family)
            if not result.success:
                failures += 1
                continue
            for q in result.solutions:
                pos_err, rot_err = self._pose_errors(self.arm.forward_kinematics(q, family), pose)
                position_errors.append(pos_err)
                rotation_errors.append(rot_err)

        return self._summarize(f'{family.value}_ik_solver', position_errors, rotation_errors,
                               failures, len(waypoints))

    def check_round_trip(self, joint_positions: List[np.ndarray], family: SolverFamily,
                         seed_noise: float = 0.05) -> Dict[str, Any]:
        """
        IK(FK(J)) ≈ J, modulo 2π per joint.

        Geometric: J must be among the returned solutions. Trac: the solver is
        seeded with J perturbed by `seed_noise` radians.

        Args:
            joint_positions: Joint vectors in the ordering of `family`
        """
        joint_errors = []
        failures = 0

        for q in joint_positions:
            pose = self.arm.forward_kinematics(q, family)
            q_init = None
            if family == SolverFamily.TRAC:
                q_init = q + self.rng.uniform(-seed_noise, seed_noise, size=q.shape)
            result = self.arm.inverse_kinematics(pose, family, q_init=q_init)
            if not result.success:
                failures += 1
                continue
            joint_errors.append(min(math_tools.joint_distance(q, sol) for sol in result.solutions))

        results = {
            'num_tests': len(joint_positions),
            'failures': failures,
            'joint_errors': joint_errors,
            'max_joint_error': float(np.max(joint_errors)) if joint_errors else 0.0
        }
        results['is_valid'] = failures == 0 and results['max_joint_error'] < self.tolerance

        self.validation_results[f'{family.value}_round_trip'] = results
        return results

    def run_all(self, num_tests: int = 20) -> Dict[str, Any]:
        """Run every check on freshly sampled configurations and waypoints."""
        start_time = time.time()

        joint_positions = self.generate_joint_positions(num_tests)
        waypoints = [self.arm.forward_kinematics(q, SolverFamily.GEOMETRIC) for q in joint_positions]

        self.compare_forward(joint_positions)
        self.compare_inverse(waypoints)
        for family in SolverFamily:
            self.check_ik_solver(waypoints, family)

        summary = {
            'robot': self.arm.name,
            'all_passed': all(r['is_valid'] for r in self.validation_results.values()),
            'duration': time.time() - start_time,
            'results': dict(self.validation_results)
        }
        logger.info(f"Validation of {self.arm.name} finished in {summary['duration']:.2f}s, "
                    f"all passed: {summary['all_passed']}")
        return summary

    def generate_report(self) -> str:
        """Human readable summary of the last validation results."""
        if not self.validation_results:
            return "No validation results available."

        lines = [f"Kinematics validation report for {self.arm.name}", "=" * 50]
        for name, result in self.validation_results.items():
            status = "PASS" if result['is_valid'] else "FAIL"
            lines.append(f"{name:<25} {status:<5} tests={result['num_tests']} failures={result['failures']}")
        return "\n".join(lines)
