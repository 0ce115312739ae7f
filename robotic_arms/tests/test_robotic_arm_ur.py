#!/usr/bin/env python3
"""
Unit Tests for the UR Robotic Arms

Test suite covering:
- Joint reordering between the geometric and trac orderings
- Cross-family forward kinematics agreement
- Geometric and trac IK round trips
- FK(IK(pose)) coherency
- Precondition errors and unreachable poses

Author: Robot Control Team
"""

import sys
import os
import unittest
import numpy as np
from unittest.mock import Mock

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from robotic_arms.src import math_tools
from robotic_arms.src.robotic_arm_base import (
    Pose, JointState, SolverFamily, ROSVersion, JointDimensionError
)
from robotic_arms.src.robotic_arm_ur import (
    RoboticArmUr3e, RoboticArmUr5, RoboticArmUr5e, RoboticArmUr10e
)

TOLERANCE = 2e-4
ARM_CLASSES = (RoboticArmUr3e, RoboticArmUr5, RoboticArmUr5e, RoboticArmUr10e)


def sample_regular_configurations(arm, rng, num):
    """Joint vectors (geometric ordering) away from the wrist and elbow singularities."""
    samples = []
    while len(samples) < num:
        q = rng.uniform(-np.pi, np.pi, size=arm.n_joints)
        if abs(np.sin(q[4])) < 0.1 or abs(np.sin(q[2])) < 0.1:
            continue
        samples.append(q)
    return samples


class TestJointReordering(unittest.TestCase):
    """Permutation between the two joint orderings."""

    def setUp(self):
        self.arm = RoboticArmUr5()

    def test_swaps_first_and_third_joint(self):
        q = np.array([0.1, 0.2, 0.3, 0.4, 0.5, 0.6])
        np.testing.assert_array_equal(self.arm.reorder_joints(q), [0.3, 0.2, 0.1, 0.4, 0.5, 0.6])

    def test_involution_on_vectors(self):
        rng = np.random.default_rng(0)
        for _ in range(20):
            q = rng.uniform(-np.pi, np.pi, size=6)
            np.testing.assert_array_equal(self.arm.reorder_joints(self.arm.reorder_joints(q)), q)

    def test_involution_on_joint_state(self):
        state = JointState(position=[1, 2, 3, 4, 5, 6],
                           velocity=[10, 20, 30, 40, 50, 60],
                           torque=[100, 200, 300, 400, 500, 600])
        reordered = self.arm.reorder_joints(state)

        self.assertEqual(reordered.position, [3, 2, 1, 4, 5, 6])
        self.assertEqual(reordered.velocity, [30, 20, 10, 40, 50, 60])
        self.assertEqual(reordered.torque, [300, 200, 100, 400, 500, 600])
        self.assertEqual(self.arm.reorder_joints(reordered), state)

    def test_empty_feedback_channels_allowed(self):
        state = JointState(position=[1, 2, 3, 4, 5, 6])
        reordered = self.arm.reorder_joints(state)
        self.assertEqual(reordered.position, [3, 2, 1, 4, 5, 6])
        self.assertEqual(reordered.velocity, [])
        self.assertEqual(reordered.torque, [])

    def test_input_left_untouched(self):
        q = np.array([0.1, 0.2, 0.3, 0.4, 0.5, 0.6])
        self.arm.reorder_joints(q)
        np.testing.assert_array_equal(q, [0.1, 0.2, 0.3, 0.4, 0.5, 0.6])

    def test_wrong_length_raises(self):
        with self.assertRaises(JointDimensionError):
            self.arm.reorder_joints([0.0] * 5)
        with self.assertRaises(JointDimensionError):
            self.arm.reorder_joints(JointState(position=[0.0] * 6, velocity=[0.0] * 4))
        with self.assertRaises(JointDimensionError):
            self.arm.reorder_joints(JointState(position=[]))

    def test_trac_joint_names(self):
        self.assertEqual(self.arm.trac_joint_names[0], "elbow_joint")
        self.assertEqual(self.arm.trac_joint_names[2], "shoulder_pan_joint")


class TestForwardKinematics(unittest.TestCase):

    def test_joint_count(self):
        for arm_class in ARM_CLASSES:
            self.assertEqual(arm_class().n_joints, 6)

    def test_cross_family_agreement(self):
        rng = np.random.default_rng(1)
        for arm_class in ARM_CLASSES:
            arm = arm_class()
            for _ in range(25):
                q = rng.uniform(-2 * np.pi, 2 * np.pi, size=6)
                geo_pose = arm.forward_kinematics(q, SolverFamily.GEOMETRIC)
                trac_pose = arm.forward_kinematics(arm.reorder_joints(q), SolverFamily.TRAC)
                self.assertTrue(geo_pose.is_equivalent(trac_pose, TOLERANCE),
                                f"{arm.name} FK families disagree at {q}")

    def test_home_configuration(self):
        # UR zero configuration: arm stretched along -x
        arm = RoboticArmUr5()
        pose = arm.forward_kinematics(np.zeros(6), SolverFamily.GEOMETRIC)
        dh = arm.DH
        expected = [dh.a2 + dh.a3, -(dh.d4 + dh.d6), dh.d1 - dh.d5]
        np.testing.assert_allclose(pose.position, expected, atol=1e-9)

    def test_out_of_range_angles_accepted(self):
        arm = RoboticArmUr5()
        q = np.array([10.0, -9.0, 8.0, 7.0, -20.0, 30.0])
        pose = arm.forward_kinematics(q, SolverFamily.GEOMETRIC)
        self.assertEqual(pose.position.shape, (3,))

    def test_wrong_length_raises(self):
        arm = RoboticArmUr5()
        for family in SolverFamily:
            with self.assertRaises(JointDimensionError):
                arm.forward_kinematics(np.zeros(5), family)
            with self.assertRaises(JointDimensionError):
                arm.forward_kinematics(np.zeros(7), family)

    def test_pose_is_immutable(self):
        pose = RoboticArmUr5().forward_kinematics(np.zeros(6))
        with self.assertRaises(ValueError):
            pose.position[0] = 1.0


class TestGeometricInverseKinematics(unittest.TestCase):

    def test_round_trip(self):
        rng = np.random.default_rng(2)
        for arm_class in ARM_CLASSES:
            arm = arm_class()
            for q in sample_regular_configurations(arm, rng, 15):
                pose = arm.forward_kinematics(q, SolverFamily.GEOMETRIC)
                result = arm.inverse_kinematics(pose, SolverFamily.GEOMETRIC)

                self.assertTrue(result.success)
                errors = [math_tools.joint_distance(q, sol) for sol in result.solutions]
                self.assertLess(min(errors), TOLERANCE, f"{arm.name} lost configuration {q}")

    def test_all_solutions_reach_pose(self):
        rng = np.random.default_rng(3)
        arm = RoboticArmUr5e()
        for q in sample_regular_configurations(arm, rng, 10):
            pose = arm.forward_kinematics(q, SolverFamily.GEOMETRIC)
            result = arm.inverse_kinematics(pose, SolverFamily.GEOMETRIC)
            self.assertLessEqual(result.num_solutions, 8)
            for sol in result.solutions:
                self.assertTrue(arm.forward_kinematics(sol, SolverFamily.GEOMETRIC)
                                .is_equivalent(pose, TOLERANCE))

    def test_unreachable_pose(self):
        arm = RoboticArmUr5()
        pose = Pose(math_tools.IDENTITY_QUATERNION, [5.0, 5.0, 5.0])
        result = arm.inverse_kinematics(pose, SolverFamily.GEOMETRIC)
        self.assertFalse(result.success)
        self.assertEqual(result.solutions, [])

    def test_results_are_fresh(self):
        arm = RoboticArmUr5()
        pose = arm.forward_kinematics([0.3, -1.0, 1.2, -0.4, 1.1, 0.2], SolverFamily.GEOMETRIC)
        first = arm.inverse_kinematics(pose, SolverFamily.GEOMETRIC)
        second = arm.inverse_kinematics(pose, SolverFamily.GEOMETRIC)
        self.assertIsNot(first.solutions, second.solutions)
        first.solutions[0][0] += 1.0
        self.assertFalse(np.allclose(first.solutions[0], second.solutions[0]))


class TestTracInverseKinematics(unittest.TestCase):

    def test_round_trip_with_seed(self):
        rng = np.random.default_rng(4)
        for arm_class in ARM_CLASSES:
            arm = arm_class()
            for q_geo in sample_regular_configurations(arm, rng, 5):
                q = arm.reorder_joints(q_geo)
                pose = arm.forward_kinematics(q, SolverFamily.TRAC)
                q_init = q + rng.uniform(-0.05, 0.05, size=6)
                result = arm.inverse_kinematics(pose, SolverFamily.TRAC, q_init=q_init)

                self.assertTrue(result.success)
                self.assertEqual(result.num_solutions, 1)
                self.assertLess(math_tools.joint_distance(q, result.solutions[0]), TOLERANCE)

    def test_fk_ik_coherency_without_seed(self):
        arm = RoboticArmUr5()
        rng = np.random.default_rng(5)
        for q_geo in sample_regular_configurations(arm, rng, 3):
            pose = arm.forward_kinematics(q_geo, SolverFamily.GEOMETRIC)
            result = arm.inverse_kinematics(pose, SolverFamily.TRAC)
            self.assertTrue(result.success)
            self.assertTrue(arm.forward_kinematics(result.solutions[0], SolverFamily.TRAC)
                            .is_equivalent(pose, TOLERANCE))

    def test_unreachable_pose(self):
        arm = RoboticArmUr5(ik_params={'time_budget': 0.2, 'max_restarts': 2, 'seed': 0})
        pose = Pose(math_tools.IDENTITY_QUATERNION, [5.0, 5.0, 5.0])
        result = arm.inverse_kinematics(pose, SolverFamily.TRAC)
        self.assertFalse(result.success)
        self.assertEqual(result.solutions, [])

    def test_injected_solver_works_in_chain_order(self):
        q_chain = np.array([0.1, -1.0, 1.2, -0.3, 0.9, 0.4])
        solver = Mock()
        solver.solve.return_value = (q_chain, True)
        arm = RoboticArmUr5(trac_solver=solver)

        q_init = np.array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
        result = arm.inverse_kinematics(Pose(math_tools.IDENTITY_QUATERNION, [0.3, 0.1, 0.4]),
                                        SolverFamily.TRAC, q_init=q_init)

        _, seed = solver.solve.call_args[0]
        np.testing.assert_array_equal(seed, [3.0, 2.0, 1.0, 4.0, 5.0, 6.0])
        np.testing.assert_array_equal(result.solutions[0], arm.reorder_joints(q_chain))

    def test_solver_failure_is_a_result(self):
        solver = Mock()
        solver.solve.return_value = (None, False)
        arm = RoboticArmUr5(trac_solver=solver)
        result = arm.get_ik_trac(Pose(math_tools.IDENTITY_QUATERNION, [0.3, 0.1, 0.4]))
        self.assertFalse(result.success)

    def test_seed_wrong_length_raises(self):
        arm = RoboticArmUr5()
        pose = arm.forward_kinematics(np.zeros(6))
        with self.assertRaises(JointDimensionError):
            arm.inverse_kinematics(pose, SolverFamily.TRAC, q_init=np.zeros(4))


class TestFamilyShortcuts(unittest.TestCase):

    def setUp(self):
        self.arm = RoboticArmUr5()
        self.q = np.array([0.3, -1.0, 1.2, -0.4, 1.1, 0.2])

    def test_forward_shortcuts(self):
        geo_pose = self.arm.get_fk_geo(self.q)
        self.assertTrue(geo_pose.is_equivalent(
            self.arm.forward_kinematics(self.q, SolverFamily.GEOMETRIC), TOLERANCE))
        self.assertTrue(self.arm.get_fk_trac(self.arm.reorder_joints(self.q))
                        .is_equivalent(geo_pose, TOLERANCE))

    def test_inverse_shortcut(self):
        result = self.arm.get_ik_geo(self.arm.get_fk_geo(self.q))
        self.assertTrue(result.success)
        self.assertLess(min(math_tools.joint_distance(self.q, sol) for sol in result.solutions), TOLERANCE)


class TestArmMetadata(unittest.TestCase):

    def test_joint_limits_shape_and_elbow(self):
        arm = RoboticArmUr5e()
        self.assertEqual(arm.joint_limits.shape, (2, 6))
        self.assertAlmostEqual(arm.joint_limits[1, 2], np.pi)
        self.assertAlmostEqual(arm.trac_joint_limits[1, 0], np.pi)

    def test_ros_version_kept(self):
        arm = RoboticArmUr3e(ROSVersion.ROS2_HUMBLE)
        self.assertEqual(arm.ros_version, ROSVersion.ROS2_HUMBLE)
        self.assertIn("Ur3e", repr(arm))

    def test_missing_config_falls_back_to_defaults(self):
        arm = RoboticArmUr5(config_path="/nonexistent/joint_limits.yaml")
        np.testing.assert_allclose(arm.joint_limits[1], 2 * np.pi)


if __name__ == '__main__':
    unittest.main()
