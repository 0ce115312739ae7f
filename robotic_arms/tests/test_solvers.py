#!/usr/bin/env python3
"""
Unit Tests for the Kinematics Solvers

Test suite covering:
- PoE forward kinematics and joint limit loading
- Closed-form UR forward/inverse kinematics
- Numerical IK parameters, caching and statistics

Author: Robot Control Team
"""

import sys
import os
import tempfile
import unittest
import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from robotic_arms.src.forward_kinematic import ForwardKinematics, ForwardKinematicsError
from robotic_arms.src.geometric_solver import UrGeometricSolver, dh_transform
from robotic_arms.src.inverse_kinematic import NumericalIK, InverseKinematicsError
from robotic_arms.src.robotic_arm_ur import RoboticArmUr5, RoboticArmUr10e


class TestForwardKinematics(unittest.TestCase):

    def setUp(self):
        self.fk = ForwardKinematics(RoboticArmUr5.DH, "Ur5")
        self.geo = UrGeometricSolver(RoboticArmUr5.DH)

    def test_matches_dh_chain(self):
        rng = np.random.default_rng(21)
        for _ in range(20):
            q = rng.uniform(-np.pi, np.pi, size=6)
            np.testing.assert_allclose(self.fk.compute_forward_kinematics(q),
                                       self.geo.forward(q), atol=1e-10)

    def test_home_configuration(self):
        np.testing.assert_allclose(self.fk.compute_forward_kinematics(np.zeros(6)), self.fk.M, atol=1e-12)

    def test_matrix_exp6_pure_translation(self):
        T = self.fk.matrix_exp6(np.array([0, 0, 0, 0.1, 0.2, 0.3]))
        np.testing.assert_allclose(T[:3, 3], [0.1, 0.2, 0.3])
        np.testing.assert_allclose(T[:3, :3], np.eye(3))

    def test_invalid_input(self):
        with self.assertRaises(ForwardKinematicsError):
            self.fk.compute_forward_kinematics(np.zeros(5))
        with self.assertRaises(ForwardKinematicsError):
            self.fk.compute_forward_kinematics([0.0] * 6)

    def test_joint_limits_from_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "limits.yaml")
            with open(path, "w") as f:
                f.write("robots:\n  Ur5:\n    joint_limits:\n"
                        "      j1: {min: -90.0, max: 90.0}\n")
            fk = ForwardKinematics(RoboticArmUr5.DH, "Ur5", path)

        np.testing.assert_allclose(fk.joint_limits[:, 0], [-np.pi / 2, np.pi / 2])
        # Missing joints fall back to one full turn either way
        np.testing.assert_allclose(fk.joint_limits[:, 1], [-2 * np.pi, 2 * np.pi])

    def test_unknown_robot_uses_defaults(self):
        fk = ForwardKinematics(RoboticArmUr5.DH, "NotARobot")
        np.testing.assert_allclose(fk.joint_limits, [[-2 * np.pi] * 6, [2 * np.pi] * 6])


class TestUrGeometricSolver(unittest.TestCase):

    def setUp(self):
        self.solver = UrGeometricSolver(RoboticArmUr10e.DH)

    def test_dh_transform_identity(self):
        np.testing.assert_allclose(dh_transform(0.0, 0.0, 0.0, 0.0), np.eye(4))

    def test_generic_pose_solutions(self):
        q = np.array([0.4, -1.1, 1.3, -0.6, 1.0, 0.3])
        T = self.solver.forward(q)
        solutions = self.solver.inverse(T)

        self.assertTrue(1 <= len(solutions) <= 8)
        self.assertTrue(any(np.allclose(sol, q, atol=1e-8) for sol in solutions))
        for sol in solutions:
            self.assertTrue(np.all(sol > -np.pi) and np.all(sol <= np.pi))
            np.testing.assert_allclose(self.solver.forward(sol), T, atol=1e-6)

    def test_wrist_singularity(self):
        q = np.array([0.4, -1.1, 1.3, -0.6, 0.0, 0.3])
        T = self.solver.forward(q)
        for sol in self.solver.inverse(T):
            np.testing.assert_allclose(self.solver.forward(sol), T, atol=1e-6)

    def test_unreachable(self):
        T = np.eye(4)
        T[:3, 3] = [3.0, 0.0, 0.0]
        self.assertEqual(self.solver.inverse(T), [])


class TestNumericalIK(unittest.TestCase):

    def setUp(self):
        self.fk = ForwardKinematics(RoboticArmUr5.DH, "Ur5")
        self.ik = NumericalIK(self.fk, {'seed': 3})
        self.q = np.array([0.3, -1.2, 1.4, -0.7, 1.1, -0.4])
        self.T = self.fk.compute_forward_kinematics(self.q)

    def test_solves_from_nearby_seed(self):
        q_sol, success = self.ik.solve(self.T, self.q + 0.05)
        self.assertTrue(success)
        np.testing.assert_allclose(self.fk.compute_forward_kinematics(q_sol), self.T, atol=1e-6)

    def test_invalid_inputs(self):
        with self.assertRaises(InverseKinematicsError):
            self.ik.solve(np.eye(3))
        with self.assertRaises(InverseKinematicsError):
            self.ik.solve(self.T, np.zeros(4))

    def test_cache_and_statistics(self):
        self.ik.solve(self.T, self.q + 0.05)
        self.assertEqual(len(self.ik.solution_cache), 1)

        _, success = self.ik.solve(self.T)
        self.assertTrue(success)

        stats = self.ik.get_statistics()
        self.assertEqual(stats['total_calls'], 2)
        self.assertEqual(stats['cache_hits'], 1)
        self.assertEqual(stats['success_rate'], 1.0)

        self.ik.clear_cache()
        self.ik.reset_statistics()
        self.assertEqual(len(self.ik.solution_cache), 0)
        self.assertEqual(self.ik.get_statistics()['total_calls'], 0)

    def test_failure_returns_none(self):
        T = np.eye(4)
        T[:3, 3] = [5.0, 5.0, 5.0]
        q_sol, success = self.ik.solve(T, max_restarts=1, time_budget=0.2)
        self.assertFalse(success)
        self.assertIsNone(q_sol)

    def test_body_jacobian_matches_finite_differences(self):
        J = self.ik.compute_body_jacobian(self.q)
        T0 = self.fk.compute_forward_kinematics(self.q)
        eps = 1e-6
        for i in range(6):
            dq = np.zeros(6)
            dq[i] = eps
            twist = NumericalIK._compute_error_twist(T0, self.fk.compute_forward_kinematics(self.q + dq))
            # Error twist of T0 seen from the perturbed pose is minus the motion
            np.testing.assert_allclose(-twist / eps, J[:, i], atol=1e-4)


if __name__ == '__main__':
    unittest.main()
