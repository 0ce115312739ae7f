#!/usr/bin/env python3
"""
Numerical Inverse Kinematics Module for 6-DOF Robot Manipulators

This module implements the iterative (trac) solver family: a damped least
squares / Levenberg-Marquardt solver on the body Jacobian, restarted from
random seeds inside the joint limits until it converges.

Key Features:
- Levenberg-Marquardt damping adapted on every accepted/rejected step
- Random restarts within joint limits
- Solution caching and warm-starting for repeated poses
- Optional time budget
- Performance statistics

Author: Robot Control Team
"""

import numpy as np
from numpy.linalg import norm, inv
import logging
from typing import Tuple, Optional, Dict, Any
import time
import threading
import collections
from scipy.spatial.transform import Rotation

logger = logging.getLogger(__name__)

class InverseKinematicsError(Exception):
    """Custom exception for inverse kinematics errors."""
    pass

class NumericalIK:
    """
    Iterative inverse kinematics solver.

    Returns at most one solution per call together with a convergence flag.
    Non-convergence is a normal outcome, reported as (None, False).
    """

    # Bent elbow, tilted wrist
    NOMINAL_SEED = np.array([0.0, -1.0, 1.5, -0.5, 1.2, 0.0])

    def __init__(self, forward_kinematics, default_params: Optional[Dict[str, Any]] = None,
                 cache_size: int = 50):
        """
        Initialize the numerical inverse kinematics solver.

        Args:
            forward_kinematics: ForwardKinematics instance (chain order)
            default_params: Overrides of the default solver parameters
            cache_size: Size of solution cache for warm-starts
        """
        self.fk = forward_kinematics
        self.S = forward_kinematics.S
        self.joint_limits = forward_kinematics.joint_limits
        self.n_joints = forward_kinematics.n_joints

        self.default_params = {
            'time_budget': 1.0,         # Seconds per solve, None for no limit
            'pos_tol': 1e-8,            # Position tolerance (m)
            'rot_tol': 1e-8,            # Rotation tolerance (rad)
            'max_iters': 150,           # Iterations per attempt
            'max_restarts': 30,         # Random seeds tried after the initial one
            'damping_init': 1e-2,
            'damping_min': 1e-12,
            'damping_max': 1e4,
            'dq_max': 0.5,              # Max joint step norm (rad)
            'use_warm_start': True,
            'seed': None                # Random seed for restart configurations
        }

        if default_params:
            self.default_params.update(default_params)

        self.solution_cache = collections.OrderedDict()
        self.cache_size = cache_size
        self._lock = threading.Lock()

        self.stats = self._empty_statistics()

        logger.info(f"Numerical IK solver initialized ({self.n_joints} joints, "
                    f"max {self.default_params['max_restarts']} restarts)")

    @staticmethod
    def _empty_statistics() -> Dict[str, Any]:
        return {
            'total_calls': 0,
            'successful_calls': 0,
            'total_time': 0.0,
            'average_time': 0.0,
            'cache_hits': 0,
            'restarts': 0
        }

    def solve(self, T_target: np.ndarray, q_init: Optional[np.ndarray] = None,
              **kwargs) -> Tuple[Optional[np.ndarray], bool]:
        """
        Solve the inverse kinematics for a given target pose.

        Args:
            T_target: Target transformation matrix (4x4)
            q_init: Initial guess for joint angles, chain order (optional)
            **kwargs: Additional parameters to override defaults

        Returns:
            q_solution: Solution joint angles (None if no solution found)
            success: Boolean indicating convergence within tolerances

        Raises:
            InverseKinematicsError: If the target or seed has the wrong shape
        """
        T_target = np.asarray(T_target, dtype=float)
        if T_target.shape != (4, 4):
            raise InverseKinematicsError(f"Target must be a 4x4 matrix, got shape {T_target.shape}")
        if q_init is not None:
            q_init = np.asarray(q_init, dtype=float)
            if q_init.shape != (self.n_joints,):
                raise InverseKinematicsError(
                    f"Initial guess must have shape ({self.n_joints},), got {q_init.shape}")

        start_time = time.time()
        params = self.default_params.copy()
        params.update(kwargs)

        q_init = self._get_warm_start(T_target, q_init, params)
        q_solution, success, info = self._solve_with_restarts(T_target, q_init, params)

        if success and params['use_warm_start']:
            self._update_solution_cache(T_target, q_solution)

        solve_time = time.time() - start_time
        with self._lock:
            self.stats['total_calls'] += 1
            self.stats['total_time'] += solve_time
            self.stats['restarts'] += info['restarts']
            if success:
                self.stats['successful_calls'] += 1
            self.stats['average_time'] = self.stats['total_time'] / self.stats['total_calls']

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"NumericalIK solved in {solve_time*1000:.2f}ms, success: {success}, "
                         f"iterations: {info['iterations']}, restarts: {info['restarts']}")

        if not success:
            return None, False
        return q_solution, True

    def _hash_pose(self, T: np.ndarray) -> Tuple[float, ...]:
        """Rounded pose key for cache lookups."""
        return tuple(np.round(T[:3, :].ravel(), 6))

    def _get_warm_start(self, T_target: np.ndarray, q_init: Optional[np.ndarray],
                        params: Dict[str, Any]) -> np.ndarray:
        """
        Get initial configuration.

        Prioritizes:
        1. User-provided initial guess (q_init)
        2. Cached solution for the same pose
        3. Nominal seed away from the wrist and elbow singularities
        """
        if q_init is not None:
            return q_init.copy()

        if params['use_warm_start']:
            pose_hash = self._hash_pose(T_target)
            with self._lock:
                cached = self.solution_cache.get(pose_hash)
                if cached is not None:
                    self.stats['cache_hits'] += 1
            if cached is not None:
                logger.debug("Using cached solution for warm-start")
                return cached.copy()

        seed = np.zeros(self.n_joints)
        seed[:len(self.NOMINAL_SEED)] = self.NOMINAL_SEED[:self.n_joints]
        return np.clip(seed, self.joint_limits[0], self.joint_limits[1])

    def _update_solution_cache(self, T_target: np.ndarray, q_solution: np.ndarray):
        """Update solution cache with new pose -> solution mapping."""
        pose_hash = self._hash_pose(T_target)
        with self._lock:
            self.solution_cache[pose_hash] = q_solution.copy()
            while len(self.solution_cache) > self.cache_size:
                self.solution_cache.popitem(last=False)

    def _random_configuration(self, rng: np.random.Generator) -> np.ndarray:
        """Random seed inside the joint limits, restricted to one turn per joint."""
        lower = np.maximum(self.joint_limits[0], -np.pi)
        upper = np.minimum(self.joint_limits[1], np.pi)
        return rng.uniform(lower, upper)

    def _solve_with_restarts(self, T_des: np.ndarray, q_init: np.ndarray,
                             params: Dict[str, Any]) -> Tuple[Optional[np.ndarray], bool, Dict[str, Any]]:
        """
        Run the local solver from the initial guess, then from random seeds.

        Returns:
            q_solution: Converged configuration (or None)
            success: Whether a configuration met the tolerances
            info: Dictionary with iteration and restart counts
        """
        time_budget = params['time_budget']
        deadline = time.time() + time_budget if time_budget is not None else None
        rng = np.random.default_rng(params['seed'])

        info = {'iterations': 0, 'restarts': 0}
        q_seed = q_init

        for attempt in range(params['max_restarts'] + 1):
            if attempt > 0:
                if deadline is not None and time.time() >= deadline:
                    logger.debug(f"Time budget exceeded after {attempt} attempts")
                    break
                q_seed = self._random_configuration(rng)
                info['restarts'] += 1

            q_sol, converged, iterations = self._lm_solve(T_des, q_seed, params, deadline)
            info['iterations'] += iterations

            if converged:
                return q_sol, True, info

        return None, False, info

    def _lm_solve(self, T_des: np.ndarray, q0: np.ndarray, params: Dict[str, Any],
                  deadline: Optional[float]) -> Tuple[np.ndarray, bool, int]:
        """
        Levenberg-Marquardt iterations from one seed.

        Returns:
            q: Last accepted configuration
            converged: Whether the tolerances were met
            iterations: Number of iterations used
        """
        limits_lower, limits_upper = self.joint_limits[0], self.joint_limits[1]
        q = np.clip(q0, limits_lower, limits_upper)
        error = self._compute_error_twist(T_des, self.fk.compute_forward_kinematics(q))
        cost = error @ error
        damping = params['damping_init']
        identity = np.eye(self.n_joints)

        for iteration in range(params['max_iters']):
            if norm(error[3:]) < params['pos_tol'] and norm(error[:3]) < params['rot_tol']:
                return q, True, iteration

            if deadline is not None and time.time() >= deadline:
                return q, False, iteration

            Jb = self.compute_body_jacobian(q)
            dq = np.linalg.solve(Jb.T @ Jb + damping * identity, Jb.T @ error)

            dq_norm = norm(dq)
            if dq_norm > params['dq_max']:
                dq *= params['dq_max'] / dq_norm

            q_new = np.clip(q + dq, limits_lower, limits_upper)
            error_new = self._compute_error_twist(T_des, self.fk.compute_forward_kinematics(q_new))
            cost_new = error_new @ error_new

            if cost_new < cost:
                q, error, cost = q_new, error_new, cost_new
                damping = max(params['damping_min'], damping * 0.3)
            else:
                damping *= 4.0
                if damping > params['damping_max']:
                    # Stuck in a local minimum
                    break

        converged = norm(error[3:]) < params['pos_tol'] and norm(error[:3]) < params['rot_tol']
        return q, converged, params['max_iters']

    def compute_body_jacobian(self, q: np.ndarray) -> np.ndarray:
        """
        Compute body Jacobian at given configuration.

        Columns are expressed as [angular, linear] twists in the end-effector frame.
        """
        J_s = np.zeros((6, self.n_joints))
        T_temp = np.eye(4)

        for i in range(self.n_joints):
            if i == 0:
                J_s[:, i] = self.S[:, i]
            else:
                J_s[:, i] = self._adjoint_matrix(T_temp) @ self.S[:, i]
            T_temp = T_temp @ self.fk.matrix_exp6(self.S[:, i] * q[i])

        T_final = self.fk.compute_forward_kinematics(q)
        return self._adjoint_matrix(inv(T_final)) @ J_s

    @staticmethod
    def _compute_error_twist(T_des: np.ndarray, T_cur: np.ndarray) -> np.ndarray:
        """
        Compute the error twist between desired and current pose.

        Returns:
            6D error twist [angular_error, position_error] in the current end-effector frame
        """
        T_rel = inv(T_cur) @ T_des
        omega = Rotation.from_matrix(T_rel[:3, :3]).as_rotvec()
        return np.hstack([omega, T_rel[:3, 3]])

    @staticmethod
    def _adjoint_matrix(T: np.ndarray) -> np.ndarray:
        """Compute adjoint matrix for SE(3) transformation."""
        R, p = T[:3, :3], T[:3, 3]
        p_skew = np.array([
            [0, -p[2], p[1]],
            [p[2], 0, -p[0]],
            [-p[1], p[0], 0]
        ])

        adj = np.zeros((6, 6))
        adj[:3, :3] = R
        adj[3:, 3:] = R
        adj[3:, :3] = p_skew @ R

        return adj

    def get_statistics(self) -> Dict[str, Any]:
        """Get performance statistics."""
        with self._lock:
            stats = self.stats.copy()
        if stats['total_calls'] > 0:
            stats['success_rate'] = stats['successful_calls'] / stats['total_calls']
            stats['cache_hit_rate'] = stats['cache_hits'] / stats['total_calls']
        else:
            stats['success_rate'] = 0.0
            stats['cache_hit_rate'] = 0.0
        return stats

    def clear_cache(self):
        """Clear solution cache."""
        with self._lock:
            self.solution_cache.clear()
        logger.debug("Solution cache cleared")

    def reset_statistics(self):
        """Reset performance statistics."""
        with self._lock:
            self.stats = self._empty_statistics()
