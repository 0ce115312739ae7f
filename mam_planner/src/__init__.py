#!/usr/bin/env python3
"""
MAM Planner Package - Source Module

Waypoint ROI engine for the robotic arm planner.

This package provides:
- Parsing and id-deduplication of streamed waypoint records
- Plane-constrained target orientation of each waypoint
- A FIFO of resolved ROIs
- Burst publishing of debug visualization messages

Author: Robot Control Team
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Robot Control Team"

from .config import SubtaskConfig, load_subtask_config
from .messages import Header, PointStamped, PoseStamped
from .plane_orientation import rotate_vector_in_plane
from .debug_visualizer import DebugVisualizer
from .subtask import Subtask, ROI, WaypointFormatError, split_waypoint

__all__ = [
    'SubtaskConfig',
    'load_subtask_config',
    'Header',
    'PointStamped',
    'PoseStamped',
    'rotate_vector_in_plane',
    'DebugVisualizer',
    'Subtask',
    'ROI',
    'WaypointFormatError',
    'split_waypoint'
]
