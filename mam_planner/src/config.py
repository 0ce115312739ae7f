#!/usr/bin/env python3
"""
Subtask configuration.

Reference frame state (robot base position, reference vector) and debug
visualization parameters consumed by the ROI engine. Values are read from a
YAML file; missing entries keep their defaults.

Author: Robot Control Team
"""

import numpy as np
import logging
import os
from dataclasses import dataclass, field, fields
from typing import Dict, Optional
import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "..", "config", "subtask.yaml")


def _default_topics() -> Dict[str, str]:
    return {
        'roi': "/ur5/roi_topic",
        'waypoint_start': "debug_waypoint_1",
        'waypoint_end': "debug_waypoint_2",
        'robot_base': "debug_robot_base",
        'computed_pose': "debug_computedQuat"
    }


@dataclass
class SubtaskConfig:
    """Configuration of the ROI engine."""
    robot_pos: np.ndarray = field(default_factory=lambda: np.zeros(3))
    ref_vector: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))
    theta: float = 0.0
    frame_id: str = "base_link"
    topics: Dict[str, str] = field(default_factory=_default_topics)
    waypoint_publish_count: int = 3
    waypoint_publish_delay: float = 0.05
    pose_publish_count: int = 3
    pose_publish_delay: float = 0.2

    def __post_init__(self):
        self.robot_pos = np.array(self.robot_pos, dtype=float).reshape(3)
        self.ref_vector = np.array(self.ref_vector, dtype=float).reshape(3)
        if np.linalg.norm(self.ref_vector) < 1e-12:
            raise ValueError("Reference vector must be non-zero")
        if self.waypoint_publish_count < 0 or self.pose_publish_count < 0:
            raise ValueError("Publish counts must be non-negative")
        if self.waypoint_publish_delay < 0 or self.pose_publish_delay < 0:
            raise ValueError("Publish delays must be non-negative")

    @classmethod
    def from_dict(cls, values: dict) -> "SubtaskConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            logger.warning(f"Ignoring unknown subtask config keys: {sorted(unknown)}")

        kwargs = {key: value for key, value in values.items() if key in known}
        if 'topics' in kwargs:
            topics = _default_topics()
            topics.update(kwargs['topics'] or {})
            kwargs['topics'] = topics
        return cls(**kwargs)


def load_subtask_config(config_path: Optional[str] = None) -> SubtaskConfig:
    """
    Load the subtask configuration from YAML.

    Falls back to defaults when the file is missing or unreadable.
    """
    config_path = config_path or DEFAULT_CONFIG_PATH

    if not os.path.exists(config_path):
        logger.warning(f"Subtask config not found: {config_path}, using defaults")
        return SubtaskConfig()

    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load subtask config from {config_path}: {e}")
        return SubtaskConfig()

    logger.info(f"Subtask config loaded from: {config_path}")
    return SubtaskConfig.from_dict(config.get('subtask', {}) or {})
