#!/usr/bin/env python3
"""
Debug Visualizer

Publishes waypoint start/end, robot base and computed pose for inspection.
Each message goes out as a short burst so a late-joining subscriber still
sees it. Delivery is best effort: publisher errors are logged and dropped.

Author: Robot Control Team
"""

import logging
import time
from typing import Callable, Optional

from .config import SubtaskConfig
from .messages import PointStamped, PoseStamped

logger = logging.getLogger(__name__)


class DebugVisualizer:
    """Burst publisher of debug points and poses."""

    def __init__(self, publisher, config: Optional[SubtaskConfig] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            publisher: Object with a publish(topic, message) method
            config: Frame id, topic names and burst parameters
            sleep: Delay function between burst messages
        """
        self.publisher = publisher
        self.config = config or SubtaskConfig()
        self._sleep = sleep

    def _burst(self, topic: str, message, count: int, delay: float):
        for i in range(count):
            try:
                self.publisher.publish(topic, message)
            except Exception as e:
                logger.warning(f"Debug publish on {topic} failed: {e}")
                return
            if i < count - 1:
                self._sleep(delay)

    def publish_point(self, topic: str, point):
        msg = PointStamped.create(point, self.config.frame_id)
        self._burst(topic, msg, self.config.waypoint_publish_count,
                    self.config.waypoint_publish_delay)

    def publish_pose(self, topic: str, position, orientation):
        msg = PoseStamped.create(position, orientation, self.config.frame_id)
        self._burst(topic, msg, self.config.pose_publish_count,
                    self.config.pose_publish_delay)

    def publish_roi(self, roi, robot_pos):
        """Waypoint start, end, robot base, then the computed pose at the waypoint start."""
        topics = self.config.topics
        self.publish_point(topics['waypoint_start'], roi.pos_start)
        self.publish_point(topics['waypoint_end'], roi.pos_end)
        self.publish_point(topics['robot_base'], robot_pos)
        self.publish_pose(topics['computed_pose'], roi.pos_start, roi.quat)
