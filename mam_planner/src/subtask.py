#!/usr/bin/env python3
"""
Subtask ROI Engine

Ingests waypoint records of the form

    <id>,<sx>,<sy>,<sz>,<ex>,<ey>,<ez>,<reserved>

keeps the first ROI seen for each id, computes its target orientation in the
plane spanned by the waypoint and the robot base, and serves the ROIs in
arrival order.

Author: Robot Control Team
"""

import numpy as np
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional, Tuple

from .config import SubtaskConfig
from .debug_visualizer import DebugVisualizer
from .plane_orientation import rotate_vector_in_plane

logger = logging.getLogger(__name__)

# Numeric fields following the id: start (3), end (3), reserved (1)
MSG_SIZE = 7


class WaypointFormatError(ValueError):
    """Raised when a waypoint record cannot be parsed."""
    pass


@dataclass(frozen=True, eq=False)
class ROI:
    """Resolved region of interest."""
    id: str
    pos_start: np.ndarray
    pos_end: np.ndarray
    quat: np.ndarray  # (w, x, y, z)

    def __post_init__(self):
        for name in ('pos_start', 'pos_end', 'quat'):
            value = np.array(getattr(self, name), dtype=float)
            value.setflags(write=False)
            object.__setattr__(self, name, value)


def split_waypoint(raw: str) -> Tuple[str, List[float]]:
    """
    Split a waypoint record into its id and numeric fields.

    Raises:
        WaypointFormatError: Wrong field count or non-numeric field
    """
    if not isinstance(raw, str):
        raise WaypointFormatError(f"Waypoint message must be a string, got {type(raw).__name__}")

    tokens = raw.strip().split(',')
    waypoint_id, fields = tokens[0].strip(), tokens[1:]

    if not waypoint_id:
        raise WaypointFormatError(f"Waypoint message {raw!r} has an empty id")
    if len(fields) != MSG_SIZE:
        raise WaypointFormatError(
            f"Waypoint message {raw!r} doesn't have the correct size, should be "
            f"{MSG_SIZE} instead of {len(fields)}")

    try:
        values = [float(token) for token in fields]
    except ValueError:
        raise WaypointFormatError(f"Waypoint message {raw!r} has a non-numeric field") from None

    if not np.all(np.isfinite(values)):
        raise WaypointFormatError(f"Waypoint message {raw!r} has a non-finite field")

    return waypoint_id, values


class Subtask:
    """FIFO of ROIs deduplicated by id."""

    def __init__(self, config: Optional[SubtaskConfig] = None, publisher=None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            config: Reference frame state and debug parameters
            publisher: Debug publisher with publish(topic, message); None disables debug output
            sleep: Delay function used between debug bursts
        """
        self.config = config or SubtaskConfig()
        self.visualizer = DebugVisualizer(publisher, self.config, sleep) if publisher is not None else None
        self._queue: Deque[ROI] = deque()

        logger.info(f"Subtask initialized, robot base at {self.config.robot_pos.tolist()}")

    @property
    def robot_pos(self) -> np.ndarray:
        return self.config.robot_pos.copy()

    @property
    def ref_vector(self) -> np.ndarray:
        return self.config.ref_vector.copy()

    def __len__(self) -> int:
        return len(self._queue)

    def compute_orientation(self, pos_start, pos_end) -> np.ndarray:
        return rotate_vector_in_plane((pos_start, pos_end, self.config.robot_pos),
                                      self.config.ref_vector, self.config.theta)

    def is_id_stored(self, waypoint_id: str) -> bool:
        return any(roi.id == waypoint_id for roi in self._queue)

    def ingest(self, raw: str) -> bool:
        """
        Parse and store a waypoint record.

        Returns:
            True if a new ROI was enqueued
        """
        try:
            waypoint_id, values = split_waypoint(raw)
        except WaypointFormatError as e:
            logger.error(f"[Subtask] - {e}")
            return False

        if self.is_id_stored(waypoint_id):
            logger.info(f"[Subtask] - Waypoint received previously, already registered, key : {waypoint_id}")
            return False

        pos_start = np.array(values[0:3])
        pos_end = np.array(values[3:6])
        roi = ROI(waypoint_id, pos_start, pos_end, self.compute_orientation(pos_start, pos_end))
        self._queue.append(roi)

        if self.visualizer is not None:
            self.visualizer.publish_roi(roi, self.config.robot_pos)

        logger.info(f"[Subtask] - Waypoint registered, key : {waypoint_id}")
        return True

    def cbk_roi(self, msg):
        """Transport callback, message with a `data` string or a plain string."""
        self.ingest(getattr(msg, 'data', msg))

    def dequeue(self) -> Optional[ROI]:
        """Pop the oldest ROI, None when empty."""
        if not self._queue:
            return None
        return self._queue.popleft()

    def is_empty(self) -> bool:
        return not self._queue

    def clear(self):
        self._queue.clear()
