#!/usr/bin/env python3
"""
Debug visualization message types.

Timestamped points and poses expressed in a fixed reference frame, handed to
the transport publisher as-is.

Author: Robot Control Team
"""

import time
import numpy as np
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Header:
    frame_id: str = "base_link"
    stamp: float = field(default_factory=time.time)


@dataclass
class PointStamped:
    header: Header
    point: np.ndarray

    @classmethod
    def create(cls, point, frame_id: str, stamp: Optional[float] = None) -> "PointStamped":
        header = Header(frame_id) if stamp is None else Header(frame_id, stamp)
        return cls(header, np.array(point, dtype=float))


@dataclass
class PoseStamped:
    header: Header
    position: np.ndarray
    orientation: np.ndarray  # (w, x, y, z)

    @classmethod
    def create(cls, position, orientation, frame_id: str,
               stamp: Optional[float] = None) -> "PoseStamped":
        header = Header(frame_id) if stamp is None else Header(frame_id, stamp)
        return cls(header, np.array(position, dtype=float), np.array(orientation, dtype=float))
