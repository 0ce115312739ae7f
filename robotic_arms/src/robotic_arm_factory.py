#!/usr/bin/env python3
"""
Robotic Arm Factory Module

Resolves a (robot name, ROS version) pair to a fully constructed robotic arm.

Author: Robot Control Team
"""

import logging
from typing import Dict, List, Tuple, Type, Union

from .robotic_arm_base import RoboticArmBase, ROSVersion, ROS_VERSIONS_MAP, UnknownRobotModelError
from .robotic_arm_ur import RoboticArmUr3e, RoboticArmUr5, RoboticArmUr5e, RoboticArmUr10e

logger = logging.getLogger(__name__)


class RoboticArmFactory:
    """Factory of robotic arm models keyed by (name, ROS version)."""

    def __init__(self):
        self._registry: Dict[Tuple[str, ROSVersion], Type[RoboticArmBase]] = {}

        for arm_class in (RoboticArmUr3e, RoboticArmUr5, RoboticArmUr5e, RoboticArmUr10e):
            for version in ROSVersion:
                self.register(arm_class.ROBOT_NAME, version, arm_class)

    def register(self, name: str, version: ROSVersion, arm_class: Type[RoboticArmBase]):
        """Register a robot model for a ROS version."""
        self._registry[(name, version)] = arm_class

    def available_models(self) -> List[Tuple[str, ROSVersion]]:
        """Supported (name, version) pairs."""
        return sorted(self._registry.keys(), key=lambda key: (key[0], key[1].value))

    @staticmethod
    def _resolve_version(version: Union[ROSVersion, str]) -> ROSVersion:
        if isinstance(version, ROSVersion):
            return version
        try:
            return ROS_VERSIONS_MAP[str(version).lower()]
        except KeyError:
            raise UnknownRobotModelError(f"Unknown ROS version: {version!r}") from None

    def create(self, name: str, version: Union[ROSVersion, str], **kwargs) -> RoboticArmBase:
        """
        Create the robotic arm for `name` driven through `version`.

        Args:
            name: Robot model name (e.g. "Ur5")
            version: ROSVersion or its tag ("noetic", "humble")
            **kwargs: Forwarded to the arm constructor

        Raises:
            UnknownRobotModelError: If the combination is not supported
        """
        ros_version = self._resolve_version(version)
        arm_class = self._registry.get((name, ros_version))
        if arm_class is None:
            logger.error(f"No robotic arm model for {name!r} on ROS {ros_version.value}")
            raise UnknownRobotModelError(
                f"No such robot model: {name!r} for ROS version {ros_version.value!r}")

        return arm_class(ros_version, **kwargs)

    # Alias
    create_robotic_arm = create
