"""
Robotic Arms Package
====================

Forward/inverse kinematics for UR-family robotic arms through two
independent solver families.

Package Structure:
- src/: Core source code modules
- config/: Joint limits per robot model
- tests/: Unit tests

Author: Robot Control Team
"""

__version__ = "1.0.0"
__author__ = "Robot Control Team"
