#!/usr/bin/env python3
"""
Setup script for the robotic arm kinematics and MAM planner packages
"""

from setuptools import setup, find_packages

setup(
    name="wp5_robotic_arms",
    version="1.0.0",
    description="Robotic arm kinematics abstraction and waypoint orientation engine",
    author="Robot Control Team",
    packages=find_packages(include=["robotic_arms", "robotic_arms.*", "mam_planner", "mam_planner.*"]),
    package_data={
        "robotic_arms": ["config/*.yaml"],
        "mam_planner": ["config/*.yaml"],
    },
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.19.0",
        "scipy>=1.5.0",
        "PyYAML>=5.4",
    ],
    extras_require={
        "test": ["pytest>=6.0"],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
