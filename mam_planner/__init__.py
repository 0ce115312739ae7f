"""
MAM planner package - waypoint ROI engine with plane-constrained orientation.
"""
