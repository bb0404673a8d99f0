"""
Service layer for the timesheet dashboard feature.
"""

from .aggregation_cache import TimesheetAggregator
from .dashboard_views import contribution_grid, goal_progress, weekly_breakdown

__all__ = [
    "TimesheetAggregator",
    "weekly_breakdown",
    "goal_progress",
    "contribution_grid",
]
