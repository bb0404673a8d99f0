"""
Dashboard views derived from a timesheet aggregation.

Each function reshapes an AggregationResult into the series one dashboard
widget needs: the weekly bar breakdown, the goal progress ring and the
year-long contribution grid. No styling lives here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Literal

from ..domain.calendar import days_of_year, first_monday_of_year, format_day
from ..domain.models import AggregationResult, Bucket

DashboardLevel = Literal["year", "month", "week", "day"]

DEFAULT_GOALS: dict[str, float] = {"year": 1920.0, "month": 160.0, "week": 40.0, "day": 8.0}

# upper bounds (exclusive) of contribution levels 1-3; 0 hours is level 0
CONTRIBUTION_THRESHOLDS = (4.0, 7.0, 10.0)


@dataclass(slots=True)
class WeeklyBreakdown:
    week: int
    title: str
    labels: list[str]
    durations: list[float]
    attendance: list[float]
    absence: list[float]
    target: list[float]
    projects: dict[str, list[float]] = field(default_factory=dict)


@dataclass(slots=True)
class ProgressSegment:
    label: str
    duration: float


@dataclass(slots=True)
class GoalProgress:
    level: str
    index: int
    title: str
    goal: float
    duration: float
    remaining: float
    segments: list[ProgressSegment]


@dataclass(slots=True)
class ContributionCell:
    x: int  # Monday-based week of the year
    y: int  # ISO weekday, 1 = Monday
    day: str
    value: float
    level: int


def wrap_index(index: int, length: int) -> int:
    """Keep carousel navigation inside [0, length), wrapping at both ends."""
    if length <= 0:
        raise ValueError("Cannot navigate an empty list")
    if index < 0:
        return length - 1
    if index >= length:
        return 0
    return index


def weekly_breakdown(
    result: AggregationResult, week_number: int, daily_target: float = 8.0
) -> WeeklyBreakdown:
    """Monday-to-Sunday series for one week, zero-filled for days without entries."""
    start, _ = result.week_range(week_number)
    week_bucket = result.get_week(week_number)
    days_by_date = {day.day: day for day in week_bucket.days} if week_bucket else {}

    project_names: list[str] = []
    for day_bucket in days_by_date.values():
        for name in day_bucket.project_durations:
            if name not in project_names:
                project_names.append(name)

    breakdown = WeeklyBreakdown(
        week=week_number,
        title=f"Week: {result.week_label(week_number)}",
        labels=[],
        durations=[],
        attendance=[],
        absence=[],
        target=[daily_target] * 7,
        projects={name: [] for name in project_names},
    )

    for offset in range(7):
        current = start + timedelta(days=offset)
        day_bucket = days_by_date.get(current)
        breakdown.labels.append(format_day(current))
        breakdown.durations.append(day_bucket.total_duration if day_bucket else 0.0)
        breakdown.attendance.append(day_bucket.attendance_duration if day_bucket else 0.0)
        breakdown.absence.append(day_bucket.absence_duration if day_bucket else 0.0)
        for name, series in breakdown.projects.items():
            series.append(day_bucket.project_durations.get(name, 0.0) if day_bucket else 0.0)

    return breakdown


def _level_items(result: AggregationResult, level: str) -> list[Bucket]:
    items = {
        "year": result.years,
        "month": result.months,
        "week": result.weeks,
        "day": result.days,
    }
    if level not in items:
        raise ValueError(f"Unknown dashboard level: {level}")
    return items[level]


def _level_title(result: AggregationResult, level: str, bucket) -> str:
    if level == "year":
        return f"Year: {bucket.year}"
    if level == "month":
        return f"Month: {bucket.month} {bucket.year}"
    if level == "week":
        return f"Week: {result.week_label(bucket.week)}"
    return f"Day: {bucket.label}"


def goal_progress(
    result: AggregationResult,
    level: DashboardLevel,
    index: int = 0,
    goals: dict[str, float] | None = None,
) -> GoalProgress:
    """
    Progress of one bucket against the goal hours of its level.

    ``index`` addresses the level's bucket list and wraps around like the
    dashboard's previous/next navigation.
    """
    items = _level_items(result, level)
    index = wrap_index(index, len(items))
    bucket = items[index]
    goal = (goals or DEFAULT_GOALS)[level]

    segments = [ProgressSegment(label=name, duration=hours) for name, hours in bucket.project_durations.items()]
    segments.append(ProgressSegment(label="Absence", duration=bucket.absence_duration))

    return GoalProgress(
        level=level,
        index=index,
        title=_level_title(result, level, bucket),
        goal=goal,
        duration=bucket.total_duration,
        remaining=max(0.0, goal - bucket.total_duration),
        segments=segments,
    )


def contribution_level(value: float) -> int:
    if value <= 0:
        return 0
    for level, bound in enumerate(CONTRIBUTION_THRESHOLDS, start=1):
        if value < bound:
            return level
    return len(CONTRIBUTION_THRESHOLDS) + 1


def contribution_grid(result: AggregationResult, year: int) -> list[ContributionCell]:
    """One cell per calendar day of ``year`` with that day's total hours."""
    totals = {day.day: day.total_duration for day in result.days if day.day.year == year}
    first_monday = first_monday_of_year(year)

    cells = []
    for current in days_of_year(year):
        value = totals.get(current, 0.0)
        cells.append(
            ContributionCell(
                x=(current - first_monday).days // 7 + 1,
                y=current.isoweekday(),
                day=format_day(current),
                value=value,
                level=contribution_level(value),
            )
        )
    return cells
