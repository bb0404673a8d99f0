# app/models/api/dashboard_response.py
"""
Timesheet dashboard API response models.
Used by the dashboard router for output formatting.
"""

from datetime import date

from pydantic import BaseModel, Field


class BucketTotals(BaseModel):
    """Duration sums shared by every bucket level."""

    total_duration: float = Field(..., description="Hours across all entry kinds")
    attendance_duration: float = Field(..., description="Hours from Attendance entries")
    absence_duration: float = Field(..., description="Hours from Absence entries")
    project_durations: dict[str, float] = Field(
        default_factory=dict, description="Attendance hours per project name"
    )


class YearBucketResponse(BucketTotals):
    year: int = Field(..., description="Calendar year")


class MonthBucketResponse(BucketTotals):
    year: int = Field(..., description="Calendar year")
    month: str = Field(..., description="Lowercase short month name, e.g. 'jan'")


class DayBucketResponse(BucketTotals):
    week: int = Field(..., description="Continuous week number")
    day: date = Field(..., description="Calendar day")
    label: str = Field(..., description="Day rendered as 'Mon Jan 01 2024'")


class WeekBucketResponse(BucketTotals):
    week: int = Field(..., description="Continuous week number, 1 = earliest week")
    label: str = Field(..., description="Monday-Sunday range of the week")
    days: list[DayBucketResponse] = Field(default_factory=list, description="Days with entries")


class AggregationResponse(BaseModel):
    """Full rollup for one subject."""

    subject_key: str = Field(..., description="Employee/user identifier")
    has_data: bool = Field(..., description="False when the subject has no line items")
    start_of_first_week: date | None = Field(None, description="Monday anchoring week 1")
    years: list[YearBucketResponse] = Field(default_factory=list)
    months: list[MonthBucketResponse] = Field(default_factory=list)
    weeks: list[WeekBucketResponse] = Field(default_factory=list)
    days: list[DayBucketResponse] = Field(default_factory=list)


class WeeklyBreakdownResponse(BaseModel):
    """Monday-Sunday series for the weekly bar chart."""

    week: int = Field(..., description="Continuous week number")
    title: str = Field(..., description="Week title with date range")
    labels: list[str] = Field(..., description="Seven day labels, Monday first")
    durations: list[float] = Field(..., description="Total hours per day")
    attendance: list[float] = Field(..., description="Attendance hours per day")
    absence: list[float] = Field(..., description="Absence hours per day")
    target: list[float] = Field(..., description="Daily target hours")
    projects: dict[str, list[float]] = Field(..., description="Hours per project per day")


class ProgressSegmentResponse(BaseModel):
    label: str = Field(..., description="Project name or 'Absence'")
    duration: float = Field(..., description="Hours")


class GoalProgressResponse(BaseModel):
    """Progress of one bucket against its goal."""

    level: str = Field(..., description="year, month, week or day")
    index: int = Field(..., description="Resolved bucket index after wrap-around")
    title: str = Field(..., description="Bucket title")
    goal: float = Field(..., description="Goal hours for the level")
    duration: float = Field(..., description="Hours booked")
    remaining: float = Field(..., description="Hours left to reach the goal, never negative")
    segments: list[ProgressSegmentResponse] = Field(..., description="Breakdown by project and absence")


class ContributionCellResponse(BaseModel):
    x: int = Field(..., description="Monday-based week of the year")
    y: int = Field(..., description="ISO weekday, 1 = Monday")
    day: str = Field(..., description="Day label")
    value: float = Field(..., description="Total hours")
    level: int = Field(..., description="Intensity level 0-4")


class ContributionGridResponse(BaseModel):
    year: int = Field(..., description="Calendar year")
    cells: list[ContributionCellResponse] = Field(..., description="One cell per day of the year")


class CacheInvalidationResponse(BaseModel):
    subject_key: str
    invalidated: bool = Field(..., description="True if a cached aggregation was dropped")
