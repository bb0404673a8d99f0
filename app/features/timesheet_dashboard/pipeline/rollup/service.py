"""
Timesheet rollup service.

Buckets validated line items into years, (year, month) pairs, continuous
Monday-anchored weeks and days. Pure and synchronous: no I/O, the input
sequence is never modified.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from ...domain.calendar import continuous_week_number, monday_on_or_before, month_key
from ...domain.models import (
    AggregationResult,
    DayBucket,
    MonthBucket,
    RawEntry,
    WeekBucket,
    YearBucket,
)


def build_aggregation(entries: Sequence[RawEntry]) -> AggregationResult:
    """
    Compute the year/month/week/day rollup for one subject.

    Week numbering is anchored on the Monday on or before the earliest entry
    date, so the input does not need to be sorted.

    Raises:
        ValueError: If ``entries`` is empty
    """
    if not entries:
        raise ValueError("Cannot aggregate an empty list of timesheet entries")

    start_of_first_week = monday_on_or_before(min(entry.date for entry in entries))

    years: dict[int, YearBucket] = {}
    months: dict[tuple[int, str], MonthBucket] = {}
    weeks: dict[int, WeekBucket] = {}
    days: dict[tuple[int, date], DayBucket] = {}

    for entry in entries:
        year = entry.date.year
        month = month_key(entry.date)
        week = continuous_week_number(entry.date, start_of_first_week)

        year_bucket = years.get(year)
        if year_bucket is None:
            year_bucket = years[year] = YearBucket(year=year)

        month_bucket = months.get((year, month))
        if month_bucket is None:
            month_bucket = months[(year, month)] = MonthBucket(year=year, month=month)

        week_bucket = weeks.get(week)
        if week_bucket is None:
            week_bucket = weeks[week] = WeekBucket(week=week)

        day_bucket = days.get((week, entry.date))
        if day_bucket is None:
            day_bucket = days[(week, entry.date)] = DayBucket(week=week, day=entry.date)
            week_bucket.days.append(day_bucket)

        for bucket in (day_bucket, week_bucket, month_bucket, year_bucket):
            bucket.add(entry)

    return AggregationResult(
        years=list(years.values()),
        months=[bucket for year in years for bucket in months.values() if bucket.year == year],
        weeks=list(weeks.values()),
        days=[day for week_bucket in weeks.values() for day in week_bucket.days],
        start_of_first_week=start_of_first_week,
    )
