from datetime import date

import pytest

from app.features.timesheet_dashboard.domain.models import EntryKind, RawEntry
from app.features.timesheet_dashboard.pipeline.rollup.service import build_aggregation
from app.features.timesheet_dashboard.services.dashboard_views import (
    contribution_grid,
    contribution_level,
    goal_progress,
    weekly_breakdown,
    wrap_index,
)


@pytest.fixture
def result():
    entries = [
        RawEntry(kind=EntryKind.ATTENDANCE, date=date(2024, 1, 1), label="ProjA", duration=6),
        RawEntry(kind=EntryKind.ATTENDANCE, date=date(2024, 1, 1), label="ProjB", duration=2),
        RawEntry(kind=EntryKind.ABSENCE, date=date(2024, 1, 3), label="", duration=8),
        RawEntry(kind=EntryKind.ATTENDANCE, date=date(2024, 2, 12), label="ProjA", duration=10),
    ]
    return build_aggregation(entries)


def test_weekly_breakdown_fills_all_seven_days(result):
    breakdown = weekly_breakdown(result, 1)

    assert breakdown.title == "Week: Mon Jan 01 2024 - Sun Jan 07 2024"
    assert breakdown.labels[0] == "Mon Jan 01 2024"
    assert breakdown.labels[-1] == "Sun Jan 07 2024"
    assert breakdown.durations == [8, 0, 8, 0, 0, 0, 0]
    assert breakdown.attendance == [8, 0, 0, 0, 0, 0, 0]
    assert breakdown.absence == [0, 0, 8, 0, 0, 0, 0]
    assert breakdown.projects == {
        "ProjA": [6, 0, 0, 0, 0, 0, 0],
        "ProjB": [2, 0, 0, 0, 0, 0, 0],
    }
    assert breakdown.target == [8.0] * 7


def test_weekly_breakdown_for_week_without_entries(result):
    breakdown = weekly_breakdown(result, 2, daily_target=7.5)

    assert breakdown.durations == [0.0] * 7
    assert breakdown.projects == {}
    assert breakdown.target == [7.5] * 7
    assert breakdown.labels[0] == "Mon Jan 08 2024"


def test_goal_progress_per_level(result):
    year = goal_progress(result, "year")
    assert year.title == "Year: 2024"
    assert year.duration == 26
    assert year.remaining == 1920 - 26
    assert [(s.label, s.duration) for s in year.segments] == [
        ("ProjA", 16),
        ("ProjB", 2),
        ("Absence", 8),
    ]

    month = goal_progress(result, "month", index=1)
    assert month.title == "Month: feb 2024"
    assert month.duration == 10

    week = goal_progress(result, "week")
    assert week.title == "Week: Mon Jan 01 2024 - Sun Jan 07 2024"
    assert week.remaining == 40 - 16

    day = goal_progress(result, "day", goals={"day": 8.0})
    assert day.title == "Day: Mon Jan 01 2024"
    assert day.remaining == 0


def test_goal_progress_remaining_never_negative(result):
    progress = goal_progress(result, "day", index=2)

    assert progress.duration == 10
    assert progress.remaining == 0.0


def test_goal_progress_index_wraps(result):
    assert goal_progress(result, "month", index=-1).index == 1
    assert goal_progress(result, "month", index=2).index == 0


def test_goal_progress_rejects_unknown_level(result):
    with pytest.raises(ValueError):
        goal_progress(result, "decade")


def test_wrap_index():
    assert wrap_index(0, 3) == 0
    assert wrap_index(3, 3) == 0
    assert wrap_index(-1, 3) == 2
    with pytest.raises(ValueError):
        wrap_index(0, 0)


def test_contribution_grid_covers_the_year(result):
    cells = contribution_grid(result, 2024)

    assert len(cells) == 366
    first = cells[0]
    assert (first.x, first.y, first.day, first.value, first.level) == (1, 1, "Mon Jan 01 2024", 8, 3)

    feb_12 = cells[31 + 11]
    assert feb_12.day == "Mon Feb 12 2024"
    assert feb_12.value == 10
    assert feb_12.level == 4
    assert feb_12.x == 7


def test_contribution_grid_days_before_first_monday_are_week_zero(result):
    cells = contribution_grid(result, 2023)

    # 2023-01-01 was a Sunday
    assert (cells[0].x, cells[0].y) == (0, 7)
    assert (cells[1].x, cells[1].y) == (1, 1)
    assert all(cell.value == 0 for cell in cells)


@pytest.mark.parametrize(
    ("value", "level"),
    [(0, 0), (0.5, 1), (3.99, 1), (4, 2), (6.5, 2), (7, 3), (9.9, 3), (10, 4), (14, 4)],
)
def test_contribution_level_thresholds(value, level):
    assert contribution_level(value) == level
