"""
Domain models for the timesheet dashboard feature.

Raw line items come in from the timesheet source; the rollup pipeline turns
them into year, month, week and day buckets. Weeks are numbered continuously
from the Monday of the earliest entry, so a week bucket can span two months
or two years while every day bucket still belongs to exactly one month.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum

from .calendar import continuous_week_number, format_day


class EntryKind(str, Enum):
    ATTENDANCE = "Attendance"
    ABSENCE = "Absence"
    OTHER = "Other"  # any kind the source sends that we don't split on

    @classmethod
    def from_raw(cls, value: object) -> "EntryKind":
        if isinstance(value, cls):
            return value
        for kind in (cls.ATTENDANCE, cls.ABSENCE):
            if value == kind.value:
                return kind
        return cls.OTHER


class EmptyMarker(Enum):
    """Sentinel for a subject with no timesheet entries at all."""

    EMPTY = "no_data"

    def __bool__(self) -> bool:
        return False


EMPTY = EmptyMarker.EMPTY


@dataclass(frozen=True, slots=True)
class RawEntry:
    """One validated timesheet line item."""

    kind: EntryKind
    date: date
    label: str
    duration: float  # hours, never negative


@dataclass(slots=True, kw_only=True)
class Bucket:
    total_duration: float = 0.0
    attendance_duration: float = 0.0
    absence_duration: float = 0.0
    project_durations: dict[str, float] = field(default_factory=dict)

    def add(self, entry: RawEntry) -> None:
        self.total_duration += entry.duration
        if entry.kind is EntryKind.ATTENDANCE:
            self.attendance_duration += entry.duration
            self.project_durations[entry.label] = (
                self.project_durations.get(entry.label, 0.0) + entry.duration
            )
        elif entry.kind is EntryKind.ABSENCE:
            self.absence_duration += entry.duration


@dataclass(slots=True, kw_only=True)
class YearBucket(Bucket):
    year: int


@dataclass(slots=True, kw_only=True)
class MonthBucket(Bucket):
    year: int
    month: str  # "jan" .. "dec"


@dataclass(slots=True, kw_only=True)
class DayBucket(Bucket):
    week: int
    day: date

    @property
    def label(self) -> str:
        return format_day(self.day)


@dataclass(slots=True, kw_only=True)
class WeekBucket(Bucket):
    week: int
    days: list[DayBucket] = field(default_factory=list)


@dataclass(slots=True)
class AggregationResult:
    """Flattened rollup for one subject."""

    years: list[YearBucket]
    months: list[MonthBucket]
    weeks: list[WeekBucket]
    days: list[DayBucket]
    start_of_first_week: date

    def week_range(self, week_number: int) -> tuple[date, date]:
        """Monday and Sunday of a week; ValueError when the week falls outside the calendar."""
        try:
            start = self.start_of_first_week + timedelta(weeks=week_number - 1)
            end = start + timedelta(days=6)
        except OverflowError as e:
            raise ValueError(f"Week {week_number} is outside the supported date range") from e
        return start, end

    def week_label(self, week_number: int) -> str:
        """Render the Monday-Sunday range of a week, e.g. 'Mon Jan 01 2024 - Sun Jan 07 2024'."""
        start, end = self.week_range(week_number)
        return f"{format_day(start)} - {format_day(end)}"

    def week_number_for(self, day: date) -> int:
        return continuous_week_number(day, self.start_of_first_week)

    def get_week(self, week_number: int) -> WeekBucket | None:
        return next((w for w in self.weeks if w.week == week_number), None)

    def get_day(self, day: date) -> DayBucket | None:
        return next((d for d in self.days if d.day == day), None)
