"""
Calendar helpers for the timesheet rollup.

Everything here works on plain ``datetime.date`` values. Entry dates never go
through a timezone conversion, so a line item dated 2024-01-01 is always
counted on 2024-01-01 regardless of where the service runs. Names are fixed
English abbreviations rather than ``strftime`` output, which depends on the
process locale.
"""

from datetime import date, timedelta

MONTH_NAMES = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")
WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def monday_on_or_before(day: date) -> date:
    return day - timedelta(days=day.weekday())


def month_key(day: date) -> str:
    """Lowercase short month name, e.g. 'jan'."""
    return MONTH_NAMES[day.month - 1]


def format_day(day: date) -> str:
    """Render a day as 'Mon Jan 01 2024'."""
    return (
        f"{WEEKDAY_NAMES[day.weekday()]} {MONTH_NAMES[day.month - 1].capitalize()} "
        f"{day.day:02d} {day.year:04d}"
    )


def continuous_week_number(day: date, start_of_first_week: date) -> int:
    """1-based week number counted from the anchor Monday, across year boundaries."""
    return (monday_on_or_before(day) - start_of_first_week).days // 7 + 1


def days_of_year(year: int) -> list[date]:
    start = date(year, 1, 1)
    length = (date(year + 1, 1, 1) - start).days
    return [start + timedelta(days=offset) for offset in range(length)]


def first_monday_of_year(year: int) -> date:
    jan1 = date(year, 1, 1)
    return jan1 + timedelta(days=(7 - jan1.weekday()) % 7)
