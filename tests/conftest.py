import asyncio

import pytest

from app.features.timesheet_dashboard.services.aggregation_cache import TimesheetAggregator


class FakeTimesheetSource:
    """In-memory timesheet source that records calls and can be paused or made to fail."""

    def __init__(self, records: dict[str, list] | None = None):
        self.records: dict[str, list] = records or {}
        self.calls: list[str] = []
        self.failures: dict[str, list[Exception]] = {}
        self.gate: asyncio.Event | None = None

    def fail_next(self, subject_key: str, error: Exception) -> None:
        self.failures.setdefault(subject_key, []).append(error)

    async def fetch_line_items(self, subject_key: str) -> list:
        self.calls.append(subject_key)
        if self.gate is not None:
            await self.gate.wait()
        pending = self.failures.get(subject_key)
        if pending:
            raise pending.pop(0)
        return list(self.records.get(subject_key, []))

    async def ping(self) -> bool:
        return True


def line_item(kind: str, day: str, label: str, duration: float) -> dict:
    return {"kind": kind, "date": day, "label": label, "duration": duration}


@pytest.fixture
def fake_source():
    return FakeTimesheetSource()


@pytest.fixture
def aggregator(fake_source):
    return TimesheetAggregator(fake_source)


@pytest.fixture
def sample_records():
    return [
        line_item("Attendance", "2024-01-01", "ProjA", 4),
        line_item("Attendance", "2024-01-01", "ProjA", 4),
        line_item("Absence", "2024-01-02", "", 8),
    ]
