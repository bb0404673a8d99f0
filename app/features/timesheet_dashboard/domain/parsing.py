"""
Validation of raw line items at the fetch boundary.

The timesheet source hands back loosely typed records. Each one is checked
here and turned into a ``RawEntry``; a record that cannot be read (bad date,
missing or negative duration, not an object at all) is skipped on its own so
one broken line item never hides a whole dashboard.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.infrastructure.observability.logging import get_logger

from .models import EntryKind, RawEntry

logger = get_logger(__name__)


class MalformedEntryError(ValueError):
    """A single line item that cannot be turned into a RawEntry."""

    def __init__(self, index: int, reason: str):
        super().__init__(f"Line item {index}: {reason}")
        self.index = index
        self.reason = reason


class LineItemPayload(BaseModel):
    """Wire shape of one line item: {kind, date, label, duration}."""

    model_config = ConfigDict(extra="ignore")

    kind: Any = None
    date: date
    label: str = ""
    duration: float = Field(..., ge=0)

    @field_validator("date", mode="before")
    @classmethod
    def _calendar_day(cls, value: Any) -> date:
        # datetime first: it is a subclass of date
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            text = value.strip()
            if len(text) == 10:
                return date.fromisoformat(text)
            # keep the calendar day as written, never shift it by the offset
            return datetime.fromisoformat(text).date()
        raise ValueError(f"unsupported date value {value!r}")

    @field_validator("label", mode="before")
    @classmethod
    def _label_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def to_entry(self) -> RawEntry:
        return RawEntry(
            kind=EntryKind.from_raw(self.kind),
            date=self.date,
            label=self.label,
            duration=self.duration,
        )


def parse_entry(record: Any, index: int) -> RawEntry:
    """Validate one record; raises MalformedEntryError."""
    if isinstance(record, RawEntry):
        if record.duration < 0:
            raise MalformedEntryError(index, f"negative duration {record.duration}")
        return record
    if not isinstance(record, Mapping):
        raise MalformedEntryError(index, f"expected an object, got {type(record).__name__}")

    try:
        return LineItemPayload.model_validate(dict(record)).to_entry()
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise MalformedEntryError(index, problems) from e


def parse_entries(records: Iterable[Any], subject_key: str | None = None) -> list[RawEntry]:
    """
    Validate a batch of line items, skipping malformed ones.

    Args:
        records: Raw records as returned by the timesheet source
        subject_key: Only used for log context

    Returns:
        list[RawEntry]: Valid entries in input order
    """
    entries: list[RawEntry] = []
    skipped: list[MalformedEntryError] = []

    for index, record in enumerate(records):
        try:
            entries.append(parse_entry(record, index))
        except MalformedEntryError as e:
            skipped.append(e)

    if skipped:
        logger.warning(
            "Skipped malformed timesheet line items",
            subject_key=subject_key,
            skipped=len(skipped),
            accepted=len(entries),
            errors=[str(e) for e in skipped[:10]],
        )

    return entries
