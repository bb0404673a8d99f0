"""
Cached timesheet aggregation per subject.

Several dashboard views usually ask for the same subject at the same time.
The aggregator makes sure only one fetch-and-compute runs per subject key:
later callers attach to the in-flight task, and once it finishes the result
(or the EMPTY marker) is served from memory. Failures are never cached.
"""

import asyncio
from collections.abc import MutableMapping

from app.infrastructure.observability.logging import get_logger, log_aggregation

from ..domain.models import EMPTY, AggregationResult, EmptyMarker
from ..domain.parsing import parse_entries
from ..pipeline.rollup.service import build_aggregation
from ..repository.line_item_client import TimesheetFetchError, TimesheetSource

logger = get_logger(__name__)

AggregationOutcome = AggregationResult | EmptyMarker


def _retrieve_outcome(task: asyncio.Task) -> None:
    # already logged by _fetch_and_compute; waiters may all be gone by now
    if not task.cancelled():
        task.exception()


class TimesheetAggregator:
    """
    Fetch-once, compute-once aggregation cache.

    Results live for the lifetime of the aggregator; there is no TTL. Use
    ``invalidate`` or ``clear`` to force a refetch.
    """

    def __init__(
        self,
        source: TimesheetSource,
        results: MutableMapping[str, AggregationOutcome] | None = None,
        in_flight: MutableMapping[str, asyncio.Task] | None = None,
    ):
        self._source = source
        self._results = {} if results is None else results
        self._in_flight = {} if in_flight is None else in_flight

    async def get_aggregation(self, subject_key: str) -> AggregationOutcome:
        """
        Return the rollup for a subject, fetching it at most once.

        Returns:
            AggregationResult, or EMPTY when the subject has no line items

        Raises:
            TimesheetFetchError: If the source failed; the next call retries
        """
        cached = self._results.get(subject_key)
        if cached is not None:
            return cached

        task = self._in_flight.get(subject_key)
        if task is None:
            # no await between lookup and registration
            task = asyncio.ensure_future(self._fetch_and_compute(subject_key))
            self._in_flight[subject_key] = task
            task.add_done_callback(_retrieve_outcome)
        else:
            logger.debug("Joining in-flight timesheet fetch", subject_key=subject_key)

        # a cancelled caller must not cancel the shared task
        return await asyncio.shield(task)

    async def _fetch_and_compute(self, subject_key: str) -> AggregationOutcome:
        try:
            try:
                records = await self._source.fetch_line_items(subject_key)
            except TimesheetFetchError:
                raise
            except Exception as e:
                raise TimesheetFetchError(
                    f"Failed to fetch timesheet line items: {e}", subject_key=subject_key
                ) from e

            entries = parse_entries(records, subject_key=subject_key)
            outcome: AggregationOutcome = build_aggregation(entries) if entries else EMPTY
            self._results[subject_key] = outcome

            log_aggregation(
                subject_key,
                record_count=len(records),
                entry_count=len(entries),
                has_data=outcome is not EMPTY,
                start_of_first_week=getattr(outcome, "start_of_first_week", None),
            )
            return outcome

        except TimesheetFetchError as e:
            logger.warning(
                "Timesheet fetch failed",
                subject_key=subject_key,
                error=str(e),
                status_code=e.status_code,
            )
            raise
        finally:
            self._in_flight.pop(subject_key, None)

    def invalidate(self, subject_key: str) -> bool:
        """Drop the cached result of one subject. Returns True if one was cached."""
        removed = self._results.pop(subject_key, None) is not None
        if removed:
            logger.info("Timesheet aggregation invalidated", subject_key=subject_key)
        return removed

    def clear(self) -> None:
        self._results.clear()

    def stats(self) -> dict[str, int]:
        return {"cached": len(self._results), "in_flight": len(self._in_flight)}
