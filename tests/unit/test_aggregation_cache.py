import asyncio
import gc

import pytest

from app.features.timesheet_dashboard.domain.models import EMPTY, AggregationResult
from app.features.timesheet_dashboard.repository.line_item_client import TimesheetFetchError
from app.features.timesheet_dashboard.services.aggregation_cache import TimesheetAggregator


@pytest.mark.asyncio
async def test_concurrent_requests_share_one_fetch(fake_source, aggregator, sample_records):
    fake_source.records["U1"] = sample_records
    fake_source.gate = asyncio.Event()

    first = asyncio.create_task(aggregator.get_aggregation("U1"))
    second = asyncio.create_task(aggregator.get_aggregation("U1"))
    await asyncio.sleep(0)
    assert aggregator.stats()["in_flight"] == 1

    fake_source.gate.set()
    results = await asyncio.gather(first, second)

    assert fake_source.calls == ["U1"]
    assert results[0] is results[1]
    assert isinstance(results[0], AggregationResult)


@pytest.mark.asyncio
async def test_cached_result_is_served_without_fetch(fake_source, aggregator, sample_records):
    fake_source.records["U1"] = sample_records

    first = await aggregator.get_aggregation("U1")
    second = await aggregator.get_aggregation("U1")

    assert first is second
    assert fake_source.calls == ["U1"]
    assert aggregator.stats() == {"cached": 1, "in_flight": 0}


@pytest.mark.asyncio
async def test_no_entries_maps_to_empty_marker(fake_source, aggregator):
    fake_source.records["U3"] = []

    result = await aggregator.get_aggregation("U3")
    again = await aggregator.get_aggregation("U3")

    assert result is EMPTY
    assert not result
    assert again is EMPTY
    assert fake_source.calls == ["U3"]


@pytest.mark.asyncio
async def test_only_malformed_entries_maps_to_empty_marker(fake_source, aggregator):
    fake_source.records["U4"] = [{"kind": "Attendance", "date": "nope", "duration": 1}]

    assert await aggregator.get_aggregation("U4") is EMPTY


@pytest.mark.asyncio
async def test_failure_is_not_cached_and_next_call_retries(fake_source, aggregator, sample_records):
    fake_source.records["U2"] = sample_records
    fake_source.fail_next("U2", RuntimeError("backend down"))

    with pytest.raises(TimesheetFetchError):
        await aggregator.get_aggregation("U2")

    assert aggregator.stats() == {"cached": 0, "in_flight": 0}

    result = await aggregator.get_aggregation("U2")

    assert isinstance(result, AggregationResult)
    assert fake_source.calls == ["U2", "U2"]


@pytest.mark.asyncio
async def test_failure_reaches_every_waiter(fake_source, aggregator):
    fake_source.gate = asyncio.Event()
    error = TimesheetFetchError("HTTP 503", subject_key="U2", status_code=503)
    fake_source.fail_next("U2", error)

    waiters = [asyncio.create_task(aggregator.get_aggregation("U2")) for _ in range(3)]
    await asyncio.sleep(0)
    fake_source.gate.set()
    outcomes = await asyncio.gather(*waiters, return_exceptions=True)

    assert all(outcome is error for outcome in outcomes)
    assert fake_source.calls == ["U2"]


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_shared_fetch(fake_source, aggregator, sample_records):
    fake_source.records["U1"] = sample_records
    fake_source.gate = asyncio.Event()

    impatient = asyncio.create_task(aggregator.get_aggregation("U1"))
    patient = asyncio.create_task(aggregator.get_aggregation("U1"))
    await asyncio.sleep(0)

    impatient.cancel()
    fake_source.gate.set()

    result = await patient
    assert isinstance(result, AggregationResult)
    assert fake_source.calls == ["U1"]


@pytest.mark.asyncio
async def test_failure_after_all_waiters_cancelled_is_not_reported_unretrieved(fake_source, aggregator):
    loop = asyncio.get_running_loop()
    reported = []
    previous_handler = loop.get_exception_handler()
    loop.set_exception_handler(lambda loop, context: reported.append(context))

    fake_source.fail_next("U1", RuntimeError("backend down"))
    fake_source.gate = asyncio.Event()

    waiter = asyncio.create_task(aggregator.get_aggregation("U1"))
    await asyncio.sleep(0)
    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    fake_source.gate.set()
    for _ in range(5):
        await asyncio.sleep(0)
    assert aggregator.stats() == {"cached": 0, "in_flight": 0}

    del waiter
    gc.collect()
    loop.set_exception_handler(previous_handler)

    assert not [c for c in reported if "never retrieved" in c.get("message", "")]


@pytest.mark.asyncio
async def test_keys_are_independent(fake_source, aggregator, sample_records):
    fake_source.records["U1"] = sample_records

    await asyncio.gather(aggregator.get_aggregation("U1"), aggregator.get_aggregation("U5"))

    assert sorted(fake_source.calls) == ["U1", "U5"]


@pytest.mark.asyncio
async def test_invalidate_forces_refetch(fake_source, aggregator, sample_records):
    fake_source.records["U1"] = sample_records
    await aggregator.get_aggregation("U1")

    assert aggregator.invalidate("U1") is True
    assert aggregator.invalidate("U1") is False

    await aggregator.get_aggregation("U1")
    assert fake_source.calls == ["U1", "U1"]


@pytest.mark.asyncio
async def test_injected_storage_is_used(fake_source, sample_records):
    results: dict = {}
    aggregator = TimesheetAggregator(fake_source, results=results)
    fake_source.records["U1"] = sample_records

    outcome = await aggregator.get_aggregation("U1")

    assert results == {"U1": outcome}
    aggregator.clear()
    assert results == {}
