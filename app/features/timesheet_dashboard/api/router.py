"""
Timesheet dashboard routes.

Every endpoint goes through the application's TimesheetAggregator, so the
widgets of one dashboard page share a single fetch per subject.
"""

from dataclasses import asdict
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request, status

from app.config import settings
from app.infrastructure.observability.logging import get_logger
from app.models.api.dashboard_response import (
    AggregationResponse,
    CacheInvalidationResponse,
    ContributionCellResponse,
    ContributionGridResponse,
    DayBucketResponse,
    GoalProgressResponse,
    MonthBucketResponse,
    WeekBucketResponse,
    WeeklyBreakdownResponse,
    YearBucketResponse,
)

from ..domain.models import EMPTY, AggregationResult, DayBucket
from ..repository.line_item_client import TimesheetFetchError
from ..services.aggregation_cache import TimesheetAggregator
from ..services.dashboard_views import (
    DashboardLevel,
    contribution_grid,
    goal_progress,
    weekly_breakdown,
)

router = APIRouter(prefix="/dashboard/timesheets", tags=["timesheet-dashboard"])
logger = get_logger(__name__)

# about 190 years of weeks
MAX_WEEK_NUMBER = 10_000


def get_aggregator(request: Request) -> TimesheetAggregator:
    """Aggregator created by the application lifespan."""
    return request.app.state.timesheet_aggregator


async def _load(aggregator: TimesheetAggregator, subject_key: str):
    try:
        return await aggregator.get_aggregation(subject_key)
    except TimesheetFetchError as e:
        logger.error("Dashboard data unavailable", subject_key=subject_key, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Timesheet source unavailable",
        ) from e


async def _require_data(aggregator: TimesheetAggregator, subject_key: str) -> AggregationResult:
    outcome = await _load(aggregator, subject_key)
    if outcome is EMPTY:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No timesheet data for this subject",
        )
    return outcome


def _day_response(day: DayBucket) -> DayBucketResponse:
    return DayBucketResponse(**asdict(day), label=day.label)


@router.get("/{subject_key}/aggregation", response_model=AggregationResponse)
async def get_aggregation(
    subject_key: str, aggregator: TimesheetAggregator = Depends(get_aggregator)
) -> AggregationResponse:
    outcome = await _load(aggregator, subject_key)
    if outcome is EMPTY:
        return AggregationResponse(subject_key=subject_key, has_data=False)

    return AggregationResponse(
        subject_key=subject_key,
        has_data=True,
        start_of_first_week=outcome.start_of_first_week,
        years=[YearBucketResponse(**asdict(y)) for y in outcome.years],
        months=[MonthBucketResponse(**asdict(m)) for m in outcome.months],
        weeks=[
            WeekBucketResponse(
                week=w.week,
                label=outcome.week_label(w.week),
                total_duration=w.total_duration,
                attendance_duration=w.attendance_duration,
                absence_duration=w.absence_duration,
                project_durations=w.project_durations,
                days=[_day_response(d) for d in w.days],
            )
            for w in outcome.weeks
        ],
        days=[_day_response(d) for d in outcome.days],
    )


@router.get("/{subject_key}/weeks/{week_number}", response_model=WeeklyBreakdownResponse)
async def get_weekly_breakdown(
    subject_key: str,
    week_number: int = Path(..., ge=1, le=MAX_WEEK_NUMBER),
    aggregator: TimesheetAggregator = Depends(get_aggregator),
) -> WeeklyBreakdownResponse:
    result = await _require_data(aggregator, subject_key)
    try:
        breakdown = weekly_breakdown(result, week_number, daily_target=settings.DAILY_TARGET_HOURS)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return WeeklyBreakdownResponse.model_validate(asdict(breakdown))


@router.get("/{subject_key}/progress/{level}", response_model=GoalProgressResponse)
async def get_goal_progress(
    subject_key: str,
    level: DashboardLevel,
    index: int = Query(0, description="Bucket index; out-of-range values wrap around"),
    aggregator: TimesheetAggregator = Depends(get_aggregator),
) -> GoalProgressResponse:
    result = await _require_data(aggregator, subject_key)
    progress = goal_progress(result, level, index=index, goals=settings.goal_hours())
    return GoalProgressResponse.model_validate(asdict(progress))


@router.get("/{subject_key}/contributions", response_model=ContributionGridResponse)
async def get_contributions(
    subject_key: str,
    year: int | None = Query(None, ge=1, le=9998, description="Calendar year, defaults to the current one"),
    aggregator: TimesheetAggregator = Depends(get_aggregator),
) -> ContributionGridResponse:
    result = await _require_data(aggregator, subject_key)
    target_year = year or datetime.now(UTC).year
    cells = contribution_grid(result, target_year)
    return ContributionGridResponse(
        year=target_year, cells=[ContributionCellResponse(**asdict(cell)) for cell in cells]
    )


@router.delete("/{subject_key}/cache", response_model=CacheInvalidationResponse)
async def invalidate_cache(
    subject_key: str, aggregator: TimesheetAggregator = Depends(get_aggregator)
) -> CacheInvalidationResponse:
    invalidated = aggregator.invalidate(subject_key)
    return CacheInvalidationResponse(subject_key=subject_key, invalidated=invalidated)
