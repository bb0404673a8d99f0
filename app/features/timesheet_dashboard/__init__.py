"""
Timesheet dashboard feature package.

Keeps every layer of the dashboard rollup together: domain models, the line
item source, the rollup pipeline, the aggregation cache, dashboard views and
the API router.
"""

# Re-export the primary building blocks for easy access.
from .api.router import router as timesheet_dashboard_router  # noqa: F401
from .domain.models import EMPTY, AggregationResult, EmptyMarker, EntryKind, RawEntry  # noqa: F401
from .repository.line_item_client import TimesheetFetchError, TimesheetLineItemClient  # noqa: F401
from .services.aggregation_cache import TimesheetAggregator  # noqa: F401
