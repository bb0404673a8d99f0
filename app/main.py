"""
Timesheet dashboard service entry point with source client lifecycle management.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app.config import settings
from app.features.timesheet_dashboard import (
    TimesheetAggregator,
    TimesheetLineItemClient,
    timesheet_dashboard_router,
)
from app.infrastructure.observability.logging import get_logger, log_request, setup_logging
from app.routes import health

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the timesheet source client and the aggregation cache, close them on shutdown."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    client_config = settings.get_http_client_config()
    client = TimesheetLineItemClient(
        base_url=settings.timesheet_base_url(),
        token=settings.TIMESHEET_API_TOKEN,
        timeout=client_config["timeout"],
        max_retries=client_config["max_retries"],
    )
    app.state.timesheet_client = client
    app.state.timesheet_aggregator = TimesheetAggregator(client)
    logger.info("Timesheet source configured", base_url=client.base_url)

    yield

    logger.info("Application shutting down")
    try:
        await client.close()
    except Exception as e:
        logger.error("Error closing timesheet source client", error=str(e))
    else:
        logger.info("Timesheet source client closed")


app = FastAPI(
    title="Timesheet Dashboard",
    description="Cached timesheet rollups for dashboard charts",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(timesheet_dashboard_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
        subject_key=request.path_params.get("subject_key"),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
