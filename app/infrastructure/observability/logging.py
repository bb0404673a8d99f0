"""
structlog configuration for the timesheet dashboard.

Every log line is a single JSON object tagged with the service name. Dates
and enum members (week starts, entry kinds, the EMPTY marker) are rendered
as plain strings so a log query can filter on them directly.
"""

import logging
import sys
from datetime import date
from enum import Enum
from typing import Any

import structlog
from structlog.stdlib import LoggerFactory

SERVICE_NAME = "timesheet-dashboard"


def setup_logging(log_level: str = "INFO") -> None:
    """Route structlog through stdlib logging with a JSON renderer on stdout."""

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            _add_service_context,
            _plain_values,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    # the source client logs its own retries
    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _add_service_context(logger, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _plain_values(logger, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key, value in event_dict.items():
        if isinstance(value, date):
            event_dict[key] = value.isoformat()
        elif isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_dependency_check(dependency: str, healthy: bool, latency_ms: float, error: str = None):
    """Readiness probe result for one upstream dependency."""
    logger = get_logger("health")

    fields = {"dependency": dependency, "healthy": healthy, "latency_ms": latency_ms}
    if error:
        fields["error"] = error

    if healthy:
        logger.info("Dependency check passed", **fields)
    else:
        logger.error("Dependency check failed", **fields)


def log_aggregation(
    subject_key: str,
    record_count: int,
    entry_count: int,
    has_data: bool,
    start_of_first_week: date | None = None,
):
    """One line per computed rollup; skipped records show as record_count > entry_count."""
    get_logger("aggregation").info(
        "Timesheet aggregation computed",
        subject_key=subject_key,
        record_count=record_count,
        entry_count=entry_count,
        skipped=record_count - entry_count,
        has_data=has_data,
        start_of_first_week=start_of_first_week,
    )


def log_request(method: str, path: str, status_code: int, duration_ms: float, subject_key: str = None):
    """Access log line; dashboard routes carry the subject they were asked for."""
    logger = get_logger("http")

    fields = {
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": duration_ms,
    }
    if subject_key:
        fields["subject_key"] = subject_key

    if status_code >= 500:
        logger.error("Dashboard request failed", **fields)
    elif status_code >= 400:
        logger.warning("Dashboard request rejected", **fields)
    else:
        logger.info("Dashboard request completed", **fields)
