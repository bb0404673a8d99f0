"""
HTTP client for the timesheet line item source.

Fetches the raw line items of one subject from the backend that owns the
timesheet records. The client knows nothing about buckets; it only returns
the records as plain dicts for the parsing layer to validate.
"""

import asyncio
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

LINE_ITEMS_PATH = "/users/{subject_key}/timesheet-line-items"

REQUEST_TIMEOUT = 30  # seconds
MAX_RETRIES = 3
BACKOFF_FACTOR = 0.5
RETRY_STATUS_CODES = {429, 500, 502, 503, 504}


class TimesheetFetchError(Exception):
    """The timesheet source could not deliver line items."""

    def __init__(
        self,
        message: str,
        subject_key: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.subject_key = subject_key
        self.status_code = status_code


class TimesheetSource(Protocol):
    """Anything that can return the raw line items of a subject."""

    async def fetch_line_items(self, subject_key: str) -> list[Any]: ...


class TimesheetLineItemClient:
    """
    Timesheet source backed by an HTTP API.

    Retries transient failures (429/5xx and transport errors) with exponential
    backoff and raises TimesheetFetchError once attempts are exhausted.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.max_retries = max(1, max_retries)
        self._token = token
        self._client = self._create_client(timeout, transport)

    def _create_client(
        self, timeout: float, transport: httpx.AsyncBaseTransport | None
    ) -> httpx.AsyncClient:
        limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            limits=limits,
            headers=self._get_headers(),
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def _get_headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _request_with_retry(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with retry and backoff."""
        for attempt in range(1, self.max_retries + 1):
            try:
                response = await self._client.request(method, url, **kwargs)
                if response.status_code in RETRY_STATUS_CODES and attempt < self.max_retries:
                    backoff = BACKOFF_FACTOR * (2 ** (attempt - 1))
                    logger.debug(
                        "Timesheet source retrying request",
                        attempt=attempt,
                        status_code=response.status_code,
                        backoff_seconds=backoff,
                    )
                    await asyncio.sleep(backoff)
                    continue
                return response
            except httpx.RequestError as e:
                if attempt >= self.max_retries:
                    raise
                backoff = BACKOFF_FACTOR * (2 ** (attempt - 1))
                logger.debug(
                    "Timesheet source request error, retrying",
                    attempt=attempt,
                    error=str(e),
                    backoff_seconds=backoff,
                )
                await asyncio.sleep(backoff)
        raise RuntimeError("Timesheet source retry loop exhausted")

    async def fetch_line_items(self, subject_key: str) -> list[Any]:
        """
        Fetch the raw line items of one subject.

        Args:
            subject_key: Employee/user identifier

        Returns:
            list: Raw line item records, possibly empty

        Raises:
            TimesheetFetchError: On transport failure, non-2xx status or bad payload
        """
        path = LINE_ITEMS_PATH.format(subject_key=quote(subject_key, safe=""))

        try:
            response = await self._request_with_retry("GET", path)
        except httpx.RequestError as e:
            raise TimesheetFetchError(
                f"Timesheet source unreachable: {e}", subject_key=subject_key
            ) from e

        if response.status_code >= 400:
            raise TimesheetFetchError(
                f"Timesheet source returned HTTP {response.status_code}",
                subject_key=subject_key,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise TimesheetFetchError(
                "Timesheet source returned invalid JSON",
                subject_key=subject_key,
                status_code=response.status_code,
            ) from e

        if isinstance(payload, dict):
            payload = payload.get("records")
        if not isinstance(payload, list):
            raise TimesheetFetchError(
                "Timesheet source payload must be a list or contain a 'records' list",
                subject_key=subject_key,
                status_code=response.status_code,
            )

        logger.debug("Fetched timesheet line items", subject_key=subject_key, count=len(payload))
        return payload

    async def ping(self) -> bool:
        """True when the source answers without a server error."""
        try:
            response = await self._client.get("/")
        except httpx.RequestError as e:
            logger.warning("Timesheet source ping failed", error=str(e))
            return False
        return response.status_code < 500
