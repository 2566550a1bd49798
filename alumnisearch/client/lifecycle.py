from __future__ import annotations

import asyncio
import logging
from typing import Any, Generator

import httpx

from alumnisearch.core.outcomes import (
    HttpError,
    InvalidContentType,
    RequestOutcome,
    Success,
    Timeout,
    TransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
JSON_CONTENT_TYPE = "application/json"


class RequestSequencer:
    """Monotonic ticket counter for one kind of request.

    Only the holder of the latest ticket may apply its response.
    """

    def __init__(self) -> None:
        self._latest = 0

    def next(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, ticket: int) -> bool:
        return ticket == self._latest

    @property
    def latest(self) -> int:
        return self._latest


class RequestHandle:
    def __init__(self, task: asyncio.Task[RequestOutcome]) -> None:
        self._task = task

    def cancel(self) -> None:
        self._task.cancel()

    @property
    def done(self) -> bool:
        return self._task.done()

    @property
    def cancelled(self) -> bool:
        return self._task.cancelled()

    def __await__(self) -> Generator[Any, None, RequestOutcome]:
        return self._task.__await__()


class RequestLifecycleManager:
    def __init__(self, client: httpx.AsyncClient, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.client = client
        self.timeout = timeout

    async def execute(
        self,
        method: str,
        url: str,
        *,
        params: Any = None,
        json: Any = None,
        expect_json: bool = True,
    ) -> RequestOutcome:
        try:
            response = await asyncio.wait_for(
                self.client.request(method, url, params=params, json=json),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("request_timeout", extra={"extra_fields": {"url": url, "timeout": self.timeout}})
            return Timeout()
        except httpx.HTTPError as exc:
            logger.warning("request_transport_error", extra={"extra_fields": {"url": url, "error": str(exc)}})
            return TransportError(str(exc) or exc.__class__.__name__)

        if expect_json:
            content_type = response.headers.get("content-type", "")
            if JSON_CONTENT_TYPE not in content_type.lower():
                return InvalidContentType(f"Expected {JSON_CONTENT_TYPE}, got {content_type or 'no content type'}")

        if response.is_error:
            return HttpError(response.status_code)

        if not expect_json:
            return Success(None)
        try:
            return Success(response.json())
        except ValueError as exc:
            return InvalidContentType(f"Malformed JSON body: {exc}")

    def issue(
        self,
        method: str,
        url: str,
        *,
        params: Any = None,
        json: Any = None,
        expect_json: bool = True,
    ) -> RequestHandle:
        task = asyncio.ensure_future(
            self.execute(method, url, params=params, json=json, expect_json=expect_json)
        )
        return RequestHandle(task)
