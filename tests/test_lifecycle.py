from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from alumnisearch.client.lifecycle import RequestLifecycleManager, RequestSequencer
from alumnisearch.client.update_request import UpdateRequestClient
from alumnisearch.core.models import AlumniRecord
from alumnisearch.core.outcomes import (
    HttpError,
    InvalidContentType,
    SubmissionError,
    Success,
    Timeout,
    TransportError,
)

URL = "http://api.test/api/search"


def run(handler, timeout: float = 30.0, method: str = "GET", **kwargs):
    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await RequestLifecycleManager(client, timeout=timeout).execute(method, URL, **kwargs)

    return asyncio.run(scenario())


def test_success_parses_json() -> None:
    outcome = run(lambda request: httpx.Response(200, json={"data": [], "totalCount": 0}))
    assert outcome == Success({"data": [], "totalCount": 0})
    assert outcome.ok


def test_non_json_content_type_is_not_parsed() -> None:
    outcome = run(lambda request: httpx.Response(500, html="<html>proxy error</html>"))
    assert isinstance(outcome, InvalidContentType)
    assert "text/html" in outcome.message
    assert not outcome.ok


def test_failure_status_is_http_error() -> None:
    outcome = run(lambda request: httpx.Response(404, json={"error": "missing"}))
    assert outcome == HttpError(404)


def test_malformed_json_body() -> None:
    outcome = run(
        lambda request: httpx.Response(200, content=b"{not json", headers={"content-type": "application/json"})
    )
    assert isinstance(outcome, InvalidContentType)


def test_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    outcome = run(handler)
    assert outcome == TransportError("connection refused")


def test_transport_timeout_maps_to_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    assert run(handler) == Timeout()


def test_deadline_cancels_underlying_request() -> None:
    seen = {"cancelled": False, "completed": False}

    async def handler(request: httpx.Request) -> httpx.Response:
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            seen["cancelled"] = True
            raise
        seen["completed"] = True
        return httpx.Response(200, json={})

    assert run(handler, timeout=0.05) == Timeout()
    assert seen == {"cancelled": True, "completed": False}


def test_issue_returns_cancellable_handle() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json={})

    async def scenario() -> bool:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            handle = RequestLifecycleManager(client).issue("GET", URL)
            await asyncio.sleep(0)
            handle.cancel()
            with pytest.raises(asyncio.CancelledError):
                await handle
            return handle.cancelled

    assert asyncio.run(scenario())


def test_sequencer_only_latest_ticket_is_current() -> None:
    sequencer = RequestSequencer()
    first = sequencer.next()
    second = sequencer.next()
    assert not sequencer.is_current(first)
    assert sequencer.is_current(second)


def submit(handler, record: AlumniRecord) -> None:
    async def scenario() -> None:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            manager = RequestLifecycleManager(client)
            await UpdateRequestClient(manager, "http://api.test").submit(record, {"lastOrganization": "Acme"})

    asyncio.run(scenario())


def test_update_request_posts_old_and_new_data() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(201, text="queued")

    record = AlumniRecord.from_payload({"name": "Asha Rao", "rollNumber": "2004IPG-01"})
    submit(handler, record)

    assert captured[0].method == "POST"
    assert str(captured[0].url) == "http://api.test/api/update-request"
    body = json.loads(captured[0].content)
    assert body == {
        "rollNumber": "2004IPG-01",
        "oldData": {"name": "Asha Rao", "rollNumber": "2004IPG-01"},
        "newData": {"lastOrganization": "Acme"},
    }


def test_update_request_failure_raises() -> None:
    record = AlumniRecord.from_payload({"name": "Asha Rao", "rollNumber": "2004IPG-01"})
    with pytest.raises(SubmissionError) as excinfo:
        submit(lambda request: httpx.Response(500, json={"error": "down"}), record)
    assert excinfo.value.status == 500
