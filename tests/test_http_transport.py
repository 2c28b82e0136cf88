"""Tests for the HTTP operation transport."""

import asyncio
import json

import httpx

from selection_sync.adapters.http_operation_transport import HttpxOperationTransport
from selection_sync.domain.operations import DeleteSelection


def _transport(handler) -> HttpxOperationTransport:  # type: ignore[no-untyped-def]
    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxOperationTransport(
        base_url="https://sync.example.com",
        api_token="sync-token",
        project_id="proj_1",
        http_client=async_client,
    )


def test_fetch_since_decodes_operations() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/projects/proj_1/operations"
        assert request.url.params["since"] == "4"
        assert request.headers["X-Sync-Token"] == "sync-token"
        return httpx.Response(
            200,
            json={
                "operations": [
                    {
                        "id": "d1",
                        "type": "DELETE_SELECTION",
                        "instanceId": "inst1",
                        "timestamp": 150,
                        "browserId": "bB",
                    }
                ],
                "lastVersion": 5,
                "hasMore": True,
            },
        )

    result = asyncio.run(_transport(handler).fetch_since(4))

    assert result.last_version == 5
    assert result.has_more
    assert result.operations == [
        DeleteSelection(id="d1", timestamp=150, browser_id="bB", instance_id="inst1")
    ]


def test_push_sends_wire_records() -> None:
    seen: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content.decode()))
        return httpx.Response(
            200, json={"success": True, "lastVersion": 9, "processedCount": 1}
        )

    operation = DeleteSelection(id="d1", timestamp=1, browser_id="bA", instance_id="i")
    result = asyncio.run(_transport(handler).push([operation]))

    assert result.success
    assert result.last_version == 9
    assert result.processed_count == 1
    assert seen[0]["operations"][0]["instanceId"] == "i"


def test_push_reports_http_errors_without_raising() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"detail": "maintenance"})

    operation = DeleteSelection(id="d1", timestamp=1, browser_id="bA", instance_id="i")
    result = asyncio.run(_transport(handler).push([operation]))

    assert not result.success
    assert result.error
