"""Tests for container wiring."""

import asyncio

import pytest

from selection_sync.adapters.http_operation_transport import HttpxOperationTransport
from selection_sync.adapters.service_operation_transport import (
    ServiceOperationTransport,
)
from selection_sync.config import Settings, resolve_project_id
from selection_sync.containers import build_container, build_sync_client


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.operation_log_service is not None
    asyncio.run(container.close_resources())


def test_build_sync_client_uses_service_transport_without_api_url(
    settings, tmp_path
) -> None:
    settings.browser_id_path = str(tmp_path / "browser-id")

    client = build_sync_client(settings)

    assert isinstance(client.sync_service.transport, ServiceOperationTransport)
    assert client.browser_id.startswith("browser-")
    assert (tmp_path / "browser-id").read_text() == client.browser_id
    assert client.sync_service.project_id == "proj_test"
    asyncio.run(client.close_resources())


def test_build_sync_client_uses_http_transport_with_api_url(settings) -> None:
    settings.sync_api_url = "https://sync.example.com/"

    client = build_sync_client(settings, browser_id="browser-fixed")

    transport = client.sync_service.transport
    assert isinstance(transport, HttpxOperationTransport)
    assert transport.base_url == "https://sync.example.com"
    assert client.sync_service.browser_id == "browser-fixed"
    asyncio.run(client.close_resources())


def test_resolve_project_id_from_user_email() -> None:
    settings = Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        sync_api_token="sync-token",
        user_email="A",
        project_name="b",
    )

    assert resolve_project_id(settings) == "proj_2cf921"

    settings.user_email = None
    with pytest.raises(ValueError):
        resolve_project_id(settings)
