"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import Client, create_client

from selection_sync.adapters.file_browser_identity import FileBrowserIdentity
from selection_sync.adapters.http_operation_transport import HttpxOperationTransport
from selection_sync.adapters.service_operation_transport import (
    ServiceOperationTransport,
)
from selection_sync.adapters.supabase_image_repository import SupabaseImageRepository
from selection_sync.adapters.supabase_operation_log_repository import (
    SupabaseOperationLogRepository,
)
from selection_sync.adapters.supabase_selection_state_repository import (
    SupabaseSelectionStateRepository,
)
from selection_sync.config import Settings, resolve_project_id
from selection_sync.services.operation_log import OperationLogService
from selection_sync.services.sync import OperationTransport, SyncService


@dataclass
class AppContainer:
    """Holds dependencies of the operation log API."""

    settings: Settings
    operation_log_service: OperationLogService
    close_resources: Callable[[], Awaitable[None]]


@dataclass
class SyncClientContainer:
    """Holds dependencies of one browser's sync client."""

    settings: Settings
    browser_id: str
    project_id: str
    sync_service: SyncService
    close_resources: Callable[[], Awaitable[None]]


def _supabase_client(settings: Settings) -> Client:
    return create_client(settings.supabase_url, settings.supabase_service_key)


def _operation_log_service(client: Client, settings: Settings) -> OperationLogService:
    return OperationLogService(
        repository=SupabaseOperationLogRepository(client),
        page_size=settings.fetch_page_size,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container for the API."""
    resolved_settings = settings or Settings()
    supabase_client = _supabase_client(resolved_settings)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        operation_log_service=_operation_log_service(
            supabase_client, resolved_settings
        ),
        close_resources=close_resources,
    )


def build_sync_client(
    settings: Settings | None = None, browser_id: str | None = None
) -> SyncClientContainer:
    """Create a sync client, talking HTTP when ``sync_api_url`` is set."""
    resolved_settings = settings or Settings()
    supabase_client = _supabase_client(resolved_settings)
    project_id = resolve_project_id(resolved_settings)
    resolved_browser_id = browser_id
    if resolved_browser_id is None:
        identity = FileBrowserIdentity(Path(resolved_settings.browser_id_path))
        resolved_browser_id = identity.get_browser_id()

    transport: OperationTransport
    http_transport: HttpxOperationTransport | None = None
    if resolved_settings.sync_api_url:
        http_transport = HttpxOperationTransport.create(
            base_url=resolved_settings.sync_api_url,
            api_token=resolved_settings.sync_api_token,
            project_id=project_id,
        )
        transport = http_transport
    else:
        transport = ServiceOperationTransport(
            service=_operation_log_service(supabase_client, resolved_settings),
            project_id=project_id,
        )

    sync_service = SyncService(
        browser_id=resolved_browser_id,
        project_id=project_id,
        transport=transport,
        state_repository=SupabaseSelectionStateRepository(supabase_client),
        image_lookup=SupabaseImageRepository(supabase_client),
    )

    async def close_resources() -> None:
        if http_transport is not None:
            await http_transport.close()

    return SyncClientContainer(
        settings=resolved_settings,
        browser_id=resolved_browser_id,
        project_id=project_id,
        sync_service=sync_service,
        close_resources=close_resources,
    )
