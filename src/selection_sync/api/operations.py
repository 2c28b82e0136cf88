"""Operation log endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from selection_sync.api.operation_models import PushRequest  # noqa: TC001
from selection_sync.domain.operations import operation_to_dict

if TYPE_CHECKING:
    from selection_sync.containers import AppContainer

router = APIRouter(prefix="/projects", tags=["operations"])


def _get_sync_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.sync_api_token


async def require_sync_token(
    x_sync_token: str | None = Header(default=None),
    sync_token: str = Depends(_get_sync_token),
) -> None:
    """Ensure requests include a valid sync token."""
    if not x_sync_token or x_sync_token != sync_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/{project_id}/operations", dependencies=[Depends(require_sync_token)])
async def fetch_operations(
    project_id: str, request: Request, since: int = 0
) -> dict[str, object]:
    """Return operations logged after version ``since``."""
    container: AppContainer = request.app.state.container
    result = container.operation_log_service.fetch_since(project_id, since)
    return {
        "operations": [operation_to_dict(op) for op in result.operations],
        "lastVersion": result.last_version,
        "hasMore": result.has_more,
    }


@router.post("/{project_id}/operations", dependencies=[Depends(require_sync_token)])
async def push_operations(
    project_id: str, body: PushRequest, request: Request
) -> dict[str, object]:
    """Append pushed operations to the project log."""
    container: AppContainer = request.app.state.container
    operations = [record.to_operation() for record in body.operations]
    result = container.operation_log_service.push(project_id, operations)
    return {
        "success": result.success,
        "lastVersion": result.last_version,
        "processedCount": result.processed_count,
    }
