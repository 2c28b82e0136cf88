"""Deterministic conflict resolution for merged operations."""

import logging
from collections import defaultdict
from collections.abc import Sequence

from selection_sync.domain.operations import (
    AddSelection,
    DeleteSelection,
    Operation,
    UpdateMetadata,
    current_time_ms,
)
from selection_sync.services.merge import operation_sort_key

logger = logging.getLogger(__name__)

RECENCY_WINDOW_MS = 5000


def resolve_conflicts(
    operations: Sequence[Operation],
    current_browser_id: str,
    now_ms: int | None = None,
) -> list[Operation]:
    """Drop contradictory operations and return the rest in time order.

    Rules, per selection instance:

    - a delete discards every add and metadata update for the instance,
      whatever their timestamps;
    - only one metadata update survives: this browser's own recent edit if
      no later edit from another browser exists, otherwise the latest edit;
    - additions, sort changes and unknown kinds pass through.
    """
    now = current_time_ms() if now_ms is None else now_ms
    deleted = {
        operation.instance_id
        for operation in operations
        if isinstance(operation, DeleteSelection)
    }

    resolved: list[Operation] = []
    updates: dict[str, list[UpdateMetadata]] = defaultdict(list)
    for operation in operations:
        if isinstance(operation, AddSelection | UpdateMetadata):
            if operation.instance_id in deleted:
                logger.debug(
                    "Discarding %s %s: instance %s was deleted",
                    operation.type,
                    operation.id,
                    operation.instance_id,
                )
                continue
            if isinstance(operation, UpdateMetadata):
                updates[operation.instance_id].append(operation)
                continue
        resolved.append(operation)

    for instance_id, candidates in updates.items():
        winner = _pick_metadata_winner(candidates, current_browser_id, now)
        if len(candidates) > 1:
            logger.debug(
                "Resolved %d metadata updates for %s in favour of %s",
                len(candidates),
                instance_id,
                winner.id,
            )
        resolved.append(winner)

    resolved.sort(key=operation_sort_key)
    return resolved


def _pick_metadata_winner(
    candidates: list[UpdateMetadata], current_browser_id: str, now_ms: int
) -> UpdateMetadata:
    latest = max(candidates, key=operation_sort_key)
    recent_local = [
        candidate
        for candidate in candidates
        if candidate.browser_id == current_browser_id
        and now_ms - candidate.timestamp < RECENCY_WINDOW_MS
    ]
    if not recent_local:
        return latest
    local = max(recent_local, key=operation_sort_key)
    superseded = any(
        candidate.browser_id != current_browser_id
        and candidate.timestamp > local.timestamp
        for candidate in candidates
    )
    return latest if superseded else local
