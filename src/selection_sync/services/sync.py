"""Sync orchestration between the local queue and the remote operation log."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from selection_sync.domain.operations import (
    AddSelection,
    DeleteSelection,
    Operation,
    SortChange,
    SortDirection,
    UpdateMetadata,
    add_selection,
    change_sort,
    current_time_ms,
    delete_selection,
    random_base36,
    update_metadata,
)
from selection_sync.domain.selection import SelectionState
from selection_sync.services.applier import (
    ImageLookup,
    apply_operation,
    apply_operations,
)
from selection_sync.services.conflicts import resolve_conflicts
from selection_sync.services.merge import merge_operations
from selection_sync.services.queue import OperationQueue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    """Operations returned by the remote log since a version."""

    operations: list[Operation]
    last_version: int
    has_more: bool = False


@dataclass(frozen=True)
class PushResult:
    """Acknowledgment of pushed operations."""

    success: bool
    last_version: int
    processed_count: int = 0
    error: str | None = None


@dataclass(frozen=True)
class StoredSelection:
    """Persisted selection snapshot with the log version it reflects."""

    state: SelectionState
    last_version: int


class OperationTransport(Protocol):
    """Remote operation log bound to one project."""

    async def fetch_since(self, version: int) -> FetchResult:
        """Return operations recorded after ``version``."""

    async def push(self, operations: Sequence[Operation]) -> PushResult:
        """Append operations to the remote log."""


class SelectionStateRepository(Protocol):
    """Persistence interface for selection snapshots."""

    def load_state(self, project_id: str, browser_id: str) -> StoredSelection | None:
        """Return the last persisted snapshot, if present."""

    def save_state(
        self,
        project_id: str,
        browser_id: str,
        state: SelectionState,
        last_version: int,
    ) -> None:
        """Persist a snapshot and the log version it reflects."""


@dataclass
class SyncResult:
    """Outcome of one sync cycle."""

    success: bool = True
    fetched_count: int = 0
    applied_count: int = 0
    pushed_count: int = 0
    last_version: int = 0
    error: str | None = None


@dataclass
class SyncService:
    """Keeps one browser's selection state in step with the shared log.

    User actions are applied to the local state right away and queued. A
    sync cycle fetches remote operations, merges them with the queue,
    resolves conflicts, folds the result onto the state, persists it and
    finally pushes the queue, dropping queued operations only once the
    remote log acknowledges them. Every step is idempotent, so an abandoned
    cycle can simply be run again.
    """

    browser_id: str
    project_id: str
    transport: OperationTransport
    state_repository: SelectionStateRepository
    image_lookup: ImageLookup | None = None
    queue: OperationQueue = field(default_factory=OperationQueue)
    clock: Callable[[], int] = current_time_ms
    state: SelectionState = field(default_factory=SelectionState.empty)
    last_version: int = 0

    def load(self) -> SelectionState:
        """Restore the persisted snapshot for this browser, if any."""
        stored = self.state_repository.load_state(self.project_id, self.browser_id)
        if stored is not None:
            self.state = stored.state
            self.last_version = stored.last_version
        return self.state

    def record(self, operation: Operation) -> SelectionState:
        """Apply a local operation immediately and queue it for pushing."""
        self.state = apply_operation(
            self.state,
            operation,
            self.browser_id,
            self.image_lookup,
            now_ms=self.clock(),
        )
        self.queue.enqueue(operation)
        return self.state

    def select_image(
        self,
        image_id: str,
        file_name: str | None = None,
        instance_id: str | None = None,
    ) -> AddSelection:
        """Select an image as a new instance."""
        now = self.clock()
        operation = add_selection(
            self.browser_id,
            image_id=image_id,
            instance_id=instance_id or f"{image_id}-{now}-{random_base36()}",
            file_name=file_name,
            now_ms=now,
        )
        self.record(operation)
        return operation

    def remove_selection(self, instance_id: str) -> DeleteSelection:
        """Remove a selection instance."""
        operation = delete_selection(self.browser_id, instance_id, now_ms=self.clock())
        self.record(operation)
        return operation

    def edit_metadata(
        self,
        instance_id: str,
        photo_number: str | None = None,
        description: str | None = None,
    ) -> UpdateMetadata:
        """Edit the photo number and/or description of an instance."""
        operation = update_metadata(
            self.browser_id,
            instance_id,
            photo_number=photo_number,
            description=description,
            now_ms=self.clock(),
        )
        self.record(operation)
        return operation

    def change_sort(self, sort_direction: SortDirection | None) -> SortChange:
        """Change the defect sort direction."""
        operation = change_sort(self.browser_id, sort_direction, now_ms=self.clock())
        self.record(operation)
        return operation

    async def sync(self) -> SyncResult:
        """Run one fetch, merge, resolve, apply, persist and push cycle."""
        pending = self.queue.pending()
        try:
            fetched, fetched_version = await self._fetch_all()
        except Exception:
            logger.exception(
                "Failed to fetch operations for project %s", self.project_id
            )
            raise

        now = self.clock()
        merged = merge_operations(pending, fetched)
        resolved = resolve_conflicts(merged, self.browser_id, now_ms=now)
        resolved = _drop_superseded_updates(self.state, resolved)
        state = apply_operations(
            self.state, resolved, self.browser_id, self.image_lookup, now_ms=now
        )
        version = max(self.last_version, fetched_version)
        self.state_repository.save_state(
            self.project_id, self.browser_id, state, version
        )
        self.state = state
        self.last_version = version

        result = SyncResult(
            fetched_count=len(fetched),
            applied_count=len(resolved),
            last_version=version,
        )
        if not pending:
            return result

        pushed = await self.transport.push(pending)
        if not pushed.success:
            logger.warning(
                "Push of %d operations for project %s failed: %s",
                len(pending),
                self.project_id,
                pushed.error,
            )
            result.success = False
            result.error = pushed.error or "push failed"
            return result

        result.pushed_count = self.queue.acknowledge(op.id for op in pending)
        logger.info(
            "Synced project %s: fetched=%d applied=%d pushed=%d version=%d",
            self.project_id,
            result.fetched_count,
            result.applied_count,
            result.pushed_count,
            version,
        )
        return result

    async def _fetch_all(self) -> tuple[list[Operation], int]:
        """Fetch every page after ``last_version`` so a cycle sees the whole backlog."""
        operations: list[Operation] = []
        version = self.last_version
        while True:
            page = await self.transport.fetch_since(version)
            operations.extend(page.operations)
            advanced = page.last_version > version
            version = max(version, page.last_version)
            if not page.has_more or not advanced:
                return operations, version


def _drop_superseded_updates(
    state: SelectionState, operations: Sequence[Operation]
) -> list[Operation]:
    """Skip metadata edits older than the edit already reflected in ``state``.

    Edits are compared by ``(timestamp, id)``, the same order conflict
    resolution uses, so an edit delivered in a later cycle than a newer rival
    cannot overwrite it.
    """
    kept: list[Operation] = []
    for operation in operations:
        if isinstance(operation, UpdateMetadata):
            existing = state.instance_metadata.get(operation.instance_id)
            if existing is not None and existing.supersedes(
                operation.timestamp, operation.id
            ):
                logger.debug(
                    "Skipping metadata update %s: %s already has a newer edit",
                    operation.id,
                    operation.instance_id,
                )
                continue
        kept.append(operation)
    return kept
