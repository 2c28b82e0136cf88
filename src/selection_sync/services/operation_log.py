"""Server-side operation log shared by all browsers of a project."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from selection_sync.domain.operations import Operation
from selection_sync.services.sync import FetchResult, PushResult

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 500


@dataclass(frozen=True)
class LoggedOperation:
    """Operation with the log version it was stored under."""

    version: int
    operation: Operation


class OperationLogRepository(Protocol):
    """Persistence interface for the append-only operation log."""

    def append_operations(
        self, project_id: str, operations: Sequence[Operation]
    ) -> None:
        """Store operations, ignoring ids that are already logged."""

    def list_operations_since(
        self, project_id: str, version: int, limit: int
    ) -> list[LoggedOperation]:
        """Return logged operations with a version above ``version``."""

    def latest_version(self, project_id: str) -> int:
        """Return the highest version stored for a project, or 0."""


@dataclass
class OperationLogService:
    """Application service behind the fetch and push endpoints."""

    repository: OperationLogRepository
    page_size: int = DEFAULT_PAGE_SIZE

    def fetch_since(self, project_id: str, version: int) -> FetchResult:
        """Return the next page of operations after ``version``."""
        logged = self.repository.list_operations_since(
            project_id, version, self.page_size
        )
        last_version = logged[-1].version if logged else version
        return FetchResult(
            operations=[entry.operation for entry in logged],
            last_version=last_version,
            has_more=len(logged) >= self.page_size,
        )

    def push(self, project_id: str, operations: Sequence[Operation]) -> PushResult:
        """Append operations and acknowledge them with the new log version."""
        if operations:
            self.repository.append_operations(project_id, operations)
            logger.info(
                "Stored %d operations for project %s", len(operations), project_id
            )
        return PushResult(
            success=True,
            last_version=self.repository.latest_version(project_id),
            processed_count=len(operations),
        )
