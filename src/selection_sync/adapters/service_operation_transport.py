"""In-process transport that talks to the operation log service directly."""

from collections.abc import Sequence
from dataclasses import dataclass

from selection_sync.domain.operations import Operation
from selection_sync.services.operation_log import OperationLogService
from selection_sync.services.sync import FetchResult, OperationTransport, PushResult


@dataclass
class ServiceOperationTransport(OperationTransport):
    """Operation transport backed by a local ``OperationLogService``."""

    service: OperationLogService
    project_id: str

    async def fetch_since(self, version: int) -> FetchResult:
        """Return operations logged after ``version``."""
        return self.service.fetch_since(self.project_id, version)

    async def push(self, operations: Sequence[Operation]) -> PushResult:
        """Append operations to the log."""
        return self.service.push(self.project_id, list(operations))
