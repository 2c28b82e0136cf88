"""Supabase-backed operation log repository."""

from collections.abc import Sequence
from dataclasses import dataclass

from supabase import Client

from selection_sync.domain.operations import (
    Operation,
    operation_from_dict,
    operation_to_dict,
)
from selection_sync.services.operation_log import (
    LoggedOperation,
    OperationLogRepository,
)

_TABLE = "selection_operations"


@dataclass
class SupabaseOperationLogRepository(OperationLogRepository):
    """Supabase implementation of the append-only operation log."""

    client: Client

    def append_operations(
        self, project_id: str, operations: Sequence[Operation]
    ) -> None:
        """Insert operations; rows with a known operation id are skipped."""
        rows = [
            {
                "project_id": project_id,
                "operation_id": operation.id,
                "op_type": operation.type,
                "op_timestamp": operation.timestamp,
                "browser_id": operation.browser_id,
                "payload_json": operation_to_dict(operation),
            }
            for operation in operations
        ]
        self.client.table(_TABLE).upsert(
            rows,
            on_conflict="project_id,operation_id",
            ignore_duplicates=True,
        ).execute()

    def list_operations_since(
        self, project_id: str, version: int, limit: int
    ) -> list[LoggedOperation]:
        """Return operations stored after ``version`` in log order."""
        response = (
            self.client.table(_TABLE)
            .select("version, payload_json")
            .eq("project_id", project_id)
            .gt("version", version)
            .order("version")
            .limit(limit)
            .execute()
        )
        return [
            LoggedOperation(
                version=int(row["version"]),
                operation=operation_from_dict(row["payload_json"]),
            )
            for row in response.data or []
        ]

    def latest_version(self, project_id: str) -> int:
        """Return the highest stored version for the project."""
        response = (
            self.client.table(_TABLE)
            .select("version")
            .eq("project_id", project_id)
            .order("version", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return 0
        return int(response.data[0]["version"])
