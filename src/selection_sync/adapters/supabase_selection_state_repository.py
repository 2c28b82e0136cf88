"""Supabase repository for persisted selection snapshots."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from selection_sync.domain.selection import SelectionState
from selection_sync.services.sync import SelectionStateRepository, StoredSelection


@dataclass
class SupabaseSelectionStateRepository(SelectionStateRepository):
    """Supabase implementation for selection snapshots."""

    client: Client

    def load_state(self, project_id: str, browser_id: str) -> StoredSelection | None:
        """Return the stored snapshot for a browser, if present."""
        response = (
            self.client.table("selection_states")
            .select("state_json, last_version")
            .eq("project_id", project_id)
            .eq("browser_id", browser_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return StoredSelection(
            state=SelectionState.from_dict(row.get("state_json") or {}),
            last_version=int(row.get("last_version") or 0),
        )

    def save_state(
        self,
        project_id: str,
        browser_id: str,
        state: SelectionState,
        last_version: int,
    ) -> None:
        """Insert or replace the snapshot for a browser."""
        response = (
            self.client.table("selection_states")
            .upsert(
                {
                    "project_id": project_id,
                    "browser_id": browser_id,
                    "state_json": state.to_dict(),
                    "last_version": last_version,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="project_id,browser_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save selection state")
