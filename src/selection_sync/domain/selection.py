"""Domain models for the selection workspace state."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from selection_sync.domain.operations import SortDirection


@dataclass(frozen=True)
class SelectedImage:
    """One selection instance of an image."""

    id: str
    instance_id: str
    file_name: str


@dataclass(frozen=True)
class InstanceMetadata:
    """Per-instance metadata edited by users.

    ``last_modified`` and ``last_operation_id`` identify the edit the values
    came from.
    """

    photo_number: str | None = None
    description: str | None = None
    last_modified: int | None = None
    last_operation_id: str | None = None

    def merged(
        self,
        changes: Mapping[str, str],
        last_modified: int,
        operation_id: str | None = None,
    ) -> "InstanceMetadata":
        """Return a copy with ``changes`` applied and a new modification time."""
        return replace(
            self,
            **changes,
            last_modified=last_modified,
            last_operation_id=operation_id,
        )

    def supersedes(self, timestamp: int, operation_id: str) -> bool:
        """Return whether these values come from an edit later than the given one."""
        if self.last_modified is None:
            return False
        current = (self.last_modified, self.last_operation_id or "")
        return current > (timestamp, operation_id)


@dataclass(frozen=True)
class SelectionState:
    """Snapshot of the selection workspace that operations are folded into.

    Snapshots are never mutated; every change produces a new instance with
    fresh containers. ``deleted_instance_ids`` keeps the id of every deleted
    instance for the life of the project and is never pruned, so persisted
    snapshots grow with the number of deletions.
    """

    selected_images: tuple[SelectedImage, ...] = ()
    instance_metadata: dict[str, InstanceMetadata] = field(default_factory=dict)
    defect_sort_direction: SortDirection | None = None
    deleted_instance_ids: frozenset[str] = frozenset()

    @classmethod
    def empty(cls) -> "SelectionState":
        """Return a state with nothing selected."""
        return cls()

    def has_instance(self, instance_id: str) -> bool:
        """Return whether a selection instance is present."""
        return any(item.instance_id == instance_id for item in self.selected_images)

    def is_deleted(self, instance_id: str) -> bool:
        """Return whether an instance has been deleted; deletions are final."""
        return instance_id in self.deleted_instance_ids

    def instance_ids(self) -> list[str]:
        """Return selected instance ids in display order."""
        return [item.instance_id for item in self.selected_images]

    def to_dict(self) -> dict[str, object]:
        """Encode the state for persistence."""
        return {
            "selectedImages": [
                {
                    "id": item.id,
                    "instanceId": item.instance_id,
                    "fileName": item.file_name,
                }
                for item in self.selected_images
            ],
            "instanceMetadata": {
                instance_id: _metadata_to_dict(metadata)
                for instance_id, metadata in self.instance_metadata.items()
            },
            "defectSortDirection": self.defect_sort_direction,
            "deletedInstanceIds": sorted(self.deleted_instance_ids),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> "SelectionState":
        """Decode a persisted state, tolerating missing sections."""
        raw_images = payload.get("selectedImages") or []
        raw_metadata = payload.get("instanceMetadata") or {}
        direction = payload.get("defectSortDirection")
        deleted = payload.get("deletedInstanceIds") or []
        images = tuple(
            SelectedImage(
                id=str(item.get("id", "")),
                instance_id=str(item.get("instanceId", "")),
                file_name=str(item.get("fileName") or "unknown"),
            )
            for item in raw_images
            if isinstance(item, dict)
        )
        metadata: dict[str, InstanceMetadata] = {}
        if isinstance(raw_metadata, dict):
            for instance_id, item in raw_metadata.items():
                if isinstance(item, dict):
                    metadata[str(instance_id)] = _metadata_from_dict(item)
        return cls(
            selected_images=images,
            instance_metadata=metadata,
            defect_sort_direction=direction if direction in {"asc", "desc"} else None,
            deleted_instance_ids=frozenset(str(item) for item in deleted),
        )


def _metadata_to_dict(metadata: InstanceMetadata) -> dict[str, object]:
    payload: dict[str, object] = {}
    if metadata.photo_number is not None:
        payload["photoNumber"] = metadata.photo_number
    if metadata.description is not None:
        payload["description"] = metadata.description
    if metadata.last_modified is not None:
        payload["lastModified"] = metadata.last_modified
    if metadata.last_operation_id is not None:
        payload["lastOperationId"] = metadata.last_operation_id
    return payload


def _metadata_from_dict(payload: dict[str, object]) -> InstanceMetadata:
    photo_number = payload.get("photoNumber")
    description = payload.get("description")
    last_modified = payload.get("lastModified")
    last_operation_id = payload.get("lastOperationId")
    return InstanceMetadata(
        photo_number=None if photo_number is None else str(photo_number),
        description=None if description is None else str(description),
        last_modified=(
            int(last_modified) if isinstance(last_modified, int | float) else None
        ),
        last_operation_id=(
            None if last_operation_id is None else str(last_operation_id)
        ),
    )
