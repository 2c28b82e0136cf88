"""Domain models for selection operations."""

import secrets
import string
import time
from dataclasses import dataclass, field
from typing import Literal

SortDirection = Literal["asc", "desc"]

_BASE36_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 7


class OperationType:
    """Wire names of the supported operation kinds."""

    ADD_SELECTION = "ADD_SELECTION"
    DELETE_SELECTION = "DELETE_SELECTION"
    UPDATE_METADATA = "UPDATE_METADATA"
    SORT_CHANGE = "SORT_CHANGE"


@dataclass(frozen=True)
class AddSelection:
    """Selects an image, creating a new selection instance."""

    id: str
    timestamp: int
    browser_id: str
    image_id: str
    instance_id: str
    file_name: str | None = None

    @property
    def type(self) -> str:
        return OperationType.ADD_SELECTION


@dataclass(frozen=True)
class DeleteSelection:
    """Removes a selection instance."""

    id: str
    timestamp: int
    browser_id: str
    instance_id: str

    @property
    def type(self) -> str:
        return OperationType.DELETE_SELECTION


@dataclass(frozen=True)
class UpdateMetadata:
    """Edits the metadata of a selection instance.

    Fields left as ``None`` are not part of the edit and keep their
    current value when the operation is applied.
    """

    id: str
    timestamp: int
    browser_id: str
    instance_id: str
    photo_number: str | None = None
    description: str | None = None

    @property
    def type(self) -> str:
        return OperationType.UPDATE_METADATA

    def changes(self) -> dict[str, str]:
        """Return only the fields carried by this edit."""
        changes: dict[str, str] = {}
        if self.photo_number is not None:
            changes["photo_number"] = self.photo_number
        if self.description is not None:
            changes["description"] = self.description
        return changes


@dataclass(frozen=True)
class SortChange:
    """Changes the defect sort direction; ``None`` leaves it unchanged."""

    id: str
    timestamp: int
    browser_id: str
    sort_direction: SortDirection | None = None

    @property
    def type(self) -> str:
        return OperationType.SORT_CHANGE


@dataclass(frozen=True)
class UnknownOperation:
    """Operation of a kind this client does not understand."""

    id: str
    timestamp: int
    browser_id: str
    type: str
    payload: dict[str, object] = field(default_factory=dict)


Operation = (
    AddSelection | DeleteSelection | UpdateMetadata | SortChange | UnknownOperation
)


def current_time_ms() -> int:
    """Return the current time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def random_base36(length: int = _SUFFIX_LENGTH) -> str:
    """Return a random lowercase base36 string."""
    return "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(length))


def create_operation_id(browser_id: str, now_ms: int | None = None) -> str:
    """Build a globally unique operation id for a browser."""
    timestamp = current_time_ms() if now_ms is None else now_ms
    return f"{timestamp}-{browser_id}-{random_base36()}"


def add_selection(
    browser_id: str,
    image_id: str,
    instance_id: str,
    file_name: str | None = None,
    now_ms: int | None = None,
) -> AddSelection:
    """Create an operation selecting ``image_id`` as ``instance_id``."""
    timestamp = current_time_ms() if now_ms is None else now_ms
    return AddSelection(
        id=create_operation_id(browser_id, timestamp),
        timestamp=timestamp,
        browser_id=browser_id,
        image_id=image_id,
        instance_id=instance_id,
        file_name=file_name,
    )


def delete_selection(
    browser_id: str, instance_id: str, now_ms: int | None = None
) -> DeleteSelection:
    """Create an operation removing a selection instance."""
    timestamp = current_time_ms() if now_ms is None else now_ms
    return DeleteSelection(
        id=create_operation_id(browser_id, timestamp),
        timestamp=timestamp,
        browser_id=browser_id,
        instance_id=instance_id,
    )


def update_metadata(
    browser_id: str,
    instance_id: str,
    photo_number: str | None = None,
    description: str | None = None,
    now_ms: int | None = None,
) -> UpdateMetadata:
    """Create an operation editing instance metadata."""
    timestamp = current_time_ms() if now_ms is None else now_ms
    return UpdateMetadata(
        id=create_operation_id(browser_id, timestamp),
        timestamp=timestamp,
        browser_id=browser_id,
        instance_id=instance_id,
        photo_number=photo_number,
        description=description,
    )


def change_sort(
    browser_id: str, sort_direction: SortDirection | None, now_ms: int | None = None
) -> SortChange:
    """Create an operation changing the defect sort direction."""
    timestamp = current_time_ms() if now_ms is None else now_ms
    return SortChange(
        id=create_operation_id(browser_id, timestamp),
        timestamp=timestamp,
        browser_id=browser_id,
        sort_direction=sort_direction,
    )


def operation_to_dict(operation: Operation) -> dict[str, object]:
    """Encode an operation as its wire record."""
    record: dict[str, object] = {
        "id": operation.id,
        "type": operation.type,
        "timestamp": operation.timestamp,
        "browserId": operation.browser_id,
    }
    if isinstance(operation, AddSelection):
        record["imageId"] = operation.image_id
        record["instanceId"] = operation.instance_id
        if operation.file_name is not None:
            record["fileName"] = operation.file_name
    elif isinstance(operation, DeleteSelection):
        record["instanceId"] = operation.instance_id
    elif isinstance(operation, UpdateMetadata):
        record["instanceId"] = operation.instance_id
        data: dict[str, object] = {}
        if operation.photo_number is not None:
            data["photoNumber"] = operation.photo_number
        if operation.description is not None:
            data["description"] = operation.description
        record["data"] = data
    elif isinstance(operation, SortChange):
        record["data"] = {"sortDirection": operation.sort_direction}
    else:
        record.update(operation.payload)
    return record


def operation_from_dict(record: dict[str, object]) -> Operation:
    """Decode a wire record; raises ``ValueError`` on missing fields."""
    op_id = _required_str(record, "id")
    op_type = _required_str(record, "type")
    browser_id = _required_str(record, "browserId")
    timestamp = record.get("timestamp")
    if not isinstance(timestamp, int | float) or isinstance(timestamp, bool):
        raise ValueError(f"Operation {op_id} has no numeric timestamp")
    timestamp = int(timestamp)
    data = record.get("data") or {}
    if not isinstance(data, dict):
        raise ValueError(f"Operation {op_id} has a non-object data payload")

    if op_type == OperationType.ADD_SELECTION:
        file_name = record.get("fileName")
        return AddSelection(
            id=op_id,
            timestamp=timestamp,
            browser_id=browser_id,
            image_id=_required_str(record, "imageId"),
            instance_id=_required_str(record, "instanceId"),
            file_name=str(file_name) if file_name else None,
        )
    if op_type == OperationType.DELETE_SELECTION:
        return DeleteSelection(
            id=op_id,
            timestamp=timestamp,
            browser_id=browser_id,
            instance_id=_required_str(record, "instanceId"),
        )
    if op_type == OperationType.UPDATE_METADATA:
        photo_number = data.get("photoNumber")
        description = data.get("description")
        return UpdateMetadata(
            id=op_id,
            timestamp=timestamp,
            browser_id=browser_id,
            instance_id=_required_str(record, "instanceId"),
            photo_number=None if photo_number is None else str(photo_number),
            description=None if description is None else str(description),
        )
    if op_type == OperationType.SORT_CHANGE:
        direction = data.get("sortDirection")
        if direction not in {"asc", "desc", None}:
            raise ValueError(f"Operation {op_id} has invalid sort direction")
        return SortChange(
            id=op_id,
            timestamp=timestamp,
            browser_id=browser_id,
            sort_direction=direction,
        )
    payload = {
        key: value
        for key, value in record.items()
        if key not in {"id", "type", "timestamp", "browserId"}
    }
    return UnknownOperation(
        id=op_id,
        timestamp=timestamp,
        browser_id=browser_id,
        type=op_type,
        payload=payload,
    )


def _required_str(record: dict[str, object], key: str) -> str:
    value = record.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"Operation record is missing '{key}'")
    return value
