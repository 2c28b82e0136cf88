"""Pure reducer folding operations into selection state snapshots."""

import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import Protocol

from selection_sync.domain.images import ImageRecord
from selection_sync.domain.operations import (
    AddSelection,
    DeleteSelection,
    Operation,
    SortChange,
    UpdateMetadata,
    current_time_ms,
)
from selection_sync.domain.selection import (
    InstanceMetadata,
    SelectedImage,
    SelectionState,
)
from selection_sync.services.conflicts import RECENCY_WINDOW_MS

logger = logging.getLogger(__name__)

UNKNOWN_FILE_NAME = "unknown"


class ImageLookup(Protocol):
    """Lookup interface for project images."""

    def get_image(self, image_id: str) -> ImageRecord | None:
        """Return image metadata by id, if known."""


def apply_operation(
    state: SelectionState,
    operation: Operation,
    current_browser_id: str,
    image_lookup: ImageLookup | None = None,
    now_ms: int | None = None,
) -> SelectionState:
    """Return the state that results from applying one operation.

    Never raises for well-formed operations; operations of unknown kinds
    are logged and leave the state unchanged. Deleting an instance drops its
    metadata and remembers the id, so additions and edits of an instance
    delivered after its deletion have no effect.
    """
    if isinstance(operation, AddSelection):
        return _apply_add(state, operation, image_lookup)
    if isinstance(operation, DeleteSelection):
        if state.is_deleted(operation.instance_id) and not state.has_instance(
            operation.instance_id
        ):
            return state
        return replace(
            state,
            selected_images=tuple(
                item
                for item in state.selected_images
                if item.instance_id != operation.instance_id
            ),
            instance_metadata={
                instance_id: metadata
                for instance_id, metadata in state.instance_metadata.items()
                if instance_id != operation.instance_id
            },
            deleted_instance_ids=state.deleted_instance_ids
            | {operation.instance_id},
        )
    if isinstance(operation, UpdateMetadata):
        if state.is_deleted(operation.instance_id):
            return state
        now = current_time_ms() if now_ms is None else now_ms
        return _apply_update(state, operation, current_browser_id, now)
    if isinstance(operation, SortChange):
        # None means "leave as is", not "clear the direction".
        if operation.sort_direction is None:
            return state
        return replace(state, defect_sort_direction=operation.sort_direction)

    logger.warning(
        "Ignoring operation %s of unknown type %s", operation.id, operation.type
    )
    return state


def apply_operations(
    state: SelectionState,
    operations: Iterable[Operation],
    current_browser_id: str,
    image_lookup: ImageLookup | None = None,
    now_ms: int | None = None,
) -> SelectionState:
    """Fold operations, in the given order, onto a state."""
    now = current_time_ms() if now_ms is None else now_ms
    for operation in operations:
        state = apply_operation(
            state, operation, current_browser_id, image_lookup, now_ms=now
        )
    return state


def resolve_file_name(
    operation: AddSelection, image_lookup: ImageLookup | None
) -> str:
    """Pick the label for a new selection from the best available source."""
    image = image_lookup.get_image(operation.image_id) if image_lookup else None
    if image is not None:
        if image.file_name:
            return image.file_name
        if image.original_file_name:
            return image.original_file_name
    return operation.file_name or UNKNOWN_FILE_NAME


def _apply_add(
    state: SelectionState,
    operation: AddSelection,
    image_lookup: ImageLookup | None,
) -> SelectionState:
    if state.has_instance(operation.instance_id) or state.is_deleted(
        operation.instance_id
    ):
        return state
    item = SelectedImage(
        id=operation.image_id,
        instance_id=operation.instance_id,
        file_name=resolve_file_name(operation, image_lookup),
    )
    # Operations arrive in time order, so prepending under a descending sort
    # keeps the newest selection first without re-sorting.
    if state.defect_sort_direction == "desc":
        selected = (item, *state.selected_images)
    else:
        selected = (*state.selected_images, item)
    return replace(state, selected_images=selected)


def _apply_update(
    state: SelectionState,
    operation: UpdateMetadata,
    current_browser_id: str,
    now_ms: int,
) -> SelectionState:
    existing = state.instance_metadata.get(operation.instance_id)
    if (
        existing is not None
        and existing.last_modified is not None
        and existing.last_modified > operation.timestamp
        and operation.browser_id == current_browser_id
        and now_ms - existing.last_modified < RECENCY_WINDOW_MS
    ):
        logger.info(
            "Keeping newer local metadata for %s (%s vs %s)",
            operation.instance_id,
            existing.last_modified,
            operation.timestamp,
        )
        return state

    base = existing or InstanceMetadata()
    metadata = dict(state.instance_metadata)
    metadata[operation.instance_id] = base.merged(
        operation.changes(),
        last_modified=operation.timestamp,
        operation_id=operation.id,
    )
    return replace(state, instance_metadata=metadata)
