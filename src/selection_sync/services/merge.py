"""Merging of local and remote operation logs."""

import logging
from collections.abc import Iterable

from selection_sync.domain.operations import Operation

logger = logging.getLogger(__name__)


def operation_sort_key(operation: Operation) -> tuple[int, str]:
    """Chronological order with the operation id as an explicit tie-break."""
    return operation.timestamp, operation.id


def merge_operations(
    local: Iterable[Operation], remote: Iterable[Operation]
) -> list[Operation]:
    """Combine two operation lists into one deduplicated, time-ordered list.

    Operations are deduplicated by id, keeping the first occurrence, so the
    same operation delivered more than once is applied only once. The result
    does not depend on which side an operation came from.
    """
    seen: set[str] = set()
    unique: list[Operation] = []
    for operation in [*local, *remote]:
        if operation.id in seen:
            logger.debug("Duplicate operation skipped: %s", operation.id)
            continue
        seen.add(operation.id)
        unique.append(operation)
    unique.sort(key=operation_sort_key)
    return unique
