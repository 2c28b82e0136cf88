"""Local queue of operations waiting to be pushed."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from selection_sync.domain.operations import Operation


@dataclass
class OperationQueue:
    """Pending operations recorded on this browser, in recording order."""

    _operations: list[Operation] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self._operations)

    def enqueue(self, operation: Operation) -> None:
        """Append an operation unless an operation with its id is queued."""
        if any(queued.id == operation.id for queued in self._operations):
            return
        self._operations.append(operation)

    def pending(self) -> tuple[Operation, ...]:
        """Return a snapshot of the queued operations."""
        return tuple(self._operations)

    def acknowledge(self, operation_ids: Iterable[str]) -> int:
        """Drop acknowledged operations and return how many were removed."""
        acknowledged = set(operation_ids)
        remaining = [op for op in self._operations if op.id not in acknowledged]
        removed = len(self._operations) - len(remaining)
        self._operations = remaining
        return removed
