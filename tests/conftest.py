"""Shared test fixtures."""

from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from selection_sync.config import Settings
from selection_sync.containers import AppContainer
from selection_sync.domain.images import ImageRecord
from selection_sync.domain.operations import Operation
from selection_sync.domain.selection import SelectionState
from selection_sync.services.applier import ImageLookup
from selection_sync.services.operation_log import (
    LoggedOperation,
    OperationLogRepository,
    OperationLogService,
)
from selection_sync.services.sync import (
    FetchResult,
    OperationTransport,
    PushResult,
    SelectionStateRepository,
    StoredSelection,
)

NOW_MS = 1_700_000_001_000


@dataclass
class FakeClock:
    """Clock returning a settable time in epoch milliseconds."""

    now_ms: int = NOW_MS

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, delta_ms: int) -> None:
        self.now_ms += delta_ms


@dataclass
class InMemoryImageLookup(ImageLookup):
    """In-memory image lookup for tests."""

    images: dict[str, ImageRecord] = field(default_factory=dict)

    def get_image(self, image_id: str) -> ImageRecord | None:
        return self.images.get(image_id)


@dataclass
class InMemoryOperationLogRepository(OperationLogRepository):
    """In-memory operation log for tests."""

    entries: dict[str, list[LoggedOperation]] = field(default_factory=dict)
    version: int = 0

    def append_operations(
        self, project_id: str, operations: Sequence[Operation]
    ) -> None:
        log = self.entries.setdefault(project_id, [])
        known = {entry.operation.id for entry in log}
        for operation in operations:
            if operation.id in known:
                continue
            self.version += 1
            log.append(LoggedOperation(version=self.version, operation=operation))
            known.add(operation.id)

    def list_operations_since(
        self, project_id: str, version: int, limit: int
    ) -> list[LoggedOperation]:
        log = self.entries.get(project_id, [])
        return [entry for entry in log if entry.version > version][:limit]

    def latest_version(self, project_id: str) -> int:
        log = self.entries.get(project_id, [])
        return log[-1].version if log else 0


@dataclass
class InMemorySelectionStateRepository(SelectionStateRepository):
    """In-memory selection snapshot store for tests."""

    states: dict[tuple[str, str], StoredSelection] = field(default_factory=dict)
    saves: int = 0

    def load_state(self, project_id: str, browser_id: str) -> StoredSelection | None:
        return self.states.get((project_id, browser_id))

    def save_state(
        self,
        project_id: str,
        browser_id: str,
        state: SelectionState,
        last_version: int,
    ) -> None:
        self.saves += 1
        self.states[(project_id, browser_id)] = StoredSelection(
            state=state, last_version=last_version
        )


@dataclass
class FakeTransport(OperationTransport):
    """Transport with scripted responses that records pushes."""

    fetched: list[Operation] = field(default_factory=list)
    fetch_version: int = 0
    push_success: bool = True
    fetch_error: Exception | None = None
    pushes: list[list[Operation]] = field(default_factory=list)

    async def fetch_since(self, version: int) -> FetchResult:
        if self.fetch_error is not None:
            raise self.fetch_error
        return FetchResult(
            operations=list(self.fetched), last_version=self.fetch_version
        )

    async def push(self, operations: Sequence[Operation]) -> PushResult:
        self.pushes.append(list(operations))
        if not self.push_success:
            return PushResult(success=False, last_version=0, error="unavailable")
        return PushResult(
            success=True,
            last_version=self.fetch_version + len(operations),
            processed_count=len(operations),
        )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        sync_api_token="sync-token",
        project_id="proj_test",
    )


@pytest.fixture
def operation_log_repository() -> InMemoryOperationLogRepository:
    return InMemoryOperationLogRepository()


@pytest.fixture
def container(
    settings: Settings,
    operation_log_repository: InMemoryOperationLogRepository,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        operation_log_service=OperationLogService(operation_log_repository),
        close_resources=close_resources,
    )
