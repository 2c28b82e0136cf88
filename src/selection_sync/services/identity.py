"""Browser identity used to attribute operations."""

from typing import Protocol

from selection_sync.domain.operations import current_time_ms, random_base36


class BrowserIdentity(Protocol):
    """Supplies a browser id that is stable across restarts."""

    def get_browser_id(self) -> str:
        """Return the browser id, creating one on first use."""


def generate_browser_id(now_ms: int | None = None) -> str:
    """Return a new browser id of the form ``browser-{millis}-{suffix}``."""
    timestamp = current_time_ms() if now_ms is None else now_ms
    return f"browser-{timestamp}-{random_base36()}"
