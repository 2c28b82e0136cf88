"""HTTP transport for the remote operation log."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import httpx

from selection_sync.domain.operations import (
    Operation,
    operation_from_dict,
    operation_to_dict,
)
from selection_sync.services.sync import FetchResult, OperationTransport, PushResult

logger = logging.getLogger(__name__)


@dataclass
class HttpxOperationTransport(OperationTransport):
    """Operation transport implemented with httpx against the sync API."""

    base_url: str
    api_token: str
    project_id: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, base_url: str, api_token: str, project_id: str
    ) -> "HttpxOperationTransport":
        """Create a transport with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            api_token=api_token,
            project_id=project_id,
            http_client=httpx.AsyncClient(),
        )

    @property
    def _operations_url(self) -> str:
        return f"{self.base_url}/projects/{self.project_id}/operations"

    @property
    def _headers(self) -> dict[str, str]:
        return {"X-Sync-Token": self.api_token}

    async def fetch_since(self, version: int) -> FetchResult:
        """Fetch operations logged after ``version``."""
        response = await self.http_client.get(
            self._operations_url,
            params={"since": version},
            headers=self._headers,
            timeout=10,
        )
        response.raise_for_status()
        payload = response.json()
        operations = [operation_from_dict(item) for item in payload["operations"]]
        return FetchResult(
            operations=operations,
            last_version=int(payload.get("lastVersion", version)),
            has_more=bool(payload.get("hasMore", False)),
        )

    async def push(self, operations: Sequence[Operation]) -> PushResult:
        """Push operations; transport failures are reported, not raised."""
        try:
            response = await self.http_client.post(
                self._operations_url,
                json={"operations": [operation_to_dict(op) for op in operations]},
                headers=self._headers,
                timeout=10,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Operation push failed: %s", exc)
            return PushResult(success=False, last_version=0, error=str(exc))
        payload = response.json()
        return PushResult(
            success=bool(payload.get("success", False)),
            last_version=int(payload.get("lastVersion", 0)),
            processed_count=int(payload.get("processedCount", 0)),
            error=payload.get("error"),
        )

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
