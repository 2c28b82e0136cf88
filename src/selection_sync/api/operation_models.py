"""Pydantic models for operation log requests."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from selection_sync.domain.operations import Operation, operation_from_dict


class OperationRecord(BaseModel):
    """Wire record of a single operation.

    Unknown operation types are accepted so that newer clients can log
    operation kinds this server does not understand yet.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(min_length=1)
    type: str = Field(min_length=1)
    timestamp: int
    browser_id: str = Field(alias="browserId", min_length=1)
    instance_id: str | None = Field(default=None, alias="instanceId")
    image_id: str | None = Field(default=None, alias="imageId")
    file_name: str | None = Field(default=None, alias="fileName")
    data: dict[str, Any] | None = None

    @model_validator(mode="after")
    def check_fields_for_type(self) -> "OperationRecord":
        self.to_operation()
        return self

    def to_record(self) -> dict[str, object]:
        """Return the camelCase record understood by the codec."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_operation(self) -> Operation:
        """Decode into a domain operation; raises ``ValueError`` if malformed."""
        return operation_from_dict(self.to_record())


class PushRequest(BaseModel):
    """Batch of operations pushed by one browser."""

    operations: list[OperationRecord]
