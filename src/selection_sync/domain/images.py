"""Domain models for project images."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ImageRecord:
    """Image metadata needed to label a selection."""

    id: str
    file_name: str | None = None
    original_file_name: str | None = None
