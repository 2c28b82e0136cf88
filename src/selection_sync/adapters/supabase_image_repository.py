"""Supabase-backed image lookup."""

from dataclasses import dataclass

from supabase import Client

from selection_sync.domain.images import ImageRecord
from selection_sync.services.applier import ImageLookup


@dataclass
class SupabaseImageRepository(ImageLookup):
    """Reads image file names from the project images table."""

    client: Client

    def get_image(self, image_id: str) -> ImageRecord | None:
        """Return an image by id, if present."""
        response = (
            self.client.table("project_images")
            .select("id, file_name, original_file_name")
            .eq("id", image_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return ImageRecord(
            id=str(row["id"]),
            file_name=row.get("file_name"),
            original_file_name=row.get("original_file_name"),
        )
