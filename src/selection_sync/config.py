"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from selection_sync.domain.projects import stable_project_id

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    sync_api_token: str
    sync_api_url: str | None = None
    browser_id_path: str = ".selection-sync/browser-id"
    user_email: str | None = None
    project_name: str = "current"
    project_id: str | None = None
    fetch_page_size: int = 500
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_project_id(settings: Settings) -> str:
    """Return the configured project id, deriving it from the user if unset."""
    if settings.project_id:
        return settings.project_id
    if not settings.user_email:
        raise ValueError("Either PROJECT_ID or USER_EMAIL must be configured")
    return stable_project_id(settings.user_email, settings.project_name)
