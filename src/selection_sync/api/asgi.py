"""ASGI entrypoint for the operation log API."""

from selection_sync.api.app import create_app
from selection_sync.containers import build_container

app = create_app(build_container())
