"""File-backed browser identity."""

import logging
from dataclasses import dataclass
from pathlib import Path

from selection_sync.services.identity import BrowserIdentity, generate_browser_id

logger = logging.getLogger(__name__)


@dataclass
class FileBrowserIdentity(BrowserIdentity):
    """Keeps the browser id in a file so it survives restarts."""

    path: Path

    def get_browser_id(self) -> str:
        """Return the stored id, generating and saving one on first use."""
        if self.path.exists():
            stored = self.path.read_text(encoding="utf-8").strip()
            if stored:
                return stored
        browser_id = generate_browser_id()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(browser_id, encoding="utf-8")
        logger.info("Generated new browser id %s", browser_id)
        return browser_id
