"""Configuration constants for bookmark-reorder."""

import os
from pathlib import Path

# Pointer travel (in pixels) before an armed session starts dragging.
DRAG_THRESHOLD_PX: float = 5.0

# Id of the synthetic root container of a bookmarks file.
ROOT_ID: str = "0"

# Bookmarks file location. First file found is used.
BOOKMARKS_FILES: list[Path] = [
    Path("~/.config/chromium/Default/Bookmarks").expanduser(),
    Path("~/.config/google-chrome/Default/Bookmarks").expanduser(),
    Path("~/.config/BraveSoftware/Brave-Browser/Default/Bookmarks").expanduser(),
]

# Remote bookmark service.
DEFAULT_API_URL: str = "http://127.0.0.1:8765/api/v1"

# API token location. First file found is used.
API_TOKEN_FILES: list[Path] = [
    Path("~/.config/bookmark-reorder-token.txt").expanduser(),
    Path("~/.config/secret/bookmark-reorder-token.txt").expanduser(),
]


def resolve_bookmarks_file() -> Path:
    """Return the bookmarks file to operate on.

    ``BOOKMARK_REORDER_FILE`` wins; otherwise the first existing candidate, or
    the first candidate when none exists yet.
    """
    override = os.environ.get("BOOKMARK_REORDER_FILE")
    if override:
        return Path(override).expanduser()
    for candidate in BOOKMARKS_FILES:
        if candidate.is_file():
            return candidate
    return BOOKMARKS_FILES[0]


def resolve_api_url() -> str:
    """Return the remote service URL, honouring ``BOOKMARK_REORDER_API_URL``."""
    return os.environ.get("BOOKMARK_REORDER_API_URL", DEFAULT_API_URL).rstrip("/")
