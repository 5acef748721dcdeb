"""Note model for Anime Notes."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

# Legacy write paths stored an empty note as the two-character string '""'.
EMPTY_QUOTE_LITERAL = '""'


class NoteSource(str, Enum):
    """Where a note is read from or written to."""

    LOCAL = "local"
    ANILIST = "anilist"

    @property
    def label(self) -> str:
        return "Local" if self is NoteSource.LOCAL else "AniList"


def normalize_note_text(value: Any) -> str:
    """Coerce a stored note value into display text.

    None and the empty-quote literal become "", strings pass through and
    anything else is JSON-encoded.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return "" if value == EMPTY_QUOTE_LITERAL else value
    return json.dumps(value)


def placeholder_title(media_id: int) -> str:
    """Title used when the anime lookup fails."""
    return f"Anime #{media_id}"


@dataclass
class Note:
    """A display projection of one anime's note.

    Only ``id -> note`` is ever persisted; title and cover image are
    resolved for display.
    """

    id: int
    title: str = ""
    note: str = ""
    cover_image: str = ""

    def __hash__(self) -> int:
        """Hash based on media ID for set operations."""
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        """Equality based on media ID."""
        if not isinstance(other, Note):
            return NotImplemented
        return self.id == other.id
