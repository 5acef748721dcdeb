"""Builds the sorted, display-ready note list."""

import logging
from typing import Any, Mapping, Protocol

from animenotes.models.note import Note, NoteSource, normalize_note_text, placeholder_title
from animenotes.models.result import LookupResult, ResultStatus

logger = logging.getLogger(__name__)


class EntryLookup(Protocol):
    def get_entry(self, media_id: int) -> LookupResult: ...


class NoteAggregator:
    """Turns an ``id -> text`` mapping into notes sorted by title."""

    def __init__(self, lookup: EntryLookup):
        self.lookup = lookup

    def _resolve(self, media_id: int) -> tuple[str, str]:
        result = self.lookup.get_entry(media_id)
        if result.status == ResultStatus.FOUND and result.media is not None:
            return result.media.title, result.media.cover_image
        return placeholder_title(media_id), ""

    def build(self, source_map: Mapping[Any, Any], source_kind: NoteSource) -> list[Note]:
        """Build the display list for one source.

        Args:
            source_map: Mapping of media id to stored note value
            source_kind: Which source the mapping came from

        Returns:
            Notes sorted case-insensitively by title
        """
        notes: list[Note] = []
        for key, value in source_map.items():
            media_id = int(key)
            title, cover_image = self._resolve(media_id)
            notes.append(
                Note(
                    id=media_id,
                    title=title,
                    note=normalize_note_text(value),
                    cover_image=cover_image,
                )
            )

        notes.sort(key=lambda n: n.title.casefold())
        logger.debug("Built %d %s note(s)", len(notes), source_kind.value)
        return notes
