"""Repository for locally stored notes."""

import logging
from typing import Any

from animenotes.database.storage import KeyValueStore
from animenotes.models.note import normalize_note_text

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "anime-notes"


class NoteRepository:
    """Local note store: a mapping of media id to note text.

    The whole mapping lives under a single storage key and every write is a
    read-modify-write of that mapping. Concurrent writers race at whole-map
    granularity and the last writer wins.
    """

    def __init__(self, store: KeyValueStore, storage_key: str = DEFAULT_STORAGE_KEY):
        self.store = store
        self.storage_key = storage_key

    def _load_raw(self) -> dict[str, Any]:
        raw = self.store.get(self.storage_key)
        if not isinstance(raw, dict):
            if raw is not None:
                logger.warning("Ignoring non-mapping value under %r", self.storage_key)
            return {}
        return raw

    def _save_raw(self, notes: dict[str, Any]) -> None:
        self.store.set(self.storage_key, notes)

    # ==================== Reads ====================

    def read(self, media_id: int) -> str:
        """Return the normalized note for ``media_id`` ("" when absent)."""
        return normalize_note_text(self._load_raw().get(str(media_id)))

    def read_all(self) -> dict[int, str]:
        """Return every stored note, normalized, keyed by integer media id."""
        notes: dict[int, str] = {}
        for key, value in self._load_raw().items():
            try:
                media_id = int(key)
            except (TypeError, ValueError):
                logger.warning("Skipping note with non-numeric key %r", key)
                continue
            notes[media_id] = normalize_note_text(value)
        return notes

    # ==================== Writes ====================

    def write(self, media_id: int, text: str) -> None:
        """Upsert the note for ``media_id``."""
        notes = self._load_raw()
        notes[str(media_id)] = text
        self._save_raw(notes)

    def delete(self, media_id: int) -> None:
        """Remove the note for ``media_id`` if present."""
        notes = self._load_raw()
        key = str(media_id)
        if key in notes:
            del notes[key]
            self._save_raw(notes)

    def merge(self, incoming: dict[int, str]) -> dict[int, str]:
        """Merge ``incoming`` over the stored notes; incoming wins on conflict.

        Returns:
            The merged, normalized mapping
        """
        notes = self._load_raw()
        for media_id, text in incoming.items():
            notes[str(media_id)] = text
        self._save_raw(notes)
        return self.read_all()

    # Per-key contract; the whole-map representation stays an implementation detail.
    upsert = write
    remove = delete
