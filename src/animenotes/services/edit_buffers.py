"""Per-note edit buffers for the all-notes view."""

import logging
from dataclasses import dataclass
from typing import Optional

from animenotes.models.note import Note, normalize_note_text

logger = logging.getLogger(__name__)


@dataclass
class EditBuffer:
    """In-progress text for one note; the object is kept across reloads."""

    media_id: int
    value: str


class EditBufferManager:
    """Holds one buffer per note while the all-notes view is open.

    Buffers are only written to a store by an explicit save.
    """

    def __init__(self) -> None:
        self._buffers: dict[int, EditBuffer] = {}
        self._notes: list[Note] = []

    @property
    def notes(self) -> list[Note]:
        return list(self._notes)

    def seed(self, notes: list[Note]) -> bool:
        """Reconcile buffers with a freshly loaded note list.

        Existing buffers are reused and overwritten with the stored text
        (a reload discards unsaved edits); buffers for notes no longer listed
        are dropped. If any note fails to seed, the previous buffer values are
        restored, but the new list is still installed.

        Returns:
            True if every note seeded cleanly
        """
        previous = {media_id: buf.value for media_id, buf in self._buffers.items()}
        seeded: dict[int, EditBuffer] = {}

        try:
            for note in notes:
                text = normalize_note_text(note.note)
                buf = self._buffers.get(note.id)
                if buf is None:
                    buf = EditBuffer(media_id=note.id, value=text)
                else:
                    buf.value = text
                seeded[note.id] = buf
        except Exception:
            logger.exception("Seeding edit buffers failed, keeping previous buffers")
            for media_id, value in previous.items():
                self._buffers[media_id].value = value
            self._buffers = {**seeded, **self._buffers}
            self._notes = list(notes)
            return False

        self._buffers = seeded
        self._notes = list(notes)
        return True

    def buffer(self, media_id: int) -> Optional[EditBuffer]:
        return self._buffers.get(media_id)

    def get(self, media_id: int) -> str:
        """Live buffer text, falling back to the note's stored text."""
        buf = self._buffers.get(media_id)
        if buf is not None:
            return buf.value
        for note in self._notes:
            if note.id == media_id:
                return normalize_note_text(note.note)
        return ""

    def update(self, media_id: int, text: str) -> None:
        """Replace the buffer text; never touches a store."""
        buf = self._buffers.get(media_id)
        if buf is None:
            self._buffers[media_id] = EditBuffer(media_id=media_id, value=text)
        else:
            buf.value = text

    def mark_stored(self, media_id: int, text: str) -> None:
        """Record that ``text`` is now the stored note for ``media_id``."""
        for note in self._notes:
            if note.id == media_id:
                note.note = text
        self.update(media_id, text)

    def clear(self) -> None:
        self._buffers = {}
        self._notes = []
