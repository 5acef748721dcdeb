"""Per-instance session state shared by the note components."""

from dataclasses import dataclass, field
from typing import Optional

from animenotes.models.note import NoteSource
from animenotes.models.result import Notice


@dataclass
class NotesSession:
    """Mutable state owned by one running instance.

    ``generation`` increases on every view transition; an operation that
    captured an older generation before a remote call must discard its result.
    """

    current_media_id: Optional[int] = None
    view_mode: NoteSource = NoteSource.LOCAL
    search: str = ""
    soft_deleted: set[int] = field(default_factory=set)
    notices: list[Notice] = field(default_factory=list)
    generation: int = 0

    def bump(self) -> int:
        """Start a new transition and return its generation."""
        self.generation += 1
        return self.generation

    def notify(self, notice: Optional[Notice]) -> None:
        if notice is not None:
            self.notices.append(notice)

    def drain_notices(self) -> list[Notice]:
        """Return and clear the queued notices."""
        notices, self.notices = self.notices, []
        return notices
