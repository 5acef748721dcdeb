"""Two-level note view (single anime / all notes) and its render description."""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping, Optional

from animenotes.database.repository import NoteRepository
from animenotes.models.note import Note, NoteSource, placeholder_title
from animenotes.models.result import FetchResult, Notice, NoticeLevel, ResultStatus
from animenotes.services.aggregator import EntryLookup, NoteAggregator
from animenotes.services.edit_buffers import EditBufferManager
from animenotes.services.mode_policy import FetchMode, ModePolicy
from animenotes.services.reconciliation import ReconciliationEngine, auth_missing_notice
from animenotes.services.remote_notes import RemoteNoteGateway
from animenotes.services.session import NotesSession

logger = logging.getLogger(__name__)

IDLE_PROMPT = "✏️ Click on an anime to add/edit notes 📋"
ENTRY_PATHNAME = "/entry"


class ViewState(str, Enum):
    """Which view is showing."""

    IDLE = "idle"
    SINGLE = "single"
    ALL = "all"


class ViewAction(str, Enum):
    """Buttons the renderer may offer."""

    SAVE = "save"
    CANCEL = "cancel"
    DELETE = "delete"
    FETCH = "fetch"
    REFRESH = "refresh"
    VIEW_ALL = "view_all"
    BACK = "back"
    FETCH_ALL = "fetch_all"
    PUSH_ALL = "push_all"
    TOGGLE_SOURCE = "toggle_source"


@dataclass
class NoteRow:
    """One visible, editable note."""

    id: int
    title: str
    cover_image: str
    text: str
    actions: list[ViewAction] = field(default_factory=list)


@dataclass
class ViewDescription:
    """Everything a renderer needs to draw the current view."""

    state: ViewState
    header: str
    source: NoteSource
    rows: list[NoteRow] = field(default_factory=list)
    actions: list[ViewAction] = field(default_factory=list)
    search: str = ""
    toggle_available: bool = False
    message: Optional[str] = None


class ViewStateMachine:
    """Drives the Idle / Single / All views.

    Remote and lookup calls are suspension points: each transition captures
    the session generation and selection first, and drops its result if
    either changed by the time the call returns.
    """

    def __init__(
        self,
        policy: ModePolicy,
        session: NotesSession,
        repository: NoteRepository,
        gateway: RemoteNoteGateway,
        lookup: EntryLookup,
        engine: Optional[ReconciliationEngine] = None,
        aggregator: Optional[NoteAggregator] = None,
        buffers: Optional[EditBufferManager] = None,
        settle_delay: float = 0.4,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.policy = policy
        self.session = session
        self.repository = repository
        self.gateway = gateway
        self.lookup = lookup
        self.engine = engine or ReconciliationEngine(policy, repository, gateway, session)
        self.aggregator = aggregator or NoteAggregator(lookup)
        self.buffers = buffers or EditBufferManager()
        self.settle_delay = settle_delay
        self._sleep = sleep
        self._clock = clock

        self.state = ViewState.IDLE
        self.single_note: Optional[Note] = None
        self.single_text = ""
        self.all_source = NoteSource.LOCAL

    # ==================== Helpers ====================

    @property
    def source(self) -> NoteSource:
        """The source currently being displayed."""
        return self.policy.effective_source(self.session.view_mode)

    def _is_stale(self, generation: int, media_id: Optional[int]) -> bool:
        return (
            self.session.generation != generation
            or self.session.current_media_id != media_id
        )

    def _settle(self, started: float) -> None:
        remaining = self.settle_delay - (self._clock() - started)
        if remaining > 0:
            self._sleep(remaining)

    def _fetch_remote_note(self, media_id: int) -> FetchResult:
        result = self.gateway.fetch_one(media_id)
        if result.status == ResultStatus.AUTH_MISSING:
            self.session.notify(auth_missing_notice())
        elif result.status == ResultStatus.FAILED:
            logger.warning("Loading note %s from AniList failed: %s", media_id, result.error)
            self.session.notify(
                Notice(NoticeLevel.ERROR, "❌ Failed to load note from AniList.")
            )
        return result

    def _read_note(self, media_id: int, source: NoteSource) -> str:
        if source == NoteSource.ANILIST or self.policy.fetch_mode == FetchMode.ALWAYS:
            result = self._fetch_remote_note(media_id)
            return result.text if result.found else ""

        text = self.repository.read(media_id)
        if not text and self.policy.fetch_mode == FetchMode.IF_EMPTY:
            result = self._fetch_remote_note(media_id)
            if result.found:
                self.repository.write(media_id, result.text)
                return result.text
        return text

    def _load_single_note(self, media_id: int, source: NoteSource) -> Note:
        lookup = self.lookup.get_entry(media_id)
        if lookup.status == ResultStatus.FOUND and lookup.media is not None:
            title, cover_image = lookup.media.title, lookup.media.cover_image
        else:
            title, cover_image = placeholder_title(media_id), ""
        text = self._read_note(media_id, source)
        return Note(id=media_id, title=title, note=text, cover_image=cover_image)

    def _apply_single(self, note: Note) -> None:
        self.single_note = note
        self.single_text = note.note
        self.state = ViewState.SINGLE

    def _reload_single(self) -> None:
        media_id = self.session.current_media_id
        generation = self.session.bump()
        if media_id is None:
            self.single_note = None
            self.single_text = ""
            self.state = ViewState.IDLE
            return

        note = self._load_single_note(media_id, self.source)
        if self._is_stale(generation, media_id):
            logger.debug("Discarding stale note load for %s", media_id)
            return
        self._apply_single(note)

    def _source_map(self, source: NoteSource) -> Mapping[int, str]:
        if source == NoteSource.LOCAL:
            return self.repository.read_all()
        if not self.gateway.has_token:
            self.session.notify(auth_missing_notice())
            return {}
        return self.gateway.fetch_all()

    def _open_all(self, notes: list[Note], source: NoteSource) -> None:
        self.session.soft_deleted.clear()
        if not self.buffers.seed(notes):
            logger.warning("Opening all-notes view with partially seeded buffers")
        self.all_source = source
        self.state = ViewState.ALL

    def _reload_all(self, source_map: Optional[Mapping[int, str]] = None) -> None:
        media_id = self.session.current_media_id
        generation = self.session.bump()
        source = self.source
        if source_map is None:
            source_map = self._source_map(source)
        notes = self.aggregator.build(source_map, source)
        if self._is_stale(generation, media_id):
            logger.debug("Discarding stale note list")
            return
        self._open_all(notes, source)

    # ==================== Selection and navigation ====================

    def select(self, media_id: int) -> None:
        """The user picked an anime: show its note."""
        self.session.current_media_id = media_id
        self._reload_single()

    def navigate(self, pathname: str, params: Optional[Mapping[str, str]] = None) -> None:
        """Follow the host's navigation.

        An anime entry page selects that anime; any other page clears the
        selection.
        """
        raw_id = (params or {}).get("id")
        if pathname == ENTRY_PATHNAME and raw_id:
            try:
                media_id = int(raw_id)
            except ValueError:
                logger.warning("Ignoring entry page with invalid id %r", raw_id)
            else:
                if media_id != self.session.current_media_id:
                    self.select(media_id)
                return

        self.session.current_media_id = None
        self.session.bump()
        if self.state == ViewState.SINGLE:
            self.single_note = None
            self.single_text = ""
            self.state = ViewState.IDLE

    def refresh(self) -> None:
        """Reload the selected anime's note."""
        if self.state != ViewState.ALL:
            self._reload_single()

    # ==================== Single view ====================

    def edit_single(self, text: str) -> None:
        self.single_text = text

    def cancel(self) -> None:
        """Discard the unsaved single-view edit."""
        self.single_text = self.single_note.note if self.single_note else ""

    def _single_unchanged(self, note: Note, generation: int) -> bool:
        if self._is_stale(generation, note.id) or self.single_note is not note:
            logger.debug("Selection changed while note %s was in flight", note.id)
            return False
        return True

    def save(self) -> None:
        note = self.single_note
        if self.state != ViewState.SINGLE or note is None:
            return
        generation = self.session.generation
        text = self.single_text
        result = self.engine.save_single(note.id, text)
        self.session.notify(result.notice)
        if result.success and self._single_unchanged(note, generation):
            note.note = text

    def delete(self) -> None:
        note = self.single_note
        if self.state != ViewState.SINGLE or note is None:
            return
        generation = self.session.generation
        result = self.engine.delete_single(note.id)
        self.session.notify(result.notice)
        if result.success and self._single_unchanged(note, generation):
            note.note = ""
            self.single_text = ""

    def fetch(self, media_id: Optional[int] = None) -> None:
        """Fetch one AniList note into the local store and the view."""
        if media_id is None:
            media_id = self.session.current_media_id
        if media_id is None:
            return

        result = self.engine.fetch_single(media_id)
        self.session.notify(result.notice)
        if result.text is None:
            return

        # The view may have moved on while the fetch was in flight.
        if (
            self.state == ViewState.SINGLE
            and self.single_note is not None
            and self.single_note.id == media_id
        ):
            self.single_note.note = result.text
            self.single_text = result.text
        elif self.state == ViewState.ALL and self.buffers.buffer(media_id) is not None:
            self.buffers.mark_stored(media_id, result.text)

    # ==================== All view ====================

    def view_all(self) -> None:
        """Open the all-notes list for the active source."""
        self._reload_all()

    def back(self) -> None:
        """Leave the all-notes list."""
        if self.state != ViewState.ALL:
            return
        self.buffers.clear()
        self._reload_single()

    def set_search(self, text: str) -> None:
        self.session.search = text

    def update_row(self, media_id: int, text: str) -> None:
        self.buffers.update(media_id, text)

    def save_row(self, media_id: int) -> None:
        text = self.buffers.get(media_id)
        result = self.engine.save_single(media_id, text)
        self.session.notify(result.notice)
        if result.success and self.buffers.buffer(media_id) is not None:
            self.buffers.mark_stored(media_id, text)

    def delete_row(self, media_id: int) -> None:
        result = self.engine.delete_single(media_id)
        self.session.notify(result.notice)

    def fetch_all(self) -> None:
        """Fetch every AniList note and show the resulting list."""
        media_id = self.session.current_media_id
        generation = self.session.generation
        result = self.engine.fetch_all_remote()
        self.session.notify(result.notice)
        if not result.success:
            return
        if self._is_stale(generation, media_id):
            logger.debug("Discarding stale fetch-all result")
            return

        if self.policy.enable_view_toggle:
            self.session.view_mode = NoteSource.ANILIST
            self._reload_all(result.notes or {})
        elif self.source == NoteSource.LOCAL:
            self._reload_all()
        else:
            self._reload_all(result.notes or {})

    def push_all(self) -> None:
        result = self.engine.push_all_local()
        self.session.notify(result.notice)

    # ==================== Source toggle ====================

    def toggle_source(self) -> None:
        """Flip between local and AniList notes and reload what is showing."""
        if not self.policy.enable_view_toggle or self.state == ViewState.IDLE:
            return

        self.session.view_mode = (
            NoteSource.ANILIST if self.session.view_mode == NoteSource.LOCAL else NoteSource.LOCAL
        )
        media_id = self.session.current_media_id
        generation = self.session.bump()
        source = self.source
        started = self._clock()

        if self.state == ViewState.ALL:
            notes = self.aggregator.build(self._source_map(source), source)
            self._settle(started)
            if not self._is_stale(generation, media_id):
                self._open_all(notes, source)
            return

        if media_id is None:
            return
        note = self._load_single_note(media_id, source)
        self._settle(started)
        if not self._is_stale(generation, media_id):
            self._apply_single(note)

    # ==================== Rendering ====================

    def _row_actions(self, *base: ViewAction) -> list[ViewAction]:
        actions = list(base)
        if self.policy.can_fetch_remote and self.source == NoteSource.LOCAL:
            actions.append(ViewAction.FETCH)
        return actions

    def _matches_search(self, note: Note, text: str) -> bool:
        query = self.session.search.strip().casefold()
        if not query:
            return True
        return query in note.title.casefold() or query in text.casefold()

    def visible_rows(self) -> list[NoteRow]:
        """Rows of the all-notes list after the search and soft-delete overlay."""
        rows = []
        for note in self.buffers.notes:
            if note.id in self.session.soft_deleted:
                continue
            text = self.buffers.get(note.id)
            if not self._matches_search(note, text):
                continue
            rows.append(
                NoteRow(
                    id=note.id,
                    title=note.title,
                    cover_image=note.cover_image,
                    text=text,
                    actions=self._row_actions(ViewAction.SAVE, ViewAction.DELETE),
                )
            )
        return rows

    def render(self) -> ViewDescription:
        """Describe the current view; has no side effects."""
        toggle = self.policy.enable_view_toggle

        if self.state == ViewState.IDLE or (
            self.state == ViewState.SINGLE and self.single_note is None
        ):
            return ViewDescription(
                state=ViewState.IDLE,
                header=IDLE_PROMPT,
                source=self.source,
                actions=[ViewAction.VIEW_ALL],
            )

        if self.state == ViewState.SINGLE:
            note = self.single_note
            actions = [ViewAction.VIEW_ALL, ViewAction.REFRESH]
            if toggle:
                actions.append(ViewAction.TOGGLE_SOURCE)
            return ViewDescription(
                state=ViewState.SINGLE,
                header=f"✏️ Notes for: 📺 {note.title}",
                source=self.source,
                rows=[
                    NoteRow(
                        id=note.id,
                        title=note.title,
                        cover_image=note.cover_image,
                        text=self.single_text,
                        actions=self._row_actions(
                            ViewAction.SAVE, ViewAction.CANCEL, ViewAction.DELETE
                        ),
                    )
                ],
                actions=actions,
                toggle_available=toggle,
            )

        actions = [ViewAction.BACK]
        if self.policy.can_fetch_remote:
            actions.append(ViewAction.FETCH_ALL)
        if self.policy.can_push_all and self.source == NoteSource.LOCAL:
            actions.append(ViewAction.PUSH_ALL)
        if toggle:
            actions.append(ViewAction.TOGGLE_SOURCE)

        rows = self.visible_rows()
        message = None
        if not rows:
            message = "No matching notes." if self.session.search.strip() else "No notes yet."
        return ViewDescription(
            state=ViewState.ALL,
            header=f"📋 All Notes ({self.all_source.label})",
            source=self.all_source,
            rows=rows,
            actions=actions,
            search=self.session.search,
            toggle_available=toggle,
            message=message,
        )
