"""Services for Anime Notes."""

from animenotes.services.aggregator import NoteAggregator
from animenotes.services.anilist_client import AniListAPIError, AniListClient
from animenotes.services.anime_lookup import AnimeLookup
from animenotes.services.edit_buffers import EditBuffer, EditBufferManager
from animenotes.services.mode_policy import FetchMode, ModePolicy, PushMode, SyncMode
from animenotes.services.reconciliation import ReconciliationEngine
from animenotes.services.remote_notes import RemoteNoteGateway
from animenotes.services.session import NotesSession
from animenotes.services.view_state import (
    NoteRow,
    ViewAction,
    ViewDescription,
    ViewState,
    ViewStateMachine,
)

__all__ = [
    "AniListAPIError",
    "AniListClient",
    "AnimeLookup",
    "EditBuffer",
    "EditBufferManager",
    "FetchMode",
    "ModePolicy",
    "NoteAggregator",
    "NoteRow",
    "NotesSession",
    "PushMode",
    "ReconciliationEngine",
    "RemoteNoteGateway",
    "SyncMode",
    "ViewAction",
    "ViewDescription",
    "ViewState",
    "ViewStateMachine",
]
