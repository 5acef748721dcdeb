"""Data models for Anime Notes."""

from animenotes.models.note import Note, NoteSource, normalize_note_text
from animenotes.models.result import (
    ActionResult,
    FetchResult,
    LookupResult,
    MediaInfo,
    Notice,
    NoticeLevel,
    ResultStatus,
    SaveResult,
)

__all__ = [
    "ActionResult",
    "FetchResult",
    "LookupResult",
    "MediaInfo",
    "Note",
    "NoteSource",
    "Notice",
    "NoticeLevel",
    "ResultStatus",
    "SaveResult",
    "normalize_note_text",
]
