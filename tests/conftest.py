"""Pytest fixtures for Anime Notes tests."""

import tempfile
from pathlib import Path
from typing import Callable, Optional
from unittest.mock import MagicMock

import pytest

from animenotes.database.repository import NoteRepository
from animenotes.database.storage import KeyValueStore
from animenotes.models.result import (
    FetchResult,
    LookupResult,
    MediaInfo,
    ResultStatus,
    SaveResult,
)
from animenotes.services.mode_policy import ModePolicy
from animenotes.services.session import NotesSession
from animenotes.services.view_state import ViewStateMachine


class FakeGateway:
    """In-memory stand-in for RemoteNoteGateway."""

    def __init__(self, notes: Optional[dict[int, str]] = None, token: str = "token"):
        self.notes = dict(notes or {})
        self.token = token
        self.saved: list[tuple[int, str]] = []
        self.fetched: list[int] = []
        self.fetch_all_calls = 0
        self.fail_saves = False
        self.fail_fetches = False
        self.on_fetch: Optional[Callable[[], None]] = None
        self.on_save: Optional[Callable[[], None]] = None

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    def fetch_one(self, media_id: int) -> FetchResult:
        if not self.has_token:
            return FetchResult(status=ResultStatus.AUTH_MISSING)
        self.fetched.append(media_id)
        if self.on_fetch:
            self.on_fetch()
        if self.fail_fetches:
            return FetchResult(status=ResultStatus.FAILED, error="boom")
        text = self.notes.get(media_id, "")
        if not text:
            return FetchResult(status=ResultStatus.NOT_FOUND)
        return FetchResult(status=ResultStatus.FOUND, text=text)

    def save_one(self, media_id: int, text: str) -> SaveResult:
        if not self.has_token:
            return SaveResult(status=ResultStatus.AUTH_MISSING)
        self.saved.append((media_id, text))
        if self.on_save:
            self.on_save()
        if self.fail_saves:
            return SaveResult(status=ResultStatus.FAILED, error="boom")
        if text:
            self.notes[media_id] = text
        else:
            self.notes.pop(media_id, None)
        return SaveResult(status=ResultStatus.FOUND)

    def delete_one(self, media_id: int) -> SaveResult:
        return self.save_one(media_id, "")

    def fetch_all(self) -> dict[int, str]:
        self.fetch_all_calls += 1
        if self.on_fetch:
            self.on_fetch()
        return {media_id: text for media_id, text in self.notes.items() if text}


class FakeLookup:
    """In-memory stand-in for AnimeLookup; unknown ids fail."""

    def __init__(self, titles: Optional[dict[int, str]] = None):
        self.titles = dict(titles or {})
        self.calls: list[int] = []
        self.on_lookup: Optional[Callable[[int], None]] = None

    def get_entry(self, media_id: int) -> LookupResult:
        self.calls.append(media_id)
        if self.on_lookup:
            self.on_lookup(media_id)
        if media_id not in self.titles:
            return LookupResult(status=ResultStatus.FAILED, error="unknown")
        return LookupResult(
            status=ResultStatus.FOUND,
            media=MediaInfo(
                title=self.titles[media_id],
                cover_image=f"https://img.example/{media_id}.jpg",
            ),
        )


@pytest.fixture
def temp_db_path():
    """Provide a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def store(temp_db_path):
    """Provide a key/value store with a temporary database."""
    return KeyValueStore(f"sqlite:///{temp_db_path}")


@pytest.fixture
def repository(store):
    """Provide a note repository over the temporary store."""
    return NoteRepository(store)


@pytest.fixture
def gateway():
    """Provide a fake AniList gateway with a token."""
    return FakeGateway()


@pytest.fixture
def lookup():
    """Provide a fake anime lookup with a few known titles."""
    return FakeLookup(
        {
            1: "Frieren",
            2: "bocchi the rock!",
            3: "Cowboy Bebop",
            42: "Mushishi",
        }
    )


@pytest.fixture
def make_machine(repository, gateway, lookup):
    """Build a ViewStateMachine for a given mode preference."""

    def _make(mode: str = "local-only", settle_delay: float = 0.0, **kwargs) -> ViewStateMachine:
        return ViewStateMachine(
            policy=ModePolicy.from_preference(mode),
            session=NotesSession(),
            repository=repository,
            gateway=gateway,
            lookup=lookup,
            settle_delay=settle_delay,
            sleep=kwargs.pop("sleep", MagicMock()),
            **kwargs,
        )

    return _make


@pytest.fixture
def tokenless_gateway():
    """Provide a fake AniList gateway without a token."""
    return FakeGateway(token="")
