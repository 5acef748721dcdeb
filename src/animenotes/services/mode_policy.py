"""Mode policy: which source is authoritative and which way notes flow."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from animenotes.models.note import NoteSource

logger = logging.getLogger(__name__)


class SyncMode(str, Enum):
    """User-selectable note mode."""

    LOCAL_ONLY = "local-only"
    ANILIST_ONLY = "anilist-only"
    LOCAL_ANILIST_SYNCED = "local-anilist-synced"
    DUAL_VIEW = "dual-view"


class PushMode(str, Enum):
    """Whether local saves are also pushed to AniList."""

    PUSH = "push"
    LOCAL_ONLY = "local-only"


class FetchMode(str, Enum):
    """When the single view reads the AniList note."""

    IF_EMPTY = "if-empty"  # Fall back to AniList when the local note is empty
    ALWAYS = "always"  # AniList is the only source
    ON_DEMAND = "on-demand"  # Only on an explicit fetch action


DEFAULT_MODE = SyncMode.DUAL_VIEW


@dataclass(frozen=True)
class ModePolicy:
    """Flags derived once from the mode preference."""

    mode: SyncMode
    enable_view_toggle: bool
    push_mode: PushMode
    fetch_mode: FetchMode
    is_anilist_only: bool
    is_local_only: bool

    @classmethod
    def from_preference(cls, preference: Optional[str]) -> "ModePolicy":
        """Derive the policy from a preference string.

        Unrecognized values fall back to dual-view.
        """
        try:
            mode = SyncMode((preference or "").strip().lower())
        except ValueError:
            logger.info("Unknown note mode %r, using %s", preference, DEFAULT_MODE.value)
            mode = DEFAULT_MODE
        return cls.for_mode(mode)

    @classmethod
    def for_mode(cls, mode: SyncMode) -> "ModePolicy":
        return cls(
            mode=mode,
            enable_view_toggle=mode == SyncMode.DUAL_VIEW,
            push_mode=(
                PushMode.PUSH if mode == SyncMode.LOCAL_ANILIST_SYNCED else PushMode.LOCAL_ONLY
            ),
            fetch_mode={
                SyncMode.ANILIST_ONLY: FetchMode.ALWAYS,
                SyncMode.LOCAL_ANILIST_SYNCED: FetchMode.IF_EMPTY,
            }.get(mode, FetchMode.ON_DEMAND),
            is_anilist_only=mode == SyncMode.ANILIST_ONLY,
            is_local_only=mode == SyncMode.LOCAL_ONLY,
        )

    def effective_source(self, view_mode: NoteSource) -> NoteSource:
        """The source notes are read from given the active view toggle."""
        if self.is_anilist_only:
            return NoteSource.ANILIST
        if self.enable_view_toggle:
            return view_mode
        return NoteSource.LOCAL

    def saves_to_remote(self, view_mode: NoteSource) -> bool:
        """True when saves go straight to AniList and skip the local store."""
        return self.effective_source(view_mode) == NoteSource.ANILIST

    @property
    def can_fetch_remote(self) -> bool:
        return not self.is_local_only

    @property
    def can_push_all(self) -> bool:
        return not (self.is_local_only or self.is_anilist_only)
