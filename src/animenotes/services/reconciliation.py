"""Reconciliation between the local store and AniList."""

import logging

from animenotes.database.repository import NoteRepository
from animenotes.models.note import NoteSource
from animenotes.models.result import (
    ActionResult,
    Notice,
    NoticeLevel,
    ResultStatus,
    SaveResult,
)
from animenotes.services.mode_policy import ModePolicy, PushMode
from animenotes.services.remote_notes import RemoteNoteGateway
from animenotes.services.session import NotesSession

logger = logging.getLogger(__name__)

AUTH_MISSING_MESSAGE = "🔒 AniList token missing. Log in to AniList to sync notes."


def auth_missing_notice() -> Notice:
    return Notice(NoticeLevel.ERROR, AUTH_MISSING_MESSAGE)


class ReconciliationEngine:
    """Applies save, delete, fetch and push actions per the mode policy.

    Every method returns an ActionResult carrying the notice to show; none
    of them raise for remote failures.
    """

    def __init__(
        self,
        policy: ModePolicy,
        repository: NoteRepository,
        gateway: RemoteNoteGateway,
        session: NotesSession,
    ):
        """Initialize the engine.

        Args:
            policy: Derived mode flags
            repository: Local note store
            gateway: AniList note gateway
            session: Shared session state (view mode, soft-delete overlay)
        """
        self.policy = policy
        self.repository = repository
        self.gateway = gateway
        self.session = session

    def _not_allowed(self, action: str) -> ActionResult:
        logger.debug("%s skipped in %s mode", action, self.policy.mode.value)
        return ActionResult(
            success=False,
            notice=Notice(
                NoticeLevel.INFO,
                f"ℹ️ {action} is not available in {self.policy.mode.value} mode.",
            ),
        )

    def _remote_failure(self, result: SaveResult, action: str) -> ActionResult:
        if result.status == ResultStatus.AUTH_MISSING:
            return ActionResult(success=False, notice=auth_missing_notice())
        return ActionResult(
            success=False,
            notice=Notice(NoticeLevel.ERROR, f"❌ Failed to {action} on AniList."),
        )

    def save_single(self, media_id: int, text: str) -> ActionResult:
        """Save one note to wherever the policy says it belongs.

        A failed push after a local write does not undo the local write.
        """
        if self.policy.saves_to_remote(self.session.view_mode):
            result = self.gateway.save_one(media_id, text)
            if not result.success:
                return self._remote_failure(result, "save note")
            return ActionResult(
                success=True,
                notice=Notice(NoticeLevel.SUCCESS, "✨ Note saved to AniList!"),
            )

        self.repository.write(media_id, text)

        if self.policy.push_mode == PushMode.PUSH:
            result = self.gateway.save_one(media_id, text)
            if not result.success:
                message = (
                    AUTH_MISSING_MESSAGE
                    if result.status == ResultStatus.AUTH_MISSING
                    else "⚠️ Note saved locally, but syncing to AniList failed."
                )
                return ActionResult(success=True, notice=Notice(NoticeLevel.ERROR, message))
            return ActionResult(
                success=True,
                notice=Notice(NoticeLevel.SUCCESS, "✨ Note saved and synced to AniList!"),
            )

        return ActionResult(
            success=True,
            notice=Notice(NoticeLevel.SUCCESS, "✨ Note saved successfully!"),
        )

    def delete_single(self, media_id: int) -> ActionResult:
        """Delete one note from the active source and hide its row."""
        if self.policy.effective_source(self.session.view_mode) == NoteSource.ANILIST:
            result = self.gateway.delete_one(media_id)
            if not result.success:
                return self._remote_failure(result, "delete note")
            self.session.soft_deleted.add(media_id)
            return ActionResult(
                success=True,
                notice=Notice(NoticeLevel.SUCCESS, "🗑️ Note deleted from AniList."),
            )

        self.repository.delete(media_id)
        self.session.soft_deleted.add(media_id)
        return ActionResult(
            success=True,
            notice=Notice(NoticeLevel.SUCCESS, "🗑️ Note deleted."),
        )

    def fetch_single(self, media_id: int) -> ActionResult:
        """Fetch one AniList note and cache it locally.

        ``text`` on the result is set only when a note was found.
        """
        if not self.policy.can_fetch_remote:
            return self._not_allowed("Fetching from AniList")
        result = self.gateway.fetch_one(media_id)
        if result.status == ResultStatus.AUTH_MISSING:
            return ActionResult(success=False, notice=auth_missing_notice())
        if result.status == ResultStatus.FAILED:
            return ActionResult(
                success=False,
                notice=Notice(NoticeLevel.ERROR, "❌ Failed to fetch note from AniList."),
            )
        if not result.found:
            return ActionResult(
                success=False,
                notice=Notice(NoticeLevel.INFO, "No AniList note found for this anime."),
            )

        self.repository.write(media_id, result.text)
        return ActionResult(
            success=True,
            notice=Notice(NoticeLevel.SUCCESS, "📥 Note fetched from AniList."),
            text=result.text,
        )

    def fetch_all_remote(self) -> ActionResult:
        """Fetch every AniList note.

        In dual-view mode the notes are returned for display only. Otherwise
        they are merged into the local store, AniList winning on conflict.
        ``notes`` on the result always holds the fetched AniList notes.
        """
        if not self.policy.can_fetch_remote:
            return self._not_allowed("Fetching from AniList")
        if not self.gateway.has_token:
            return ActionResult(success=False, notice=auth_missing_notice())

        remote = self.gateway.fetch_all()

        if self.policy.enable_view_toggle:
            message = f"📥 Loaded {len(remote)} note(s) from AniList."
        else:
            self.repository.merge(remote)
            message = f"📥 Fetched {len(remote)} note(s) from AniList."

        return ActionResult(
            success=True,
            notice=Notice(NoticeLevel.SUCCESS, message),
            notes=remote,
        )

    def push_all_local(self) -> ActionResult:
        """Push every non-blank local note to AniList, one at a time.

        Blank notes are skipped, not cleared remotely. Individual failures
        are logged and do not stop the loop.
        """
        if not self.policy.can_push_all:
            return self._not_allowed("Pushing to AniList")
        if not self.gateway.has_token:
            return ActionResult(success=False, notice=auth_missing_notice())

        pushed = 0
        failed = 0
        for media_id, text in self.repository.read_all().items():
            if not text.strip():
                continue
            if self.gateway.save_one(media_id, text).success:
                pushed += 1
            else:
                failed += 1

        if failed:
            logger.warning("Push to AniList finished with %d failure(s)", failed)
        return ActionResult(
            success=True,
            notice=Notice(NoticeLevel.SUCCESS, f"📤 Pushed {pushed} note(s) to AniList."),
        )
