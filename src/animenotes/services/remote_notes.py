"""Remote note gateway backed by the AniList list entry ``notes`` field."""

import logging
from typing import Optional

from animenotes.models.note import normalize_note_text
from animenotes.models.result import FetchResult, ResultStatus, SaveResult
from animenotes.services.anilist_client import AniListAPIError, AniListClient

logger = logging.getLogger(__name__)

FETCH_NOTE_QUERY = """
query ($mediaId: Int) {
  Media(id: $mediaId, type: ANIME) {
    id
    mediaListEntry {
      id
      notes
    }
  }
}
"""

SAVE_NOTE_MUTATION = """
mutation ($mediaId: Int, $notes: String) {
  SaveMediaListEntry(mediaId: $mediaId, notes: $notes) {
    id
    mediaId
    notes
  }
}
"""

VIEWER_QUERY = """
query {
  Viewer {
    id
  }
}
"""

LIST_COLLECTION_QUERY = """
query ($userId: Int, $chunk: Int, $perChunk: Int) {
  MediaListCollection(
    userId: $userId
    type: ANIME
    chunk: $chunk
    perChunk: $perChunk
    forceSingleCompletedList: true
  ) {
    hasNextChunk
    lists {
      entries {
        mediaId
        notes
      }
    }
  }
}
"""


class RemoteNoteGateway:
    """Reads and writes the current user's notes on AniList.

    Errors never escape this class: every call returns a tagged result (or a
    possibly partial mapping for ``fetch_all``) and failures are logged.

    Args:
        client (AniListClient): GraphQL transport
        token (str, optional): AniList access token; empty means not logged in
        chunk_size (int): Entries requested per list-collection chunk
    """

    def __init__(
        self,
        client: AniListClient,
        token: Optional[str] = None,
        chunk_size: int = 500,
    ):
        self.client = client
        self.token = token or ""
        self.chunk_size = chunk_size

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    def fetch_one(self, media_id: int) -> FetchResult:
        """Fetch the user's note for one anime.

        Returns:
            FetchResult tagged FOUND (non-empty note), NOT_FOUND, FAILED or AUTH_MISSING
        """
        if not self.has_token:
            return FetchResult(status=ResultStatus.AUTH_MISSING)

        try:
            data = self.client.query(FETCH_NOTE_QUERY, {"mediaId": media_id}, token=self.token)
        except AniListAPIError as e:
            if e.not_found:
                return FetchResult(status=ResultStatus.NOT_FOUND)
            logger.warning("Fetching AniList note for %s failed: %s", media_id, e)
            return FetchResult(status=ResultStatus.FAILED, error=str(e))

        entry = (data.get("Media") or {}).get("mediaListEntry")
        text = normalize_note_text(entry.get("notes")) if entry else ""
        if not text:
            return FetchResult(status=ResultStatus.NOT_FOUND)
        return FetchResult(status=ResultStatus.FOUND, text=text)

    def save_one(self, media_id: int, text: str) -> SaveResult:
        """Set the user's note for one anime.

        Returns:
            SaveResult tagged FOUND on success, FAILED or AUTH_MISSING otherwise
        """
        if not self.has_token:
            return SaveResult(status=ResultStatus.AUTH_MISSING)

        try:
            self.client.query(
                SAVE_NOTE_MUTATION,
                {"mediaId": media_id, "notes": text},
                token=self.token,
            )
        except AniListAPIError as e:
            logger.warning("Saving AniList note for %s failed: %s", media_id, e)
            return SaveResult(status=ResultStatus.FAILED, error=str(e))
        return SaveResult(status=ResultStatus.FOUND)

    def delete_one(self, media_id: int) -> SaveResult:
        """Clear the user's note for one anime (AniList has no delete for it)."""
        return self.save_one(media_id, "")

    def _viewer_id(self) -> int:
        data = self.client.query(VIEWER_QUERY, token=self.token)
        return int(data["Viewer"]["id"])

    def fetch_all(self) -> dict[int, str]:
        """Fetch every non-empty note in the user's anime list.

        Pages through the list collection chunk by chunk. A failure stops
        paging and whatever was collected so far is returned, so a short or
        empty mapping may be incomplete.

        Returns:
            Mapping of media id to note text
        """
        notes: dict[int, str] = {}
        if not self.has_token:
            return notes

        try:
            user_id = self._viewer_id()
            chunk = 1
            while True:
                data = self.client.query(
                    LIST_COLLECTION_QUERY,
                    {"userId": user_id, "chunk": chunk, "perChunk": self.chunk_size},
                    token=self.token,
                )
                collection = data.get("MediaListCollection") or {}
                for media_list in collection.get("lists") or []:
                    for entry in (media_list or {}).get("entries") or []:
                        text = normalize_note_text(entry.get("notes"))
                        if text and entry.get("mediaId") is not None:
                            notes[int(entry["mediaId"])] = text

                if not collection.get("hasNextChunk"):
                    break
                chunk += 1
        except (AniListAPIError, KeyError, TypeError, ValueError) as e:
            logger.warning(
                "Fetching AniList notes stopped early (%d collected): %s", len(notes), e
            )

        logger.debug("Fetched %d note(s) from AniList", len(notes))
        return notes
