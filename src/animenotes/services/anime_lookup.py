"""Anime display lookup (title and cover image) via AniList."""

import logging

from animenotes.models.result import LookupResult, MediaInfo, ResultStatus
from animenotes.services.anilist_client import AniListAPIError, AniListClient

logger = logging.getLogger(__name__)

MEDIA_QUERY = """
query ($id: Int) {
  Media(id: $id, type: ANIME) {
    id
    title {
      userPreferred
      romaji
      english
    }
    coverImage {
      large
      medium
    }
  }
}
"""


class AnimeLookup:
    """Resolves anime titles and cover images for display.

    Successful lookups are cached for the lifetime of the instance; failures
    are not, so a later call retries.
    """

    def __init__(self, client: AniListClient):
        """Initialize the lookup.

        Args:
            client: AniList GraphQL transport
        """
        self.client = client
        self._cache: dict[int, MediaInfo] = {}

    def get_entry(self, media_id: int) -> LookupResult:
        """Look up display data for an anime.

        Args:
            media_id: AniList media id

        Returns:
            LookupResult tagged FOUND with media, NOT_FOUND or FAILED
        """
        if media_id in self._cache:
            return LookupResult(status=ResultStatus.FOUND, media=self._cache[media_id])

        try:
            data = self.client.query(MEDIA_QUERY, {"id": media_id})
        except AniListAPIError as e:
            if e.not_found:
                return LookupResult(status=ResultStatus.NOT_FOUND)
            logger.warning("Looking up anime %s failed: %s", media_id, e)
            return LookupResult(status=ResultStatus.FAILED, error=str(e))

        media = data.get("Media")
        if not media:
            return LookupResult(status=ResultStatus.NOT_FOUND)

        titles = media.get("title") or {}
        title = titles.get("userPreferred") or titles.get("romaji") or titles.get("english")
        if not title:
            return LookupResult(status=ResultStatus.NOT_FOUND)

        covers = media.get("coverImage") or {}
        info = MediaInfo(title=title, cover_image=covers.get("large") or covers.get("medium") or "")
        self._cache[media_id] = info
        return LookupResult(status=ResultStatus.FOUND, media=info)
