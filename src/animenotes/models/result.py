"""Tagged results returned by the remote gateway, lookup and engine."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ResultStatus(str, Enum):
    """Outcome of a call to an external collaborator."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    AUTH_MISSING = "auth_missing"


@dataclass
class FetchResult:
    """Result of fetching a single remote note."""

    status: ResultStatus
    text: str = ""
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status == ResultStatus.FOUND and bool(self.text)


@dataclass
class SaveResult:
    """Result of saving (or clearing) a single remote note."""

    status: ResultStatus
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == ResultStatus.FOUND


@dataclass
class MediaInfo:
    """Display data for an anime."""

    title: str
    cover_image: str = ""


@dataclass
class LookupResult:
    """Result of resolving display data for an anime."""

    status: ResultStatus
    media: Optional[MediaInfo] = None
    error: Optional[str] = None


class NoticeLevel(str, Enum):
    """Severity of a transient user-visible message."""

    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass
class Notice:
    """A short-lived message for the host to display."""

    level: NoticeLevel
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ActionResult:
    """Result of a reconciliation action.

    ``text`` carries a fetched single note and ``notes`` a fetched mapping,
    when the action produced one.
    """

    success: bool
    notice: Optional[Notice] = None
    text: Optional[str] = None
    notes: Optional[dict[int, str]] = None
