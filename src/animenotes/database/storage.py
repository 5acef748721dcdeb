"""Key/value store backing the plugin namespace."""

import json
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from animenotes.database.schema import StorageRecord, init_database


class KeyValueStore:
    """Opaque get/set map keyed by string, persisted in SQLite.

    Values are stored as JSON, so anything JSON-serializable round-trips.
    There is no partial update: ``set`` replaces the whole value.
    """

    def __init__(self, database_url: str):
        """Initialize store with database connection."""
        self.session_factory = init_database(database_url)

    def _get_session(self) -> Session:
        """Get a new database session."""
        return self.session_factory()

    def get(self, key: str) -> Optional[Any]:
        """Return the decoded value for ``key``, or None when absent."""
        with self._get_session() as session:
            record = session.get(StorageRecord, key)
            if record is None:
                return None
            return json.loads(record.value)

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        encoded = json.dumps(value)
        with self._get_session() as session:
            record = session.get(StorageRecord, key)
            if record:
                record.value = encoded
                record.updated_at = datetime.utcnow()
            else:
                session.add(StorageRecord(key=key, value=encoded))
            session.commit()
