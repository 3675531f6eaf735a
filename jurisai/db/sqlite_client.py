"""SQLite wrapper implementing EntityStore"""

import logging
import sqlite3
from typing import List, Optional

from jurisai.db.base import COLLECTIONS, EntityStore
from jurisai.db import sqlite as sqlite_ops
from jurisai.errors import RecordNotFoundError, StorageError, VersionConflictError
from jurisai.utils.config import get_settings

logger = logging.getLogger(__name__)


class SQLiteStore(EntityStore):
    """SQLite implementation of EntityStore.
    Wraps the sqlite.py functions; the schema is created on first use."""

    def __init__(self):
        self.init_db()

    def init_db(self) -> None:
        try:
            sqlite_ops.init_db()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialize SQLite schema: {e}") from e

    def list(self, collection: str, sort: Optional[str] = None, limit: Optional[int] = None) -> List[dict]:
        return self.filter(collection, {}, sort=sort, limit=limit)

    def filter(
        self,
        collection: str,
        criteria: dict,
        sort: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        try:
            return sqlite_ops.select_records(collection, criteria, sort=sort, limit=limit)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {collection}: {e}") from e

    def get(self, collection: str, record_id: str) -> Optional[dict]:
        try:
            return sqlite_ops.get_record(collection, record_id)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {collection} {record_id}: {e}") from e

    def create(self, collection: str, record: dict) -> dict:
        try:
            return sqlite_ops.insert_record(collection, record)
        except sqlite3.IntegrityError as e:
            if collection == "Argument":
                raise VersionConflictError(
                    f"Version {record.get('version_number')} already exists "
                    f"for matter {record.get('matter_id')}"
                ) from e
            raise StorageError(f"Failed to create {collection}: {e}") from e
        except sqlite3.Error as e:
            raise StorageError(f"Failed to create {collection}: {e}") from e

    def update(self, collection: str, record_id: str, partial: dict) -> dict:
        try:
            updated = sqlite_ops.update_record(collection, record_id, partial)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to update {collection} {record_id}: {e}") from e
        if updated is None:
            raise RecordNotFoundError(collection, record_id)
        return updated

    def get_status(self) -> dict:
        settings = get_settings()
        try:
            counts = {name: sqlite_ops.count_records(name) for name in COLLECTIONS}
            return {
                "mode": "sqlite",
                "path": settings.database_path,
                "counts": counts,
                "status": "connected",
            }
        except Exception as e:
            return {
                "mode": "sqlite",
                "path": settings.database_path,
                "status": f"error: {e}",
            }
