"""Supabase entity store implementing EntityStore"""

import logging
from pathlib import Path
from typing import List, Optional

from jurisai.db.base import COLLECTIONS, EntityStore, parse_sort, table_for
from jurisai.errors import RecordNotFoundError, StorageError, VersionConflictError
from jurisai.utils.config import get_settings

logger = logging.getLogger(__name__)

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"

# Cached per role; supabase is imported lazily so sqlite mode never needs it
_clients: dict = {}


def _client(role: str):
    """Shared Supabase client for a role.

    "read" uses the anon key. "write" prefers the service-role key, which
    bypasses row level security, and falls back to the anon key.
    """
    if role not in _clients:
        from supabase import ClientOptions, create_client

        settings = get_settings()
        key = settings.supabase_key
        if role == "write":
            key = settings.supabase_service_key or key
        if not settings.supabase_url or not key:
            raise StorageError(
                f"SUPABASE_URL and a {role} key must be set when DB_MODE=supabase"
            )
        _clients[role] = create_client(
            settings.supabase_url,
            key,
            options=ClientOptions(postgrest_client_timeout=10, storage_client_timeout=30),
        )
    return _clients[role]


class SupabaseStore(EntityStore):
    """EntityStore on Supabase tables (see migrations/001_supabase.sql)."""

    def __init__(self):
        self._read = lambda: _client("read")
        self._write = lambda: _client("write")

    def init_db(self) -> None:
        """Verify the schema exists.
        In practice, users run the migration SQL in the Supabase SQL Editor."""
        client = self._read()
        try:
            client.table("matters").select("id").limit(1).execute()
            logger.info("Supabase schema verified: tables accessible")
        except Exception as e:
            migration_path = Path(__file__).parent / "migrations" / "001_supabase.sql"
            logger.error(
                f"Schema not found. Run migration SQL in Supabase SQL Editor: {migration_path}"
            )
            raise StorageError(
                f"Supabase schema not initialized. Run 001_supabase.sql in SQL Editor. Error: {e}"
            ) from e

    def list(self, collection: str, sort: Optional[str] = None, limit: Optional[int] = None) -> List[dict]:
        return self.filter(collection, {}, sort=sort, limit=limit)

    def filter(
        self,
        collection: str,
        criteria: dict,
        sort: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        table = table_for(collection)
        try:
            query = self._read().table(table).select("*")
            for key, value in criteria.items():
                if value is None:
                    query = query.is_(key, "null")
                else:
                    query = query.eq(key, value.value if hasattr(value, "value") else value)
            field, descending = parse_sort(sort)
            if field:
                query = query.order(field, desc=descending)
            if limit is not None:
                query = query.limit(limit)
            return query.execute().data or []
        except Exception as e:
            raise StorageError(f"Failed to read {collection}: {e}") from e

    def get(self, collection: str, record_id: str) -> Optional[dict]:
        rows = self.filter(collection, {"id": record_id}, limit=1)
        return rows[0] if rows else None

    def create(self, collection: str, record: dict) -> dict:
        table = table_for(collection)
        # Let Postgres assign id and timestamps
        data = {
            k: v for k, v in record.items()
            if v is not None and k not in ("id", "created_date", "updated_date")
        }
        try:
            result = self._write().table(table).insert(data).execute()
        except Exception as e:
            if getattr(e, "code", None) == UNIQUE_VIOLATION and collection == "Argument":
                raise VersionConflictError(
                    f"Version {record.get('version_number')} already exists "
                    f"for matter {record.get('matter_id')}"
                ) from e
            raise StorageError(f"Failed to create {collection}: {e}") from e
        return result.data[0]

    def update(self, collection: str, record_id: str, partial: dict) -> dict:
        table = table_for(collection)
        data = {k: v for k, v in partial.items() if k not in ("id", "created_date")}
        try:
            result = (
                self._write()
                .table(table)
                .update(data)
                .eq("id", record_id)
                .execute()
            )
        except Exception as e:
            raise StorageError(f"Failed to update {collection} {record_id}: {e}") from e
        if not result.data:
            raise RecordNotFoundError(collection, record_id)
        return result.data[0]

    def get_status(self) -> dict:
        """Connection state and row counts per collection."""
        settings = get_settings()
        try:
            client = self._read()
            counts = {}
            for name, table in COLLECTIONS.items():
                result = client.table(table).select("id", count="exact").execute()
                counts[name] = result.count or 0
            return {
                "mode": "supabase",
                "url": settings.supabase_url,
                "counts": counts,
                "status": "connected",
            }
        except Exception as e:
            return {
                "mode": "supabase",
                "url": settings.supabase_url,
                "status": f"error: {e}",
            }

    # Storage bucket, used by FileIngestion in supabase mode

    def upload_file(self, path: str, content: bytes, mime_type: str) -> str:
        """Upload a file to the Supabase Storage bucket. Returns the object path."""
        client = self._write()
        client.storage.from_(get_settings().storage_bucket).upload(
            path=path,
            file=content,
            file_options={"content-type": mime_type, "upsert": "true"},
        )
        return path

    def download_file(self, path: str) -> bytes:
        """Download a file from the Supabase Storage bucket."""
        client = self._read()
        return client.storage.from_(get_settings().storage_bucket).download(path)


def get_store(mode: str = None) -> EntityStore:
    """EntityStore for `mode` ("supabase" or "sqlite"), defaulting to DB_MODE."""
    if mode is None:
        mode = get_settings().db_mode

    if mode == "supabase":
        return SupabaseStore()
    else:
        from jurisai.db.sqlite_client import SQLiteStore

        return SQLiteStore()
