"""SQLite database operations"""

import json
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from jurisai.db.base import COLLECTIONS, parse_sort, table_for
from jurisai.utils.config import get_settings

_FIELD_PATTERN = "abcdefghijklmnopqrstuvwxyz0123456789_"


def get_db_path() -> Path:
    """Get database path from settings"""
    settings = get_settings()
    return Path(settings.database_path)


@contextmanager
def get_connection():
    """Get a database connection as context manager"""
    db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db():
    """Initialize database with schema.

    Every collection is stored as a JSON document with its id, matter_id
    and timestamps lifted into columns. Arguments also lift version_number
    so that (matter_id, version_number) can be unique.
    """
    with get_connection() as conn:
        cursor = conn.cursor()

        for table in COLLECTIONS.values():
            version_column = "version_number INTEGER," if table == "arguments" else ""
            unique = ", UNIQUE(matter_id, version_number)" if table == "arguments" else ""
            cursor.execute(f"""
                CREATE TABLE IF NOT EXISTS {table} (
                    id TEXT PRIMARY KEY,
                    matter_id TEXT,
                    {version_column}
                    data TEXT NOT NULL,
                    created_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    {unique}
                )
            """)
            cursor.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_{table}_matter
                ON {table}(matter_id)
            """)


def _check_field(name: str) -> str:
    """Field names are interpolated into json paths; keep them to identifiers."""
    if not name or any(ch not in _FIELD_PATTERN for ch in name.lower()):
        raise ValueError(f"Invalid field name: {name!r}")
    return name


def _row_to_record(row: sqlite3.Row) -> dict:
    return json.loads(row["data"])


def insert_record(collection: str, record: dict) -> dict:
    """Insert a record and return it with id and timestamps."""
    table = table_for(collection)
    now = datetime.now().isoformat()
    data = dict(record)
    data["id"] = data.get("id") or str(uuid.uuid4())
    data["created_date"] = now
    data["updated_date"] = now

    with get_connection() as conn:
        if table == "arguments":
            conn.execute(
                "INSERT INTO arguments (id, matter_id, version_number, data, created_date, updated_date) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (data["id"], data.get("matter_id"), data.get("version_number"),
                 json.dumps(data, ensure_ascii=False), now, now),
            )
        else:
            conn.execute(
                f"INSERT INTO {table} (id, matter_id, data, created_date, updated_date) "
                "VALUES (?, ?, ?, ?, ?)",
                (data["id"], data.get("matter_id"),
                 json.dumps(data, ensure_ascii=False), now, now),
            )
    return data


def select_records(
    collection: str,
    criteria: Optional[dict] = None,
    sort: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[dict]:
    """Select records matching equality criteria."""
    table = table_for(collection)
    clauses = []
    params: list = []
    for key, value in (criteria or {}).items():
        path = f"json_extract(data, '$.{_check_field(key)}')"
        if value is None:
            clauses.append(f"{path} IS NULL")
        else:
            clauses.append(f"{path} = ?")
            params.append(value.value if hasattr(value, "value") else value)

    query = f"SELECT data FROM {table}"
    if clauses:
        query += " WHERE " + " AND ".join(clauses)

    field, descending = parse_sort(sort)
    if field:
        query += f" ORDER BY json_extract(data, '$.{_check_field(field)}')"
        query += " DESC" if descending else " ASC"
        query += ", rowid DESC" if descending else ", rowid ASC"
    else:
        query += " ORDER BY rowid ASC"

    if limit is not None:
        query += " LIMIT ?"
        params.append(int(limit))

    with get_connection() as conn:
        rows = conn.execute(query, params).fetchall()
    return [_row_to_record(r) for r in rows]


def get_record(collection: str, record_id: str) -> Optional[dict]:
    """Get a record by id"""
    table = table_for(collection)
    with get_connection() as conn:
        row = conn.execute(f"SELECT data FROM {table} WHERE id = ?", (record_id,)).fetchone()
    return _row_to_record(row) if row else None


def update_record(collection: str, record_id: str, partial: dict) -> Optional[dict]:
    """Merge partial fields into an existing record. Returns None if missing."""
    table = table_for(collection)
    with get_connection() as conn:
        row = conn.execute(f"SELECT data FROM {table} WHERE id = ?", (record_id,)).fetchone()
        if row is None:
            return None
        data = _row_to_record(row)
        data.update({k: v for k, v in partial.items() if k not in ("id", "created_date")})
        data["updated_date"] = datetime.now().isoformat()
        conn.execute(
            f"UPDATE {table} SET matter_id = ?, data = ?, updated_date = ? WHERE id = ?",
            (data.get("matter_id"), json.dumps(data, ensure_ascii=False),
             data["updated_date"], record_id),
        )
    return data


def count_records(collection: str) -> int:
    table = table_for(collection)
    with get_connection() as conn:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
