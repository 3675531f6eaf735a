"""Abstract entity store: strategy pattern for SQLite/Supabase switching"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

# Collection name -> table name
COLLECTIONS: Dict[str, str] = {
    "Matter": "matters",
    "LegalAuthority": "legal_authorities",
    "LegalIssue": "legal_issues",
    "Argument": "arguments",
    "Document": "documents",
}


def table_for(collection: str) -> str:
    """Resolve a collection name to its table, rejecting unknown names."""
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection}") from None


def parse_sort(sort: Optional[str]) -> tuple[Optional[str], bool]:
    """Split a '-field' sort key into (field, descending)."""
    if not sort:
        return None, False
    if sort.startswith("-"):
        return sort[1:], True
    return sort, False


class EntityStore(ABC):
    """Opaque CRUD service over the five entity collections.
    Implemented by both SQLite and Supabase backends.

    Records are plain dicts; ``id``, ``created_date`` and ``updated_date``
    are assigned by the store.
    """

    @abstractmethod
    def init_db(self) -> None:
        """Initialize schema (create tables, indexes, constraints)."""

    @abstractmethod
    def list(
        self, collection: str, sort: Optional[str] = None, limit: Optional[int] = None
    ) -> List[dict]:
        """All records of a collection, optionally sorted ('-field' = desc) and limited."""

    @abstractmethod
    def filter(
        self,
        collection: str,
        criteria: dict,
        sort: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        """Records whose fields equal every value in criteria."""

    @abstractmethod
    def get(self, collection: str, record_id: str) -> Optional[dict]:
        """Single record by id, or None."""

    @abstractmethod
    def create(self, collection: str, record: dict) -> dict:
        """Insert a record. Returns the stored record including its id."""

    @abstractmethod
    def update(self, collection: str, record_id: str, partial: dict) -> dict:
        """Merge partial fields into a record. Returns the updated record."""

    @abstractmethod
    def get_status(self) -> dict:
        """Backend status info (mode, record counts, connection status)."""
