"""Entity store modules"""

from jurisai.db.base import COLLECTIONS, EntityStore
from jurisai.db.supabase import get_store

__all__ = [
    "COLLECTIONS",
    "EntityStore",
    "get_store",
]
