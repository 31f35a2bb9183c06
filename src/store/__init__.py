"""
Entity store access.

- client: `EntityStore`, the Supabase wrapper every handler goes through
- result: `Ok | Err` result type returned by every query
- tables: collection names and foreign-key layout
"""

from src.store.client import EntityStore, classify_api_error
from src.store.result import Err, ErrorKind, Ok, StoreResult
from src.store.tables import PARENT_REFERENCES, Entity, ParentReference, like_prefix

__all__ = [
    "EntityStore",
    "classify_api_error",
    "Ok",
    "Err",
    "ErrorKind",
    "StoreResult",
    "Entity",
    "ParentReference",
    "PARENT_REFERENCES",
    "like_prefix",
]
