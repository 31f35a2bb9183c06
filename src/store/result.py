"""Explicit result type for store queries.

Supabase reports failures as exceptions or as an error slot next to the data.
`EntityStore.execute` folds both into `Ok | Err` so every call site has to
decide what a failure means for it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NoReturn, Optional, Union

from src.core.exceptions import StoreError


class ErrorKind(str, Enum):
    """Coarse classification of store failures."""

    QUERY = "query"
    CONSTRAINT = "constraint"
    SCHEMA = "schema"
    CONNECTION = "connection"


@dataclass(frozen=True)
class Ok:
    """Successful query: returned rows and, when requested, the exact count."""

    data: list[dict[str, Any]] = field(default_factory=list)
    count: Optional[int] = None

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self, message: str = "Store query failed") -> list[dict[str, Any]]:
        return self.data


@dataclass(frozen=True)
class Err:
    """Failed query with the store's diagnostic text."""

    kind: ErrorKind
    detail: str
    code: Optional[str] = None

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self, message: str = "Store query failed") -> NoReturn:
        raise StoreError(message, details=self.detail, kind=self.kind.value)


StoreResult = Union[Ok, Err]
