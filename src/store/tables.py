"""Table names and foreign-key layout of the directory schema."""

from enum import Enum
from typing import NamedTuple


class Entity(str, Enum):
    """Persisted entity collections."""

    STATES = "states"
    CITIES = "cities"
    LISTINGS = "listings"
    ARTICLES = "articles"


class ParentReference(NamedTuple):
    """Foreign key from a child collection to its parent."""

    column: str
    parent: Entity
    nullable: bool


PARENT_REFERENCES: dict[Entity, ParentReference] = {
    Entity.CITIES: ParentReference("state_id", Entity.STATES, nullable=False),
    Entity.LISTINGS: ParentReference("city_id", Entity.CITIES, nullable=False),
    # Added after launch; older databases may not have the column yet.
    Entity.ARTICLES: ParentReference("city_id", Entity.CITIES, nullable=True),
}


def like_prefix(prefix: str) -> str:
    """Build a LIKE pattern matching values that start with `prefix` literally."""
    escaped = (
        prefix.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"{escaped}%"
