"""Slug normalization.

A slug is the URL form of a display name: lowercase ASCII letters and digits
separated by single hyphens. Normalization never makes a slug unique by
appending a suffix; a collision is reported to the caller, who decides whether
to reject the input or ask for a more specific title.
"""

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from src.core.exceptions import DuplicateSlugError, ValidationError

DEFAULT_LEGACY_PREFIX = "about-"

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
_SEPARATORS = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class SlugScope:
    """Snapshot of the slugs already taken within one scope, e.g. all articles."""

    name: str
    taken: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_rows(cls, name: str, rows: Iterable[dict[str, Any]], column: str = "slug") -> "SlugScope":
        return cls(name=name, taken=frozenset(row[column] for row in rows if row.get(column)))

    @classmethod
    def from_names(cls, name: str, names: Iterable[str]) -> "SlugScope":
        """Scope for entities whose slug is derived from their name."""
        return cls(name=name, taken=frozenset(s for s in map(slugify, names) if s))

    def __contains__(self, slug: object) -> bool:
        return slug in self.taken


def slugify(raw_name: str) -> str:
    """
    Reduce text to slug form without any scope check.

    Returns an empty string when nothing slug-worthy remains.
    """
    folded = unicodedata.normalize("NFKD", raw_name or "")
    ascii_text = folded.encode("ascii", "ignore").decode("ascii").lower()
    return _SEPARATORS.sub("-", ascii_text).strip("-")


def normalize(raw_name: str, scope: Optional[SlugScope] = None) -> str:
    """
    Map a human title or name to its canonical slug.

    Args:
        raw_name: Arbitrary text (whitespace, mixed case, punctuation).
        scope: Slugs already taken. Omit to skip the uniqueness check.

    Returns:
        Slug matching ``[a-z0-9]+(-[a-z0-9]+)*``.

    Raises:
        ValidationError: Nothing usable is left after normalization.
        DuplicateSlugError: The slug is already taken within `scope`.
    """
    slug = slugify(raw_name)
    if not slug:
        raise ValidationError("Cannot derive a slug", details={"value": raw_name})

    if scope is not None and slug in scope:
        raise DuplicateSlugError(slug, scope.name)

    return slug


def is_valid_slug(slug: str) -> bool:
    return bool(SLUG_PATTERN.match(slug or ""))


def is_legacy_slug(slug: Optional[str], prefix: str = DEFAULT_LEGACY_PREFIX) -> bool:
    """True for slugs of the deprecated content class (``about-...``)."""
    return bool(slug) and slug.startswith(prefix)
