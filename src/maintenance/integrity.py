"""Directory hierarchy integrity checks.

The store does not enforce the State → City → Listing references, so this
module finds rows whose foreign key does not resolve, listings entered more
than once and rows in the deprecated slug class. Every check is read-only
unless repair is requested explicitly, which lets an operator preview the
damage before changing anything.

Usage:
    checker = IntegrityChecker(store)

    preview = checker.count_by_slug_prefix(Entity.ARTICLES, "about-")
    report = checker.find_orphans(Entity.CITIES)
    if report.orphans:
        checker.find_orphans(Entity.CITIES, repair=True)

    duplicates = checker.find_duplicate_listings(ListingScope(city_id=city_id))
"""

import re
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

from src.core.exceptions import ValidationError
from src.store.client import EntityStore
from src.store.result import ErrorKind
from src.store.tables import PARENT_REFERENCES, Entity, like_prefix

logger = structlog.get_logger(__name__)

# Columns returned with each row so an operator can recognise it.
LABEL_COLUMNS = {
    Entity.STATES: "name",
    Entity.CITIES: "name",
    Entity.LISTINGS: "business",
    Entity.ARTICLES: "title",
}

# Entities that store a slug column, with the columns shown in previews.
SLUG_PREVIEW_COLUMNS = {
    Entity.ARTICLES: "id, slug, title, created_at",
}

# Ids per delete/update request; keeps the filter inside URL limits.
REPAIR_BATCH_SIZE = 100

# A duplicate repair may not remove more than this share of the scanned listings.
MAX_DUPLICATE_SHARE = 0.5

NAME_SIMILARITY_THRESHOLD = 0.95
ADDRESS_SIMILARITY_THRESHOLD = 0.7

DUPLICATE_COLUMNS = "id, business, address, phone, city_id, created_at"

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")
_NON_DIGITS = re.compile(r"\D")


@dataclass
class SlugPrefixCount:
    """Size of a slug class, with the newest rows as a sample."""

    entity: Entity
    prefix: str
    count: int
    sample: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class OrphanReport:
    """Result of an orphan scan over one child collection."""

    entity: Entity
    column: str
    parent: Entity
    checked: int = 0
    orphans: list[dict[str, Any]] = field(default_factory=list)
    repaired: int = 0
    column_present: bool = True

    @property
    def orphan_count(self) -> int:
        return len(self.orphans)


@dataclass(frozen=True)
class ListingScope:
    """Listings to scan: one city, every city of one state, or everything."""

    city_id: Optional[str] = None
    state_id: Optional[str] = None


@dataclass
class DuplicateGroup:
    """The oldest listing of a group and the newer copies of it."""

    original: dict[str, Any]
    duplicates: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class DuplicateReport:
    """Result of a duplicate listing scan."""

    scope: ListingScope
    checked: int = 0
    groups: list[DuplicateGroup] = field(default_factory=list)
    removed: int = 0

    @property
    def duplicate_count(self) -> int:
        return sum(len(group.duplicates) for group in self.groups)


def normalize_text(text: Optional[str]) -> str:
    """Lowercase, drop punctuation and collapse whitespace."""
    if not text:
        return ""
    stripped = _PUNCTUATION.sub("", text.lower())
    return _WHITESPACE.sub(" ", stripped).strip()


def word_similarity(first: Optional[str], second: Optional[str]) -> float:
    """Share of distinct words the two texts have in common (0.0 to 1.0)."""
    a, b = normalize_text(first), normalize_text(second)
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    words_a, words_b = set(a.split(" ")), set(b.split(" "))
    return len(words_a & words_b) / len(words_a | words_b)


def addresses_similar(first: Optional[str], second: Optional[str]) -> bool:
    """Equal, contained in one another (partial address), or mostly the same words."""
    a, b = normalize_text(first), normalize_text(second)
    if not a or not b:
        return False
    if a == b or a in b or b in a:
        return True
    return word_similarity(a, b) > ADDRESS_SIMILARITY_THRESHOLD


def phones_match(first: Optional[str], second: Optional[str]) -> bool:
    """Same ten-digit number, ignoring formatting and a country prefix."""
    a = _NON_DIGITS.sub("", first or "")[-10:]
    b = _NON_DIGITS.sub("", second or "")[-10:]
    return len(a) == 10 and a == b


def is_duplicate_listing(first: dict[str, Any], second: dict[str, Any]) -> bool:
    """
    Whether two listings describe the same business.

    Both must be in the same city. Then either the names match and the
    address is similar or the phone is the same, or the names are
    near-identical and the address is similar.
    """
    if first.get("city_id") != second.get("city_id"):
        return False

    name = normalize_text(first.get("business"))
    same_address = addresses_similar(first.get("address"), second.get("address"))

    if name and name == normalize_text(second.get("business")):
        if same_address or phones_match(first.get("phone"), second.get("phone")):
            return True

    return (
        same_address
        and word_similarity(first.get("business"), second.get("business")) > NAME_SIMILARITY_THRESHOLD
    )


def group_duplicates(listings: list[dict[str, Any]]) -> list[DuplicateGroup]:
    """
    Group listings that duplicate an earlier one.

    `listings` must be ordered oldest first; the first listing of each group
    is the one that is kept. A listing joins at most one group.
    """
    groups: list[DuplicateGroup] = []
    grouped: set[str] = set()

    for index, listing in enumerate(listings):
        if listing["id"] in grouped:
            continue
        grouped.add(listing["id"])

        group = DuplicateGroup(original=listing)
        for other in listings[index + 1:]:
            if other["id"] not in grouped and is_duplicate_listing(listing, other):
                group.duplicates.append(other)
                grouped.add(other["id"])

        if group.duplicates:
            groups.append(group)

    return groups


class IntegrityChecker:
    """Scans the store for orphaned, duplicated and malformed entities."""

    def __init__(self, store: EntityStore):
        self.store = store

    def count_by_slug_prefix(
        self,
        entity: Entity = Entity.ARTICLES,
        prefix: str = "about-",
        sample_size: int = 20,
    ) -> SlugPrefixCount:
        """
        Count rows whose slug starts with `prefix`, without side effects.

        Args:
            entity: Collection with a slug column.
            prefix: Literal slug prefix.
            sample_size: Number of newest matching rows to return.

        Returns:
            Exact count plus a sample ordered by creation time, newest first.
        """
        entity = Entity(entity)
        columns = SLUG_PREVIEW_COLUMNS.get(entity)
        if columns is None:
            raise ValidationError(f"{entity.value} has no slug column")
        if not prefix:
            raise ValidationError("Slug prefix is required")

        if sample_size > 0:
            query = (
                self.store.table(entity.value)
                .select(columns, count="exact")
                .like("slug", like_prefix(prefix))
                .order("created_at", desc=True)
                .limit(sample_size)
            )
        else:
            query = (
                self.store.table(entity.value)
                .select("id", count="exact", head=True)
                .like("slug", like_prefix(prefix))
            )

        result = self.store.execute(query, retry=True)
        rows = result.unwrap(f"Failed to count {entity.value}")
        count = result.count if result.count is not None else len(rows)

        logger.info("slug_prefix_counted", entity=entity.value, prefix=prefix, count=count)
        return SlugPrefixCount(entity=entity, prefix=prefix, count=count, sample=rows)

    def has_column(self, entity: Entity, column: str) -> bool:
        """
        Probe whether a column exists.

        Schema changes can lag behind deployments, so callers that depend on a
        newer column ask first. A missing column is reported as ``False``; any
        other store failure raises `StoreError`.
        """
        entity = Entity(entity)
        result = self.store.execute(
            self.store.table(entity.value).select(column).limit(1),
            retry=True,
        )
        if result.ok:
            return True

        if result.kind is ErrorKind.SCHEMA:
            logger.info("column_absent", entity=entity.value, column=column, detail=result.detail)
            return False

        result.unwrap(f"Failed to probe {entity.value}.{column}")

    def find_orphans(self, entity: Entity, repair: bool = False) -> OrphanReport:
        """
        List child rows whose parent reference does not resolve.

        Args:
            entity: Child collection (cities, listings or articles).
            repair: Delete orphaned cities/listings, or clear the city of
                orphaned articles.

        Returns:
            Report of the scan. The snapshot is best-effort: concurrent writes
            can be missed.
        """
        entity = Entity(entity)
        reference = PARENT_REFERENCES.get(entity)
        if reference is None:
            raise ValidationError(f"{entity.value} has no parent reference")

        report = OrphanReport(entity=entity, column=reference.column, parent=reference.parent)

        if reference.nullable and not self.has_column(entity, reference.column):
            report.column_present = False
            return report

        label = LABEL_COLUMNS[entity]
        # Children are read before parents so a child added mid-scan cannot
        # point at a parent we have not seen.
        children = self.store.fetch_all(
            lambda: self.store.table(entity.value)
            .select(f"id, {reference.column}, {label}")
            .order("id")
        ).unwrap(f"Failed to read {entity.value}")

        parents = self.store.fetch_all(
            lambda: self.store.table(reference.parent.value).select("id").order("id")
        ).unwrap(f"Failed to read {reference.parent.value}")
        parent_ids = {row["id"] for row in parents}

        report.checked = len(children)
        report.orphans = [
            row for row in children
            if self._is_orphan(row.get(reference.column), parent_ids, reference.nullable)
        ]

        logger.info(
            "orphan_scan_completed",
            entity=entity.value,
            checked=report.checked,
            orphans=report.orphan_count,
        )

        if repair and report.orphans:
            report.repaired = self._repair(entity, reference.column, reference.nullable, report.orphans)

        return report

    @staticmethod
    def _is_orphan(value: Optional[str], parent_ids: set[str], nullable: bool) -> bool:
        if value is None:
            return not nullable
        return value not in parent_ids

    def _repair(self, entity: Entity, column: str, nullable: bool, orphans: list[dict[str, Any]]) -> int:
        ids = [row["id"] for row in orphans]
        repaired = 0

        for start in range(0, len(ids), REPAIR_BATCH_SIZE):
            batch = ids[start:start + REPAIR_BATCH_SIZE]
            table = self.store.table(entity.value)
            query = table.update({column: None}) if nullable else table.delete()
            rows = self.store.execute(query.in_("id", batch)).unwrap(
                f"Failed to repair {entity.value}"
            )
            repaired += len(rows)

        logger.warning(
            "orphans_repaired",
            entity=entity.value,
            action="cleared" if nullable else "deleted",
            repaired=repaired,
        )
        return repaired

    def find_duplicate_listings(
        self, scope: Optional[ListingScope] = None, repair: bool = False
    ) -> DuplicateReport:
        """
        Find listings that duplicate an older listing in the same city.

        Args:
            scope: Restrict the scan to a city or a state. Everything by default.
            repair: Delete the newer copies, keeping the oldest listing of each
                group.

        Returns:
            Report of the scan, with the number of listings removed.

        Raises:
            ValidationError: The repair would remove more than half of the
                scanned listings; nothing is deleted.
            StoreError: Reading or deleting failed.
        """
        scope = scope or ListingScope()
        report = DuplicateReport(scope=scope)

        listings = self._scoped_listings(scope)
        listings.sort(key=lambda row: (row.get("created_at") or "", row["id"]))

        report.checked = len(listings)
        report.groups = group_duplicates(listings)

        logger.info(
            "duplicate_scan_completed",
            city_id=scope.city_id,
            state_id=scope.state_id,
            checked=report.checked,
            groups=len(report.groups),
            duplicates=report.duplicate_count,
        )

        if repair and report.groups:
            ids = [row["id"] for group in report.groups for row in group.duplicates]
            max_allowed = int(report.checked * MAX_DUPLICATE_SHARE)
            if len(ids) > max_allowed:
                raise ValidationError(
                    f"Refusing to remove {len(ids)} of {report.checked} listings; "
                    f"at most {max_allowed} can be removed at once",
                    details={
                        "would_remove": len(ids),
                        "max_allowed": max_allowed,
                        "checked": report.checked,
                    },
                )
            report.removed = self._delete_listings(ids)

        return report

    def _scoped_listings(self, scope: ListingScope) -> list[dict[str, Any]]:
        table = Entity.LISTINGS.value

        if scope.city_id:
            return self.store.fetch_all(
                lambda: self.store.table(table)
                .select(DUPLICATE_COLUMNS)
                .eq("city_id", scope.city_id)
                .order("id")
            ).unwrap("Failed to fetch listings")

        if not scope.state_id:
            return self.store.fetch_all(
                lambda: self.store.table(table).select(DUPLICATE_COLUMNS).order("id")
            ).unwrap("Failed to fetch listings")

        cities = self.store.fetch_all(
            lambda: self.store.table(Entity.CITIES.value)
            .select("id")
            .eq("state_id", scope.state_id)
            .order("id")
        ).unwrap("Failed to fetch cities")
        city_ids = [row["id"] for row in cities]

        listings: list[dict[str, Any]] = []
        for start in range(0, len(city_ids), REPAIR_BATCH_SIZE):
            batch = city_ids[start:start + REPAIR_BATCH_SIZE]
            listings.extend(
                self.store.fetch_all(
                    lambda: self.store.table(table)
                    .select(DUPLICATE_COLUMNS)
                    .in_("city_id", batch)
                    .order("id")
                ).unwrap("Failed to fetch listings")
            )
        return listings

    def _delete_listings(self, ids: list[str]) -> int:
        removed = 0
        for start in range(0, len(ids), REPAIR_BATCH_SIZE):
            batch = ids[start:start + REPAIR_BATCH_SIZE]
            rows = self.store.execute(
                self.store.table(Entity.LISTINGS.value).delete().in_("id", batch)
            ).unwrap("Failed to remove duplicate listings")
            removed += len(rows)

        logger.warning("duplicate_listings_removed", removed=removed)
        return removed
