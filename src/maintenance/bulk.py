"""Administrative bulk operations.

Each operation is a single request/response exchange with the store: there is
no job state, no checkpointing and no per-row retry. Counts are reported so
that re-running an operation after it succeeded reports zero affected rows.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

import structlog

from src.core.exceptions import ValidationError
from src.maintenance.integrity import IntegrityChecker
from src.store.client import EntityStore
from src.store.tables import Entity, like_prefix

logger = structlog.get_logger(__name__)

# Column headers of the spreadsheet export listings are imported from.
LISTING_HEADER_ALIASES = {
    "Business": "business",
    "Category": "category",
    "Review Ra": "review_rating",
    "Number o": "number_of_reviews",
    "Address": "address",
    "Website": "website",
    "Phone": "phone",
    "Email": "email",
    "Featured": "featured",
}

DEFAULT_LISTING_CATEGORY = "Business"

_TRUE_VALUES = {"true", "1", "yes"}


@dataclass
class BulkDeleteResult:
    """Outcome of a delete-by-slug-prefix sweep."""

    prefix: str
    deleted: int
    articles: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class BulkInsertResult:
    """Rows created by one batch insert."""

    created: int
    rows: list[dict[str, Any]] = field(default_factory=list)
    parent: Optional[dict[str, Any]] = None
    skipped: int = 0


@dataclass
class ArticleUrl:
    """URL under which an article was indexed."""

    url: str
    slug: str
    title: Optional[str] = None
    created_at: Optional[datetime] = None


def clean_names(names: Iterable[Any]) -> list[str]:
    """
    Trim names, drop blanks and drop duplicates that appear after trimming.

    The first occurrence wins and input order is kept.
    """
    cleaned: list[str] = []
    seen: set[str] = set()
    for raw in names:
        if not isinstance(raw, str):
            continue
        name = raw.strip()
        if name and name not in seen:
            seen.add(name)
            cleaned.append(name)
    return cleaned


def _column_name(header: str) -> str:
    return LISTING_HEADER_ALIASES.get(header) or re.sub(r"\s+", "_", header.strip().lower())


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _number(value: Any, cast: type) -> Any:
    try:
        return cast(float(value))
    except (TypeError, ValueError):
        return cast(0)


def listing_from_import_row(raw: dict[str, Any], city_id: str) -> Optional[dict[str, Any]]:
    """
    Map one imported row onto a listing for `city_id`.

    Headers may be the export's own (``"Review Ra"``) or column names. Rows
    without a business name, or with neither a phone number nor a website,
    give ``None``.
    """
    row = {_column_name(str(header)): value for header, value in raw.items()}

    business = _text(row.get("business"))
    phone = _text(row.get("phone"))
    website = _text(row.get("website"))
    if not business or not (phone or website):
        return None

    featured = row.get("featured")
    if not isinstance(featured, bool):
        featured = _text(featured).lower() in _TRUE_VALUES

    return {
        "business": business,
        "category": _text(row.get("category")) or DEFAULT_LISTING_CATEGORY,
        "review_rating": _number(row.get("review_rating"), float),
        "number_of_reviews": _number(row.get("number_of_reviews"), int),
        "address": _text(row.get("address")),
        "website": website,
        "phone": phone,
        "email": _text(row.get("email")),
        "city_id": city_id,
        "featured": featured,
    }


class BulkMaintenance:
    """Batch mutations used by the admin tools."""

    def __init__(self, store: EntityStore, checker: Optional[IntegrityChecker] = None):
        self.store = store
        self.checker = checker or IntegrityChecker(store)

    def delete_by_slug_prefix(self, prefix: str = "about-", include_articles: bool = False) -> BulkDeleteResult:
        """
        Delete every article whose slug starts with `prefix`.

        The matching rows are counted first and the pre-delete count is
        reported. Rows created between the count and the delete are in neither
        figure.

        Args:
            prefix: Literal slug prefix.
            include_articles: Also return slug and title of each deleted article.

        Raises:
            StoreError: Counting or deleting failed.
        """
        if not prefix:
            raise ValidationError("Slug prefix is required")

        pattern = like_prefix(prefix)
        articles: list[dict[str, Any]] = []

        if include_articles:
            rows = self.store.execute(
                self.store.table(Entity.ARTICLES.value).select("id, slug, title").like("slug", pattern),
                retry=True,
            ).unwrap("Failed to fetch articles")
            articles = [{"slug": row.get("slug"), "title": row.get("title")} for row in rows]
            count = len(rows)
        else:
            count = self.checker.count_by_slug_prefix(Entity.ARTICLES, prefix, sample_size=0).count

        logger.info("bulk_delete_started", prefix=prefix, matched=count)

        if count == 0:
            return BulkDeleteResult(prefix=prefix, deleted=0)

        self.store.execute(
            self.store.table(Entity.ARTICLES.value).delete().like("slug", pattern)
        ).unwrap("Failed to delete articles")

        logger.info("bulk_delete_completed", prefix=prefix, deleted=count)
        return BulkDeleteResult(prefix=prefix, deleted=count, articles=articles)

    def list_slug_prefix_urls(self, prefix: str, site_url: str) -> list[ArticleUrl]:
        """
        List articles in a slug class as absolute URLs, newest first.

        The URLs are root-level (`<site>/<slug>`), the shape under which legacy
        articles were served and indexed before the `/articles/<slug>` route
        existed. They are meant for search-engine removal requests, not as
        links into this app, which never serves the legacy slug class.
        """
        if not prefix:
            raise ValidationError("Slug prefix is required")

        rows = self.store.execute(
            self.store.table(Entity.ARTICLES.value)
            .select("slug, title, created_at")
            .like("slug", like_prefix(prefix))
            .order("created_at", desc=True),
            retry=True,
        ).unwrap("Failed to fetch articles")

        base = site_url.rstrip("/")
        return [
            ArticleUrl(
                url=f"{base}/{row['slug']}",
                slug=row["slug"],
                title=row.get("title"),
                created_at=row.get("created_at"),
            )
            for row in rows
        ]

    def insert_states(self, names: Iterable[Any]) -> BulkInsertResult:
        """
        Insert cleaned state names in one batch.

        Raises:
            ValidationError: No name survives cleaning.
            StoreError: The batch was rejected; nothing is assumed committed.
        """
        cleaned = clean_names(names)
        if not cleaned:
            raise ValidationError("No valid state names provided")

        rows = self.store.execute(
            self.store.table(Entity.STATES.value).insert([{"name": name} for name in cleaned])
        ).unwrap("Failed to create states")

        logger.info("bulk_states_created", requested=len(cleaned), created=len(rows))
        return BulkInsertResult(created=len(rows), rows=rows)

    def insert_cities(self, state_id: str, names: Iterable[Any]) -> BulkInsertResult:
        """
        Insert cleaned city names for one existing state in one batch.

        Raises:
            ValidationError: The state does not exist or no name survives cleaning.
            StoreError: The batch was rejected.
        """
        if not state_id:
            raise ValidationError("State ID is required for bulk city creation")

        state_rows = self.store.execute(
            self.store.table(Entity.STATES.value).select("id, name").eq("id", state_id).limit(1),
            retry=True,
        ).unwrap("Failed to look up state")
        if not state_rows:
            raise ValidationError("Invalid state ID provided")

        cleaned = clean_names(names)
        if not cleaned:
            raise ValidationError("No valid city names provided")

        rows = self.store.execute(
            self.store.table(Entity.CITIES.value).insert(
                [{"name": name, "state_id": state_id} for name in cleaned]
            )
        ).unwrap("Failed to create cities")

        logger.info(
            "bulk_cities_created",
            state=state_rows[0].get("name"),
            requested=len(cleaned),
            created=len(rows),
        )
        return BulkInsertResult(created=len(rows), rows=rows, parent=state_rows[0])

    def insert_listings(self, city_id: str, rows: Iterable[dict[str, Any]]) -> BulkInsertResult:
        """
        Import listings for one existing city in one batch.

        Rows without a business name or without any contact (phone or
        website) are skipped and counted in `skipped`.

        Raises:
            ValidationError: The city does not exist or no row survives mapping.
            StoreError: The batch was rejected.
        """
        if not city_id:
            raise ValidationError("City ID is required for listing import")

        city_rows = self.store.execute(
            self.store.table(Entity.CITIES.value).select("id, name").eq("id", city_id).limit(1),
            retry=True,
        ).unwrap("Failed to look up city")
        if not city_rows:
            raise ValidationError("Invalid city ID provided")

        rows = list(rows)
        listings = [
            listing for listing in (listing_from_import_row(raw, city_id) for raw in rows)
            if listing is not None
        ]
        skipped = len(rows) - len(listings)
        if not listings:
            raise ValidationError(
                "No valid listings provided",
                details={"total": len(rows), "skipped": skipped},
            )

        created = self.store.execute(
            self.store.table(Entity.LISTINGS.value).insert(listings)
        ).unwrap("Failed to import listings")

        logger.info(
            "bulk_listings_imported",
            city=city_rows[0].get("name"),
            total=len(rows),
            imported=len(created),
            skipped=skipped,
        )
        return BulkInsertResult(created=len(created), rows=created, parent=city_rows[0], skipped=skipped)
