"""Unit tests for bulk maintenance operations."""

import pytest

from src.core.exceptions import StoreError, ValidationError
from src.maintenance.bulk import BulkMaintenance, clean_names, listing_from_import_row
from src.store.client import EntityStore
from tests.fakes import FakeSupabase


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def bulk(db):
    return BulkMaintenance(EntityStore(db))


class TestCleanNames:
    """Test the shared name cleaning helper."""

    def test_trims_drops_blanks_and_duplicates(self):
        assert clean_names(["Texas", " Texas ", "", "California"]) == ["Texas", "California"]

    def test_keeps_first_occurrence_order(self):
        assert clean_names(["b", "a", " b", "c", "a "]) == ["b", "a", "c"]

    def test_dedupe_is_case_sensitive(self):
        assert clean_names(["Texas", "texas"]) == ["Texas", "texas"]

    def test_ignores_non_strings(self):
        assert clean_names(["Ohio", None, 42, {"name": "x"}]) == ["Ohio"]


class TestDeleteBySlugPrefix:
    """Test the legacy article sweep."""

    def test_deletes_exactly_the_prefixed_articles(self, bulk, db):
        db.seed(
            "articles",
            {"title": "A", "slug": "about-a"},
            {"title": "B", "slug": "about-b"},
            {"title": "C", "slug": "regular-article"},
            {"title": "D", "slug": "all-about-dogs"},
        )

        result = bulk.delete_by_slug_prefix("about-")

        assert result.deleted == 2
        assert sorted(row["slug"] for row in db.rows("articles")) == ["all-about-dogs", "regular-article"]

    def test_second_run_reports_zero(self, bulk, db):
        db.seed("articles", {"title": "A", "slug": "about-a"})

        first = bulk.delete_by_slug_prefix("about-")
        second = bulk.delete_by_slug_prefix("about-")

        assert first.deleted == 1
        assert second.deleted == 0

    def test_nothing_to_delete_skips_the_delete(self, bulk, db):
        bulk.delete_by_slug_prefix("about-")

        assert ("articles", "delete") not in db.calls

    def test_include_articles_lists_deleted(self, bulk, db):
        db.seed("articles", {"title": "About A", "slug": "about-a"}, {"title": "Keep", "slug": "keep"})

        result = bulk.delete_by_slug_prefix("about-", include_articles=True)

        assert result.deleted == 1
        assert result.articles == [{"slug": "about-a", "title": "About A"}]

    def test_count_failure_raises_without_deleting(self, bulk, db):
        db.seed("articles", {"title": "A", "slug": "about-a"})
        db.fail("articles", "select")

        with pytest.raises(StoreError) as exc_info:
            bulk.delete_by_slug_prefix("about-")

        assert exc_info.value.message == "Failed to count articles"
        assert len(db.rows("articles")) == 1

    def test_delete_failure_passes_store_detail(self, bulk, db):
        db.seed("articles", {"title": "A", "slug": "about-a"})
        db.fail("articles", "delete")

        with pytest.raises(StoreError) as exc_info:
            bulk.delete_by_slug_prefix("about-")

        assert exc_info.value.message == "Failed to delete articles"
        assert exc_info.value.details == "permission denied for table articles"

    def test_empty_prefix_rejected(self, bulk):
        """An empty prefix would match every article."""
        with pytest.raises(ValidationError):
            bulk.delete_by_slug_prefix("")


class TestListSlugPrefixUrls:
    """Test canonical URL listing."""

    def test_builds_absolute_urls_newest_first(self, bulk, db):
        """URLs keep the root-level shape the legacy articles were indexed under."""
        db.seed(
            "articles",
            {"title": "Old", "slug": "about-old"},
            {"title": "New", "slug": "about-new"},
            {"title": "Other", "slug": "other"},
        )

        urls = bulk.list_slug_prefix_urls("about-", "https://example.com/")

        assert [u.url for u in urls] == [
            "https://example.com/about-new",
            "https://example.com/about-old",
        ]
        assert urls[0].title == "New"


class TestInsertStates:
    """Test bulk state creation."""

    def test_creates_cleaned_names(self, bulk, db):
        result = bulk.insert_states(["Texas", " Texas ", "", "California"])

        assert result.created == 2
        assert [row["name"] for row in db.rows("states")] == ["Texas", "California"]

    def test_no_valid_names(self, bulk, db):
        with pytest.raises(ValidationError) as exc_info:
            bulk.insert_states(["", "   "])

        assert exc_info.value.message == "No valid state names provided"
        assert ("states", "insert") not in db.calls

    def test_batch_failure_raises(self, bulk, db):
        db.fail("states", "insert")

        with pytest.raises(StoreError) as exc_info:
            bulk.insert_states(["Texas"])

        assert exc_info.value.message == "Failed to create states"


class TestInsertCities:
    """Test bulk city creation."""

    def test_creates_cities_for_state(self, bulk, db):
        texas, = db.seed("states", {"name": "Texas"})

        result = bulk.insert_cities(texas["id"], ["Austin", "Dallas ", "Austin"])

        assert result.created == 2
        assert result.parent["name"] == "Texas"
        assert {row["state_id"] for row in db.rows("cities")} == {texas["id"]}

    def test_unknown_state(self, bulk, db):
        with pytest.raises(ValidationError) as exc_info:
            bulk.insert_cities("missing", ["Austin"])

        assert exc_info.value.message == "Invalid state ID provided"
        assert db.rows("cities") == []

    def test_missing_state_id(self, bulk):
        with pytest.raises(ValidationError):
            bulk.insert_cities("", ["Austin"])

    def test_no_valid_names(self, bulk, db):
        texas, = db.seed("states", {"name": "Texas"})

        with pytest.raises(ValidationError) as exc_info:
            bulk.insert_cities(texas["id"], [" "])

        assert exc_info.value.message == "No valid city names provided"


class TestListingFromImportRow:
    """Test mapping of imported rows onto listings."""

    def test_maps_export_headers(self):
        listing = listing_from_import_row(
            {
                "Business": " Bark Inn ",
                "Category": "",
                "Review Ra": "4.5",
                "Number o": "12",
                "Phone": "512-555-0100",
                "Featured": "yes",
            },
            "city-1",
        )

        assert listing == {
            "business": "Bark Inn",
            "category": "Business",
            "review_rating": 4.5,
            "number_of_reviews": 12,
            "address": "",
            "website": "",
            "phone": "512-555-0100",
            "email": "",
            "city_id": "city-1",
            "featured": True,
        }

    def test_accepts_column_names(self):
        listing = listing_from_import_row(
            {"business": "Paws", "website": "https://paws.example", "featured": False},
            "city-1",
        )

        assert listing["website"] == "https://paws.example"
        assert listing["featured"] is False

    def test_unparseable_numbers_become_zero(self):
        listing = listing_from_import_row(
            {"Business": "Paws", "Phone": "1", "Review Ra": "n/a", "Number o": None},
            "city-1",
        )

        assert listing["review_rating"] == 0.0
        assert listing["number_of_reviews"] == 0

    def test_only_explicit_true_values_feature(self):
        for value in ("no", "", None, "0"):
            listing = listing_from_import_row({"Business": "Paws", "Phone": "1", "Featured": value}, "c")
            assert listing["featured"] is False

    def test_rows_without_contact_or_name_are_dropped(self):
        assert listing_from_import_row({"Business": "Paws"}, "c") is None
        assert listing_from_import_row({"Phone": "512-555-0100"}, "c") is None


class TestInsertListings:
    """Test bulk listing import."""

    def test_imports_into_city(self, bulk, db):
        austin, = db.seed("cities", {"name": "Austin", "state_id": "s"})

        result = bulk.insert_listings(
            austin["id"],
            [
                {"Business": "Bark Inn", "Phone": "512-555-0100"},
                {"Business": "Canine Club", "Website": "https://canine.example"},
                {"Business": "No Contact"},
            ],
        )

        assert result.created == 2
        assert result.skipped == 1
        assert result.parent["name"] == "Austin"
        stored = db.rows("listings")
        assert sorted(row["business"] for row in stored) == ["Bark Inn", "Canine Club"]
        assert {row["city_id"] for row in stored} == {austin["id"]}

    def test_single_batch(self, bulk, db):
        austin, = db.seed("cities", {"name": "Austin", "state_id": "s"})

        bulk.insert_listings(austin["id"], [{"Business": str(i), "Phone": "1"} for i in range(5)])

        assert db.calls.count(("listings", "insert")) == 1

    def test_unknown_city(self, bulk, db):
        with pytest.raises(ValidationError) as exc_info:
            bulk.insert_listings("missing", [{"Business": "Paws", "Phone": "1"}])

        assert exc_info.value.message == "Invalid city ID provided"
        assert ("listings", "insert") not in db.calls

    def test_missing_city_id(self, bulk):
        with pytest.raises(ValidationError):
            bulk.insert_listings("", [{"Business": "Paws", "Phone": "1"}])

    def test_no_importable_rows(self, bulk, db):
        austin, = db.seed("cities", {"name": "Austin", "state_id": "s"})

        with pytest.raises(ValidationError) as exc_info:
            bulk.insert_listings(austin["id"], [{"Business": "Paws"}])

        assert exc_info.value.message == "No valid listings provided"
        assert exc_info.value.details == {"total": 1, "skipped": 1}

    def test_batch_failure_raises(self, bulk, db):
        austin, = db.seed("cities", {"name": "Austin", "state_id": "s"})
        db.fail("listings", "insert")

        with pytest.raises(StoreError) as exc_info:
            bulk.insert_listings(austin["id"], [{"Business": "Paws", "Phone": "1"}])

        assert exc_info.value.message == "Failed to import listings"
        assert db.rows("listings") == []
