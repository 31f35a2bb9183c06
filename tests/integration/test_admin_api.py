"""Integration tests for the admin maintenance endpoints."""

import pytest


class TestBulkRemoveUrls:
    """Test the legacy article sweep over HTTP."""

    def test_deletes_legacy_articles(self, client, admin_headers, seeded, fake_db):
        response = client.post("/api/admin/bulk-remove-urls", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "deleted": 2,
            "message": "Successfully deleted 2 about-* articles in bulk",
        }
        assert sorted(a["slug"] for a in fake_db.rows("articles")) == ["best-kennels", "draft-post"]

    def test_is_idempotent(self, client, admin_headers, seeded):
        client.post("/api/admin/bulk-remove-urls", headers=admin_headers)

        response = client.post("/api/admin/bulk-remove-urls", headers=admin_headers)

        assert response.json()["deleted"] == 0

    def test_store_failure_passes_detail(self, client, admin_headers, seeded, fake_db):
        fake_db.fail("articles", "delete")

        response = client.post("/api/admin/bulk-remove-urls", headers=admin_headers)

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to delete articles",
            "details": "permission denied for table articles",
        }


class TestDeleteAboutArticles:
    """Test the listing variant of the sweep."""

    def test_lists_deleted_articles(self, client, admin_headers, seeded):
        data = client.post("/api/admin/delete-about-articles", headers=admin_headers).json()

        assert data["deleted"] == 2
        assert set(data) == {"success", "deleted", "message", "articles"}
        assert sorted(a["slug"] for a in data["articles"]) == ["about-austin", "about-dallas"]
        assert data["message"] == "Successfully deleted 2 about-* articles"

    def test_nothing_to_delete(self, client, admin_headers):
        data = client.post("/api/admin/delete-about-articles", headers=admin_headers).json()

        assert data["deleted"] == 0
        assert data["message"] == "No about-* articles found to delete"


class TestGetAboutUrls:
    """Test the removal URL listing."""

    def test_lists_absolute_urls(self, client, admin_headers, seeded):
        data = client.get("/api/admin/get-about-urls", headers=admin_headers).json()

        assert data["count"] == 2
        assert [u["url"] for u in data["urls"]] == [
            "https://www.dogboardingkennels.us/about-dallas",
            "https://www.dogboardingkennels.us/about-austin",
        ]
        assert data["message"] == "Found 2 about-* URLs to remove from Google index"

    def test_is_read_only(self, client, admin_headers, seeded, fake_db):
        client.get("/api/admin/get-about-urls", headers=admin_headers)

        assert len(fake_db.rows("articles")) == 4

    def test_empty(self, client, admin_headers):
        data = client.get("/api/admin/get-about-urls", headers=admin_headers).json()

        assert data["count"] == 0
        assert data["message"] == "No about-* articles found"


class TestSlugPrefixCount:
    """Test the preview endpoint."""

    def test_default_prefix(self, client, admin_headers, seeded):
        data = client.get("/api/admin/slug-prefix-count", headers=admin_headers).json()

        assert data["entity"] == "articles"
        assert data["prefix"] == "about-"
        assert data["count"] == 2

    def test_custom_prefix(self, client, admin_headers, seeded):
        data = client.get(
            "/api/admin/slug-prefix-count?prefix=best-&sample_size=0", headers=admin_headers
        ).json()

        assert data["count"] == 1
        assert data["sample"] == []

    def test_entity_without_slugs(self, client, admin_headers):
        response = client.get("/api/admin/slug-prefix-count?entity=cities", headers=admin_headers)

        assert response.status_code == 400


class TestOrphans:
    """Test orphan scan and repair."""

    @pytest.fixture
    def orphaned(self, fake_db, seeded):
        fake_db.seed("cities", {"name": "Ghost Town", "state_id": "deleted-state"})
        return seeded

    def test_scan_reports_without_changing(self, client, admin_headers, orphaned, fake_db):
        response = client.get("/api/admin/orphans/cities", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["checked"] == 3
        assert data["orphan_count"] == 1
        assert data["orphans"][0]["name"] == "Ghost Town"
        assert data["repaired"] == 0
        assert len(fake_db.rows("cities")) == 3

    def test_repair(self, client, admin_headers, orphaned, fake_db):
        data = client.post("/api/admin/orphans/cities", headers=admin_headers).json()

        assert data["repaired"] == 1
        assert sorted(c["name"] for c in fake_db.rows("cities")) == ["Austin", "Dallas"]

    def test_unknown_entity(self, client, admin_headers):
        response = client.get("/api/admin/orphans/owners", headers=admin_headers)

        assert response.status_code == 400

    def test_states_have_no_parent(self, client, admin_headers):
        response = client.get("/api/admin/orphans/states", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "states has no parent reference"

    def test_requires_admin(self, client):
        assert client.get("/api/admin/orphans/cities").status_code == 401


class TestColumnProbe:
    """Test the schema probe."""

    def test_present(self, client, admin_headers):
        data = client.get("/api/admin/schema/articles/columns/city_id", headers=admin_headers).json()

        assert data == {"entity": "articles", "column": "city_id", "present": True}

    def test_absent(self, client, admin_headers):
        data = client.get("/api/admin/schema/articles/columns/region_id", headers=admin_headers).json()

        assert data["present"] is False

    def test_rejects_non_identifiers(self, client, admin_headers, fake_db):
        response = client.get("/api/admin/schema/articles/columns/id,slug", headers=admin_headers)

        assert response.status_code == 400
        assert fake_db.calls == []


class TestDuplicateListings:
    """Test duplicate listing preview and removal."""

    @pytest.fixture
    def duplicated(self, fake_db, seeded):
        austin = seeded["austin"]["id"]
        fake_db.seed(
            "listings",
            {"business": "Paws Place", "category": "Boarding", "city_id": austin,
             "address": "1 Main St", "phone": "512-555-0100"},
            {"business": "Paws Place.", "category": "Boarding", "city_id": austin,
             "address": "1 Main St, Austin, TX", "phone": None},
        )
        return seeded

    def test_preview(self, client, admin_headers, duplicated, fake_db):
        response = client.get(
            f"/api/admin/listings/duplicates?city_id={duplicated['austin']['id']}",
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["checked"] == 5
        assert data["duplicate_groups"] == 1
        assert data["duplicates"] == 1
        assert data["removed"] == 0
        assert data["groups"][0]["original"]["business"] == "Paws Place"
        assert data["groups"][0]["duplicates"][0]["business"] == "Paws Place."
        assert data["message"] == "Found 1 duplicate listings in 1 groups"
        assert len(fake_db.rows("listings")) == 5

    def test_remove_keeps_original(self, client, admin_headers, duplicated, fake_db):
        data = client.post("/api/admin/listings/duplicates", headers=admin_headers).json()

        assert data["removed"] == 1
        assert data["message"] == "Successfully removed 1 duplicate listings"
        names = [row["business"] for row in fake_db.rows("listings")]
        assert "Paws Place" in names
        assert "Paws Place." not in names

    def test_empty_scope(self, client, admin_headers, duplicated):
        data = client.get(
            f"/api/admin/listings/duplicates?city_id={duplicated['dallas']['id']}",
            headers=admin_headers,
        ).json()

        assert data["checked"] == 0
        assert data["message"] == "No listings found in the specified scope"

    def test_state_scope(self, client, admin_headers, duplicated):
        data = client.get(
            f"/api/admin/listings/duplicates?state_id={duplicated['state']['id']}",
            headers=admin_headers,
        ).json()

        assert data["checked"] == 5
        assert data["duplicates"] == 1

    def test_refuses_mass_removal(self, client, admin_headers, fake_db, seeded):
        dallas = seeded["dallas"]["id"]
        fake_db.seed("listings", *[
            {"business": "Bark Inn", "category": "Boarding", "city_id": dallas, "address": "9 Elm Ave"}
            for _ in range(3)
        ])

        response = client.post(
            f"/api/admin/listings/duplicates?city_id={dallas}", headers=admin_headers
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Refusing to remove 2 of 3 listings; at most 1 can be removed at once"
        assert body["details"] == {"would_remove": 2, "max_allowed": 1, "checked": 3}
        assert len(fake_db.rows("listings")) == 6

    def test_requires_admin(self, client, fake_db):
        assert client.post("/api/admin/listings/duplicates").status_code == 401
        assert ("listings", "delete") not in fake_db.calls
