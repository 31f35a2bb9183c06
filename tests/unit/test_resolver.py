"""Unit tests for legacy URL resolution."""

import pytest

from src.routing.resolver import RouteAction, RouteDecision, RouteResolver


class TestRouteResolver:
    """Test the redirect rules."""

    @pytest.fixture
    def resolver(self):
        return RouteResolver("boarding-kennels")

    def test_niche_path_redirects_to_city(self, resolver):
        """/<niche>-<city> goes to /city/<city> with a permanent redirect."""
        decision = resolver.resolve("/boarding-kennels-newcastle")

        assert decision == RouteDecision.redirect("/city/newcastle")
        assert decision.status_code == 301

    @pytest.mark.parametrize(
        "path, city",
        [
            ("/boarding-kennels-new-york", "new-york"),
            ("/boarding-kennels-newcastle/", "newcastle"),
            ("/boarding-kennels-does-not-exist-anywhere", "does-not-exist-anywhere"),
        ],
    )
    def test_any_city_slug_is_redirected(self, resolver, path, city):
        """The redirect is structural: the city is never looked up."""
        assert resolver.resolve(path).location == f"/city/{city}"

    @pytest.mark.parametrize(
        "path",
        [
            "/boarding-kennels",
            "/boarding-kennels-",
            "/boarding-kennels-austin/reviews",
            "/city/boarding-kennels-austin",
            "/boarding-kennelsaustin",
        ],
    )
    def test_other_shapes_pass(self, resolver, path):
        """Only a single segment with a non-empty city part matches."""
        assert resolver.resolve(path).action is RouteAction.PASS

    def test_legacy_slug_query_redirects_home(self, resolver):
        decision = resolver.resolve("/articles", {"slug": "about-foo"})

        assert decision.is_redirect
        assert decision.location == "/"

    def test_regular_slug_query_passes(self, resolver):
        assert resolver.resolve("/articles", {"slug": "regular-article"}).action is RouteAction.PASS

    def test_missing_query_passes(self, resolver):
        assert resolver.resolve("/articles", {}).action is RouteAction.PASS
        assert resolver.resolve("/articles").action is RouteAction.PASS

    def test_niche_rule_wins_over_query_rule(self, resolver):
        """Rules are evaluated in order and the first match wins."""
        decision = resolver.resolve("/boarding-kennels-austin", {"slug": "about-foo"})

        assert decision.location == "/city/austin"

    @pytest.mark.parametrize(
        "path",
        [
            "/api/redirect-about-articles",
            "/admin",
            "/admin/boarding-kennels-austin",
            "/static/logo.png",
            "/_next/data.json",
            "/favicon.ico",
        ],
    )
    def test_excluded_prefixes_bypass_rules(self, resolver, path):
        """Admin, API and static paths are never redirected, even with a legacy query."""
        assert resolver.resolve(path, {"slug": "about-foo"}).action is RouteAction.PASS

    def test_exclusion_is_segment_aware(self, resolver):
        """/administrators is not under /admin."""
        assert not resolver.is_excluded("/administrators")
        assert resolver.resolve("/administrators", {"slug": "about-x"}).is_redirect

    def test_empty_path_passes(self, resolver):
        assert resolver.resolve("").action is RouteAction.PASS


class TestResolverConfiguration:
    """Test building the resolver from settings."""

    def test_from_settings(self, settings):
        settings.niche_prefix = "dog-groomers"
        resolver = RouteResolver.from_settings(settings)

        assert resolver.resolve("/dog-groomers-perth").location == "/city/perth"
        assert resolver.resolve("/boarding-kennels-perth").action is RouteAction.PASS

    def test_niche_prefix_is_matched_literally(self):
        """Regex metacharacters in the prefix have no special meaning."""
        resolver = RouteResolver("pet.care")

        assert resolver.resolve("/pet.care-austin").is_redirect
        assert not resolver.resolve("/petxcare-austin").is_redirect

    def test_custom_legacy_prefix(self):
        resolver = RouteResolver("boarding-kennels", legacy_prefix="old-")

        assert resolver.resolve("/", {"slug": "old-post"}).is_redirect
        assert not resolver.resolve("/", {"slug": "about-foo"}).is_redirect
