"""Tests for host-group routing."""

import pytest

from cortexops.composer.router import DEFAULT_HOST_GROUP, ROLE_HOST_GROUPS, route_for


class TestRouteFor:
    """Test route_for."""

    @pytest.mark.parametrize(
        "role_id,group",
        [
            ("web", "webservers"),
            ("nginx", "webservers"),
            ("db", "databases"),
            ("postgres", "databases"),
            ("monitoring", "monitoring"),
            ("prometheus", "monitoring"),
            ("vault", "monitoring"),
            ("security", "all"),
            ("backup", "all"),
            ("kubernetes", "localhost"),
            ("cicd", "localhost"),
        ],
    )
    def test_table(self, role_id, group):
        assert route_for(role_id) == group

    @pytest.mark.parametrize("role_id", ["mainframe", "", "WEB", "web "])
    def test_unrouted_ids_default_to_all(self, role_id):
        """Test that routing is total, unknown ids included."""
        assert role_id not in ROLE_HOST_GROUPS
        assert route_for(role_id) == DEFAULT_HOST_GROUP == "all"

    def test_custom_roles_route_like_their_name(self):
        assert route_for("custom:web") == "webservers"
        assert route_for("custom:redis") == "all"
