import pytest

from autologin.core.exceptions import ConfigurationError
from autologin.main import app
from autologin.services.link_builder import StarletteLinkBuilder


class TestTo:
    """Test literal path resolution."""

    def test_relative_path_is_made_absolute(self, link_builder):
        assert link_builder.to("/dashboard") == "http://test/dashboard"
        assert link_builder.to("dashboard") == "http://test/dashboard"

    def test_extra_becomes_query_parameters(self, link_builder):
        assert link_builder.to("/settings", {"tab": "billing"}) == "http://test/settings?tab=billing"

    def test_existing_query_is_kept(self, link_builder):
        url = link_builder.to("/search?q=shoes", {"page": 2})
        assert url == "http://test/search?q=shoes&page=2"

    def test_secure_forces_scheme(self, link_builder):
        assert link_builder.to("/dashboard", secure=True) == "https://test/dashboard"
        assert link_builder.to("/dashboard", secure=False) == "http://test/dashboard"

    def test_absolute_url_is_kept(self, link_builder):
        assert link_builder.to("https://other.example.com/page") == "https://other.example.com/page"

    def test_base_path_prefix_is_kept(self):
        builder = StarletteLinkBuilder(app, "https://example.com/app/")
        assert builder.to("/dashboard") == "https://example.com/app/dashboard"


class TestRoute:
    """Test named route resolution."""

    def test_absolute_route(self, link_builder):
        assert link_builder.route("autologin", {"token": "abc123"}) == "http://test/autologin/abc123"

    def test_relative_route(self, link_builder):
        assert link_builder.route("autologin", {"token": "abc123"}, absolute=False) == "/autologin/abc123"

    def test_unknown_parameters_become_query(self, link_builder):
        url = link_builder.route("autologin", {"token": "abc", "next": "/billing", "tab": "x"})
        assert url == "http://test/autologin/abc?next=%2Fbilling&tab=x"

    def test_unknown_parameters_on_relative_route(self, link_builder):
        assert link_builder.route("autologin", {"token": "abc", "tab": "x"}, absolute=False) == "/autologin/abc?tab=x"

    def test_unknown_route_is_a_configuration_error(self, link_builder):
        with pytest.raises(ConfigurationError):
            link_builder.route("no-such-route")

    def test_missing_parameter_is_a_configuration_error(self, link_builder):
        with pytest.raises(ConfigurationError):
            link_builder.route("autologin")


class TestResolve:
    def test_literal_path(self, link_builder):
        assert link_builder.resolve("/welcome") == "http://test/welcome"

    def test_named_route(self, link_builder):
        assert link_builder.resolve(("autologin", {"token": "xyz"})) == "http://test/autologin/xyz"
