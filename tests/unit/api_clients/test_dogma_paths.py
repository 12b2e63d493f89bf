"""Tests for Dogma endpoint path building."""

import pytest

from dogma_client.api_clients import paths
from dogma_client.models import Query


class TestNormalizePathPattern:
    @pytest.mark.parametrize(
        "pattern, expected",
        [
            ("", "/**"),
            ("/**", "/**"),
            ("**", "/**"),
            ("**/*.json", "/**/*.json"),
            ("*.json", "/**/*.json"),
            ("a.json", "/**/a.json"),
            ("/foo/*.json", "/foo/*.json"),
        ],
    )
    def test_patterns(self, pattern, expected):
        assert paths.normalize_path_pattern(pattern) == expected


class TestEndpointPaths:
    def test_project_and_repo_paths(self):
        assert paths.projects_path() == "/api/v1/projects"
        assert paths.project_path("foo") == "/api/v1/projects/foo"
        assert paths.removed_project_path("foo") == "/api/v1/projects/foo/removed"
        assert paths.repos_path("foo") == "/api/v1/projects/foo/repos"
        assert paths.repo_path("foo", "bar") == "/api/v1/projects/foo/repos/bar"
        assert (
            paths.removed_repo_path("foo", "bar")
            == "/api/v1/projects/foo/repos/bar/removed"
        )

    def test_names_are_escaped(self):
        assert paths.repo_path("a b", "c/d") == "/api/v1/projects/a%20b/repos/c%2Fd"

    def test_list_and_contents_paths(self):
        assert paths.list_files_path("foo", "bar", "") == "/api/v1/projects/foo/repos/bar/list/**"
        assert paths.contents_path("foo", "bar") == "/api/v1/projects/foo/repos/bar/contents"
        assert (
            paths.contents_path("foo", "bar", "/a.json")
            == "/api/v1/projects/foo/repos/bar/contents/a.json"
        )


class TestQueryParams:
    def test_identity_query_has_no_params(self):
        assert paths.query_params(Query.of_json("/a.json")) == []

    def test_json_path_skips_blank_expressions(self):
        query = Query.of_json_path("/a.json", ["$.a", "", "$.b"])

        assert paths.query_params(query) == [("jsonpath", "$.a"), ("jsonpath", "$.b")]
