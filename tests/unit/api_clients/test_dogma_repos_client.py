"""Tests for repository management within a project."""

import httpx
import pytest

from dogma_client.api_clients.base_client import AuthenticationError
from dogma_client.models import Revision

REPO_PAYLOAD = {
    "name": "bar",
    "creator": {"name": "admin", "email": "admin@example.com"},
    "headRevision": 3,
    "url": "/api/v1/projects/foo/repos/bar",
}


@pytest.fixture
def project(dogma_client):
    return dogma_client.project("foo")


class TestProjectClient:
    def test_shares_parent_client(self, dogma_client, project):
        assert project.api_client is dogma_client
        assert project.project == "foo"

    async def test_create_repo(
        self, project, dogma_server, make_json_response, read_request_json
    ):
        dogma_server.enqueue(make_json_response(201, REPO_PAYLOAD))

        repo = await project.create_repo("bar")

        request = dogma_server.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/v1/projects/foo/repos"
        assert read_request_json(request) == {"name": "bar"}
        assert repo.name == "bar"
        assert repo.head_revision == Revision(3)

    async def test_remove_purge_and_unremove_repo(
        self, project, dogma_server, make_json_response
    ):
        dogma_server.enqueue(
            httpx.Response(204),
            httpx.Response(204),
            make_json_response(200, REPO_PAYLOAD),
        )

        await project.remove_repo("bar")
        await project.purge_repo("baz")
        repo = await project.unremove_repo("bar")

        assert [(r.method, r.url.path) for r in dogma_server.requests] == [
            ("DELETE", "/api/v1/projects/foo/repos/bar"),
            ("DELETE", "/api/v1/projects/foo/repos/baz/removed"),
            ("PATCH", "/api/v1/projects/foo/repos/bar"),
        ]
        assert repo.name == "bar"

    async def test_list_repos(self, project, dogma_server, make_json_response):
        dogma_server.enqueue(
            make_json_response(200, [REPO_PAYLOAD, {"name": "meta", "headRevision": 1}])
        )

        repos = await project.list_repos()

        assert [(r.name, r.head_revision) for r in repos] == [
            ("bar", Revision(3)),
            ("meta", Revision.INIT),
        ]

    async def test_list_removed_repos(self, project, dogma_server, make_json_response):
        dogma_server.enqueue(make_json_response(200, [{"name": "gone"}]))

        assert await project.list_removed_repos() == ["gone"]
        assert dogma_server.requests[0].url.params["status"] == "removed"

    async def test_forbidden(self, project, dogma_server, make_json_response):
        dogma_server.enqueue(make_json_response(403, {"message": "not a member"}))

        with pytest.raises(AuthenticationError) as exc_info:
            await project.create_repo("bar")

        assert exc_info.value.status_code == 403
