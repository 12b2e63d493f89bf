"""Tests for project management operations."""

import httpx
import pytest

from dogma_client.api_clients.base_client import (
    ConflictError,
    ResourceNotFoundError,
    ResponseDecodeError,
)

PROJECT_PAYLOAD = {
    "name": "foo",
    "creator": {"name": "admin", "email": "admin@example.com"},
    "url": "/api/v1/projects/foo",
    "createdAt": "2024-01-01T00:00:00Z",
}


class TestProjectsAPIClient:
    async def test_create_project(
        self, dogma_client, dogma_server, make_json_response, read_request_json
    ):
        dogma_server.enqueue(make_json_response(201, PROJECT_PAYLOAD))

        project = await dogma_client.create_project("foo")

        request = dogma_server.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/v1/projects"
        assert read_request_json(request) == {"name": "foo"}
        assert project.name == "foo"
        assert project.creator.email == "admin@example.com"
        assert project.created_at == "2024-01-01T00:00:00Z"

    async def test_create_existing_project(self, dogma_client, dogma_server, make_json_response):
        dogma_server.enqueue(make_json_response(409, {"message": "project foo exists"}))

        with pytest.raises(ConflictError) as exc_info:
            await dogma_client.create_project("foo")

        assert "project foo exists" in str(exc_info.value)

    async def test_remove_and_purge_project(self, dogma_client, dogma_server):
        dogma_server.enqueue(httpx.Response(204), httpx.Response(204))

        await dogma_client.remove_project("foo")
        await dogma_client.purge_project("foo")

        remove, purge = dogma_server.requests
        assert (remove.method, remove.url.path) == ("DELETE", "/api/v1/projects/foo")
        assert (purge.method, purge.url.path) == (
            "DELETE",
            "/api/v1/projects/foo/removed",
        )

    async def test_remove_missing_project(self, dogma_client, dogma_server):
        dogma_server.enqueue(httpx.Response(404))

        with pytest.raises(ResourceNotFoundError):
            await dogma_client.remove_project("missing")

    async def test_unremove_project(
        self, dogma_client, dogma_server, make_json_response, read_request_json
    ):
        dogma_server.enqueue(make_json_response(200, PROJECT_PAYLOAD))

        project = await dogma_client.unremove_project("foo")

        request = dogma_server.requests[0]
        assert request.method == "PATCH"
        assert request.headers["content-type"] == "application/json-patch+json"
        assert read_request_json(request) == [
            {"op": "replace", "path": "/status", "value": "active"}
        ]
        assert project.name == "foo"

    async def test_list_projects(self, dogma_client, dogma_server, make_json_response):
        dogma_server.enqueue(make_json_response(200, [PROJECT_PAYLOAD, {"name": "bar"}]))

        projects = await dogma_client.list_projects()

        assert [p.name for p in projects] == ["foo", "bar"]

    async def test_list_projects_empty(self, dogma_client, dogma_server):
        dogma_server.enqueue(httpx.Response(204))

        assert await dogma_client.list_projects() == []

    async def test_list_projects_rejects_object(self, dogma_client, dogma_server, make_json_response):
        dogma_server.enqueue(make_json_response(200, {"name": "foo"}))

        with pytest.raises(ResponseDecodeError):
            await dogma_client.list_projects()

    async def test_list_removed_projects(self, dogma_client, dogma_server, make_json_response):
        dogma_server.enqueue(make_json_response(200, [{"name": "old"}, {"name": "older"}]))

        names = await dogma_client.list_removed_projects()

        assert names == ["old", "older"]
        assert dogma_server.requests[0].url.params["status"] == "removed"

    async def test_invalid_project_payload(self, dogma_client, dogma_server, make_json_response):
        dogma_server.enqueue(make_json_response(201, {"url": "/api/v1/projects/foo"}))

        with pytest.raises(ResponseDecodeError):
            await dogma_client.create_project("foo")

    async def test_project_names_are_escaped(self, dogma_client, dogma_server):
        dogma_server.enqueue(httpx.Response(204))

        await dogma_client.remove_project("a/b")

        assert dogma_server.requests[0].url.raw_path == b"/api/v1/projects/a%2Fb"
