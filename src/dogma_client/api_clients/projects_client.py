"""
Projects API Client for the Dogma server.

Provides project creation, removal, restoration and listing.
"""

import logging
from typing import List

from pydantic import ValidationError

from ..models import Project
from . import paths
from .base_client import DogmaAPIClient, ResponseDecodeError

logger = logging.getLogger(__name__)

UNREMOVE_PATCH = [{"op": "replace", "path": "/status", "value": "active"}]


class ProjectsAPIClient(DogmaAPIClient):
    """Client for project management operations."""

    async def create_project(self, name: str) -> Project:
        """Create a project.

        Raises:
            ConflictError: If a project with the same name exists
            APIClientError: If the server rejects the request
        """
        data = await self._request_json(
            "POST", paths.projects_path(), "create project", json_body={"name": name}
        )
        logger.info(f"Created project {name}")
        return _parse_project(data)

    async def remove_project(self, name: str) -> None:
        """Remove a project. A removed project can be unremoved or purged."""
        await self._request_json(
            "DELETE", paths.project_path(name), "remove project", allow_empty=True
        )

    async def purge_project(self, name: str) -> None:
        """Permanently delete a project that was removed before."""
        await self._request_json(
            "DELETE",
            paths.removed_project_path(name),
            "purge project",
            allow_empty=True,
        )

    async def unremove_project(self, name: str) -> Project:
        data = await self._request_json(
            "PATCH",
            paths.project_path(name),
            "unremove project",
            json_body=UNREMOVE_PATCH,
        )
        return _parse_project(data)

    async def list_projects(self) -> List[Project]:
        data = await self._request_json(
            "GET", paths.projects_path(), "list projects", allow_empty=True
        )
        if data is None:
            return []
        if not isinstance(data, list):
            raise ResponseDecodeError("Failed to list projects: expected a JSON array")
        return [_parse_project(item) for item in data]

    async def list_removed_projects(self) -> List[str]:
        """List names of removed projects, which can be unremoved or purged."""
        data = await self._request_json(
            "GET",
            paths.projects_path(),
            "list removed projects",
            params={"status": "removed"},
            allow_empty=True,
        )
        return parse_names(data, "list removed projects")


def _parse_project(data) -> Project:
    try:
        return Project.model_validate(data)
    except ValidationError as e:
        raise ResponseDecodeError(f"Invalid project payload: {e}")


def parse_names(data, action: str) -> List[str]:
    if data is None:
        return []
    try:
        return [str(item["name"]) for item in data]
    except (TypeError, KeyError) as e:
        raise ResponseDecodeError(f"Failed to {action}: unexpected payload: {e}")
