"""
Repository operations scoped to a single project.
"""

import logging
from typing import List

from pydantic import ValidationError

from ..models import Repository
from . import paths
from .base_client import DogmaAPIClient, ResponseDecodeError
from .projects_client import UNREMOVE_PATCH, parse_names

logger = logging.getLogger(__name__)


class ProjectClient:
    """Repository management for one project.

    Shares the HTTP session of the client that created it.
    """

    def __init__(self, api_client: DogmaAPIClient, project: str):
        self.api_client = api_client
        self.project = project

    async def create_repo(self, repo_name: str) -> Repository:
        data = await self.api_client._request_json(
            "POST",
            paths.repos_path(self.project),
            "create repository",
            json_body={"name": repo_name},
        )
        logger.info(f"Created repository {self.project}/{repo_name}")
        return _parse_repository(data)

    async def remove_repo(self, repo_name: str) -> None:
        """Remove a repository. A removed repository can be unremoved or purged."""
        await self.api_client._request_json(
            "DELETE",
            paths.repo_path(self.project, repo_name),
            "remove repository",
            allow_empty=True,
        )

    async def purge_repo(self, repo_name: str) -> None:
        await self.api_client._request_json(
            "DELETE",
            paths.removed_repo_path(self.project, repo_name),
            "purge repository",
            allow_empty=True,
        )

    async def unremove_repo(self, repo_name: str) -> Repository:
        data = await self.api_client._request_json(
            "PATCH",
            paths.repo_path(self.project, repo_name),
            "unremove repository",
            json_body=UNREMOVE_PATCH,
        )
        return _parse_repository(data)

    async def list_repos(self) -> List[Repository]:
        data = await self.api_client._request_json(
            "GET", paths.repos_path(self.project), "list repositories", allow_empty=True
        )
        if data is None:
            return []
        if not isinstance(data, list):
            raise ResponseDecodeError(
                "Failed to list repositories: expected a JSON array"
            )
        return [_parse_repository(item) for item in data]

    async def list_removed_repos(self) -> List[str]:
        data = await self.api_client._request_json(
            "GET",
            paths.repos_path(self.project),
            "list removed repositories",
            params={"status": "removed"},
            allow_empty=True,
        )
        return parse_names(data, "list removed repositories")


def _parse_repository(data) -> Repository:
    try:
        return Repository.model_validate(data)
    except ValidationError as e:
        raise ResponseDecodeError(f"Invalid repository payload: {e}")
