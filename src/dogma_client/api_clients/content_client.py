"""
Content API Client for a single repository.

Lists, reads and pushes files. Path patterns are a variant of glob:

* ``"/**"`` - all files recursively
* ``"*.json"`` - all JSON files recursively
* ``"/foo/*.json"`` - JSON files directly under ``/foo``
* ``"*.json,/bar/*.txt"`` - a file matches if any pattern matches
"""

import logging
from typing import Any, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..models import (
    Change,
    CommitMessage,
    Entry,
    ListEntry,
    PushResult,
    Query,
    Revision,
)
from . import paths
from .base_client import DogmaAPIClient, InvalidParamsError, ResponseDecodeError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ContentClient:
    """File operations on one repository."""

    def __init__(self, api_client: DogmaAPIClient, project: str, repo: str):
        self.api_client = api_client
        self.project = project
        self.repo = repo

    async def list_files(
        self, path_pattern: str = "", revision: Revision = Revision.HEAD
    ) -> List[ListEntry]:
        """List the files matched by the path pattern at a revision, without content."""
        data = await self.api_client._request_json(
            "GET",
            paths.list_files_path(self.project, self.repo, path_pattern),
            "list files",
            params={"revision": str(revision)},
            allow_empty=True,
        )
        return _parse_list(ListEntry, data, "list files")

    async def get_file(self, query: Query, revision: Revision = Revision.HEAD) -> Entry:
        """Read one file at a revision, applying the query.

        Raises:
            ResourceNotFoundError: If the file does not exist at that revision
            ResponseDecodeError: If the entry does not match the query type
        """
        params = [("revision", str(revision))] + paths.query_params(query)
        data = await self.api_client._request_json(
            "GET",
            paths.contents_path(self.project, self.repo, query.path),
            "get file",
            params=params,
        )
        entry = _parse_model(Entry, data, "get file")

        expected = query.expected_entry_type
        if expected is not None and entry.type != expected:
            raise ResponseDecodeError(
                f"Failed to get file: expected {expected.value} entry for "
                f"{query.path}, got {entry.type.value}"
            )
        return entry

    async def get_files(
        self, path_pattern: str = "", revision: Revision = Revision.HEAD
    ) -> List[Entry]:
        """Read all files matched by the path pattern at a revision."""
        data = await self.api_client._request_json(
            "GET",
            paths.contents_path(
                self.project, self.repo, paths.normalize_path_pattern(path_pattern)
            ),
            "get files",
            params={"revision": str(revision)},
            allow_empty=True,
        )
        return _parse_list(Entry, data, "get files")

    async def push(
        self,
        commit_message: CommitMessage,
        changes: List[Change],
        base_revision: Revision = Revision.HEAD,
    ) -> PushResult:
        """Push changes on top of ``base_revision`` as a single commit.

        Raises:
            InvalidParamsError: If the summary is empty or there are no changes
            ConflictError: If the changes conflict with the repository state
        """
        if not commit_message.summary:
            raise InvalidParamsError("summary of commit_message cannot be empty")
        if not changes:
            raise InvalidParamsError("no changes to commit")

        body = {
            "commitMessage": commit_message.model_dump(
                mode="json", by_alias=True, exclude_none=True
            ),
            "changes": [
                change.model_dump(mode="json", by_alias=True, exclude_none=True)
                for change in changes
            ],
        }
        data = await self.api_client._request_json(
            "POST",
            paths.contents_path(self.project, self.repo),
            "push changes",
            json_body=body,
            params={"revision": str(base_revision)},
        )
        result = _parse_model(PushResult, data, "push changes")
        logger.info(
            f"Pushed {len(changes)} change(s) to {self.project}/{self.repo} "
            f"at revision {result.revision}"
        )
        return result


def _parse_model(model: Type[ModelT], data: Any, action: str) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ResponseDecodeError(f"Failed to {action}: unexpected payload: {e}")


def _parse_list(model: Type[ModelT], data: Any, action: str) -> List[ModelT]:
    if data is None:
        return []
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ResponseDecodeError(f"Failed to {action}: expected a JSON array")
    return [_parse_model(model, item, action) for item in data]
