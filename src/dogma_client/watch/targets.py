"""Watch targets and the per-call watch request."""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from ..api_clients import paths
from ..models import Query, Revision, WatchFileResult, WatchRepoResult


class WatchDecodeError(ValueError):
    """Raised when a watch response does not describe a valid update."""

    pass


@dataclass(frozen=True)
class FileWatchTarget:
    """A single file, with the query type as a content-type hint."""

    project: str
    repo: str
    query: Query

    def watch_path(self) -> str:
        return paths.contents_path(self.project, self.repo, self.query.path)

    def watch_params(self) -> List[Tuple[str, str]]:
        return paths.query_params(self.query)

    def decode(self, data: Any) -> WatchFileResult:
        result = WatchFileResult.model_validate(data)
        expected = self.query.expected_entry_type
        if expected is not None and result.entry.type != expected:
            raise WatchDecodeError(
                f"Expected {expected.value} entry for {self.query.path}, "
                f"got {result.entry.type.value}"
            )
        return result

    def __str__(self) -> str:
        return f"{self.project}/{self.repo}{self.query.path}"


@dataclass(frozen=True)
class RepoWatchTarget:
    """A whole repository, narrowed to the files matched by a path pattern."""

    project: str
    repo: str
    path_pattern: str = "/**"

    def watch_path(self) -> str:
        return paths.contents_path(
            self.project, self.repo, paths.normalize_path_pattern(self.path_pattern)
        )

    def watch_params(self) -> List[Tuple[str, str]]:
        return []

    def decode(self, data: Any) -> WatchRepoResult:
        return WatchRepoResult.model_validate(data)

    def __str__(self) -> str:
        return (
            f"{self.project}/{self.repo}"
            f"{paths.normalize_path_pattern(self.path_pattern)}"
        )


WatchTarget = Union[FileWatchTarget, RepoWatchTarget]


@dataclass(frozen=True)
class WatchRequest:
    """One long-poll call: what to watch, what the caller has seen, how long to wait."""

    target: WatchTarget
    last_known_revision: Optional[Revision]
    timeout: float

    def headers(self) -> Dict[str, str]:
        revision = self.last_known_revision or Revision.HEAD
        wait_seconds = max(1, math.ceil(self.timeout))
        return {
            "If-None-Match": str(revision),
            "Prefer": f"wait={wait_seconds}",
        }
