"""Endpoint paths of the Dogma HTTP API."""

from typing import List, Tuple
from urllib.parse import quote

from ..models import Query, QueryType

PATH_PREFIX = "/api/v1"


def _segment(name: str) -> str:
    return quote(name, safe="")


def normalize_path_pattern(path_pattern: str) -> str:
    """Turn a user path pattern into the absolute form the server expects.

    ``""`` matches everything, ``"**..."`` and relative patterns match at any
    depth:

    >>> normalize_path_pattern("*.json")
    '/**/*.json'
    """
    if not path_pattern:
        return "/**"
    if path_pattern.startswith("**"):
        return f"/{path_pattern}"
    if not path_pattern.startswith("/"):
        return f"/**/{path_pattern}"
    return path_pattern


def projects_path() -> str:
    return f"{PATH_PREFIX}/projects"


def project_path(project_name: str) -> str:
    return f"{projects_path()}/{_segment(project_name)}"


def removed_project_path(project_name: str) -> str:
    return f"{project_path(project_name)}/removed"


def repos_path(project_name: str) -> str:
    return f"{project_path(project_name)}/repos"


def repo_path(project_name: str, repo_name: str) -> str:
    return f"{repos_path(project_name)}/{_segment(repo_name)}"


def removed_repo_path(project_name: str, repo_name: str) -> str:
    return f"{repo_path(project_name, repo_name)}/removed"


def list_files_path(project_name: str, repo_name: str, path_pattern: str) -> str:
    pattern = normalize_path_pattern(path_pattern)
    return f"{repo_path(project_name, repo_name)}/list{pattern}"


def contents_path(project_name: str, repo_name: str, path: str = "") -> str:
    """Path of the contents endpoint, optionally followed by a file path or pattern."""
    return f"{repo_path(project_name, repo_name)}/contents{path}"


def query_params(query: Query) -> List[Tuple[str, str]]:
    """Query-string parameters carried by a file query."""
    if query.type != QueryType.JSON_PATH:
        return []
    return [("jsonpath", expression) for expression in query.expressions if expression]
