"""
Data models for the Dogma server API.

Response payloads are Pydantic models with the server's camelCase field names
as aliases. Values built on the client side (revisions, queries) are plain
immutable objects.
"""

import functools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler, model_validator
from pydantic_core import core_schema


@functools.total_ordering
class Revision:
    """A revision number of a commit.

    Absolute revisions start at 1 for the initial commit and grow by one per
    commit. Negative numbers are relative to the latest commit: -1 is HEAD,
    -2 the commit before it, and so on. Zero is not a valid revision.
    """

    __slots__ = ("_number",)

    HEAD: "Revision"
    INIT: "Revision"

    def __init__(self, number: int):
        if isinstance(number, bool) or not isinstance(number, int):
            raise TypeError(f"Revision number must be an int, got {type(number)!r}")
        if number == 0:
            raise ValueError("Revision number must not be 0")
        self._number = number

    @property
    def number(self) -> int:
        return self._number

    @property
    def is_relative(self) -> bool:
        return self._number < 0

    @property
    def is_head(self) -> bool:
        return self._number == -1

    @classmethod
    def parse(cls, value: Union["Revision", int, str]) -> "Revision":
        """Build a revision from an int, a numeric string or ``"HEAD"``."""
        if isinstance(value, Revision):
            return value
        if isinstance(value, str):
            text = value.strip()
            if text.upper() == "HEAD":
                return cls.HEAD
            try:
                return cls(int(text))
            except ValueError:
                raise ValueError(f"Invalid revision: {value!r}")
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Invalid revision: {value!r}")
        return cls(value)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls.parse,
            serialization=core_schema.plain_serializer_function_ser_schema(int),
        )

    def __int__(self) -> int:
        return self._number

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Revision):
            return self._number == other._number
        return NotImplemented

    def __lt__(self, other: "Revision") -> bool:
        if isinstance(other, Revision):
            return self._number < other._number
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._number)

    def __str__(self) -> str:
        return str(self._number)

    def __repr__(self) -> str:
        if self.is_head:
            return "Revision.HEAD"
        return f"Revision({self._number})"


Revision.HEAD = Revision(-1)
Revision.INIT = Revision(1)


class _ApiModel(BaseModel):
    """Base for server payloads; accepts both alias and field names."""

    model_config = ConfigDict(populate_by_name=True)


class Author(_ApiModel):
    """Creator of a project, repository or commit."""

    name: str = Field(..., description="Name of the author")
    email: str = Field(..., description="Email of the author")


class Project(_ApiModel):
    """A top-level element of the storage model."""

    name: str = Field(..., description="Project name")
    creator: Optional[Author] = Field(None, description="Author who created the project")
    url: Optional[str] = Field(None, description="URL of the project")
    created_at: Optional[str] = Field(None, alias="createdAt")


class Repository(_ApiModel):
    """Repository information."""

    name: str = Field(..., description="Repository name")
    creator: Optional[Author] = Field(None, description="Author who created the repository")
    head_revision: Optional[Revision] = Field(None, alias="headRevision")
    url: Optional[str] = Field(None, description="URL of the repository")
    created_at: Optional[str] = Field(None, alias="createdAt")


class EntryType(str, Enum):
    """Type of a file or directory in a repository."""

    JSON = "JSON"
    TEXT = "TEXT"
    DIRECTORY = "DIRECTORY"


class Entry(_ApiModel):
    """A file or a directory in a repository."""

    path: str = Field(..., description="Path of the entry")
    type: EntryType = Field(..., description="Type of the entry")
    content: Any = Field(None, description="JSON value, text, or nothing for directories")
    revision: Optional[Revision] = Field(None, description="Revision of the entry")
    url: Optional[str] = Field(None, description="URL of the entry")
    modified_at: Optional[str] = Field(None, alias="modifiedAt")

    @model_validator(mode="after")
    def check_content_matches_type(self) -> "Entry":
        if self.type == EntryType.TEXT and not isinstance(self.content, str):
            raise ValueError(f"TEXT entry {self.path} must have string content")
        if self.type == EntryType.DIRECTORY and self.content is not None:
            raise ValueError(f"DIRECTORY entry {self.path} must not have content")
        return self


class ListEntry(_ApiModel):
    """Metadata of a file or directory, without its content."""

    path: str
    type: EntryType


class QueryType(str, Enum):
    IDENTITY = "IDENTITY"
    IDENTITY_JSON = "IDENTITY_JSON"
    IDENTITY_TEXT = "IDENTITY_TEXT"
    JSON_PATH = "JSON_PATH"


def _normalize_path(path: str) -> str:
    return path if path.startswith("/") else f"/{path}"


@dataclass(frozen=True)
class Query:
    """A query on a single file.

    The query type doubles as a hint for decoding: JSON queries expect a JSON
    entry and text queries a TEXT entry.
    """

    path: str
    type: QueryType = QueryType.IDENTITY
    expressions: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def identity(cls, path: str) -> "Query":
        """Retrieve the content as it is."""
        if not path:
            raise ValueError("Query path must not be empty")
        return cls(_normalize_path(path), QueryType.IDENTITY)

    @classmethod
    def of_text(cls, path: str) -> "Query":
        if not path:
            raise ValueError("Query path must not be empty")
        return cls(_normalize_path(path), QueryType.IDENTITY_TEXT)

    @classmethod
    def of_json(cls, path: str) -> "Query":
        if not path:
            raise ValueError("Query path must not be empty")
        return cls(_normalize_path(path), QueryType.IDENTITY_JSON)

    @classmethod
    def of_json_path(cls, path: str, expressions: List[str]) -> "Query":
        """Apply a series of JSON path expressions to a JSON file."""
        if not path.lower().endswith("json"):
            raise ValueError(f"JSON path queries require a .json file: {path!r}")
        return cls(_normalize_path(path), QueryType.JSON_PATH, tuple(expressions))

    @property
    def expected_entry_type(self) -> Optional[EntryType]:
        if self.type in (QueryType.IDENTITY_JSON, QueryType.JSON_PATH):
            return EntryType.JSON
        if self.type == QueryType.IDENTITY_TEXT:
            return EntryType.TEXT
        return None


class Markup(str, Enum):
    PLAINTEXT = "PLAINTEXT"
    MARKDOWN = "MARKDOWN"


class CommitMessage(_ApiModel):
    """Description of a commit."""

    summary: str = Field(..., description="One-line summary")
    detail: Optional[str] = Field(None, description="Detailed description")
    markup: Optional[Markup] = Field(None, description="Markup of the detail")

    @classmethod
    def only_summary(cls, summary: str) -> "CommitMessage":
        return cls(summary=summary)


class ChangeType(str, Enum):
    UPSERT_JSON = "UPSERT_JSON"
    UPSERT_TEXT = "UPSERT_TEXT"
    REMOVE = "REMOVE"
    RENAME = "RENAME"
    APPLY_JSON_PATCH = "APPLY_JSON_PATCH"
    APPLY_TEXT_PATCH = "APPLY_TEXT_PATCH"


class Change(_ApiModel):
    """A modification of an individual file."""

    path: str
    type: ChangeType
    content: Any = None

    @classmethod
    def upsert_json(cls, path: str, content: Any) -> "Change":
        return cls(path=path, type=ChangeType.UPSERT_JSON, content=content)

    @classmethod
    def upsert_text(cls, path: str, content: str) -> "Change":
        return cls(path=path, type=ChangeType.UPSERT_TEXT, content=content)

    @classmethod
    def remove(cls, path: str) -> "Change":
        return cls(path=path, type=ChangeType.REMOVE)

    @classmethod
    def rename(cls, path: str, new_path: str) -> "Change":
        return cls(path=path, type=ChangeType.RENAME, content=new_path)

    @classmethod
    def apply_json_patch(cls, path: str, patch: Any) -> "Change":
        """Apply an RFC 6902 JSON patch."""
        return cls(path=path, type=ChangeType.APPLY_JSON_PATCH, content=patch)

    @classmethod
    def apply_text_patch(cls, path: str, patch: str) -> "Change":
        """Apply a unified-format text patch."""
        return cls(path=path, type=ChangeType.APPLY_TEXT_PATCH, content=patch)


class PushResult(_ApiModel):
    """Result of a push operation."""

    revision: Revision
    pushed_at: Optional[str] = Field(None, alias="pushedAt")


class WatchFileResult(_ApiModel):
    """A change notification for a watched file."""

    revision: Revision
    entry: Entry


class WatchRepoResult(_ApiModel):
    """A change notification for a watched repository."""

    revision: Revision
    paths: List[str] = Field(
        default_factory=list, description="Changed paths, when the server reports them"
    )


WatchUpdate = Union[WatchFileResult, WatchRepoResult]
