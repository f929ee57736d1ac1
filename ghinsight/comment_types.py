"""Comment nodes of issues and pull requests."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ghinsight.nodes import Author, PageInfo

_COMMENT_ID_MARKER = "issuecomment-"
_UNSIGNED_PATTERN = re.compile(r"\+?[0-9]+")
_MAX_COMMENT_NUMBER = 2**64 - 1


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"Expected {what} object, got {type(data).__name__}")
    return data


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"Comment field {key!r} must be a string")
    return value


def _parse_datetime(value: Any) -> datetime:
    if not isinstance(value, str):
        raise ValueError("Timestamp must be a string")
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp has no UTC offset: {value!r}")
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class CommentNode:
    """A comment on an issue or pull request."""

    id: str
    body: str
    created_at: datetime
    updated_at: datetime
    author: Author | None = None
    url: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> CommentNode:
        """Parse a comment node."""
        data = _require_mapping(data, "a comment")
        raw_author = data.get("author")
        url = data.get("url")
        if url is not None and not isinstance(url, str):
            raise ValueError("Comment field 'url' must be a string or null")
        return cls(
            id=_require_str(data, "id"),
            body=_require_str(data, "body"),
            created_at=_parse_datetime(data.get("createdAt")),
            updated_at=_parse_datetime(data.get("updatedAt")),
            author=None if raw_author is None else Author.from_dict(raw_author),
            url=url,
        )

    def comment_number(self) -> int:
        """Return the numeric comment id taken from the ``issuecomment-`` URL suffix."""
        if self.url is None:
            raise ValueError("Comment URL is required but missing")
        id_text = self.url.split(_COMMENT_ID_MARKER)[-1]
        if not _UNSIGNED_PATTERN.fullmatch(id_text):
            raise ValueError(f"Failed to parse comment ID from URL: {self.url}")
        number = int(id_text)
        if number > _MAX_COMMENT_NUMBER:
            raise ValueError(f"Failed to parse comment ID from URL: {self.url}")
        return number


@dataclass(frozen=True)
class CommentsConnection:
    """A page of comments with the total comment count."""

    nodes: list[CommentNode] = field(default_factory=list)
    total_count: int = 0
    page_info: PageInfo | None = None

    @classmethod
    def from_dict(cls, data: Any) -> CommentsConnection:
        """Parse a ``comments`` connection."""
        data = _require_mapping(data, "a comments connection")
        raw_nodes = data.get("nodes")
        if not isinstance(raw_nodes, list):
            raise ValueError("Comments connection field 'nodes' must be a list")
        total = data.get("totalCount")
        if isinstance(total, bool) or not isinstance(total, int):
            raise ValueError("Comments connection field 'totalCount' must be an integer")
        raw_page_info = data.get("pageInfo")
        return cls(
            nodes=[CommentNode.from_dict(node) for node in raw_nodes],
            total_count=total,
            page_info=None if raw_page_info is None else PageInfo.from_dict(raw_page_info),
        )