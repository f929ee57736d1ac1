"""Issue nodes of GraphQL responses."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ghinsight.comment_types import CommentsConnection
from ghinsight.nodes import Author, LabelNode, MilestoneNode, Repository
from ghinsight.timeline_types import LinkedResource, TimelineItemsConnection

TextExtractor = Callable[[str], Iterable[LinkedResource]]


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"Expected {what} object, got {type(data).__name__}")
    return data


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"Issue field {key!r} must be a string")
    return value


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"Issue field {key!r} must be a string or null")
    return value


def _require_int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Issue field {key!r} must be an integer")
    return value


def _optional_bool(data: Mapping[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is not None and not isinstance(value, bool):
        raise ValueError(f"Issue field {key!r} must be a boolean or null")
    return value


def _parse_datetime(value: Any, key: str) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"Issue field {key!r} must be a timestamp string")
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid timestamp in {key!r}: {value!r}") from exc
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp in {key!r} has no UTC offset: {value!r}")
    return parsed.astimezone(timezone.utc)


def _optional_datetime(data: Mapping[str, Any], key: str) -> datetime | None:
    value = data.get(key)
    return None if value is None else _parse_datetime(value, key)


def _connection_nodes(data: Mapping[str, Any], key: str, parse: Callable[[Any], Any]) -> list:
    connection = data.get(key)
    if connection is None:
        return []
    connection = _require_mapping(connection, f"a {key} connection")
    nodes = connection.get("nodes")
    if not isinstance(nodes, list):
        raise ValueError(f"Connection {key!r} field 'nodes' must be a list")
    return [parse(node) for node in nodes]


def _parse_milestone(data: Mapping[str, Any]) -> MilestoneNode | None:
    raw = data.get("milestone")
    if raw is None:
        return None
    raw = _require_mapping(raw, "a milestone")
    number = raw.get("number")
    if isinstance(number, bool) or not isinstance(number, int):
        raise ValueError("Milestone field 'number' must be an integer")
    return MilestoneNode(number=number)


@dataclass(frozen=True)
class IssueNode:
    """An issue as returned by the GraphQL API."""

    number: int
    title: str
    state: str
    created_at: datetime
    updated_at: datetime
    url: str
    comments: CommentsConnection
    repository: Repository
    body: str | None = None
    closed_at: datetime | None = None
    labels: list[LabelNode] = field(default_factory=list)
    assignees: list[Author] = field(default_factory=list)
    author: Author | None = None
    milestone: MilestoneNode | None = None
    locked: bool = False
    timeline_items: TimelineItemsConnection | None = None

    @classmethod
    def from_dict(cls, data: Any) -> IssueNode:
        """Parse an issue node; a missing ``locked`` flag counts as unlocked."""
        data = _require_mapping(data, "an issue")
        raw_author = data.get("author")
        raw_timeline = data.get("timelineItems")
        return cls(
            number=_require_int(data, "number"),
            title=_require_str(data, "title"),
            state=_require_str(data, "state"),
            created_at=_parse_datetime(data.get("createdAt"), "createdAt"),
            updated_at=_parse_datetime(data.get("updatedAt"), "updatedAt"),
            url=_require_str(data, "url"),
            comments=CommentsConnection.from_dict(data.get("comments")),
            repository=Repository.from_dict(data.get("repository")),
            body=_optional_str(data, "body"),
            closed_at=_optional_datetime(data, "closedAt"),
            labels=_connection_nodes(data, "labels", LabelNode.from_dict),
            assignees=_connection_nodes(data, "assignees", Author.from_dict),
            author=None if raw_author is None else Author.from_dict(raw_author),
            milestone=_parse_milestone(data),
            locked=bool(_optional_bool(data, "locked")),
            timeline_items=(
                None if raw_timeline is None else TimelineItemsConnection.from_dict(raw_timeline)
            ),
        )

    def linked_resources(self, extract_from_text: TextExtractor | None = None) -> list[LinkedResource]:
        """Return linked resources from the timeline, then new ones found in the text.

        ``extract_from_text`` finds references in the body and comment bodies;
        without it only timeline events are used.
        """
        resources = [] if self.timeline_items is None else self.timeline_items.linked_resources()
        if extract_from_text is None:
            return resources
        texts = [] if self.body is None else [self.body]
        texts.extend(comment.body for comment in self.comments.nodes)
        for text in texts:
            for resource in extract_from_text(text):
                if resource not in resources:
                    resources.append(resource)
        return resources


def parse_multiple_issues(data: Any) -> dict[str, IssueNode | None]:
    """Parse the aliased issues of a multiple-issue query, keyed by alias.

    Aliases whose issue is missing or inaccessible map to None.
    """
    data = _require_mapping(data, "a multiple issues response")
    repository = _require_mapping(data.get("repository"), "a repository")
    return {
        str(key): None if value is None else IssueNode.from_dict(value)
        for key, value in repository.items()
    }