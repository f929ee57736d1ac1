"""Pull request nodes of GraphQL responses."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ghinsight.comment_types import CommentsConnection
from ghinsight.nodes import Author, LabelNode, MilestoneNode
from ghinsight.timeline_types import LinkedResource, TimelineItemsConnection

MERGEABLE_VALUE = "MERGEABLE"
CONFLICTING_VALUE = "CONFLICTING"

TextExtractor = Callable[[str], Iterable[LinkedResource]]


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"Expected {what} object, got {type(data).__name__}")
    return data


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"Field {key!r} must be a string")
    return value


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"Field {key!r} must be a string or null")
    return value


def _require_int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Field {key!r} must be an integer")
    return value


def _optional_int(data: Mapping[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Field {key!r} must be an integer or null")
    return value


def _require_bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if not isinstance(value, bool):
        raise ValueError(f"Field {key!r} must be a boolean")
    return value


def _optional_bool(data: Mapping[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is not None and not isinstance(value, bool):
        raise ValueError(f"Field {key!r} must be a boolean or null")
    return value


def _parse_datetime(value: Any, key: str) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"Field {key!r} must be a timestamp string")
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


def _optional_author(data: Mapping[str, Any]) -> Author | None:
    raw = data.get("author")
    return None if raw is None else Author.from_dict(raw)


def _nodes(connection: Any, what: str) -> list[Any]:
    connection = _require_mapping(connection, what)
    nodes = connection.get("nodes")
    if not isinstance(nodes, list):
        raise ValueError(f"Field 'nodes' of {what} must be a list")
    return nodes


def _connection_nodes(data: Mapping[str, Any], key: str, parse: Callable[[Any], Any]) -> list:
    connection = data.get(key)
    if connection is None:
        return []
    return [parse(node) for node in _nodes(connection, f"a {key} connection")]


@dataclass(frozen=True)
class ReviewThreadCommentNode:
    """A comment inside a review thread."""

    id: str
    body: str
    created_at: datetime
    updated_at: datetime
    path: str | None = None
    position: int | None = None
    original_position: int | None = None
    diff_hunk: str | None = None
    url: str | None = None
    author: Author | None = None


def _parse_thread_comment(data: Any) -> ReviewThreadCommentNode:
    data = _require_mapping(data, "a review thread comment")
    return ReviewThreadCommentNode(
        id=_require_str(data, "id"),
        body=_require_str(data, "body"),
        created_at=_parse_datetime(data.get("createdAt"), "createdAt"),
        updated_at=_parse_datetime(data.get("updatedAt"), "updatedAt"),
        path=_optional_str(data, "path"),
        position=_optional_int(data, "position"),
        original_position=_optional_int(data, "originalPosition"),
        diff_hunk=_optional_str(data, "diffHunk"),
        url=_optional_str(data, "url"),
        author=_optional_author(data),
    )


@dataclass(frozen=True)
class ReviewThreadNode:
    """A review thread attached to a location in the diff."""

    id: str
    is_resolved: bool
    is_collapsed: bool
    path: str
    line: int | None = None
    original_line: int | None = None
    diff_side: str | None = None
    comments: list[ReviewThreadCommentNode] = field(default_factory=list)


def _parse_thread(data: Any) -> ReviewThreadNode:
    data = _require_mapping(data, "a review thread")
    comments = _nodes(data.get("comments"), "a review thread comments connection")
    return ReviewThreadNode(
        id=_require_str(data, "id"),
        is_resolved=_require_bool(data, "isResolved"),
        is_collapsed=_require_bool(data, "isCollapsed"),
        path=_require_str(data, "path"),
        line=_optional_int(data, "line"),
        original_line=_optional_int(data, "originalLine"),
        diff_side=_optional_str(data, "diffSide"),
        comments=[_parse_thread_comment(comment) for comment in comments],
    )


@dataclass(frozen=True)
class ReviewNode:
    """A submitted pull request review."""

    id: str
    state: str
    created_at: datetime
    body: str | None = None
    author: Author | None = None
    url: str | None = None


def _parse_review(data: Any) -> ReviewNode:
    data = _require_mapping(data, "a review")
    return ReviewNode(
        id=_require_str(data, "id"),
        state=_require_str(data, "state"),
        created_at=_parse_datetime(data.get("createdAt"), "createdAt"),
        body=_optional_str(data, "body"),
        author=_optional_author(data),
        url=_optional_str(data, "url"),
    )


def _parse_review_requests(data: Mapping[str, Any]) -> tuple[list[str], list[str]]:
    """Split review requests into requested user logins and team names."""
    users: list[str] = []
    teams: list[str] = []
    for request in _connection_nodes(data, "reviewRequests", lambda node: node):
        request = _require_mapping(request, "a review request")
        reviewer = request.get("requestedReviewer")
        if reviewer is None:
            continue
        reviewer = _require_mapping(reviewer, "a requested reviewer")
        typename = reviewer.get("__typename")
        if typename == "User":
            users.append(_require_str(reviewer, "login"))
        elif typename == "Team":
            teams.append(_require_str(reviewer, "name"))
        else:
            raise ValueError(f"Unknown requested reviewer type: {typename!r}")
    return users, teams


def _parse_commits_count(data: Mapping[str, Any]) -> int | None:
    raw = data.get("commits")
    if raw is None:
        return None
    return _require_int(_require_mapping(raw, "a commits connection"), "totalCount")


def _parse_milestone(data: Mapping[str, Any]) -> MilestoneNode | None:
    raw = data.get("milestone")
    if raw is None:
        return None
    return MilestoneNode(number=_require_int(_require_mapping(raw, "a milestone"), "number"))


@dataclass(frozen=True)
class PullRequestNode:
    """A pull request as returned by the GraphQL API."""

    number: int
    title: str
    state: str
    created_at: datetime
    updated_at: datetime
    url: str
    comments: CommentsConnection
    body: str | None = None
    base_ref_name: str | None = None
    head_ref_name: str | None = None
    mergeable: str | None = None
    merged: bool | None = None
    merged_at: datetime | None = None
    closed_at: datetime | None = None
    author: Author | None = None
    assignees: list[Author] = field(default_factory=list)
    requested_users: list[str] = field(default_factory=list)
    requested_teams: list[str] = field(default_factory=list)
    labels: list[LabelNode] = field(default_factory=list)
    commits_count: int | None = None
    additions: int | None = None
    deletions: int | None = None
    changed_files: int | None = None
    milestone: MilestoneNode | None = None
    locked: bool | None = None
    is_draft: bool | None = None
    reviews: list[ReviewNode] = field(default_factory=list)
    review_threads: list[ReviewThreadNode] = field(default_factory=list)
    timeline_items: TimelineItemsConnection | None = None

    @classmethod
    def from_dict(cls, data: Any) -> PullRequestNode:
        """Parse a pull request node."""
        data = _require_mapping(data, "a pull request")
        users, teams = _parse_review_requests(data)
        raw_timeline = data.get("timelineItems")
        return cls(
            number=_require_int(data, "number"),
            title=_require_str(data, "title"),
            state=_require_str(data, "state"),
            created_at=_parse_datetime(data.get("createdAt"), "createdAt"),
            updated_at=_parse_datetime(data.get("updatedAt"), "updatedAt"),
            url=_require_str(data, "url"),
            comments=CommentsConnection.from_dict(data.get("comments")),
            body=_optional_str(data, "body"),
            base_ref_name=_optional_str(data, "baseRefName"),
            head_ref_name=_optional_str(data, "headRefName"),
            mergeable=_optional_str(data, "mergeable"),
            merged=_optional_bool(data, "merged"),
            merged_at=_optional_datetime(data, "mergedAt"),
            closed_at=_optional_datetime(data, "closedAt"),
            author=_optional_author(data),
            assignees=_connection_nodes(data, "assignees", Author.from_dict),
            requested_users=users,
            requested_teams=teams,
            labels=_connection_nodes(data, "labels", LabelNode.from_dict),
            commits_count=_parse_commits_count(data),
            additions=_optional_int(data, "additions"),
            deletions=_optional_int(data, "deletions"),
            changed_files=_optional_int(data, "changedFiles"),
            milestone=_parse_milestone(data),
            locked=_optional_bool(data, "locked"),
            is_draft=_optional_bool(data, "isDraft"),
            reviews=_connection_nodes(data, "reviews", _parse_review),
            review_threads=_connection_nodes(data, "reviewThreads", _parse_thread),
            timeline_items=(
                None if raw_timeline is None else TimelineItemsConnection.from_dict(raw_timeline)
            ),
        )

    def requested_reviewers(self) -> list[str]:
        """Return the logins of users asked for review; team requests are left out."""
        return list(self.requested_users)

    def reviewers(self) -> list[str]:
        """Return the distinct logins of review authors and review thread commenters."""
        logins = [review.author.login for review in self.reviews if review.author is not None]
        logins.extend(
            comment.author.login
            for thread in self.review_threads
            for comment in thread.comments
            if comment.author is not None
        )
        return list(dict.fromkeys(logins))

    def mergeable_flag(self) -> bool | None:
        """Return True when mergeable, False when conflicting, None when unknown."""
        if self.mergeable == MERGEABLE_VALUE:
            return True
        if self.mergeable == CONFLICTING_VALUE:
            return False
        return None

    def linked_resources(self, extract_from_text: TextExtractor | None = None) -> list[LinkedResource]:
        """Return linked resources from the timeline, then new ones found in the text.

        Text is searched in the body, the comments and the review thread comments.
        """
        resources = [] if self.timeline_items is None else self.timeline_items.linked_resources()
        if extract_from_text is None:
            return resources
        texts = [] if self.body is None else [self.body]
        texts.extend(comment.body for comment in self.comments.nodes)
        texts.extend(
            comment.body for thread in self.review_threads for comment in thread.comments
        )
        for text in texts:
            for resource in extract_from_text(text):
                if resource not in resources:
                    resources.append(resource)
        return resources


def parse_multiple_pull_requests(data: Any) -> dict[str, PullRequestNode | None]:
    """Parse the aliased pull requests of a multiple-pull-request query, keyed by alias.

    Aliases whose pull request is missing or inaccessible map to None.
    """
    data = _require_mapping(data, "a multiple pull requests response")
    repository = _require_mapping(data.get("repository"), "a repository")
    return {
        str(key): None if value is None else PullRequestNode.from_dict(value)
        for key, value in repository.items()
    }