"""Timeline events that link issues and pull requests to each other."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TypeVar

from ghinsight.nodes import PageInfo, Repository

E = TypeVar("E", bound=enum.Enum)


class TimelineEventType(enum.Enum):
    """Timeline event kinds that carry a linked resource."""

    CROSS_REFERENCED = "CrossReferencedEvent"
    CONNECTED = "ConnectedEvent"
    DISCONNECTED = "DisconnectedEvent"


class ResourceKind(enum.Enum):
    """Kinds of resource a timeline event can point at."""

    ISSUE = "Issue"
    PULL_REQUEST = "PullRequest"


@dataclass(frozen=True)
class LinkedResource:
    """Identifier of an issue or pull request in some repository."""

    kind: ResourceKind
    owner: str
    repository_name: str
    number: int

    def __str__(self) -> str:
        return f"{self.owner}/{self.repository_name}#{self.number}"


_EMPTY_REPOSITORY = Repository(owner_login="", name="")


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"Expected {what} object, got {type(data).__name__}")
    return data


def _parse_enum(enum_type: type[E], value: str | None) -> E | None:
    if value is None:
        return None
    try:
        return enum_type(value)
    except ValueError:
        return None


def _typename(data: Mapping[str, Any]) -> str | None:
    value = data.get("__typename")
    if value is not None and not isinstance(value, str):
        raise ValueError("Field '__typename' must be a string")
    return value


def _str_field(data: Mapping[str, Any], key: str) -> str:
    if key not in data:
        return ""
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"Field {key!r} must be a string")
    return value


def _int_field(data: Mapping[str, Any], key: str) -> int:
    if key not in data:
        return 0
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Field {key!r} must be an integer")
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
class ReferencedResource:
    """The issue or pull request a timeline event refers to.

    ``kind`` is None for resources of any other type.
    """

    kind: ResourceKind | None
    number: int = 0
    title: str = ""
    url: str = ""
    state: str = ""
    repository: Repository = _EMPTY_REPOSITORY

    @classmethod
    def from_dict(cls, data: Any) -> ReferencedResource:
        """Parse a ``source`` or ``subject`` object; absent fields take empty defaults."""
        data = _require_mapping(data, "a referenced resource")
        kind = _parse_enum(ResourceKind, _typename(data))
        number = _int_field(data, "number")
        title = _str_field(data, "title")
        url = _str_field(data, "url")
        state = _str_field(data, "state")
        repository = (
            Repository.from_dict(data["repository"])
            if "repository" in data
            else _EMPTY_REPOSITORY
        )
        if kind is None:
            return cls(kind=None)
        return cls(
            kind=kind,
            number=number,
            title=title,
            url=url,
            state=state,
            repository=repository,
        )

    def to_linked_resource(self) -> LinkedResource | None:
        """Return the resource identifier, or None for unsupported resource types."""
        if self.kind is None:
            return None
        return LinkedResource(
            kind=self.kind,
            owner=self.repository.owner_login,
            repository_name=self.repository.name,
            number=self.number,
        )


@dataclass(frozen=True)
class TimelineItem:
    """One timeline event; ``event_type`` is None for unsupported events."""

    event_type: TimelineEventType | None
    created_at: datetime
    resource: ReferencedResource | None = None
    will_close_target: bool | None = None

    @classmethod
    def from_dict(cls, data: Any) -> TimelineItem:
        """Parse a timeline node; a missing ``createdAt`` becomes the current time."""
        data = _require_mapping(data, "a timeline item")
        event_type = _parse_enum(TimelineEventType, _typename(data))
        created_at = (
            _parse_datetime(data["createdAt"])
            if "createdAt" in data
            else datetime.now(timezone.utc)
        )
        source = data.get("source")
        subject = data.get("subject")
        source_resource = None if source is None else ReferencedResource.from_dict(source)
        subject_resource = None if subject is None else ReferencedResource.from_dict(subject)
        will_close = data.get("willCloseTarget")
        if will_close is not None and not isinstance(will_close, bool):
            raise ValueError("Field 'willCloseTarget' must be a boolean")

        if event_type is TimelineEventType.CROSS_REFERENCED:
            return cls(event_type, created_at, source_resource, will_close)
        if event_type in (TimelineEventType.CONNECTED, TimelineEventType.DISCONNECTED):
            return cls(event_type, created_at, subject_resource)
        return cls(None, created_at)


@dataclass(frozen=True)
class TimelineItemsConnection:
    """A page of timeline events."""

    nodes: list[TimelineItem] = field(default_factory=list)
    page_info: PageInfo | None = None

    @classmethod
    def from_dict(cls, data: Any) -> TimelineItemsConnection:
        """Parse a ``timelineItems`` connection."""
        data = _require_mapping(data, "a timeline connection")
        raw_nodes = data.get("nodes")
        if not isinstance(raw_nodes, list):
            raise ValueError("Timeline connection field 'nodes' must be a list")
        raw_page_info = data.get("pageInfo")
        return cls(
            nodes=[TimelineItem.from_dict(node) for node in raw_nodes],
            page_info=None if raw_page_info is None else PageInfo.from_dict(raw_page_info),
        )

    def linked_resources(self) -> list[LinkedResource]:
        """Return resources cross-referenced or connected and not later disconnected."""
        added: list[LinkedResource] = []
        removed: set[LinkedResource] = set()
        for item in self.nodes:
            if item.resource is None:
                continue
            linked = item.resource.to_linked_resource()
            if linked is None:
                continue
            if item.event_type is TimelineEventType.DISCONNECTED:
                removed.add(linked)
            elif item.event_type is not None:
                added.append(linked)
        return [resource for resource in added if resource not in removed]