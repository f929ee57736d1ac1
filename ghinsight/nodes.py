"""Shared GraphQL response nodes: envelopes, errors, paging, labels and authors."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"Expected {what} object, got {type(data).__name__}")
    return data


def _require_str(data: Mapping[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"{what} field {key!r} must be a string")
    return value


def _optional_str(data: Mapping[str, Any], key: str, what: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{what} field {key!r} must be a string or null")
    return value


def _optional_list(data: Mapping[str, Any], key: str, what: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{what} field {key!r} must be a list")
    return list(value)


@dataclass(frozen=True)
class GraphQLError:
    """One entry of the ``errors`` list of a GraphQL response."""

    message: str
    locations: list[Any] = field(default_factory=list)
    path: list[Any] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> GraphQLError:
        """Parse a GraphQL error object."""
        data = _require_mapping(data, "a GraphQL error")
        return cls(
            message=_require_str(data, "message", "GraphQL error"),
            locations=_optional_list(data, "locations", "GraphQL error"),
            path=_optional_list(data, "path", "GraphQL error"),
        )


@dataclass(frozen=True)
class GraphQLResponse(Generic[T]):
    """A GraphQL response envelope holding data, errors or both."""

    data: T | None = None
    errors: list[GraphQLError] | None = None

    @classmethod
    def from_dict(
        cls, data: Any, parse_data: Callable[[Any], T] | None = None
    ) -> GraphQLResponse[T]:
        """Parse a response; ``parse_data`` converts a non-null ``data`` member."""
        data = _require_mapping(data, "a GraphQL response")
        raw_data = data.get("data")
        parsed = None
        if raw_data is not None:
            parsed = parse_data(raw_data) if parse_data is not None else raw_data
        raw_errors = data.get("errors")
        errors = None
        if raw_errors is not None:
            if not isinstance(raw_errors, list):
                raise ValueError("GraphQL response field 'errors' must be a list")
            errors = [GraphQLError.from_dict(item) for item in raw_errors]
        return cls(data=parsed, errors=errors)

    def error_message(self) -> str | None:
        """Return all error messages joined by ", ", or None when there are none."""
        if not self.errors:
            return None
        return ", ".join(error.message for error in self.errors)


@dataclass(frozen=True)
class PageInfo:
    """Cursor-based paging state of a connection."""

    has_next_page: bool
    end_cursor: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> PageInfo:
        """Parse a ``pageInfo`` object."""
        data = _require_mapping(data, "a pageInfo")
        has_next = data.get("hasNextPage")
        if not isinstance(has_next, bool):
            raise ValueError("pageInfo field 'hasNextPage' must be a boolean")
        return cls(
            has_next_page=has_next,
            end_cursor=_optional_str(data, "endCursor", "pageInfo"),
        )


@dataclass(frozen=True)
class LabelNode:
    """A label attached to an issue or pull request."""

    name: str
    color: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> LabelNode:
        """Parse a label node."""
        data = _require_mapping(data, "a label")
        return cls(
            name=_require_str(data, "name", "Label"),
            color=_optional_str(data, "color", "Label"),
        )


@dataclass(frozen=True)
class MilestoneNode:
    """Reference to a milestone by number."""

    number: int


@dataclass(frozen=True)
class Author:
    """The login of a user who authored, was assigned to or reviewed a resource."""

    login: str

    @classmethod
    def from_dict(cls, data: Any) -> Author:
        """Parse an author or assignee node."""
        data = _require_mapping(data, "an author")
        return cls(login=_require_str(data, "login", "Author"))


@dataclass(frozen=True)
class Repository:
    """The owner login and name of a repository."""

    owner_login: str
    name: str

    @classmethod
    def from_dict(cls, data: Any) -> Repository:
        """Parse a ``repository { owner { login } name }`` selection."""
        data = _require_mapping(data, "a repository")
        owner = _require_mapping(data.get("owner"), "a repository owner")
        return cls(
            owner_login=_require_str(owner, "login", "Repository owner"),
            name=_require_str(data, "name", "Repository"),
        )