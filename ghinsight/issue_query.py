"""GraphQL query text for fetching and searching issues."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, fields

from ghinsight.timeline_query import timeline_items_query

DEFAULT_LIMIT = 100


def _check_limit(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer")
    if not 0 <= value <= 255:
        raise ValueError(f"{name} must be between 0 and 255, got {value}")


@dataclass(frozen=True)
class IssueQueryLimitSize:
    """Page sizes for the nested connections of an issue query."""

    assignee_limit: int = DEFAULT_LIMIT
    label_limit: int = DEFAULT_LIMIT
    comment_limit: int = DEFAULT_LIMIT
    event_limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        for field in fields(self):
            _check_limit(field.name, getattr(self, field.name))


@dataclass(frozen=True)
class MultipleIssueVariable:
    """Variables of the multiple-issue query."""

    owner: str
    repository_name: str


def issue_query_body(limit_size: IssueQueryLimitSize) -> str:
    """Return the field selection of a single issue."""
    return f"""number
                    title
                    body
                    state
                    createdAt
                    updatedAt
                    closedAt
                    url
                    author {{
                      login
                    }}
                    assignees(first: {limit_size.assignee_limit}) {{
                      nodes {{
                        login
                      }}
                    }}
                    labels(first: {limit_size.label_limit}) {{
                      nodes {{
                        name
                        color
                      }}
                    }}
                    milestone {{
                      number
                    }}
                    locked
                    comments(first: {limit_size.comment_limit}) {{
                      nodes {{
                        id
                        body
                        createdAt
                        updatedAt
                        url
                        author {{
                          login
                        }}
                      }}
                      totalCount
                    }}
                    {timeline_items_query(limit_size.event_limit)}"""


def issue_connection_query_body(limit_size: IssueQueryLimitSize) -> str:
    """Return the nodes and pageInfo selection of an issue connection, closing its block."""
    return f"""
           nodes {{
               {issue_query_body(limit_size)}
               repository {{
                   owner {{
                       login
                   }}
                   name
               }}
           }}
           pageInfo {{
               hasNextPage
               endCursor
           }}
       }}"""


def multi_issue_query_body(
    index: int, issue_number: int, limit_size: IssueQueryLimitSize
) -> str:
    """Return one aliased ``issue<index>`` selection."""
    return f"""
        issue{index}: issue(number: {issue_number}) {{
            {issue_query_body(limit_size)}
            repository {{
                owner {{
                    login
                }}
                name
            }}
        }}"""


def multi_issue_query(issue_numbers: Iterable[int], limit_size: IssueQueryLimitSize) -> str:
    """Return a query fetching several issues of one repository at once."""
    each_issue_query = "\n".join(
        multi_issue_query_body(index, number, limit_size)
        for index, number in enumerate(issue_numbers)
    )
    return f"""
             query($owner: String!, $repository_name: String!) {{
                 repository(owner: $owner, name: $repository_name) {{
                     {each_issue_query}
                 }}
             }}"""


def issue_search_query(limit_size: IssueQueryLimitSize, with_cursor: bool) -> str:
    """Return an issue search query, optionally taking an ``after`` cursor."""
    inner_query = f"""
            nodes {{
                __typename
                ... on Issue {{
                    {issue_query_body(limit_size)}
                    repository {{
                        owner {{
                            login
                        }}
                        name
                    }}
                }}
            }}
            pageInfo {{
                hasNextPage
                endCursor
            }}
        """
    if with_cursor:
        return f"""
        query($query: String!, $per_page: Int!, $cursor: String) {{
            search(query: $query, type: ISSUE, first: $per_page, after: $cursor) {{
                {inner_query}
            }}
        """
    return f"""
        query($query: String!, $per_page: Int!) {{
            search(query: $query, type: ISSUE, first: $per_page) {{
                {inner_query}
            }}
        """