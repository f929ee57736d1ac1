"""GraphQL query text for fetching and searching pull requests."""

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
class PullRequestQueryLimitSize:
    """Page sizes for the nested connections of a pull request query."""

    assignee_limit: int = DEFAULT_LIMIT
    label_limit: int = DEFAULT_LIMIT
    comment_limit: int = DEFAULT_LIMIT
    review_request_limit: int = DEFAULT_LIMIT
    review_limit: int = DEFAULT_LIMIT
    review_thread_limit: int = DEFAULT_LIMIT
    review_thread_comment_limit: int = DEFAULT_LIMIT
    event_limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        for field in fields(self):
            _check_limit(field.name, getattr(self, field.name))


@dataclass(frozen=True)
class MultiplePullRequestVariable:
    """Variables of the multiple-pull-request query."""

    owner: str
    repository_name: str


@dataclass(frozen=True)
class SearchPullRequestVariable:
    """Variables of a pull request search."""

    owner: str
    per_page: int
    cursor: str | None = None


def pull_request_query_body(limit_size: PullRequestQueryLimitSize) -> str:
    """Return the field selection of a single pull request."""
    return f"""number
                    title
                    body
                    state
                    createdAt
                    updatedAt
                    baseRefName
                    headRefName
                    mergeable
                    merged
                    mergedAt
                    url
                    author {{
                      login
                    }}
                    assignees(first: {limit_size.assignee_limit}) {{
                      nodes {{
                        login
                      }}
                    }}
                    reviewRequests(first: {limit_size.review_request_limit}) {{
                      nodes {{
                        requestedReviewer {{
                          __typename
                          ... on User {{
                            login
                          }}
                          ... on Team {{
                            name
                          }}
                        }}
                      }}
                      totalCount
                    }}
                    labels(first: {limit_size.label_limit}) {{
                      nodes {{
                        name
                      }}
                    }}
                    closedAt
                    commits {{
                      totalCount
                    }}
                    additions
                    deletions
                    changedFiles
                    milestone {{
                      number
                    }}
                    locked
                    isDraft
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
                    reviews(first: {limit_size.review_limit}) {{
                      nodes {{
                        id
                        state
                        body
                        createdAt
                        url
                        author {{
                          login
                        }}
                      }}
                      totalCount
                    }}
                    reviewThreads(first: {limit_size.review_thread_limit}) {{
                      nodes {{
                        id
                        isResolved
                        isCollapsed
                        path
                        line
                        originalLine
                        diffSide
                        comments(first: {limit_size.review_thread_comment_limit}) {{
                          nodes {{
                            id
                            body
                            createdAt
                            updatedAt
                            path
                            position
                            originalPosition
                            diffHunk
                            url
                            author {{
                              login
                            }}
                          }}
                          totalCount
                        }}
                      }}
                      totalCount
                    }}
                    {timeline_items_query(limit_size.event_limit)}"""


def multi_pull_query_body(
    index: int, pull_request_number: int, limit_size: PullRequestQueryLimitSize
) -> str:
    """Return one aliased ``pr<index>`` selection."""
    return f"""
        pr{index}: pullRequest(number: {pull_request_number}) {{
            {pull_request_query_body(limit_size)}
        }}"""


def multi_pull_request_query(
    pull_request_numbers: Iterable[int], limit_size: PullRequestQueryLimitSize
) -> str:
    """Return a query fetching several pull requests of one repository at once."""
    each_pr_query = "\n".join(
        multi_pull_query_body(index, number, limit_size)
        for index, number in enumerate(pull_request_numbers)
    )
    return f"""
             query($owner: String!, $repository_name: String!) {{
                 repository(owner: $owner, name: $repository_name) {{
                     {each_pr_query}
                 }}
             }}"""


def pull_request_search_query(limit_size: PullRequestQueryLimitSize, with_cursor: bool) -> str:
    """Return a pull request search query, optionally taking an ``after`` cursor."""
    inner_query = f"""
            nodes {{
                __typename
                ... on PullRequest {{
                    {pull_request_query_body(limit_size)}
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
            search(query: $query, type: PULL_REQUEST, first: $per_page, after: $cursor) {{
                {inner_query}
            }}
        """
    return f"""
        query($query: String!, $per_page: Int!) {{
            search(query: $query, type: PULL_REQUEST, first: $per_page) {{
                {inner_query}
            }}
        """