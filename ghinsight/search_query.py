"""Search query text and normalisation of repository-scoped search strings."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ghinsight.issue_query import IssueQueryLimitSize, issue_query_body
from ghinsight.pull_request_query import PullRequestQueryLimitSize, pull_request_query_body

_REPO_PATTERN = re.compile(r"\brepo:[^\s]+")


@dataclass(frozen=True)
class SearchVariable:
    """Variables of the issue and pull request search query."""

    query: str
    per_page: int
    cursor: str | None = None


def search_query(
    issue_limit_size: IssueQueryLimitSize | None = None,
    pull_request_limit_size: PullRequestQueryLimitSize | None = None,
    with_cursor: bool = False,
) -> str:
    """Return a search query returning both issues and pull requests."""
    issue_limits = issue_limit_size if issue_limit_size is not None else IssueQueryLimitSize()
    pr_limits = (
        pull_request_limit_size
        if pull_request_limit_size is not None
        else PullRequestQueryLimitSize()
    )
    inner_query = f"""
            nodes {{
                __typename
                ... on Issue {{
                    {issue_query_body(issue_limits)}
                    repository {{
                        owner {{
                            login
                        }}
                        name
                    }}
                }}


                ... on PullRequest {{
                    {pull_request_query_body(pr_limits)}
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
        }}"""
    return f"""
        query($query: String!, $per_page: Int!) {{
            search(query: $query, type: ISSUE, first: $per_page) {{
                {inner_query}
            }}
        }}"""


def normalize_repo_search_query(query: str, owner: str, repository_name: str) -> str:
    """Scope ``query`` to one repository, replacing any ``repo:`` qualifiers in it.

    An otherwise empty query gets ``is:issue is:pr`` so that the search returns results.
    """
    cleaned = _REPO_PATTERN.sub("", query).strip()
    if not cleaned:
        return f"repo:{owner}/{repository_name} is:issue is:pr"
    return f"repo:{owner}/{repository_name} {cleaned}"