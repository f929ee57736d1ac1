"""Asynchronous GitHub GraphQL client for issues, pull requests and searches."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import asdict
from itertools import islice
from typing import Any, TypeVar

import httpx

from ghinsight.errors import (
    ApiRetryableError,
    NonRetryableError,
    RetryableError,
    classify_graphql_error,
    classify_http_status,
)
from ghinsight.issue_query import IssueQueryLimitSize, MultipleIssueVariable, multi_issue_query
from ghinsight.issue_types import IssueNode, parse_multiple_issues
from ghinsight.nodes import GraphQLResponse
from ghinsight.pull_request_query import (
    MultiplePullRequestVariable,
    PullRequestQueryLimitSize,
    multi_pull_request_query,
)
from ghinsight.pull_request_types import PullRequestNode, parse_multiple_pull_requests
from ghinsight.retry import retry_with_backoff
from ghinsight.search_query import SearchVariable, normalize_repo_search_query, search_query
from ghinsight.search_types import SearchConnection

logger = logging.getLogger(__name__)

T = TypeVar("T")

GRAPHQL_URL = "https://api.github.com/graphql"
DEFAULT_TIMEOUT = 10.0
GRAPHQL_MAX_RETRIES = 3
GRAPHQL_REQUEST_TIMEOUT = 10.0
PULL_REQUEST_CHUNK_SIZE = 30
DEFAULT_SEARCH_RESULT_PER_PAGE = 30


def _timeouts(timeout: float | None) -> httpx.Timeout:
    total = DEFAULT_TIMEOUT if timeout is None else timeout
    connect = max(total, 1.0) if total < 10 else 30.0
    read_write = max(total, 1.0)
    return httpx.Timeout(connect=connect, read=read_write, write=read_write, pool=read_write)


def _chunks(items: Iterable[T], size: int) -> Iterator[list[T]]:
    iterator = iter(items)
    while chunk := list(islice(iterator, size)):
        yield chunk


def _classify_response(response: httpx.Response) -> ApiRetryableError:
    message = response.text
    documentation_url = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, Mapping):
        if isinstance(body.get("message"), str):
            message = body["message"]
        if isinstance(body.get("documentation_url"), str):
            documentation_url = body["documentation_url"]
    return classify_http_status(response.status_code, message, documentation_url)


def _require_data(response: GraphQLResponse[Any], what: str) -> Mapping[str, Any]:
    if response.data is None:
        raise ValueError(f"No data in GraphQL {what} response")
    if not isinstance(response.data, Mapping):
        raise ValueError(f"GraphQL {what} response data must be an object")
    return response.data


class GitHubClient:
    """Client of the GitHub GraphQL API with retries on transient failures."""

    def __init__(
        self,
        token: str | None = None,
        timeout: float | None = None,
        *,
        graphql_url: str = GRAPHQL_URL,
    ) -> None:
        headers = {"Accept": "application/json", "User-Agent": "ghinsight"}
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"
        self._graphql_url = graphql_url
        self._http = httpx.AsyncClient(headers=headers, timeout=_timeouts(timeout))

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connections."""
        await self._http.aclose()

    async def _post(self, payload: Mapping[str, Any]) -> GraphQLResponse[Any]:
        try:
            response = await self._http.post(self._graphql_url, json=payload)
        except httpx.TransportError as exc:
            logger.warning("HTTP layer error - will retry: %s", exc)
            raise RetryableError(f"HTTP layer error: {exc}") from exc
        if not response.is_success:
            raise _classify_response(response)
        try:
            return GraphQLResponse.from_dict(response.json())
        except ValueError as exc:
            logger.error("JSON parsing error - not retryable: %s", exc)
            raise NonRetryableError(f"JSON parsing error: {exc}") from exc

    async def execute_graphql(
        self,
        query_name: str,
        query: str,
        variables: Mapping[str, Any] | None = None,
    ) -> GraphQLResponse[Any]:
        """Run a GraphQL query, retrying transient failures up to three times.

        Errors reported in the response are classified and raised as
        ``ApiRetryableError`` subclasses.
        """
        payload = {"query": query, "variables": None if variables is None else dict(variables)}

        async def attempt() -> GraphQLResponse[Any]:
            logger.info(
                "Starting GraphQL request with payload: %s", json.dumps(payload, indent=2)
            )
            start = time.monotonic()
            try:
                response = await asyncio.wait_for(self._post(payload), GRAPHQL_REQUEST_TIMEOUT)
            except asyncio.TimeoutError:
                elapsed = time.monotonic() - start
                logger.error("GraphQL request timed out after %.3fs", elapsed)
                raise RetryableError(f"GraphQL request timed out after {elapsed:.3f}s") from None
            logger.info(
                "GraphQL request completed successfully in %.3fs", time.monotonic() - start
            )
            message = response.error_message()
            if message is not None:
                raise classify_graphql_error(message)
            return response

        return await retry_with_backoff(query_name, GRAPHQL_MAX_RETRIES, attempt)

    async def search_nodes(
        self,
        owner: str,
        repository_name: str,
        query: str,
        per_page: int | None = None,
        cursor: str | None = None,
    ) -> SearchConnection:
        """Search issues and pull requests of one repository.

        The query is scoped to the repository; ``cursor`` continues a previous page.
        """
        normalized = normalize_repo_search_query(query, owner, repository_name)
        query_text = search_query(
            IssueQueryLimitSize(), PullRequestQueryLimitSize(), cursor is not None
        )
        variables = SearchVariable(
            query=normalized,
            per_page=DEFAULT_SEARCH_RESULT_PER_PAGE if per_page is None else per_page,
            cursor=cursor,
        )
        response = await self.execute_graphql("issue_search", query_text, asdict(variables))
        data = _require_data(response, "issue search")
        return SearchConnection.from_dict(data.get("search"))

    async def fetch_pull_request_nodes(
        self, owner: str, repository_name: str, numbers: Iterable[int]
    ) -> list[PullRequestNode]:
        """Fetch pull requests by number, in chunks of 30; missing ones are skipped."""
        variables = asdict(MultiplePullRequestVariable(owner=owner, repository_name=repository_name))
        pull_requests: list[PullRequestNode] = []
        for chunk in _chunks(numbers, PULL_REQUEST_CHUNK_SIZE):
            query_text = multi_pull_request_query(chunk, PullRequestQueryLimitSize())
            response = await self.execute_graphql("multi_pull_requests", query_text, variables)
            data = _require_data(response, "multiple_pullrequest")
            for key, node in parse_multiple_pull_requests(data).items():
                if node is None:
                    logger.warning("Pull request %s not found or inaccessible", key)
                else:
                    pull_requests.append(node)
        return pull_requests

    async def fetch_issue_nodes(
        self, owner: str, repository_name: str, numbers: Iterable[int]
    ) -> list[IssueNode]:
        """Fetch issues by number in one query; missing ones are skipped."""
        numbers = list(numbers)
        if not numbers:
            return []
        query_text = multi_issue_query(numbers, IssueQueryLimitSize())
        variables = asdict(MultipleIssueVariable(owner=owner, repository_name=repository_name))
        response = await self.execute_graphql("multi_issues", query_text, variables)
        data = _require_data(response, "multiple_issues")
        issues: list[IssueNode] = []
        for key, node in parse_multiple_issues(data).items():
            if node is None:
                logger.warning("Issue %s not found or inaccessible", key)
            else:
                issues.append(node)
        return issues