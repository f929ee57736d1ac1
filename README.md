# ghinsight

An asynchronous client for reading GitHub issues, pull requests and search
results through the GraphQL API. Responses are parsed into small, immutable
dataclasses, and failures are sorted into errors that are worth retrying and
errors that are not.

## Installation

```
pip install ghinsight
```

## What it offers

- `ghinsight.client.GitHubClient`: an async client (usable as
  `async with`) that
  - runs any GraphQL query with `execute_graphql(query_name, query, variables)`,
    giving each request 10 seconds and retrying transient failures up to three
    times; errors reported in the response body are raised as exceptions;
  - searches issues and pull requests inside one repository with
    `search_nodes(owner, repository_name, query, per_page, cursor)`, 30
    results per page unless told otherwise, returning a `SearchConnection`;
  - fetches issues (`fetch_issue_nodes`) or pull requests
    (`fetch_pull_request_nodes`, 30 per request) by number, skipping any that
    are missing or inaccessible.
- `ghinsight.search_query`: `normalize_repo_search_query(query, owner,
  repository_name)` removes any `repo:` qualifier from the query and puts the
  given repository in front; an empty query becomes
  `repo:owner/name is:issue is:pr`. `search_query` builds the combined
  issue and pull request search query.
- `ghinsight.errors`: `RetryableError`, `RateLimitError` and
  `NonRetryableError`, all subclasses of `ApiRetryableError`, with
  `classify_http_status` (by status code and message) and
  `classify_graphql_error` (by the text of GraphQL error messages).
- `ghinsight.retry.retry_with_backoff(operation_name, max_retry_count,
  operation)`: awaits `operation` until it succeeds. Rate limits back off
  from 1 s and other retryable errors from 0.5 s, doubling each attempt;
  `max_retry_count=None` means 15 retries. Non-retryable errors, and the last
  error once retries run out, are raised unchanged.
- Query builders: `ghinsight.issue_query`, `ghinsight.pull_request_query`
  and `ghinsight.timeline_query`, with page sizes set by
  `IssueQueryLimitSize` and `PullRequestQueryLimitSize` (each limit 0–255,
  default 100).
- Parsed nodes: `IssueNode` (`ghinsight.issue_types`), `PullRequestNode`
  (`ghinsight.pull_request_types`), `SearchConnection`
  (`ghinsight.search_types`), `CommentNode` and `CommentsConnection`
  (`ghinsight.comment_types`), timeline events and `LinkedResource`
  (`ghinsight.timeline_types`), and the shared `GraphQLResponse`,
  `PageInfo`, `LabelNode`, `Author` and `Repository` (`ghinsight.nodes`).

## Example

```python
import asyncio

from ghinsight.client import GitHubClient


async def main():
    async with GitHubClient(token="token") as client:
        connection = await client.search_nodes(
            "owner", "repo", "is:open label:bug", per_page=10
        )
        for node in connection.nodes:
            print(node.number, node.title)
        if connection.page_info.has_next_page:
            print("next cursor:", connection.page_info.end_cursor)

        issues = await client.fetch_issue_nodes("owner", "repo", [1, 2, 3])
        for issue in issues:
            links = issue.linked_resources()
            print(issue.number, [str(link) for link in links])


asyncio.run(main())
```

`linked_resources()` returns the issues and pull requests that timeline
events cross-referenced or connected and that were not later disconnected.
Pass `extract_from_text`, a function from a string to `LinkedResource`
values, to add references found in bodies and comments as well.

Pull request nodes also offer `requested_reviewers()`, `reviewers()` and
`mergeable_flag()`.

## What it does not do

- It has no REST calls: it does not fetch pull request diffs, changed-file
  lists or per-file patches.
- It returns GraphQL nodes as parsed; it does not fetch projects or
  repository metadata, and has no command-line tool, server or local storage.

## Running the tests

```
pip install -e ".[test]"
pytest
```