import dataclasses

import pytest

from ghinsight.issue_query import (
    IssueQueryLimitSize,
    MultipleIssueVariable,
    issue_connection_query_body,
    issue_query_body,
    issue_search_query,
    multi_issue_query,
    multi_issue_query_body,
)
from ghinsight.timeline_query import timeline_items_query


def _balanced(text):
    return text.count("{") == text.count("}")


def test_default_limits_are_100():
    limits = IssueQueryLimitSize()
    assert dataclasses.astuple(limits) == (100, 100, 100, 100)


def test_body_uses_default_limits():
    body = issue_query_body(IssueQueryLimitSize())
    assert "assignees(first: 100)" in body
    assert "labels(first: 100)" in body
    assert "comments(first: 100)" in body
    assert body.startswith("number")
    assert body.endswith(timeline_items_query(100))


def test_body_uses_custom_limits():
    limits = IssueQueryLimitSize(assignee_limit=3, label_limit=4, comment_limit=5, event_limit=6)
    body = issue_query_body(limits)
    assert "assignees(first: 3)" in body
    assert "labels(first: 4)" in body
    assert "comments(first: 5)" in body
    assert body.endswith(timeline_items_query(6))
    assert _balanced(body)


@pytest.mark.parametrize("value", [-1, 256])
def test_limit_out_of_range_rejected(value):
    with pytest.raises(ValueError):
        IssueQueryLimitSize(comment_limit=value)


def test_limit_must_be_integer():
    with pytest.raises(TypeError):
        IssueQueryLimitSize(label_limit="10")


def test_multi_issue_body_alias():
    text = multi_issue_query_body(2, 41, IssueQueryLimitSize())
    assert "issue2: issue(number: 41) {" in text
    assert _balanced(text)


def test_multi_issue_query_aliases_in_order():
    query = multi_issue_query([5, 9], IssueQueryLimitSize())
    first = query.index("issue0: issue(number: 5)")
    second = query.index("issue1: issue(number: 9)")
    assert first < second
    assert "query($owner: String!, $repository_name: String!)" in query
    assert "repository(owner: $owner, name: $repository_name)" in query
    assert _balanced(query)


def test_multi_issue_query_empty():
    query = multi_issue_query([], IssueQueryLimitSize())
    assert "issue(number:" not in query
    assert _balanced(query)


def test_connection_body_contains_page_info():
    text = issue_connection_query_body(IssueQueryLimitSize())
    assert "hasNextPage" in text
    assert "endCursor" in text
    assert text.count("}") == text.count("{") + 1


def test_search_query_with_and_without_cursor():
    with_cursor = issue_search_query(IssueQueryLimitSize(), True)
    without = issue_search_query(IssueQueryLimitSize(), False)
    assert "after: $cursor" in with_cursor
    assert "$cursor: String" in with_cursor
    assert "$cursor" not in without
    assert "type: ISSUE" in without
    assert "... on Issue {" in without


def test_multiple_issue_variable_serializes_fields():
    variables = MultipleIssueVariable(owner="octo", repository_name="demo")
    assert dataclasses.asdict(variables) == {"owner": "octo", "repository_name": "demo"}