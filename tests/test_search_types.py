import pytest

from ghinsight.issue_types import IssueNode
from ghinsight.pull_request_types import PullRequestNode
from ghinsight.search_types import SearchConnection

_TS = "2024-05-01T00:00:00Z"
_REPO = {"owner": {"login": "acme"}, "name": "widgets"}


def _issue():
    return {
        "__typename": "Issue",
        "number": 1,
        "title": "Issue one",
        "state": "OPEN",
        "createdAt": _TS,
        "updatedAt": _TS,
        "url": "https://github.example.com/acme/widgets/issues/1",
        "comments": {"nodes": [], "totalCount": 0},
        "repository": _REPO,
    }


def _pull_request():
    return {
        "__typename": "PullRequest",
        "number": 2,
        "title": "PR two",
        "state": "MERGED",
        "createdAt": _TS,
        "updatedAt": _TS,
        "url": "https://github.example.com/acme/widgets/pull/2",
        "comments": {"nodes": [], "totalCount": 0},
        "repository": _REPO,
    }


def test_parses_mixed_results_and_drops_other_types():
    connection = SearchConnection.from_dict(
        {
            "nodes": [_issue(), {"__typename": "Discussion"}, _pull_request()],
            "pageInfo": {"hasNextPage": True, "endCursor": "abc"},
        }
    )
    assert [type(node) for node in connection.nodes] == [IssueNode, PullRequestNode]
    assert [node.number for node in connection.nodes] == [1, 2]
    assert connection.page_info.has_next_page is True
    assert connection.page_info.end_cursor == "abc"


def test_missing_typename_raises():
    node = _issue()
    del node["__typename"]
    with pytest.raises(ValueError):
        SearchConnection.from_dict({"nodes": [node], "pageInfo": {"hasNextPage": False}})


def test_nodes_must_be_list():
    with pytest.raises(ValueError):
        SearchConnection.from_dict({"nodes": None, "pageInfo": {"hasNextPage": False}})


def test_page_info_required():
    with pytest.raises(ValueError):
        SearchConnection.from_dict({"nodes": []})


def test_empty_page():
    connection = SearchConnection.from_dict(
        {"nodes": [], "pageInfo": {"hasNextPage": False, "endCursor": None}}
    )
    assert connection.nodes == []
    assert connection.page_info.end_cursor is None