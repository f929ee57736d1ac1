from datetime import datetime, timedelta, timezone

import pytest

from ghinsight.comment_types import CommentNode, CommentsConnection
from ghinsight.nodes import Author

URL = "https://example.com/acme/widgets/pull/3#issuecomment-123456"


def _comment(**overrides):
    data = {
        "id": "IC_abc",
        "body": "Looks good",
        "createdAt": "2024-05-02T08:30:00Z",
        "updatedAt": "2024-05-02T09:00:00+01:00",
        "author": {"login": "octo"},
        "url": URL,
    }
    data.update(overrides)
    return data


def test_comment_node_parses_fields():
    node = CommentNode.from_dict(_comment())
    assert node.id == "IC_abc"
    assert node.body == "Looks good"
    assert node.author == Author(login="octo")
    assert node.created_at == datetime(2024, 5, 2, 8, 30, tzinfo=timezone.utc)
    assert node.updated_at.utcoffset() == timedelta(0)
    assert node.updated_at == datetime(2024, 5, 2, 8, 0, tzinfo=timezone.utc)


def test_comment_number_from_url():
    assert CommentNode.from_dict(_comment()).comment_number() == 123456


def test_comment_number_missing_url():
    node = CommentNode.from_dict(_comment(url=None))
    with pytest.raises(ValueError, match="required but missing"):
        node.comment_number()


def test_comment_number_url_without_marker():
    node = CommentNode.from_dict(_comment(url="https://example.com/acme/widgets/pull/3"))
    with pytest.raises(ValueError, match="Failed to parse comment ID"):
        node.comment_number()


def test_comment_number_non_numeric_suffix():
    node = CommentNode.from_dict(_comment(url="https://example.com/x#issuecomment-abc"))
    with pytest.raises(ValueError, match="Failed to parse comment ID"):
        node.comment_number()


def test_comment_without_author():
    node = CommentNode.from_dict(_comment(author=None))
    assert node.author is None


def test_comment_requires_body():
    data = _comment()
    del data["body"]
    with pytest.raises(ValueError):
        CommentNode.from_dict(data)


def test_comment_rejects_bad_timestamp():
    with pytest.raises(ValueError):
        CommentNode.from_dict(_comment(createdAt="not a date"))


def test_comments_connection():
    connection = CommentsConnection.from_dict(
        {
            "nodes": [_comment(), _comment(id="IC_def", url=None)],
            "totalCount": 2,
            "pageInfo": {"hasNextPage": True, "endCursor": "cursor-1"},
        }
    )
    assert [node.id for node in connection.nodes] == ["IC_abc", "IC_def"]
    assert connection.total_count == 2
    assert connection.page_info.end_cursor == "cursor-1"
    assert connection.page_info.has_next_page is True


def test_comments_connection_without_page_info():
    connection = CommentsConnection.from_dict({"nodes": [], "totalCount": 0})
    assert connection.nodes == []
    assert connection.page_info is None


def test_comments_connection_requires_total_count():
    with pytest.raises(ValueError):
        CommentsConnection.from_dict({"nodes": []})