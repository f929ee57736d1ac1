import pytest

from ghinsight.timeline_query import timeline_items_query


def test_starts_with_event_filter_and_limit():
    query = timeline_items_query(100)
    assert query.startswith(
        "timelineItems(itemTypes: [CROSS_REFERENCED_EVENT, CONNECTED_EVENT, "
        "DISCONNECTED_EVENT], first: 100) {"
    )


def test_limit_is_inserted():
    assert "first: 7)" in timeline_items_query(7)
    assert "first: 7)" not in timeline_items_query(8)


def test_braces_are_balanced():
    query = timeline_items_query(100)
    assert query.count("{") == query.count("}")
    assert query.endswith("}")


def test_all_event_fragments_present():
    query = timeline_items_query(50)
    for fragment in (
        "... on CrossReferencedEvent",
        "... on ConnectedEvent",
        "... on DisconnectedEvent",
        "willCloseTarget",
    ):
        assert fragment in query
    assert query.count("... on Issue") == 3
    assert query.count("... on PullRequest") == 3


def test_no_template_braces_left():
    query = timeline_items_query(1)
    assert "{{" not in query
    assert "}}" not in query


@pytest.mark.parametrize("limit", [-1, 256])
def test_out_of_range_limit_raises(limit):
    with pytest.raises(ValueError):
        timeline_items_query(limit)


def test_non_integer_limit_raises():
    with pytest.raises(TypeError):
        timeline_items_query("100")