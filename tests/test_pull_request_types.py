import re

import pytest

from ghinsight.pull_request_types import PullRequestNode, parse_multiple_pull_requests
from ghinsight.timeline_types import LinkedResource, ResourceKind

_REF = re.compile(r"([\w-]+)/([\w-]+)#(\d+)")
_TS = "2024-03-01T12:00:00Z"


def _extract(text):
    return [
        LinkedResource(ResourceKind.ISSUE, owner, repo, int(number))
        for owner, repo, number in _REF.findall(text)
    ]


def _pr_data(**overrides):
    data = {
        "number": 5,
        "title": "Add feature",
        "body": "Closes acme/widgets#1",
        "state": "OPEN",
        "createdAt": _TS,
        "updatedAt": _TS,
        "baseRefName": "main",
        "headRefName": "feature",
        "mergeable": "MERGEABLE",
        "merged": False,
        "mergedAt": None,
        "url": "https://github.example.com/acme/widgets/pull/5",
        "author": {"login": "dave"},
        "assignees": {"nodes": [{"login": "erin"}]},
        "reviewRequests": {
            "nodes": [
                {"requestedReviewer": {"__typename": "User", "login": "frank"}},
                {"requestedReviewer": {"__typename": "Team", "name": "core"}},
                {"requestedReviewer": None},
            ],
            "totalCount": 3,
        },
        "labels": {"nodes": [{"name": "enhancement"}]},
        "commits": {"totalCount": 4},
        "additions": 10,
        "deletions": 2,
        "changedFiles": 3,
        "isDraft": True,
        "comments": {
            "nodes": [
                {
                    "id": "c1",
                    "body": "Related to acme/widgets#2",
                    "createdAt": _TS,
                    "updatedAt": _TS,
                    "url": "https://github.example.com/acme/widgets/pull/5#issuecomment-77",
                    "author": {"login": "erin"},
                }
            ],
            "totalCount": 1,
        },
        "reviews": {
            "nodes": [
                {"id": "r1", "state": "APPROVED", "body": "", "createdAt": _TS,
                 "author": {"login": "grace"}},
                {"id": "r2", "state": "COMMENTED", "body": None, "createdAt": _TS,
                 "author": {"login": "heidi"}},
            ],
            "totalCount": 2,
        },
        "reviewThreads": {
            "nodes": [
                {
                    "id": "t1",
                    "isResolved": True,
                    "isCollapsed": False,
                    "path": "src/lib.py",
                    "line": 12,
                    "originalLine": 11,
                    "diffSide": "RIGHT",
                    "comments": {
                        "nodes": [
                            {
                                "id": "tc1",
                                "body": "See acme/widgets#1 and acme/widgets#3",
                                "createdAt": _TS,
                                "updatedAt": _TS,
                                "path": "src/lib.py",
                                "position": 4,
                                "originalPosition": 3,
                                "diffHunk": "@@ -1 +1 @@",
                                "url": None,
                                "author": {"login": "grace"},
                            }
                        ],
                        "totalCount": 1,
                    },
                }
            ],
            "totalCount": 1,
        },
    }
    data.update(overrides)
    return data


def test_parses_basic_fields():
    pr = PullRequestNode.from_dict(_pr_data())
    assert pr.number == 5
    assert pr.head_ref_name == "feature"
    assert pr.base_ref_name == "main"
    assert pr.commits_count == 4
    assert pr.additions == 10
    assert pr.is_draft is True
    assert [a.login for a in pr.assignees] == ["erin"]
    assert [label.name for label in pr.labels] == ["enhancement"]


def test_requested_reviewers_excludes_teams_and_nulls():
    pr = PullRequestNode.from_dict(_pr_data())
    assert pr.requested_reviewers() == ["frank"]
    assert pr.requested_teams == ["core"]


def test_reviewers_are_distinct():
    pr = PullRequestNode.from_dict(_pr_data())
    reviewers = pr.reviewers()
    assert sorted(reviewers) == ["grace", "heidi"]
    assert len(reviewers) == len(set(reviewers))


def test_review_thread_comment_fields():
    pr = PullRequestNode.from_dict(_pr_data())
    thread = pr.review_threads[0]
    assert thread.is_resolved is True
    assert thread.line == 12
    assert thread.comments[0].position == 4
    assert thread.comments[0].diff_hunk == "@@ -1 +1 @@"


@pytest.mark.parametrize(
    "value, expected",
    [("MERGEABLE", True), ("CONFLICTING", False), ("UNKNOWN", None), (None, None)],
)
def test_mergeable_flag(value, expected):
    pr = PullRequestNode.from_dict(_pr_data(mergeable=value))
    assert pr.mergeable_flag() is expected


def test_unknown_requested_reviewer_type_raises():
    data = _pr_data(
        reviewRequests={
            "nodes": [{"requestedReviewer": {"__typename": "Bot", "login": "x"}}],
            "totalCount": 1,
        }
    )
    with pytest.raises(ValueError):
        PullRequestNode.from_dict(data)


def test_missing_comments_raises():
    data = _pr_data()
    del data["comments"]
    with pytest.raises(ValueError):
        PullRequestNode.from_dict(data)


def test_absent_optionals_default():
    data = _pr_data()
    for key in ("commits", "additions", "reviews", "reviewThreads", "reviewRequests"):
        del data[key]
    pr = PullRequestNode.from_dict(data)
    assert pr.commits_count is None
    assert pr.additions is None
    assert pr.reviewers() == []
    assert pr.requested_reviewers() == []


def test_linked_resources_from_all_text_sources():
    pr = PullRequestNode.from_dict(_pr_data())
    assert pr.linked_resources(_extract) == [
        LinkedResource(ResourceKind.ISSUE, "acme", "widgets", 1),
        LinkedResource(ResourceKind.ISSUE, "acme", "widgets", 2),
        LinkedResource(ResourceKind.ISSUE, "acme", "widgets", 3),
    ]
    assert pr.linked_resources() == []


def test_parse_multiple_pull_requests():
    result = parse_multiple_pull_requests({"repository": {"pr0": _pr_data(), "pr1": None}})
    assert result["pr0"].title == "Add feature"
    assert result["pr1"] is None