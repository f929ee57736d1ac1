"""Search results mixing issues and pull requests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from ghinsight.issue_types import IssueNode
from ghinsight.nodes import PageInfo
from ghinsight.pull_request_types import PullRequestNode

SearchNode = Union[IssueNode, PullRequestNode]


@dataclass(frozen=True)
class SearchConnection:
    """One page of search results; results of other types are left out."""

    page_info: PageInfo
    nodes: list[SearchNode] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> SearchConnection:
        """Parse the ``search`` connection of a search response."""
        if not isinstance(data, Mapping):
            raise ValueError(f"Expected a search connection object, got {type(data).__name__}")
        raw_nodes = data.get("nodes")
        if not isinstance(raw_nodes, list):
            raise ValueError("Search connection field 'nodes' must be a list")
        nodes: list[SearchNode] = []
        for raw in raw_nodes:
            if not isinstance(raw, Mapping):
                raise ValueError("Search result must be an object")
            typename = raw.get("__typename")
            if not isinstance(typename, str):
                raise ValueError("Search result is missing '__typename'")
            if typename == "Issue":
                nodes.append(IssueNode.from_dict(raw))
            elif typename == "PullRequest":
                nodes.append(PullRequestNode.from_dict(raw))
        return cls(page_info=PageInfo.from_dict(data.get("pageInfo")), nodes=nodes)