"""Async client for GitHub issues, pull requests and repository search over GraphQL."""

__version__ = "0.1.3"