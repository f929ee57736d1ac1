"""Classification of API failures into retryable and non-retryable errors."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ApiRetryableError(Exception):
    """Base class for API failures, grouped by how a caller should retry."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ApiRetryableError):
            return NotImplemented
        return type(self) is type(other) and self.message == other.message

    def __hash__(self) -> int:
        return hash((type(self), self.message))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class RetryableError(ApiRetryableError):
    """A transient failure (server error, network trouble) worth retrying."""

    def __str__(self) -> str:
        return f"Retryable error: {self.message}"


class RateLimitError(ApiRetryableError):
    """The API rate limit was hit; retry after backing off."""

    def __init__(self) -> None:
        super().__init__("")

    def __str__(self) -> str:
        return "Rate limit error"

    def __repr__(self) -> str:
        return "RateLimitError()"


class NonRetryableError(ApiRetryableError):
    """A client-side failure that retrying will not fix."""

    def __str__(self) -> str:
        return f"Non-retryable error: {self.message}"


def _debug_quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _debug_optional(text: str | None) -> str:
    return "None" if text is None else f"Some({_debug_quote(text)})"


def classify_http_status(
    status: int, message: str, documentation_url: str | None = None
) -> ApiRetryableError:
    """Classify an error response of the GitHub API by its status code and message."""
    detailed_error = (
        f"GitHub API error - Status: {status}, Message: {_debug_quote(message)}, "
        f"Documentation: {_debug_optional(documentation_url)}"
    )
    logger.error("GitHub API error details: %s", detailed_error)

    if status == 429:
        logger.warning("Rate limit (429) detected for GitHub API request")
        return RateLimitError()
    if status == 403:
        if "rate limit" in message or "API rate limit" in message:
            logger.warning("Rate limit (403) detected for GitHub API request: %s", message)
            return RateLimitError()
        logger.error("Non-retryable client error (%s): %s", status, detailed_error)
        return NonRetryableError(detailed_error)
    if 400 <= status <= 499:
        logger.error("Non-retryable client error (%s): %s", status, detailed_error)
        return NonRetryableError(detailed_error)
    if 500 <= status <= 599:
        logger.warning("Server error (%s) - will retry: %s", status, detailed_error)
        return RetryableError(detailed_error)
    logger.error(
        "Unknown status code (%s) - treating as non-retryable: %s", status, detailed_error
    )
    return NonRetryableError(detailed_error)


def classify_graphql_error(error_msg: str) -> ApiRetryableError:
    """Classify the joined error messages of a GraphQL response."""
    if "A query attribute must be specified and must be a string" in error_msg:
        logger.warning("GraphQL query construction error - will retry: %s", error_msg)
        return RetryableError(f"GraphQL query construction error: {error_msg}")
    if "rate limit" in error_msg or "API rate limit" in error_msg:
        logger.warning("GraphQL rate limit error - will retry: %s", error_msg)
        return RateLimitError()
    if "timeout" in error_msg or "server error" in error_msg:
        logger.warning("GraphQL server error - will retry: %s", error_msg)
        return RetryableError(f"GraphQL server error: {error_msg}")
    if (
        "Could not resolve to a PullRequest" in error_msg
        or "Could not resolve to an Issue" in error_msg
    ):
        logger.info("GraphQL resource not found - treating as non-retryable: %s", error_msg)
        return NonRetryableError(f"Resource not found: {error_msg}")
    if "Expected NAME" in error_msg or "Expected one of SCHEMA, SCALAR" in error_msg:
        logger.warning("GraphQL parsing error - will retry: %s", error_msg)
        return RetryableError(f"GraphQL parsing error: {error_msg}")
    if "validation" in error_msg or "syntax" in error_msg:
        logger.error("GraphQL validation error - not retryable: %s", error_msg)
        return NonRetryableError(f"GraphQL validation error: {error_msg}")
    logger.warning("Unknown GraphQL error - treating as retryable: %s", error_msg)
    return RetryableError(f"GraphQL error: {error_msg}")