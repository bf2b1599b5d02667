"""Exception hierarchy for the fetch layer and API.

The graph builder itself raises none of these.
"""

from __future__ import annotations

from datetime import datetime


class RepoGraphError(Exception):
    """Base exception for all repograph errors."""


class GitHubAPIError(RepoGraphError):
    """GitHub REST API failure (HTTP errors, transport errors, bad payloads)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RepositoryNotFoundError(GitHubAPIError):
    """Repository does not exist or is not visible to the token (HTTP 404)."""


class RateLimitError(GitHubAPIError):
    """GitHub quota exhausted (HTTP 403/429 with no remaining requests)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        reset_at: datetime | None = None,
    ) -> None:
        super().__init__(message, status_code)
        self.reset_at = reset_at


class InvalidRepositoryError(RepoGraphError):
    """Repository reference could not be parsed as owner/repo or a GitHub URL."""


class CacheError(RepoGraphError):
    """Redis cache operation failure."""
