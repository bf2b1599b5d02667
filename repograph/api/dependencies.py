"""Shared FastAPI dependency injection."""

from __future__ import annotations

from typing import Annotated

from fastapi import Query

from repograph.config import get_settings
from repograph.services.github_client import GitHubClient
from repograph.services.repo_service import RepoService

_github: GitHubClient | None = None
_repo_service: RepoService | None = None

# Upper bound follows MAX_COMMIT_WINDOW as configured when the app is imported.
WindowQuery = Annotated[
    int | None,
    Query(ge=1, le=get_settings().MAX_COMMIT_WINDOW, description="Number of most recent commits"),
]


def set_github(client: GitHubClient | None) -> None:
    global _github
    _github = client


def set_repo_service(service: RepoService | None) -> None:
    global _repo_service
    _repo_service = service


def get_github() -> GitHubClient:
    if _github is None:
        raise RuntimeError("GitHub client not initialized")
    return _github


def get_repo_service() -> RepoService:
    if _repo_service is None:
        raise RuntimeError("Repository service not initialized")
    return _repo_service
