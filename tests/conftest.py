"""Shared test fixtures."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from repograph.models.schemas import Commit, CommitAuthor


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch):
    """Keep tests independent of the developer's environment."""
    monkeypatch.setenv("GITHUB_TOKEN", "")
    monkeypatch.setenv("GITHUB_API_URL", "https://api.github.test")
    monkeypatch.setenv("REDIS_URL", "")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("LOG_FORMAT", "console")


@pytest.fixture
def settings():
    from repograph.config import Settings

    return Settings(
        GITHUB_API_URL="https://api.github.test",
        GITHUB_TOKEN="",
        RATE_LIMIT_REQUESTS_PER_SEC=1000.0,
        MAX_FETCH_CONCURRENT=5,
        RETRY_MAX_ATTEMPTS=3,
        REDIS_URL="",
    )


@pytest.fixture
def make_commit() -> Callable[..., Commit]:
    def _make(sha: str, *parents: str, message: str | None = None) -> Commit:
        return Commit(
            sha=sha,
            parents=parents,
            message=message if message is not None else f"commit {sha}",
            author=CommitAuthor(name="Ada", email="ada@example.com", date="2024-01-05T15:04:00Z"),
            url=f"https://github.com/acme/widgets/commit/{sha}",
        )

    return _make


@pytest.fixture
def merge_history(make_commit) -> list[Commit]:
    """M merges B into A; both branch off Root. Newest first."""
    return [
        make_commit("M", "A", "B", message="Merge branch 'feature'"),
        make_commit("A", "Root"),
        make_commit("B", "Root"),
        make_commit("Root"),
    ]


@pytest.fixture
def commit_payload() -> Callable[..., dict[str, Any]]:
    """Builds a ``GET /repos/{o}/{r}/commits`` item as GitHub returns it."""

    def _payload(sha: str, *parents: str, message: str = "Fix things", name: str | None = "Ada") -> dict[str, Any]:
        return {
            "sha": sha,
            "html_url": f"https://github.com/acme/widgets/commit/{sha}",
            "commit": {
                "message": message,
                "author": {"name": name, "email": "ada@example.com", "date": "2024-01-05T15:04:00Z"},
            },
            "author": {"login": "ada", "avatar_url": "https://avatars.example/ada.png"},
            "parents": [{"sha": p, "url": f"https://api.github.test/commits/{p}"} for p in parents],
        }

    return _payload


@pytest.fixture
def repository_payload() -> dict[str, Any]:
    return {
        "id": 42,
        "name": "widgets",
        "full_name": "acme/widgets",
        "description": None,
        "html_url": "https://github.com/acme/widgets",
        "stargazers_count": 10,
        "forks_count": 2,
        "watchers_count": 10,
        "language": "Python",
        "created_at": "2020-01-01T00:00:00Z",
        "updated_at": "2024-01-05T15:04:00Z",
        "pushed_at": "2024-01-05T15:04:00Z",
        "default_branch": "main",
        "owner": {"login": "acme", "avatar_url": "https://avatars.example/acme.png"},
        "private": False,
    }
