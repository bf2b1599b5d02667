"""Repository service: batch GitHub fetches and commit graph construction."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import TypeAdapter, ValidationError

from repograph.config import Settings
from repograph.graph.builder import build_commit_graph
from repograph.models.schemas import (
    Branch,
    Commit,
    CommitActivity,
    CommitGraph,
    Contributor,
    Repository,
    RepositoryOverview,
)
from repograph.services.cache_service import CacheService, cache_key
from repograph.services.github_client import GitHubClient
from repograph.utils.exceptions import CacheError, RepoGraphError
from repograph.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_COMMITS = TypeAdapter(list[Commit])
_BRANCHES = TypeAdapter(list[Branch])
_CONTRIBUTORS = TypeAdapter(list[Contributor])
_ACTIVITY = TypeAdapter(list[CommitActivity])
_REPOSITORY = TypeAdapter(Repository)


class RepoService:
    """High-level operations over one GitHub client and an optional cache."""

    def __init__(
        self,
        github: GitHubClient,
        settings: Settings,
        cache: CacheService | None = None,
    ) -> None:
        self._github = github
        self._settings = settings
        self._cache = cache

    def resolve_window(self, window: int | None) -> int:
        """Requested window clamped to ``1..MAX_COMMIT_WINDOW``; None means the configured default."""
        if window is None:
            window = self._settings.COMMIT_WINDOW
        return max(1, min(window, self._settings.MAX_COMMIT_WINDOW))

    async def _cached(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        adapter: TypeAdapter[T],
    ) -> T:
        if self._cache is not None:
            try:
                hit: Any = await self._cache.get(key)
            except CacheError as exc:
                logger.warning("cache_read_failed", key=key, error=str(exc))
                hit = None
            if hit is not None:
                try:
                    value = adapter.validate_python(hit)
                except ValidationError as exc:
                    # Written by an older schema; refetch and overwrite.
                    logger.warning("cache_entry_invalid", key=key, errors=exc.error_count())
                else:
                    logger.debug("cache_hit", key=key)
                    return value

        value = await loader()

        if self._cache is not None:
            try:
                await self._cache.set(
                    key,
                    adapter.dump_python(value, mode="json"),
                    ttl=self._settings.CACHE_TTL_SECONDS,
                )
            except CacheError as exc:
                logger.warning("cache_write_failed", key=key, error=str(exc))
        return value

    async def get_repository(self, owner: str, repo: str) -> Repository:
        return await self._cached(
            cache_key("repo", owner, repo),
            lambda: self._github.get_repository(owner, repo),
            _REPOSITORY,
        )

    async def get_commits(self, owner: str, repo: str, window: int | None = None) -> list[Commit]:
        limit = self.resolve_window(window)
        return await self._cached(
            cache_key("commits", owner, repo, limit),
            lambda: self._github.list_commits(owner, repo, limit=limit),
            _COMMITS,
        )

    async def get_branches(self, owner: str, repo: str) -> list[Branch]:
        limit = self._settings.BRANCHES_LIMIT
        return await self._cached(
            cache_key("branches", owner, repo, limit),
            lambda: self._github.list_branches(owner, repo, limit=limit),
            _BRANCHES,
        )

    async def get_contributors(self, owner: str, repo: str) -> list[Contributor]:
        limit = self._settings.CONTRIBUTORS_LIMIT
        return await self._cached(
            cache_key("contributors", owner, repo, limit),
            lambda: self._github.list_contributors(owner, repo, limit=limit),
            _CONTRIBUTORS,
        )

    async def get_activity(self, owner: str, repo: str) -> list[CommitActivity]:
        # Not cached: GitHub returns an empty 202 while stats are computing.
        return await self._github.get_commit_activity(owner, repo)

    async def build_graph(self, owner: str, repo: str, window: int | None = None) -> CommitGraph:
        commits = await self.get_commits(owner, repo, window)
        return self._build(owner, repo, commits)

    async def fetch_overview(self, owner: str, repo: str, window: int | None = None) -> RepositoryOverview:
        """Fetch everything the overview needs as one batch.

        All five fetches run concurrently. If any of them fails the whole
        overview fails with that error; partial results are discarded.
        """
        try:
            repository, commits, branches, contributors, activity = await asyncio.gather(
                self.get_repository(owner, repo),
                self.get_commits(owner, repo, window),
                self.get_branches(owner, repo),
                self.get_contributors(owner, repo),
                self.get_activity(owner, repo),
            )
        except RepoGraphError as exc:
            logger.warning("overview_fetch_failed", owner=owner, repo=repo, error=str(exc))
            raise

        return RepositoryOverview(
            repository=repository,
            commits=commits,
            branches=branches,
            contributors=contributors,
            activity=activity,
            graph=self._build(owner, repo, commits),
        )

    def _build(self, owner: str, repo: str, commits: list[Commit]) -> CommitGraph:
        start = time.monotonic()
        graph = build_commit_graph(commits)
        logger.info(
            "graph_built",
            owner=owner,
            repo=repo,
            nodes=graph.node_count,
            edges=graph.edge_count,
            lineages=graph.lineage_count,
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )
        return graph
