"""Async GitHub REST client that maps raw payloads onto typed records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from repograph.config import Settings
from repograph.models.schemas import (
    Branch,
    Commit,
    CommitActivity,
    Contributor,
    Repository,
)
from repograph.utils.exceptions import (
    GitHubAPIError,
    RateLimitError,
    RepositoryNotFoundError,
)
from repograph.utils.logging import get_logger
from repograph.utils.rate_limiter import RequestThrottle
from repograph.utils.retry import async_retry

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

_MAX_PER_PAGE = 100  # GitHub caps per_page at 100


# ── Payload mapping ──────────────────────────────────────────────────


def to_commit(raw: dict[str, Any]) -> Commit:
    """Map a ``GET /repos/{o}/{r}/commits`` item onto a Commit."""
    git = raw.get("commit") or {}
    git_author = git.get("author") or {}
    gh_user = raw.get("author") or {}
    return Commit.model_validate({
        "sha": raw["sha"],
        "parents": [p["sha"] for p in raw.get("parents") or []],
        "message": git.get("message") or "",
        "author": {
            "name": git_author.get("name") or "Unknown",
            "email": git_author.get("email") or "",
            "date": git_author.get("date") or "",
            "avatar_url": gh_user.get("avatar_url"),
        },
        "url": raw.get("html_url") or "",
    })


def to_repository(raw: dict[str, Any]) -> Repository:
    owner = raw.get("owner") or {}
    return Repository.model_validate({
        **{k: raw.get(k) for k in Repository.model_fields if k != "owner" and raw.get(k) is not None},
        "owner": {"login": owner.get("login", ""), "avatar_url": owner.get("avatar_url") or ""},
    })


def to_branch(raw: dict[str, Any]) -> Branch:
    commit = raw.get("commit") or {}
    return Branch.model_validate({
        "name": raw["name"],
        "commit": {"sha": commit.get("sha", ""), "url": commit.get("url") or ""},
        "protected": bool(raw.get("protected", False)),
    })


def to_contributor(raw: dict[str, Any]) -> Contributor:
    return Contributor.model_validate({
        "login": raw["login"],
        "avatar_url": raw.get("avatar_url") or "",
        "contributions": raw.get("contributions") or 0,
        "html_url": raw.get("html_url") or "",
    })


def to_activity(raw: dict[str, Any]) -> CommitActivity:
    return CommitActivity.model_validate({
        "week": raw["week"],
        "total": raw.get("total") or 0,
        "days": raw.get("days") or [],
    })


def _map_all(items: list[dict[str, Any]], mapper: Callable[[dict[str, Any]], M], what: str) -> list[M]:
    try:
        return [mapper(item) for item in items]
    except (KeyError, TypeError, ValidationError) as exc:
        raise GitHubAPIError(f"Unexpected {what} payload from GitHub: {exc}") from exc


# ── Client ───────────────────────────────────────────────────────────


class GitHubClient:
    """Thin async wrapper over the GitHub REST API.

    Every public method returns validated, frozen models so downstream code
    (the graph builder in particular) never handles raw JSON. Transient
    failures are retried; 4xx responses are translated into domain errors.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": settings.GITHUB_API_VERSION,
            "User-Agent": "repograph",
        }
        if settings.GITHUB_TOKEN:
            headers["Authorization"] = f"Bearer {settings.GITHUB_TOKEN}"
        self._client = httpx.AsyncClient(
            base_url=settings.GITHUB_API_URL,
            headers=headers,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            follow_redirects=True,
            transport=transport,
        )
        self._throttle = RequestThrottle(
            rate=settings.RATE_LIMIT_REQUESTS_PER_SEC,
            max_concurrent=settings.MAX_FETCH_CONCURRENT,
        )
        self._get = async_retry(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            retryable_exceptions=(httpx.TransportError, httpx.HTTPStatusError),
        )(self._send_get)

    async def close(self) -> None:
        await self._client.aclose()

    async def _send_get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        async with self._throttle:
            resp = await self._client.get(path, params=params)
        resp.raise_for_status()
        return resp

    async def _get_json(self, path: str, resource: str, params: dict[str, Any] | None = None) -> Any:
        try:
            resp = await self._get(path, params)
        except httpx.HTTPStatusError as exc:
            raise _translate_status_error(exc, resource) from exc
        except httpx.RequestError as exc:
            logger.error("github_unreachable", path=path, error=str(exc))
            raise GitHubAPIError(f"Could not reach GitHub: {exc}") from exc

        # 202 Accepted: statistics still being computed, no body yet.
        if resp.status_code == 202 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise GitHubAPIError("GitHub returned a malformed JSON response", resp.status_code) from exc

    async def _paginate(
        self,
        path: str,
        resource: str,
        limit: int,
        params: dict[str, Any] | None = None,
        unique_by: str | None = None,
    ) -> list[dict[str, Any]]:
        """Collect up to ``limit`` items, dropping repeats of ``unique_by`` as pages arrive."""
        per_page = min(_MAX_PER_PAGE, limit)
        items: list[dict[str, Any]] = []
        seen: set[Any] = set()
        page = 1
        while len(items) < limit:
            data = await self._get_json(
                path, resource, {**(params or {}), "per_page": per_page, "page": page},
            )
            if not isinstance(data, list):
                break
            for item in data:
                marker = item.get(unique_by) if unique_by and isinstance(item, dict) else None
                if marker is not None:
                    if marker in seen:
                        continue
                    seen.add(marker)
                items.append(item)
            if len(data) < per_page:
                break
            page += 1
        return items[:limit]

    async def get_repository(self, owner: str, repo: str) -> Repository:
        resource = f"{owner}/{repo}"
        data = await self._get_json(f"/repos/{owner}/{repo}", resource)
        if not isinstance(data, dict):
            raise GitHubAPIError(f"Unexpected repository payload for {resource}")
        return _map_all([data], to_repository, "repository")[0]

    async def list_commits(self, owner: str, repo: str, limit: int = 100) -> list[Commit]:
        """Most recent ``limit`` commits of the default branch, newest first, unique by SHA."""
        # A push between pages can shift items onto the next page.
        raw = await self._paginate(
            f"/repos/{owner}/{repo}/commits", f"{owner}/{repo}", limit, unique_by="sha",
        )
        commits = _map_all(raw, to_commit, "commit")
        logger.info("commits_fetched", owner=owner, repo=repo, count=len(commits), limit=limit)
        return commits

    async def list_branches(self, owner: str, repo: str, limit: int = 100) -> list[Branch]:
        raw = await self._paginate(f"/repos/{owner}/{repo}/branches", f"{owner}/{repo}", limit)
        return _map_all(raw, to_branch, "branch")

    async def list_contributors(self, owner: str, repo: str, limit: int = 20) -> list[Contributor]:
        raw = await self._paginate(f"/repos/{owner}/{repo}/contributors", f"{owner}/{repo}", limit)
        # Anonymous contributors have no login.
        return _map_all([c for c in raw if c.get("login")], to_contributor, "contributor")

    async def get_commit_activity(self, owner: str, repo: str) -> list[CommitActivity]:
        data = await self._get_json(f"/repos/{owner}/{repo}/stats/commit_activity", f"{owner}/{repo}")
        if not isinstance(data, list):
            logger.info("commit_activity_pending", owner=owner, repo=repo)
            return []
        return _map_all(data, to_activity, "commit activity")

    async def get_rate_limit(self) -> dict[str, int]:
        """Core quota: ``{limit, remaining, reset}``."""
        data = await self._get_json("/rate_limit", "rate_limit")
        core = ((data or {}).get("resources") or {}).get("core") or (data or {}).get("rate") or {}
        return {
            "limit": int(core.get("limit", 0)),
            "remaining": int(core.get("remaining", 0)),
            "reset": int(core.get("reset", 0)),
        }


def _translate_status_error(exc: httpx.HTTPStatusError, resource: str) -> GitHubAPIError:
    resp = exc.response
    status = resp.status_code
    try:
        body = resp.json()
        detail = body.get("message", "") if isinstance(body, dict) else ""
    except ValueError:
        detail = ""

    if status == 404:
        return RepositoryNotFoundError(f"Repository not found: {resource}", status)

    if status == 429 or (status == 403 and resp.headers.get("X-RateLimit-Remaining") == "0"):
        reset_at = None
        reset_raw = resp.headers.get("X-RateLimit-Reset")
        if reset_raw and reset_raw.isdigit():
            reset_at = datetime.fromtimestamp(int(reset_raw), tz=timezone.utc)
        message = "GitHub API rate limit exceeded"
        if reset_at:
            message += f"; try again after {reset_at:%H:%M} UTC"
        logger.warning("github_rate_limited", resource=resource, reset_at=str(reset_at))
        return RateLimitError(message, status, reset_at=reset_at)

    logger.error("github_request_failed", resource=resource, status=status, detail=detail)
    message = f"GitHub API error ({status})"
    if detail:
        message += f": {detail}"
    return GitHubAPIError(message, status)
