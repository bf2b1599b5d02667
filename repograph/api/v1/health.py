"""Health and readiness probe endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from repograph.api.dependencies import get_github
from repograph.services.github_client import GitHubClient
from repograph.utils.exceptions import GitHubAPIError

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(github: GitHubClient = Depends(get_github)) -> dict:
    try:
        quota = await github.get_rate_limit()
    except GitHubAPIError as exc:
        return {"status": "not_ready", "github": False, "error": str(exc)}
    status = "ready" if quota["remaining"] > 0 else "degraded"
    return {"status": status, "github": True, "rate_limit": quota}
