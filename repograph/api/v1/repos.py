"""Repository API endpoints: overview, raw records and reference parsing."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from repograph.api.dependencies import WindowQuery, get_repo_service
from repograph.api.v1.schemas.repo import CommitListResponse, CommitSummary, RepoRefResponse
from repograph.models.schemas import Branch, CommitActivity, Contributor, RepositoryOverview
from repograph.services.repo_service import RepoService
from repograph.utils.repo_ref import parse_repo_ref

router = APIRouter(prefix="/repos", tags=["repos"])


@router.get("/resolve", response_model=RepoRefResponse)
async def resolve(ref: str = Query(..., min_length=1, examples=["facebook/react"])) -> RepoRefResponse:
    """Parse ``owner/repo`` or a GitHub URL."""
    parsed = parse_repo_ref(ref)
    return RepoRefResponse(owner=parsed.owner, repo=parsed.name, full_name=parsed.full_name)


@router.get("/{owner}/{repo}", response_model=RepositoryOverview)
async def get_overview(
    owner: str,
    repo: str,
    window: WindowQuery = None,
    service: RepoService = Depends(get_repo_service),
) -> RepositoryOverview:
    """Repository metadata, commits, branches, contributors, activity and the commit graph."""
    return await service.fetch_overview(owner, repo, window)


@router.get("/{owner}/{repo}/commits", response_model=CommitListResponse)
async def get_commits(
    owner: str,
    repo: str,
    window: WindowQuery = None,
    title_length: int = Query(default=50, ge=1, le=500),
    service: RepoService = Depends(get_repo_service),
) -> CommitListResponse:
    commits = await service.get_commits(owner, repo, window)
    return CommitListResponse(
        owner=owner,
        repo=repo,
        window=service.resolve_window(window),
        commits=[CommitSummary.from_commit(c, title_length) for c in commits],
    )


@router.get("/{owner}/{repo}/branches", response_model=list[Branch])
async def get_branches(
    owner: str,
    repo: str,
    service: RepoService = Depends(get_repo_service),
) -> list[Branch]:
    return await service.get_branches(owner, repo)


@router.get("/{owner}/{repo}/contributors", response_model=list[Contributor])
async def get_contributors(
    owner: str,
    repo: str,
    service: RepoService = Depends(get_repo_service),
) -> list[Contributor]:
    return await service.get_contributors(owner, repo)


@router.get("/{owner}/{repo}/activity", response_model=list[CommitActivity])
async def get_activity(
    owner: str,
    repo: str,
    service: RepoService = Depends(get_repo_service),
) -> list[CommitActivity]:
    return await service.get_activity(owner, repo)
