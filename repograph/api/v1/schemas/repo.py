"""Response models for the repository API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from repograph.models.schemas import Commit, CommitAuthor
from repograph.utils.formatting import format_commit_date, shorten_sha, truncate_message


class CommitSummary(BaseModel):
    sha: str
    short_sha: str
    title: str
    message: str
    author: CommitAuthor
    date_display: str
    parents: list[str] = Field(default_factory=list)
    url: str = ""

    @classmethod
    def from_commit(cls, commit: Commit, title_length: int = 50) -> CommitSummary:
        return cls(
            sha=commit.sha,
            short_sha=shorten_sha(commit.sha),
            title=truncate_message(commit.message, title_length),
            message=commit.message,
            author=commit.author,
            date_display=format_commit_date(commit.author.date),
            parents=list(commit.parents),
            url=commit.url,
        )


class CommitListResponse(BaseModel):
    owner: str
    repo: str
    window: int
    commits: list[CommitSummary] = Field(default_factory=list)


class RepoRefResponse(BaseModel):
    owner: str
    repo: str
    full_name: str
