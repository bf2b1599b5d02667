"""Internal Pydantic models for data flowing from GitHub through the graph builder."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field


# ── Commit records (builder input) ───────────────────────────────────


class CommitAuthor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = "Unknown"
    email: str = ""
    date: str = ""  # ISO-8601 as reported by GitHub; may be empty
    avatar_url: str | None = None


class Commit(BaseModel):
    """A single commit as seen by the graph builder.

    Built once at the fetch boundary; the builder never sees raw API payloads.
    """

    model_config = ConfigDict(frozen=True)

    sha: str
    parents: tuple[str, ...] = ()
    message: str = ""
    author: CommitAuthor = Field(default_factory=CommitAuthor)
    url: str = ""

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


# ── Repository metadata ──────────────────────────────────────────────


class RepositoryOwner(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str
    avatar_url: str = ""


class Repository(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    full_name: str
    description: str | None = None
    html_url: str
    stargazers_count: int = 0
    forks_count: int = 0
    watchers_count: int = 0
    language: str | None = None
    created_at: str = ""
    updated_at: str = ""
    pushed_at: str = ""
    default_branch: str = "main"
    owner: RepositoryOwner


class BranchCommit(BaseModel):
    model_config = ConfigDict(frozen=True)

    sha: str
    url: str = ""


class Branch(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    commit: BranchCommit
    protected: bool = False


class Contributor(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str
    avatar_url: str = ""
    contributions: int = 0
    html_url: str = ""


class CommitActivity(BaseModel):
    model_config = ConfigDict(frozen=True)

    week: int  # unix timestamp of the week's Sunday
    total: int = 0
    days: tuple[int, ...] = ()


# ── Graph output ─────────────────────────────────────────────────────


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class GraphNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: Literal["commit", "merge"]
    position: Position
    commit: Commit
    lineage: int
    lineage_label: str
    color: str


class GraphEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    source: str
    target: str
    kind: Literal["default", "merge"]
    color: str
    emphasized: bool = False


class CommitGraph(BaseModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    lineage_count: int = 0

    @computed_field
    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @computed_field
    @property
    def edge_count(self) -> int:
        return len(self.edges)


class RepositoryOverview(BaseModel):
    repository: Repository
    commits: list[Commit] = Field(default_factory=list)
    branches: list[Branch] = Field(default_factory=list)
    contributors: list[Contributor] = Field(default_factory=list)
    activity: list[CommitActivity] = Field(default_factory=list)
    graph: CommitGraph = Field(default_factory=CommitGraph)
