"""Commit graph builder: lineage inference, layout and edge classification.

Turns a flat, newest-first commit list (SHA + parent SHAs only) into nodes on a
lane grid and edges tagged as mainline or merge. Pure code: no I/O, no state
kept between calls.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from repograph.models.schemas import (
    Commit,
    CommitGraph,
    GraphEdge,
    GraphNode,
    Position,
)

BRANCH_COLORS: tuple[str, ...] = (
    "#a855f7",  # purple
    "#06b6d4",  # cyan
    "#22c55e",  # green
    "#f97316",  # orange
    "#ec4899",  # pink
    "#3b82f6",  # blue
    "#eab308",  # yellow
    "#ef4444",  # red
)

ROW_HEIGHT = 80
BASE_X = 100
LANE_WIDTH = 40


def lineage_color(lineage: int) -> str:
    """Palette color for a lineage. Ids that differ by the palette size share a color."""
    return BRANCH_COLORS[lineage % len(BRANCH_COLORS)]


def lineage_label(lineage: int) -> str:
    return f"branch-{lineage}"


def node_position(index: int, lineage: int) -> Position:
    # One lane per lineage id; lanes are never compacted.
    return Position(x=BASE_X + lineage * LANE_WIDTH, y=index * ROW_HEIGHT)


@dataclass
class _LineageTracker:
    """SHA -> lineage bookkeeping for exactly one build call."""

    assigned: dict[str, int] = field(default_factory=dict)
    next_id: int = 0

    def get(self, sha: str) -> int | None:
        return self.assigned.get(sha)

    def mint(self) -> int:
        lineage = self.next_id
        self.next_id += 1
        return lineage

    def tag(self, sha: str, lineage: int) -> None:
        # First assignment wins.
        self.assigned.setdefault(sha, lineage)

    def resolve(self, commit: Commit) -> int:
        lineage = self.get(commit.sha)
        if lineage is None:
            lineage = self.mint()
            self.assigned[commit.sha] = lineage
        return lineage

    def propagate(self, commit: Commit, lineage: int) -> None:
        parents = commit.parents
        if parents:
            self.tag(parents[0], lineage)
        if len(parents) > 1 and self.get(parents[1]) is None:
            self.tag(parents[1], self.mint())


def _edges_for(
    commit: Commit,
    lineage: int,
    present: set[str],
    tracker: _LineageTracker,
) -> list[GraphEdge]:
    color = lineage_color(lineage)
    edges: list[GraphEdge] = []
    for index, parent_sha in enumerate(commit.parents):
        if parent_sha not in present:
            continue
        if index == 0:
            edges.append(GraphEdge(
                id=f"{commit.sha}-{parent_sha}",
                source=commit.sha,
                target=parent_sha,
                kind="default",
                color=color,
                emphasized=False,
            ))
            continue
        parent_lineage = tracker.get(parent_sha)
        edges.append(GraphEdge(
            id=f"{commit.sha}-{parent_sha}",
            source=commit.sha,
            target=parent_sha,
            kind="merge",
            color=lineage_color(parent_lineage if parent_lineage is not None else lineage),
            emphasized=True,
        ))
    return edges


def build_commit_graph(commits: Sequence[Commit]) -> CommitGraph:
    """Build the renderable graph for an ordered commit window.

    ``commits`` must be an ordered sequence, newest first, deduplicated by SHA.
    The order is part of the contract: it is both the vertical layout order and
    the traversal order for lineage inference, so a reordered input yields a
    different (but still deterministic) lineage assignment.

    Lineage rules, applied once per commit in input order:

    * a commit keeps the lineage a descendant already tagged it with, or gets
      a fresh one if nothing has referenced it yet;
    * its first parent inherits that lineage unless already tagged;
    * a merge commit's second parent gets a freshly minted lineage unless
      already tagged; further (octopus) parents never mint.

    Edges are only emitted for parents inside the window. First-parent edges
    are ``default`` in the child's color; later parents are ``merge`` edges,
    emphasized, in the parent's lineage color.
    """
    tracker = _LineageTracker()
    present = {c.sha for c in commits}
    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []

    for index, commit in enumerate(commits):
        lineage = tracker.resolve(commit)
        tracker.propagate(commit, lineage)

        nodes.append(GraphNode(
            id=commit.sha,
            kind="merge" if commit.is_merge else "commit",
            position=node_position(index, lineage),
            commit=commit,
            lineage=lineage,
            lineage_label=lineage_label(lineage),
            color=lineage_color(lineage),
        ))
        edges.extend(_edges_for(commit, lineage, present, tracker))

    return CommitGraph(nodes=nodes, edges=edges, lineage_count=tracker.next_id)
