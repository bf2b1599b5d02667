"""Commit graph construction."""

from __future__ import annotations

from repograph.graph.builder import (
    BRANCH_COLORS,
    build_commit_graph,
    lineage_color,
)

__all__ = [
    "BRANCH_COLORS",
    "build_commit_graph",
    "lineage_color",
]
