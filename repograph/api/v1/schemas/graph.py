"""Response models for the graph API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from repograph.models.schemas import GraphEdge, GraphNode


class GraphResponse(BaseModel):
    owner: str
    repo: str
    window: int
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    node_count: int = 0
    edge_count: int = 0
    lineage_count: int = 0
