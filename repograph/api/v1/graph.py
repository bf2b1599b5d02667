"""Graph API endpoints: build and export commit graphs."""

from __future__ import annotations

import json
from typing import Literal

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from repograph.api.dependencies import WindowQuery, get_repo_service
from repograph.api.v1.schemas.graph import GraphResponse
from repograph.services.repo_service import RepoService
from repograph.utils.formatting import shorten_sha, truncate_message
from repograph.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/graph", tags=["graph"])


@router.get("/{owner}/{repo}", response_model=GraphResponse)
async def get_graph(
    owner: str,
    repo: str,
    window: WindowQuery = None,
    service: RepoService = Depends(get_repo_service),
) -> GraphResponse:
    """Commit graph for the most recent ``window`` commits (React Flow compatible)."""
    graph = await service.build_graph(owner, repo, window)
    return GraphResponse(
        owner=owner,
        repo=repo,
        window=service.resolve_window(window),
        nodes=graph.nodes,
        edges=graph.edges,
        node_count=graph.node_count,
        edge_count=graph.edge_count,
        lineage_count=graph.lineage_count,
    )


@router.get("/{owner}/{repo}/export")
async def export_graph(
    owner: str,
    repo: str,
    format: Literal["json", "graphml"] = "json",
    window: WindowQuery = None,
    service: RepoService = Depends(get_repo_service),
) -> Response:
    """Export the commit graph in JSON or GraphML format."""
    graph_data = await get_graph(owner, repo, window, service)
    filename = f"graph_{owner}_{repo}"

    if format == "json":
        content = json.dumps(graph_data.model_dump(mode="json"), indent=2)
        return Response(
            content=content,
            media_type="application/json",
            headers={"Content-Disposition": f"attachment; filename={filename}.json"},
        )

    logger.info("graph_exported", owner=owner, repo=repo, format=format, nodes=graph_data.node_count)
    return Response(
        content=to_graphml(graph_data),
        media_type="application/xml",
        headers={"Content-Disposition": f"attachment; filename={filename}.graphml"},
    )


def to_graphml(graph: GraphResponse) -> str:
    """Convert a graph response to GraphML XML."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<graphml xmlns="http://graphml.graphdrawing.org/xmlns">',
        '  <key id="label" for="node" attr.name="label" attr.type="string"/>',
        '  <key id="lineage" for="node" attr.name="lineage" attr.type="int"/>',
        '  <key id="color" for="all" attr.name="color" attr.type="string"/>',
        '  <key id="x" for="node" attr.name="x" attr.type="double"/>',
        '  <key id="y" for="node" attr.name="y" attr.type="double"/>',
        '  <key id="kind" for="all" attr.name="kind" attr.type="string"/>',
        '  <key id="emphasized" for="edge" attr.name="emphasized" attr.type="boolean"/>',
        '  <graph id="G" edgedefault="directed">',
    ]

    for node in graph.nodes:
        label = f"{shorten_sha(node.id)} {truncate_message(node.commit.message)}".rstrip()
        lines.append(f'    <node id="{_xml_escape(node.id)}">')
        lines.append(f'      <data key="label">{_xml_escape(label)}</data>')
        lines.append(f'      <data key="lineage">{node.lineage}</data>')
        lines.append(f'      <data key="color">{node.color}</data>')
        lines.append(f'      <data key="x">{node.position.x}</data>')
        lines.append(f'      <data key="y">{node.position.y}</data>')
        lines.append(f'      <data key="kind">{node.kind}</data>')
        lines.append("    </node>")

    for edge in graph.edges:
        lines.append(
            f'    <edge id="{_xml_escape(edge.id)}" source="{_xml_escape(edge.source)}" '
            f'target="{_xml_escape(edge.target)}">'
        )
        lines.append(f'      <data key="kind">{edge.kind}</data>')
        lines.append(f'      <data key="color">{edge.color}</data>')
        lines.append(f'      <data key="emphasized">{str(edge.emphasized).lower()}</data>')
        lines.append("    </edge>")

    lines.append("  </graph>")
    lines.append("</graphml>")
    return "\n".join(lines)


def _xml_escape(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")
