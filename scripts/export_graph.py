"""Export a repository's commit graph from GitHub to a JSON file.

Usage:
    python scripts/export_graph.py facebook/react --window 200 --output react.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from repograph.config import get_settings
from repograph.services.github_client import GitHubClient
from repograph.services.repo_service import RepoService
from repograph.utils.exceptions import RepoGraphError
from repograph.utils.logging import setup_logging
from repograph.utils.repo_ref import parse_repo_ref


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build and export a commit graph")
    parser.add_argument("repository", help="owner/repo or GitHub URL")
    parser.add_argument(
        "--window",
        type=int,
        default=None,
        help="Number of most recent commits (default: COMMIT_WINDOW setting)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output file (default: graph_<owner>_<repo>.json)",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(log_level="INFO", log_format="console")
    settings = get_settings()

    try:
        ref = parse_repo_ref(args.repository)
    except RepoGraphError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    github = GitHubClient(settings)
    try:
        service = RepoService(github, settings)
        graph = await service.build_graph(ref.owner, ref.name, args.window)
    except RepoGraphError as exc:
        print(f"Export failed: {exc}", file=sys.stderr)
        return 1
    finally:
        await github.close()

    output = args.output or Path(f"graph_{ref.owner}_{ref.name}.json")
    output.write_text(json.dumps(graph.model_dump(mode="json"), indent=2), encoding="utf-8")
    print(f"Graph exported to {output}")
    print(f"  Nodes: {graph.node_count}")
    print(f"  Edges: {graph.edge_count}")
    print(f"  Lineages: {graph.lineage_count}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
