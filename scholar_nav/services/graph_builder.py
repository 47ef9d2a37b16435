"""Build and incrementally unfold the citation graph (no LLM)."""

from __future__ import annotations

import asyncio
import math
from collections.abc import Iterable
from typing import Protocol

from scholar_nav.models.schemas import Graph, GraphEdge, GraphNode, Paper
from scholar_nav.utils.exceptions import FetchDegradation, NodeNotFoundError
from scholar_nav.utils.logging import get_logger

logger = get_logger(__name__)

PALETTE: tuple[str, ...] = (
    "#F87171",
    "#60A5FA",
    "#34D399",
    "#FBBF24",
    "#A78BFA",
    "#F472B6",
    "#2DD4BF",
    "#FB923C",
)


class CitationSource(Protocol):
    async def citations_of(self, paper_id: str) -> list[Paper]: ...

    async def references_of(self, paper_id: str) -> list[Paper]: ...


def node_weight(citation_count: int) -> float:
    """Display size: log-scaled citation impact, +1 so uncited papers map to 0."""
    return math.log(max(citation_count, 0) + 1) * 2


def make_node(paper: Paper, index: int) -> GraphNode:
    return GraphNode(
        **paper.model_dump(),
        id=paper.paper_id,
        color=PALETTE[index % len(PALETTE)],
        val=node_weight(paper.citation_count),
    )


def build_graph(papers: Iterable[Paper]) -> Graph:
    """One node per distinct paper, no edges."""
    graph = Graph()
    for paper in papers:
        if paper.paper_id in graph.nodes:
            continue
        graph.nodes[paper.paper_id] = make_node(paper, len(graph.nodes))
    logger.info("graph_built", nodes=len(graph.nodes))
    return graph


async def _settle(fetch, paper_id: str, kind: str) -> list[Paper]:
    try:
        return list(await fetch(paper_id))
    except Exception as exc:
        degradation = FetchDegradation(f"{kind} fetch failed for {paper_id}: {exc}")
        logger.warning("unfold_fetch_degraded", node_id=paper_id, kind=kind, error=str(degradation))
        return []


async def unfold(graph: Graph, node_id: str, source: CitationSource) -> Graph:
    """Expand ``node_id`` with its citing and cited papers, in place.

    Only papers not yet in the graph are added, each together with the single
    edge that discovered it, so no edge can dangle. A failed sub-fetch adds
    nothing for its side. The node is marked expanded either way, which makes
    a second call a no-op.
    """
    node = graph.nodes.get(node_id)
    if node is None:
        raise NodeNotFoundError(f"Node {node_id!r} is not in the graph")
    if node.expanded:
        logger.debug("unfold_skipped_already_expanded", node_id=node_id)
        return graph

    citations, references = await asyncio.gather(
        _settle(source.citations_of, node_id, "citations"),
        _settle(source.references_of, node_id, "references"),
    )

    added_nodes = 0
    # Citations first so palette assignment is independent of completion order.
    for paper, citing in [*((p, True) for p in citations), *((p, False) for p in references)]:
        if paper.paper_id in graph.nodes:
            continue
        graph.nodes[paper.paper_id] = make_node(paper, len(graph.nodes))
        if citing:
            graph.edges.append(GraphEdge(source=paper.paper_id, target=node_id))
        else:
            graph.edges.append(GraphEdge(source=node_id, target=paper.paper_id))
        added_nodes += 1

    node.expanded = True
    logger.info(
        "node_unfolded",
        node_id=node_id,
        citations=len(citations),
        references=len(references),
        added=added_nodes,
        total_nodes=len(graph.nodes),
    )
    return graph
