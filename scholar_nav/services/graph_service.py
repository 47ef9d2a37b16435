"""Owner of one session's citation graph."""

from __future__ import annotations

from typing import Any

from scholar_nav.models.schemas import Graph, GraphNode, Paper
from scholar_nav.services import analytics
from scholar_nav.services.graph_builder import CitationSource, build_graph, unfold
from scholar_nav.utils.exceptions import GraphNotReadyError, NodeNotFoundError


class GraphService:
    """High-level graph operations: build, unfold, analytics."""

    def __init__(self, source: CitationSource) -> None:
        self._source = source
        self._graph: Graph | None = None

    @property
    def graph(self) -> Graph | None:
        return self._graph

    def build(self, papers: list[Paper]) -> Graph:
        self._graph = build_graph(papers)
        return self._graph

    async def unfold(self, node_id: str) -> Graph:
        return await unfold(self._require_graph(), node_id, self._source)

    def metrics(self, top_n: int = 5) -> dict[str, Any]:
        graph = self._require_graph()
        return {
            "pagerank": analytics.pagerank(graph),
            "degree": analytics.degree_centrality(graph),
            "summary": analytics.network_summary(graph, top_n=top_n),
            "trend": analytics.publication_trend(graph.nodes.values()),
        }

    def similar(self, node_id: str, top_k: int = 5) -> list[GraphNode]:
        graph = self._require_graph()
        target = graph.nodes.get(node_id)
        if target is None:
            raise NodeNotFoundError(f"Node {node_id!r} is not in the graph")
        return analytics.find_similar_papers(target, graph.nodes.values(), top_k=top_k)

    def _require_graph(self) -> Graph:
        if self._graph is None:
            raise GraphNotReadyError("No graph has been built for this conversation yet")
        return self._graph
