"""Graph analytics over a snapshot: PageRank, degree, embedding similarity, trends."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Sequence

from scholar_nav.models.schemas import Graph, GraphNode


def pagerank(graph: Graph, damping: float = 0.85, iterations: int = 100) -> dict[str, float]:
    """Power-iteration PageRank with a fixed iteration count.

    Out-degree 0 is taken as 1 and the rank held by such dangling nodes is
    not spread over all n nodes, so total mass leaks when they exist.
    """
    n = len(graph.nodes)
    if n == 0:
        return {}

    in_links: dict[str, list[str]] = {node_id: [] for node_id in graph.nodes}
    out_degree: dict[str, int] = {node_id: 0 for node_id in graph.nodes}
    for edge in graph.edges:
        if edge.source in out_degree and edge.target in in_links:
            out_degree[edge.source] += 1
            in_links[edge.target].append(edge.source)

    ranks = {node_id: 1 / n for node_id in graph.nodes}
    base = (1 - damping) / n
    for _ in range(iterations):
        ranks = {
            node_id: base
            + damping * sum(ranks[src] / (out_degree[src] or 1) for src in in_links[node_id])
            for node_id in graph.nodes
        }
    return ranks


def degree_centrality(graph: Graph) -> dict[str, int]:
    """Undirected degree: edges touching each node, in one pass over the edges."""
    degrees = {node_id: 0 for node_id in graph.nodes}
    for edge in graph.edges:
        degrees[edge.source] = degrees.get(edge.source, 0) + 1
        degrees[edge.target] = degrees.get(edge.target, 0) + 1
    return degrees


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between ``a`` and ``b``; 0.0 for mismatched or zero vectors."""
    if len(a) != len(b) or not a:
        return 0.0
    dot = math.fsum(x * y for x, y in zip(a, b))
    norm = math.sqrt(math.fsum(x * x for x in a)) * math.sqrt(math.fsum(y * y for y in b))
    if norm == 0:
        return 0.0
    return dot / norm


def find_similar_papers(
    target: GraphNode,
    nodes: Iterable[GraphNode],
    top_k: int = 5,
) -> list[GraphNode]:
    """Nearest neighbours of ``target`` by embedding, most similar first."""
    if target.embedding is None or not target.embedding.vector:
        return []

    scored = [
        (cosine_similarity(target.embedding.vector, node.embedding.vector), node)
        for node in nodes
        if node.id != target.id and node.embedding is not None and node.embedding.vector
    ]
    # sorted() is stable, so equal scores keep their original order.
    scored = sorted(scored, key=lambda pair: pair[0], reverse=True)
    return [node for _, node in scored[:top_k]]


def network_summary(graph: Graph, top_n: int = 5) -> dict:
    ranks = pagerank(graph)
    degrees = degree_centrality(graph)
    top = sorted(ranks.items(), key=lambda item: item[1], reverse=True)[:top_n]
    return {
        "node_count": len(graph.nodes),
        "edge_count": len(graph.edges),
        "average_degree": (sum(degrees.values()) / len(degrees)) if degrees else 0.0,
        "most_influential": [
            {
                "id": node_id,
                "title": graph.nodes[node_id].title,
                "pagerank": rank,
                "degree": degrees.get(node_id, 0),
            }
            for node_id, rank in top
        ],
    }


def publication_trend(nodes: Iterable[GraphNode]) -> list[dict[str, int]]:
    """Papers per publication year, oldest first."""
    counts = Counter(node.year for node in nodes if node.year is not None)
    return [{"year": year, "publications": counts[year]} for year in sorted(counts)]
