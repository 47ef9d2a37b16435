"""Response models for the graph API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from scholar_nav.models.schemas import Graph, GraphEdge, GraphNode


class GraphResponse(BaseModel):
    """Graph flattened to node/link lists for force-directed renderers."""

    conversation_id: str
    nodes: list[GraphNode] = Field(default_factory=list)
    links: list[GraphEdge] = Field(default_factory=list)
    node_count: int = 0
    edge_count: int = 0

    @classmethod
    def from_graph(cls, conversation_id: str, graph: Graph) -> GraphResponse:
        nodes = list(graph.nodes.values())
        return cls(
            conversation_id=conversation_id,
            nodes=nodes,
            links=list(graph.edges),
            node_count=len(nodes),
            edge_count=len(graph.edges),
        )


class InfluentialPaper(BaseModel):
    id: str
    title: str
    pagerank: float
    degree: int


class NetworkSummary(BaseModel):
    node_count: int
    edge_count: int
    average_degree: float
    most_influential: list[InfluentialPaper] = Field(default_factory=list)


class YearCount(BaseModel):
    year: int
    publications: int


class GraphMetricsResponse(BaseModel):
    conversation_id: str
    pagerank: dict[str, float] = Field(default_factory=dict)
    degree: dict[str, int] = Field(default_factory=dict)
    summary: NetworkSummary
    trend: list[YearCount] = Field(default_factory=list)


class SimilarPapersResponse(BaseModel):
    conversation_id: str
    node_id: str
    papers: list[GraphNode] = Field(default_factory=list)
