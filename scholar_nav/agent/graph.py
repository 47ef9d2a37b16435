"""LangGraph definition for one conversation turn.

    START → respond → progress ─┬─→ END
                                └─→ search → build_graph → END
"""

from __future__ import annotations

import functools
from typing import Any

from langgraph.graph import END, START, StateGraph

from scholar_nav.agent.edges import route_after_progress
from scholar_nav.agent.nodes.progress import progress_node
from scholar_nav.agent.nodes.respond import respond_node
from scholar_nav.agent.nodes.search import PaperSearch, build_graph_node, search_node
from scholar_nav.agent.state import TurnState
from scholar_nav.models.orchestrator import InferenceOrchestrator
from scholar_nav.services.graph_service import GraphService


def build_turn_graph(
    orchestrator: InferenceOrchestrator | None,
    paper_search: PaperSearch,
    graph_service: GraphService,
) -> StateGraph:
    """Build the turn StateGraph with collaborators bound into each node."""
    _respond = functools.partial(respond_node, orchestrator=orchestrator)
    _search = functools.partial(search_node, paper_search=paper_search)
    _build_graph = functools.partial(build_graph_node, graph_service=graph_service)

    graph = StateGraph(TurnState)

    graph.add_node("respond", _respond)
    graph.add_node("progress", progress_node)
    graph.add_node("search", _search)
    graph.add_node("build_graph", _build_graph)

    graph.add_edge(START, "respond")
    graph.add_edge("respond", "progress")
    graph.add_conditional_edges(
        "progress",
        route_after_progress,
        {"search": "search", END: END},
    )
    graph.add_edge("search", "build_graph")
    graph.add_edge("build_graph", END)

    return graph


def compile_turn_graph(
    orchestrator: InferenceOrchestrator | None,
    paper_search: PaperSearch,
    graph_service: GraphService,
) -> Any:
    return build_turn_graph(orchestrator, paper_search, graph_service).compile()
