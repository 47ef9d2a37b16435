"""Search and graph nodes: hand the refined intent to paper search, then build the graph."""

from __future__ import annotations

from typing import Any, Protocol

from scholar_nav.agent.nodes.progress import derive_search_params
from scholar_nav.agent.prompts.research_architect import APOLOGY, SEARCH_TRANSITION
from scholar_nav.models.schemas import ConversationMessage, ConversationStatus, Paper
from scholar_nav.services.graph_service import GraphService
from scholar_nav.utils.logging import get_logger

logger = get_logger(__name__)


class PaperSearch(Protocol):
    async def search(
        self,
        query: str,
        year_start: int | None = None,
        year_end: int | None = None,
    ) -> list[Paper]: ...


async def search_node(
    state: dict[str, Any],
    *,
    paper_search: PaperSearch,
) -> dict[str, Any]:
    transcript: list[ConversationMessage] = state["transcript"]
    # Everything before the reply that fired the trigger.
    params = derive_search_params(transcript[:-1])

    emitted = [ConversationMessage(role="assistant", content=SEARCH_TRANSITION)]

    try:
        papers = await paper_search.search(params.query, params.year_start, params.year_end)
    except Exception as exc:
        logger.error("search_node_failed", query=params.query, error=str(exc))
        emitted.append(ConversationMessage(role="assistant", content=APOLOGY))
        papers = []

    logger.info(
        "search_node_complete",
        query=params.query,
        year_start=params.year_start,
        papers=len(papers),
    )
    return {
        "transcript": [*transcript, *emitted],
        "emitted": emitted,
        "search_params": params,
        "papers": papers,
        "status": ConversationStatus.SEARCHING,
    }


async def build_graph_node(
    state: dict[str, Any],
    *,
    graph_service: GraphService,
) -> dict[str, Any]:
    graph = graph_service.build(state.get("papers", []))
    return {"graph": graph, "status": ConversationStatus.COMPLETE}
