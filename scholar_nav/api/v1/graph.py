"""Graph API endpoints: read, unfold and analyse a conversation's citation graph."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from scholar_nav.api.dependencies import get_session_service
from scholar_nav.api.v1.schemas.graph import (
    GraphMetricsResponse,
    GraphResponse,
    SimilarPapersResponse,
)
from scholar_nav.services.session_service import SessionService
from scholar_nav.utils.exceptions import (
    ConversationNotFoundError,
    GraphNotReadyError,
    NodeNotFoundError,
)
from scholar_nav.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/conversations/{conversation_id}/graph", tags=["graph"])


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ConversationNotFoundError):
        return HTTPException(status_code=404, detail="Conversation not found")
    if isinstance(exc, NodeNotFoundError):
        return HTTPException(status_code=404, detail="Node not found")
    return HTTPException(status_code=409, detail="Graph not built yet")


@router.get("", response_model=GraphResponse)
async def get_graph(
    conversation_id: str,
    sessions: SessionService = Depends(get_session_service),
) -> GraphResponse:
    """Current graph as node/link lists (force-graph compatible)."""
    try:
        graph = sessions.get(conversation_id).graph_service.graph
    except ConversationNotFoundError as exc:
        raise _http_error(exc)
    if graph is None:
        raise _http_error(GraphNotReadyError())
    return GraphResponse.from_graph(conversation_id, graph)


@router.post("/nodes/{node_id}/unfold", response_model=GraphResponse)
async def unfold_node(
    conversation_id: str,
    node_id: str,
    sessions: SessionService = Depends(get_session_service),
) -> GraphResponse:
    """Merge the node's citing and cited papers into the graph. Repeat calls are no-ops."""
    try:
        graph = await sessions.unfold(conversation_id, node_id)
    except (ConversationNotFoundError, NodeNotFoundError, GraphNotReadyError) as exc:
        logger.info("unfold_rejected", conversation_id=conversation_id, node_id=node_id, error=str(exc))
        raise _http_error(exc)
    return GraphResponse.from_graph(conversation_id, graph)


@router.get("/metrics", response_model=GraphMetricsResponse)
async def graph_metrics(
    conversation_id: str,
    top_n: int = Query(default=5, ge=1, le=50),
    sessions: SessionService = Depends(get_session_service),
) -> GraphMetricsResponse:
    try:
        metrics = sessions.metrics(conversation_id, top_n=top_n)
    except (ConversationNotFoundError, GraphNotReadyError) as exc:
        raise _http_error(exc)
    return GraphMetricsResponse(conversation_id=conversation_id, **metrics)


@router.get("/nodes/{node_id}/similar", response_model=SimilarPapersResponse)
async def similar_papers(
    conversation_id: str,
    node_id: str,
    top_k: int = Query(default=5, ge=1, le=50),
    sessions: SessionService = Depends(get_session_service),
) -> SimilarPapersResponse:
    """Nearest papers by embedding; empty when the node carries no embedding."""
    try:
        papers = sessions.similar(conversation_id, node_id, top_k=top_k)
    except (ConversationNotFoundError, NodeNotFoundError, GraphNotReadyError) as exc:
        raise _http_error(exc)
    return SimilarPapersResponse(conversation_id=conversation_id, node_id=node_id, papers=papers)
