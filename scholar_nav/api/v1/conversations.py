"""Conversation API endpoints: start a conversation and send turns."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from scholar_nav.api.dependencies import get_session_service
from scholar_nav.api.v1.schemas.conversation import (
    ConversationCreateRequest,
    ConversationResponse,
    MessageRequest,
)
from scholar_nav.models.schemas import TurnOutcome
from scholar_nav.services.session_service import ConversationSession, SessionService
from scholar_nav.utils.exceptions import ConversationNotFoundError
from scholar_nav.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/conversations", tags=["conversations"])


def _to_response(session: ConversationSession) -> ConversationResponse:
    controller = session.controller
    return ConversationResponse(
        conversation_id=session.conversation_id,
        status=controller.status,
        created_at=session.created_at,
        messages=controller.transcript,
        has_graph=controller.graph is not None,
    )


@router.post("", response_model=ConversationResponse)
async def create_conversation(
    request: ConversationCreateRequest | None = None,
    sessions: SessionService = Depends(get_session_service),
) -> ConversationResponse:
    """Start a conversation seeded with the assistant greeting."""
    api_keys = request.api_keys if request is not None else {}
    session = sessions.create(api_keys=api_keys)
    return _to_response(session)


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: str,
    sessions: SessionService = Depends(get_session_service),
) -> ConversationResponse:
    try:
        session = sessions.get(conversation_id)
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return _to_response(session)


@router.post("/{conversation_id}/messages", response_model=TurnOutcome)
async def send_message(
    conversation_id: str,
    request: MessageRequest,
    sessions: SessionService = Depends(get_session_service),
) -> TurnOutcome:
    """Run one user turn; the response carries the graph on the turn the search fires."""
    try:
        return await sessions.send_message(conversation_id, request.content)
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail="Conversation not found")
