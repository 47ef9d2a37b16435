"""In-memory registry of live conversations and their graphs."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import httpx

from scholar_nav.agent.controller import ConversationController
from scholar_nav.config import Settings
from scholar_nav.models.orchestrator import InferenceOrchestrator
from scholar_nav.models.schemas import Graph, GraphNode, TurnOutcome
from scholar_nav.services.graph_service import GraphService
from scholar_nav.services.semantic_scholar import SemanticScholarClient
from scholar_nav.utils.exceptions import ConversationNotFoundError
from scholar_nav.utils.logging import conversation_context, get_logger

logger = get_logger(__name__)


@dataclass
class ConversationSession:
    conversation_id: str
    controller: ConversationController
    graph_service: GraphService
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    # One turn or unfold at a time per conversation.
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class SessionService:
    """Creates conversations and serializes every mutation of a session."""

    def __init__(
        self,
        settings: Settings,
        scholar: SemanticScholarClient,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._scholar = scholar
        self._http = http_client
        self._sessions: dict[str, ConversationSession] = {}

    def create(self, api_keys: dict[str, str] | None = None) -> ConversationSession:
        providers = self._settings.configured_providers(api_keys)
        orchestrator = InferenceOrchestrator(
            providers,
            http_client=self._http,
            timeout=self._settings.HTTP_TIMEOUT_SECONDS,
        )
        graph_service = GraphService(self._scholar)
        session = ConversationSession(
            conversation_id=str(uuid.uuid4()),
            controller=ConversationController(orchestrator, self._scholar, graph_service),
            graph_service=graph_service,
        )
        self._sessions[session.conversation_id] = session
        logger.info(
            "conversation_created",
            conversation_id=session.conversation_id,
            providers=[p.name for p in providers],
        )
        return session

    def get(self, conversation_id: str) -> ConversationSession:
        session = self._sessions.get(conversation_id)
        if session is None:
            raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
        return session

    async def send_message(self, conversation_id: str, content: str) -> TurnOutcome:
        session = self.get(conversation_id)
        with conversation_context(conversation_id):
            async with session.lock:
                return await session.controller.send_message(content)

    async def unfold(self, conversation_id: str, node_id: str) -> Graph:
        session = self.get(conversation_id)
        with conversation_context(conversation_id):
            async with session.lock:
                return await session.graph_service.unfold(node_id)

    def metrics(self, conversation_id: str, top_n: int = 5) -> dict[str, Any]:
        return self.get(conversation_id).graph_service.metrics(top_n=top_n)

    def similar(self, conversation_id: str, node_id: str, top_k: int = 5) -> list[GraphNode]:
        return self.get(conversation_id).graph_service.similar(node_id, top_k=top_k)
