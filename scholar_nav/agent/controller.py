"""Conversation controller: owns the transcript and drives the turn graph."""

from __future__ import annotations

from scholar_nav.agent.graph import compile_turn_graph
from scholar_nav.agent.nodes.search import PaperSearch
from scholar_nav.agent.prompts.research_architect import APOLOGY, GREETING
from scholar_nav.models.orchestrator import InferenceOrchestrator
from scholar_nav.models.schemas import (
    ConversationMessage,
    ConversationStatus,
    Graph,
    TurnOutcome,
)
from scholar_nav.services.graph_service import GraphService
from scholar_nav.utils.exceptions import UnexpectedControllerError
from scholar_nav.utils.logging import get_logger

logger = get_logger(__name__)


class ConversationController:
    """Drives one conversation from first question to delivered graph.

    Status moves COLLECTING → CLARIFYING → SEARCHING → COMPLETE. The search
    fires at most once; later turns are still answered but never re-trigger.
    Not safe for concurrent ``send_message`` calls; callers serialize access.
    """

    def __init__(
        self,
        orchestrator: InferenceOrchestrator | None,
        paper_search: PaperSearch,
        graph_service: GraphService,
    ) -> None:
        self._orchestrator = orchestrator
        self._graph_service = graph_service
        self._turn_graph = compile_turn_graph(orchestrator, paper_search, graph_service)
        self._transcript: list[ConversationMessage] = [
            ConversationMessage(role="assistant", content=GREETING)
        ]
        self._status = ConversationStatus.COLLECTING
        self._triggered = False

    @property
    def transcript(self) -> list[ConversationMessage]:
        return list(self._transcript)

    @property
    def status(self) -> ConversationStatus:
        return self._status

    @property
    def triggered(self) -> bool:
        return self._triggered

    @property
    def graph(self) -> Graph | None:
        return self._graph_service.graph

    async def send_message(self, text: str) -> TurnOutcome:
        """Run one user turn and return what the assistant said."""
        self._transcript.append(ConversationMessage(role="user", content=text))

        try:
            result = await self._turn_graph.ainvoke({
                "transcript": list(self._transcript),
                "status": self._status,
                "already_triggered": self._triggered,
            })
        except Exception as exc:
            error = UnexpectedControllerError(f"Turn failed: {exc}")
            logger.error(
                "conversation_turn_failed",
                error=str(error),
                error_type=type(exc).__name__,
                status=str(self._status),
            )
            if not self._triggered and self._orchestrator is not None and self._orchestrator.providers:
                self._status = ConversationStatus.CLARIFYING
            apology = ConversationMessage(role="assistant", content=APOLOGY)
            self._transcript.append(apology)
            return TurnOutcome(status=self._status, messages=[apology])

        self._transcript = list(result["transcript"])
        self._status = result["status"]

        reason = result.get("trigger_reason")
        if reason is not None:
            self._triggered = True

        return TurnOutcome(
            status=self._status,
            messages=list(result.get("emitted", [])),
            triggered=reason is not None,
            trigger_reason=reason,
            search_params=result.get("search_params"),
            graph=result.get("graph") if reason is not None else None,
        )
