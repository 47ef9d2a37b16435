"""Respond node: produce the assistant reply for the current user turn."""

from __future__ import annotations

from typing import Any

from scholar_nav.agent.prompts.research_architect import (
    RESEARCH_ARCHITECT_SYSTEM_PROMPT,
    scripted_reply,
)
from scholar_nav.models.orchestrator import InferenceOrchestrator
from scholar_nav.models.schemas import ConversationMessage, ConversationStatus
from scholar_nav.models.synthesis import is_total_failure, synthesize
from scholar_nav.utils.logging import get_logger

logger = get_logger(__name__)


async def respond_node(
    state: dict[str, Any],
    *,
    orchestrator: InferenceOrchestrator | None,
) -> dict[str, Any]:
    """Ask every provider, synthesize, and fall back to the scripted dialogue
    when there are no providers or none of them produced a usable answer.

    Provider exceptions are not caught here; the controller owns the turn
    boundary.
    """
    transcript: list[ConversationMessage] = state["transcript"]

    if orchestrator is None or not orchestrator.providers:
        reply = scripted_reply(transcript)
        source = "scripted"
        status = ConversationStatus.COLLECTING
    else:
        status = ConversationStatus.CLARIFYING
        results = await orchestrator.call_all(
            [ConversationMessage(role="system", content=RESEARCH_ARCHITECT_SYSTEM_PROMPT), *transcript]
        )
        reply = synthesize(results)
        source = "providers"
        if is_total_failure(reply):
            logger.warning(
                "synthesis_total_failure",
                providers=[r.provider for r in results],
                errors=[r.error for r in results if r.error],
            )
            reply = scripted_reply(transcript)
            source = "scripted"

    # Once the search has fired the status only moves forward.
    if state.get("already_triggered"):
        status = state["status"]

    message = ConversationMessage(role="assistant", content=reply)
    logger.info("turn_reply_produced", source=source, chars=len(reply), status=str(status))
    return {
        "reply": reply,
        "reply_source": source,
        "transcript": [*transcript, message],
        "emitted": [message],
        "status": status,
    }
