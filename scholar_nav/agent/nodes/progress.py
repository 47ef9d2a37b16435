"""Progress node: decide whether clarification is done and the search should fire."""

from __future__ import annotations

from typing import Any

from scholar_nav.models.schemas import ConversationMessage, SearchParams, TriggerReason
from scholar_nav.utils.logging import get_logger

logger = get_logger(__name__)

SEARCH_TRIGGER_LENGTH = 6
CURRENT_RESEARCH_YEAR_START = 2020


def detect_trigger(
    transcript: list[ConversationMessage],
    reply: str,
    *,
    scripted: bool = False,
) -> TriggerReason | None:
    """Return the first trigger condition that holds, or None.

    ``transcript`` already contains ``reply`` as its last message. Content
    matching is plain substring matching, case-insensitive: "find" or
    "search" anywhere (so "research" counts), or "let me" together with
    "papers". Scripted replies only count towards the length condition.
    """
    if len(transcript) >= SEARCH_TRIGGER_LENGTH:
        return TriggerReason.LENGTH
    if scripted:
        return None
    lowered = reply.lower()
    if "find" in lowered or "search" in lowered:
        return TriggerReason.KEYWORD
    if "let me" in lowered and "papers" in lowered:
        return TriggerReason.PHRASE
    return None


def derive_search_params(prior: list[ConversationMessage]) -> SearchParams:
    """Build the paper query from the messages preceding the triggering reply.

    The query is the latest user message. Any mention of "current" anywhere
    before the reply bounds the search to recent years. The scripted
    time-period question says "current research" itself, so a scripted
    conversation always searches from 2020.
    """
    query = next((m.content for m in reversed(prior) if m.role == "user"), "")
    wants_current = any("current" in m.content.lower() for m in prior)
    return SearchParams(
        query=query.strip(),
        year_start=CURRENT_RESEARCH_YEAR_START if wants_current else None,
    )


def progress_node(state: dict[str, Any]) -> dict[str, Any]:
    if state.get("already_triggered"):
        return {"trigger_reason": None}

    transcript: list[ConversationMessage] = state["transcript"]
    reason = detect_trigger(
        transcript,
        state.get("reply", ""),
        scripted=state.get("reply_source") == "scripted",
    )
    if reason is not None:
        logger.info("search_triggered", reason=str(reason), messages=len(transcript))
    return {"trigger_reason": reason}
