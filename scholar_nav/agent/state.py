"""Per-turn state schema for the conversation graph."""

from __future__ import annotations

from typing import Annotated, TypedDict

from scholar_nav.models.schemas import (
    ConversationMessage,
    ConversationStatus,
    Graph,
    Paper,
    SearchParams,
    TriggerReason,
)


def _merge_lists(left: list, right: list) -> list:
    """Append new items to an existing list."""
    return left + right


class TurnState(TypedDict, total=False):
    """State for one user turn.

    ``transcript`` is replaced wholesale by each node that extends it;
    ``emitted`` accumulates only the assistant messages produced this turn.
    """

    # ── Input ──
    transcript: list[ConversationMessage]
    status: ConversationStatus
    already_triggered: bool

    # ── Reply ──
    reply: str
    reply_source: str  # "providers" | "scripted"
    emitted: Annotated[list[ConversationMessage], _merge_lists]

    # ── Search ──
    trigger_reason: TriggerReason | None
    search_params: SearchParams | None
    papers: list[Paper]
    graph: Graph | None

