"""Conditional edge logic for the conversation turn graph."""

from __future__ import annotations

from typing import Any

from langgraph.graph import END


def route_after_progress(state: dict[str, Any]) -> str:
    """Go to the paper search when the progress node recorded a trigger, else finish."""
    if state.get("trigger_reason") is not None:
        return "search"
    return END
