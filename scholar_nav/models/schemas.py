"""Pydantic models for the data flowing between orchestrator, controller and graph."""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# ── Inference ────────────────────────────────────────────────────────


class ProviderConfig(BaseModel):
    """One LLM backend. Supplied by the credential store, never persisted."""

    model_config = ConfigDict(frozen=True)

    name: str
    endpoint: str
    api_key: str = Field(repr=False)
    model: str
    max_tokens: int = 1024


class ConversationMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ProviderResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str
    content: str = ""
    latency_ms: float = 0.0
    success: bool
    error: str | None = None


# ── Papers and graph ─────────────────────────────────────────────────


class Embedding(BaseModel):
    model: str
    vector: list[float]


class Paper(BaseModel):
    paper_id: str
    title: str
    year: int | None = None
    citation_count: int = 0
    abstract: str | None = None
    embedding: Embedding | None = None


class GraphNode(Paper):
    id: str
    color: str
    val: float  # display size weight
    expanded: bool = False


class GraphEdge(BaseModel):
    """Directed citation link: ``source`` cites ``target``."""

    source: str
    target: str


class Graph(BaseModel):
    nodes: dict[str, GraphNode] = Field(default_factory=dict)
    edges: list[GraphEdge] = Field(default_factory=list)


class SearchParams(BaseModel):
    query: str
    year_start: int | None = None
    year_end: int | None = None

    def year_filter(self) -> str | None:
        """Render the Semantic Scholar ``year`` range: ``"2020-"``, ``"-2015"`` or ``"2020-2024"``."""
        if self.year_start is None and self.year_end is None:
            return None
        start = "" if self.year_start is None else self.year_start
        end = "" if self.year_end is None else self.year_end
        return f"{start}-{end}"


# ── Conversation ─────────────────────────────────────────────────────


class ConversationStatus(StrEnum):
    COLLECTING = "collecting"
    CLARIFYING = "clarifying"
    SEARCHING = "searching"
    COMPLETE = "complete"


class TriggerReason(StrEnum):
    LENGTH = "length"
    KEYWORD = "keyword"
    PHRASE = "phrase"


class TurnOutcome(BaseModel):
    status: ConversationStatus
    messages: list[ConversationMessage] = Field(default_factory=list)
    triggered: bool = False
    trigger_reason: TriggerReason | None = None
    search_params: SearchParams | None = None
    graph: Graph | None = None
