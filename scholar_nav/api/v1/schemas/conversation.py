"""Request/response models for the conversation API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from scholar_nav.models.schemas import ConversationMessage, ConversationStatus


class ConversationCreateRequest(BaseModel):
    api_keys: dict[str, str] = Field(
        default_factory=dict,
        description="Per-user provider keys, e.g. {'groq': 'gsk_...'}; override the environment",
    )


class ConversationResponse(BaseModel):
    conversation_id: str
    status: ConversationStatus
    created_at: datetime
    messages: list[ConversationMessage] = Field(default_factory=list)
    has_graph: bool = False


class MessageRequest(BaseModel):
    content: str = Field(..., min_length=1, examples=["computer vision"])
