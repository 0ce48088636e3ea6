"""Conversation state data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from .agent import ResponseMetadata
from .context import ContextMode, EditorContext


class RequestState(str, Enum):
    """Lifecycle of the single in-flight request"""

    IDLE = "idle"
    SUBMITTING = "submitting"
    RESOLVED = "resolved"
    FAILED = "failed"


class ConversationEntry(BaseModel):
    """One request/response pair in the conversation log"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    request: str
    response: str
    success: bool
    error: str | None = None
    timestamp: str  # ISO-8601
    metadata: ResponseMetadata | None = None
    context: EditorContext | None = None

    @field_serializer("context")
    def serialize_context(self, context: EditorContext | None):
        return context.to_payload() if context is not None else None


class ConversationSnapshot(BaseModel):
    """Read-only view of the conversation rendered by the UI"""

    model_config = ConfigDict(populate_by_name=True)

    conversations: list[ConversationEntry] = []
    is_loading: bool = Field(default=False, alias="isLoading")
    error: str | None = None
    current_request: str = Field(default="", alias="currentRequest")
    context_mode: ContextMode = Field(default=ContextMode.FILE, alias="contextMode")
    state: RequestState = RequestState.IDLE
    context: EditorContext | None = None

    @field_serializer("context")
    def serialize_context(self, context: EditorContext | None):
        return context.to_payload() if context is not None else None
