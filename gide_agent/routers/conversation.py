"""Conversation API endpoints"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..models.context import ContextMode
from ..models.conversation import ConversationEntry
from ..models.suggestion import CodeSuggestion
from ..services.runtime import AgentRuntime
from .deps import get_runtime, require_configured

router = APIRouter()


class SubmitRequest(BaseModel):
    """Request text typed by the user"""

    request: str


class SubmitResponse(BaseModel):
    """Outcome of a submit plus the refreshed conversation"""

    accepted: bool
    entry: ConversationEntry | None = None
    suggestions: list[CodeSuggestion] = []
    conversation: dict[str, Any]


class ContextModeRequest(BaseModel):
    mode: ContextMode


def _snapshot(runtime: AgentRuntime) -> dict[str, Any]:
    return runtime.conversation.snapshot().model_dump(by_alias=True, mode="json")


@router.get("")
async def get_conversation(runtime: AgentRuntime = Depends(get_runtime)) -> dict[str, Any]:
    """Current conversation, loading flag and error for rendering"""
    return _snapshot(runtime)


@router.post("/submit", response_model=SubmitResponse, response_model_by_alias=True)
async def submit(request: SubmitRequest, runtime: AgentRuntime = Depends(require_configured)) -> SubmitResponse:
    """Send a request to the agent; ignored (accepted=false) when empty or busy"""
    conversation = runtime.conversation
    entry = await conversation.submit(request.request)

    return SubmitResponse(
        accepted=entry is not None,
        entry=entry,
        suggestions=conversation.suggestions_for(entry.id) if entry else [],
        conversation=_snapshot(runtime),
    )


@router.delete("")
async def clear_history(runtime: AgentRuntime = Depends(get_runtime)) -> dict[str, Any]:
    """Clear the conversation log (the UI confirms first)"""
    runtime.conversation.clear_history()
    return _snapshot(runtime)


@router.put("/context-mode")
async def set_context_mode(request: ContextModeRequest, runtime: AgentRuntime = Depends(get_runtime)) -> dict[str, Any]:
    """Choose how much editor context accompanies the next request"""
    runtime.conversation.set_context_mode(request.mode)
    return _snapshot(runtime)


@router.post("/cancel")
async def cancel(runtime: AgentRuntime = Depends(get_runtime)) -> dict[str, bool]:
    """Abort the in-flight request, if any"""
    return {"cancelled": runtime.conversation.cancel()}


@router.get("/{entry_id}/suggestions", response_model=list[CodeSuggestion], response_model_by_alias=True)
async def get_suggestions(entry_id: str, runtime: AgentRuntime = Depends(get_runtime)) -> list[CodeSuggestion]:
    """Code suggestions extracted from a successful entry"""
    if not any(entry.id == entry_id for entry in runtime.conversation.entries):
        raise HTTPException(status_code=404, detail="Conversation entry not found")
    return runtime.conversation.suggestions_for(entry_id)
