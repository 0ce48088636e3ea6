"""Editor context API endpoints"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse

from ..models.context import EditorContext, EditorSnapshot
from ..services.context_selector import CONTEXT_MODE_DESCRIPTIONS, format_context_for_display
from ..services.runtime import AgentRuntime
from .deps import get_runtime

router = APIRouter()


def _describe(runtime: AgentRuntime) -> dict[str, Any]:
    conversation = runtime.conversation
    selected = conversation.selected_context()
    return {
        "mode": conversation.context_mode.value,
        "description": CONTEXT_MODE_DESCRIPTIONS[conversation.context_mode],
        "context": selected.to_payload() if selected else None,
        "display": format_context_for_display(selected),
    }


@router.get("")
async def get_context(runtime: AgentRuntime = Depends(get_runtime)) -> dict[str, Any]:
    """Context that would be attached to the next request"""
    return _describe(runtime)


@router.post("")
async def update_context(snapshot: EditorSnapshot, runtime: AgentRuntime = Depends(get_runtime)) -> dict[str, Any]:
    """Receive editor state from the extension (active file, selection, workspace)"""
    runtime.push_snapshot(snapshot)
    return _describe(runtime)


@router.get("/events")
async def context_events(runtime: AgentRuntime = Depends(get_runtime)):
    """Stream full-context changes as server-sent events"""

    async def event_generator():
        async for context in runtime.events.listen():
            payload = context.to_payload() if isinstance(context, EditorContext) else None
            yield {"event": "context", "data": json.dumps(payload)}

    return EventSourceResponse(event_generator())
