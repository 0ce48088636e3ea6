"""Webview message endpoint"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import TypeAdapter, ValidationError

from ..models.messages import WebviewMessage
from ..services.message_dispatcher import MessageDispatcher
from ..services.runtime import AgentRuntime
from .deps import get_runtime

router = APIRouter()

_message_adapter = TypeAdapter(WebviewMessage)


@router.post("")
async def post_message(
    payload: dict[str, Any] = Body(...),
    runtime: AgentRuntime = Depends(get_runtime),
) -> dict[str, Any]:
    """Dispatch one tagged webview message and return the host's reply"""
    try:
        message = _message_adapter.validate_python(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    reply = await MessageDispatcher(runtime).dispatch(message)
    return reply.model_dump(by_alias=True, mode="json")
