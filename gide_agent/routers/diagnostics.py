"""Error tracking API endpoints"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from ..services.runtime import AgentRuntime
from .deps import get_runtime

router = APIRouter()


@router.get("")
async def get_errors(
    provider: str | None = None,
    minutes: float | None = Query(default=None, gt=0),
    runtime: AgentRuntime = Depends(get_runtime),
) -> dict[str, Any]:
    """Tracked agent errors, newest first, plus summary stats"""
    tracker = runtime.error_tracker
    if provider:
        errors = tracker.get_by_provider(provider)
    elif minutes is not None:
        errors = tracker.get_recent(minutes)
    else:
        errors = tracker.get_all()

    return {
        "errors": [error.model_dump(mode="json") for error in errors],
        "stats": tracker.get_stats(),
    }


@router.delete("")
async def clear_errors(runtime: AgentRuntime = Depends(get_runtime)) -> dict[str, str]:
    runtime.error_tracker.clear()
    return {"status": "success", "message": "Errors cleared"}
