"""Shared router dependencies"""

from __future__ import annotations

from fastapi import HTTPException, Request

from ..errors import AgentConfigurationError
from ..services.runtime import AgentRuntime


def get_runtime(request: Request) -> AgentRuntime:
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(status_code=503, detail="Agent runtime is not running")
    return runtime


def require_configured(request: Request) -> AgentRuntime:
    """Runtime with a usable agent client; 503 while configuration is required"""
    runtime = get_runtime(request)
    try:
        runtime.require_client()
    except AgentConfigurationError as e:
        raise HTTPException(status_code=503, detail=f"Agent not configured: {e}")
    return runtime
