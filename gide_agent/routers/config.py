"""Configuration API endpoints"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..errors import ConfigPersistenceError
from ..models.context import ContextMode
from ..services.config_manager import check_configuration_status, mask_key
from ..services.runtime import AgentRuntime
from ..services.sanitize import sanitize_config, sanitize_url
from .deps import get_runtime

router = APIRouter()


class ConfigUpdateRequest(BaseModel):
    """Request to update configuration"""

    model_config = ConfigDict(populate_by_name=True)

    agent_endpoint: str | None = Field(default=None, alias="agentEndpoint")
    request_timeout: int | None = Field(default=None, alias="requestTimeout", gt=0)
    api_key: str | None = Field(default=None, alias="apiKey")
    model_provider: str | None = Field(default=None, alias="modelProvider")
    model_name: str | None = Field(default=None, alias="modelName")
    context_mode: ContextMode | None = Field(default=None, alias="contextMode")
    debounce_ms: int | None = Field(default=None, alias="debounceMs", ge=0)


class ConfigResponse(BaseModel):
    """Configuration response"""

    agentEndpoint: str
    requestTimeout: int
    apiKey: str
    modelProvider: str
    modelName: str
    contextMode: str
    debounceMs: int
    configured: bool
    configurationError: str | None = None


class ValidateResponse(BaseModel):
    """Validation response"""

    valid: bool
    message: str
    endpoint: str


@router.get("", response_model=ConfigResponse)
async def get_config(runtime: AgentRuntime = Depends(get_runtime)) -> ConfigResponse:
    """Get the effective configuration with the API key masked"""
    config = runtime.config_manager.get_effective_config()

    return ConfigResponse(
        agentEndpoint=config.get("agentEndpoint") or "",
        requestTimeout=config.get("requestTimeout") or 0,
        apiKey=mask_key(config.get("apiKey")),
        modelProvider=config.get("modelProvider") or "",
        modelName=config.get("modelName") or "",
        contextMode=runtime.conversation.context_mode.value,
        debounceMs=config.get("debounceMs") or 0,
        configured=runtime.client is not None,
        configurationError=runtime.configuration_error,
    )


@router.put("")
async def update_config(request: ConfigUpdateRequest, runtime: AgentRuntime = Depends(get_runtime)) -> dict[str, Any]:
    """Update configuration and rebuild the agent client"""
    if request.agent_endpoint and not sanitize_url(request.agent_endpoint):
        raise HTTPException(status_code=422, detail="Invalid agent endpoint URL")

    changes = request.model_dump(by_alias=True, exclude_none=True, mode="json")
    api_key = changes.pop("apiKey", None)

    # The key is sent verbatim as a bearer token; everything else is sanitized
    updates = sanitize_config(changes)
    if api_key is not None:
        updates["apiKey"] = api_key.strip()

    try:
        runtime.config_manager.save_config(updates)
    except ConfigPersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if request.context_mode is not None:
        runtime.conversation.set_context_mode(request.context_mode)

    configured = runtime.configure()
    return {
        "status": "success",
        "message": "Configuration updated",
        "configured": configured,
        "configurationError": runtime.configuration_error,
    }


@router.post("/validate", response_model=ValidateResponse)
async def validate_config(runtime: AgentRuntime = Depends(get_runtime)) -> ValidateResponse:
    """Validate current configuration by pinging the agent"""
    client = runtime.client
    if client is None:
        return ValidateResponse(
            valid=False,
            message=f"Agent not configured: {runtime.configuration_error}",
            endpoint="",
        )

    valid, message = await client.test_connection()
    return ValidateResponse(valid=valid, message=message, endpoint=client.config.endpoint)


@router.get("/status")
async def configuration_status() -> dict[str, Any]:
    """Missing required and recommended environment variables"""
    return check_configuration_status()
