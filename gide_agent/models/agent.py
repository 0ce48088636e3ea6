"""Agent request/response data models"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .context import EditorContext

DEFAULT_REQUEST_TIMEOUT_MS = 30000


class ResponseMetadata(BaseModel):
    """Optional metadata reported by the agent"""

    model_config = ConfigDict(populate_by_name=True)

    model: str | None = None
    tokens_used: float | None = Field(default=None, alias="tokensUsed")
    processing_time: float | None = Field(default=None, alias="processingTime")


class AgentRequest(BaseModel):
    """A single request to the remote coding agent"""

    id: str
    request: str
    context: EditorContext | None = None


class AgentResponse(BaseModel):
    """Result of an agent request; failures are reported with success=False"""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    response: str = ""
    success: bool
    error: str | None = None
    metadata: ResponseMetadata | None = None


class AgentClientConfig(BaseModel):
    """Configuration of the agent client (timeout in milliseconds)"""

    model_config = ConfigDict(populate_by_name=True)

    endpoint: str
    timeout: float = DEFAULT_REQUEST_TIMEOUT_MS
    api_key: str | None = Field(default=None, alias="apiKey")
    model_provider: str | None = Field(default=None, alias="modelProvider")
    model_name: str | None = Field(default=None, alias="modelName")
