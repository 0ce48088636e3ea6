"""Webview <-> host message models.

Incoming messages form a closed union discriminated on ``type``; anything
else fails validation before it reaches the dispatcher.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from .agent import AgentResponse
from .context import ContextMode, EditorSnapshot


class AgentRequestPayload(BaseModel):
    """Body of a sendAgentRequest message"""

    request: str


class GetConfigMessage(BaseModel):
    type: Literal["getConfig"] = "getConfig"


class SendAgentRequestMessage(BaseModel):
    type: Literal["sendAgentRequest"] = "sendAgentRequest"
    payload: AgentRequestPayload


class SetContextModeMessage(BaseModel):
    type: Literal["setContextMode"] = "setContextMode"
    payload: ContextMode


class ClearHistoryMessage(BaseModel):
    type: Literal["clearHistory"] = "clearHistory"


class UpdateContextMessage(BaseModel):
    type: Literal["updateContext"] = "updateContext"
    payload: EditorSnapshot


class CancelRequestMessage(BaseModel):
    type: Literal["cancelRequest"] = "cancelRequest"


class ErrorMessage(BaseModel):
    type: Literal["error"] = "error"
    payload: str


WebviewMessage = Annotated[
    Union[
        GetConfigMessage,
        SendAgentRequestMessage,
        SetContextModeMessage,
        ClearHistoryMessage,
        UpdateContextMessage,
        CancelRequestMessage,
        ErrorMessage,
    ],
    Field(discriminator="type"),
]


# ========== Host -> webview replies ==========


class ConfigReply(BaseModel):
    type: Literal["config"] = "config"
    payload: dict[str, Any]


class AgentResponseReply(BaseModel):
    type: Literal["agentResponse"] = "agentResponse"
    payload: AgentResponse | None = None  # None when the submit was ignored
    accepted: bool = True


class StateReply(BaseModel):
    type: Literal["state"] = "state"
    payload: dict[str, Any]


class ErrorReply(BaseModel):
    type: Literal["error"] = "error"
    payload: str


HostReply = Union[ConfigReply, AgentResponseReply, StateReply, ErrorReply]
