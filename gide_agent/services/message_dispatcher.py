"""
Message Dispatcher - Handle webview messages from the closed message union
"""

from __future__ import annotations

import logging

from ..errors import AgentConfigurationError
from ..models.agent import AgentResponse
from ..models.conversation import ConversationEntry
from ..models.messages import (
    AgentResponseReply,
    CancelRequestMessage,
    ClearHistoryMessage,
    ConfigReply,
    ErrorMessage,
    ErrorReply,
    GetConfigMessage,
    HostReply,
    SendAgentRequestMessage,
    SetContextModeMessage,
    StateReply,
    UpdateContextMessage,
    WebviewMessage,
)
from .config_manager import get_safe_config
from .runtime import AgentRuntime
from .sanitize import sanitize_input

logger = logging.getLogger(__name__)


class MessageDispatcher:
    """Route each webview message variant to the runtime"""

    def __init__(self, runtime: AgentRuntime):
        self.runtime = runtime

    def _state(self) -> StateReply:
        snapshot = self.runtime.conversation.snapshot()
        return StateReply(payload=snapshot.model_dump(by_alias=True, mode="json"))

    async def dispatch(self, message: WebviewMessage) -> HostReply:
        conversation = self.runtime.conversation

        if isinstance(message, GetConfigMessage):
            config = get_safe_config(self.runtime.config_manager.get_effective_config())
            config["configured"] = self.runtime.client is not None
            return ConfigReply(payload=config)

        if isinstance(message, SendAgentRequestMessage):
            try:
                entry = await conversation.submit(message.payload.request)
            except AgentConfigurationError as e:
                return ErrorReply(payload=f"Agent not configured: {e}")
            if entry is None:
                return AgentResponseReply(payload=None, accepted=False)
            return AgentResponseReply(payload=self._entry_response(entry))

        if isinstance(message, SetContextModeMessage):
            conversation.set_context_mode(message.payload)
            return self._state()

        if isinstance(message, ClearHistoryMessage):
            conversation.clear_history()
            return self._state()

        if isinstance(message, UpdateContextMessage):
            self.runtime.push_snapshot(message.payload)
            return self._state()

        if isinstance(message, CancelRequestMessage):
            conversation.cancel()
            return self._state()

        if isinstance(message, ErrorMessage):
            logger.error("[MessageDispatcher] Webview error: %s", message.payload)
            return ErrorReply(payload=sanitize_input(message.payload))

        raise TypeError(f"Unhandled webview message: {type(message).__name__}")

    @staticmethod
    def _entry_response(entry: ConversationEntry) -> AgentResponse:
        return AgentResponse(
            id=entry.id,
            response=entry.response,
            success=entry.success,
            error=entry.error,
            metadata=entry.metadata,
        )
