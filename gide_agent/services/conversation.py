"""
Conversation - Single-flight request state machine and conversation log

idle -> submitting -> (resolved | failed) -> idle. At most one request is in
flight; submits while busy, and empty submits, are ignored. Agent failures
become ordinary entries with success=False.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Optional

from ..errors import AgentConfigurationError
from ..models.agent import AgentRequest, AgentResponse, ResponseMetadata
from ..models.context import ContextMode, EditorContext
from ..models.conversation import ConversationEntry, ConversationSnapshot, RequestState
from ..models.suggestion import CodeSuggestion
from .agent_client import AgentClient
from .code_suggestions import process_agent_response
from .context_selector import select_relevant_context
from .sanitize import sanitize_html, sanitize_input, strip_control_chars

logger = logging.getLogger(__name__)

ContextProvider = Callable[[], Optional[EditorContext]]
StateListener = Callable[[RequestState], None]


def generate_request_id() -> str:
    """Millisecond timestamp plus a random suffix"""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


class Conversation:
    """Owns the conversation log and the in-flight request"""

    def __init__(
        self,
        client: AgentClient | None = None,
        context_mode: ContextMode | str = ContextMode.FILE,
        context_provider: ContextProvider | None = None,
        id_factory: Callable[[], str] = generate_request_id,
    ):
        self.client = client
        self._context_mode = ContextMode(context_mode)
        self._context_provider = context_provider
        self._id_factory = id_factory

        self._entries: list[ConversationEntry] = []
        self._suggestions: dict[str, list[CodeSuggestion]] = {}
        self._state = RequestState.IDLE
        self._current_request = ""
        self._error: str | None = None
        self._context: EditorContext | None = None
        self._cancel_event: asyncio.Event | None = None
        self._listeners: list[StateListener] = []

    # ========== State ==========

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state is RequestState.SUBMITTING

    @property
    def context_mode(self) -> ContextMode:
        return self._context_mode

    @property
    def entries(self) -> list[ConversationEntry]:
        return list(self._entries)

    def add_state_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def _set_state(self, state: RequestState) -> None:
        self._state = state
        logger.debug("[Conversation] State -> %s", state.value)
        for listener in list(self._listeners):
            listener(state)

    def set_context_mode(self, mode: ContextMode | str) -> None:
        """Change how much editor context is attached; unknown modes raise ValueError"""
        self._context_mode = ContextMode(mode)

    def set_current_request(self, text: str) -> None:
        self._current_request = text if isinstance(text, str) else ""

    def update_context(self, context: EditorContext | None) -> None:
        """Subscriber for context watcher events"""
        self._context = context

    def current_context(self) -> EditorContext | None:
        """Full (unreduced) context at this moment"""
        if self._context_provider is not None:
            return self._context_provider()
        return self._context

    def selected_context(self) -> EditorContext | None:
        return select_relevant_context(self.current_context(), self._context_mode)

    def suggestions_for(self, entry_id: str) -> list[CodeSuggestion]:
        return list(self._suggestions.get(entry_id, []))

    def snapshot(self) -> ConversationSnapshot:
        """Copy of everything the UI renders"""
        return ConversationSnapshot(
            conversations=list(self._entries),
            is_loading=self.is_loading,
            error=self._error,
            current_request=self._current_request,
            context_mode=self._context_mode,
            state=self._state,
            context=self.selected_context(),
        )

    # ========== Transitions ==========

    async def submit(self, raw_text: str) -> ConversationEntry | None:
        """Send a request and append its outcome; None if the submit was ignored"""
        if not isinstance(raw_text, str) or not raw_text.strip():
            return None
        if self.is_loading:
            logger.debug("[Conversation] Ignoring submit while a request is in flight")
            return None
        if self.client is None:
            raise AgentConfigurationError("Agent endpoint is not configured")

        request_text = strip_control_chars(raw_text).strip()
        request = AgentRequest(
            id=self._id_factory(),
            request=request_text,
            context=self.selected_context(),
        )
        self._current_request = raw_text
        self._error = None
        self._cancel_event = asyncio.Event()
        self._set_state(RequestState.SUBMITTING)

        try:
            response = await self.client.send_request(request, cancel_event=self._cancel_event)
        except Exception as e:
            logger.exception("[Conversation] Agent client raised for request %s", request.id)
            response = AgentResponse(id=request.id, response="", success=False, error=f"Unexpected error: {e}")
        finally:
            self._cancel_event = None

        entry = self._record(request, response)
        if entry.success:
            self._current_request = ""
            self._set_state(RequestState.RESOLVED)
        else:
            self._error = entry.error
            self._set_state(RequestState.FAILED)
        self._set_state(RequestState.IDLE)
        return entry

    def _record(self, request: AgentRequest, response: AgentResponse) -> ConversationEntry:
        """Build the display entry; agent text is HTML-encoded exactly once here"""
        error = None
        if not response.success:
            error = sanitize_input(response.error) or "Unknown error"

        metadata = None
        if response.metadata is not None:
            metadata = ResponseMetadata(
                model=sanitize_input(response.metadata.model) or None,
                tokens_used=response.metadata.tokens_used,
                processing_time=response.metadata.processing_time,
            )

        entry = ConversationEntry(
            id=request.id,
            request=sanitize_input(request.request),
            response=sanitize_html(response.response),
            success=response.success,
            error=error,
            timestamp=datetime.now(timezone.utc).isoformat(),
            metadata=metadata,
            context=request.context,
        )
        self._entries.append(entry)
        if response.success:
            self._suggestions[entry.id] = process_agent_response(response.response)
        return entry

    def cancel(self) -> bool:
        """Abort the in-flight request; False when nothing is in flight"""
        if self._cancel_event is None or not self.is_loading:
            return False
        self._cancel_event.set()
        return True

    def clear_history(self) -> None:
        """Drop every entry (confirmation is the UI's job)"""
        self._entries.clear()
        self._suggestions.clear()
