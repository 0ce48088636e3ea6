"""Models module - Pydantic data models"""

from .context import ContextMode, EditorContext, EditorSnapshot, MAX_CONTEXT_STRING_LENGTH
from .agent import AgentClientConfig, AgentRequest, AgentResponse, ResponseMetadata
from .conversation import ConversationEntry, ConversationSnapshot, RequestState
from .suggestion import CodeAnalysis, CodeSuggestion, InsertMode, PreviewHunk, SuggestionPreview
from .messages import HostReply, WebviewMessage

__all__ = [
    # Context models
    "ContextMode",
    "EditorContext",
    "EditorSnapshot",
    "MAX_CONTEXT_STRING_LENGTH",
    # Agent models
    "AgentClientConfig",
    "AgentRequest",
    "AgentResponse",
    "ResponseMetadata",
    # Conversation models
    "ConversationEntry",
    "ConversationSnapshot",
    "RequestState",
    # Suggestion models
    "CodeAnalysis",
    "CodeSuggestion",
    "InsertMode",
    "PreviewHunk",
    "SuggestionPreview",
    # Messages
    "HostReply",
    "WebviewMessage",
]
