"""Services module - Business logic layer"""

from .agent_client import AgentClient
from .code_suggestions import analyze_code_content, extract_code_blocks, process_agent_response
from .config_manager import ConfigManager
from .context_selector import collect_context, select_relevant_context, validate_context
from .context_watcher import ContextWatcher, InMemoryEditorHost
from .conversation import Conversation
from .error_tracker import ErrorTracker
from .runtime import AgentRuntime
from .sanitize import sanitize
from .suggestion_preview import SuggestionPreviewer, apply_code_suggestion

__all__ = [
    "AgentClient",
    "AgentRuntime",
    "ConfigManager",
    "ContextWatcher",
    "Conversation",
    "ErrorTracker",
    "InMemoryEditorHost",
    "SuggestionPreviewer",
    "analyze_code_content",
    "apply_code_suggestion",
    "collect_context",
    "extract_code_blocks",
    "process_agent_response",
    "sanitize",
    "select_relevant_context",
    "validate_context",
]
