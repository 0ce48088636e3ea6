"""Routers module - FastAPI route handlers"""

from . import config, context, conversation, diagnostics, messages, suggestions

__all__ = ["config", "context", "conversation", "diagnostics", "messages", "suggestions"]
