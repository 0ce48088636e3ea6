"""
Context Selector - Collect editor state and reduce it to what a context mode allows
"""

from __future__ import annotations

import logging
import math
import posixpath
from collections.abc import Callable, Mapping
from typing import Any

from ..models.context import MAX_CONTEXT_STRING_LENGTH, ContextMode, EditorContext, EditorSnapshot
from .sanitize import sanitize_file_path, sanitize_input

logger = logging.getLogger(__name__)

# Wire (camelCase) and attribute (snake_case) spellings of the six allowed keys
CONTEXT_KEYS = {
    "currentFile": "current_file",
    "language": "language",
    "selectedText": "selected_text",
    "lineNumber": "line_number",
    "column": "column",
    "workspaceRoot": "workspace_root",
}
_STRING_FIELDS = ("current_file", "language", "selected_text", "workspace_root")
_NUMBER_FIELDS = ("line_number", "column")

# Workspace mode never carries the selection
MODE_FIELDS: dict[ContextMode, tuple[str, ...]] = {
    ContextMode.NONE: (),
    ContextMode.FILE: ("current_file", "language"),
    ContextMode.SELECTION: ("current_file", "language", "selected_text", "line_number", "column"),
    ContextMode.WORKSPACE: ("current_file", "language", "workspace_root"),
}

CONTEXT_MODE_DESCRIPTIONS = {
    ContextMode.NONE: "No context will be sent to the agent",
    ContextMode.FILE: "Current file name and language will be included",
    ContextMode.SELECTION: "Current file, selected text, and cursor position will be included",
    ContextMode.WORKSPACE: "Current file, language, and workspace name will be included",
}


def _basename(path: str) -> str:
    return posixpath.basename(path.replace("\\", "/").rstrip("/"))


def _cap(text: str) -> str:
    return text[:MAX_CONTEXT_STRING_LENGTH]


def collect_context(snapshot: EditorSnapshot | None) -> EditorContext | None:
    """Build a sanitized context from raw editor state, None if nothing is active"""
    if snapshot is None:
        return None

    fields: dict[str, Any] = {}

    if snapshot.active_document_path:
        fields["current_file"] = _cap(sanitize_file_path(_basename(snapshot.active_document_path)))
    if snapshot.active_document_language:
        fields["language"] = _cap(sanitize_input(snapshot.active_document_language))

    if snapshot.selection_text:
        fields["selected_text"] = _cap(sanitize_input(snapshot.selection_text))
        # Host positions are 0-indexed
        fields["line_number"] = (snapshot.selection_line or 0) + 1
        fields["column"] = (snapshot.selection_character or 0) + 1

    if snapshot.workspace_folders:
        fields["workspace_root"] = _cap(sanitize_file_path(_basename(snapshot.workspace_folders[0])))

    fields = {key: value for key, value in fields.items() if value not in ("", None)}
    if not fields:
        return None
    return EditorContext(**fields)


def collect_from_provider(provider: Callable[[], EditorSnapshot | None]) -> EditorContext | None:
    """Read a snapshot from the host and collect it; host failures yield None"""
    try:
        return collect_context(provider())
    except Exception as e:
        logger.error("[ContextSelector] Error collecting editor context: %s", e)
        return None


def _coerce_mode(mode: Any) -> ContextMode:
    try:
        return ContextMode(mode)
    except ValueError:
        logger.warning("[ContextSelector] Unknown context mode %r, sending no context", mode)
        return ContextMode.NONE


def select_relevant_context(full_context: EditorContext | None, mode: ContextMode | str) -> EditorContext | None:
    """Reduce a context to the fields the mode permits.

    Unknown modes behave like ``none``. Values that would break the context
    invariants are truncated (strings) or dropped (numbers), never passed
    through raw.
    """
    context_mode = _coerce_mode(mode)
    if full_context is None or context_mode is ContextMode.NONE:
        return None

    selected: dict[str, Any] = {}
    for field in MODE_FIELDS[context_mode]:
        value = getattr(full_context, field)
        if value is None:
            continue
        if field in _STRING_FIELDS:
            value = _cap(value)
            if not value:
                continue
        elif not (isinstance(value, int) and value >= 0):
            continue
        selected[field] = value

    if not selected:
        return None
    return EditorContext(**selected)


def validate_context(context: Any) -> bool:
    """Check a context object (model or mapping) against the context invariants"""
    if isinstance(context, EditorContext):
        context = context.model_dump(exclude_none=True)
    if not isinstance(context, Mapping):
        return False

    allowed = set(CONTEXT_KEYS) | set(CONTEXT_KEYS.values())
    for key, value in context.items():
        if key not in allowed:
            return False
        if value is None:
            continue
        if isinstance(value, str) and len(value) > MAX_CONTEXT_STRING_LENGTH:
            return False
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if not math.isfinite(value) or value < 0:
                return False

    return True


def format_context_for_display(context: EditorContext | None) -> str:
    """One-line summary of a context for the UI"""
    if context is None:
        return "No context available"

    parts = []
    if context.current_file:
        parts.append(f"File: {context.current_file}")
    if context.language:
        parts.append(f"Language: {context.language}")
    if context.selected_text:
        preview = context.selected_text
        if len(preview) > 50:
            preview = preview[:50] + "..."
        parts.append(f'Selection: "{preview}"')
    if context.line_number and context.column:
        parts.append(f"Position: Line {context.line_number}, Column {context.column}")
    if context.workspace_root:
        parts.append(f"Workspace: {context.workspace_root}")

    return " | ".join(parts)
