"""
Sanitization utilities for user input and agent output

Every function is total: malformed input yields an empty/neutral value
instead of raising. Encoding is not idempotent, so text must be sanitized
exactly once per trust boundary.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from types import SimpleNamespace
from typing import Any

HTML_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
}

DANGEROUS_PROTOCOLS = ("javascript:", "data:", "vbscript:", "file:", "about:")
MAX_DEPTH_SENTINEL = "[Max depth reached]"
MAX_SAFE_INTEGER = 2**53 - 1
DEFAULT_ALLOWED_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-_.@]+$")

_HTML_CHARS = re.compile(r"[&<>\"'/]")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_WHITESPACE_RUN = re.compile(r"\s+")
_DOT_RUN = re.compile(r"\.\.+")
_EDGE_SLASHES = re.compile(r"^[/\s]+|[/\s]+$")
_UNSAFE_PATH_CHARS = re.compile(r"[<>:\"|?*]")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _encode_entities(text: str) -> str:
    return _HTML_CHARS.sub(lambda m: HTML_ENTITIES[m.group(0)], text)


def sanitize_html(value: Any) -> str:
    """Encode HTML-significant characters as entities"""
    if not isinstance(value, str):
        return ""
    return _encode_entities(value)


def strip_control_chars(value: Any) -> str:
    """Remove control characters except newlines and tabs"""
    if not isinstance(value, str):
        return ""
    return _CONTROL_CHARS.sub("", value)


def sanitize_input(value: Any) -> str:
    """Strip control characters, encode HTML entities and normalize whitespace"""
    if not isinstance(value, str):
        return ""
    text = _CONTROL_CHARS.sub("", value)
    text = _encode_entities(text)
    return _WHITESPACE_RUN.sub(" ", text).strip()


def sanitize_url(value: Any) -> str:
    """Allow http(s) and relative URLs, reject script-capable schemes"""
    if not isinstance(value, str):
        return ""

    lowered = value.strip().lower()
    if lowered.startswith(DANGEROUS_PROTOCOLS):
        return ""

    if lowered.startswith(("http://", "https://", "/")) or "://" not in lowered:
        return value.strip()

    return ""


def sanitize_file_path(value: Any) -> str:
    """Neutralize traversal sequences and characters unsafe in file names"""
    if not isinstance(value, str):
        return ""

    path = value.replace("\0", "")
    path = path.replace("\\", "/")
    path = _DOT_RUN.sub("", path)
    path = _EDGE_SLASHES.sub("", path)
    return _UNSAFE_PATH_CHARS.sub("_", path)


def sanitize_json(data: Any, max_depth: int = 10) -> Any:
    """Recursively sanitize every string (keys included) in a JSON-like value"""
    if max_depth <= 0:
        return MAX_DEPTH_SENTINEL

    if data is None:
        return None

    if isinstance(data, str):
        return sanitize_input(data)

    if isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, (list, tuple)):
        return [sanitize_json(item, max_depth - 1) for item in data]

    if isinstance(data, Mapping):
        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            clean_key = sanitize_input(key if isinstance(key, str) else str(key))
            if clean_key:
                sanitized[clean_key] = sanitize_json(value, max_depth - 1)
        return sanitized

    return sanitize_input(str(data))


def sanitize_config(config: Mapping[str, Any]) -> dict[str, Any]:
    """Sanitize a configuration mapping according to what each key holds"""
    sanitized: dict[str, Any] = {}
    if not isinstance(config, Mapping):
        return sanitized

    for key, value in config.items():
        clean_key = sanitize_input(key)
        if not clean_key:
            continue

        lowered = key.lower()
        if isinstance(value, str):
            if "endpoint" in lowered or "url" in lowered:
                sanitized[clean_key] = sanitize_url(value)
            elif "path" in lowered:
                sanitized[clean_key] = sanitize_file_path(value)
            else:
                sanitized[clean_key] = strip_control_chars(value).strip()
        elif isinstance(value, bool):
            sanitized[clean_key] = value
        elif isinstance(value, (int, float)):
            # Finite and within the JSON-safe integer range only
            if math.isfinite(value) and 0 <= value <= MAX_SAFE_INTEGER:
                sanitized[clean_key] = value
        elif isinstance(value, Mapping):
            sanitized[clean_key] = sanitize_config(value)

    return sanitized


def truncate_text(text: Any, max_length: int = 1000) -> str:
    """Truncate to max_length, preferring a word boundary near the end"""
    if not isinstance(text, str):
        return ""

    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.8:
        return truncated[:last_space] + "..."

    return truncated + "..."


def validate_allowed_chars(value: Any, pattern: str | re.Pattern = DEFAULT_ALLOWED_PATTERN) -> bool:
    """Check that a string consists only of allowed characters"""
    if not isinstance(value, str):
        return False
    return re.search(pattern, value) is not None


def sanitize_email(value: Any) -> str:
    if not isinstance(value, str):
        return ""

    email = value.strip().lower()
    if not _EMAIL.match(email):
        return ""
    return email


sanitize = SimpleNamespace(
    html=sanitize_html,
    input=sanitize_input,
    url=sanitize_url,
    file_path=sanitize_file_path,
    json=sanitize_json,
    config=sanitize_config,
    truncate=truncate_text,
    email=sanitize_email,
    validate=validate_allowed_chars,
)
