"""
Code Suggestion Extractor - Find code in agent responses and offer it for insertion

Extracted code is only ever displayed or inserted into the editor, never executed.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from ..models.suggestion import CodeAnalysis, CodeSuggestion, InsertMode
from .sanitize import sanitize_input

CODE_PATTERNS: dict[str, re.Pattern] = {
    "markdown_blocks": re.compile(r"```[\s\S]*?```"),
    "inline_code": re.compile(r"`[^`\n]+`"),
    "functions": re.compile(r"function\s+\w+\s*\([^)]*\)\s*\{[\s\S]*?\}"),
    "classes": re.compile(r"class\s+\w+[\s\S]*?\{[\s\S]*?\}"),
    "variables": re.compile(r"(?:const|let|var)\s+\w+[\s\S]*?[;\n]"),
    "arrow_functions": re.compile(r"\w+\s*=\s*\([^)]*\)\s*=>\s*\{[\s\S]*?\}"),
    "keywords": re.compile(r"\b(?:function|class|const|let|var|if|for|while|return|import|export)\b"),
}

FENCED_BLOCK = re.compile(r"```(\w+)?\n([\s\S]*?)```")
INLINE_CODE = re.compile(r"`([^`]+)`")
MIN_INLINE_CODE_LENGTH = 5
VALID_INSERT_MODES = {mode.value for mode in InsertMode}


def analyze_code_content(text: Any) -> CodeAnalysis:
    """Estimate how much of a response is code.

    Only fenced blocks are returned in ``code_blocks``; every pattern counts
    towards the confidence, which is normalized per 100 characters.
    """
    if not isinstance(text, str) or not text:
        return CodeAnalysis(has_code=False, code_blocks=[], confidence=0.0, total_matches=0)

    code_blocks: list[str] = []
    total_matches = 0
    for name, pattern in CODE_PATTERNS.items():
        matches = pattern.findall(text)
        total_matches += len(matches)
        if name == "markdown_blocks":
            code_blocks.extend(matches)

    confidence = min(total_matches / (len(text) / 100), 1.0)
    return CodeAnalysis(
        has_code=confidence > 0.1 or len(code_blocks) > 0,
        code_blocks=code_blocks,
        confidence=confidence,
        total_matches=total_matches,
    )


def extract_code_blocks(text: Any) -> list[CodeSuggestion]:
    """Turn fenced blocks into suggestions, falling back to substantial inline code"""
    if not isinstance(text, str):
        return []

    suggestions = []
    for language, body in FENCED_BLOCK.findall(text):
        code = body.strip()
        if not code:
            continue
        clean_language = sanitize_input(language) or None
        suggestions.append(
            CodeSuggestion(
                code=sanitize_input(code),
                language=clean_language,
                description=f"Code block ({clean_language})" if clean_language else "Code block",
                insert_mode=InsertMode.INSERT,
            )
        )

    if suggestions:
        return suggestions

    for span in INLINE_CODE.findall(text):
        code = span.strip()
        if len(code) > MIN_INLINE_CODE_LENGTH:
            suggestions.append(
                CodeSuggestion(
                    code=sanitize_input(code),
                    description="Inline code",
                    insert_mode=InsertMode.INSERT,
                )
            )
    return suggestions


def validate_code_suggestion(suggestion: Any) -> bool:
    """Accept a CodeSuggestion or a mapping with non-empty code and a known insert mode"""
    if isinstance(suggestion, CodeSuggestion):
        suggestion = suggestion.model_dump(by_alias=True, mode="json")
    if not isinstance(suggestion, Mapping):
        return False

    code = suggestion.get("code")
    if not isinstance(code, str) or not code:
        return False
    for key in ("language", "description"):
        value = suggestion.get(key)
        if value is not None and not isinstance(value, str):
            return False

    insert_mode = suggestion.get("insertMode", suggestion.get("insert_mode"))
    return insert_mode is None or insert_mode in VALID_INSERT_MODES


def process_agent_response(text: Any) -> list[CodeSuggestion]:
    """Extract and keep only valid suggestions"""
    return [s for s in extract_code_blocks(text) if validate_code_suggestion(s)]


def format_code_suggestion(suggestion: CodeSuggestion) -> str:
    """Render a suggestion back as a fenced block when its language is known"""
    if suggestion.language:
        return f"```{suggestion.language}\n{suggestion.code}\n```"
    return suggestion.code
