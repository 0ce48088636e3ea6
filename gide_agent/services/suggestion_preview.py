"""
Suggestion Preview - Apply a code suggestion to document text and diff the result
"""

from __future__ import annotations

import html
from difflib import SequenceMatcher, unified_diff

from ..models.suggestion import CodeSuggestion, InsertMode, PreviewHunk, SuggestionPreview
from .sanitize import sanitize_file_path, sanitize_html


def apply_code_suggestion(
    document: str,
    suggestion: CodeSuggestion,
    cursor: int,
    selection: tuple[int, int] | None = None,
) -> str:
    """Return the document text with the suggestion applied at the cursor.

    Suggestion code is stored HTML-encoded for display; the editor buffer
    receives the decoded text. Offsets are clamped to the document.
    """
    code = html.unescape(suggestion.code)
    cursor = max(0, min(cursor, len(document)))

    if suggestion.insert_mode == InsertMode.REPLACE and selection and selection[0] != selection[1]:
        start, end = sorted(max(0, min(offset, len(document))) for offset in selection)
        return document[:start] + code + document[end:]

    if suggestion.insert_mode == InsertMode.APPEND:
        line_end = document.find("\n", cursor)
        if line_end == -1:
            line_end = len(document)
        return document[:line_end] + "\n" + code + document[line_end:]

    # insert, or replace without a selection
    return document[:cursor] + code + document[cursor:]


class SuggestionPreviewer:
    """Generate display-safe diffs of what a suggestion would change"""

    def generate_preview(
        self,
        document: str,
        suggestion: CodeSuggestion,
        file_name: str,
        cursor: int,
        selection: tuple[int, int] | None = None,
    ) -> SuggestionPreview:
        """Structured diff between the document and the document with the suggestion applied"""
        file_name = sanitize_file_path(file_name) or "untitled"
        new_document = apply_code_suggestion(document, suggestion, cursor, selection)

        original_lines = document.splitlines(keepends=True)
        new_lines = new_document.splitlines(keepends=True)

        # Ensure last lines have newlines for proper diff
        if original_lines and not original_lines[-1].endswith("\n"):
            original_lines[-1] += "\n"
        if new_lines and not new_lines[-1].endswith("\n"):
            new_lines[-1] += "\n"

        unified = unified_diff(
            original_lines,
            new_lines,
            fromfile=f"a/{file_name}",
            tofile=f"b/{file_name}",
        )

        return SuggestionPreview(
            file_name=file_name,
            insert_mode=suggestion.insert_mode,
            hunks=self._extract_hunks(original_lines, new_lines),
            unified_diff=sanitize_html("".join(unified)),
            preview_content=sanitize_html("".join(new_lines)),
        )

    def _extract_hunks(self, original: list[str], modified: list[str]) -> list[PreviewHunk]:
        matcher = SequenceMatcher(None, original, modified)
        hunks = []

        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                continue

            change_type = "add" if tag == "insert" else "delete" if tag == "delete" else "modify"
            hunks.append(
                PreviewHunk(
                    start_line=i1 + 1,  # 1-indexed for the editor
                    end_line=i2,
                    original_content=sanitize_html("".join(original[i1:i2])),
                    new_content=sanitize_html("".join(modified[j1:j2])),
                    change_type=change_type,
                )
            )

        return hunks
