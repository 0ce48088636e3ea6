from __future__ import annotations

from gide_agent.models import CodeSuggestion, InsertMode
from gide_agent.services.suggestion_preview import SuggestionPreviewer, apply_code_suggestion


def suggestion(code, mode=InsertMode.INSERT):
    return CodeSuggestion(code=code, insert_mode=mode)


class TestApplyCodeSuggestion:
    """Insert, replace and append relative to the cursor"""

    def test_insert_at_cursor(self):
        assert apply_code_suggestion("a\nb\n", suggestion("X\n"), cursor=2) == "a\nX\nb\n"

    def test_replace_selection(self):
        result = apply_code_suggestion("a\nb\n", suggestion("B", InsertMode.REPLACE), cursor=2, selection=(3, 2))
        assert result == "a\nB\n"

    def test_replace_without_selection_inserts(self):
        assert apply_code_suggestion("ab", suggestion("X", InsertMode.REPLACE), cursor=1) == "aXb"

    def test_append_after_current_line(self):
        assert apply_code_suggestion("line1\nline2", suggestion("new", InsertMode.APPEND), cursor=0) == (
            "line1\nnew\nline2"
        )

    def test_code_is_decoded_for_the_buffer(self):
        assert apply_code_suggestion("", suggestion("if a &lt; b: pass"), cursor=0) == "if a < b: pass"

    def test_cursor_is_clamped(self):
        assert apply_code_suggestion("abc", suggestion("!"), cursor=99) == "abc!"


class TestSuggestionPreviewer:
    def test_preview_of_inserted_line(self):
        preview = SuggestionPreviewer().generate_preview("a\nb\n", suggestion("X\n"), "src/app.py", cursor=2)

        assert preview.file_name == "src/app.py"
        assert preview.insert_mode is InsertMode.INSERT
        assert "+X" in preview.unified_diff
        assert preview.preview_content == "a\nX\nb\n"
        assert len(preview.hunks) == 1
        hunk = preview.hunks[0]
        assert hunk.change_type == "add"
        assert hunk.start_line == 2
        assert hunk.new_content == "X\n"

    def test_preview_is_display_safe(self):
        preview = SuggestionPreviewer().generate_preview(
            "x\n", suggestion("&lt;script&gt;", InsertMode.REPLACE), "../page.html", cursor=0, selection=(0, 1)
        )

        assert preview.file_name == "page.html"
        assert "<script>" not in preview.unified_diff
        assert preview.preview_content == "&lt;script&gt;\n"
        assert preview.hunks[0].change_type == "modify"

    def test_no_change_has_no_hunks(self):
        preview = SuggestionPreviewer().generate_preview("abc\n", suggestion(""), "f.txt", cursor=0)
        assert preview.hunks == []
        assert preview.unified_diff == ""
