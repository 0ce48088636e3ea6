from __future__ import annotations

import pytest

from gide_agent.models import CodeSuggestion, InsertMode
from gide_agent.services.code_suggestions import (
    analyze_code_content,
    extract_code_blocks,
    format_code_suggestion,
    process_agent_response,
    validate_code_suggestion,
)

JS_RESPONSE = "```javascript\nfunction hello(){}\n```"


class TestAnalyze:
    """Heuristic code detection"""

    def test_fenced_block_is_detected(self):
        analysis = analyze_code_content(JS_RESPONSE)
        assert analysis.has_code is True
        assert analysis.code_blocks == [JS_RESPONSE]
        assert 0 < analysis.confidence <= 1

    def test_plain_prose_has_no_code(self):
        analysis = analyze_code_content("Hello there, how are you today?")
        assert analysis.has_code is False
        assert analysis.code_blocks == []
        assert analysis.confidence == 0

    def test_keywords_alone_can_signal_code(self):
        analysis = analyze_code_content("return x")
        assert analysis.code_blocks == []
        assert analysis.total_matches == 1
        assert analysis.confidence == 1.0
        assert analysis.has_code is True

    @pytest.mark.parametrize("value", ["", None, 42])
    def test_empty_or_invalid_input(self, value):
        analysis = analyze_code_content(value)
        assert analysis.has_code is False
        assert analysis.confidence == 0


class TestExtract:
    def test_single_block_with_language(self):
        suggestions = extract_code_blocks(JS_RESPONSE)

        assert len(suggestions) == 1
        suggestion = suggestions[0]
        assert suggestion.language == "javascript"
        assert suggestion.code == "function hello(){}"
        assert suggestion.description == "Code block (javascript)"
        assert suggestion.insert_mode is InsertMode.INSERT
        assert not any(ch in suggestion.code for ch in "<>\"'")

    def test_block_body_is_sanitized(self):
        suggestion = extract_code_blocks("```html\n<div class='x'></div>\n```")[0]
        assert suggestion.code == "&lt;div class=&#x27;x&#x27;&gt;&lt;&#x2F;div&gt;"

    def test_multiple_blocks_without_language(self):
        suggestions = extract_code_blocks("First:\n```\nx = 1\n```\nThen:\n```python\ny = 2\n```")
        assert [(s.language, s.code) for s in suggestions] == [(None, "x = 1"), ("python", "y = 2")]
        assert suggestions[0].description == "Code block"

    def test_empty_block_is_discarded(self):
        assert extract_code_blocks("```\n   \n```") == []

    def test_inline_code_fallback(self):
        suggestions = extract_code_blocks("Call `items.sort()` or use `x`.")
        assert [s.code for s in suggestions] == ["items.sort()"]
        assert suggestions[0].description == "Inline code"

    def test_inline_code_ignored_when_blocks_exist(self):
        suggestions = extract_code_blocks("Use `items.sort()`:\n```python\nitems.sort()\n```")
        assert len(suggestions) == 1
        assert suggestions[0].language == "python"


class TestValidate:
    def test_accepts_valid(self):
        assert validate_code_suggestion({"code": "x"})
        assert validate_code_suggestion({"code": "x", "insertMode": "append"})
        assert validate_code_suggestion(CodeSuggestion(code="x", insert_mode=InsertMode.REPLACE))

    @pytest.mark.parametrize(
        "candidate",
        [
            {"code": ""},
            {"code": "x", "insertMode": "overwrite"},
            {"code": "x", "language": 3},
            {"language": "python"},
            "code",
        ],
    )
    def test_rejects_invalid(self, candidate):
        assert validate_code_suggestion(candidate) is False


def test_process_agent_response_returns_valid_suggestions():
    assert [s.code for s in process_agent_response(JS_RESPONSE)] == ["function hello(){}"]
    assert process_agent_response(None) == []


def test_format_code_suggestion():
    assert format_code_suggestion(CodeSuggestion(code="x = 1", language="python")) == "```python\nx = 1\n```"
    assert format_code_suggestion(CodeSuggestion(code="x = 1")) == "x = 1"
