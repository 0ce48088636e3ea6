"""Code suggestion data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class InsertMode(str, Enum):
    """Where a suggestion goes relative to the cursor"""

    REPLACE = "replace"
    INSERT = "insert"
    APPEND = "append"


class CodeSuggestion(BaseModel):
    """Code extracted from an agent response, for display or insertion only"""

    model_config = ConfigDict(populate_by_name=True)

    code: str
    language: str | None = None
    description: str | None = None
    insert_mode: InsertMode = Field(default=InsertMode.INSERT, alias="insertMode")


class CodeAnalysis(BaseModel):
    """Heuristic code detection result for a response"""

    model_config = ConfigDict(populate_by_name=True)

    has_code: bool = Field(alias="hasCode")
    code_blocks: list[str] = Field(default_factory=list, alias="codeBlocks")
    confidence: float = 0.0
    total_matches: int = Field(default=0, alias="totalMatches")


class PreviewHunk(BaseModel):
    """A single change produced by applying a suggestion"""

    start_line: int  # 1-indexed
    end_line: int
    original_content: str
    new_content: str
    change_type: str  # "add", "modify", "delete"


class SuggestionPreview(BaseModel):
    """What the document would look like with a suggestion applied"""

    file_name: str
    insert_mode: InsertMode
    hunks: list[PreviewHunk]
    unified_diff: str
    preview_content: str
