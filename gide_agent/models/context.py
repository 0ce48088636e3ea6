"""Editor context data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

MAX_CONTEXT_STRING_LENGTH = 10000


class ContextMode(str, Enum):
    """How much editor state is attached to an agent request"""

    NONE = "none"
    FILE = "file"
    SELECTION = "selection"
    WORKSPACE = "workspace"


class EditorContext(BaseModel):
    """Sanitized editor context sent alongside a request.

    Rebuilt on every collection and never mutated afterwards.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    current_file: str | None = Field(default=None, alias="currentFile", max_length=MAX_CONTEXT_STRING_LENGTH)
    language: str | None = Field(default=None, max_length=MAX_CONTEXT_STRING_LENGTH)
    selected_text: str | None = Field(default=None, alias="selectedText", max_length=MAX_CONTEXT_STRING_LENGTH)
    line_number: int | None = Field(default=None, alias="lineNumber", ge=0)  # 1-indexed
    column: int | None = Field(default=None, ge=0)  # 1-indexed
    workspace_root: str | None = Field(default=None, alias="workspaceRoot", max_length=MAX_CONTEXT_STRING_LENGTH)

    def to_payload(self) -> dict:
        """Wire representation: camelCase keys, absent values omitted"""
        return self.model_dump(by_alias=True, exclude_none=True)

    def is_empty(self) -> bool:
        return not self.to_payload()


class EditorSnapshot(BaseModel):
    """Raw editor state as reported by the host (0-indexed positions)"""

    model_config = ConfigDict(populate_by_name=True)

    active_document_path: str | None = Field(default=None, alias="activeDocumentPath")
    active_document_language: str | None = Field(default=None, alias="activeDocumentLanguage")
    selection_text: str | None = Field(default=None, alias="selectionText")
    selection_line: int | None = Field(default=None, alias="selectionLine", ge=0)
    selection_character: int | None = Field(default=None, alias="selectionCharacter", ge=0)
    workspace_folders: list[str] = Field(default_factory=list, alias="workspaceFolders")
