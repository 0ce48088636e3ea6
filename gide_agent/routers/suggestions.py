"""Code suggestion API endpoints"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from ..models.suggestion import CodeAnalysis, CodeSuggestion, SuggestionPreview
from ..services.code_suggestions import analyze_code_content, process_agent_response
from ..services.suggestion_preview import SuggestionPreviewer

router = APIRouter()
previewer = SuggestionPreviewer()


class ExtractRequest(BaseModel):
    response: str


class ExtractResponse(BaseModel):
    analysis: CodeAnalysis
    suggestions: list[CodeSuggestion]


class PreviewRequest(BaseModel):
    """Document state the suggestion would be applied to"""

    model_config = ConfigDict(populate_by_name=True)

    document: str
    suggestion: CodeSuggestion
    file_name: str = Field(default="untitled", alias="fileName")
    cursor: int = Field(default=0, ge=0)  # character offset
    selection: tuple[int, int] | None = None


@router.post("/extract", response_model=ExtractResponse, response_model_by_alias=True)
async def extract(request: ExtractRequest) -> ExtractResponse:
    """Analyze a response for code and extract insertable suggestions"""
    return ExtractResponse(
        analysis=analyze_code_content(request.response),
        suggestions=process_agent_response(request.response),
    )


@router.post("/preview", response_model=SuggestionPreview)
async def preview(request: PreviewRequest) -> SuggestionPreview:
    """Diff of the document with the suggestion applied (the editor performs the edit)"""
    return previewer.generate_preview(
        request.document,
        request.suggestion,
        request.file_name,
        request.cursor,
        request.selection,
    )
