"""Schemas for analysis requests, diagnostics and aggregator issues."""

from enum import Enum

from pydantic import BaseModel, Field


class Mode(str, Enum):
    """How findings are delivered."""

    STANDALONE = "standalone"  # embedded diagnostics via AnalysisPass.report
    AGGREGATOR = "aggregator"  # structured issues returned to the caller


class Position(BaseModel):
    """File position, 1-based line and column like Go's token.Position."""

    filename: str
    offset: int = Field(..., ge=0, description="Byte offset from the start of the file")
    line: int = Field(..., ge=1)
    column: int = Field(..., ge=1, description="Byte column")


class InlineFix(BaseModel):
    """Single-line patch an aggregator can apply without re-parsing."""

    start_col: int = Field(..., ge=0, description="Zero-based byte column")
    length: int = Field(..., ge=0, description="Byte length of the original text")
    new_string: str


class Issue(BaseModel):
    """Structured issue for an external aggregator."""

    pos: Position
    message: str
    inline_fix: InlineFix


class TextEditResponse(BaseModel):
    pos: int
    end: int
    new_text: str


class SuggestedFixResponse(BaseModel):
    message: str
    text_edits: list[TextEditResponse]


class DiagnosticResponse(BaseModel):
    """Embedded diagnostic with its suggested fixes."""

    filename: str
    pos: int
    end: int
    line: int
    column: int
    message: str
    suggested_fixes: list[SuggestedFixResponse] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    """Request to analyze in-memory Go sources."""

    files: dict[str, str] = Field(..., description="Path to Go source text")
    mode: Mode = Mode.STANDALONE


class AnalyzeResponse(BaseModel):
    mode: Mode
    files_analyzed: int
    files_generated: int
    parse_errors: list[str]
    diagnostics: list[DiagnosticResponse]
    issues: list[Issue]


class FixRequest(BaseModel):
    """Request to apply every suggested fix to in-memory Go sources."""

    files: dict[str, str]


class FixResponse(BaseModel):
    files: dict[str, str]
    fixes_applied: int
