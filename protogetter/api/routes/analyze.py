"""Analysis routes."""

import logging

from fastapi import APIRouter, HTTPException, status

from protogetter.analyzers import Diagnostic, Mode
from protogetter.schemas.analysis import (
    AnalyzeRequest,
    AnalyzeResponse,
    DiagnosticResponse,
    FixRequest,
    FixResponse,
    SuggestedFixResponse,
    TextEditResponse,
)
from protogetter.services.analysis_service import AnalysisService
from protogetter.services.fix_service import FixService

logger = logging.getLogger(__name__)

router = APIRouter()


def _diagnostic_response(diagnostic: Diagnostic) -> DiagnosticResponse:
    return DiagnosticResponse(
        filename=diagnostic.path,
        pos=diagnostic.pos,
        end=diagnostic.end,
        line=diagnostic.line,
        column=diagnostic.column,
        message=diagnostic.message,
        suggested_fixes=[
            SuggestedFixResponse(
                message=fix.message,
                text_edits=[
                    TextEditResponse(pos=e.pos, end=e.end, new_text=e.new_text)
                    for e in fix.text_edits
                ],
            )
            for fix in diagnostic.suggested_fixes
        ],
    )


def _require_files(files: dict[str, str]) -> None:
    if not files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one source file is required",
        )


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(request: AnalyzeRequest):
    """Analyze Go sources for direct proto field reads.

    Standalone mode returns diagnostics with suggested fixes; aggregator
    mode returns issues with inline fixes.
    """
    _require_files(request.files)

    service = AnalysisService()
    result = service.analyze_sources(request.files, request.mode)

    return AnalyzeResponse(
        mode=result.mode,
        files_analyzed=result.files_analyzed,
        files_generated=result.files_generated,
        parse_errors=result.parse_errors,
        diagnostics=[_diagnostic_response(d) for d in result.diagnostics],
        issues=result.issues,
    )


@router.post("/fix", response_model=FixResponse)
async def fix(request: FixRequest):
    """Apply every suggested fix and return the rewritten sources."""
    _require_files(request.files)

    result = AnalysisService().analyze_sources(request.files, Mode.STANDALONE)
    try:
        fixed, applied = FixService().fix_sources(request.files, result.diagnostics)
    except ValueError as e:
        logger.error(f"Failed to apply fixes: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    return FixResponse(files=fixed, fixes_applied=applied)
