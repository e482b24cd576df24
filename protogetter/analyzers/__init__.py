"""Analyzer registry."""

from protogetter.analyzers.base import (
    AnalysisPass,
    Analyzer,
    Diagnostic,
    Finding,
    Mode,
    Span,
    SuggestedFix,
    TextEdit,
)
from protogetter.analyzers.protogetter_analyzer import ProtogetterAnalyzer

__all__ = [
    "AnalysisPass",
    "Analyzer",
    "Diagnostic",
    "Finding",
    "Mode",
    "Span",
    "SuggestedFix",
    "TextEdit",
    "ProtogetterAnalyzer",
]
