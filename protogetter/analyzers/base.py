"""Base analyzer interfaces for getter-access analysis."""

from dataclasses import dataclass, field
from typing import Any

from protogetter.parsers.go_parser import GoFile
from protogetter.schemas.analysis import Mode


class ProtogetterError(Exception):
    """Base class for analyzer errors."""


@dataclass(frozen=True)
class Span:
    """Half-open byte range [start, end) within one file."""

    path: str
    start: int
    end: int

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"span end {self.end} before start {self.start}")

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end

    def overlaps(self, other: "Span") -> bool:
        return self.path == other.path and self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class TextEdit:
    """Replace bytes [pos, end) of a file with new_text."""

    path: str
    pos: int
    end: int
    new_text: str


@dataclass(frozen=True)
class SuggestedFix:
    message: str
    text_edits: tuple[TextEdit, ...] = ()


@dataclass(frozen=True)
class Diagnostic:
    """An in-process diagnostic, optionally with suggested fixes."""

    path: str
    pos: int
    end: int
    line: int
    column: int
    message: str
    suggested_fixes: tuple[SuggestedFix, ...] = ()


@dataclass(frozen=True)
class Finding:
    """A confirmed direct field read with its accessor rewrite.

    `span`, `from_text` and `to_text` describe the whole access expression.
    `suffix` is the narrower edit covering just the field identifier.
    """

    span: Span
    line: int  # 1-based
    column: int  # 1-based, in bytes
    from_text: str
    to_text: str
    field_name: str
    suffix: TextEdit

    @property
    def path(self) -> str:
        return self.span.path


@dataclass
class AnalysisPass:
    """Inputs and report sink for one analysis run."""

    files: list[GoFile]
    type_info: Any
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def report(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)


class Analyzer:
    """Base class for analyzers."""

    name: str = "base"
    doc: str = ""

    def run(self, analysis_pass: AnalysisPass, mode: Mode = Mode.STANDALONE) -> list[Any]:
        raise NotImplementedError


def line_column(source: bytes, offset: int) -> tuple[int, int]:
    """1-based line and byte column for a byte offset."""
    line = source.count(b"\n", 0, offset) + 1
    line_start = source.rfind(b"\n", 0, offset) + 1
    return line, offset - line_start + 1
