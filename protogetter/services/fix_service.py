"""Applies suggested fixes and inline fixes to Go sources."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from protogetter.analyzers import Diagnostic, TextEdit
from protogetter.schemas.analysis import Issue

logger = logging.getLogger(__name__)


class FixService:
    """Turns findings into rewritten sources."""

    def collect_edits(self, diagnostics: Iterable[Diagnostic]) -> dict[str, list[TextEdit]]:
        """Group every suggested text edit by file."""
        edits: dict[str, list[TextEdit]] = defaultdict(list)
        for diagnostic in diagnostics:
            for fix in diagnostic.suggested_fixes:
                for edit in fix.text_edits:
                    edits[edit.path].append(edit)
        return edits

    def apply_edits(self, source: bytes, edits: Iterable[TextEdit]) -> bytes:
        """Apply non-overlapping byte edits, last to first.

        Raises:
            ValueError: if two edits overlap or an edit falls outside the source
        """
        ordered = sorted(edits, key=lambda e: (e.pos, e.end))
        for previous, current in zip(ordered, ordered[1:]):
            if current.pos < previous.end:
                raise ValueError(
                    f"overlapping edits in {current.path}: "
                    f"[{previous.pos},{previous.end}) and [{current.pos},{current.end})"
                )
        if ordered and ordered[-1].end > len(source):
            raise ValueError(f"edit beyond end of {ordered[-1].path}")

        result = source
        for edit in reversed(ordered):
            result = result[:edit.pos] + edit.new_text.encode("utf-8") + result[edit.end:]
        return result

    def fix_sources(
        self, sources: dict[str, str | bytes], diagnostics: Iterable[Diagnostic]
    ) -> tuple[dict[str, str], int]:
        """Apply all suggested fixes to in-memory sources.

        Returns:
            (fixed sources by path, number of edits applied)
        """
        edits = self.collect_edits(diagnostics)
        fixed: dict[str, str] = {}
        applied = 0
        for path, code in sources.items():
            source = code.encode("utf-8") if isinstance(code, str) else code
            file_edits = edits.get(path, [])
            fixed[path] = self.apply_edits(source, file_edits).decode("utf-8")
            applied += len(file_edits)
        return fixed, applied

    def fix_files(self, diagnostics: Iterable[Diagnostic]) -> int:
        """Rewrite files on disk in place. Returns the number of edits applied."""
        applied = 0
        for path, file_edits in self.collect_edits(diagnostics).items():
            with open(path, "rb") as handle:
                source = handle.read()
            fixed = self.apply_edits(source, file_edits)
            with open(path, "wb") as handle:
                handle.write(fixed)
            applied += len(file_edits)
            logger.info(f"Applied {len(file_edits)} fixes to {path}")
        return applied

    def apply_inline_fixes(self, source: str, issues: Iterable[Issue]) -> str:
        """Apply aggregator inline fixes using only line and column.

        Mirrors how an aggregator patches a file: the original text starts at
        (line, start_col) and runs for `length` bytes.
        """
        data = source.encode("utf-8")
        line_starts = [0]
        for i, byte in enumerate(data):
            if byte == 0x0A:
                line_starts.append(i + 1)

        edits = []
        for issue in issues:
            start = line_starts[issue.pos.line - 1] + issue.inline_fix.start_col
            edits.append(
                TextEdit(
                    path=issue.pos.filename,
                    pos=start,
                    end=start + issue.inline_fix.length,
                    new_text=issue.inline_fix.new_string,
                )
            )
        return self.apply_edits(data, edits).decode("utf-8")
