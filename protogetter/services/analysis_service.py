"""Service for discovering, parsing and analyzing Go sources."""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from protogetter.analyzers import AnalysisPass, Diagnostic, Mode, ProtogetterAnalyzer
from protogetter.config import Settings, get_settings
from protogetter.parsers.go_parser import GoParser
from protogetter.schemas.analysis import Issue
from protogetter.services.type_index import TypeIndexService

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Outcome of one analysis run."""

    mode: Mode
    diagnostics: list[Diagnostic] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    files_analyzed: int = 0
    files_generated: int = 0
    files_skipped: dict[str, list[str]] = field(default_factory=dict)  # reason -> files
    parse_errors: list[str] = field(default_factory=list)

    @property
    def findings_count(self) -> int:
        if self.mode is Mode.AGGREGATOR:
            return len(self.issues)
        return sum(1 for d in self.diagnostics if d.suggested_fixes)

    @property
    def errors(self) -> list[Diagnostic]:
        """Tool-internal errors reported at node positions."""
        return [d for d in self.diagnostics if not d.suggested_fixes]


class AnalysisService:
    """Runs the getter analyzer over files on disk or in memory."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.parser = GoParser(generated_marker=self.settings.generated_marker)
        self.type_index_service = TypeIndexService()
        self.analyzer = ProtogetterAnalyzer(getter_prefix=self.settings.getter_prefix)

    def discover_files(self, path: str) -> tuple[list[str], dict[str, list[str]]]:
        """Find Go files under a path.

        Returns:
            (files, skipped) where skipped maps reason -> paths
        """
        skipped: dict[str, list[str]] = {}
        extension = self.settings.file_extension

        if os.path.isfile(path):
            return [path], skipped

        files = []
        for root, dirs, filenames in os.walk(path):
            dirs[:] = sorted(d for d in dirs if d not in self.settings.skip_dirs)
            for filename in sorted(filenames):
                if not filename.endswith(extension):
                    continue
                file_path = os.path.join(root, filename)
                try:
                    size = os.path.getsize(file_path)
                except OSError:
                    skipped.setdefault("unreadable", []).append(file_path)
                    continue
                if size > self.settings.max_file_size:
                    skipped.setdefault("too_large", []).append(file_path)
                    continue
                files.append(file_path)
        return files, skipped

    def load_sources(self, paths: list[str]) -> tuple[dict[str, bytes], list[str]]:
        """Read files as bytes; unreadable files become errors."""
        sources: dict[str, bytes] = {}
        errors: list[str] = []
        for file_path in paths:
            try:
                with open(file_path, "rb") as handle:
                    sources[file_path] = handle.read()
            except OSError as e:
                logger.warning(f"Failed to read {file_path}: {e}")
                errors.append(f"{file_path}: {e}")
        return sources, errors

    def analyze_paths(self, paths: list[str], mode: Mode | None = None) -> AnalysisResult:
        """Analyze files and directory trees on disk."""
        files: list[str] = []
        skipped: dict[str, list[str]] = {}
        for path in paths:
            found, path_skipped = self.discover_files(path)
            files.extend(found)
            for reason, skipped_files in path_skipped.items():
                skipped.setdefault(reason, []).extend(skipped_files)

        sources, read_errors = self.load_sources(files)
        result = self.analyze_sources(sources, mode)
        result.files_skipped = skipped
        result.parse_errors = read_errors + result.parse_errors
        return result

    def analyze_sources(self, sources: dict[str, str | bytes], mode: Mode | None = None) -> AnalysisResult:
        """Analyze in-memory sources as one run with one span registry."""
        mode = Mode(mode or self.settings.mode)
        parse_result = self.parser.parse_many(sources)
        type_index = self.type_index_service.build_index(parse_result.files)

        analysis_pass = AnalysisPass(files=parse_result.files, type_info=type_index)
        issues = self.analyzer.run(analysis_pass, mode)

        generated = len(parse_result.generated_files)
        result = AnalysisResult(
            mode=mode,
            diagnostics=analysis_pass.diagnostics,
            issues=issues,
            files_analyzed=parse_result.files_parsed - generated,
            files_generated=generated,
            parse_errors=list(parse_result.errors),
        )
        logger.info(
            f"Analysis complete: {result.files_analyzed} files, "
            f"{result.files_generated} generated, {result.findings_count} findings"
        )
        return result
