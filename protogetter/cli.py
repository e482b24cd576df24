"""Command-line entry point."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from protogetter import __version__
from protogetter.analyzers import Mode
from protogetter.config import get_settings
from protogetter.services.analysis_service import AnalysisResult, AnalysisService
from protogetter.services.fix_service import FixService

EXIT_FINDINGS = 3
EXIT_ERROR = 1

logger = logging.getLogger(__name__)


def render_human(result: AnalysisResult) -> str:
    lines = []
    if result.mode is Mode.AGGREGATOR:
        for issue in result.issues:
            lines.append(f"{issue.pos.filename}:{issue.pos.line}:{issue.pos.column}: {issue.message}")
        for error in result.errors:
            lines.append(f"{error.path}:{error.line}:{error.column}: {error.message}")
    else:
        for diagnostic in result.diagnostics:
            lines.append(f"{diagnostic.path}:{diagnostic.line}:{diagnostic.column}: {diagnostic.message}")
    for error in result.parse_errors:
        lines.append(f"error: {error}")
    return "\n".join(lines)


def render_json(result: AnalysisResult) -> str:
    if result.mode is Mode.AGGREGATOR:
        payload = {"Issues": [issue.model_dump() for issue in result.issues]}
    else:
        payload = {
            "Diagnostics": [
                {
                    "path": d.path,
                    "line": d.line,
                    "column": d.column,
                    "message": d.message,
                    "fixes": [
                        {"pos": e.pos, "end": e.end, "new_text": e.new_text}
                        for fix in d.suggested_fixes
                        for e in fix.text_edits
                    ],
                }
                for d in result.diagnostics
            ]
        }
    return json.dumps(payload, indent=2)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="protogetter",
        description=f"protogetter v{__version__}: report direct proto field reads where getters should be used",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        default=["."],
        help="Go files or directories to analyze (default: current directory)",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in Mode],
        default=settings.mode,
        help="standalone: diagnostics with suggested fixes; aggregator: issues with inline fixes",
    )
    parser.add_argument(
        "--fix",
        action="store_true",
        help="Apply suggested fixes in place",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    service = AnalysisService(settings)
    mode = Mode.STANDALONE if args.fix else Mode(args.mode)
    result = service.analyze_paths(args.paths, mode)

    if args.fix:
        try:
            applied = FixService().fix_files(result.diagnostics)
        except (ValueError, OSError) as e:
            logger.error(f"Failed to apply fixes: {e}")
            print(f"error: {e}", file=sys.stderr)
            return EXIT_ERROR
        print(f"Applied {applied} fixes")
        return 0

    output = render_json(result) if args.json else render_human(result)
    if output:
        print(output)

    return EXIT_FINDINGS if result.findings_count else 0


if __name__ == "__main__":
    raise SystemExit(main())
