"""Reports direct reads of generated message fields where getters should be used.

Pipeline per visited node:
classifier -> capability oracle -> span registry -> synthesizer -> adapter.
Nodes are visited depth-first, pre-order, so of two nested candidates the
outer one is reported and the inner one is suppressed by the registry.
"""

import logging
from typing import Iterator, Optional

from tree_sitter import Node

from protogetter.analyzers.base import (
    AnalysisPass,
    Analyzer,
    Diagnostic,
    Mode,
    Span,
    line_column,
)
from protogetter.analyzers.classifier import Decision, classify
from protogetter.analyzers.oracle import GETTER_PREFIX, CapabilityOracle
from protogetter.analyzers.pos_filter import PosFilter
from protogetter.analyzers.report import Report
from protogetter.analyzers.synthesizer import FindingSynthesizer, SynthesisError
from protogetter.parsers.go_parser import GoFile
from protogetter.schemas.analysis import Issue

logger = logging.getLogger(__name__)


def iter_candidates(root: Node) -> Iterator[Node]:
    """Pre-order walk yielding nodes to inspect, pruning exempt subtrees."""
    stack = [root]
    while stack:
        node = stack.pop()
        decision = classify(node)
        if decision is Decision.SKIP_SUBTREE:
            continue
        if decision is Decision.INSPECT:
            yield node
        stack.extend(reversed(node.named_children))


class ProtogetterAnalyzer(Analyzer):
    """Reports direct reads from proto message fields when getters should be used."""

    name = "protogetter"
    doc = "Reports direct reads from proto message fields when getters should be used"

    def __init__(self, getter_prefix: str = GETTER_PREFIX):
        self.getter_prefix = getter_prefix

    def run(self, analysis_pass: AnalysisPass, mode: Mode = Mode.STANDALONE) -> list[Issue]:
        """
        Analyze every non-generated file of the pass.

        In standalone mode diagnostics go to analysis_pass.report and the
        returned list is empty. In aggregator mode issues are returned in
        traversal order.
        """
        oracle = CapabilityOracle(analysis_pass.type_info, self.getter_prefix)
        synthesizer = FindingSynthesizer(oracle)
        pos_filter = PosFilter()
        issues: list[Issue] = []

        files = [f for f in analysis_pass.files if not f.is_generated]
        skipped = len(analysis_pass.files) - len(files)

        for go_file in files:
            for node in iter_candidates(go_file.root):
                report = self.analyse(analysis_pass, go_file, node, oracle, synthesizer, pos_filter)
                if report is None:
                    continue
                if mode is Mode.STANDALONE:
                    analysis_pass.report(report.to_diagnostic())
                else:
                    issues.append(report.to_issue())

        logger.info(
            f"{self.name}: {len(files)} files analyzed, {skipped} generated files skipped, "
            f"{len(pos_filter)} findings"
        )
        return issues

    def analyse(
        self,
        analysis_pass: AnalysisPass,
        go_file: GoFile,
        node: Node,
        oracle: CapabilityOracle,
        synthesizer: FindingSynthesizer,
        pos_filter: PosFilter,
    ) -> Optional[Report]:
        """Decide one selector; None when it produces no finding."""
        if pos_filter.is_filtered(go_file.path, node.start_byte):
            return None

        operand = node.child_by_field_name("operand")
        field_node = node.child_by_field_name("field")
        if operand is None or field_node is None:
            return None

        accessor = oracle.accessor_for(operand, go_file.text(field_node))
        if accessor is None:
            return None

        span = Span(go_file.path, node.start_byte, node.end_byte)
        if pos_filter.is_already_replaced(span):
            return None

        try:
            finding = synthesizer.synthesize(go_file, node, accessor)
        except SynthesisError as e:
            line, column = line_column(go_file.source, node.start_byte)
            logger.warning(f"{go_file.path}:{line}:{column}: {e}")
            analysis_pass.report(
                Diagnostic(
                    path=go_file.path,
                    pos=node.start_byte,
                    end=node.end_byte,
                    line=line,
                    column=column,
                    message=f"error: {e}",
                )
            )
            return None

        pos_filter.register(span)
        return Report(finding)
