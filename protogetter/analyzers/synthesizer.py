"""Builds the From/To text and edit ranges for a confirmed field read."""

from tree_sitter import Node

from protogetter.analyzers.base import Finding, ProtogetterError, Span, TextEdit, line_column
from protogetter.analyzers.classifier import Decision, classify
from protogetter.analyzers.oracle import CapabilityOracle
from protogetter.parsers.go_parser import GoFile


class SynthesisError(ProtogetterError):
    """Raised when a node cannot be re-printed exactly."""


class FindingSynthesizer:
    """Re-prints an access expression with accessor calls substituted.

    Every qualifying field link inside the expression is rewritten, not just
    the outermost one, so `a.B.C` becomes `a.GetB().GetC()` and applying the
    fix leaves nothing for a second run to report. Source between tokens is
    copied verbatim.
    """

    def __init__(self, oracle: CapabilityOracle):
        self.oracle = oracle

    def synthesize(self, go_file: GoFile, node: Node, accessor: str) -> Finding:
        """
        Build the finding for a selector already accepted by the oracle.

        Args:
            go_file: File the node belongs to
            node: The selector_expression being reported
            accessor: Accessor name for the node's field (e.g. "GetName")

        Raises:
            SynthesisError: if the node is malformed or contains parse errors
        """
        if node.type != "selector_expression":
            raise SynthesisError(f"expected selector_expression, got {node.type}")
        if node.has_error:
            raise SynthesisError(f"cannot format expression with syntax errors: {self._text(go_file, node)!r}")

        operand = node.child_by_field_name("operand")
        field_node = node.child_by_field_name("field")
        if operand is None or field_node is None:
            raise SynthesisError("selector without operand or field")

        replacement = accessor + "()"
        to_text = (
            self._render(go_file, operand)
            + self._slice(go_file, operand.end_byte, field_node.start_byte)
            + replacement
        )
        line, column = line_column(go_file.source, node.start_byte)

        return Finding(
            span=Span(go_file.path, node.start_byte, node.end_byte),
            line=line,
            column=column,
            from_text=self._text(go_file, node),
            to_text=to_text,
            field_name=self._text(go_file, field_node),
            suffix=TextEdit(
                path=go_file.path,
                pos=field_node.start_byte,
                end=field_node.end_byte,
                new_text=replacement,
            ),
        )

    def _render(self, go_file: GoFile, node: Node) -> str:
        if node.is_missing or node.type == "ERROR":
            raise SynthesisError(f"malformed node at byte {node.start_byte}")

        decision = classify(node)
        if decision is Decision.SKIP_SUBTREE or node.type == "func_literal":
            return self._text(go_file, node)

        if decision is Decision.INSPECT:
            operand = node.child_by_field_name("operand")
            field_node = node.child_by_field_name("field")
            if operand is None or field_node is None:
                raise SynthesisError("selector without operand or field")
            head = self._render(go_file, operand) + self._slice(go_file, operand.end_byte, field_node.start_byte)
            name = self._text(go_file, field_node)
            accessor = self.oracle.accessor_for(operand, name)
            if accessor is not None:
                return head + accessor + "()"
            return head + name

        parts = []
        cursor = node.start_byte
        for child in node.named_children:
            parts.append(self._slice(go_file, cursor, child.start_byte))
            parts.append(self._render(go_file, child))
            cursor = child.end_byte
        parts.append(self._slice(go_file, cursor, node.end_byte))
        return "".join(parts)

    @staticmethod
    def _slice(go_file: GoFile, start: int, end: int) -> str:
        return go_file.source[start:end].decode("utf-8")

    def _text(self, go_file: GoFile, node: Node) -> str:
        return self._slice(go_file, node.start_byte, node.end_byte)
