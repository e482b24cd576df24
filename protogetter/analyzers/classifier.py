"""Syntactic exemptions for field accesses.

A field access is only rewritable when it is a pure read. Writes, increments
and address-taking need an addressable location that an accessor call
cannot provide, so those positions are excluded before any type query.
"""

from enum import Enum
from typing import Callable, Optional

from tree_sitter import Node


class Decision(Enum):
    """What the traversal does with a node."""

    SKIP_SUBTREE = "skip_subtree"
    SKIP_NODE_ONLY = "skip_node_only"
    INSPECT = "inspect"


def _unparen(node: Optional[Node]) -> Optional[Node]:
    while node is not None and node.type == "parenthesized_expression" and node.named_children:
        node = node.named_children[0]
    return node


def _is_field_access(node: Optional[Node]) -> bool:
    node = _unparen(node)
    return node is not None and node.type == "selector_expression"


def _classify_assignment(node: Node) -> Decision:
    # x.A = v, x.A.B += v
    left = node.child_by_field_name("left")
    targets = left.named_children if left is not None else []
    if any(_is_field_access(target) for target in targets):
        return Decision.SKIP_SUBTREE
    return Decision.SKIP_NODE_ONLY


def _classify_inc_dec(node: Node) -> Decision:
    # x.A++, x.A--
    operand = node.named_children[0] if node.named_children else None
    if _is_field_access(operand):
        return Decision.SKIP_SUBTREE
    return Decision.SKIP_NODE_ONLY


def _classify_unary(node: Node) -> Decision:
    # &x.A; other unary operators read the field
    operator = node.child_by_field_name("operator")
    if operator is not None and operator.type == "&" and _is_field_access(node.child_by_field_name("operand")):
        return Decision.SKIP_SUBTREE
    return Decision.SKIP_NODE_ONLY


def _classify_selector(node: Node) -> Decision:
    parent = node.parent
    if parent is not None and parent.type == "call_expression":
        function = parent.child_by_field_name("function")
        if function is not None and function == node:
            # x.Method(): a method reference, not a field read
            return Decision.SKIP_NODE_ONLY
    return Decision.INSPECT


_RULES: dict[str, Callable[[Node], Decision]] = {
    "assignment_statement": _classify_assignment,
    "inc_statement": _classify_inc_dec,
    "dec_statement": _classify_inc_dec,
    "unary_expression": _classify_unary,
    "selector_expression": _classify_selector,
}


def classify(node: Node) -> Decision:
    """Classify a node for the pre-order traversal."""
    rule = _RULES.get(node.type)
    if rule is None:
        return Decision.SKIP_NODE_ONLY
    return rule(node)
