"""Tests for the syntactic exemption rules."""

import pytest

from protogetter.analyzers.classifier import Decision, classify


def _wrap(body: str) -> str:
    return f"package demo\n\nfunc f() {{\n{body}\n}}\n"


class TestClassifierStatements:
    """Test statement-level rules."""

    @pytest.mark.parametrize(
        "body, text, node_type",
        [
            ('\tu.Name = "x"', 'u.Name = "x"', "assignment_statement"),
            ("\tu.Age += 2", "u.Age += 2", "assignment_statement"),
            ("\tn, u.Name = 1, s", "n, u.Name = 1, s", "assignment_statement"),
            ("\t(u.Name) = s", "(u.Name) = s", "assignment_statement"),
            ("\tu.Age++", "u.Age++", "inc_statement"),
            ("\tu.Profile.Age--", "u.Profile.Age--", "dec_statement"),
        ],
    )
    def test_writes_skip_subtree(self, go_parser, find_node, body, text, node_type):
        go_file = go_parser.parse(_wrap(body), "demo.go")
        node = find_node(go_file, text, node_type)

        assert classify(node) is Decision.SKIP_SUBTREE

    @pytest.mark.parametrize(
        "body, text, node_type",
        [
            ("\tname = u.Name", "name = u.Name", "assignment_statement"),
            ("\tu.Items[0] = v", "u.Items[0] = v", "assignment_statement"),
            ("\ti++", "i++", "inc_statement"),
            ("\tu.Items[0]--", "u.Items[0]--", "dec_statement"),
        ],
    )
    def test_non_field_targets_descend(self, go_parser, find_node, body, text, node_type):
        go_file = go_parser.parse(_wrap(body), "demo.go")
        node = find_node(go_file, text, node_type)

        assert classify(node) is Decision.SKIP_NODE_ONLY


class TestClassifierExpressions:
    """Test expression-level rules."""

    def test_address_of_field_skips_subtree(self, go_parser, find_node):
        go_file = go_parser.parse(_wrap("\tp := &u.Name"), "demo.go")
        node = find_node(go_file, "&u.Name", "unary_expression")

        assert classify(node) is Decision.SKIP_SUBTREE

    def test_address_of_parenthesized_field(self, go_parser, find_node):
        go_file = go_parser.parse(_wrap("\tp := &(u.Name)"), "demo.go")
        node = find_node(go_file, "&(u.Name)", "unary_expression")

        assert classify(node) is Decision.SKIP_SUBTREE

    @pytest.mark.parametrize("expr", ["-u.Age", "!u.Ok", "*u.Ptr", "&local"])
    def test_other_unary_descend(self, go_parser, find_node, expr):
        go_file = go_parser.parse(_wrap(f"\tx := {expr}"), "demo.go")
        node = find_node(go_file, expr, "unary_expression")

        assert classify(node) is Decision.SKIP_NODE_ONLY

    def test_field_read_inspected(self, go_parser, find_node):
        go_file = go_parser.parse(_wrap("\tx := u.Name"), "demo.go")
        node = find_node(go_file, "u.Name", "selector_expression")

        assert classify(node) is Decision.INSPECT

    def test_method_callee_not_inspected(self, go_parser, find_node):
        """x.GetName() is a call, not a field read."""
        go_file = go_parser.parse(_wrap("\tx := u.GetName()"), "demo.go")
        node = find_node(go_file, "u.GetName", "selector_expression")

        assert classify(node) is Decision.SKIP_NODE_ONLY

    def test_selector_inside_call_arguments_inspected(self, go_parser, find_node):
        go_file = go_parser.parse(_wrap("\tfmt.Println(u.Name)"), "demo.go")

        assert classify(find_node(go_file, "fmt.Println", "selector_expression")) is Decision.SKIP_NODE_ONLY
        assert classify(find_node(go_file, "u.Name", "selector_expression")) is Decision.INSPECT

    def test_unrelated_nodes_descend(self, go_parser, find_node):
        go_file = go_parser.parse(_wrap("\tx := 1"), "demo.go")

        assert classify(go_file.root) is Decision.SKIP_NODE_ONLY
        assert classify(find_node(go_file, "x := 1")) is Decision.SKIP_NODE_ONLY
