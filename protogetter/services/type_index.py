"""Declaration-driven type index for Go sources.

Answers the two questions the capability oracle asks:
- what is the static type of this expression?
- does this type (or the type it points to) declare a method named X?

Resolution is best-effort. Types are keyed by their unqualified name across
every indexed file, so `pb.User` and `User` resolve to the same entry.
Anything the index cannot follow resolves to None. Local names are block
scoped: a name whose type cannot be inferred hides any outer name it
shadows instead of inheriting its type.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from tree_sitter import Node

from protogetter.parsers.go_parser import GoFile

logger = logging.getLogger(__name__)

MAX_EMBED_DEPTH = 8


@dataclass(frozen=True)
class GoType:
    """A resolved Go type."""

    kind: str  # named, pointer, slice, map, other
    name: str = ""
    elem: Optional["GoType"] = None

    @classmethod
    def named(cls, name: str) -> "GoType":
        return cls("named", name)

    @classmethod
    def pointer_to(cls, elem: "GoType") -> "GoType":
        return cls("pointer", elem=elem)

    def deref(self) -> "GoType":
        """Strip one level of pointer indirection."""
        if self.kind == "pointer" and self.elem is not None:
            return self.elem
        return self

    def __str__(self) -> str:
        if self.kind == "pointer":
            return f"*{self.elem}"
        if self.kind == "slice":
            return f"[]{self.elem}"
        if self.kind == "map":
            return f"map[...]{self.elem}"
        return self.name


def _text(node: Node) -> str:
    return node.text.decode("utf-8") if node.text is not None else ""


def type_from_node(node: Optional[Node]) -> Optional[GoType]:
    """Convert a tree-sitter type node into a GoType."""
    if node is None:
        return None
    kind = node.type
    if kind == "type_identifier":
        return GoType.named(_text(node))
    if kind == "qualified_type":
        name = node.child_by_field_name("name")
        return GoType.named(_text(name)) if name is not None else None
    if kind == "generic_type":
        return type_from_node(node.child_by_field_name("type"))
    if kind == "pointer_type":
        inner = type_from_node(node.named_children[0]) if node.named_children else None
        return GoType.pointer_to(inner) if inner is not None else None
    if kind in ("slice_type", "array_type", "implicit_length_array_type"):
        return GoType("slice", elem=type_from_node(node.child_by_field_name("element")))
    if kind == "map_type":
        return GoType("map", elem=type_from_node(node.child_by_field_name("value")))
    if kind == "parenthesized_type" and node.named_children:
        return type_from_node(node.named_children[0])
    # new(T) and make(T) arguments may parse as expressions
    if kind == "identifier":
        return GoType.named(_text(node))
    if kind == "selector_expression":
        name = node.child_by_field_name("field")
        return GoType.named(_text(name)) if name is not None else None
    return GoType("other", _text(node))


def result_type(result: Optional[Node]) -> Optional[GoType]:
    """First result type of a function or method signature."""
    if result is None:
        return None
    if result.type == "parameter_list":
        for param in result.named_children:
            if param.type == "parameter_declaration":
                return type_from_node(param.child_by_field_name("type"))
        return None
    return type_from_node(result)


def _names(node: Node, field_name: str = "name") -> list[str]:
    return [_text(child) for child in node.children_by_field_name(field_name)]


def _walk(node: Node) -> Iterable[Node]:
    """Pre-order, document-order walk over named nodes."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.named_children))


def _declares(node: Node) -> bool:
    """True if a range clause or receive statement uses `:=`."""
    return any(child.type == ":=" for child in node.children)


# Nodes whose direct declarations are visible only inside them
SCOPE_NODES = frozenset({
    "block",
    "if_statement",
    "for_statement",
    "expression_switch_statement",
    "type_switch_statement",
    "select_statement",
    "expression_case",
    "type_case",
    "default_case",
    "communication_case",
    "func_literal",
    "function_declaration",
    "method_declaration",
})


def enclosing_scope(node: Node) -> Optional[Node]:
    current = node.parent
    while current is not None and current.type not in SCOPE_NODES:
        current = current.parent
    return current


@dataclass(eq=False)
class Binding:
    """A local name, visible from `declared_at` to the end of its scope.

    A binding whose type cannot be inferred still hides outer bindings of
    the same name.
    """

    name: str
    scope_start: int
    scope_end: int
    declared_at: int
    declared_type: Optional[GoType] = None
    value: Optional[Node] = None  # inferred lazily from this expression
    element: bool = False  # value is a range container; bind its element

    def visible_at(self, offset: int) -> bool:
        return self.scope_start <= offset < self.scope_end and self.declared_at <= offset


class PackageScope:
    """Package-level variables only."""

    def __init__(self, variables: dict[str, GoType]):
        self.variables = variables

    def resolve(self, identifier: Node) -> Optional[GoType]:
        return self.variables.get(_text(identifier))


class FunctionScope:
    """Block-scoped locals of one top-level function and its func literals."""

    def __init__(self, index: "TypeIndex", func: Node):
        self.index = index
        self.bindings: dict[str, list[Binding]] = defaultdict(list)
        self._types: dict[int, Optional[GoType]] = {}
        self._collect(func)

    def resolve(self, identifier: Node) -> Optional[GoType]:
        name = _text(identifier)
        offset = identifier.start_byte
        visible = [b for b in self.bindings.get(name, ()) if b.visible_at(offset)]
        if not visible:
            return self.index.package_vars.get(name)
        innermost = max(visible, key=lambda b: (b.scope_start, -b.scope_end, b.declared_at))
        return self._binding_type(innermost)

    def _binding_type(self, binding: Binding) -> Optional[GoType]:
        key = id(binding)
        if key in self._types:
            return self._types[key]
        self._types[key] = None

        go_type = binding.declared_type
        if go_type is None and binding.value is not None:
            go_type = self.index.expr_type(binding.value, self)
            if binding.element and go_type is not None:
                container = go_type.deref()
                go_type = container.elem if container.kind in ("slice", "map") else None
        self._types[key] = go_type
        return go_type

    def _add(
        self,
        name: str,
        scope: Optional[Node],
        declared_at: int,
        declared_type: Optional[GoType] = None,
        value: Optional[Node] = None,
        element: bool = False,
    ) -> None:
        if name == "_" or scope is None:
            return
        self.bindings[name].append(
            Binding(name, scope.start_byte, scope.end_byte, declared_at, declared_type, value, element)
        )

    def _collect(self, func: Node) -> None:
        for params in (func.child_by_field_name("receiver"), func.child_by_field_name("parameters")):
            if params is not None:
                self._bind_params(params, func)

        body = func.child_by_field_name("body")
        if body is None:
            return

        for node in _walk(body):
            kind = node.type
            if kind == "func_literal":
                params = node.child_by_field_name("parameters")
                if params is not None:
                    self._bind_params(params, node)
            elif kind in ("var_spec", "const_spec"):
                self._bind_spec(node)
            elif kind == "short_var_declaration":
                self._bind_short_var(node.child_by_field_name("left"), node.child_by_field_name("right"), node)
            elif kind == "receive_statement" and _declares(node):
                self._bind_short_var(node.child_by_field_name("left"), None, node)
            elif kind == "range_clause":
                self._bind_range(node)
            elif kind == "type_switch_statement":
                alias = node.child_by_field_name("alias")
                value = node.child_by_field_name("value")
                if alias is not None:
                    declared_at = value.end_byte if value is not None else alias.end_byte
                    for target in alias.named_children:
                        self._add(_text(target), node, declared_at)

    def _bind_params(self, params: Node, scope: Node) -> None:
        for param in params.named_children:
            if param.type not in ("parameter_declaration", "variadic_parameter_declaration"):
                continue
            param_type = type_from_node(param.child_by_field_name("type"))
            if param_type is not None and param.type == "variadic_parameter_declaration":
                param_type = GoType("slice", elem=param_type)
            for name in _names(param):
                self._add(name, scope, scope.start_byte, declared_type=param_type)

    def _bind_spec(self, spec: Node) -> None:
        scope = enclosing_scope(spec)
        names = _names(spec)
        declared = type_from_node(spec.child_by_field_name("type"))
        values = spec.child_by_field_name("value")
        exprs = values.named_children if values is not None and declared is None else []
        for i, name in enumerate(names):
            value = exprs[i] if i < len(exprs) else None
            self._add(name, scope, spec.end_byte, declared_type=declared, value=value)

    def _bind_short_var(self, left: Optional[Node], right: Optional[Node], stmt: Node) -> None:
        if left is None:
            return
        scope = enclosing_scope(stmt)
        targets = left.named_children
        values = right.named_children if right is not None else []
        if len(values) != len(targets):
            # x, err := f() / v, ok := m[k]: only the first target is typed
            values = values[:1]
        for i, target in enumerate(targets):
            if target.type != "identifier":
                continue
            value = values[i] if i < len(values) else None
            self._add(_text(target), scope, stmt.end_byte, value=value)

    def _bind_range(self, clause: Node) -> None:
        left = clause.child_by_field_name("left")
        if left is None or not _declares(clause):
            return
        scope = clause.parent
        right = clause.child_by_field_name("right")
        for i, target in enumerate(left.named_children):
            if target.type != "identifier":
                continue
            if i == 1:
                self._add(_text(target), scope, clause.end_byte, value=right, element=True)
            else:
                self._add(_text(target), scope, clause.end_byte)


Scope = Union[FunctionScope, PackageScope]


@dataclass
class TypeIndex:
    """Type declarations, method sets and function signatures of a source set."""

    struct_fields: dict[str, dict[str, GoType]] = field(default_factory=lambda: defaultdict(dict))
    embedded: dict[str, list[str]] = field(default_factory=lambda: defaultdict(list))
    methods: dict[str, dict[str, Optional[GoType]]] = field(default_factory=lambda: defaultdict(dict))
    functions: dict[str, Optional[GoType]] = field(default_factory=dict)
    package_vars: dict[str, GoType] = field(default_factory=dict)
    _scopes: dict[int, FunctionScope] = field(default_factory=dict, repr=False)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def has_method(self, go_type: Optional[GoType], name: str) -> bool:
        """Check if the type, or the type it points to, declares a method."""
        if go_type is None:
            return False
        base = go_type.deref()
        if base.kind != "named":
            return False
        return self._lookup_method(base.name, name, 0) is not None

    def field_type(self, type_name: str, field_name: str, depth: int = 0) -> Optional[GoType]:
        """Type of a struct field, following embedded structs."""
        if depth > MAX_EMBED_DEPTH:
            return None
        fields = self.struct_fields.get(type_name)
        if fields and field_name in fields:
            return fields[field_name]
        for inner in self.embedded.get(type_name, ()):
            found = self.field_type(inner, field_name, depth + 1)
            if found is not None:
                return found
        return None

    def method_result(self, type_name: str, method: str) -> Optional[GoType]:
        found = self._lookup_method(type_name, method, 0)
        return found[0] if found is not None else None

    def type_of(self, node: Node) -> Optional[GoType]:
        """Static type of an expression node, or None when unknown."""
        return self.expr_type(node, self._scope_for(node))

    def _lookup_method(
        self, type_name: str, method: str, depth: int
    ) -> Optional[tuple[Optional[GoType]]]:
        if depth > MAX_EMBED_DEPTH:
            return None
        methods = self.methods.get(type_name)
        if methods is not None and method in methods:
            return (methods[method],)
        for inner in self.embedded.get(type_name, ()):
            found = self._lookup_method(inner, method, depth + 1)
            if found is not None:
                return found
        return None

    # ------------------------------------------------------------------
    # Expression typing
    # ------------------------------------------------------------------

    def expr_type(self, node: Optional[Node], scope: Scope) -> Optional[GoType]:
        if node is None:
            return None
        kind = node.type

        if kind == "identifier":
            return scope.resolve(node)

        if kind == "selector_expression":
            operand = self.expr_type(node.child_by_field_name("operand"), scope)
            field_node = node.child_by_field_name("field")
            if operand is None or field_node is None:
                return None
            base = operand.deref()
            if base.kind != "named":
                return None
            return self.field_type(base.name, _text(field_node))

        if kind == "call_expression":
            return self._call_type(node, scope)

        if kind == "composite_literal":
            return type_from_node(node.child_by_field_name("type"))

        if kind == "unary_expression":
            operator = node.child_by_field_name("operator")
            inner = self.expr_type(node.child_by_field_name("operand"), scope)
            if operator is None or inner is None:
                return None
            if operator.type == "&":
                return GoType.pointer_to(inner)
            if operator.type == "*":
                return inner.elem if inner.kind == "pointer" else None
            return inner

        if kind == "parenthesized_expression" and node.named_children:
            return self.expr_type(node.named_children[0], scope)

        if kind == "index_expression":
            operand = self.expr_type(node.child_by_field_name("operand"), scope)
            if operand is None:
                return None
            container = operand.deref()
            return container.elem if container.kind in ("slice", "map") else None

        if kind == "type_assertion_expression":
            return type_from_node(node.child_by_field_name("type"))

        return None

    def _call_type(self, node: Node, scope: Scope) -> Optional[GoType]:
        function = node.child_by_field_name("function")
        if function is None:
            return None

        if function.type == "identifier":
            name = _text(function)
            if name == "new":
                args = node.child_by_field_name("arguments")
                if args is not None and args.named_children:
                    inner = type_from_node(args.named_children[0])
                    return GoType.pointer_to(inner) if inner is not None else None
                return None
            return self.functions.get(name)

        if function.type == "selector_expression":
            operand = function.child_by_field_name("operand")
            method = function.child_by_field_name("field")
            if operand is None or method is None:
                return None
            receiver = self.expr_type(operand, scope)
            if receiver is not None:
                base = receiver.deref()
                return self.method_result(base.name, _text(method)) if base.kind == "named" else None
            if operand.type == "identifier":
                # pkg.NewThing(): treat the operand as a package qualifier
                return self.functions.get(_text(method))
        return None

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def _scope_for(self, node: Node) -> Scope:
        func = None
        current = node.parent
        while current is not None:
            if current.type in ("function_declaration", "method_declaration"):
                func = current
            current = current.parent
        if func is None:
            return PackageScope(self.package_vars)

        scope = self._scopes.get(func.id)
        if scope is None:
            scope = FunctionScope(self, func)
            self._scopes[func.id] = scope
        return scope

    def bind_package_var(self, spec: Node) -> None:
        declared = type_from_node(spec.child_by_field_name("type"))
        if declared is not None:
            for name in _names(spec):
                self.package_vars[name] = declared
            return
        values = spec.child_by_field_name("value")
        if values is None:
            return
        scope = PackageScope(self.package_vars)
        for name, expr in zip(_names(spec), values.named_children):
            inferred = self.expr_type(expr, scope)
            if inferred is not None:
                self.package_vars[name] = inferred


class TypeIndexService:
    """Builds a TypeIndex from parsed Go files."""

    def build_index(self, files: Iterable[GoFile]) -> TypeIndex:
        """Index declarations from every file, generated files included."""
        index = TypeIndex()
        files = list(files)
        for go_file in files:
            for decl in go_file.root.named_children:
                if decl.type == "type_declaration":
                    self._index_type_declaration(decl, index)
                elif decl.type == "method_declaration":
                    self._index_method(decl, index)
                elif decl.type == "function_declaration":
                    name = decl.child_by_field_name("name")
                    if name is not None:
                        index.functions[_text(name)] = result_type(decl.child_by_field_name("result"))

        # Package-level vars last, so initializers can use any declared function
        for go_file in files:
            for decl in go_file.root.named_children:
                if decl.type == "var_declaration":
                    for spec in _walk(decl):
                        if spec.type == "var_spec":
                            index.bind_package_var(spec)

        logger.info(
            f"Built type index: {len(files)} files, {len(index.struct_fields)} structs, "
            f"{sum(len(m) for m in index.methods.values())} methods, {len(index.functions)} functions"
        )
        return index

    def _index_type_declaration(self, decl: Node, index: TypeIndex) -> None:
        for spec in decl.named_children:
            if spec.type != "type_spec":
                continue
            name_node = spec.child_by_field_name("name")
            type_node = spec.child_by_field_name("type")
            if name_node is None or type_node is None or type_node.type != "struct_type":
                continue
            type_name = _text(name_node)
            fields = index.struct_fields[type_name]
            for field_list in type_node.named_children:
                if field_list.type != "field_declaration_list":
                    continue
                for decl_field in field_list.named_children:
                    if decl_field.type != "field_declaration":
                        continue
                    field_type = type_from_node(decl_field.child_by_field_name("type"))
                    names = _names(decl_field)
                    if not names:
                        if field_type is not None:
                            index.embedded[type_name].append(field_type.deref().name)
                        continue
                    if field_type is None:
                        continue
                    for field_name in names:
                        fields[field_name] = field_type

    def _index_method(self, decl: Node, index: TypeIndex) -> None:
        receiver = decl.child_by_field_name("receiver")
        name = decl.child_by_field_name("name")
        if receiver is None or name is None:
            return
        for param in receiver.named_children:
            if param.type != "parameter_declaration":
                continue
            recv_type = type_from_node(param.child_by_field_name("type"))
            if recv_type is None:
                return
            index.methods[recv_type.deref().name][_text(name)] = result_type(
                decl.child_by_field_name("result")
            )
            return


class StaticTypeInfo:
    """Fixed expression-to-type table.

    For callers that resolve types elsewhere (and for tests). Expressions are
    keyed by their source text.
    """

    def __init__(
        self,
        types: dict[str, GoType] | None = None,
        methods: dict[str, set[str]] | None = None,
    ):
        self.types = dict(types or {})
        self.methods = {name: set(m) for name, m in (methods or {}).items()}

    def type_of(self, node: Node | str) -> Optional[GoType]:
        key = node if isinstance(node, str) else _text(node)
        return self.types.get(key)

    def has_method(self, go_type: Optional[GoType], name: str) -> bool:
        if go_type is None:
            return False
        return name in self.methods.get(go_type.deref().name, ())
