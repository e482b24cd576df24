"""Go parser using tree-sitter.

Produces one GoFile per source file:
- the concrete syntax tree and raw source bytes
- the package name
- whether the file is machine-generated (header comment marker)
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import tree_sitter_go
from tree_sitter import Language, Node, Parser, Tree

logger = logging.getLogger(__name__)

GENERATED_MARKER = "Code generated"


class ParseError(Exception):
    """Raised when a source file cannot be turned into a syntax tree."""


@dataclass
class GoFile:
    """A parsed Go source file."""

    path: str
    source: bytes
    tree: Tree
    package: str = ""
    is_generated: bool = False

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        """Get the source text of a node."""
        return self.source[node.start_byte:node.end_byte].decode("utf-8")


@dataclass
class ParseResult:
    """Result of parsing a set of files."""

    files: list[GoFile] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def files_parsed(self) -> int:
        return len(self.files)

    @property
    def generated_files(self) -> list[GoFile]:
        return [f for f in self.files if f.is_generated]


def comment_text(raw: str) -> str:
    """Strip comment markers the way Go's CommentGroup.Text does."""
    if raw.startswith("//"):
        return raw[2:].lstrip()
    if raw.startswith("/*"):
        return raw[2:].removesuffix("*/").strip()
    return raw.strip()


def comment_groups(root: Node, source: bytes) -> list[str]:
    """Text of each comment group that precedes the package clause.

    Comments on adjacent lines form one group, like Go's ast.CommentGroup;
    a blank line starts a new group.
    """
    groups: list[list[str]] = []
    last_row = None
    for child in root.children:
        if child.type == "package_clause":
            break
        if child.type != "comment":
            last_row = None
            continue
        raw = source[child.start_byte:child.end_byte].decode("utf-8", errors="replace")
        if last_row is not None and child.start_point[0] <= last_row + 1:
            groups[-1].append(comment_text(raw))
        else:
            groups.append([comment_text(raw)])
        last_row = child.end_point[0]
    return ["\n".join(group).strip() for group in groups]


def is_generated_file(root: Node, source: bytes, marker: str = GENERATED_MARKER) -> bool:
    """Check whether a header comment group declares the file as generated."""
    return any(text.startswith(marker) for text in comment_groups(root, source))


class GoParser:
    """Parser for Go code using tree-sitter."""

    def __init__(self, generated_marker: str = GENERATED_MARKER):
        self.generated_marker = generated_marker
        self._language = Language(tree_sitter_go.language())
        self._parser = Parser(self._language)
        logger.debug("Initialized tree-sitter Go parser")

    def parse(self, code: str | bytes, file_path: str) -> GoFile:
        """
        Parse Go code into a GoFile.

        Args:
            code: Go source code (text or UTF-8 bytes)
            file_path: Path to the file (for positions and reporting)

        Returns:
            GoFile with tree, package name and generated flag

        Raises:
            ParseError: if the source cannot be decoded
        """
        if isinstance(code, str):
            source = code.encode("utf-8")
        else:
            source = code
            try:
                source.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(f"{file_path}: not valid UTF-8: {e}") from e

        tree = self._parser.parse(source)
        root = tree.root_node
        if root.has_error:
            # Partial trees are still analyzed; bad nodes surface at synthesis time
            logger.debug(f"Syntax errors in {file_path}")

        return GoFile(
            path=file_path,
            source=source,
            tree=tree,
            package=self._package_name(root, source) or "",
            is_generated=is_generated_file(root, source, self.generated_marker),
        )

    def parse_many(self, sources: dict[str, str | bytes]) -> ParseResult:
        """Parse several files, collecting per-file errors instead of failing."""
        result = ParseResult()
        for path, code in sources.items():
            try:
                result.files.append(self.parse(code, path))
            except ParseError as e:
                logger.warning(f"Parse error for {path}: {e}")
                result.errors.append(str(e))
        return result

    def _package_name(self, root: Node, source: bytes) -> Optional[str]:
        for child in root.named_children:
            if child.type == "package_clause":
                for sub in child.named_children:
                    if sub.type == "package_identifier":
                        return source[sub.start_byte:sub.end_byte].decode("utf-8")
        return None
