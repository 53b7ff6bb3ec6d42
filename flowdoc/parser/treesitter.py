"""Tree-sitter backend for flowdoc.

Parses TypeScript/JavaScript sources and exposes the small set of AST helpers
the flow extractors share.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_language

from .config import language_for_file

# =============================================================================
# Data Types
# =============================================================================


@dataclass(frozen=True)
class TsParsed:
    """Parsed source code with tree-sitter AST."""

    language: str
    src: bytes
    tree: Any
    root: Node
    file_path: Path


# =============================================================================
# Parser Infrastructure
# =============================================================================

_THREAD_LOCAL = threading.local()


def _get_parser(language_name: str) -> Parser:
    """Get or create a thread-local parser for the given language."""
    parsers = getattr(_THREAD_LOCAL, "parsers", None)
    if parsers is None:
        parsers = {}
        _THREAD_LOCAL.parsers = parsers

    parser = parsers.get(language_name)
    if parser is None:
        lang = get_language(language_name)
        parser = Parser()
        if hasattr(parser, "set_language"):
            parser.set_language(lang)
        else:
            parser.language = lang
        parsers[language_name] = parser
    return parser


# =============================================================================
# AST Utilities
# =============================================================================


def iter_named_nodes(root: Node) -> Iterable[Node]:
    """Iterate over all named nodes in pre-order, left to right."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        for child in reversed(node.named_children):
            stack.append(child)


def node_text(src: bytes, node: Node) -> str:
    """Extract text content of a node."""
    return src[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def node_line(node: Node) -> int:
    """1-based line of the node's first character."""
    return node.start_point[0] + 1


def code_children(node: Node) -> List[Node]:
    """Named children without comments."""
    return [c for c in node.named_children if c.type != "comment"]


def first_code_child(node: Node) -> Optional[Node]:
    children = code_children(node)
    return children[0] if children else None


# =============================================================================
# Core Parsing
# =============================================================================


def parse_source(text: str, *, file_path: Path) -> Optional[TsParsed]:
    """Parse source code with tree-sitter.

    Args:
        text: Source code text
        file_path: Path to source file (used for grammar selection)

    Returns:
        TsParsed object or None if the extension is not supported
    """
    language = language_for_file(file_path)
    if language is None:
        return None

    src = text.encode("utf-8", errors="replace")
    parser = _get_parser(language)
    tree = parser.parse(src)
    return TsParsed(language=language, src=src, tree=tree, root=tree.root_node, file_path=Path(file_path))


__all__ = [
    "TsParsed",
    "code_children",
    "first_code_child",
    "iter_named_nodes",
    "node_line",
    "node_text",
    "parse_source",
]
