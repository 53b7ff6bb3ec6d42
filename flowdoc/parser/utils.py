"""Parser utilities.

Label shortening and object-literal / function-literal accessors over
tree-sitter TypeScript nodes.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from tree_sitter import Node

from .config import LABEL_MAX_CHARS
from .treesitter import code_children, node_text

FUNCTION_LIKE_TYPES = frozenset({"arrow_function", "function", "function_expression"})

# Expression wrappers that do not change the value: (x), x as T, x satisfies T, <T>x
_TRANSPARENT_TYPES = frozenset({"parenthesized_expression", "as_expression", "satisfies_expression", "type_assertion"})

_WHITESPACE = re.compile(r"\s+")


# =============================================================================
# Source Text
# =============================================================================


def short_text(src: bytes, node: Node) -> str:
    """Node source text on one line, truncated to LABEL_MAX_CHARS."""
    compact = _WHITESPACE.sub(" ", node_text(src, node)).strip()
    if len(compact) <= LABEL_MAX_CHARS:
        return compact
    return f"{compact[: LABEL_MAX_CHARS - 3]}..."


def string_value(src: bytes, node: Node) -> Optional[str]:
    """Value of a plain string literal ('x' or "x"), else None."""
    if node.type != "string":
        return None
    raw = node_text(src, node)
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in {"'", '"'}:
        return raw[1:-1]
    return None


# =============================================================================
# Expression Shapes
# =============================================================================


def unwrap_expression(node: Node) -> Node:
    """Strip parentheses and type assertions."""
    while node.type in _TRANSPARENT_TYPES:
        children = code_children(node)
        if not children:
            return node
        # <T>x keeps the type first; the others keep the expression first
        node = children[-1] if node.type == "type_assertion" else children[0]
    return node


def is_function_like(node: Node) -> bool:
    return node.type in FUNCTION_LIKE_TYPES


def call_arguments(call: Node) -> List[Node]:
    args = call.child_by_field_name("arguments")
    if args is None:
        return []
    return code_children(args)


def callee_name(src: bytes, call: Node) -> Optional[str]:
    """Name of a call's target when it is a bare identifier."""
    fn = call.child_by_field_name("function")
    if fn is None or fn.type != "identifier":
        return None
    return node_text(src, fn)


# =============================================================================
# Object Literals
# =============================================================================


def property_name(src: bytes, prop: Node) -> Optional[str]:
    """Key of a `pair` or name of a `method_definition` inside an object literal."""
    if prop.type == "pair":
        key = prop.child_by_field_name("key")
    elif prop.type == "method_definition":
        key = prop.child_by_field_name("name")
    else:
        return None
    if key is None:
        return None
    if key.type in {"property_identifier", "identifier"}:
        return node_text(src, key)
    return string_value(src, key)


def iter_properties(src: bytes, obj: Node, name: str) -> Iterable[Node]:
    for prop in code_children(obj):
        if property_name(src, prop) == name:
            yield prop


def find_property_value(src: bytes, obj: Node, name: str) -> Optional[Node]:
    """Value node of `name: value` in an object literal."""
    for prop in iter_properties(src, obj, name):
        if prop.type == "pair":
            return prop.child_by_field_name("value")
    return None


def find_array_property(src: bytes, obj: Node, name: str) -> Optional[Node]:
    value = find_property_value(src, obj, name)
    if value is not None and value.type == "array":
        return value
    return None


def find_string_property(src: bytes, obj: Node, name: str) -> Optional[str]:
    value = find_property_value(src, obj, name)
    if value is None:
        return None
    return string_value(src, unwrap_expression(value))


def find_function_property(src: bytes, obj: Node, name: str) -> Optional[Node]:
    """Function-shaped property: `name: () => ...`, `name: function () {}` or `name() {}`."""
    for prop in iter_properties(src, obj, name):
        if prop.type == "method_definition":
            return prop
        value = prop.child_by_field_name("value")
        if value is not None and is_function_like(value):
            return value
    return None


def array_elements(array: Optional[Node]) -> List[Node]:
    if array is None:
        return []
    return code_children(array)


def enclosing_variable_name(src: bytes, node: Node) -> Optional[str]:
    """Name of the nearest `const x = ...` declarator around ``node``."""
    current = node.parent
    while current is not None:
        if current.type == "variable_declarator":
            name = current.child_by_field_name("name")
            if name is not None and name.type == "identifier":
                return node_text(src, name)
            return None
        current = current.parent
    return None
