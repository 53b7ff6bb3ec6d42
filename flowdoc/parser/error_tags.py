"""Failure-tag resolution for contract preconditions.

A guard reports failures through calls such as ``err({ tag: 'CartNotFound' })``.
Tags are collected syntactically:

- an inline function literal is scanned directly;
- a bare identifier is resolved to a same-file top-level variable and its
  initializer is scanned (one hop, never further);
- anything else yields no tags.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from tree_sitter import Node

from .treesitter import TsParsed, code_children, iter_named_nodes, node_text
from .utils import call_arguments, is_function_like, property_name, string_value, unwrap_expression

_DECLARATION_TYPES = frozenset({"lexical_declaration", "variable_declaration"})


def extract_error_tags(src: bytes, node: Node) -> List[str]:
    """Distinct `tag` string values of object-literal first arguments, in first-occurrence order."""
    tags: List[str] = []
    for candidate in iter_named_nodes(node):
        if candidate.type != "call_expression":
            continue
        args = call_arguments(candidate)
        if not args:
            continue
        first = unwrap_expression(args[0])
        if first.type != "object":
            continue
        tag = _tag_from_object(src, first)
        if tag is not None and tag not in tags:
            tags.append(tag)
    return tags


def _tag_from_object(src: bytes, obj: Node) -> Optional[str]:
    for prop in code_children(obj):
        if prop.type != "pair" or property_name(src, prop) != "tag":
            continue
        value = prop.child_by_field_name("value")
        if value is None:
            continue
        text = string_value(src, unwrap_expression(value))
        if text is not None:
            return text
    return None


def guard_error_tags(parsed: TsParsed, guard: Node) -> List[str]:
    if guard.type == "identifier":
        initializer = find_top_level_initializer(parsed, node_text(parsed.src, guard))
        if initializer is None or initializer.type == "identifier":
            return []
        return extract_error_tags(parsed.src, initializer)

    if is_function_like(guard):
        return extract_error_tags(parsed.src, guard)

    return []


def _top_level_declarators(root: Node) -> Iterable[Node]:
    for statement in code_children(root):
        if statement.type == "export_statement":
            decl = statement.child_by_field_name("declaration")
            if decl is None:
                continue
            statement = decl
        if statement.type not in _DECLARATION_TYPES:
            continue
        for child in code_children(statement):
            if child.type == "variable_declarator":
                yield child


def find_top_level_initializer(parsed: TsParsed, name: str) -> Optional[Node]:
    """Initializer of the first top-level `const|let|var <name> = ...` in the file."""
    for declarator in _top_level_declarators(parsed.root):
        name_node = declarator.child_by_field_name("name")
        if name_node is None or node_text(parsed.src, name_node) != name:
            continue
        value = declarator.child_by_field_name("value")
        if value is not None:
            return value
    return None
