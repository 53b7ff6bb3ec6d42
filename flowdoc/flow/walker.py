"""
Statement walking: converts function bodies into flow graph fragments.

Open continuations are passed around as tuples of ``EntryPoint`` rather than
tracked as a mutable "current node", so several simultaneously open branches
(e.g. both arms of an ``if`` that fall through) are modeled naturally.

Loops are never unrolled. A loop becomes one node with an "iterate" edge into
its body, a back-edge from every body continuation, and a single "done" exit,
which stands for zero or more iterations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from tree_sitter import Node

from ..core.graph import FlowGraphBuilder
from ..core.models import EntryPoint, NodeKind
from ..parser.treesitter import code_children, first_code_child
from ..parser.utils import short_text

Entries = Tuple[EntryPoint, ...]

LOOP_TYPES = frozenset({"for_statement", "for_in_statement", "while_statement", "do_statement"})

# Recorded as visible markers, never interpreted
UNSUPPORTED_TYPES = frozenset({"switch_statement", "try_statement", "break_statement", "continue_statement"})

SKIPPED_TYPES = frozenset({"empty_statement", "comment"})


@dataclass(frozen=True)
class WalkResult:
    continue_entries: Entries = ()
    return_entries: Entries = ()

    @property
    def exits(self) -> Entries:
        return self.continue_entries + self.return_entries


class StatementWalker:
    """
    Walks a statement sequence, emitting nodes into ``builder``.

    Subclasses adjust how returns and otherwise unrecognized statements are
    modeled (see ``ScenarioWalker``).
    """

    pass_through_types: frozenset = SKIPPED_TYPES

    def __init__(self, builder: FlowGraphBuilder, src: bytes):
        self.builder = builder
        self.src = src

    # -------------------------------------------------------------- helpers

    def label(self, node: Node) -> str:
        return short_text(self.src, node)

    def add_linked(self, kind: NodeKind, label: str, entries: Iterable[EntryPoint]) -> str:
        """Add a node and connect ``entries`` into it."""
        node_id = self.builder.add_node(kind, label)
        self.builder.connect_entries(entries, node_id)
        return node_id

    # ------------------------------------------------------------- sequences

    def walk_block(self, statements: Sequence[Node], entries: Iterable[EntryPoint]) -> WalkResult:
        current: Entries = tuple(entries)
        returns: List[EntryPoint] = []

        for statement in statements:
            if not current:
                break
            result = self.walk_statement(statement, current)
            current = result.continue_entries
            returns.extend(result.return_entries)

        return WalkResult(continue_entries=current, return_entries=tuple(returns))

    def walk_statement(self, statement: Node, entries: Entries) -> WalkResult:
        kind = statement.type

        if kind == "statement_block":
            return self.walk_block(code_children(statement), entries)
        if kind == "if_statement":
            return self._walk_if(statement, entries)
        if kind in LOOP_TYPES:
            return self._walk_loop(statement, entries)
        if kind == "return_statement":
            return self.walk_return(statement, entries)
        if kind == "throw_statement":
            return self._walk_throw(statement, entries)
        if kind in UNSUPPORTED_TYPES:
            return self.walk_unsupported(statement, entries)
        if kind in self.pass_through_types:
            return WalkResult(continue_entries=entries)
        return self.walk_other(statement, entries)

    def _walk_optional(self, statement: Optional[Node], entries: Entries) -> WalkResult:
        if statement is None:
            return WalkResult(continue_entries=entries)
        return self.walk_statement(statement, entries)

    # ------------------------------------------------------------ statements

    def walk_return(self, statement: Node, entries: Entries) -> WalkResult:
        expression = first_code_child(statement)
        label = f"return {self.label(expression)}" if expression is not None else "return"
        node_id = self.add_linked(NodeKind.ACTION, label, entries)
        return WalkResult(return_entries=(EntryPoint(node_id),))

    def walk_other(self, statement: Node, entries: Entries) -> WalkResult:
        node_id = self.add_linked(NodeKind.ACTION, self.label(statement), entries)
        return WalkResult(continue_entries=(EntryPoint(node_id),))

    def walk_unsupported(self, statement: Node, entries: Entries) -> WalkResult:
        node_id = self.add_linked(NodeKind.UNSUPPORTED, f"unsupported: {statement.type}", entries)
        return WalkResult(continue_entries=(EntryPoint(node_id),))

    def _walk_throw(self, statement: Node, entries: Entries) -> WalkResult:
        expression = first_code_child(statement)
        label = f"throw {self.label(expression)}" if expression is not None else "throw"
        self.add_linked(NodeKind.ERROR, label, entries)
        return WalkResult()

    def _walk_if(self, statement: Node, entries: Entries) -> WalkResult:
        condition = _strip_parens(statement.child_by_field_name("condition"))
        label = f"if {self.label(condition)}" if condition is not None else "if"
        decision = self.add_linked(NodeKind.DECISION, label, entries)

        then_result = self._walk_optional(
            statement.child_by_field_name("consequence"),
            (EntryPoint(decision, "true"),),
        )

        alternative = statement.child_by_field_name("alternative")
        if alternative is not None and alternative.type == "else_clause":
            alternative = first_code_child(alternative)
        if alternative is not None:
            else_result = self.walk_statement(alternative, (EntryPoint(decision, "false"),))
        else:
            else_result = WalkResult(continue_entries=(EntryPoint(decision, "false"),))

        return WalkResult(
            continue_entries=then_result.continue_entries + else_result.continue_entries,
            return_entries=then_result.return_entries + else_result.return_entries,
        )

    def _walk_loop(self, statement: Node, entries: Entries) -> WalkResult:
        loop = self.add_linked(NodeKind.LOOP, self._loop_label(statement), entries)

        body = self._walk_optional(
            statement.child_by_field_name("body"),
            (EntryPoint(loop, "iterate"),),
        )
        for continuation in body.continue_entries:
            self.builder.add_edge(continuation.node_id, loop, continuation.edge_label or "next")

        return WalkResult(
            continue_entries=(EntryPoint(loop, "done"),),
            return_entries=body.return_entries,
        )

    def _loop_label(self, statement: Node) -> str:
        kind = statement.type
        if kind == "for_statement":
            return "for (...)"
        if kind == "for_in_statement":
            right = statement.child_by_field_name("right")
            prefix = "for-of" if _for_in_operator(statement) == "of" else "for-in"
            return f"{prefix} {self.label(right)}" if right is not None else prefix

        condition = _strip_parens(statement.child_by_field_name("condition"))
        prefix = "while" if kind == "while_statement" else "do-while"
        return f"{prefix} {self.label(condition)}" if condition is not None else prefix


def _strip_parens(node: Optional[Node]) -> Optional[Node]:
    while node is not None and node.type == "parenthesized_expression":
        inner = first_code_child(node)
        if inner is None:
            break
        node = inner
    return node


def _for_in_operator(statement: Node) -> str:
    """'in' or 'of' for a `for (... in|of ...)` header."""
    operator = statement.child_by_field_name("operator")
    if operator is not None:
        return operator.type
    for child in statement.children:
        if not child.is_named and child.type in {"in", "of"}:
            return child.type
    return "in"
