"""Scenario flow extraction.

A scenario's flow function returns the ordered steps to run, either directly
(``(input) => [step(add, {...}), ...]``) or built up in a block body::

    (input) => {
      const steps = [];
      steps.push(step(add, { n: 1 }));
      if (input.flag) {
        steps.push(step(add, { n: 2 }));
      }
      return steps;
    }

Each ``step(<contract>, ...)`` becomes an action node ``step <contract id>``.
Branches and loops around the steps are modeled like in contract bodies.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from tree_sitter import Node

from ..core.graph import FlowGraphBuilder
from ..core.models import EntryPoint, FlowArtifact, NodeKind, OwnerKind
from ..parser.config import STEP_CALLEES
from ..parser.treesitter import TsParsed, code_children, first_code_child, node_text
from ..parser.utils import call_arguments, callee_name, short_text, unwrap_expression
from .artifact import build_flow_artifact
from .walker import SKIPPED_TYPES, Entries, StatementWalker, WalkResult

logger = logging.getLogger(__name__)


class ScenarioWalker(StatementWalker):
    """
    Statement walker that only records scenario steps.

    Plain expressions without steps and variable declarations pass through;
    statements with no scenario meaning become unsupported markers.
    """

    pass_through_types = SKIPPED_TYPES | {"lexical_declaration", "variable_declaration"}

    def __init__(self, builder: FlowGraphBuilder, src: bytes, contract_names: Mapping[str, str]):
        super().__init__(builder, src)
        self.contract_names = contract_names

    def walk_other(self, statement: Node, entries: Entries) -> WalkResult:
        if statement.type == "expression_statement":
            expression = first_code_child(statement)
            if expression is None:
                return WalkResult(continue_entries=entries)
            return self.walk_steps(expression, entries)
        return self.walk_unsupported(statement, entries)

    def walk_return(self, statement: Node, entries: Entries) -> WalkResult:
        expression = first_code_child(statement)
        if expression is not None:
            exits = self.walk_steps(expression, entries).exits
            if exits:
                return WalkResult(return_entries=exits)
        return WalkResult(return_entries=entries)

    def walk_steps(self, expression: Node, entries: Entries) -> WalkResult:
        """Chain one action node per step found in ``expression``."""
        current = entries
        for label in self.step_labels(expression):
            node_id = self.add_linked(NodeKind.ACTION, label, current)
            current = (EntryPoint(node_id),)
        return WalkResult(continue_entries=current)

    def step_labels(self, expression: Node) -> List[str]:
        expression = unwrap_expression(expression)

        if expression.type == "call_expression":
            if callee_name(self.src, expression) in STEP_CALLEES:
                return [self._step_label(expression)]

            fn = expression.child_by_field_name("function")
            prop = fn.child_by_field_name("property") if fn is not None and fn.type == "member_expression" else None
            if prop is not None and node_text(self.src, prop) == "push":
                return [label for arg in call_arguments(expression) for label in self.step_labels(arg)]
            return []

        if expression.type == "array":
            return [label for element in code_children(expression) for label in self.step_labels(element)]

        return []

    def _step_label(self, call: Node) -> str:
        args = call_arguments(call)
        if not args:
            return "step <unknown>"

        contract = args[0]
        if contract.type == "identifier":
            name = node_text(self.src, contract)
            return f"step {self.contract_names.get(name, name)}"
        return f"step {short_text(self.src, contract)}"


def extract_scenario_flow(
    parsed: TsParsed,
    flow_fn: Node,
    owner_id: str,
    contract_names: Optional[Mapping[str, str]] = None,
) -> FlowArtifact:
    """Build the flow artifact for a scenario's flow function."""
    builder = FlowGraphBuilder()
    start = builder.add_node(NodeKind.START, "start")
    end = builder.add_node(NodeKind.END, "end")

    walker = ScenarioWalker(builder, parsed.src, contract_names or {})
    entries: Entries = (EntryPoint(start),)

    body = flow_fn.child_by_field_name("body")
    if body is not None and body.type == "statement_block":
        result = walker.walk_block(code_children(body), entries)
    elif body is not None and unwrap_expression(body).type == "array":
        result = walker.walk_steps(body, entries)
    else:
        logger.debug("Scenario %s: flow body is not an array or block", owner_id)
        unsupported = walker.add_linked(NodeKind.UNSUPPORTED, "unsupported: flow body", entries)
        result = WalkResult(continue_entries=(EntryPoint(unsupported),))

    if result.exits:
        builder.connect_entries(result.exits, end)
    else:
        builder.add_edge(start, end)

    return build_flow_artifact(OwnerKind.SCENARIO, owner_id, builder.build())
