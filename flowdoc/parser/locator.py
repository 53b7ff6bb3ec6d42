"""Locate contract and scenario definitions in a parsed source file.

Recognized shapes::

    define('cart.add', { pre: [...], transition: ... })
    define<S, I, E>({ id: 'cart.add', pre: [...], transition: ... })

    scenario('checkout', (input) => [step(add, {...}), ...])
    scenario('checkout', { flow: (input) => ... })
    scenario<S, I>({ id: 'checkout', flow: (input) => ... })
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from tree_sitter import Node

from .config import DEFINE_CALLEES, SCENARIO_CALLEES
from .treesitter import TsParsed, iter_named_nodes, node_line
from .utils import (
    call_arguments,
    callee_name,
    enclosing_variable_name,
    find_function_property,
    find_string_property,
    is_function_like,
    string_value,
    unwrap_expression,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractSite:
    name: str
    body: Node  # object literal holding pre/transition/post/invariant
    line: int
    variable_name: Optional[str] = None


@dataclass(frozen=True)
class ScenarioSite:
    name: str
    flow_fn: Optional[Node]
    line: int
    variable_name: Optional[str] = None


def _iter_calls(parsed: TsParsed, callees: Tuple[str, ...]):
    for node in iter_named_nodes(parsed.root):
        if node.type == "call_expression" and callee_name(parsed.src, node) in callees:
            yield node


def _named_object_call(src: bytes, call: Node) -> Optional[Tuple[str, Node]]:
    """(name, second argument) for `f('name', x)`; (id, object) for `f({ id: 'name', ... })`."""
    args = call_arguments(call)
    if not args:
        return None

    first = unwrap_expression(args[0])
    name = string_value(src, first)
    if name is not None:
        if len(args) < 2:
            return None
        return name, unwrap_expression(args[1])

    if first.type == "object":
        object_id = find_string_property(src, first, "id")
        if object_id is not None:
            return object_id, first
    return None


def find_contracts(parsed: TsParsed) -> List[ContractSite]:
    """Every `define(...)` call with a resolvable name and an object-literal body."""
    sites: List[ContractSite] = []
    for call in _iter_calls(parsed, DEFINE_CALLEES):
        named = _named_object_call(parsed.src, call)
        if named is None or named[1].type != "object":
            logger.debug("Skipping define() at line %d: unrecognized shape", node_line(call))
            continue
        (name, body) = named
        sites.append(
            ContractSite(
                name=name,
                body=body,
                line=node_line(call),
                variable_name=enclosing_variable_name(parsed.src, call),
            )
        )
    logger.debug("Found %d contract(s) in %s", len(sites), parsed.file_path)
    return sites


def find_scenarios(parsed: TsParsed) -> List[ScenarioSite]:
    """Every `scenario(...)` call with a resolvable name."""
    sites: List[ScenarioSite] = []
    for call in _iter_calls(parsed, SCENARIO_CALLEES):
        named = _named_object_call(parsed.src, call)
        if named is None:
            logger.debug("Skipping scenario() at line %d: unrecognized shape", node_line(call))
            continue
        (name, body) = named

        flow_fn: Optional[Node] = None
        if is_function_like(body):
            flow_fn = body
        elif body.type == "object":
            flow_fn = find_function_property(parsed.src, body, "flow")

        sites.append(
            ScenarioSite(
                name=name,
                flow_fn=flow_fn,
                line=node_line(call),
                variable_name=enclosing_variable_name(parsed.src, call),
            )
        )
    logger.debug("Found %d scenario(s) in %s", len(sites), parsed.file_path)
    return sites


def contract_variable_map(parsed: TsParsed, sites: Optional[List[ContractSite]] = None) -> Dict[str, str]:
    """Variable name -> contract id for every `const x = define(...)` contract site."""
    if sites is None:
        sites = find_contracts(parsed)
    return {site.variable_name: site.name for site in sites if site.variable_name is not None}
