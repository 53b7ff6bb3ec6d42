"""Contract flow extraction.

Graph shape::

    start -> pre.1 -(pass)-> pre.2 ... -> transition -> <body> -> post.* -> invariant.* -> ok
              \\-(fail)-> error: <tag>

Each precondition fails into one error node per resolved failure tag, or into
a single generic ``error(pre.<i>)`` node when no tag could be resolved.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from tree_sitter import Node

from ..core.graph import FlowGraphBuilder
from ..core.models import EntryPoint, FlowArtifact, NodeKind, OwnerKind
from ..parser.error_tags import guard_error_tags
from ..parser.treesitter import TsParsed, code_children
from ..parser.utils import array_elements, find_array_property, find_function_property, short_text
from .artifact import build_flow_artifact
from .walker import StatementWalker, WalkResult

logger = logging.getLogger(__name__)


def extract_contract_flow(parsed: TsParsed, obj: Node, owner_id: str) -> FlowArtifact:
    """Build the flow artifact for a contract's object literal."""
    src = parsed.src
    builder = FlowGraphBuilder()
    start = builder.add_node(NodeKind.START, "start")
    ok = builder.add_node(NodeKind.END, "ok")

    entries: Tuple[EntryPoint, ...] = (EntryPoint(start),)
    for (i, guard) in enumerate(array_elements(find_array_property(src, obj, "pre")), start=1):
        pre = builder.add_node(NodeKind.PRECONDITION, f"pre.{i}")
        builder.connect_entries(entries, pre)

        tags = guard_error_tags(parsed, guard)
        if tags:
            for tag in tags:
                error = builder.add_node(NodeKind.ERROR, f"error: {tag}")
                builder.add_edge(pre, error, "fail")
        else:
            error = builder.add_node(NodeKind.ERROR, f"error(pre.{i})")
            builder.add_edge(pre, error, "fail")

        entries = (EntryPoint(pre, "pass"),)

    transition = builder.add_node(NodeKind.ACTION, "transition")
    builder.connect_entries(entries, transition)

    transition_fn = find_function_property(src, obj, "transition")
    if transition_fn is not None:
        result = _walk_transition(transition_fn, transition, src, builder)
    else:
        logger.debug("Contract %s: transition is not function-like", owner_id)
        result = _unsupported_transition(transition, builder)

    exits = result.exits or (EntryPoint(transition, "success"),)

    post_count = len(array_elements(find_array_property(src, obj, "post")))
    invariant_count = len(array_elements(find_array_property(src, obj, "invariant")))
    exits = _chain(exits, post_count, NodeKind.POSTCONDITION, "post", builder)
    exits = _chain(exits, invariant_count, NodeKind.INVARIANT, "invariant", builder)

    builder.connect_entries(exits, ok)
    return build_flow_artifact(OwnerKind.CONTRACT, owner_id, builder.build())


def _walk_transition(fn: Node, transition: str, src: bytes, builder: FlowGraphBuilder) -> WalkResult:
    body = fn.child_by_field_name("body")
    if body is None:
        return WalkResult(continue_entries=(EntryPoint(transition),))

    if body.type == "statement_block":
        walker = StatementWalker(builder, src)
        return walker.walk_block(code_children(body), (EntryPoint(transition),))

    # Expression body: the implicit result leaves the transition node directly
    return WalkResult(return_entries=(EntryPoint(transition, short_text(src, body)),))


def _unsupported_transition(transition: str, builder: FlowGraphBuilder) -> WalkResult:
    unsupported = builder.add_node(NodeKind.UNSUPPORTED, "unsupported: transition is not function-like")
    builder.add_edge(transition, unsupported)
    return WalkResult(continue_entries=(EntryPoint(unsupported),))


def _chain(
    entries: Sequence[EntryPoint],
    count: int,
    kind: NodeKind,
    prefix: str,
    builder: FlowGraphBuilder,
) -> Tuple[EntryPoint, ...]:
    """Append ``count`` linear nodes ``<prefix>.1`` .. ``<prefix>.<count>``."""
    current: List[EntryPoint] = list(entries)
    for i in range(1, count + 1):
        node = builder.add_node(kind, f"{prefix}.{i}")
        builder.connect_entries(current, node)
        current = [EntryPoint(node)]
    return tuple(current)
