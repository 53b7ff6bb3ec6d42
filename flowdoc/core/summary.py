from __future__ import annotations

from .models import FlowGraph, FlowSummary, NodeKind

STEP_KINDS = frozenset(
    {
        NodeKind.ACTION,
        NodeKind.DECISION,
        NodeKind.LOOP,
        NodeKind.PRECONDITION,
        NodeKind.POSTCONDITION,
        NodeKind.INVARIANT,
    }
)
BRANCH_KINDS = frozenset({NodeKind.DECISION, NodeKind.LOOP})


def summarize_flow(graph: FlowGraph) -> FlowSummary:
    """Count nodes by kind."""
    return FlowSummary(
        step_count=sum(1 for n in graph.nodes if n.kind in STEP_KINDS),
        branch_count=sum(1 for n in graph.nodes if n.kind in BRANCH_KINDS),
        error_path_count=sum(1 for n in graph.nodes if n.kind == NodeKind.ERROR),
        unsupported_count=sum(1 for n in graph.nodes if n.kind == NodeKind.UNSUPPORTED),
    )
