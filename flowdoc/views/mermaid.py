"""Mermaid flowchart rendering for flow graphs."""

from __future__ import annotations

from typing import Dict, List, Tuple

from ..core.models import FlowGraph, FlowNode, NodeKind

# Opening/closing delimiters per node kind
SHAPES: Dict[NodeKind, Tuple[str, str]] = {
    NodeKind.START: ("([", "])"),
    NodeKind.END: ("([", "])"),
    NodeKind.ERROR: ("([", "])"),
    NodeKind.DECISION: ("{", "}"),
    NodeKind.LOOP: ("{", "}"),
    NodeKind.PRECONDITION: ("{", "}"),
    NodeKind.UNSUPPORTED: ("[[", "]]"),
    NodeKind.ACTION: ("[", "]"),
    NodeKind.POSTCONDITION: ("[", "]"),
    NodeKind.INVARIANT: ("[", "]"),
}


def escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "<br/>").strip()


def _shape_node(node: FlowNode) -> str:
    (open_, close) = SHAPES[node.kind]
    return f'{open_}"{escape_label(node.label)}"{close}'


def render_mermaid(graph: FlowGraph) -> str:
    """Render a fenced ``mermaid`` block, nodes then edges, in graph order."""
    lines: List[str] = ["```mermaid", "flowchart TD"]

    for node in graph.nodes:
        lines.append(f"  {node.id}{_shape_node(node)}")

    for edge in graph.edges:
        label = f'|"{escape_label(edge.label)}"|' if edge.label else ""
        lines.append(f"  {edge.from_id} -->{label} {edge.to_id}")

    lines.append("```")
    return "\n".join(lines)
