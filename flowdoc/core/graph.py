"""
Flow graph construction.

The builder is the only mutable piece of the engine: one instance per
artifact, discarded after ``build()``.
"""

from __future__ import annotations

import sys
from typing import Dict, Iterable, List, Optional

from .models import EntryPoint, FlowEdge, FlowGraph, FlowGraphError, FlowNode, NodeKind


class FlowGraphBuilder:
    """
    Allocates node ids and records edges for a single flow graph.

    Edges are appended as-is: no deduplication and no cycle detection, since
    loop back-edges must be able to close cycles.
    """

    def __init__(self) -> None:
        self._nodes: List[FlowNode] = []
        self._edges: List[FlowEdge] = []
        self._counter = 0

    def add_node(self, kind: NodeKind, label: str) -> str:
        """Append a node and return its id."""
        self._counter += 1
        node_id = f"n{self._counter}"
        self._nodes.append(FlowNode(id=node_id, kind=kind, label=label, order=self._counter))
        return node_id

    def add_edge(self, from_id: str, to_id: str, label: Optional[str] = None) -> None:
        self._edges.append(FlowEdge(from_id=from_id, to_id=to_id, label=label))

    def connect_entries(self, entries: Iterable[EntryPoint], to_id: str) -> None:
        """Converge every open continuation on ``to_id``."""
        for entry in entries:
            self.add_edge(entry.node_id, to_id, entry.edge_label)

    def build(self) -> FlowGraph:
        """Freeze into a canonically ordered graph.

        Nodes are sorted by ``order``; edges by (order of source, order of
        target, label), which makes the result independent of the order in
        which the walker happened to emit edges.
        """
        order: Dict[str, int] = {n.id: n.order for n in self._nodes}

        for edge in self._edges:
            for endpoint in (edge.from_id, edge.to_id):
                if endpoint not in order:
                    raise FlowGraphError(f"Edge {edge.from_id}->{edge.to_id} references unknown node {endpoint}")

        nodes = sorted(self._nodes, key=lambda n: n.order)
        edges = sorted(
            self._edges,
            key=lambda e: (
                order.get(e.from_id, sys.maxsize),
                order.get(e.to_id, sys.maxsize),
                e.label or "",
            ),
        )
        return FlowGraph(nodes=tuple(nodes), edges=tuple(edges))
