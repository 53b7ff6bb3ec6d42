from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class NodeKind(str, Enum):
    """Node types produced by flow extraction."""

    START = "start"
    END = "end"
    ACTION = "action"
    DECISION = "decision"
    LOOP = "loop"
    ERROR = "error"
    UNSUPPORTED = "unsupported"
    PRECONDITION = "precondition"
    POSTCONDITION = "postcondition"
    INVARIANT = "invariant"


class OwnerKind(str, Enum):
    """What a flow graph documents."""

    CONTRACT = "contract"
    SCENARIO = "scenario"


class FlowGraphError(ValueError):
    """Raised when a built graph would violate referential integrity."""


@dataclass(frozen=True)
class FlowNode:
    id: str
    kind: NodeKind
    label: str
    order: int

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "kind": self.kind.value, "label": self.label, "order": self.order}


@dataclass(frozen=True)
class FlowEdge:
    from_id: str
    to_id: str
    label: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"from": self.from_id, "to": self.to_id}
        if self.label is not None:
            out["label"] = self.label
        return out


@dataclass(frozen=True)
class EntryPoint:
    """An open control-flow continuation awaiting its successor.

    ``edge_label`` is carried onto the edge created when the entry is connected
    (e.g. "true" for the then-branch of a decision).
    """

    node_id: str
    edge_label: Optional[str] = None


@dataclass(frozen=True)
class FlowGraph:
    """
    Immutable, canonically ordered flow graph.
    """

    nodes: Tuple[FlowNode, ...] = ()
    edges: Tuple[FlowEdge, ...] = ()

    # Index for O(1) lookup; derived from nodes
    _node_map: Dict[str, FlowNode] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_node_map", {n.id: n for n in self.nodes})

    def get_node(self, node_id: str) -> Optional[FlowNode]:
        """Get node by ID (O(1))."""
        return self._node_map.get(node_id)

    def edges_from(self, node_id: str) -> List[FlowEdge]:
        return [e for e in self.edges if e.from_id == node_id]

    def edges_to(self, node_id: str) -> List[FlowEdge]:
        return [e for e in self.edges if e.to_id == node_id]

    def nodes_of_kind(self, kind: NodeKind) -> List[FlowNode]:
        return [n for n in self.nodes if n.kind == kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


@dataclass(frozen=True)
class FlowSummary:
    step_count: int = 0
    branch_count: int = 0
    error_path_count: int = 0
    unsupported_count: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "stepCount": self.step_count,
            "branchCount": self.branch_count,
            "errorPathCount": self.error_path_count,
            "unsupportedCount": self.unsupported_count,
        }


@dataclass(frozen=True)
class FlowArtifact:
    """Everything the documentation pipeline needs for one contract or scenario."""

    owner_kind: OwnerKind
    owner_id: str
    graph: FlowGraph
    diagram: str
    hash: str
    summary: FlowSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ownerKind": self.owner_kind.value,
            "ownerId": self.owner_id,
            "graph": self.graph.to_dict(),
            "diagram": self.diagram,
            "hash": self.hash,
            "summary": self.summary.to_dict(),
        }
