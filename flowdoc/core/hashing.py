from __future__ import annotations

import hashlib
import re
from typing import List

from .models import FlowGraph, OwnerKind

_WHITESPACE = re.compile(r"\s+")


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to one space and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def canonicalize_flow(owner_kind: OwnerKind, owner_id: str, graph: FlowGraph) -> str:
    """Serialize a graph to the text that gets fingerprinted.

    Relies on the graph already being in canonical order (see
    ``FlowGraphBuilder.build``).
    """
    lines: List[str] = [f"owner:{owner_kind.value}:{owner_id}"]
    for node in graph.nodes:
        lines.append(f"node:{node.id}|{node.kind.value}|{normalize_text(node.label)}")
    for edge in graph.edges:
        lines.append(f"edge:{edge.from_id}->{edge.to_id}|{normalize_text(edge.label or '')}")
    return "\n".join(lines)


def hash_flow(owner_kind: OwnerKind, owner_id: str, graph: FlowGraph) -> str:
    """SHA-256 hex digest of the canonical text."""
    return _sha256_hex(canonicalize_flow(owner_kind, owner_id, graph).encode("utf-8"))
