from __future__ import annotations

import logging

from ..core.hashing import hash_flow
from ..core.models import FlowArtifact, FlowGraph, OwnerKind
from ..core.summary import summarize_flow
from ..views.mermaid import render_mermaid

logger = logging.getLogger(__name__)


def build_flow_artifact(owner_kind: OwnerKind, owner_id: str, graph: FlowGraph) -> FlowArtifact:
    """Attach diagram, hash and summary to a built graph."""
    artifact = FlowArtifact(
        owner_kind=owner_kind,
        owner_id=owner_id,
        graph=graph,
        diagram=render_mermaid(graph),
        hash=hash_flow(owner_kind, owner_id, graph),
        summary=summarize_flow(graph),
    )
    logger.debug(
        "Built %s flow %s: %d nodes, %d edges, hash %s",
        owner_kind.value,
        owner_id,
        len(graph.nodes),
        len(graph.edges),
        artifact.hash[:12],
    )
    return artifact
