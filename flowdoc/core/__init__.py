"""Core domain types and algorithms."""

from .drift import DriftReport, check_drift, recorded_hashes
from .graph import FlowGraphBuilder
from .hashing import canonicalize_flow, hash_flow, normalize_text
from .models import (
    EntryPoint,
    FlowArtifact,
    FlowEdge,
    FlowGraph,
    FlowGraphError,
    FlowNode,
    FlowSummary,
    NodeKind,
    OwnerKind,
)
from .summary import summarize_flow

__all__ = [
    # models
    "EntryPoint",
    "FlowArtifact",
    "FlowEdge",
    "FlowGraph",
    "FlowGraphError",
    "FlowNode",
    "FlowSummary",
    "NodeKind",
    "OwnerKind",
    # graph
    "FlowGraphBuilder",
    # hashing
    "canonicalize_flow",
    "hash_flow",
    "normalize_text",
    # summary
    "summarize_flow",
    # drift
    "DriftReport",
    "check_drift",
    "recorded_hashes",
]
