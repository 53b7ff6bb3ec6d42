"""
flowdoc: flow diagrams and drift checks for contract/scenario sources.

Main interface: extract_flows()
"""

__version__ = "0.1.0"

from .core import DriftReport, FlowArtifact, FlowGraph, NodeKind, OwnerKind, check_drift
from .flow import extract_flows
from .views import render_flow_document, render_flow_section

__all__ = [
    "DriftReport",
    "FlowArtifact",
    "FlowGraph",
    "NodeKind",
    "OwnerKind",
    "check_drift",
    "extract_flows",
    "render_flow_document",
    "render_flow_section",
]
