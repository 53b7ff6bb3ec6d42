"""Renderers for flow graphs."""

from .mermaid import escape_label, render_mermaid
from .section import render_flow_document, render_flow_section

__all__ = ["escape_label", "render_flow_document", "render_flow_section", "render_mermaid"]
