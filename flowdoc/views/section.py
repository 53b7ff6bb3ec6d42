"""Markdown sections embedding a flow diagram and its summary."""

from __future__ import annotations

from typing import Iterable, List

from ..core.drift import FLOW_HASH_MARKER
from ..core.models import FlowArtifact


def render_flow_section(artifact: FlowArtifact) -> str:
    summary = artifact.summary
    lines: List[str] = [
        FLOW_HASH_MARKER.format(hash=artifact.hash),
        "<details>",
        "<summary>Flow diagram</summary>",
        "",
        artifact.diagram,
        "",
        "</details>",
        "",
        "#### Flow summary",
        "",
        "| Metric | Value |",
        "|---|---|",
        f"| Steps | {summary.step_count} |",
        f"| Branches | {summary.branch_count} |",
        f"| Error paths | {summary.error_path_count} |",
        f"| Unsupported | {summary.unsupported_count} |",
    ]

    if summary.unsupported_count > 0:
        lines.append("")
        lines.append(
            f"> **Warning:** {summary.unsupported_count} construct(s) could not be analyzed "
            "and are shown as unsupported nodes."
        )

    lines.append("")
    return "\n".join(lines)


def render_flow_document(artifacts: Iterable[FlowArtifact], title: str = "Flows") -> str:
    """Concatenate one titled section per artifact."""
    lines: List[str] = [f"# {title}", ""]
    for artifact in artifacts:
        lines.append(f"## {artifact.owner_kind.value.capitalize()}: `{artifact.owner_id}`")
        lines.append("")
        lines.append(render_flow_section(artifact))
    return "\n".join(lines)
