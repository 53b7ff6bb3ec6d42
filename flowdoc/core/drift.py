"""
Drift detection for generated flow documentation.

Rendered sections carry a ``<!-- flow-hash: ... -->`` marker. A document is
current when every freshly extracted artifact's hash is recorded in it and
no recorded hash is left over.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List

from .models import FlowArtifact

logger = logging.getLogger(__name__)

FLOW_HASH_MARKER = "<!-- flow-hash: {hash} -->"
_MARKER_RE = re.compile(r"<!--\s*flow-hash:\s*([0-9a-fA-F]+)\s*-->")


@dataclass
class DriftReport:
    outdated: List[FlowArtifact] = field(default_factory=list)
    orphaned: List[str] = field(default_factory=list)

    @property
    def is_current(self) -> bool:
        return not self.outdated and not self.orphaned

    def describe(self) -> List[str]:
        """One human-readable line per finding."""
        lines = [
            f"{a.owner_kind.value} {a.owner_id}: documentation out of date (expected flow-hash {a.hash})"
            for a in self.outdated
        ]
        lines.extend(f"recorded flow-hash {h} no longer matches any contract or scenario" for h in self.orphaned)
        return lines


def recorded_hashes(markdown: str) -> List[str]:
    """Hashes recorded in a document, in order of appearance."""
    return [m.group(1).lower() for m in _MARKER_RE.finditer(markdown)]


def check_drift(artifacts: Iterable[FlowArtifact], markdown: str) -> DriftReport:
    recorded = recorded_hashes(markdown)
    recorded_set = set(recorded)
    report = DriftReport()

    fresh = set()
    for artifact in artifacts:
        fresh.add(artifact.hash)
        if artifact.hash not in recorded_set:
            report.outdated.append(artifact)

    seen = set()
    for h in recorded:
        if h not in fresh and h not in seen:
            report.orphaned.append(h)
            seen.add(h)

    logger.debug(
        "Drift check: %d recorded, %d outdated, %d orphaned",
        len(recorded),
        len(report.outdated),
        len(report.orphaned),
    )
    return report
