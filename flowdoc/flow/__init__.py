"""Flow extraction: contract and scenario sources -> FlowArtifact.

Usage:
    from flowdoc.flow import extract_flows
    artifacts = extract_flows(Path("cart.ts").read_text(), Path("cart.ts"))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from ..core.models import FlowArtifact
from ..parser.locator import contract_variable_map, find_contracts, find_scenarios
from ..parser.treesitter import TsParsed, parse_source
from .artifact import build_flow_artifact
from .contract import extract_contract_flow
from .scenario import ScenarioWalker, extract_scenario_flow
from .walker import StatementWalker, WalkResult

logger = logging.getLogger(__name__)


def extract_flows_from_parsed(parsed: TsParsed) -> List[FlowArtifact]:
    """All contract flows, then all scenario flows, each in source order."""
    artifacts: List[FlowArtifact] = []
    contracts = find_contracts(parsed)
    for site in contracts:
        artifacts.append(extract_contract_flow(parsed, site.body, site.name))

    names = contract_variable_map(parsed, contracts)
    for scenario in find_scenarios(parsed):
        if scenario.flow_fn is None:
            logger.debug("Scenario %s has no flow function; skipped", scenario.name)
            continue
        artifacts.append(extract_scenario_flow(parsed, scenario.flow_fn, scenario.name, names))
    return artifacts


def extract_flows(text: str, file_path: Path) -> List[FlowArtifact]:
    """Parse ``text`` and extract every flow it defines."""
    parsed = parse_source(text, file_path=Path(file_path))
    if parsed is None:
        logger.debug("Unsupported file type: %s", file_path)
        return []
    return extract_flows_from_parsed(parsed)


__all__ = [
    "ScenarioWalker",
    "StatementWalker",
    "WalkResult",
    "build_flow_artifact",
    "extract_contract_flow",
    "extract_flows",
    "extract_flows_from_parsed",
    "extract_scenario_flow",
]
