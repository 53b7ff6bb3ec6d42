"""flowdoc parser - tree-sitter front end for contract and scenario sources.

Usage:
    from flowdoc.parser import parse_source, find_contracts
    parsed = parse_source(text, file_path=Path("cart.ts"))
    contracts = find_contracts(parsed)
"""

from __future__ import annotations

from .config import LABEL_MAX_CHARS, is_supported_file, language_for_file
from .error_tags import extract_error_tags, guard_error_tags
from .locator import ContractSite, ScenarioSite, contract_variable_map, find_contracts, find_scenarios
from .treesitter import TsParsed, parse_source

__all__ = [
    "LABEL_MAX_CHARS",
    "ContractSite",
    "ScenarioSite",
    "TsParsed",
    "contract_variable_map",
    "extract_error_tags",
    "find_contracts",
    "find_scenarios",
    "guard_error_tags",
    "is_supported_file",
    "language_for_file",
    "parse_source",
]
