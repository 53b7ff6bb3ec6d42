"""Shared fixtures: inline TypeScript sources parsed with tree-sitter."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from flowdoc.flow import extract_contract_flow, extract_flows
from flowdoc.parser import find_contracts, parse_source


def _parse(text: str, *, file_path: str = "flows.ts"):
    src = dedent(text).lstrip("\n")
    parsed = parse_source(src, file_path=Path(file_path))
    assert parsed is not None
    return parsed


@pytest.fixture
def parse_ts():
    return _parse


@pytest.fixture
def contract_flow():
    """Extract the single contract defined in ``text``."""

    def _extract(text: str):
        parsed = _parse(text)
        sites = find_contracts(parsed)
        assert len(sites) == 1
        return extract_contract_flow(parsed, sites[0].body, sites[0].name)

    return _extract


@pytest.fixture
def flows():
    def _extract(text: str, file_path: str = "flows.ts"):
        return extract_flows(dedent(text).lstrip("\n"), Path(file_path))

    return _extract


def node_by_label(graph, label):
    matches = [n for n in graph.nodes if n.label == label]
    assert len(matches) == 1, f"expected one node labeled {label!r}, got {matches}"
    return matches[0]


def edge_labels_from(graph, node_id):
    return sorted(e.label or "" for e in graph.edges_from(node_id))


def assert_integrity(graph):
    ids = [n.id for n in graph.nodes]
    assert len(ids) == len(set(ids))
    for edge in graph.edges:
        assert graph.get_node(edge.from_id) is not None
        assert graph.get_node(edge.to_id) is not None
    orders = [n.order for n in graph.nodes]
    assert orders == sorted(orders)
    assert len(set(orders)) == len(orders)
