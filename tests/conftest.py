"""Pytest configuration and fixtures."""

import pytest

from dgmlkit.builders import LinkBuilder, NodeBuilder
from dgmlkit.model import Link, Node
from dgmlkit.registry import BuilderRegistry


def dict_node(d: dict) -> Node:
    return Node(id=d["id"], label=d.get("label"), category=d.get("category"))


def dict_link(d: dict) -> Link:
    ends = d["link"]
    return Link(source=ends["from"], target=ends["to"], category=ends.get("category"))


@pytest.fixture
def dict_registry() -> BuilderRegistry:
    """Node rule for dicts with an ``id`` key, link rule for dicts with a ``link`` key."""
    return BuilderRegistry(
        node_builders=[NodeBuilder(dict, dict_node, lambda d: "id" in d)],
        link_builders=[LinkBuilder(dict, dict_link, lambda d: "link" in d)],
    )


@pytest.fixture
def ab_inputs() -> list[dict]:
    return [{"id": "A"}, {"id": "B"}, {"link": {"from": "A", "to": "B"}}]
