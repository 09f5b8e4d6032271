"""Hub detection - flag nodes where links concentrate."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from statistics import mean, pstdev

from ..model import Condition, Property, Setter, Style
from .base import GraphAnalysis, GraphEditor

logger = logging.getLogger(__name__)

HUB_PROPERTY = "Hub"


@dataclass(frozen=True)
class HubCandidate:
    node_id: str
    incoming: int
    outgoing: int

    @property
    def links(self) -> int:
        return self.incoming + self.outgoing


def compute_hub_candidates(graph: GraphEditor) -> list[HubCandidate]:
    """Count incoming/outgoing links per node, in node order.

    Links with endpoints outside the node set are ignored for that endpoint.
    """
    incoming: dict[str, int] = {n.id: 0 for n in graph.nodes}
    outgoing: dict[str, int] = {n.id: 0 for n in graph.nodes}
    for link in graph.links:
        if link.source == link.target:
            continue
        if link.target in incoming:
            incoming[link.target] += 1
        if link.source in outgoing:
            outgoing[link.source] += 1
    return [HubCandidate(node_id=n, incoming=incoming[n], outgoing=outgoing[n]) for n in incoming]


def hub_threshold(candidates: list[HubCandidate]) -> int:
    """Default cut-off: one standard deviation above the mean link count."""
    if not candidates:
        return 1
    counts = [c.links for c in candidates]
    return max(1, math.ceil(mean(counts) + pstdev(counts)))


class HubNodeAnalysis(GraphAnalysis):
    """Marks every node with ``Hub`` = True/False and styles the hubs.

    Args:
        min_links: Links (in + out) a node needs to count as a hub; derived
            from the degree distribution when None
    """

    def __init__(self, min_links: int | None = None) -> None:
        if min_links is not None and min_links < 1:
            raise ValueError("min_links must be a positive integer")
        self.min_links = min_links

    def execute(self, graph: GraphEditor) -> None:
        candidates = compute_hub_candidates(graph)
        threshold = self.min_links if self.min_links is not None else hub_threshold(candidates)
        hubs = 0
        for node, c in zip(graph.nodes, candidates):
            is_hub = c.links >= threshold
            hubs += is_hub
            graph.set_property(node, HUB_PROPERTY, is_hub)
        logger.debug("hub analysis: %d of %d nodes at or above %d links", hubs, len(candidates), threshold)

    def properties(self) -> list[Property]:
        return [
            Property(
                id=HUB_PROPERTY,
                data_type="System.Boolean",
                label="Hub",
                description="Node has an unusually high number of links",
            )
        ]

    def styles(self) -> list[Style]:
        return [
            Style(
                target_type="Node",
                group_label="Hub",
                value_label="True",
                conditions=[Condition(f"{HUB_PROPERTY}='True'")],
                setters=[Setter("Background", "Red")],
            )
        ]
