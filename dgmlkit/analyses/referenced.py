"""Reference counting - how often each node is the target of a link."""

from __future__ import annotations

from ..model import Condition, Property, Setter, Style
from .base import GraphAnalysis, GraphEditor

REFERENCED_PROPERTY = "Referenced"


class NodeReferencedAnalysis(GraphAnalysis):
    """Sets ``Referenced`` to the number of incoming links; unreferenced nodes are dashed."""

    def execute(self, graph: GraphEditor) -> None:
        counts = {n.id: 0 for n in graph.nodes}
        for link in graph.links:
            if link.target in counts and link.source != link.target:
                counts[link.target] += 1
        for node in graph.nodes:
            graph.set_property(node, REFERENCED_PROPERTY, counts[node.id])

    def properties(self) -> list[Property]:
        return [
            Property(
                id=REFERENCED_PROPERTY,
                data_type="System.Int32",
                label="Referenced",
                description="Number of links targeting the node",
            )
        ]

    def styles(self) -> list[Style]:
        return [
            Style(
                target_type="Node",
                group_label="Unreferenced",
                value_label="0",
                conditions=[Condition(f"{REFERENCED_PROPERTY}='0'")],
                setters=[Setter("Stroke", "Gray"), Setter("StrokeDashArray", "2,2")],
            )
        ]
