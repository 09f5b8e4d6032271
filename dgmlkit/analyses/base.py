"""
Analysis protocol and the editor handed to analyses.

An analysis is a triple: a graph mutation, the property declarations it
needs, and the styles it contributes. Declarations are merged into the graph
before any mutation runs, so an analysis can set the properties it declared.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable

from ..dispatch import GraphState
from ..model import Category, Link, Node, Property, Style


class GraphEditor:
    """Mutation surface over an in-progress graph.

    Analyses never see the underlying storage: additions go through the same
    first-wins merge policy the builders use.
    Identity fields rewritten on handed-out elements are re-keyed before
    every lookup or addition, keeping ids unique.
    """

    def __init__(self, state: GraphState) -> None:
        self._state = state

    @property
    def nodes(self) -> list[Node]:
        return self._state.nodes

    @property
    def links(self) -> list[Link]:
        return self._state.links

    @property
    def categories(self) -> list[Category]:
        return self._state.categories

    @property
    def styles(self) -> list[Style]:
        return self._state.styles

    @property
    def properties(self) -> list[Property]:
        return self._state.properties

    def node(self, node_id: str) -> Node | None:
        self._state.reindex()
        return self._state.node(node_id)

    def link(self, source: str, target: str, category: str | None = None) -> Link | None:
        self._state.reindex()
        return self._state.link(source, target, category)

    def incoming(self, node_id: str) -> list[Link]:
        return [link for link in self._state.links if link.target == node_id]

    def outgoing(self, node_id: str) -> list[Link]:
        return [link for link in self._state.links if link.source == node_id]

    def add_node(self, node: Node) -> bool:
        self._state.reindex()
        return self._state.add_node(node)

    def add_link(self, link: Link) -> bool:
        self._state.reindex()
        return self._state.add_link(link)

    def add_category(self, category: Category) -> bool:
        self._state.reindex()
        return self._state.add_category(category)

    def add_style(self, style: Style) -> None:
        self._state.add_style(style)

    def add_property(self, prop: Property) -> bool:
        return self._state.add_property(prop)

    def set_property(self, element: Node | Link, name: str, value: Any) -> None:
        """Add or overwrite a custom property on a node or link."""
        if not isinstance(element, (Node, Link)):
            raise TypeError(f"custom properties live on nodes and links, got {type(element).__name__}")
        element.properties[name] = value


class GraphAnalysis(ABC):
    """Post-processing step run on a fully assembled graph."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def execute(self, graph: GraphEditor) -> None:
        """Read and mutate the assembled graph."""

    def properties(self) -> Iterable[Property]:
        return ()

    def styles(self) -> Iterable[Style]:
        return ()


class Analysis(GraphAnalysis):
    """Ad-hoc analysis built from a callable plus its declarations."""

    def __init__(
        self,
        mutate: Callable[[GraphEditor], None],
        properties: Iterable[Property] = (),
        styles: Iterable[Style] = (),
        *,
        name: str | None = None,
    ) -> None:
        self._mutate = mutate
        self._properties = tuple(properties)
        self._styles = tuple(styles)
        self._name = name or getattr(mutate, "__qualname__", "analysis")

    @property
    def name(self) -> str:
        return self._name

    def execute(self, graph: GraphEditor) -> None:
        self._mutate(graph)

    def properties(self) -> Iterable[Property]:
        return self._properties

    def styles(self) -> Iterable[Style]:
        return self._styles
