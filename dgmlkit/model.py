"""Data models for directed graph documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

TargetType = Literal["Node", "Link"]


@dataclass
class Node:
    """A graph node, identified by its caller-supplied id."""

    id: str
    label: str | None = None
    category: str | None = None  # primary classification
    category_refs: list[str] = field(default_factory=list)  # secondary refs, e.g. containment groups
    properties: dict[str, Any] = field(default_factory=dict)

    def has_category(self, name: str) -> bool:
        return self.category == name or name in self.category_refs


@dataclass
class Link:
    """A directed link between two node ids."""

    source: str
    target: str
    label: str | None = None
    category: str | None = None
    category_refs: list[str] = field(default_factory=list)
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str, str | None]:
        """Identity of the link within a graph."""
        return (self.source, self.target, self.category)

    def has_category(self, name: str) -> bool:
        return self.category == name or name in self.category_refs


@dataclass
class Category:
    id: str
    label: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Condition:
    """Attribute-equality expression, e.g. ``Hub='True'``."""

    expression: str


@dataclass(frozen=True)
class Setter:
    property: str
    value: str


@dataclass
class Style:
    """Declarative visual rule applied to nodes or links matching its conditions."""

    target_type: TargetType | None = None  # stamped by the style pass when left empty
    group_label: str | None = None
    value_label: str | None = None
    conditions: list[Condition] = field(default_factory=list)
    setters: list[Setter] = field(default_factory=list)


@dataclass(frozen=True)
class Property:
    """Schema entry declaring a custom attribute used on nodes or links."""

    id: str
    data_type: str = "System.String"
    label: str | None = None
    description: str | None = None


@dataclass
class Graph:
    """A finished graph document.

    Collections keep the order in which elements were first produced. Node,
    link, category and property identities are unique; styles are not.
    """

    nodes: tuple[Node, ...] = ()
    links: tuple[Link, ...] = ()
    categories: tuple[Category, ...] = ()
    styles: tuple[Style, ...] = ()
    properties: tuple[Property, ...] = ()
    title: str | None = None

    def node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def dangling_links(self) -> list[Link]:
        """Links whose source or target does not name a node in this graph.

        Dangling endpoints are allowed; this only reports them.
        """
        ids = {n.id for n in self.nodes}
        return [link for link in self.links if link.source not in ids or link.target not in ids]
