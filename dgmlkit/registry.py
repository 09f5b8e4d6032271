"""
Builder registry: four independent, ordered rule lists.

Registration order is the dispatch order and the merge tie-break, so the
lists are only ever appended to. Assembly works on a ``RuleSet`` snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .builders import BuilderRule, CategoryBuilder, LinkBuilder, NodeBuilder, StyleBuilder


@dataclass(frozen=True)
class RuleSet:
    """Read-only view of a registry taken at the start of an assembly."""

    node_builders: tuple[NodeBuilder, ...] = ()
    link_builders: tuple[LinkBuilder, ...] = ()
    category_builders: tuple[CategoryBuilder, ...] = ()
    style_builders: tuple[StyleBuilder, ...] = ()

    def __len__(self) -> int:
        return (
            len(self.node_builders)
            + len(self.link_builders)
            + len(self.category_builders)
            + len(self.style_builders)
        )


class BuilderRegistry:
    """Holds node, link, category and style rules in registration order."""

    def __init__(
        self,
        node_builders: Iterable[NodeBuilder] = (),
        link_builders: Iterable[LinkBuilder] = (),
        category_builders: Iterable[CategoryBuilder] = (),
        style_builders: Iterable[StyleBuilder] = (),
    ) -> None:
        self._nodes: list[NodeBuilder] = []
        self._links: list[LinkBuilder] = []
        self._categories: list[CategoryBuilder] = []
        self._styles: list[StyleBuilder] = []
        for kind, rules in (
            (NodeBuilder, node_builders),
            (LinkBuilder, link_builders),
            (CategoryBuilder, category_builders),
            (StyleBuilder, style_builders),
        ):
            for rule in rules:
                if not isinstance(rule, kind):
                    raise TypeError(f"expected {kind.__name__}, got {rule!r}")
                self.add(rule)

    @property
    def node_builders(self) -> list[NodeBuilder]:
        return list(self._nodes)

    @property
    def link_builders(self) -> list[LinkBuilder]:
        return list(self._links)

    @property
    def category_builders(self) -> list[CategoryBuilder]:
        return list(self._categories)

    @property
    def style_builders(self) -> list[StyleBuilder]:
        return list(self._styles)

    def add(self, rule: BuilderRule) -> BuilderRegistry:
        """Append a rule to the list matching its variant."""
        if isinstance(rule, NodeBuilder):
            self._nodes.append(rule)
        elif isinstance(rule, LinkBuilder):
            self._links.append(rule)
        elif isinstance(rule, CategoryBuilder):
            self._categories.append(rule)
        elif isinstance(rule, StyleBuilder):
            self._styles.append(rule)
        else:
            raise TypeError(f"not a builder rule: {rule!r}")
        return self

    def extend(self, rules: Iterable[BuilderRule]) -> BuilderRegistry:
        for rule in rules:
            self.add(rule)
        return self

    def snapshot(self) -> RuleSet:
        return RuleSet(
            node_builders=tuple(self._nodes),
            link_builders=tuple(self._links),
            category_builders=tuple(self._categories),
            style_builders=tuple(self._styles),
        )

    def __len__(self) -> int:
        return len(self._nodes) + len(self._links) + len(self._categories) + len(self._styles)
