"""
Dispatch engine: match objects against rules and merge results into a graph.

Merge policy:
- nodes, categories and properties are unique by id, links by
  (source, target, category); the first element inserted wins and later
  duplicates are dropped silently
- styles are appended without de-duplication
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Sequence, TypeVar

from .builders import BuilderRule, StyleBuilder
from .errors import RuleInvocationError
from .model import Category, Graph, Link, Node, Property, Style

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BuilderRule)


def _describe(obj: Any) -> str:
    text = repr(obj)
    return text if len(text) <= 80 else text[:77] + "..."


def matching_rules(rules: Sequence[R], obj: Any) -> list[R]:
    """Return the rules accepting ``obj``, in registration order."""
    matched: list[R] = []
    for rule in rules:
        try:
            ok = rule.matches(obj)
        except Exception as exc:
            raise RuleInvocationError(
                rule, obj, f"predicate of {rule!r} failed on {_describe(obj)}: {exc}"
            ) from exc
        if ok:
            matched.append(rule)
    return matched


def dispatch(obj: Any, rules: Sequence[R]) -> Iterator[Any]:
    """Yield every element produced for ``obj`` by the matching rules.

    Failures inside a mapping function surface as ``RuleInvocationError``
    with the original exception chained.
    """
    for rule in matching_rules(rules, obj):
        try:
            for element in rule.produce(obj):
                yield element
        except Exception as exc:
            raise RuleInvocationError(
                rule, obj, f"{rule!r} failed on {_describe(obj)}: {exc}"
            ) from exc


class GraphState:
    """In-progress graph for one assembly. Enforces uniqueness centrally."""

    def __init__(self) -> None:
        self._nodes: dict[str, Node] = {}
        self._links: dict[tuple[str, str, str | None], Link] = {}
        self._categories: dict[str, Category] = {}
        self._properties: dict[str, Property] = {}
        self._styles: list[Style] = []

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    @property
    def links(self) -> list[Link]:
        return list(self._links.values())

    @property
    def categories(self) -> list[Category]:
        return list(self._categories.values())

    @property
    def properties(self) -> list[Property]:
        return list(self._properties.values())

    @property
    def styles(self) -> list[Style]:
        return list(self._styles)

    def node(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def link(self, source: str, target: str, category: str | None = None) -> Link | None:
        return self._links.get((source, target, category))

    def category(self, category_id: str) -> Category | None:
        return self._categories.get(category_id)

    def add_node(self, node: Node) -> bool:
        if node.id in self._nodes:
            logger.debug("dropping duplicate node %r", node.id)
            return False
        self._nodes[node.id] = node
        return True

    def add_link(self, link: Link) -> bool:
        if link.key in self._links:
            logger.debug("dropping duplicate link %r", link.key)
            return False
        self._links[link.key] = link
        return True

    def add_category(self, category: Category) -> bool:
        if category.id in self._categories:
            return False
        self._categories[category.id] = category
        return True

    def add_property(self, prop: Property) -> bool:
        if prop.id in self._properties:
            return False
        self._properties[prop.id] = prop
        return True

    def add_style(self, style: Style) -> None:
        self._styles.append(style)

    def add_element(self, element: Node | Link | Category | Style) -> bool:
        if isinstance(element, Node):
            return self.add_node(element)
        if isinstance(element, Link):
            return self.add_link(element)
        if isinstance(element, Category):
            return self.add_category(element)
        if isinstance(element, Style):
            self.add_style(element)
            return True
        raise TypeError(f"not a graph element: {element!r}")

    def merge(self, elements: Iterable[Node | Link | Category | Style]) -> int:
        """Merge produced elements; returns how many were inserted."""
        inserted = 0
        for element in elements:
            if self.add_element(element):
                inserted += 1
        return inserted

    def reindex(self) -> int:
        """Re-key nodes, links and categories by their current identity.

        Elements handed out for mutation may have had their id (or link
        endpoints and category) rewritten. Identity is recomputed in the
        current order and the first element per identity wins; returns how
        many elements were dropped.
        """
        dropped = 0
        nodes: dict[str, Node] = {}
        for node in self._nodes.values():
            if node.id in nodes:
                logger.debug("dropping node %r duplicated by a rewrite", node.id)
                dropped += 1
                continue
            nodes[node.id] = node
        links: dict[tuple[str, str, str | None], Link] = {}
        for link in self._links.values():
            if link.key in links:
                logger.debug("dropping link %r duplicated by a rewrite", link.key)
                dropped += 1
                continue
            links[link.key] = link
        categories: dict[str, Category] = {}
        for category in self._categories.values():
            if category.id in categories:
                dropped += 1
                continue
            categories[category.id] = category
        self._nodes, self._links, self._categories = nodes, links, categories
        return dropped

    def freeze(self, title: str | None = None) -> Graph:
        self.reindex()
        return Graph(
            nodes=tuple(self._nodes.values()),
            links=tuple(self._links.values()),
            categories=tuple(self._categories.values()),
            styles=tuple(self._styles),
            properties=tuple(self._properties.values()),
            title=title,
        )


def apply_style_rules(state: GraphState, rules: Sequence[StyleBuilder]) -> int:
    """Second pass: run style rules over every assembled node, then every link.

    Each produced style is stamped with the target type of the element it was
    produced from. A style declaring the other target type is a rule failure.
    """
    if not rules:
        return 0
    count = 0
    elements: list[Node | Link] = [*state.nodes, *state.links]
    for element in elements:
        target = "Node" if isinstance(element, Node) else "Link"
        for rule in matching_rules(rules, element):
            try:
                styles = list(rule.produce(element))
            except Exception as exc:
                raise RuleInvocationError(
                    rule, element, f"{rule!r} failed on {_describe(element)}: {exc}"
                ) from exc
            for style in styles:
                if style.target_type is None:
                    style.target_type = target  # type: ignore[assignment]
                elif style.target_type != target:
                    raise RuleInvocationError(
                        rule,
                        element,
                        f"{rule!r} produced a {style.target_type} style from a {target}",
                    )
                state.add_style(style)
                count += 1
    return count
