"""
Types visualizer - class diagrams for Python modules.

Classes become boxes, interfaces (protocols and pure ABCs) ovals, abstract
classes dashed boxes. Inheritance links are dashed green and also reach
interfaces inherited indirectly. Associations (annotated attributes,
property return types, generic arguments, ``__init__`` parameters) are blue.
Only types in the visualized set are linked.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import typing
from typing import Any, Iterable, Iterator, Sequence

from ..analyses import GraphAnalysis, HubNodeAnalysis
from ..assembler import assemble
from ..builders import CategoryBuilder, LinksBuilder, NodeBuilder, StyleBuilder
from ..model import Category, Graph, Link, Node, Setter, Style
from ..registry import BuilderRegistry

logger = logging.getLogger(__name__)

CLASS_TYPE = "Class"
INTERFACE_TYPE = "Interface"
ABSTRACT_TYPE = "Abstract"
ASSOCIATION = "Association"
INHERITANCE = "Inheritance"


def type_id(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def module_category_id(cls: type) -> str:
    return f"m:{cls.__module__}"


def is_interface(cls: type) -> bool:
    """Protocols, and ABCs whose own members are all abstract."""
    if getattr(cls, "_is_protocol", False) and cls is not typing.Protocol:
        return True
    abstract = getattr(cls, "__abstractmethods__", frozenset())
    if not abstract:
        return False
    own = [
        name
        for name, value in vars(cls).items()
        if not name.startswith("__")
        and (callable(value) or isinstance(value, (property, classmethod, staticmethod)))
    ]
    return bool(own) and all(name in abstract for name in own)


def is_abstract(cls: type) -> bool:
    return inspect.isabstract(cls) and not is_interface(cls)


def _own_annotations(obj: Any) -> dict[str, Any]:
    own = inspect.get_annotations(obj)
    try:
        resolved = typing.get_type_hints(obj)
    except (NameError, TypeError, AttributeError) as exc:
        # Unresolvable forward references keep their raw (string) form.
        logger.debug("cannot resolve annotations of %r: %s", obj, exc)
        resolved = {}
    return {name: resolved.get(name, ann) for name, ann in own.items()}


def _referenced_types(annotation: Any, known: set[type]) -> Iterator[type]:
    """Types from ``known`` mentioned by an annotation, outermost first."""
    if isinstance(annotation, type) and annotation in known:
        yield annotation
        return
    for arg in typing.get_args(annotation):
        yield from _referenced_types(arg, known)


class TypeIndex:
    """The set of types being visualized; links never leave it."""

    def __init__(self, types: Iterable[type]) -> None:
        self.types: list[type] = []
        for t in types:
            if t not in self.types:
                self.types.append(t)
        self.known = set(self.types)

    def __contains__(self, cls: object) -> bool:
        return cls in self.known

    def association(self, source: type, target: type, label: str | None = None) -> Link:
        return Link(source=type_id(source), target=type_id(target), label=label, category=ASSOCIATION)

    def attribute_links(self, cls: type) -> Iterator[Link]:
        for name, annotation in _own_annotations(cls).items():
            for target in _referenced_types(annotation, self.known):
                yield self.association(cls, target, name)

    def property_links(self, cls: type) -> Iterator[Link]:
        for name, value in vars(cls).items():
            if not isinstance(value, property) or value.fget is None:
                continue
            returns = _own_annotations(value.fget).get("return")
            for target in _referenced_types(returns, self.known):
                yield self.association(cls, target, name)

    def inheritance_links(self, cls: type) -> Iterator[Link]:
        """Direct bases, plus interfaces reached only through the MRO."""
        for base in cls.__bases__:
            if base in self.known:
                yield Link(source=type_id(cls), target=type_id(base), category=INHERITANCE)
        for base in cls.__mro__[1:]:
            if base in self.known and base not in cls.__bases__ and is_interface(base):
                yield Link(source=type_id(cls), target=type_id(base), category=INHERITANCE)

    def generic_links(self, cls: type) -> Iterator[Link]:
        for base in getattr(cls, "__orig_bases__", ()):
            origin = typing.get_origin(base)
            if origin is None or origin not in self.known:
                continue
            for arg in typing.get_args(base):
                for target in _referenced_types(arg, self.known):
                    yield self.association(cls, target)

    def constructor_links(self, cls: type) -> Iterator[Link]:
        init = vars(cls).get("__init__")
        if init is None or not inspect.isfunction(init):
            return
        hints = _own_annotations(init)
        for name in inspect.signature(init).parameters:
            if name == "self" or name not in hints:
                continue
            for target in _referenced_types(hints[name], self.known):
                yield self.association(cls, target)


def class_to_node(cls: type) -> Node:
    node = Node(
        id=type_id(cls),
        label=cls.__name__,
        category=CLASS_TYPE,
        category_refs=[module_category_id(cls)],
    )
    if is_abstract(cls):
        node.category_refs.append(ABSTRACT_TYPE)
    return node


def interface_to_node(cls: type) -> Node:
    return Node(
        id=type_id(cls),
        label=cls.__name__,
        category=INTERFACE_TYPE,
        category_refs=[module_category_id(cls)],
    )


def module_category(cls: type) -> Category:
    return Category(id=module_category_id(cls), label=cls.__module__)


def interface_style(node: Node) -> Style:
    return Style(group_label=INTERFACE_TYPE, setters=[Setter("NodeRadius", "16")])


def abstract_style(node: Node) -> Style:
    return Style(group_label=ABSTRACT_TYPE, setters=[Setter("StrokeDashArray", "2,2")])


def association_style(link: Link) -> Style:
    return Style(group_label=link.category, setters=[Setter("Stroke", "LightBlue")])


def inheritance_style(link: Link) -> Style:
    return Style(
        group_label=link.category,
        setters=[Setter("StrokeDashArray", "2,2"), Setter("Stroke", "Green")],
    )


def types_registry(types: Iterable[type]) -> BuilderRegistry:
    index = TypeIndex(types)
    return BuilderRegistry(
        node_builders=[
            NodeBuilder(type, class_to_node, lambda t: t in index and not is_interface(t)),
            NodeBuilder(type, interface_to_node, lambda t: t in index and is_interface(t)),
        ],
        link_builders=[
            LinksBuilder(type, index.attribute_links),
            LinksBuilder(type, index.property_links),
            LinksBuilder(type, index.inheritance_links),
            LinksBuilder(type, index.generic_links),
            LinksBuilder(type, index.constructor_links),
        ],
        category_builders=[CategoryBuilder(type, module_category)],
        style_builders=[
            StyleBuilder(Node, interface_style, lambda n: n.has_category(INTERFACE_TYPE)),
            StyleBuilder(Node, abstract_style, lambda n: n.has_category(ABSTRACT_TYPE)),
            StyleBuilder(Link, association_style, lambda link: link.has_category(ASSOCIATION)),
            StyleBuilder(Link, inheritance_style, lambda link: link.has_category(INHERITANCE)),
        ],
    )


def types_to_graph(
    types: Iterable[type],
    *,
    analyses: Sequence[GraphAnalysis] | None = None,
    title: str | None = None,
) -> Graph:
    """Build a class diagram for ``types``. Runs hub detection unless ``analyses`` is given."""
    types = list(types)
    if analyses is None:
        analyses = [HubNodeAnalysis()]
    return assemble(types_registry(types), analyses, [types], title=title)


def collect_types(module_names: Sequence[str]) -> list[type]:
    """Import modules and return the classes they define, in definition order."""
    collected: list[type] = []
    for module_name in module_names:
        module = importlib.import_module(module_name)
        for value in vars(module).values():
            if inspect.isclass(value) and value.__module__ == module.__name__ and value not in collected:
                collected.append(value)
    return collected
