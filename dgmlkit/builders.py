"""
Builder rules: typed, predicate-guarded mappings from objects to graph elements.

Each rule declares the type of object it accepts. Matching is a runtime type
check (exact, or ``isinstance`` so that base classes, ABCs and runtime
checkable protocols work) followed by the optional predicate.

Single rules produce at most one element per accepted object; multi rules
produce a lazily consumed iterable of zero or more elements.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Generic, Iterable, Iterator, TypeVar

from .model import Category, Link, Node, Style

S = TypeVar("S")
E = TypeVar("E")

Predicate = Callable[[Any], bool]


class BuilderRule(Generic[S, E]):
    """Base class for all rule variants.

    Args:
        source_type: Type of object this rule accepts
        build: Mapping function; returns one element (or None) for single
            rules, an iterable of elements (or None) for multi rules
        accept: Optional predicate; defaults to accepting every object of
            ``source_type``
        exact: Require ``type(obj) is source_type`` instead of ``isinstance``
    """

    element_type: ClassVar[type]
    many: ClassVar[bool] = False

    def __init__(
        self,
        source_type: type[S],
        build: Callable[[S], Any],
        accept: Callable[[S], bool] | None = None,
        *,
        exact: bool = False,
    ) -> None:
        if not isinstance(source_type, type):
            raise TypeError(f"source_type must be a type, got {source_type!r}")
        if not callable(build):
            raise TypeError("build must be callable")
        self.source_type = source_type
        self.build = build
        self.accept = accept
        self.exact = exact

    @property
    def name(self) -> str:
        return getattr(self.build, "__qualname__", None) or repr(self.build)

    def accepts_type(self, obj: Any) -> bool:
        if self.exact:
            return type(obj) is self.source_type
        return isinstance(obj, self.source_type)

    def matches(self, obj: Any) -> bool:
        """Type check first, predicate second; the predicate never sees foreign types."""
        if not self.accepts_type(obj):
            return False
        if self.accept is None:
            return True
        return bool(self.accept(obj))

    def produce(self, obj: S) -> Iterator[E]:
        result = self.build(obj)
        if result is None:
            return
        items: Iterable[Any] = result if self.many else (result,)
        for item in items:
            if item is None:
                continue
            if not isinstance(item, self.element_type):
                raise TypeError(
                    f"{type(self).__name__} {self.name} produced {type(item).__name__}, "
                    f"expected {self.element_type.__name__}"
                )
            yield item

    def __repr__(self) -> str:
        mode = "exact" if self.exact else "isinstance"
        return f"{type(self).__name__}({self.source_type.__name__}, {self.name}, {mode})"


class NodeBuilder(BuilderRule[S, Node]):
    element_type = Node


class NodesBuilder(NodeBuilder[S]):
    many = True


class LinkBuilder(BuilderRule[S, Link]):
    element_type = Link


class LinksBuilder(LinkBuilder[S]):
    many = True


class CategoryBuilder(BuilderRule[S, Category]):
    element_type = Category


class CategoriesBuilder(CategoryBuilder[S]):
    many = True


class StyleBuilder(BuilderRule[S, Style]):
    """Style rules run over assembled nodes and links, not over input objects."""

    element_type = Style

    def __init__(
        self,
        source_type: type[S],
        build: Callable[[S], Any],
        accept: Callable[[S], bool] | None = None,
        *,
        exact: bool = False,
    ) -> None:
        super().__init__(source_type, build, accept, exact=exact)
        if not (issubclass(source_type, Node) or issubclass(source_type, Link)):
            raise ValueError(f"style rules target Node or Link, got {source_type.__name__}")

    @property
    def target_type(self) -> str:
        return "Node" if issubclass(self.source_type, Node) else "Link"


class StylesBuilder(StyleBuilder[S]):
    many = True
