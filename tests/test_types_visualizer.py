from abc import ABC, abstractmethod

import pytest

import shapes_model
from dgmlkit.analyses import NodeReferencedAnalysis
from dgmlkit.model import Graph
from dgmlkit.visualizers.types import collect_types, is_abstract, is_interface, type_id, types_to_graph


def _id(name: str) -> str:
    return f"shapes_model.{name}"


def _links(graph: Graph, category: str) -> set[tuple[str, str]]:
    return {
        (link.source.split(".")[-1], link.target.split(".")[-1])
        for link in graph.links
        if link.category == category
    }


@pytest.fixture
def shapes_graph() -> Graph:
    return types_to_graph(collect_types(["shapes_model"]), title="Shapes")


def test_collect_types_in_definition_order() -> None:
    names = [t.__name__ for t in collect_types(["shapes_model"])]
    assert names == [
        "Drawable",
        "Shape",
        "Polygon",
        "Point",
        "Square",
        "Repository",
        "ShapeRepository",
        "Canvas",
        "Layer",
    ]


def test_interface_and_abstract_classification() -> None:
    assert is_interface(shapes_model.Drawable)
    assert is_interface(shapes_model.Shape)
    assert not is_interface(shapes_model.Polygon)
    assert is_abstract(shapes_model.Polygon)
    assert not is_abstract(shapes_model.Square)
    assert not is_interface(shapes_model.Canvas)


def test_concrete_classmethod_keeps_an_abc_abstract() -> None:
    class Factory(ABC):
        @abstractmethod
        def make(self) -> object: ...

        @classmethod
        def default(cls) -> "Factory":
            raise NotImplementedError

    class Registry(ABC):
        @abstractmethod
        def get(self, key: str) -> object: ...

        @staticmethod
        def normalize(key: str) -> str:
            return key.lower()

    assert not is_interface(Factory)
    assert is_abstract(Factory)
    assert not is_interface(Registry)
    assert is_abstract(Registry)


def test_nodes_and_categories(shapes_graph: Graph) -> None:
    assert len(shapes_graph.nodes) == 9
    assert shapes_graph.title == "Shapes"

    drawable = shapes_graph.node(_id("Drawable"))
    polygon = shapes_graph.node(_id("Polygon"))
    canvas = shapes_graph.node(_id("Canvas"))
    assert drawable is not None and drawable.category == "Interface"
    assert polygon is not None and polygon.category == "Class"
    assert polygon.category_refs == ["m:shapes_model", "Abstract"]
    assert canvas is not None and canvas.label == "Canvas"
    assert canvas.category_refs == ["m:shapes_model"]

    assert [(c.id, c.label) for c in shapes_graph.categories] == [("m:shapes_model", "shapes_model")]


def test_inheritance_links(shapes_graph: Graph) -> None:
    assert _links(shapes_graph, "Inheritance") == {
        ("Polygon", "Shape"),
        ("Square", "Polygon"),
        ("Square", "Shape"),
        ("ShapeRepository", "Repository"),
    }


def test_indirect_inheritance_only_reaches_interfaces() -> None:
    class Base:
        pass

    class Middle(Base):
        pass

    class Leaf(Middle):
        pass

    graph = types_to_graph([Base, Middle, Leaf], analyses=[])
    assert {(link.source, link.target) for link in graph.links} == {
        (type_id(Middle), type_id(Base)),
        (type_id(Leaf), type_id(Middle)),
    }


def test_association_links(shapes_graph: Graph) -> None:
    associations = _links(shapes_graph, "Association")
    assert {
        ("Square", "Point"),
        ("Polygon", "Point"),
        ("ShapeRepository", "Shape"),
        ("Canvas", "Shape"),
        ("Canvas", "Drawable"),
        ("Canvas", "ShapeRepository"),
        ("Canvas", "Point"),
        ("Layer", "Canvas"),
    } == associations

    canvas_shape = next(
        link
        for link in shapes_graph.links
        if link.source == _id("Canvas") and link.target == _id("Shape") and link.category == "Association"
    )
    assert canvas_shape.label == "shapes"

    vertex = next(link for link in shapes_graph.links if link.source == _id("Polygon") and link.target == _id("Point"))
    assert vertex.label == "first_vertex"


def test_property_return_types_become_associations() -> None:
    class Engine:
        pass

    class Car:
        @property
        def engine(self) -> Engine:
            return Engine()

        @property
        def wheels(self) -> int:
            return 4

    graph = types_to_graph([Car, Engine], analyses=[])
    assert [(link.source, link.target, link.label) for link in graph.links] == [
        (type_id(Car), type_id(Engine), "engine")
    ]


def test_links_never_leave_the_type_set(shapes_graph: Graph) -> None:
    assert shapes_graph.dangling_links() == []

    graph = types_to_graph([shapes_model.Canvas, shapes_model.Point], analyses=[])
    assert {(link.source, link.target) for link in graph.links} == {(_id("Canvas"), _id("Point"))}


def test_styles(shapes_graph: Graph) -> None:
    node_groups = [s.group_label for s in shapes_graph.styles if s.target_type == "Node"]
    link_groups = [s.group_label for s in shapes_graph.styles if s.target_type == "Link"]

    assert node_groups.count("Interface") == 2
    assert node_groups.count("Abstract") == 1
    assert link_groups.count("Inheritance") == 4
    assert link_groups.count("Association") == 8
    # Hub style declared by the default analysis comes last.
    assert shapes_graph.styles[-1].group_label == "Hub"


def test_default_and_custom_analyses(shapes_graph: Graph) -> None:
    assert [p.id for p in shapes_graph.properties] == ["Hub"]
    canvas = shapes_graph.node(_id("Canvas"))
    assert canvas is not None and canvas.properties["Hub"] is True

    graph = types_to_graph(collect_types(["shapes_model"]), analyses=[NodeReferencedAnalysis()])
    assert [p.id for p in graph.properties] == ["Referenced"]
    shape = graph.node(type_id(shapes_model.Shape))
    assert shape is not None and shape.properties["Referenced"] == 4


def test_unknown_module_raises() -> None:
    with pytest.raises(ModuleNotFoundError):
        collect_types(["no_such_module_for_dgmlkit"])
