from __future__ import annotations

import pytest

from dgmlkit.analyses import Analysis, GraphEditor
from dgmlkit.assembler import DgmlBuilder, assemble
from dgmlkit.builders import CategoryBuilder, NodeBuilder, NodesBuilder, StyleBuilder
from dgmlkit.errors import AnalysisError, RuleInvocationError
from dgmlkit.model import Category, Condition, Node, Property, Setter, Style
from dgmlkit.registry import BuilderRegistry
from dgmlkit.writer import to_dgml


def test_end_to_end_dict_scenario(dict_registry: BuilderRegistry, ab_inputs: list[dict]) -> None:
    graph = assemble(dict_registry, [], [ab_inputs])

    assert [n.id for n in graph.nodes] == ["A", "B"]
    assert [(link.source, link.target) for link in graph.links] == [("A", "B")]


def test_duplicate_input_is_discarded(dict_registry: BuilderRegistry, ab_inputs: list[dict]) -> None:
    graph = assemble(dict_registry, [], [ab_inputs + [{"id": "A", "label": "again"}]])

    assert [n.id for n in graph.nodes] == ["A", "B"]
    assert graph.node("A").label is None  # type: ignore[union-attr]
    assert len(graph.links) == 1


def test_first_registered_rule_wins_for_duplicate_ids() -> None:
    registry = BuilderRegistry(
        node_builders=[
            NodeBuilder(str, lambda s: Node(id=s, label="first rule")),
            NodesBuilder(str, lambda s: [Node(id=s, label="second rule"), Node(id=s + "-extra")]),
        ]
    )
    graph = assemble(registry, [], [["x", "y", "x"]])

    assert [n.id for n in graph.nodes] == ["x", "x-extra", "y", "y-extra"]
    assert len({n.id for n in graph.nodes}) == len(graph.nodes)
    assert {n.label for n in graph.nodes if n.id in ("x", "y")} == {"first rule"}


def test_input_collections_are_flattened_in_order(dict_registry: BuilderRegistry) -> None:
    graph = assemble(
        dict_registry,
        [],
        [[{"id": "B"}], [{"id": "A", "label": "a1"}, {"id": "C"}], [{"id": "A", "label": "a2"}]],
    )
    assert [n.id for n in graph.nodes] == ["B", "A", "C"]
    assert graph.node("A").label == "a1"  # type: ignore[union-attr]


def test_assembly_is_deterministic(dict_registry: BuilderRegistry, ab_inputs: list[dict]) -> None:
    def count(g: GraphEditor) -> None:
        for node in g.nodes:
            g.set_property(node, "Degree", len(g.incoming(node.id)) + len(g.outgoing(node.id)))

    analysis = Analysis(count, properties=[Property(id="Degree", data_type="System.Int32")])

    first = assemble(dict_registry, [analysis], [ab_inputs])
    second = assemble(dict_registry, [analysis], [ab_inputs])

    assert first == second
    assert to_dgml(first) == to_dgml(second)


def test_empty_registry_yields_empty_graph() -> None:
    graph = assemble(BuilderRegistry(), [], [[1, "two", {"id": "3"}]])
    assert graph.nodes == ()
    assert graph.links == ()
    assert graph.categories == ()
    assert graph.styles == ()


def test_same_object_matches_several_rule_kinds() -> None:
    registry = BuilderRegistry(
        node_builders=[NodeBuilder(str, lambda s: Node(id=s, category="letter"))],
        category_builders=[CategoryBuilder(str, lambda s: Category(id="letter", label="Letter"))],
    )
    graph = assemble(registry, [], [["a", "b"]])
    assert [n.id for n in graph.nodes] == ["a", "b"]
    assert [c.id for c in graph.categories] == ["letter"]


def test_analysis_observes_builder_output() -> None:
    def count_nodes(g: GraphEditor) -> None:
        total = len(g.nodes)
        for node in g.nodes:
            g.set_property(node, "NodeCount", total)

    registry = BuilderRegistry(node_builders=[NodeBuilder(str, lambda s: Node(id=s))])
    graph = assemble(registry, [Analysis(count_nodes)], [["only"]])

    assert graph.nodes[0].properties == {"NodeCount": 1}


def test_analyses_compose_sequentially() -> None:
    def add_node(g: GraphEditor) -> None:
        g.add_node(Node(id="added"))

    def count_nodes(g: GraphEditor) -> None:
        for node in g.nodes:
            g.set_property(node, "Seen", len(g.nodes))

    registry = BuilderRegistry(node_builders=[NodeBuilder(str, lambda s: Node(id=s))])
    graph = assemble(registry, [Analysis(add_node), Analysis(count_nodes)], [["a"]])

    assert [n.id for n in graph.nodes] == ["a", "added"]
    assert {n.properties["Seen"] for n in graph.nodes} == {2}


def test_analysis_declarations_present_even_if_unused() -> None:
    declared = Analysis(
        lambda g: None,
        properties=[Property(id="Unused", data_type="System.Boolean")],
        styles=[Style(target_type="Node", group_label="Unused", conditions=[Condition("Unused='True'")])],
    )
    other = Analysis(lambda g: None, properties=[Property(id="Other")])

    graph = assemble(BuilderRegistry(), [declared, other], [[]])

    assert [p.id for p in graph.properties] == ["Unused", "Other"]
    assert [s.group_label for s in graph.styles] == ["Unused"]


def test_declarations_are_visible_before_any_mutation() -> None:
    observed: list[list[str]] = []

    def first(g: GraphEditor) -> None:
        observed.append([p.id for p in g.properties])

    graph = assemble(
        BuilderRegistry(),
        [Analysis(first, properties=[Property(id="P1")]), Analysis(lambda g: None, properties=[Property(id="P2")])],
        [[]],
    )
    assert observed == [["P1", "P2"]]
    assert len(graph.properties) == 2


def test_analysis_styles_follow_builder_styles_and_are_copied() -> None:
    declared = Style(target_type="Node", group_label="analysis", setters=[Setter("Background", "Red")])

    def recolor(g: GraphEditor) -> None:
        for style in g.styles:
            if style.group_label == "analysis":
                style.setters.append(Setter("Stroke", "Blue"))

    registry = BuilderRegistry(
        node_builders=[NodeBuilder(str, lambda s: Node(id=s))],
        style_builders=[StyleBuilder(Node, lambda n: Style(group_label="builder"))],
    )
    analysis = Analysis(recolor, styles=[declared])
    graph = assemble(registry, [analysis], [["a"]])

    assert [s.group_label for s in graph.styles] == ["builder", "analysis"]
    assert len(graph.styles[1].setters) == 2
    assert declared.setters == [Setter("Background", "Red")]


def test_style_rules_see_builder_properties_not_analysis_properties() -> None:
    def make_node(name: str) -> Node:
        node = Node(id=name)
        if name == "A":
            node.properties["flag"] = True
        return node

    def flag_style(node: Node) -> Style:
        return Style(group_label=node.id, conditions=[Condition("flag='true'")])

    def flag_b(g: GraphEditor) -> None:
        g.set_property(g.node("B"), "flag", True)

    registry = BuilderRegistry(
        node_builders=[NodeBuilder(str, make_node)],
        style_builders=[StyleBuilder(Node, flag_style, lambda n: n.properties.get("flag") is True)],
    )
    graph = assemble(registry, [Analysis(flag_b)], [["A", "B"]])

    assert [s.group_label for s in graph.styles] == ["A"]
    assert graph.styles[0].target_type == "Node"
    assert graph.node("B").properties["flag"] is True  # type: ignore[union-attr]


def test_rule_failure_aborts_assembly() -> None:
    def fail_on_b(s: str) -> Node:
        if s == "b":
            raise ValueError("bad input")
        return Node(id=s)

    registry = BuilderRegistry(node_builders=[NodeBuilder(str, fail_on_b)])
    with pytest.raises(RuleInvocationError) as excinfo:
        assemble(registry, [], [["a", "b", "c"]])
    assert excinfo.value.source == "b"
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_analysis_failure_aborts_assembly() -> None:
    ran: list[str] = []

    def broken(g: GraphEditor) -> None:
        raise RuntimeError("analysis exploded")

    analyses = [Analysis(broken, name="broken"), Analysis(lambda g: ran.append("later"))]
    with pytest.raises(AnalysisError, match="broken failed") as excinfo:
        assemble(BuilderRegistry(), analyses, [[]])
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert excinfo.value.analysis is analyses[0]
    assert ran == []


def test_rules_registered_during_assembly_do_not_apply() -> None:
    registry = BuilderRegistry()

    def build(s: str) -> Node:
        registry.add(NodeBuilder(str, lambda t: Node(id=t + "-late")))
        return Node(id=s)

    registry.add(NodeBuilder(str, build))
    graph = assemble(registry, [], [["a", "b"]])

    assert [n.id for n in graph.nodes] == ["a", "b"]


def test_non_analysis_is_rejected() -> None:
    with pytest.raises(TypeError):
        assemble(BuilderRegistry(), [lambda g: None], [[]])  # type: ignore[list-item]


def test_dgml_builder_reuses_rules_across_builds() -> None:
    builder = DgmlBuilder(
        node_builders=[NodeBuilder(int, lambda i: Node(id=str(i)))],
        title="Numbers",
    )
    g1 = builder.build([1, 2], [2, 3])
    g2 = builder.build([3])

    assert [n.id for n in g1.nodes] == ["1", "2", "3"]
    assert [n.id for n in g2.nodes] == ["3"]
    assert g1.title == "Numbers"
    assert g1.nodes[2] is not g2.nodes[0]


def test_analysis_rewriting_an_id_keeps_ids_unique() -> None:
    registry = BuilderRegistry(node_builders=[NodeBuilder(str, lambda s: Node(id=s))])

    def rename(g: GraphEditor) -> None:
        g.node("a").id = "b"  # type: ignore[union-attr]

    graph = assemble(registry, [Analysis(rename)], [["a", "b"]])
    assert [n.id for n in graph.nodes] == ["b"]


def test_renamed_node_is_found_by_later_analyses() -> None:
    registry = BuilderRegistry(node_builders=[NodeBuilder(str, lambda s: Node(id=s))])
    seen: list[bool] = []

    def rename(g: GraphEditor) -> None:
        g.node("a").id = "renamed"  # type: ignore[union-attr]
        assert g.node("a") is None
        assert not g.add_node(Node(id="renamed"))

    def lookup(g: GraphEditor) -> None:
        seen.append(g.node("renamed") is not None)

    graph = assemble(registry, [Analysis(rename), Analysis(lookup)], [["a", "b"]])
    assert seen == [True]
    assert [n.id for n in graph.nodes] == ["renamed", "b"]
