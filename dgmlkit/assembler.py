"""
Graph assembler - the entry point.

Orchestrates: flatten inputs → dispatch node/link/category rules per object
→ style rules over assembled nodes and links → merge analysis declarations
→ run analyses in order → freeze.

Key invariants:
- Input order and registration order jointly determine the result
- Every call starts from a fresh graph; nothing is shared between calls
- Any failure aborts the call; no partial graph is returned
"""

from __future__ import annotations

import logging
from dataclasses import replace
from itertools import chain
from typing import Any, Iterable, Sequence

from .analyses.base import GraphAnalysis, GraphEditor
from .builders import CategoryBuilder, LinkBuilder, NodeBuilder, StyleBuilder
from .dispatch import GraphState, apply_style_rules, dispatch
from .errors import AnalysisError, AssemblyError
from .model import Graph, Style
from .registry import BuilderRegistry, RuleSet

logger = logging.getLogger(__name__)


def _copy_style(style: Style) -> Style:
    # Declared styles belong to the analysis and are reused across calls.
    return replace(style, conditions=list(style.conditions), setters=list(style.setters))


def assemble(
    registry: BuilderRegistry | RuleSet,
    analyses: Sequence[GraphAnalysis],
    inputs: Iterable[Iterable[Any]],
    *,
    title: str | None = None,
) -> Graph:
    """Build one graph from one or more collections of arbitrary objects.

    Args:
        registry: Builder rules (a registry or a snapshot of one)
        analyses: Analyses to run on the assembled graph, in order
        inputs: Ordered collections of domain objects; may be heterogeneous
        title: Optional graph title

    Raises:
        RuleInvocationError: A builder or style rule failed
        AnalysisError: An analysis failed
    """
    rules = registry.snapshot() if isinstance(registry, BuilderRegistry) else registry
    analyses = tuple(analyses)
    for analysis in analyses:
        if not isinstance(analysis, GraphAnalysis):
            raise TypeError(f"not a graph analysis: {analysis!r}")

    state = GraphState()

    seen = 0
    for obj in chain.from_iterable(inputs):
        seen += 1
        state.merge(dispatch(obj, rules.node_builders))
        state.merge(dispatch(obj, rules.link_builders))
        state.merge(dispatch(obj, rules.category_builders))

    styled = apply_style_rules(state, rules.style_builders)
    logger.debug(
        "dispatched %d objects: %d nodes, %d links, %d categories, %d styles",
        seen,
        len(state.nodes),
        len(state.links),
        len(state.categories),
        styled,
    )

    _run_analyses(state, analyses)
    return state.freeze(title)


def _run_analyses(state: GraphState, analyses: Sequence[GraphAnalysis]) -> None:
    # Declare before use: every schema entry is present before any mutation.
    for analysis in analyses:
        try:
            for prop in analysis.properties():
                state.add_property(prop)
        except Exception as exc:
            raise AnalysisError(analysis, f"{analysis.name}: property declarations failed: {exc}") from exc
    for analysis in analyses:
        try:
            for style in analysis.styles():
                state.add_style(_copy_style(style))
        except Exception as exc:
            raise AnalysisError(analysis, f"{analysis.name}: style declarations failed: {exc}") from exc

    editor = GraphEditor(state)
    for analysis in analyses:
        logger.debug("running analysis %s", analysis.name)
        try:
            analysis.execute(editor)
        except AssemblyError:
            raise
        except Exception as exc:
            raise AnalysisError(analysis, f"{analysis.name} failed: {exc}") from exc
        state.reindex()


class DgmlBuilder:
    """Convenience wrapper holding rules and analyses for repeated builds.

    Example::

        builder = DgmlBuilder(HubNodeAnalysis(), node_builders=[NodeBuilder(str, lambda s: Node(id=s))])
        graph = builder.build(["a", "b"])
    """

    def __init__(
        self,
        *analyses: GraphAnalysis,
        node_builders: Iterable[NodeBuilder] = (),
        link_builders: Iterable[LinkBuilder] = (),
        category_builders: Iterable[CategoryBuilder] = (),
        style_builders: Iterable[StyleBuilder] = (),
        title: str | None = None,
    ) -> None:
        self.analyses = list(analyses)
        self.registry = BuilderRegistry(
            node_builders=node_builders,
            link_builders=link_builders,
            category_builders=category_builders,
            style_builders=style_builders,
        )
        self.title = title

    def build(self, *collections: Iterable[Any]) -> Graph:
        return assemble(self.registry, self.analyses, collections, title=self.title)
