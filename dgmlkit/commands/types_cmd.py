"""Types command - class diagrams for Python modules."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..config import DgmlConfig
from ..model import Graph
from ..visualizers.types import collect_types, types_to_graph
from ..writer import to_dgml


def run_types(
    modules: list[str],
    *,
    config: DgmlConfig,
    analyses: tuple[str, ...] | None = None,
    out: Path | None = None,
    title: str | None = None,
    strict: bool | None = None,
) -> int:
    """Visualize the classes defined in `modules` as a DGML document.

    Args:
        modules: Importable module names
        config: Loaded configuration (defaults apply when no file exists)
        analyses: Analysis names overriding the configured list
        out: Optional output path; prints to stdout if None
        title: Graph title overriding the configured one
        strict: Override the configured property-schema strictness
    """
    console = Console(stderr=True)

    types = collect_types(modules)
    if not types:
        console.print(f"No classes found in {', '.join(modules)}", style="yellow")

    graph = types_to_graph(
        types,
        analyses=config.build_analyses(analyses),
        title=title or config.title,
    )
    text = to_dgml(graph, strict=config.strict if strict is None else strict)

    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote DGML to {out}", style="green")
    else:
        print(text, end="")

    _print_summary(graph, console=console)
    return 0


def _print_summary(graph: Graph, *, console: Console) -> None:
    t = Table(title=graph.title or "Graph summary", show_header=True, header_style="bold")
    t.add_column("Element")
    t.add_column("Count", justify="right")
    t.add_row("Nodes", str(len(graph.nodes)))
    t.add_row("Links", str(len(graph.links)))
    t.add_row("Categories", str(len(graph.categories)))
    t.add_row("Styles", str(len(graph.styles)))
    t.add_row("Properties", str(len(graph.properties)))
    console.print(t)

    dangling = graph.dangling_links()
    if dangling:
        console.print(f"{len(dangling)} link(s) reference missing nodes:", style="yellow")
        for link in dangling:
            console.print(f"  {link.source} -> {link.target}")
