"""CLI entrypoint for dgmlkit."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import DgmlConfig, find_config, load_config
from .errors import DgmlError


@click.group()
@click.version_option(__version__, prog_name="dgmlkit")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Path to dgmlkit.toml (defaults to the nearest one above the working directory)",
)
@click.option("--verbose", is_flag=True, help="Log rule dispatch and analysis runs")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """dgmlkit - Build DGML graph documents from Python objects."""
    ctx.ensure_object(dict)
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if config_path is None:
        config_path = find_config(Path.cwd())
    try:
        config = load_config(config_path) if config_path is not None else DgmlConfig()
    except DgmlError as exc:
        raise click.ClickException(str(exc)) from exc

    ctx.obj["config"] = config


@cli.command()
@click.argument("modules", nargs=-1, required=True)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.option(
    "--analysis",
    "analysis_names",
    multiple=True,
    metavar="NAME",
    help="Analysis to run (repeatable; overrides the configured list)",
)
@click.option("--no-analyses", is_flag=True, help="Skip all analyses")
@click.option("--title", type=str, default=None, help="Graph title")
@click.option(
    "--strict/--permissive",
    "strict",
    default=None,
    help="Reject custom properties without a schema entry (default from config)",
)
@click.pass_context
def types(
    ctx: click.Context,
    modules: tuple[str, ...],
    out: Path | None,
    analysis_names: tuple[str, ...],
    no_analyses: bool,
    title: str | None,
    strict: bool | None,
) -> None:
    """Draw the classes defined in MODULES as a DGML class diagram."""
    from .commands.types_cmd import run_types

    analyses: tuple[str, ...] | None = analysis_names or None
    if no_analyses:
        analyses = ()

    try:
        exit_code = run_types(
            list(modules),
            config=ctx.obj["config"],
            analyses=analyses,
            out=out,
            title=title,
            strict=strict,
        )
    except ModuleNotFoundError as exc:
        raise click.ClickException(f"cannot import module: {exc.name}") from exc
    except DgmlError as exc:
        raise click.ClickException(str(exc)) from exc
    sys.exit(exit_code)


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
