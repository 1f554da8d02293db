import logging
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from depgraph._graph import DependencyGraph, NotADagError
from depgraph._io import GraphFileError, load_graph_from_toml

from .config import ConfigError, DepgraphConfig, get_config
from .graph_query import (
    get_dependency_tree,
    get_distance,
    get_graph_summary,
    get_node_detail,
    get_order,
    list_related,
)
from .graph_render import format_cycle, render_name_list, render_node_detail, render_summary, render_tree

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

GraphOption = Annotated[
    Path | None,
    typer.Option("-g", "--graph", help="Path to graph TOML file (defaults to 'graph' under tool.depgraph in pyproject.toml)"),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Dependency graph CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]Error: {escape(message)}[/red]")
    raise typer.Exit(code=1)


def _get_config() -> DepgraphConfig:
    try:
        return get_config()
    except ConfigError as e:
        _fail(str(e))


def _load_graph(graph_path: Path | None) -> tuple[DependencyGraph[str], Path]:
    """Load the graph from the given path or from the configured one.

    Args:
        graph_path: Path given on the command line, if any.

    Returns:
        The loaded graph and the path it was loaded from.

    """
    if graph_path is None:
        graph_path = _get_config().graph
        if graph_path is None:
            _fail("No graph file given. Pass --graph or set 'graph' under [tool.depgraph] in pyproject.toml")

    if not graph_path.exists():
        _fail(f"Graph file not found: {graph_path}")

    logger.debug(f"Loading graph from {graph_path}")
    try:
        graph = load_graph_from_toml(graph_path)
    except GraphFileError as e:
        _fail(str(e))
    return graph, graph_path


@app.command()
def check(
    *,
    graph_path: GraphOption = None,
) -> None:
    """Summarize the graph and check it for dependency cycles."""
    graph, path = _load_graph(graph_path)

    err_console.print()
    summary = get_graph_summary(graph)
    render_summary(summary, path.name, err_console)
    err_console.print()

    if summary.cycle is not None:
        err_console.print(f"[red]✗ Dependency cycle: {format_cycle(summary.cycle)}[/red]")
        err_console.print()
        raise typer.Exit(code=1)

    err_console.print("[green]✓ Graph is acyclic[/green]")
    err_console.print()


@app.command()
def sort(
    *,
    graph_path: GraphOption = None,
    region: Annotated[
        str | None,
        typer.Option("-r", "--region", help="Only sort the members of this region"),
    ] = None,
) -> None:
    """Print nodes so that every dependency comes before its dependents."""
    graph, _ = _load_graph(graph_path)
    if region is None:
        region = _get_config().region

    try:
        order = get_order(graph, region)
    except KeyError as e:
        _fail(e.args[0])
    except NotADagError as e:
        err_console.print(f"[red]✗ Cannot sort: dependency cycle {format_cycle([str(n.data) for n in e.cycle])}[/red]")
        raise typer.Exit(code=1) from e

    render_name_list(order, out_console)


def _related(name: str, graph_path: Path | None, *, dependents: bool, transitive: bool, unique: bool) -> None:
    graph, _ = _load_graph(graph_path)
    try:
        names = list_related(graph, name, dependents=dependents, transitive=transitive, unique=unique)
    except KeyError as e:
        _fail(e.args[0])
    except NotADagError as e:
        _fail(str(e))
    render_name_list(names, out_console)


@app.command()
def deps(
    name: Annotated[str, typer.Argument(help="Node name")],
    *,
    graph_path: GraphOption = None,
    transitive: Annotated[
        bool,
        typer.Option("-a", "--all", help="Include dependencies of dependencies"),
    ] = False,
    unique: Annotated[
        bool,
        typer.Option("--unique/--no-unique", help="List each node once"),
    ] = True,
) -> None:
    """List what a node depends on."""
    _related(name, graph_path, dependents=False, transitive=transitive, unique=unique)


@app.command()
def dependents(
    name: Annotated[str, typer.Argument(help="Node name")],
    *,
    graph_path: GraphOption = None,
    transitive: Annotated[
        bool,
        typer.Option("-a", "--all", help="Include dependents of dependents"),
    ] = False,
    unique: Annotated[
        bool,
        typer.Option("--unique/--no-unique", help="List each node once"),
    ] = True,
) -> None:
    """List what depends on a node."""
    _related(name, graph_path, dependents=True, transitive=transitive, unique=unique)


@app.command()
def show(
    name: Annotated[str, typer.Argument(help="Node name")],
    *,
    graph_path: GraphOption = None,
) -> None:
    """Show details of a node."""
    graph, _ = _load_graph(graph_path)
    try:
        detail = get_node_detail(graph, name)
    except KeyError as e:
        _fail(e.args[0])
    render_node_detail(detail, out_console)


@app.command()
def tree(
    name: Annotated[str, typer.Argument(help="Root node name")],
    *,
    graph_path: GraphOption = None,
    invert: Annotated[
        bool,
        typer.Option("--invert", help="Show dependents instead of dependencies"),
    ] = False,
    same_region: Annotated[
        bool,
        typer.Option("--same-region", help="Only follow dependencies inside the node's region"),
    ] = False,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", help="Maximum depth to show"),
    ] = None,
) -> None:
    """Show the dependency tree of a node."""
    graph, _ = _load_graph(graph_path)
    try:
        root = get_dependency_tree(graph, name, invert=invert, same_region=same_region, max_depth=max_depth)
    except KeyError as e:
        _fail(e.args[0])
    render_tree(root, out_console)


@app.command()
def distance(
    source: Annotated[str, typer.Argument(help="Dependent node name")],
    target: Annotated[str, typer.Argument(help="Dependency node name")],
    *,
    graph_path: GraphOption = None,
) -> None:
    """Print the fewest dependency hops from one node to another."""
    graph, _ = _load_graph(graph_path)
    try:
        hops = get_distance(graph, source, target)
    except KeyError as e:
        _fail(e.args[0])

    if hops < 0:
        err_console.print(f"[yellow]{escape(target)} is not reachable from {escape(source)}[/yellow]")
        raise typer.Exit(code=1)
    out_console.print(hops)


def main() -> None:
    app()
