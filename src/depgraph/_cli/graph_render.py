"""Rich rendering utilities for graph query commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

if TYPE_CHECKING:
    from rich.console import Console

    from .graph_query import GraphSummary, NodeDetail, TreeNode


def format_cycle(cycle: list[str]) -> str:
    """Format a cycle as ``a -> b -> a``, escaped for Rich markup."""
    return " -> ".join(escape(name) for name in [*cycle, cycle[0]])


def render_summary(summary: GraphSummary, title: str, console: Console) -> None:
    """Render a graph summary as a Rich panel.

    Args:
        summary: GraphSummary to render.
        title: Panel title, typically the graph file name.
        console: Rich Console to output to.

    """
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Region", style="bold")
    table.add_column("Members", justify="right", style="yellow")
    table.add_column("Order", justify="right")

    for region in summary.regions:
        order = "[red]cyclic[/red]" if region.sorted_count is None else f"[green]{region.sorted_count}[/green]"
        table.add_row(escape(region.name), str(region.member_count), order)

    console.print(
        Panel(
            table,
            title=f"[bold]Graph: {escape(title)}[/bold]",
            subtitle=f"[dim]{summary.node_count} nodes, {summary.edge_count} edges[/dim]",
            border_style="cyan",
        ),
    )


def render_name_list(names: list[str], console: Console) -> None:
    """Render node names one per line.

    Args:
        names: Node names to render.
        console: Rich Console to output to.

    """
    if not names:
        console.print("[dim]None[/dim]")
        return
    for name in names:
        console.print(escape(name))


def render_node_detail(detail: NodeDetail, console: Console) -> None:
    """Render detailed node information.

    Args:
        detail: NodeDetail to render.
        console: Rich Console to output to.

    """
    console.print(f"[bold]Node:[/bold] {escape(detail.name)}")
    console.print()
    console.print(f"[cyan]Id:[/cyan]      {detail.id}")
    region = escape(detail.region) if detail.region is not None else "[dim]None[/dim]"
    console.print(f"[cyan]Region:[/cyan]  {region}")
    console.print()

    for label, names, transitive in (
        ("Dependencies", detail.direct_dependencies, detail.transitive_dependency_count),
        ("Dependents", detail.direct_dependents, detail.transitive_dependent_count),
    ):
        if names:
            console.print(f"[cyan]{label} ({len(names)} direct, {transitive} total):[/cyan]")
            for name in names:
                console.print(f"  {escape(name)}")
        else:
            console.print(f"[cyan]{label}:[/cyan] [dim]None[/dim]")
        console.print()

    if detail.metadata:
        console.print("[cyan]Metadata:[/cyan]")
        for key, value in detail.metadata.items():
            console.print(f"  {escape(str(key))}: {escape(repr(value))}")


def render_tree(tree_node: TreeNode, console: Console) -> None:
    """Render a dependency tree using Rich Tree.

    Args:
        tree_node: TreeNode root to render.
        console: Rich Console to output to.

    """
    rich_tree = Tree(f"[bold]{escape(tree_node.name)}[/bold]")
    _add_tree_children(rich_tree, tree_node.children)
    console.print(rich_tree)


def _add_tree_children(parent: Tree, children: list[TreeNode]) -> None:
    for child in children:
        child_tree = parent.add(escape(child.name))
        _add_tree_children(child_tree, child.children)
