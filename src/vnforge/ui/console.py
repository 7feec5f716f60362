"""Rich-powered console output for vnforge."""

from __future__ import annotations

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from vnforge import __version__
from vnforge.context.models import ChunkType, ContextPackage
from vnforge.scheduler.models import NodeType, SkeletonNode
from vnforge.scheduler.skeleton import SkeletonReport

_TYPE_STYLES = {
    NodeType.LINEAR: "white",
    NodeType.DECISION: "yellow",
    NodeType.SPLIT: "magenta",
    NodeType.TERMINAL: "red",
}


class Console:
    """Terminal output for vnforge using Rich."""

    def __init__(self) -> None:
        self.console = RichConsole()

    def banner(self) -> None:
        self.console.print(
            Panel(
                f"[bold cyan]vnforge[/bold cyan] [dim]v{__version__}[/dim]\n"
                "[dim]Narrative context selection and story skeletons[/dim]",
                border_style="cyan",
                padding=(1, 2),
            )
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {escape(message)}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {escape(message)}")

    def show_graph_stats(self, stats: dict) -> None:
        """Display scene graph statistics in a table."""
        table = Table(title="Scene Graph Statistics", border_style="cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Count", justify="right", style="cyan")

        table.add_row("Scenes", str(stats.get("scenes", 0)))
        table.add_row("Checkpoints", str(stats.get("checkpoints", 0)))
        table.add_row("Total Edges", str(stats.get("total_edges", 0)))
        table.add_row("Missing Targets", str(stats.get("missing_targets", 0)))
        table.add_row("Skipped Items", str(stats.get("skipped_items", 0)))
        table.add_row("Has Cycles", "yes" if stats.get("has_cycles") else "no")

        edge_types = stats.get("edge_types", {})
        if edge_types:
            table.add_section()
            for kind, count in sorted(edge_types.items(), key=lambda x: -x[1]):
                table.add_row(f"  {kind} edges", str(count))

        self.console.print(table)

    def show_package(self, package: ContextPackage) -> None:
        """Display selected chunks with scores and per-type budget usage."""
        table = Table(
            title=f"Context for {package.target_scene_id}", border_style="cyan"
        )
        table.add_column("Chunk", style="bold")
        table.add_column("Type")
        table.add_column("Dist", justify="right")
        table.add_column("Tokens", justify="right", style="cyan")
        table.add_column("Score", justify="right")

        for chunk in package.chunks:
            table.add_row(
                chunk.id,
                chunk.type.value,
                str(chunk.graph_distance),
                str(chunk.tokens),
                f"{package.scores.get(chunk.id, 0.0):.3f}",
            )

        used = package.tokens_by_type()
        table.add_section()
        for chunk_type in ChunkType:
            budget = package.budgets.get(chunk_type.value)
            usage = f"{used.get(chunk_type.value, 0)}/{budget}" if budget else "excluded"
            table.add_row(f"  {chunk_type.value} budget", "", "", usage, "")

        self.console.print(table)
        self.console.print(
            f"[dim]{len(package.chunks)} of {package.chunks_available} candidates, "
            f"{package.assembly_time_ms:.1f}ms[/dim]"
        )

    def show_skeleton(self, nodes: list[SkeletonNode]) -> None:
        """Display a skeleton as a tree, sub-branches nested under their split."""
        tree = Tree("[bold cyan]Story skeleton[/bold cyan]")
        split_nodes: dict[int, Tree] = {}

        for node in nodes:
            style = _TYPE_STYLES[node.type]
            succ = ", ".join(node.successor_ids) or "end"
            text = f"[{style}]{escape(node.name)}[/{style}] [dim]{node.id} -> {succ}[/dim]"
            if node.branch_of is None:
                branch = tree.add(text)
                if node.type == NodeType.SPLIT:
                    split_nodes[int(node.id.rsplit("_", 1)[-1])] = branch
            else:
                split_nodes.get(node.branch_of, tree).add(text)

        self.console.print(tree)

    def show_report(self, report: SkeletonReport) -> None:
        counts = ", ".join(f"{k}={v}" for k, v in sorted(report.type_counts.items()))
        self.info(f"{report.node_count} nodes ({counts})")
        if report.is_valid:
            self.success("Skeleton is connected and every path terminates")
            return
        if report.unreachable:
            self.warning(f"Unreachable: {', '.join(report.unreachable)}")
        if report.dangling:
            self.warning(f"Dangling successors: {', '.join(report.dangling)}")
        if report.non_terminating:
            self.warning(f"Never terminates: {', '.join(report.non_terminating)}")

    def show_state(self, text: str) -> None:
        self.console.print(Panel(escape(text), title="[bold]Story State[/bold]", border_style="green"))
