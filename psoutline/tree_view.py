"""Rich rendering of outline trees and the interactive browse loop."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.tree import Tree

from .models import Node, NodeKind, iter_visible_rows, set_expanded

KIND_STYLES = {
    NodeKind.FOLDER: "bold blue",
    NodeKind.FILE: "bold white",
    NodeKind.CLASS: "bold magenta",
    NodeKind.FUNCTION: "cyan",
    NodeKind.CONTAINER: "dim",
    NodeKind.PARAMETER: "green",
    NodeKind.VARIABLE: "yellow",
    NodeKind.OBJECT: "bold cyan",
    NodeKind.ARRAY_ITEM: "white",
    NodeKind.PROPERTY: "green",
    NodeKind.ERROR: "bold red",
}

KIND_ICONS = {
    NodeKind.FOLDER: "📁",
    NodeKind.FILE: "📄",
    NodeKind.CLASS: "🏛",
    NodeKind.FUNCTION: "ƒ",
    NodeKind.ERROR: "✗",
}


def node_label(node: Node) -> str:
    """Rich markup for one node: icon, styled name and JSON summary."""
    style = KIND_STYLES.get(node.kind, "white")
    icon = KIND_ICONS.get(node.kind)
    label = f"[{style}]{escape(node.name)}[/{style}]"
    if icon:
        label = f"{icon} {label}"
    if node.kind in (NodeKind.OBJECT, NodeKind.ARRAY_ITEM) and node.lines:
        sep = ": " if node.kind is NodeKind.ARRAY_ITEM and not node.children else "  "
        label += f"[dim]{sep}{escape(node.lines[0])}[/dim]"
    return label


def fit_depth(console: Console, label_width: int = 24) -> int:
    """Deepest tree level that still leaves *label_width* columns for labels."""
    # each guide level is four cells wide
    return max(1, (console.width - label_width) // 4)


def render_tree(
    nodes: Iterable[Node],
    title: str = "Outline",
    expand_all: bool = False,
    max_depth: Optional[int] = None,
) -> Tree:
    """Build a ``rich.tree.Tree``; collapsed nodes hide their children.

    Nodes below *max_depth* are folded the same way as collapsed ones.
    """
    tree = Tree(f"[bold]{escape(title)}[/bold]", guide_style="dim")
    stack: List[Tuple[Tree, Node, int]] = [(tree, node, 1) for node in reversed(list(nodes))]
    while stack:
        parent, node, depth = stack.pop()
        is_open = (
            bool(node.children)
            and (expand_all or node.expanded)
            and (max_depth is None or depth < max_depth)
        )
        label = node_label(node)
        if node.children and not is_open:
            label += f" [dim](+{len(node.children)})[/dim]"
        branch = parent.add(label)
        if is_open:
            stack.extend((branch, child, depth + 1) for child in reversed(node.children))
    return tree


def print_outline(
    root: Node,
    console: Optional[Console] = None,
    expand_all: bool = True,
) -> None:
    console = console or Console()
    console.print(render_tree(
        root.children,
        title=root.name,
        expand_all=expand_all,
        max_depth=fit_depth(console),
    ))


# ===================================================================
# Interactive browser
# ===================================================================

def _print_rows(console: Console, rows: List) -> None:
    for number, (depth, node) in enumerate(rows, 1):
        marker = " "
        if node.children:
            marker = "▾" if node.expanded else "▸"
        console.print(f"[dim]{number:>4}[/dim] {'  ' * depth}{marker} {node_label(node)}")


def browse(root: Node, console: Optional[Console] = None) -> None:
    """Interactive expand/collapse loop over an outline tree.

    Visible rows are recomputed from the tree on every iteration so they
    always follow the current ``expanded`` flags.
    """
    console = console or Console()
    root.expanded = True
    console.print(
        Panel.fit(
            f"[bold cyan]🗂  {escape(root.name)}[/bold cyan]\n"
            "[dim]number: toggle   a: expand all   c: collapse all   q: quit[/dim]",
            border_style="cyan",
        )
    )

    while True:
        rows = list(iter_visible_rows([root]))
        console.print()
        _print_rows(console, rows)

        selection = Prompt.ask("\nRow", default="q", console=console).strip().lower()

        if selection in ("q", "quit", "exit"):
            console.print("[cyan]Goodbye![/cyan]")
            break

        elif selection == "a":
            set_expanded([root], True)

        elif selection == "c":
            set_expanded(root.children, False)

        elif selection.isdigit() and 1 <= int(selection) <= len(rows):
            _, node = rows[int(selection) - 1]
            if node.children:
                node.expanded = not node.expanded
            else:
                console.print("[yellow]Nothing to expand on that row.[/yellow]")

        else:
            console.print(f"[red]Unknown choice: {escape(selection)}[/red]")
