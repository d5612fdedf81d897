"""Typer-based CLI for psoutline structural outlines."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import __version__, config_manager
from .config_manager import ConfigError
from .models import NodeKind, ParseOptions
from .parser import JsonStructureExtractor
from .scanner import count_kinds, outline_file, scan_path
from .tree_view import browse, fit_depth, print_outline, render_tree

console = Console()

app = typer.Typer(
    help="🗂  psoutline: structural outline of PowerShell scripts and JSON files.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ── Configuration group ──────────────────────────────────────
config_app = typer.Typer(
    help="⚙️  Configuration: parsing toggles and scan settings.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
app.add_typer(config_app, name="config")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"psoutline v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Log scanning details."),
):
    """psoutline: browse classes, functions, parameters and variables of scripts."""
    _configure_logging(verbose)


def _resolve_options(
    params: Optional[bool],
    variables: Optional[bool],
) -> ParseOptions:
    options = config_manager.load_parse_options()
    overrides = {}
    if params is not None:
        overrides["show_parameters"] = params
    if variables is not None:
        overrides["show_variables"] = variables
    return dataclasses.replace(options, **overrides) if overrides else options


def _build_outline(path: Path, params: Optional[bool], variables: Optional[bool]):
    cfg = config_manager.load_config()
    options = _resolve_options(params, variables)
    return scan_path(
        path,
        options,
        extensions=cfg["scan"]["extensions"],
        skip_dirs=cfg["scan"]["skip_dirs"],
    )


@app.command("show")
def show(
    path: Path = typer.Argument(..., exists=True, help="Script, JSON file or directory."),
    expand_all: bool = typer.Option(True, "--expand-all/--collapsed", help="Expand every node."),
    params: Optional[bool] = typer.Option(None, "--params/--no-params", help="Override show_parameters."),
    variables: Optional[bool] = typer.Option(None, "--vars/--no-vars", help="Override show_variables."),
):
    """🌳 Print the outline of a file or directory."""
    root = _build_outline(path, params, variables)
    if not root.children:
        console.print(f"[yellow]No outline found under {path}[/yellow]")
        return
    print_outline(root, console=console, expand_all=expand_all)

    counts = count_kinds(root)
    console.print(
        f"[dim]Files: {counts.get(NodeKind.FILE, 0)}  "
        f"Classes: {counts.get(NodeKind.CLASS, 0)}  "
        f"Functions: {counts.get(NodeKind.FUNCTION, 0)}[/dim]"
    )


@app.command("browse")
def browse_cmd(
    path: Path = typer.Argument(..., exists=True, help="Script, JSON file or directory."),
    params: Optional[bool] = typer.Option(None, "--params/--no-params", help="Override show_parameters."),
    variables: Optional[bool] = typer.Option(None, "--vars/--no-vars", help="Override show_variables."),
):
    """🧭 Interactively expand and collapse an outline."""
    root = _build_outline(path, params, variables)
    browse(root, console=console)


@app.command("json")
def json_outline(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON document to outline."),
):
    """🧾 Outline a JSON document regardless of its extension."""
    # parsing toggles only shape script outlines
    nodes = JsonStructureExtractor().parse_file(file, ParseOptions())
    console.print(render_tree(
        nodes,
        title=file.name,
        expand_all=True,
        max_depth=fit_depth(console),
    ))
    if nodes and nodes[0].kind is NodeKind.ERROR:
        raise typer.Exit(1)


@app.command("file")
def file_outline(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to outline."),
):
    """📄 Outline a single file and report what was found."""
    options = config_manager.load_parse_options()
    node = outline_file(file, options)
    if not node.children:
        console.print(f"[yellow]No structure recognised in {file.name}[/yellow]")
        return
    print_outline(node, console=console)


# ===================================================================
# Configuration commands
# ===================================================================

@config_app.command("show")
def config_show():
    """Show the effective configuration (defaults merged with the config file)."""
    cfg = config_manager.load_config()
    exists = config_manager.CONFIG_FILE.exists()
    for section, values in cfg.items():
        console.print(f"[bold]\\[{section}][/bold]")
        for key, value in values.items():
            if isinstance(value, list):
                value = " ".join(value)
            console.print(f"  {key:<28} [cyan]{value}[/cyan]")
    note = "" if exists else " (not created, using defaults)"
    console.print(f"[dim]Config file: {config_manager.CONFIG_FILE}{note}[/dim]", soft_wrap=True)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Setting name, e.g. show_variables or scan.extensions."),
    value: str = typer.Argument(..., help="New value (true/false or a space separated list)."),
):
    """Change one setting in the config file."""
    try:
        dotted, stored = config_manager.set_value(key, value)
    except ConfigError as exc:
        console.print(f"[red]✗[/red] {exc}")
        raise typer.Exit(1)
    if isinstance(stored, list):
        stored = " ".join(stored)
    console.print(f"[green]✓[/green] {dotted} = {stored}")


@config_app.command("reset")
def config_reset():
    """Restore default settings."""
    if config_manager.reset_config():
        console.print("[green]✓[/green] Configuration reset to defaults")
    else:
        console.print("[red]✗[/red] Could not write config file")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
