"""
treeshell CLI
=============

Runs command tree documents (YAML or JSON) through a shell session.

Usage:
    treeshell run trees.yaml      # Execute every tree, stop at exit/quit
    treeshell show trees.yaml     # Display the trees
    treeshell version             # Show version information
"""

import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from treeshell import __version__
from treeshell.execution.application.session import ShellSession
from treeshell.execution.domain.status import SHELL_EXIT, SUCCESS
from treeshell.shared.domain.exceptions import TreeDocumentError
from treeshell.shared.infrastructure.logging import configure_logging
from treeshell.tree.application.loader import load_trees
from treeshell.tree.domain.models import CommandNode, SimpleCommand

app = typer.Typer(
    name="treeshell",
    help="Execute parsed shell command trees",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def _load_or_exit(document: Path) -> list[CommandNode]:
    try:
        return load_trees(document)
    except TreeDocumentError as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(e.message)}", highlight=False)
        for error in e.context.get("errors", []):
            location = ".".join(str(part) for part in error.get("loc", ()))
            err_console.print(f"  [dim]{location}[/dim] {escape(error.get('msg', ''))}", highlight=False)
        raise typer.Exit(2)


def _exit_code(status: int) -> int:
    if status == SHELL_EXIT:
        return SUCCESS
    return status & 0xFF


def _add_branch(parent: Tree, node: CommandNode) -> None:
    if isinstance(node, SimpleCommand):
        parent.add(f"[green]{escape(node.to_text())}[/green]")
        return
    branch = parent.add(f"[bold cyan]{node.operator.value}[/bold cyan] [dim]{type(node).__name__}[/dim]")
    _add_branch(branch, node.left)
    _add_branch(branch, node.right)


@app.command()
def run(
    document: Path = typer.Argument(..., help="YAML or JSON command tree document"),
):
    """Execute the trees of DOCUMENT in one shell session."""
    trees = _load_or_exit(document)
    status = ShellSession().run(trees)
    raise typer.Exit(_exit_code(status))


@app.command()
def show(
    document: Path = typer.Argument(..., help="YAML or JSON command tree document"),
):
    """Display the trees of DOCUMENT without running them."""
    trees = _load_or_exit(document)
    if not trees:
        console.print("[yellow]No command trees in document[/yellow]")
        return

    for index, node in enumerate(trees, start=1):
        root = Tree(f"[bold]#{index}[/bold] {escape(node.to_text())}", highlight=False)
        _add_branch(root, node)
        console.print(root)


@app.command()
def version():
    """Show treeshell version information."""
    table = Table(show_header=False, box=None)
    table.add_row("treeshell", f"[bold green]v{__version__}[/bold green]")
    table.add_row("Python", sys.version.split()[0])
    table.add_row("Platform", sys.platform)

    console.print(Panel(table, title="[bold blue]treeshell[/bold blue]", expand=False))


def main():
    """Main entry point."""
    configure_logging()
    app()


if __name__ == "__main__":
    main()
