"""Read-only commands: ls, cat, stat, tree."""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from remfs.cli.utils import console, format_record, run_with_client
from remfs.kernel.utils.paths import ROOT, is_under, normalize_path


def list_children(
    ctx: typer.Context,
    path: str = typer.Argument(ROOT, help="Directory to list"),
) -> None:
    """List the direct children of a directory."""
    names = run_with_client(ctx, lambda client: client.alist_children(path))
    for name in sorted(names):
        typer.echo(name)


def cat(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File to print"),
) -> None:
    """Print the content of a file."""
    content = run_with_client(ctx, lambda client: client.aread_content(path))
    typer.echo(content)


def stat(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Path, or record id with --id"),
    by_id: bool = typer.Option(False, "--id", help="Treat TARGET as a record id"),
    json_out: bool = typer.Option(False, "--json", help="Output machine-readable JSON"),
) -> None:
    """Show the fields of a record."""
    if by_id:
        record = run_with_client(ctx, lambda client: client.astat_by_id(target))
    else:
        record = run_with_client(ctx, lambda client: client.aread(target))
    fields = format_record(record)

    if json_out:
        typer.echo(json.dumps(fields, indent=2))
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in fields.items():
        table.add_row(key, escape(str(value)))
    console.print(table)


def _nest(keys: list[str], prefix: str) -> dict[str, Any]:
    nested: dict[str, Any] = {}
    for key in keys:
        if not is_under(key, prefix):
            continue
        node = nested
        for segment in key[len(prefix) :].strip("/").split("/"):
            node = node.setdefault(segment, {})
    return nested


def _fill(branch: Tree, nested: dict[str, Any]) -> None:
    for name in sorted(nested):
        _fill(branch.add(escape(name)), nested[name])


def tree(
    ctx: typer.Context,
    path: str = typer.Argument(ROOT, help="Directory to show"),
) -> None:
    """Show the index below a directory as a tree."""
    keys = run_with_client(ctx, lambda client: client.alist_paths())
    prefix = normalize_path(path)
    root = Tree(f"[bold blue]{escape(prefix)}[/bold blue]")
    _fill(root, _nest(keys, prefix))
    console.print(root)
