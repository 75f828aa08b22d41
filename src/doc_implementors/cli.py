"""
Typer application for the ``doc-implementors`` command.

Usage:
    doc-implementors show target/doc/implementors/core/cmp/trait.PartialOrd.js
    doc-implementors scan target/doc
    doc-implementors implementors target/doc PartialOrd
    doc-implementors traits target/doc Revision --json
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from doc_implementors import __version__
from doc_implementors.config import Settings, get_settings
from doc_implementors.entry import ImplementorEntry
from doc_implementors.errors import DocImplementorsError
from doc_implementors.fragment import read_fragment
from doc_implementors.index import TraitIndex
from doc_implementors.logging import configure_logging

app = typer.Typer(
    name="doc-implementors",
    help="Inspect generated trait implementors fragments.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)


# ── Helpers ──────────────────────────────────────────────────────────────


def _fail(error: DocImplementorsError) -> None:
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error}")
    raise typer.Exit(code=1)


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else get_settings()


def _print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def _entries_table(entries: tuple[ImplementorEntry, ...], *, title: str = "") -> Table:
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    table.add_column("Trait", style="magenta")
    table.add_column("Type", style="green")
    table.add_column("Generics")
    table.add_column("Where", overflow="fold")
    for entry in entries:
        table.add_row(
            entry.trait_name or "-",
            entry.type_path or entry.type_name or "-",
            entry.generics or "",
            entry.where_clause or "",
        )
    return table


def _load_index(ctx: typer.Context, doc_root: Path | None) -> TraitIndex:
    settings = _settings(ctx)
    try:
        return TraitIndex.scan(doc_root or settings.doc_root, policy=settings.merge_policy, strict=True)
    except DocImplementorsError as e:
        _fail(e)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"doc-implementors {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML settings file."),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level override."),
    log_json: bool | None = typer.Option(None, "--log-json/--log-console", help="Log line format."),
) -> None:
    """doc-implementors CLI: read implementors fragments and query trait indexes."""
    try:
        settings = Settings.from_yaml(config) if config else get_settings()
        overrides = {k: v for k, v in {"log_level": log_level, "log_json": log_json}.items() if v is not None}
        if overrides:
            settings = Settings.from_dict({**settings.model_dump(), **overrides})
    except DocImplementorsError as e:
        _fail(e)
    configure_logging(level=settings.log_level, json_format=settings.log_json)
    ctx.obj = settings


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("show")
def show(
    fragment: Path = typer.Argument(..., help="Fragment file (trait.*.js)."),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Parse one fragment file and list its entries."""
    try:
        table = read_fragment(fragment)
    except DocImplementorsError as e:
        _fail(e)

    if as_json:
        _print_json(table.describe())
        return

    if not table:
        console.print("[dim]No implementors.[/dim]")
        return

    for namespace, entries in table.items():
        console.print(_entries_table(entries, title=namespace))
    console.print(f"\n[bold]{table.entry_count}[/bold] entries in {len(table)} namespace(s)")


@app.command("scan")
def scan(
    ctx: typer.Context,
    doc_root: Path | None = typer.Argument(None, help="Documentation root (defaults to settings)."),
    as_json: bool = typer.Option(False, "--json", help="Output the full index as JSON."),
) -> None:
    """Index every fragment under a documentation root."""
    index = _load_index(ctx, doc_root)

    if as_json:
        _print_json(index.to_dict())
        return

    table = Table(title="Traits")
    table.add_column("Trait", style="cyan")
    table.add_column("Namespaces")
    table.add_column("Entries", justify="right")
    for trait in index.traits():
        registry = index.registries[trait]
        table.add_row(trait, ", ".join(registry.namespaces()), str(registry.snapshot().entry_count))
    console.print(table)

    stats = index.stats()
    console.print(
        f"\n[bold]Traits:[/bold] {stats['traits']}  "
        f"[bold]Namespaces:[/bold] {stats['namespaces']}  "
        f"[bold]Entries:[/bold] {stats['entries']}"
    )
    if index.errors:
        err_console.print(f"[bold yellow]Skipped {len(index.errors)} fragment(s):[/bold yellow]")
        for error in index.errors:
            err_console.print(f"  ⚠️  {error['path']}: {error['message']}")


@app.command("implementors")
def implementors(
    ctx: typer.Context,
    doc_root: Path = typer.Argument(..., help="Documentation root."),
    trait: str = typer.Argument(..., help="Trait path or unambiguous short name."),
    namespace: str | None = typer.Option(None, "--namespace", "-n", help="Only this namespace."),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """List the types implementing a trait."""
    index = _load_index(ctx, doc_root)
    try:
        trait_path = index.resolve_trait(trait)
        registry = index.registries[trait_path]
    except DocImplementorsError as e:
        _fail(e)

    names = [namespace] if namespace else registry.namespaces()
    rows = [(ns, entry) for ns in names for entry in (registry.find(ns) or ())]

    if as_json:
        _print_json({"trait": trait_path, "implementors": [{"namespace": ns, **e.to_dict()} for ns, e in rows]})
        return

    if not rows:
        console.print("[dim]No implementors.[/dim]")
        return

    table = Table(title=trait_path)
    table.add_column("Namespace", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Kind")
    table.add_column("Generics")
    for ns, entry in rows:
        table.add_row(ns, entry.type_path or entry.type_name or "-", entry.type_kind or "-", entry.generics or "")
    console.print(table)


@app.command("traits")
def traits(
    ctx: typer.Context,
    doc_root: Path = typer.Argument(..., help="Documentation root."),
    type_name: str = typer.Argument(..., help="Type name or full path, e.g. Revision."),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """List the traits a type implements."""
    index = _load_index(ctx, doc_root)
    found = index.traits_for(type_name)

    if as_json:
        _print_json({"type": type_name, "traits": found})
        return

    if not found:
        console.print(f"[dim]No traits recorded for {type_name}.[/dim]")
        return
    for trait in found:
        console.print(f"  • {trait}")


@app.command("config")
def show_config(ctx: typer.Context) -> None:
    """Show effective settings as JSON."""
    _print_json(_settings(ctx).to_dict())


def run() -> None:
    """Entry point for the console script."""
    app()


if __name__ == "__main__":
    run()
