"""
Fixtura CLI - Command-line interface for fixture sets.

Resolves declaration files to show load order, and loads or unloads the
declared fixtures against the configured storage backend.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from fixtura.config import ConfigLoader, DeclarationFile, FixturaConfig
from fixtura.exceptions import FixturaError
from fixtura.fixtures.active import DataFixture
from fixtura.fixtures.base import canonical_identifier
from fixtura.fixtures.orchestrator import FixtureOrchestrator
from fixtura.fixtures.resolver import ResolvedFixtureSet
from fixtura.logging_config import setup_logging

app = typer.Typer(
    name="fixtura",
    help="Dependency-ordered test fixtures - resolve, load and unload fixture sets",
    add_completion=False,
)

console = Console()

# Errors reported as "Error: ..." with exit code 1 instead of a traceback.
USER_ERRORS = (FixturaError, FileNotFoundError, ImportError, AttributeError, ValidationError)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        from fixtura import __version__

        console.print(f"[bold blue]Fixtura[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Fixtura - Dependency-ordered test fixtures."""
    pass


@app.command()
def resolve(
    declarations: str = typer.Argument(..., help="Path to a fixture declaration YAML file"),
    config: str = typer.Option(None, "--config", "-c", help="Path to fixtura config YAML"),
    format_: str = typer.Option("console", "--format", "-f", help="Output format: console, json"),
    app_dir: str = typer.Option(".", "--app-dir", help="Directory added to the import path"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Verbose output"),
) -> None:
    """
    Resolve a declaration file and show the load order.

    Every declared fixture and its transitive dependencies are listed
    with dependencies first.
    """
    try:
        with _open_orchestrator(declarations, config, app_dir, verbose) as orchestrator:
            fixtures = orchestrator.resolve()
    except USER_ERRORS as e:
        _fail(e)

    if format_ == "json":
        typer.echo(json.dumps(fixtures.to_dict(), indent=2))
        return

    console.print(
        Panel(
            f"[bold]Resolved:[/bold] {declarations}",
            title="Fixtura Resolver",
            border_style="blue",
        )
    )
    _display_fixture_set(fixtures)


@app.command()
def load(
    declarations: str = typer.Argument(..., help="Path to a fixture declaration YAML file"),
    config: str = typer.Option(None, "--config", "-c", help="Path to fixtura config YAML"),
    app_dir: str = typer.Option(".", "--app-dir", help="Directory added to the import path"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Verbose output"),
) -> None:
    """
    Load the declared fixtures into the configured storage.

    Fixtures are loaded in dependency order; the first failure aborts the
    batch.
    """
    try:
        with _open_orchestrator(declarations, config, app_dir, verbose) as orchestrator:
            fixtures = orchestrator.resolve()
            orchestrator.load_all()
    except USER_ERRORS as e:
        _fail(e)

    _display_fixture_set(fixtures, show_rows=True)
    console.print(f"\n[green]✓[/green] Loaded {len(fixtures)} fixture(s)")


@app.command()
def unload(
    declarations: str = typer.Argument(..., help="Path to a fixture declaration YAML file"),
    config: str = typer.Option(None, "--config", "-c", help="Path to fixtura config YAML"),
    app_dir: str = typer.Option(".", "--app-dir", help="Directory added to the import path"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Verbose output"),
) -> None:
    """
    Unload the declared fixtures in reverse dependency order.
    """
    try:
        with _open_orchestrator(declarations, config, app_dir, verbose) as orchestrator:
            fixtures = orchestrator.resolve()
            orchestrator.unload_all()
    except USER_ERRORS as e:
        _fail(e)

    console.print(f"[green]✓[/green] Unloaded {len(fixtures)} fixture(s)")


@app.command("sample-config")
def sample_config(
    output: str = typer.Option(None, "--output", "-o", help="Write the sample to this file"),
) -> None:
    """
    Print a sample fixtura configuration.
    """
    sample = ConfigLoader.generate_sample_config()
    if output:
        Path(output).write_text(sample)
        console.print(f"[green]✓[/green] Sample configuration written to {output}")
    else:
        typer.echo(sample)


# =============================================================================
# Helpers
# =============================================================================


@contextmanager
def _open_orchestrator(
    declarations: str, config: str | None, app_dir: str, verbose: bool
) -> Iterator[FixtureOrchestrator]:
    """Load configuration and declarations and wire up an orchestrator.

    The configured storage is closed when the block exits.
    """
    settings = ConfigLoader.from_yaml(config) if config else FixturaConfig()
    setup_logging("DEBUG" if verbose else settings.log_level)

    import_root = str(Path(app_dir).resolve())
    if import_root not in sys.path:
        sys.path.insert(0, import_root)

    declaration_file = DeclarationFile.from_yaml(declarations)
    storage = settings.build_storage()
    try:
        yield FixtureOrchestrator(
            factory=settings.build_factory(storage=storage),
            declarations=declaration_file.declarations(),
        )
    finally:
        storage.close()


def _fail(error: Exception) -> NoReturn:
    """Report a user-facing error and exit."""
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    raise typer.Exit(1)


def _display_fixture_set(fixtures: ResolvedFixtureSet, show_rows: bool = False) -> None:
    """Display a resolved fixture set as a table in load order."""
    if not fixtures:
        console.print("[yellow]No fixtures declared[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Alias", style="cyan")
    table.add_column("Identifier")
    table.add_column("Depends on")
    if show_rows:
        table.add_column("Rows", justify="right")

    for position, (alias, fixture) in enumerate(fixtures.items(), start=1):
        depends = ", ".join(canonical_identifier(dep) for dep in fixture.depends) or "-"
        row = [str(position), alias, fixture.identifier, depends]
        if show_rows:
            row.append(str(len(fixture)) if isinstance(fixture, DataFixture) else "-")
        table.add_row(*row)

    console.print(table)
