"""Mutation Guard CLI - require invalidateQueries in useMutation onSuccess callbacks."""

import json
import time
from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TaskProgressColumn,
    TimeElapsedColumn,
)
from rich.markup import escape

from src.config import __version__, get_config, OUTPUT_FORMATS
from src.utils.logger import safe_print
from src.utils.safe_console import SafeConsole
from src.analyzer.cache import LintCache
from src.analyzer.linter import (
    RULE_META,
    MESSAGE_ID,
    MutationInvalidationLinter,
    discover_sources,
)

app = typer.Typer(
    name="mutation-guard",
    help="Require invalidateQueries in useMutation onSuccess callbacks",
    add_completion=False
)
console = SafeConsole()
err_console = SafeConsole(stderr=True)

# Cache management sub-command
cache_app = typer.Typer(name="cache", help="Manage the lint result cache")

EXIT_FINDINGS = 1
EXIT_USAGE = 2


def _fail(message: str, code: int = EXIT_USAGE):
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(code)


def _cache_root(paths: List[Path]) -> Path:
    """Cache lives in the first directory argument (or the first file's folder)."""
    first = paths[0]
    return first if first.is_dir() else first.parent


def _display_path(file_path: str) -> str:
    try:
        return str(Path(file_path).resolve().relative_to(Path.cwd()))
    except ValueError:
        return file_path


def _print_table(diagnostics, file_count: int, elapsed: float, quiet: bool):
    if diagnostics:
        table = Table(title="Missing Query Invalidation")
        table.add_column("File", style="cyan", no_wrap=False)
        table.add_column("Line", justify="right", style="green", no_wrap=True)
        table.add_column("Col", justify="right", style="green", no_wrap=True)
        table.add_column("Reason", style="magenta", no_wrap=True)

        for diagnostic in diagnostics:
            table.add_row(
                escape(_display_path(diagnostic.file_path)),
                str(diagnostic.line),
                str(diagnostic.column),
                diagnostic.reason,
            )

        console.print(table)
        console.print(f"\n[bold yellow]{escape(RULE_META['messages'][MESSAGE_ID])}[/bold yellow]")

    if quiet:
        return

    if diagnostics:
        affected = len({d.file_path for d in diagnostics})
        console.print(f"\n[bold red]✗ {len(diagnostics)} problem(s)[/bold red] in {affected} file(s) "
                      f"[dim]({file_count} checked in {elapsed:.2f}s)[/dim]")
    else:
        console.print(f"[bold green]✓ No problems found[/bold green] "
                      f"[dim]({file_count} file(s) checked in {elapsed:.2f}s)[/dim]")


@app.command()
def lint(
    paths: Optional[List[str]] = typer.Argument(None, help="Files or directories to lint (default: .)"),
    output_format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: table or json"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Ignore and do not update the lint cache"),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", "-e", help="Directory name to skip (repeatable)"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print problems"),
):
    """Check useMutation calls for an onSuccess callback that invalidates queries."""
    config = get_config()

    try:
        output_format = (output_format or config.output_format).lower()
    except ValueError as e:
        _fail(str(e))

    if output_format not in OUTPUT_FORMATS:
        _fail(f"Invalid format '{output_format}'. Use one of: {', '.join(OUTPUT_FORMATS)}.")

    targets = [Path(p).resolve() for p in (paths or ["."])]
    for target in targets:
        if not target.exists():
            _fail(f"Path does not exist: {target}")

    files = discover_sources(targets, list(config.exclude_dirs) + list(exclude or []))

    cache = None
    if config.cache_enabled and not no_cache:
        cache = LintCache(_cache_root(targets), config.cache_dir)

    linter = MutationInvalidationLinter()
    diagnostics = []
    start_time = time.time()

    show_progress = output_format == 'table' and not quiet
    try:
        if show_progress:
            with Progress(
                SpinnerColumn(),
                TextColumn("[bold blue]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TimeElapsedColumn(),
                console=console,
                transient=True
            ) as progress:
                task = progress.add_task("[cyan]Linting...", total=len(files))
                for file_path in files:
                    diagnostics.extend(linter.lint_cached(file_path, cache))
                    progress.advance(task)
        else:
            for file_path in files:
                diagnostics.extend(linter.lint_cached(file_path, cache))
    finally:
        if cache is not None:
            cache.close()

    elapsed = time.time() - start_time

    if output_format == 'json':
        safe_print(json.dumps([d.to_dict() for d in diagnostics], indent=2))
    else:
        _print_table(diagnostics, len(files), elapsed, quiet)

    if diagnostics:
        raise typer.Exit(EXIT_FINDINGS)


@app.command()
def rule():
    """Show the rule enforced by Mutation Guard."""
    table = Table(title=RULE_META['name'], show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Type", RULE_META['type'])
    table.add_row("Description", RULE_META['description'])
    for message_id, message in RULE_META['messages'].items():
        table.add_row(f"Message ({message_id})", escape(message))
    table.add_row("Docs", RULE_META['url'])

    console.print(table)


@app.command()
def version():
    """Print the Mutation Guard version."""
    console.print(f"mutation-guard {__version__}")


@cache_app.command("clear")
def cache_clear(
    project_path: str = typer.Argument(".", help="Project root path"),
):
    """Clear the lint cache for a project.

    The next lint run re-parses every file.
    """
    project_path = Path(project_path).resolve()

    if not project_path.is_dir():
        _fail(f"Project path does not exist: {project_path}")

    with LintCache(project_path, get_config().cache_dir) as cache:
        cache.clear()

    console.print(f"[green]✓ Cache cleared for {escape(str(project_path))}[/green]")


@cache_app.command("stats")
def cache_stats(
    project_path: str = typer.Argument(".", help="Project root path"),
):
    """Display cache statistics for a project."""
    project_path = Path(project_path).resolve()

    if not project_path.is_dir():
        _fail(f"Project path does not exist: {project_path}")

    with LintCache(project_path, get_config().cache_dir) as cache:
        stats = cache.stats()

    table = Table(title=f"Cache Statistics: {escape(str(project_path))}", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="green")

    table.add_row("Files Cached", str(stats['cached_files']))
    table.add_row("Files With Problems", str(stats['files_with_diagnostics']))

    console.print(table)


# Register cache sub-command
app.add_typer(cache_app)


@app.callback()
def main():
    """Mutation Guard - every useMutation onSuccess must invalidate queries."""
    pass


if __name__ == "__main__":
    app()
