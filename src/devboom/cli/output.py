"""Rich output formatting helpers for the devboom CLI.

Text mode renders tables on stdout; errors go to stderr as
``Error [<kind>]: <message>``. JSON mode prints the camelCase payloads
produced by the models' ``to_dict`` methods, and errors as the tagged
``{"kind", "message", "subject"}`` object on stdout.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from devboom.core.models import IdeCategory, IdeConfig, LanguageStats, Project, ScanReport
from devboom.exceptions import DevBoomError

_CATEGORY_STYLES: dict[IdeCategory, str] = {
    IdeCategory.GUI: "cyan",
    IdeCategory.CLI: "green",
    IdeCategory.TERMINAL: "magenta",
    IdeCategory.BROWSER: "yellow",
}

console = Console()
err_console = Console(stderr=True)


def category_style(category: IdeCategory) -> str:
    """Return the Rich style string for an IDE category."""
    return _CATEGORY_STYLES.get(category, "white")


def print_json(data: Any) -> None:
    """Print data as indented JSON on stdout."""
    click.echo(json.dumps(data, indent=2, default=str))


@contextmanager
def reporting_errors(output_format: str = "text") -> Iterator[None]:
    """Turn ``DevBoomError`` into a rendered failure and exit code 1."""
    try:
        yield
    except DevBoomError as exc:
        if output_format == "json":
            print_json({"error": exc.to_dict()})
        else:
            subject = f" ({exc.subject})" if exc.subject else ""
            err_console.print(
                Text.assemble((f"Error [{exc.kind}]: ", "bold red"), f"{exc.message}{subject}"),
            )
        sys.exit(1)


def print_projects(projects: list[Project], title: str = "Projects") -> None:
    """Print a table of projects.

    Args:
        projects: Projects in display order.
        title: Table title.
    """
    if not projects:
        console.print("[dim]No projects found.[/dim]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("", justify="center", no_wrap=True)
    table.add_column("Id", style="dim", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Type")
    table.add_column("Tags", style="dim")
    table.add_column("Path", overflow="fold")

    for project in projects:
        star = Text("*", style="bold yellow") if project.favorite else Text("")
        table.add_row(
            star,
            project.id[:8],
            project.name,
            project.project_type.value,
            ", ".join(project.tags),
            project.path,
        )
    console.print(table)


def print_scan_report(report: ScanReport, projects: list[Project]) -> None:
    """Print the projects a scan touched plus a one-line summary."""
    print_projects(projects, title="Scan Results")
    parts = [f"[bold]{len(report.project_ids)}[/bold] project(s)"]
    created = sum(1 for p in projects if p.created_at >= report.started_at)
    if created:
        parts.append(f"[green]{created} new[/green]")
    if report.skipped:
        parts.append(f"[yellow]{report.skipped} skipped[/yellow]")
    if report.cancelled:
        parts.append("[red]cancelled[/red]")
    console.print(" | ".join(parts))


def scan_report_to_json(report: ScanReport, projects: list[Project]) -> dict[str, Any]:
    return {
        "projects": [p.to_dict() for p in projects],
        "skipped": report.skipped,
        "errors": list(report.errors),
        "cancelled": report.cancelled,
        "startedAt": report.started_at,
    }


def print_ides(ides: list[IdeConfig], title: str = "IDEs") -> None:
    """Print a table of IDE configurations in priority order."""
    if not ides:
        console.print("[dim]No IDEs configured.[/dim]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Id", style="dim", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Category", justify="center")
    table.add_column("Priority", justify="right")
    table.add_column("Executable", overflow="fold")
    table.add_column("Args", style="dim")

    for ide in ides:
        name = f"{ide.name} (detected)" if ide.auto_detected else ide.name
        table.add_row(
            ide.id,
            name,
            Text(ide.category.value, style=category_style(ide.category)),
            str(ide.priority),
            ide.executable,
            ide.args_template,
        )
    console.print(table)


def print_language_stats(project: Project, stats: LanguageStats) -> None:
    """Print a project's language breakdown."""
    if not stats.languages:
        console.print(f"[dim]No source files counted in {project.name}.[/dim]")
        return

    table = Table(title=f"Languages: {project.name}", show_header=True, header_style="bold")
    table.add_column("Language", style="bold")
    table.add_column("Files", justify="right")
    table.add_column("Lines", justify="right")
    table.add_column("Share", justify="right")
    for entry in stats.languages:
        table.add_row(entry.language, str(entry.files), str(entry.lines), f"{entry.percentage:.2f}%")
    console.print(table)

    summary = f"[bold]{stats.total_lines}[/bold] lines | scanned {stats.scanned_at}"
    if stats.skipped_files:
        summary += f" | [yellow]{stats.skipped_files} unreadable[/yellow]"
    console.print(summary)
