"""``devboom scan ROOT`` -- discover projects under a directory tree.

Exit Codes:
    0 -- Scan completed (unreadable subdirectories are reported, not fatal).
    1 -- The root is missing or unreadable, or the depth is out of range.
"""

from __future__ import annotations

import click

from devboom.cli.context import get_service, run_async
from devboom.cli.output import (
    console,
    print_json,
    print_scan_report,
    reporting_errors,
    scan_report_to_json,
)


@click.command("scan")
@click.argument("root")
@click.option(
    "--depth", "-d",
    type=int,
    default=None,
    help="Maximum depth below ROOT to inspect (default from config, 3).",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
def scan_command(root: str, depth: int | None, output_format: str) -> None:
    """Scan ROOT for projects and record them in the catalog.

    Directories with a recognised build manifest (Cargo.toml, package.json,
    pyproject.toml, go.mod, ...) or a version-control root become projects.
    Re-scanning updates existing entries instead of duplicating them.
    """
    with reporting_errors(output_format):
        service = get_service()
        report = run_async(service.run_scan(root, depth))
        catalog = service.store.load()
        projects = [p for p in (catalog.find_project(i) for i in report.project_ids) if p]

    if output_format == "json":
        print_json(scan_report_to_json(report, projects))
        return
    print_scan_report(report, projects)
    for error in report.errors:
        console.print(f"  [yellow]skipped:[/yellow] {error}")
