"""``devboom stats PROJECT_ID`` -- per-language line counts for a project."""

from __future__ import annotations

import click

from devboom.cli.context import get_service, run_async
from devboom.cli.output import print_json, print_language_stats, reporting_errors


@click.command("stats")
@click.argument("project_id")
@click.option(
    "--refresh", is_flag=True, default=False,
    help="Recount even if statistics are already stored.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
def stats_command(project_id: str, refresh: bool, output_format: str) -> None:
    """Show the language breakdown of PROJECT_ID.

    Statistics are computed on first use and cached in the catalog; use
    --refresh to recount.
    """
    with reporting_errors(output_format):
        service = get_service()
        project = run_async(service.get_project(project_id))
        stats = None if refresh else project.metadata.language_stats
        if stats is None:
            stats = run_async(service.scan_project_language_stats(project_id))

    if output_format == "json":
        print_json(stats.to_dict())
    else:
        print_language_stats(project, stats)
