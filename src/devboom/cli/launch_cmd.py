"""``devboom launch PROJECT_ID`` -- open a project in an IDE.

Without ``--ide`` the tool is resolved from the project's preferences,
falling back to the configured IDE with the lowest priority.
"""

from __future__ import annotations

import click

from devboom.cli.context import get_service, run_async
from devboom.cli.output import console, print_json, reporting_errors


@click.command("launch")
@click.argument("project_id")
@click.option("--ide", "ide_id", default=None, help="IDE id to use.")
@click.option(
    "--prefer", "preferences", multiple=True,
    help="Preferred IDE id to remember for this project; repeatable.",
)
@click.option(
    "--wait", is_flag=True, default=False,
    help="Run command-line and terminal tools in the foreground.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
def launch_command(
    project_id: str,
    ide_id: str | None,
    preferences: tuple[str, ...],
    wait: bool,
    output_format: str,
) -> None:
    """Open PROJECT_ID in an IDE."""
    prefs = list(preferences) if preferences else None
    with reporting_errors(output_format):
        outcome = run_async(get_service().launch_project(project_id, ide_id, prefs, wait))

    if output_format == "json":
        print_json(outcome.to_dict())
    elif outcome.exit_code is not None:
        console.print(f"{outcome.ide_id} exited with code {outcome.exit_code}")
    else:
        console.print(f"Launched {outcome.ide_id} (pid {outcome.pid})")
