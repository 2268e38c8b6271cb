"""``devboom projects ...`` -- manage catalogued projects.

Usage::

    devboom projects list --favorites
    devboom projects add ~/code/tool --tag work
    devboom projects prefs <id> vscode neovim
    devboom projects reorder <id-a> <id-b>
    devboom projects reveal <id>
"""

from __future__ import annotations

import click

from devboom.cli.context import get_service, run_async
from devboom.cli.output import console, print_json, print_projects, reporting_errors

_FORMAT_OPTION = click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)


@click.group("projects")
def projects_group() -> None:
    """List, add, organise and reveal catalogued projects."""


@projects_group.command("list")
@click.option("--favorites", is_flag=True, default=False, help="Only favourite projects.")
@click.option("--tag", default=None, help="Only projects carrying this tag.")
@_FORMAT_OPTION
def list_command(favorites: bool, tag: str | None, output_format: str) -> None:
    """List projects, most recently modified first."""
    with reporting_errors(output_format):
        projects = run_async(get_service().get_projects())
    if favorites:
        projects = [p for p in projects if p.favorite]
    if tag:
        projects = [p for p in projects if tag in p.tags]

    if output_format == "json":
        print_json([p.to_dict() for p in projects])
    else:
        print_projects(projects)


@projects_group.command("add")
@click.argument("path")
@click.option("--name", default=None, help="Display name (default: directory name).")
@click.option("--tag", "tags", multiple=True, help="Tag to attach; repeatable.")
@click.option("--description", default=None, help="Free-form description.")
@_FORMAT_OPTION
def add_command(
    path: str,
    name: str | None,
    tags: tuple[str, ...],
    description: str | None,
    output_format: str,
) -> None:
    """Add the directory PATH to the catalog by hand."""
    with reporting_errors(output_format):
        project = run_async(get_service().add_project(path, name, tags, description))
    if output_format == "json":
        print_json(project.to_dict())
    else:
        console.print(f"Added [bold]{project.name}[/bold] ({project.project_type.value}) as {project.id}")


@projects_group.command("remove")
@click.argument("project_id")
def remove_command(project_id: str) -> None:
    """Remove PROJECT_ID from the catalog (files are untouched)."""
    with reporting_errors():
        run_async(get_service().remove_project(project_id))
    console.print(f"Removed {project_id}")


@projects_group.command("favorite")
@click.argument("project_id")
def favorite_command(project_id: str) -> None:
    """Toggle the favourite flag of PROJECT_ID."""
    with reporting_errors():
        project = run_async(get_service().toggle_project_favorite(project_id))
    state = "now" if project.favorite else "no longer"
    console.print(f"{project.name} is {state} a favourite")


@projects_group.command("prefs")
@click.argument("project_id")
@click.argument("ide_ids", nargs=-1)
def prefs_command(project_id: str, ide_ids: tuple[str, ...]) -> None:
    """Set the preferred IDEs of PROJECT_ID, most preferred first.

    At most three are kept; unknown ids are dropped. Pass no ids to clear.
    """
    with reporting_errors():
        stored = run_async(get_service().set_project_ide_preferences(project_id, ide_ids))
    console.print(f"Preferences: {', '.join(stored) if stored else '(none)'}")


@projects_group.command("tags")
@click.argument("project_id")
@click.argument("tags", nargs=-1)
def tags_command(project_id: str, tags: tuple[str, ...]) -> None:
    """Replace the tags of PROJECT_ID. Pass no tags to clear."""
    with reporting_errors():
        stored = run_async(get_service().set_project_tags(project_id, tags))
    console.print(f"Tags: {', '.join(stored) if stored else '(none)'}")


@projects_group.command("reorder")
@click.argument("project_ids", nargs=-1, required=True)
@_FORMAT_OPTION
def reorder_command(project_ids: tuple[str, ...], output_format: str) -> None:
    """Put PROJECT_IDS first in display order, in the order given."""
    with reporting_errors(output_format):
        projects = run_async(get_service().reorder_projects(project_ids))
    if output_format == "json":
        print_json([p.to_dict() for p in projects])
    else:
        print_projects(projects)


@projects_group.command("reveal")
@click.argument("project_id")
def reveal_command(project_id: str) -> None:
    """Open the directory of PROJECT_ID in the file manager."""
    with reporting_errors():
        service = get_service()
        project = run_async(service.get_project(project_id))
        run_async(service.open_in_file_manager(project.path))


@projects_group.command("terminal")
@click.argument("project_id")
def terminal_command(project_id: str) -> None:
    """Open a terminal in the directory of PROJECT_ID."""
    with reporting_errors():
        service = get_service()
        project = run_async(service.get_project(project_id))
        run_async(service.open_in_terminal(project.path))
