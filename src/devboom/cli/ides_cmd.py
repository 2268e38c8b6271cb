"""``devboom ides ...`` -- manage configured editors, IDEs and terminals.

Usage::

    devboom ides list
    devboom ides detect --add
    devboom ides add /opt/tool/bin/tool --category Cli --args "--dir {projectPath}"
    devboom ides icon <id> ~/Pictures/tool.png
"""

from __future__ import annotations

import click

from devboom.cli.context import get_service, run_async
from devboom.cli.output import console, print_ides, print_json, reporting_errors
from devboom.core.models import IdeCategory, IdeForm

_FORMAT_OPTION = click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)


@click.group("ides")
def ides_group() -> None:
    """List, add, detect and remove IDE configurations."""


@ides_group.command("list")
@_FORMAT_OPTION
def list_command(output_format: str) -> None:
    """List configured IDEs by priority."""
    with reporting_errors(output_format):
        ides = run_async(get_service().get_ides())
    if output_format == "json":
        print_json([i.to_dict() for i in ides])
    else:
        print_ides(ides)


@ides_group.command("add")
@click.argument("executable")
@click.option("--name", default="", help="Display name (default: derived from EXECUTABLE).")
@click.option(
    "--args", "args_template", default=None,
    help="Argument template; {projectPath} and {projectName} are substituted.",
)
@click.option(
    "--category",
    type=click.Choice([c.value for c in IdeCategory]),
    default=IdeCategory.GUI.value,
    help="Launch behaviour (default: Gui).",
)
@click.option("--priority", type=int, default=None, help="Lower wins (default 200).")
@_FORMAT_OPTION
def add_command(
    executable: str,
    name: str,
    args_template: str | None,
    category: str,
    priority: int | None,
    output_format: str,
) -> None:
    """Add EXECUTABLE as a launchable tool."""
    form = IdeForm(
        executable=executable,
        name=name,
        args_template=args_template,
        category=IdeCategory(category),
        priority=priority,
    )
    with reporting_errors(output_format):
        ide = run_async(get_service().add_ide(form))
    if output_format == "json":
        print_json(ide.to_dict())
    else:
        console.print(f"Added [bold]{ide.name}[/bold] as {ide.id}")


@ides_group.command("remove")
@click.argument("ide_id")
def remove_command(ide_id: str) -> None:
    """Remove IDE_ID and drop it from every project's preferences."""
    with reporting_errors():
        run_async(get_service().remove_ide(ide_id))
    console.print(f"Removed {ide_id}")


@ides_group.command("detect")
@click.option("--add", "persist", is_flag=True, default=False, help="Add what was found.")
@_FORMAT_OPTION
def detect_command(persist: bool, output_format: str) -> None:
    """Look for installed tools that are not configured yet."""
    with reporting_errors(output_format):
        service = get_service()
        found = run_async(service.add_detected_ides() if persist else service.scan_ides())

    if output_format == "json":
        print_json([i.to_dict() for i in found])
        return
    if not found:
        console.print("[dim]No new IDEs detected.[/dim]")
        return
    print_ides(found, title="Added IDEs" if persist else "Detected IDEs")
    if not persist:
        console.print("Run [bold]devboom ides detect --add[/bold] to add them.")


@ides_group.command("icon")
@click.argument("ide_id")
@click.argument("file_path")
def icon_command(ide_id: str, file_path: str) -> None:
    """Set the icon of IDE_ID from an image or executable FILE_PATH."""
    with reporting_errors():
        ide = run_async(get_service().set_ide_icon_from_file(ide_id, file_path))
    console.print(f"Icon updated for {ide.name}")
