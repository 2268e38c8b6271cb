"""devboom CLI -- local project registry and IDE launcher.

Entry point for the ``devboom`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    scan     -- Discover projects under a directory tree.
    projects -- List, add, tag, reorder and reveal projects.
    stats    -- Per-language line counts for a project.
    launch   -- Open a project in an IDE.
    ides     -- Manage and detect IDE configurations.

Usage::

    devboom scan ~/code --depth 3
    devboom projects list
    devboom stats 3f2a9c1e-... --refresh
    devboom launch 3f2a9c1e-... --ide vscode
    devboom ides detect --add

Exit Codes:
    0 -- Success.
    1 -- The operation failed (``Error [<kind>]: ...`` on stderr).
    2 -- Usage error.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from devboom import __version__
from devboom.cli.context import CliState
from devboom.cli.ides_cmd import ides_group
from devboom.cli.launch_cmd import launch_command
from devboom.cli.projects_cmd import projects_group
from devboom.cli.scan_cmd import scan_command
from devboom.cli.stats_cmd import stats_command


def configure_logging(verbose: bool) -> None:
    """Route library logging through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding store.json and config.yaml (overrides DEVBOOM_HOME).",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, verbose: bool) -> None:
    """devboom: find your projects and open them in the right tool.

    Scans directory trees for software projects, keeps a catalog of them
    with favourites, tags and per-project IDE preferences, reports each
    project's language breakdown, and launches editors, IDEs and
    terminals against them.
    """
    configure_logging(verbose)
    ctx.obj = CliState(data_dir=data_dir, verbose=verbose)


# Register all subcommands
cli.add_command(scan_command)
cli.add_command(projects_group)
cli.add_command(stats_command)
cli.add_command(launch_command)
cli.add_command(ides_group)
