"""Launch orchestrator: resolve a tool, build its command line, spawn it.

Resolution Order (when no IDE id is given):
    1. The first entry of the project's ``idePreferences`` that still
       exists in the catalog.
    2. The catalog entry with the lowest ``priority`` (ties by name).
    3. Otherwise ``NoIdeConfiguredError``.

Spawn Strategies (one per ``IdeCategory``):
    Gui, Browser -- detached process, stdio discarded.
    Cli          -- wrapped in the platform's terminal emulator when one is
                    available, otherwise detached as-is.
    Terminal     -- the tool is itself a terminal emulator; detached.
    With ``wait=True``, Cli and Terminal tools run attached instead and the
    outcome carries their exit code.

Every process starts with the project directory as its working directory.
State is only written after a successful spawn: ``lastOpened`` and, when
the caller supplied an explicit preference list, ``idePreferences``. The
project lock is released before an attached tool is waited on.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from devboom.core.models import IdeCategory, IdeConfig, Project, now_iso
from devboom.core.preferences import PreferenceList
from devboom.discovery.platforms import Platform, current_platform
from devboom.exceptions import LaunchFailedError, NoIdeConfiguredError
from devboom.launch.args import expand_args
from devboom.store.json_store import Catalog, JsonStore

logger = logging.getLogger(__name__)

# (pid, attached process to wait on or None)
Spawned = tuple[int, "subprocess.Popen[bytes] | None"]


@dataclass
class LaunchOutcome:
    """Result of a successful launch."""

    project_id: str
    ide_id: str
    argv: list[str]
    pid: int | None = None
    exit_code: int | None = None
    launched_at: str = field(default_factory=now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "projectId": self.project_id,
            "ideId": self.ide_id,
            "argv": list(self.argv),
            "pid": self.pid,
            "exitCode": self.exit_code,
            "launchedAt": self.launched_at,
        }


def spawn_detached(argv: list[str], cwd: str, platform: Platform) -> int:
    """Start ``argv`` in the background and return its pid.

    Raises:
        OSError: If the process cannot be created.
    """
    process = subprocess.Popen(
        argv,
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        **platform.detach_kwargs(),
    )
    return process.pid


def _start_attached(argv: list[str], cwd: str) -> subprocess.Popen[bytes]:
    return subprocess.Popen(argv, cwd=cwd)


def _is_path_like(executable: str) -> bool:
    return (
        os.path.isabs(executable)
        or os.sep in executable
        or (os.altsep is not None and os.altsep in executable)
    )


class LaunchOrchestrator:
    """Opens projects in configured tools.

    Usage::

        launcher = LaunchOrchestrator(store)
        outcome = launcher.launch(project_id)
        print(f"Started pid {outcome.pid}")
    """

    def __init__(self, store: JsonStore, platform: Platform | None = None) -> None:
        self.store = store
        self.platform = platform or current_platform()
        self._strategies: dict[
            IdeCategory, Callable[[list[str], str, bool], Spawned]
        ] = {
            IdeCategory.GUI: self._spawn_gui,
            IdeCategory.BROWSER: self._spawn_gui,
            IdeCategory.CLI: self._spawn_cli,
            IdeCategory.TERMINAL: self._spawn_terminal,
        }

    # -- Resolution ---------------------------------------------------------

    @staticmethod
    def resolve_ide(catalog: Catalog, project: Project, ide_id: str | None = None) -> IdeConfig:
        """Pick the tool to launch ``project`` with.

        Raises:
            NotFoundError: ``ide_id`` was given but is not cataloged.
            NoIdeConfiguredError: Nothing can be resolved.
        """
        if ide_id:
            return catalog.require_ide(ide_id)
        for preferred in project.metadata.ide_preferences:
            ide = catalog.find_ide(preferred)
            if ide is not None:
                return ide
        if not catalog.ides:
            raise NoIdeConfiguredError("No IDE is configured", project.id)
        return min(catalog.ides, key=lambda i: (i.priority, i.name))

    def resolve_executable(self, executable: str) -> str:
        """Turn an executable reference into a spawnable path.

        Raises:
            LaunchFailedError: The file does not exist, is not executable,
                or the command is not on ``PATH``.
        """
        if _is_path_like(executable):
            path = Path(executable).expanduser()
            if not path.exists():
                raise LaunchFailedError(f"Executable does not exist: {path}", executable)
            if not self.platform.is_executable(path):
                raise LaunchFailedError(f"File is not executable: {path}", executable)
            return str(path)
        found = self.platform.which(executable)
        if found is None:
            raise LaunchFailedError(f"Command not found on PATH: {executable}", executable)
        return found

    # -- Spawn strategies ---------------------------------------------------

    def _spawn_gui(self, argv: list[str], cwd: str, wait: bool) -> Spawned:
        return spawn_detached(argv, cwd, self.platform), None

    def _spawn_cli(self, argv: list[str], cwd: str, wait: bool) -> Spawned:
        if wait:
            process = _start_attached(argv, cwd)
            return process.pid, process
        wrapped = self.platform.wrap_in_terminal(argv, cwd)
        return spawn_detached(wrapped or argv, cwd, self.platform), None

    def _spawn_terminal(self, argv: list[str], cwd: str, wait: bool) -> Spawned:
        if wait:
            process = _start_attached(argv, cwd)
            return process.pid, process
        return spawn_detached(argv, cwd, self.platform), None

    # -- Entry point --------------------------------------------------------

    def launch(
        self,
        project_id: str,
        ide_id: str | None = None,
        preferences: Iterable[str] | None = None,
        wait: bool = False,
    ) -> LaunchOutcome:
        """Open a project in a tool.

        Args:
            project_id: Project to open.
            ide_id: Explicit tool; resolved from preferences when omitted.
            preferences: Explicit preference list to persist after a
                successful launch, with the used tool moved to the front.
            wait: Run Cli/Terminal tools attached and wait for exit.

        Returns:
            A ``LaunchOutcome`` describing the spawned process.

        Raises:
            NotFoundError: Unknown project or IDE id.
            NoIdeConfiguredError: No IDE could be resolved.
            InvalidInputError: The IDE's argument template is malformed.
            LaunchFailedError: The executable is missing or the spawn failed.
        """
        with self.store.project_locks.hold(project_id):
            catalog = self.store.load()
            project = catalog.require_project(project_id)
            ide = self.resolve_ide(catalog, project, ide_id)
            args = expand_args(ide.args_template, project)
            argv = [self.resolve_executable(ide.executable), *args]

            try:
                pid, attached = self._strategies[ide.category](argv, project.path, wait)
            except OSError as exc:
                raise LaunchFailedError(f"Failed to launch {ide.name}: {exc}", ide.executable) from exc
            logger.info("Launched %s for %s (pid %s)", ide.name, project.path, pid)

            outcome = LaunchOutcome(project_id=project.id, ide_id=ide.id, argv=argv, pid=pid)
            self._record(outcome, preferences)

        # Waited on outside the project lock; the launch is already recorded.
        if attached is not None:
            outcome.exit_code = attached.wait()
            logger.info("%s exited with code %s", ide.name, outcome.exit_code)
        return outcome

    def _record(self, outcome: LaunchOutcome, preferences: Iterable[str] | None) -> None:
        with self.store.transaction() as catalog:
            project = catalog.require_project(outcome.project_id)
            project.last_opened = outcome.launched_at
            if preferences is not None:
                known = [i for i in preferences if catalog.find_ide(i) is not None]
                prefs = PreferenceList(known)
                prefs.push(outcome.ide_id)
                project.metadata.ide_preferences = prefs.to_list()
