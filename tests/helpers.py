"""Shared test helpers: fake project trees and a scriptable platform.

``FakePlatform`` stands in for the OS capability layer so tests never
look at the real ``PATH``, install locations or desktop integration.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from devboom.discovery.ide_registry import IdeDefinition
from devboom.discovery.platforms import Platform


def make_tree(root: Path, files: dict[str, str | bytes | None]) -> Path:
    """Create files (or directories, for ``None`` values) under root."""
    for rel, content in files.items():
        path = root / rel
        if content is None:
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
    return root


def make_executable(path: Path, body: str = "#!/bin/sh\nexit 0\n") -> Path:
    """Write a small shell script and mark it executable."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body)
    path.chmod(0o755)
    return path


class FakePlatform(Platform):
    """Platform whose lookups come from dictionaries.

    Args:
        commands: ``command name -> resolved path`` for ``which``.
        locations: ``family id -> existing paths`` for ``candidate_paths``.
        icons: ``executable path -> icon image`` for ``icon_source``.
        terminal_wrapper: Prefix prepended by ``wrap_in_terminal``, or None.
    """

    name = "fake"

    def __init__(
        self,
        commands: dict[str, str] | None = None,
        locations: dict[str, list[Path]] | None = None,
        icons: dict[str, Path] | None = None,
        terminal_wrapper: list[str] | None = None,
    ) -> None:
        self.commands = commands or {}
        self.locations = locations or {}
        self.icons = icons or {}
        self.terminal_wrapper = terminal_wrapper

    def candidate_paths(self, definition: IdeDefinition) -> list[Path]:
        return list(self.locations.get(definition.id, []))

    def which(self, command: str) -> str | None:
        return self.commands.get(command)

    def detach_kwargs(self) -> dict[str, Any]:
        return {"start_new_session": True}

    def file_manager_command(self, path: str) -> list[str]:
        return ["fake-open", path]

    def terminal_command(self, path: str) -> list[str] | None:
        return ["fake-term"]

    def wrap_in_terminal(self, argv: list[str], cwd: str) -> list[str] | None:
        if self.terminal_wrapper is None:
            return None
        return [*self.terminal_wrapper, *argv]

    def icon_source(self, executable: Path) -> Path | None:
        return self.icons.get(str(executable))
