"""Project classifier: marker file names -> ``ProjectType``.

The classifier is a pure function of the set of names found directly in
a directory. Rules are checked in a fixed priority order so that a
directory carrying several ecosystems' manifests (a Node front end inside
a Go service, say) always classifies the same way.

Priority Order:
    1. Rust     -- ``Cargo.toml``
    2. Nodejs   -- ``package.json``
    3. Python   -- ``pyproject.toml``, ``requirements.txt``, ``setup.py``, ...
    4. Java     -- ``pom.xml``, ``build.gradle``, ``build.gradle.kts``
    5. Go       -- ``go.mod``
    6. Dotnet   -- any ``*.sln`` / ``*.csproj`` / ``*.fsproj`` / ``*.vbproj``
    7. Generic  -- everything else
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from devboom.core.models import ProjectType

RUST_MARKERS: frozenset[str] = frozenset({"Cargo.toml"})
NODE_MARKERS: frozenset[str] = frozenset({"package.json"})
PYTHON_MARKERS: frozenset[str] = frozenset({
    "pyproject.toml",
    "requirements.txt",
    "setup.py",
    "setup.cfg",
    "Pipfile",
})
JAVA_MARKERS: frozenset[str] = frozenset({"pom.xml", "build.gradle", "build.gradle.kts"})
GO_MARKERS: frozenset[str] = frozenset({"go.mod"})
DOTNET_SUFFIXES: tuple[str, ...] = (".sln", ".csproj", ".fsproj", ".vbproj")

# Version-control roots make a Generic directory worth registering.
VCS_MARKERS: frozenset[str] = frozenset({".git", ".hg", ".svn"})

_NAMED_RULES: tuple[tuple[frozenset[str], ProjectType], ...] = (
    (RUST_MARKERS, ProjectType.RUST),
    (NODE_MARKERS, ProjectType.NODEJS),
    (PYTHON_MARKERS, ProjectType.PYTHON),
    (JAVA_MARKERS, ProjectType.JAVA),
    (GO_MARKERS, ProjectType.GO),
)


def _has_dotnet_marker(markers: Iterable[str]) -> bool:
    return any(name.lower().endswith(DOTNET_SUFFIXES) for name in markers)


def classify(markers: Iterable[str]) -> ProjectType:
    """Classify a directory from the names of its immediate entries.

    Total and side-effect free: any input, including an empty one,
    yields a ``ProjectType``.

    Args:
        markers: File and directory names present in the directory.

    Returns:
        The first matching ``ProjectType`` in priority order, or
        ``ProjectType.GENERIC``.
    """
    names = frozenset(markers)
    for rule_markers, project_type in _NAMED_RULES:
        if names & rule_markers:
            return project_type
    if _has_dotnet_marker(names):
        return ProjectType.DOTNET
    return ProjectType.GENERIC


def is_vcs_root(markers: Iterable[str]) -> bool:
    """Return True if the listing contains a version-control directory."""
    return bool(frozenset(markers) & VCS_MARKERS)


def read_markers(directory: Path) -> set[str]:
    """List the immediate entry names of a directory.

    Raises:
        OSError: If the directory cannot be listed. Callers decide
            whether that is fatal (scan root) or absorbed (subdirectory).
    """
    with os.scandir(directory) as entries:
        return {entry.name for entry in entries}
