"""Traversal exclusion policy shared by the scanner and the stats engine.

Both walkers skip the same noise directories (dependency caches, VCS
internals, build output) regardless of the remaining depth. The
statistics engine additionally skips generated or minified files that
would otherwise dominate a project's line counts.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

NOISE_DIRS: frozenset[str] = frozenset({
    # -- version control internals --
    ".git",
    ".hg",
    ".svn",
    # -- dependency caches and virtualenvs --
    "node_modules",
    "bower_components",
    "vendor",
    ".venv",
    "venv",
    "env",
    ".tox",
    ".gradle",
    # -- tool caches --
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    ".idea",
    ".vscode",
    # -- build output --
    "target",
    "dist",
    "build",
    "out",
    "bin",
    "obj",
    ".next",
    ".nuxt",
    "coverage",
})

GENERATED_SUFFIXES: tuple[str, ...] = (
    ".min.js",
    ".min.css",
    ".bundle.js",
    ".chunk.js",
)

LOCKFILE_NAMES: frozenset[str] = frozenset({
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "Cargo.lock",
    "poetry.lock",
    "Pipfile.lock",
    "composer.lock",
    "go.sum",
})


@dataclass(frozen=True)
class IgnorePolicy:
    """Directory and file exclusion rules for one traversal.

    Attributes:
        dirs: Directory names never descended into.
    """

    dirs: frozenset[str] = field(default=NOISE_DIRS)

    @classmethod
    def with_extras(cls, extra_dirs: Iterable[str] = ()) -> IgnorePolicy:
        """Build a policy from the default set plus configured extras."""
        return cls(dirs=NOISE_DIRS | frozenset(extra_dirs))

    def skip_dir(self, name: str) -> bool:
        """Return True if a directory with this name must not be entered."""
        return name in self.dirs

    def skip_file(self, name: str) -> bool:
        """Return True for generated, minified, or lock files."""
        if name in LOCKFILE_NAMES:
            return True
        return name.lower().endswith(GENERATED_SUFFIXES)


DEFAULT_POLICY = IgnorePolicy()
