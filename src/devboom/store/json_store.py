"""JSON-file catalog store with atomic writes and per-entity locking.

The store is the only shared mutable resource in devboom. Every mutation
is a short read-modify-write transaction: the file is re-read under the
store lock, the caller mutates the in-memory ``Catalog``, and the result
is written to a temporary file in the same directory and swapped in with
``os.replace``. Readers therefore see either the old or the new file,
never a torn one, and concurrent operations never clobber each other's
updates with stale in-memory copies.

Multi-step operations on one project (launch, statistics refresh) take a
per-project lock from ``KeyedLocks`` for their whole duration so that
their writes are serialized with other operations on the same project,
while operations on different projects run in parallel.

File Layout::

    {
      "projects": [ {...Project.to_dict()...}, ... ],
      "ides":     [ {...IdeConfig.to_dict()...}, ... ]
    }
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from devboom.core.models import IdeConfig, Project
from devboom.exceptions import FilesystemError, NotFoundError

logger = logging.getLogger(__name__)

CORRUPT_SUFFIX = ".corrupt"


def canonical_path(path: str | Path) -> str:
    """Normalize a filesystem path into the catalog's natural key."""
    return os.path.normcase(os.path.realpath(os.fspath(path)))


# ---------------------------------------------------------------------------
# Catalog: in-memory snapshot of the store
# ---------------------------------------------------------------------------


@dataclass
class Catalog:
    """Snapshot of every project and IDE config in the store."""

    projects: list[Project] = field(default_factory=list)
    ides: list[IdeConfig] = field(default_factory=list)

    def find_project(self, project_id: str) -> Project | None:
        return next((p for p in self.projects if p.id == project_id), None)

    def require_project(self, project_id: str) -> Project:
        """Return the project with this id or raise ``NotFoundError``."""
        project = self.find_project(project_id)
        if project is None:
            raise NotFoundError(f"Project not found: {project_id}", project_id)
        return project

    def project_by_path(self, path: str) -> Project | None:
        key = canonical_path(path)
        return next((p for p in self.projects if canonical_path(p.path) == key), None)

    def find_ide(self, ide_id: str) -> IdeConfig | None:
        return next((i for i in self.ides if i.id == ide_id), None)

    def require_ide(self, ide_id: str) -> IdeConfig:
        """Return the IDE with this id or raise ``NotFoundError``."""
        ide = self.find_ide(ide_id)
        if ide is None:
            raise NotFoundError(f"IDE not found: {ide_id}", ide_id)
        return ide

    def to_dict(self) -> dict[str, Any]:
        return {
            "projects": [p.to_dict() for p in self.projects],
            "ides": [i.to_dict() for i in self.ides],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Catalog:
        return cls(
            projects=[Project.from_dict(p) for p in data.get("projects", [])],
            ides=[IdeConfig.from_dict(i) for i in data.get("ides", [])],
        )


# ---------------------------------------------------------------------------
# Per-entity locks
# ---------------------------------------------------------------------------


class KeyedLocks:
    """A lazily populated map of one ``threading.Lock`` per key."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            yield

    def forget(self, key: str) -> None:
        """Drop the lock for a key whose entity no longer exists."""
        with self._guard:
            self._locks.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._locks


# ---------------------------------------------------------------------------
# JsonStore
# ---------------------------------------------------------------------------


class JsonStore:
    """Durable catalog backed by a single JSON file.

    Args:
        path: Location of ``store.json``. Parent directories are created
            on first write.
        seed: Factory for the catalog used when no store file exists yet.
    """

    def __init__(
        self,
        path: Path,
        seed: Callable[[], Catalog] | None = None,
    ) -> None:
        self.path = path
        self._seed = seed or Catalog
        self._lock = threading.RLock()
        self.project_locks = KeyedLocks()

    # -- Reading ------------------------------------------------------------

    def load(self) -> Catalog:
        """Read the current catalog from disk."""
        with self._lock:
            return self._read()

    def _read(self) -> Catalog:
        if not self.path.exists():
            return self._seed()
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FilesystemError(f"Cannot read store: {exc}", str(self.path)) from exc
        try:
            data = json.loads(text)
            if not isinstance(data, dict):
                raise ValueError("store root is not an object")
            return Catalog.from_dict(data)
        except (ValueError, KeyError, TypeError) as exc:
            return self._recover_corrupt(exc)

    def _recover_corrupt(self, exc: Exception) -> Catalog:
        backup = self.path.with_name(self.path.name + CORRUPT_SUFFIX)
        logger.warning(
            "Store %s is unreadable (%s); moving it to %s and starting fresh",
            self.path, exc, backup,
        )
        try:
            os.replace(self.path, backup)
        except OSError as move_exc:
            raise FilesystemError(
                f"Store is corrupt and could not be moved aside: {move_exc}",
                str(self.path),
            ) from move_exc
        return self._seed()

    # -- Writing ------------------------------------------------------------

    def _write(self, catalog: Catalog) -> None:
        payload = json.dumps(catalog.to_dict(), indent=2, ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise FilesystemError(f"Cannot write store: {exc}", str(self.path)) from exc

    @contextmanager
    def transaction(self) -> Iterator[Catalog]:
        """Read-modify-write the catalog atomically.

        The catalog yielded is freshly read from disk. It is written back
        when the block exits normally and discarded if the block raises,
        so a failed operation never mutates stored state.
        """
        with self._lock:
            catalog = self._read()
            yield catalog
            self._write(catalog)

    # -- Project helpers ----------------------------------------------------

    def get_project(self, project_id: str) -> Project:
        return self.load().require_project(project_id)

    def update_project(self, project_id: str, mutate: Callable[[Project], None]) -> Project:
        """Apply ``mutate`` to one project inside a transaction.

        Raises:
            NotFoundError: If the project does not exist.
        """
        with self.transaction() as catalog:
            project = catalog.require_project(project_id)
            mutate(project)
            return project

    def delete_project(self, project_id: str) -> None:
        try:
            with self.project_locks.hold(project_id), self.transaction() as catalog:
                project = catalog.require_project(project_id)
                catalog.projects.remove(project)
        finally:
            self.project_locks.forget(project_id)

    # -- IDE helpers --------------------------------------------------------

    def get_ide(self, ide_id: str) -> IdeConfig:
        return self.load().require_ide(ide_id)
