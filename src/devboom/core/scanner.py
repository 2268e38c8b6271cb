"""Bounded-depth directory scanner that discovers and updates projects.

Discovery Algorithm:
    1. Breadth-first walk from the root (depth 0) down to ``max_depth``.
    2. Noise directories (``node_modules``, ``.git``, build output, ...)
       are never entered, however deep the limit allows.
    3. Each visited directory's entry names go through the classifier.
       A non-Generic verdict, or a Generic directory that is a VCS root,
       makes the directory a candidate and stops descent into it.
    4. Other Generic directories are descended into until the depth limit is
       spent. Empty or marker-less leaves are never registered.
    5. Each candidate is upserted by canonical path in its own store
       transaction, so an abandoned scan leaves every project either fully
       updated or untouched.

Unreadable subdirectories are counted in the ``ScanReport`` and logged;
only an inaccessible root fails the scan.
"""

from __future__ import annotations

import logging
import os
import threading
import uuid
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from devboom.config import MAX_SCAN_DEPTH
from devboom.core.classifier import classify, is_vcs_root
from devboom.core.ignore import DEFAULT_POLICY, IgnorePolicy
from devboom.core.models import (
    Project,
    ProjectType,
    ScanReport,
    ScanRequest,
    now_iso,
    timestamp_iso,
)
from devboom.exceptions import FilesystemError, InvalidInputError
from devboom.store.json_store import Catalog, JsonStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A directory the scanner decided is a project."""

    path: str
    project_type: ProjectType
    last_modified: str | None


def validate_request(request: ScanRequest, max_depth_limit: int = MAX_SCAN_DEPTH) -> Path:
    """Check a scan request and return its root as a ``Path``.

    Raises:
        InvalidInputError: Empty root or depth outside ``1..max_depth_limit``.
        FilesystemError: Root missing or not a directory.
    """
    if not request.root_path or not request.root_path.strip():
        raise InvalidInputError("Scan root path must not be empty", request.root_path)
    if not 1 <= request.max_depth <= max_depth_limit:
        raise InvalidInputError(
            f"Scan depth must be between 1 and {max_depth_limit}, got {request.max_depth}",
            str(request.max_depth),
        )
    root = Path(request.root_path).expanduser()
    if not root.is_dir():
        raise FilesystemError(
            "Scan root does not exist or is not a directory", request.root_path,
        )
    return root


def _mtime_iso(path: str) -> str | None:
    try:
        return timestamp_iso(os.stat(path).st_mtime)
    except OSError:
        return None


class DirectoryScanner:
    """Walks a root path and upserts discovered projects into the store.

    Usage::

        scanner = DirectoryScanner(store)
        report = scanner.scan(ScanRequest("~/code", 3))
        print(f"{len(report.project_ids)} projects, {report.skipped} skipped")
    """

    def __init__(
        self,
        store: JsonStore,
        policy: IgnorePolicy = DEFAULT_POLICY,
        max_depth_limit: int = MAX_SCAN_DEPTH,
    ) -> None:
        self.store = store
        self.policy = policy
        self.max_depth_limit = max_depth_limit

    # -- Traversal ----------------------------------------------------------

    def _list_dir(self, directory: str) -> tuple[set[str], list[str]]:
        """Return (entry names, child directory paths) for a directory."""
        names: set[str] = set()
        subdirs: list[str] = []
        with os.scandir(directory) as entries:
            for entry in entries:
                names.add(entry.name)
                try:
                    if entry.is_dir(follow_symlinks=False):
                        subdirs.append(entry.path)
                except OSError:
                    continue
        subdirs.sort()
        return names, subdirs

    def find_candidates(
        self,
        root: Path,
        max_depth: int,
        report: ScanReport,
        cancel: threading.Event | None = None,
    ) -> Iterator[Candidate]:
        """Yield project candidates under ``root`` in breadth-first order.

        Args:
            root: Validated scan root.
            max_depth: Deepest level (root = 0) to inspect.
            report: Receives counts of unreadable subdirectories.
            cancel: Stops traversal when set.

        Raises:
            FilesystemError: If the root itself cannot be listed.
        """
        queue: deque[tuple[str, int]] = deque([(os.fspath(root), 0)])
        while queue:
            if cancel is not None and cancel.is_set():
                return
            directory, depth = queue.popleft()
            try:
                names, subdirs = self._list_dir(directory)
            except OSError as exc:
                if depth == 0:
                    raise FilesystemError(f"Cannot read scan root: {exc}", directory) from exc
                report.skipped += 1
                report.errors.append(f"{directory}: {exc.strerror or exc}")
                logger.warning("Skipping unreadable directory %s: %s", directory, exc)
                continue

            project_type = classify(names)
            if project_type is not ProjectType.GENERIC or is_vcs_root(names):
                yield Candidate(
                    path=os.path.realpath(directory),
                    project_type=project_type,
                    last_modified=_mtime_iso(directory),
                )
                continue

            if depth >= max_depth:
                continue
            for child in subdirs:
                if self.policy.skip_dir(os.path.basename(child)):
                    continue
                queue.append((child, depth + 1))

    # -- Upsert -------------------------------------------------------------

    def _upsert(self, candidate: Candidate) -> str:
        with self.store.transaction() as catalog:
            existing = catalog.project_by_path(candidate.path)
            if existing is not None:
                existing.project_type = candidate.project_type
                existing.last_modified = candidate.last_modified
                logger.debug("Updated project %s (%s)", existing.path, existing.project_type.value)
                return existing.id
            project = self._new_project(candidate, catalog)
            catalog.projects.append(project)
            logger.info("Discovered %s project at %s", project.project_type.value, project.path)
            return project.id

    @staticmethod
    def _new_project(candidate: Candidate, catalog: Catalog) -> Project:
        next_order = max((p.display_order for p in catalog.projects), default=0) + 1
        return Project(
            id=str(uuid.uuid4()),
            name=os.path.basename(candidate.path.rstrip(os.sep)) or candidate.path,
            path=candidate.path,
            project_type=candidate.project_type,
            created_at=now_iso(),
            last_modified=candidate.last_modified,
            display_order=next_order,
        )

    # -- Entry point --------------------------------------------------------

    def scan(
        self,
        request: ScanRequest,
        cancel: threading.Event | None = None,
    ) -> ScanReport:
        """Discover projects under a root and record them in the store.

        Args:
            request: Root path and maximum depth.
            cancel: Optional event; when set, the scan stops before the
                next candidate. Projects already committed stay committed.

        Returns:
            A ``ScanReport`` listing every created or updated project id.
        """
        root = validate_request(request, self.max_depth_limit)
        report = ScanReport(started_at=now_iso())
        seen: set[str] = set()
        for candidate in self.find_candidates(root, request.max_depth, report, cancel):
            if cancel is not None and cancel.is_set():
                break
            project_id = self._upsert(candidate)
            if project_id not in seen:
                seen.add(project_id)
                report.project_ids.append(project_id)
        report.cancelled = cancel is not None and cancel.is_set()
        logger.info(
            "Scan of %s finished: %d project(s), %d skipped",
            root, len(report.project_ids), report.skipped,
        )
        return report
