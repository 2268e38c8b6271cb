"""Asynchronous operation set consumed by UIs and the CLI.

``DevBoomService`` wires the store, scanner, statistics engine, detector
and launcher together and exposes every operation as a coroutine. Blocking
work (filesystem traversal, process spawning, store I/O) runs in worker
threads via ``asyncio.to_thread`` so the caller's event loop never blocks.

Concurrency Model:
    - Every mutation re-reads the store inside a transaction, so in-memory
      snapshots never clobber concurrent updates.
    - Multi-step per-project work (launch, statistics refresh) holds that
      project's lock; different projects proceed in parallel.
    - Cancelling an awaiting ``scan_projects`` signals the worker thread,
      which stops before the next candidate. Projects already committed
      stay committed.

Usage::

    service = DevBoomService.from_settings(load_settings())
    projects = asyncio.run(service.scan_projects("~/code", 3))
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
import uuid
from collections.abc import Iterable
from pathlib import Path

from devboom.config import Settings, load_settings
from devboom.core.classifier import classify, read_markers
from devboom.core.ignore import IgnorePolicy
from devboom.core.language_stats import LanguageStatsEngine
from devboom.core.models import (
    DEFAULT_ARGS_TEMPLATE,
    DEFAULT_PRIORITY,
    IdeConfig,
    IdeForm,
    LanguageStats,
    Project,
    ProjectMetadata,
    ScanReport,
    ScanRequest,
    now_iso,
    timestamp_iso,
)
from devboom.core.preferences import PreferenceList
from devboom.core.scanner import DirectoryScanner
from devboom.discovery.detector import IdeDetector
from devboom.discovery.icons import icon_from_file
from devboom.discovery.ide_registry import default_ides, prettify_name
from devboom.discovery.platforms import Platform, current_platform
from devboom.exceptions import FilesystemError, InvalidInputError, LaunchFailedError
from devboom.launch.args import validate_template
from devboom.launch.orchestrator import LaunchOrchestrator, LaunchOutcome, spawn_detached
from devboom.store.json_store import Catalog, JsonStore

logger = logging.getLogger(__name__)


def _seed_catalog() -> Catalog:
    return Catalog(ides=default_ides())


def _clean_tags(tags: Iterable[str]) -> list[str]:
    """Trim labels, drop empties, keep first occurrence order."""
    return list(dict.fromkeys(t.strip() for t in tags if t and t.strip()))


class DevBoomService:
    """The devboom operation set.

    Args:
        settings: Resolved runtime settings.
        platform: OS capability implementation; detected when omitted.
    """

    def __init__(self, settings: Settings, platform: Platform | None = None) -> None:
        self.settings = settings
        self.platform = platform or current_platform()
        self.store = JsonStore(settings.store_path, seed=_seed_catalog)
        policy = IgnorePolicy.with_extras(settings.extra_ignore_dirs)
        self.scanner = DirectoryScanner(self.store, policy, settings.max_scan_depth)
        self.stats_engine = LanguageStatsEngine(policy, settings.extra_extensions)
        self.detector = IdeDetector(self.platform, icon_max_bytes=settings.icon_max_bytes)
        self.launcher = LaunchOrchestrator(self.store, self.platform)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> DevBoomService:
        return cls(settings or load_settings())

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def _list_projects(self) -> list[Project]:
        projects = sorted(self.store.load().projects, key=lambda p: p.name)
        # Stable sort: newest first, never-modified last, names within ties.
        projects.sort(key=lambda p: p.last_modified or "", reverse=True)
        return projects

    def _list_ides(self) -> list[IdeConfig]:
        return sorted(self.store.load().ides, key=lambda i: (i.priority, i.name))

    async def get_projects(self) -> list[Project]:
        """All projects, most recently modified first."""
        return await asyncio.to_thread(self._list_projects)

    async def get_ides(self) -> list[IdeConfig]:
        """All configured IDEs by ascending priority."""
        return await asyncio.to_thread(self._list_ides)

    async def get_project(self, project_id: str) -> Project:
        return await asyncio.to_thread(self.store.get_project, project_id)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    async def run_scan(self, root_path: str, max_depth: int | None = None) -> ScanReport:
        """Scan a directory tree and return the full ``ScanReport``.

        Raises:
            InvalidInputError: Empty root or depth out of range.
            FilesystemError: Root missing or unreadable.
        """
        depth = self.settings.default_scan_depth if max_depth is None else max_depth
        request = ScanRequest(root_path=root_path, max_depth=depth)
        cancel = threading.Event()
        try:
            return await asyncio.to_thread(self.scanner.scan, request, cancel)
        except asyncio.CancelledError:
            cancel.set()
            logger.info("Scan of %s cancelled by caller", root_path)
            raise

    async def scan_projects(self, root_path: str, max_depth: int | None = None) -> list[Project]:
        """Scan a directory tree and return every created or updated project."""
        report = await self.run_scan(root_path, max_depth)
        catalog = await asyncio.to_thread(self.store.load)
        projects = (catalog.find_project(pid) for pid in report.project_ids)
        return [p for p in projects if p is not None]

    # ------------------------------------------------------------------
    # Project management
    # ------------------------------------------------------------------

    def _add_project(
        self,
        path: str,
        name: str | None,
        tags: Iterable[str] | None,
        description: str | None,
    ) -> Project:
        if not path or not path.strip():
            raise InvalidInputError("Project path must not be empty", path)
        directory = Path(path).expanduser()
        if not directory.is_dir():
            raise FilesystemError("Project directory does not exist", path)
        try:
            markers = read_markers(directory)
            modified = timestamp_iso(directory.stat().st_mtime)
        except OSError as exc:
            raise FilesystemError(f"Cannot read project directory: {exc}", path) from exc

        resolved = os.path.realpath(directory)
        with self.store.transaction() as catalog:
            if catalog.project_by_path(resolved) is not None:
                raise InvalidInputError("Project is already in the catalog", resolved)
            project = Project(
                id=str(uuid.uuid4()),
                name=(name or "").strip() or os.path.basename(resolved) or resolved,
                path=resolved,
                project_type=classify(markers),
                created_at=now_iso(),
                tags=_clean_tags(tags or []),
                last_modified=modified,
                display_order=max((p.display_order for p in catalog.projects), default=0) + 1,
                metadata=ProjectMetadata(description=description),
            )
            catalog.projects.append(project)
        logger.info("Added %s project %s", project.project_type.value, project.path)
        return project

    async def add_project(
        self,
        path: str,
        name: str | None = None,
        tags: Iterable[str] | None = None,
        description: str | None = None,
    ) -> Project:
        """Register a directory by hand.

        Raises:
            InvalidInputError: Empty path, or the directory is already cataloged.
            FilesystemError: The directory does not exist or cannot be read.
        """
        return await asyncio.to_thread(self._add_project, path, name, tags, description)

    async def remove_project(self, project_id: str) -> None:
        await asyncio.to_thread(self.store.delete_project, project_id)
        logger.info("Removed project %s", project_id)

    def _toggle_favorite(self, project_id: str) -> Project:
        def flip(project: Project) -> None:
            project.favorite = not project.favorite

        with self.store.project_locks.hold(project_id):
            return self.store.update_project(project_id, flip)

    async def toggle_project_favorite(self, project_id: str) -> Project:
        return await asyncio.to_thread(self._toggle_favorite, project_id)

    def _set_preferences(self, project_id: str, ide_ids: Iterable[str]) -> list[str]:
        with self.store.project_locks.hold(project_id), self.store.transaction() as catalog:
            project = catalog.require_project(project_id)
            known = []
            for ide_id in ide_ids:
                if catalog.find_ide(ide_id) is None:
                    logger.warning("Dropping unknown IDE %r from preferences of %s", ide_id, project_id)
                    continue
                known.append(ide_id)
            project.metadata.ide_preferences = PreferenceList(known).to_list()
            return list(project.metadata.ide_preferences)

    async def set_project_ide_preferences(self, project_id: str, ide_ids: Iterable[str]) -> list[str]:
        """Replace a project's preference list.

        Unknown ids are dropped, duplicates removed, and the list capped at
        three entries in the order given.

        Returns:
            The stored preference list.
        """
        return await asyncio.to_thread(self._set_preferences, project_id, list(ide_ids))

    def _set_tags(self, project_id: str, tags: Iterable[str]) -> list[str]:
        cleaned = _clean_tags(tags)

        def assign(project: Project) -> None:
            project.tags = cleaned

        with self.store.project_locks.hold(project_id):
            self.store.update_project(project_id, assign)
        return cleaned

    async def set_project_tags(self, project_id: str, tags: Iterable[str]) -> list[str]:
        return await asyncio.to_thread(self._set_tags, project_id, list(tags))

    def _reorder(self, project_ids: list[str]) -> list[Project]:
        with self.store.transaction() as catalog:
            ordered: list[Project] = []
            for project_id in dict.fromkeys(project_ids):
                ordered.append(catalog.require_project(project_id))
            chosen = {p.id for p in ordered}
            rest = sorted(
                (p for p in catalog.projects if p.id not in chosen),
                key=lambda p: p.display_order,
            )
            for position, project in enumerate([*ordered, *rest], start=1):
                project.display_order = position
            return sorted(catalog.projects, key=lambda p: p.display_order)

    async def reorder_projects(self, project_ids: Iterable[str]) -> list[Project]:
        """Assign ``displayOrder`` 1..n in the given order; others follow.

        Raises:
            NotFoundError: If any id is unknown; nothing is changed then.
        """
        return await asyncio.to_thread(self._reorder, list(project_ids))

    # ------------------------------------------------------------------
    # IDE management
    # ------------------------------------------------------------------

    def _add_ide(self, form: IdeForm) -> IdeConfig:
        executable = form.executable.strip() if form.executable else ""
        if not executable:
            raise InvalidInputError("IDE executable must not be empty", form.executable)
        name = form.name.strip() if form.name else ""
        if not name:
            name = prettify_name(executable)
        if not name:
            raise InvalidInputError("IDE name must not be empty", executable)
        template = DEFAULT_ARGS_TEMPLATE if form.args_template is None else form.args_template
        validate_template(template)

        ide = IdeConfig(
            id=str(uuid.uuid4()),
            name=name,
            executable=executable,
            args_template=template,
            icon=form.icon,
            category=form.category,
            priority=DEFAULT_PRIORITY if form.priority is None else form.priority,
        )
        with self.store.transaction() as catalog:
            catalog.ides.append(ide)
        logger.info("Added IDE %s (%s)", ide.name, ide.executable)
        return ide

    async def add_ide(self, form: IdeForm) -> IdeConfig:
        """Add a manually configured tool.

        Raises:
            InvalidInputError: Empty executable or name, or a malformed
                argument template.
        """
        return await asyncio.to_thread(self._add_ide, form)

    def _remove_ide(self, ide_id: str) -> None:
        with self.store.transaction() as catalog:
            ide = catalog.require_ide(ide_id)
            catalog.ides.remove(ide)
            for project in catalog.projects:
                prefs = PreferenceList(project.metadata.ide_preferences)
                if ide_id in prefs:
                    prefs.discard(ide_id)
                    project.metadata.ide_preferences = prefs.to_list()
        logger.info("Removed IDE %s", ide_id)

    async def remove_ide(self, ide_id: str) -> None:
        """Remove a tool and strip it from every project's preferences."""
        await asyncio.to_thread(self._remove_ide, ide_id)

    async def scan_ides(self) -> list[IdeConfig]:
        """Propose detected tools without persisting them."""
        catalog = await asyncio.to_thread(self.store.load)
        return await asyncio.to_thread(self.detector.detect, catalog)

    def _add_detected(self) -> list[IdeConfig]:
        # Host probing runs on a snapshot; only the append holds the store lock.
        proposals = self.detector.detect(self.store.load())
        with self.store.transaction() as catalog:
            added = self.detector.unclaimed(proposals, catalog)
            catalog.ides.extend(added)
        return added

    async def add_detected_ides(self) -> list[IdeConfig]:
        """Detect tools and persist the new ones; returns only those added."""
        return await asyncio.to_thread(self._add_detected)

    def _set_icon(self, ide_id: str, file_path: str) -> IdeConfig:
        self.store.get_ide(ide_id)
        icon = icon_from_file(file_path, self.platform, self.settings.icon_max_bytes)
        with self.store.transaction() as catalog:
            ide = catalog.require_ide(ide_id)
            ide.icon = icon
            return ide

    async def set_ide_icon_from_file(self, ide_id: str, file_path: str) -> IdeConfig:
        """Replace a tool's icon with one built from ``file_path``.

        Raises:
            NotFoundError: Unknown IDE id.
            FilesystemError: The file is missing or unreadable.
            InvalidInputError: Unsupported file, or no icon derivable.
        """
        return await asyncio.to_thread(self._set_icon, ide_id, file_path)

    # ------------------------------------------------------------------
    # Launching
    # ------------------------------------------------------------------

    async def launch_project(
        self,
        project_id: str,
        ide_id: str | None = None,
        preferences: Iterable[str] | None = None,
        wait: bool = False,
    ) -> LaunchOutcome:
        prefs = list(preferences) if preferences is not None else None
        return await asyncio.to_thread(self.launcher.launch, project_id, ide_id, prefs, wait)

    # ------------------------------------------------------------------
    # Language statistics
    # ------------------------------------------------------------------

    def _refresh_stats(self, project_id: str) -> LanguageStats:
        with self.store.project_locks.hold(project_id):
            project = self.store.get_project(project_id)
            stats = self.stats_engine.analyze(project.path)

            def replace(target: Project) -> None:
                target.metadata.language_stats = stats

            self.store.update_project(project_id, replace)
        logger.info(
            "Language statistics for %s: %d lines in %d language(s)",
            project.path, stats.total_lines, len(stats.languages),
        )
        return stats

    async def scan_project_language_stats(self, project_id: str) -> LanguageStats:
        """Recompute and store a project's language statistics.

        Raises:
            NotFoundError: Unknown project id.
            FilesystemError: The project directory is missing or unreadable.
        """
        return await asyncio.to_thread(self._refresh_stats, project_id)

    async def get_project_language_stats(self, project_id: str) -> LanguageStats | None:
        project = await asyncio.to_thread(self.store.get_project, project_id)
        return project.metadata.language_stats

    # ------------------------------------------------------------------
    # Shell integration
    # ------------------------------------------------------------------

    def _reveal(self, path: str, terminal: bool) -> None:
        directory = Path(path).expanduser()
        if not directory.is_dir():
            raise FilesystemError("Directory does not exist", path)
        target = str(directory)
        if terminal:
            argv = self.platform.terminal_command(target)
            if argv is None:
                raise LaunchFailedError("No terminal emulator found", target)
        else:
            argv = self.platform.file_manager_command(target)
        try:
            spawn_detached(argv, target, self.platform)
        except OSError as exc:
            raise LaunchFailedError(f"Failed to run {argv[0]}: {exc}", target) from exc

    async def open_in_file_manager(self, path: str) -> None:
        await asyncio.to_thread(self._reveal, path, False)

    async def open_in_terminal(self, path: str) -> None:
        await asyncio.to_thread(self._reveal, path, True)

