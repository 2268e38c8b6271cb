"""Tests for the JSON catalog store.

Covers seeding, round-tripping through disk, transactional rollback,
corrupt-file recovery, atomic replacement and concurrent writers.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from devboom.core.models import (
    IdeConfig,
    LanguageEntry,
    LanguageStats,
    Project,
    ProjectMetadata,
    ProjectType,
    now_iso,
)
from devboom.exceptions import FilesystemError, NotFoundError
from devboom.store.json_store import CORRUPT_SUFFIX, Catalog, JsonStore, KeyedLocks


def _project(name: str, path: str) -> Project:
    return Project(
        id=f"id-{name}",
        name=name,
        path=path,
        project_type=ProjectType.PYTHON,
        created_at=now_iso(),
    )


class TestSeedAndRoundTrip:
    """Reading a store that does not exist, and writing it back."""

    def test_missing_file_yields_seed(self, store: JsonStore) -> None:
        catalog = store.load()
        assert [i.id for i in catalog.ides] == ["vscode", "cursor"]
        assert catalog.projects == []
        assert not store.path.exists()

    def test_transaction_persists(self, store: JsonStore, tmp_path: Path) -> None:
        with store.transaction() as catalog:
            catalog.projects.append(_project("alpha", str(tmp_path)))
        assert store.path.exists()
        assert store.load().projects[0].name == "alpha"

    def test_camel_case_layout(self, store: JsonStore, tmp_path: Path) -> None:
        project = _project("alpha", str(tmp_path))
        project.metadata = ProjectMetadata(
            ide_preferences=["vscode"],
            language_stats=LanguageStats(
                total_lines=10,
                languages=[LanguageEntry("Python", 1, 10, 100.0)],
                scanned_at=now_iso(),
            ),
        )
        with store.transaction() as catalog:
            catalog.projects.append(project)
        raw = json.loads(store.path.read_text())
        stored = raw["projects"][0]
        assert stored["projectType"] == "Python"
        assert stored["metadata"]["idePreferences"] == ["vscode"]
        assert stored["metadata"]["languageStats"]["totalLines"] == 10
        assert raw["ides"][0]["argsTemplate"] == "{projectPath}"
        assert store.load().projects[0] == project

    def test_older_files_without_optional_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "store.json"
        path.write_text(json.dumps({
            "projects": [{"id": "p", "name": "p", "path": str(tmp_path)}],
            "ides": [{"id": "x", "name": "X", "executable": "x"}],
        }))
        catalog = JsonStore(path).load()
        assert catalog.projects[0].project_type is ProjectType.GENERIC
        assert catalog.ides[0].args_template == "{projectPath}"

    def test_empty_args_template_is_preserved(self, store: JsonStore) -> None:
        with store.transaction() as catalog:
            catalog.ides.append(IdeConfig(id="claude", name="Claude CLI", executable="claude",
                                          args_template=""))
        assert store.get_ide("claude").args_template == ""


class TestTransactions:
    """Failed blocks never write."""

    def test_exception_rolls_back(self, store: JsonStore, tmp_path: Path) -> None:
        with store.transaction() as catalog:
            catalog.projects.append(_project("alpha", str(tmp_path)))
        with pytest.raises(RuntimeError):
            with store.transaction() as catalog:
                catalog.projects.clear()
                raise RuntimeError("boom")
        assert len(store.load().projects) == 1

    def test_update_unknown_project(self, store: JsonStore) -> None:
        with pytest.raises(NotFoundError):
            store.update_project("nope", lambda p: None)

    def test_delete_project(self, store: JsonStore, tmp_path: Path) -> None:
        with store.transaction() as catalog:
            catalog.projects.append(_project("alpha", str(tmp_path)))
        store.delete_project("id-alpha")
        assert store.load().projects == []
        with pytest.raises(NotFoundError):
            store.delete_project("id-alpha")

    def test_failed_write_keeps_old_file(self, store: JsonStore, tmp_path: Path) -> None:
        with store.transaction() as catalog:
            catalog.projects.append(_project("alpha", str(tmp_path)))
        before = store.path.read_text()
        with patch("devboom.store.json_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(FilesystemError):
                with store.transaction() as catalog:
                    catalog.projects.clear()
        assert store.path.read_text() == before
        leftovers = [p for p in store.path.parent.iterdir() if p.suffix == ".tmp"]
        assert leftovers == []


class TestCorruptRecovery:
    """Unparseable stores are moved aside."""

    @pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]", '{"projects": [{"id": 1}]}'])
    def test_moved_aside_and_reseeded(self, store: JsonStore, content: str) -> None:
        store.path.parent.mkdir(parents=True, exist_ok=True)
        store.path.write_text(content)
        catalog = store.load()
        assert [i.id for i in catalog.ides] == ["vscode", "cursor"]
        backup = store.path.with_name(store.path.name + CORRUPT_SUFFIX)
        assert backup.read_text() == content
        assert not store.path.exists()


class TestCatalogLookups:
    """Path-keyed lookups normalize the path."""

    def test_project_by_path(self, tmp_path: Path) -> None:
        (tmp_path / "proj").mkdir()
        catalog = Catalog(projects=[_project("proj", str(tmp_path / "proj"))])
        assert catalog.project_by_path(str(tmp_path / "proj" / ".." / "proj")) is not None
        assert catalog.project_by_path(str(tmp_path)) is None


class TestConcurrency:
    """Concurrent transactions never lose updates."""

    def test_parallel_appends(self, store: JsonStore, tmp_path: Path) -> None:
        def add(index: int) -> None:
            with store.transaction() as catalog:
                catalog.projects.append(_project(f"p{index}", str(tmp_path / f"p{index}")))

        threads = [threading.Thread(target=add, args=(i,)) for i in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert len(store.load().projects) == 16


class TestProjectLocks:
    """Per-project locks are created on demand and evicted on delete."""

    def test_delete_forgets_lock(self, store: JsonStore, tmp_path: Path) -> None:
        with store.transaction() as catalog:
            catalog.projects.append(_project("a", str(tmp_path / "a")))
        with store.project_locks.hold("id-a"):
            pass
        assert "id-a" in store.project_locks
        store.delete_project("id-a")
        assert "id-a" not in store.project_locks

    def test_failed_delete_leaves_no_lock(self, store: JsonStore) -> None:
        with pytest.raises(NotFoundError):
            store.delete_project("ghost")
        assert "ghost" not in store.project_locks

    def test_forget_unknown_key(self) -> None:
        locks = KeyedLocks()
        locks.forget("never-held")
        assert "never-held" not in locks
