"""Tests for ``devboom scan`` and ``devboom projects``.

Verifies:
    - Scanning the two-projects-and-an-empty-folder workspace.
    - JSON payloads use camelCase keys.
    - Re-scans do not duplicate entries.
    - Project add / favorite / tags / prefs / reorder / remove round trip.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import patch

from click.testing import Result


class TestScanCommand:
    """Tests for ``devboom scan``."""

    def test_text_output(self, invoke: Callable[..., Result], workspace: Path) -> None:
        result = invoke("scan", str(workspace), "--depth", "2")
        assert result.exit_code == 0, result.output
        assert "proj1" in result.output
        assert "proj2" in result.output
        assert "2 project(s)" in result.output

    def test_json_output(self, invoke_json: Callable[..., Any], workspace: Path) -> None:
        data = invoke_json("scan", str(workspace), "-d", "2")
        types = {p["name"]: p["projectType"] for p in data["projects"]}
        assert types == {"proj1": "Rust", "proj2": "Nodejs"}
        assert data["skipped"] == 0
        assert data["cancelled"] is False
        assert {"id", "path", "createdAt", "displayOrder", "metadata"} <= set(data["projects"][0])

    def test_rescan_is_idempotent(self, invoke_json: Callable[..., Any], workspace: Path) -> None:
        first = invoke_json("scan", str(workspace))
        second = invoke_json("scan", str(workspace))
        assert sorted(p["id"] for p in first["projects"]) == sorted(p["id"] for p in second["projects"])
        assert len(invoke_json("projects", "list")) == 2

    def test_missing_root(self, invoke: Callable[..., Result], tmp_path: Path) -> None:
        result = invoke("scan", str(tmp_path / "missing"))
        assert result.exit_code == 1
        assert "Error [Io]" in result.output

    def test_depth_out_of_range(self, invoke: Callable[..., Result], workspace: Path) -> None:
        result = invoke("scan", str(workspace), "--depth", "99")
        assert result.exit_code == 1
        assert "Error [InvalidInput]" in result.output


class TestProjectsCommands:
    """Tests for the ``devboom projects`` group."""

    def test_empty_list(self, invoke: Callable[..., Result]) -> None:
        result = invoke("projects", "list")
        assert result.exit_code == 0
        assert "No projects found" in result.output

    def test_add_and_list(self, invoke_json: Callable[..., Any], workspace: Path) -> None:
        added = invoke_json(
            "projects", "add", str(workspace / "proj2"),
            "--name", "Frontend", "--tag", "web", "--description", "Storefront",
        )
        assert added["name"] == "Frontend"
        assert added["projectType"] == "Nodejs"
        assert added["tags"] == ["web"]
        assert added["metadata"]["description"] == "Storefront"
        listed = invoke_json("projects", "list", "--tag", "web")
        assert [p["id"] for p in listed] == [added["id"]]
        assert invoke_json("projects", "list", "--tag", "other") == []

    def test_add_duplicate(self, invoke: Callable[..., Result], workspace: Path) -> None:
        assert invoke("projects", "add", str(workspace / "proj1")).exit_code == 0
        result = invoke("projects", "add", str(workspace / "proj1"))
        assert result.exit_code == 1
        assert "Error [InvalidInput]" in result.output

    def test_favorite_toggle(self, invoke: Callable[..., Result], invoke_json, workspace: Path) -> None:
        project_id = invoke_json("projects", "add", str(workspace / "proj1"))["id"]
        result = invoke("projects", "favorite", project_id)
        assert result.exit_code == 0
        assert "now a favourite" in result.output
        assert [p["id"] for p in invoke_json("projects", "list", "--favorites")] == [project_id]

    def test_tags_and_prefs(self, invoke: Callable[..., Result], invoke_json, workspace: Path) -> None:
        project_id = invoke_json("projects", "add", str(workspace / "proj1"))["id"]
        assert invoke("projects", "tags", project_id, "rust", "cli").exit_code == 0
        result = invoke("projects", "prefs", project_id, "cursor", "unknown", "vscode")
        assert result.exit_code == 0
        assert "cursor, vscode" in result.output
        project = invoke_json("projects", "list")[0]
        assert project["tags"] == ["rust", "cli"]
        assert project["metadata"]["idePreferences"] == ["cursor", "vscode"]

    def test_reorder(self, invoke_json: Callable[..., Any], workspace: Path) -> None:
        first = invoke_json("projects", "add", str(workspace / "proj1"))["id"]
        second = invoke_json("projects", "add", str(workspace / "proj2"))["id"]
        ordered = invoke_json("projects", "reorder", second)
        assert [(p["id"], p["displayOrder"]) for p in ordered] == [(second, 1), (first, 2)]

    def test_remove(self, invoke: Callable[..., Result], invoke_json, workspace: Path) -> None:
        project_id = invoke_json("projects", "add", str(workspace / "proj1"))["id"]
        assert invoke("projects", "remove", project_id).exit_code == 0
        assert invoke_json("projects", "list") == []
        result = invoke("projects", "remove", project_id)
        assert result.exit_code == 1
        assert "Error [NotFound]" in result.output

    def test_reveal(self, invoke: Callable[..., Result], invoke_json, workspace: Path) -> None:
        added = invoke_json("projects", "add", str(workspace / "proj1"))
        with patch("devboom.launch.orchestrator.subprocess.Popen") as popen:
            result = invoke("projects", "reveal", added["id"])
        assert result.exit_code == 0, result.output
        assert popen.call_args.args[0] == ["fake-open", added["path"]]

    def test_terminal(self, invoke: Callable[..., Result], invoke_json, workspace: Path) -> None:
        added = invoke_json("projects", "add", str(workspace / "proj1"))
        with patch("devboom.launch.orchestrator.subprocess.Popen") as popen:
            result = invoke("projects", "terminal", added["id"])
        assert result.exit_code == 0, result.output
        assert popen.call_args.args[0] == ["fake-term"]
        assert popen.call_args.kwargs["cwd"] == added["path"]
