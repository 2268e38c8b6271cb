"""Shared fixtures for CLI tests.

Every invocation gets its own data directory and the scriptable
``FakePlatform`` from the top-level conftest, so CLI tests never read the
user's catalog or probe the real machine for installed tools.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner, Result

from devboom.cli.main import cli

from tests.helpers import FakePlatform


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _cli_platform(monkeypatch: pytest.MonkeyPatch, fake_platform: FakePlatform) -> None:
    """Make services built by the CLI use the fake platform."""
    monkeypatch.setattr("devboom.service.current_platform", lambda: fake_platform)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "devboom-data"


@pytest.fixture
def invoke(runner: CliRunner, data_dir: Path) -> Callable[..., Result]:
    """Run ``devboom --data-dir <tmp> <args...>``."""

    def _invoke(*args: str) -> Result:
        return runner.invoke(cli, ["--data-dir", str(data_dir), *args])

    return _invoke


@pytest.fixture
def invoke_json(invoke: Callable[..., Result]) -> Callable[..., Any]:
    """Run a command with ``--format json`` and decode its output.

    Fails the test if the command does not exit 0.
    """

    def _invoke_json(*args: str) -> Any:
        result = invoke(*args, "--format", "json")
        assert result.exit_code == 0, result.output
        return json.loads(result.output)

    return _invoke_json
