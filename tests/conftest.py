"""Shared fixtures for devboom tests."""

from __future__ import annotations

import pathlib

import pytest

from devboom.config import Settings
from devboom.discovery.ide_registry import default_ides
from devboom.service import DevBoomService
from devboom.store.json_store import Catalog, JsonStore

from tests.helpers import FakePlatform


@pytest.fixture
def store(tmp_path: pathlib.Path) -> JsonStore:
    """A fresh store seeded with the default IDE catalog."""
    return JsonStore(tmp_path / "data" / "store.json", seed=lambda: Catalog(ides=default_ides()))


@pytest.fixture
def fake_platform() -> FakePlatform:
    """A platform that finds nothing unless told otherwise."""
    return FakePlatform()


@pytest.fixture
def settings(tmp_path: pathlib.Path) -> Settings:
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture
def service(settings: Settings, fake_platform: FakePlatform) -> DevBoomService:
    return DevBoomService(settings, platform=fake_platform)


@pytest.fixture
def workspace(tmp_path: pathlib.Path) -> pathlib.Path:
    """A directory holding two projects and an empty folder.

    Layout::

        workspace/
            proj1/Cargo.toml
            proj2/package.json
            proj3/
    """
    root = tmp_path / "workspace"
    (root / "proj1").mkdir(parents=True)
    (root / "proj1" / "Cargo.toml").write_text('[package]\nname = "proj1"\n')
    (root / "proj2").mkdir()
    (root / "proj2" / "package.json").write_text('{"name": "proj2"}\n')
    (root / "proj3").mkdir()
    return root
