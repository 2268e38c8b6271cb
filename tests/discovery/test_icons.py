"""Tests for icon data URIs built from image files and executables."""

from __future__ import annotations

import base64
from pathlib import Path

import pytest

from devboom.discovery.icons import icon_from_file, image_to_data_uri
from devboom.exceptions import FilesystemError, InvalidInputError

from tests.helpers import FakePlatform, make_executable

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class TestImageFiles:
    """Images are embedded as-is."""

    @pytest.mark.parametrize(("suffix", "mime"), [
        (".png", "image/png"),
        (".svg", "image/svg+xml"),
        (".ico", "image/x-icon"),
        (".jpg", "image/jpeg"),
        (".JPEG", "image/jpeg"),
        (".webp", "image/webp"),
    ])
    def test_mime_types(self, tmp_path: Path, suffix: str, mime: str) -> None:
        path = tmp_path / f"icon{suffix}"
        path.write_bytes(PNG_BYTES)
        uri = icon_from_file(path, FakePlatform())
        prefix = f"data:{mime};source=user-file-v1;base64,"
        assert uri.startswith(prefix)
        assert base64.b64decode(uri[len(prefix):]) == PNG_BYTES

    def test_empty_image_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.png"
        path.write_bytes(b"")
        with pytest.raises(InvalidInputError):
            icon_from_file(path, FakePlatform())

    def test_oversized_image_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "huge.png"
        path.write_bytes(b"x" * 2048)
        with pytest.raises(InvalidInputError):
            image_to_data_uri(path, max_bytes=1024)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FilesystemError):
            icon_from_file(tmp_path / "nope.png", FakePlatform())

    def test_unsupported_file(self, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        path.chmod(0o644)
        with pytest.raises(InvalidInputError):
            icon_from_file(path, FakePlatform())


class TestExecutables:
    """Executables go through the platform's icon lookup."""

    def test_derived_icon(self, tmp_path: Path) -> None:
        tool = make_executable(tmp_path / "tool")
        image = tmp_path / "tool.svg"
        image.write_text("<svg/>")
        uri = icon_from_file(tool, FakePlatform(icons={str(tool): image}))
        assert uri.startswith("data:image/svg+xml;source=user-file-v1;base64,")

    def test_windows_launcher_without_icon(self, tmp_path: Path) -> None:
        script = tmp_path / "tool.cmd"
        script.write_text("@echo off\n")
        with pytest.raises(InvalidInputError):
            icon_from_file(script, FakePlatform())

    def test_executable_without_icon(self, tmp_path: Path) -> None:
        tool = make_executable(tmp_path / "tool")
        with pytest.raises(InvalidInputError):
            icon_from_file(tool, FakePlatform())
