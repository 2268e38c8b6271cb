"""Tests for the language statistics engine.

Covers line counting rules, language mapping, exclusions, aggregation
order and percentages, empty projects and unreadable roots.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from devboom.core.language_stats import (
    LanguageStatsEngine,
    _Tally,
    aggregate,
    count_lines,
    detect_language,
)
from devboom.exceptions import FilesystemError

from tests.helpers import make_tree


# ---------------------------------------------------------------------------
# count_lines
# ---------------------------------------------------------------------------


class TestCountLines:
    """Terminator counting with an unterminated tail."""

    @pytest.mark.parametrize(("content", "expected"), [
        (b"", 0),
        (b"one", 1),
        (b"one\n", 1),
        (b"one\ntwo", 2),
        (b"one\ntwo\n", 2),
        (b"\n\n\n", 3),
        (b"a\r\nb\r\n", 2),
    ])
    def test_counts(self, tmp_path: Path, content: bytes, expected: int) -> None:
        path = tmp_path / "f.txt"
        path.write_bytes(content)
        assert count_lines(path) == expected

    def test_binary_returns_none(self, tmp_path: Path) -> None:
        path = tmp_path / "blob.py"
        path.write_bytes(b"abc\x00def\n")
        assert count_lines(path) is None

    def test_nul_after_sniff_window_is_text(self, tmp_path: Path) -> None:
        path = tmp_path / "late.py"
        path.write_bytes(b"x\n" * 5000 + b"\x00")
        assert count_lines(path) == 5001

    def test_large_file_spans_chunks(self, tmp_path: Path) -> None:
        path = tmp_path / "big.py"
        path.write_bytes(b"line\n" * 50_000)
        assert count_lines(path) == 50_000


class TestCountLinesProperties:
    """``count_lines`` agrees with ``str.splitlines`` on plain text."""

    @settings(max_examples=50)
    @given(st.text(alphabet="ab \n", max_size=200))
    def test_matches_splitlines(self, tmp_path_factory: pytest.TempPathFactory, text: str) -> None:
        path = tmp_path_factory.mktemp("lines") / "sample.txt"
        path.write_text(text, newline="")
        assert count_lines(path) == len(text.splitlines())


# ---------------------------------------------------------------------------
# detect_language
# ---------------------------------------------------------------------------


class TestDetectLanguage:
    """Extension and file-name mapping."""

    @pytest.mark.parametrize(("name", "expected"), [
        ("main.rs", "Rust"),
        ("index.TS", "TypeScript"),
        ("app.py", "Python"),
        ("Dockerfile", "Dockerfile"),
        ("Makefile", "Makefile"),
        ("CMakeLists.txt", "CMake"),
        ("Jenkinsfile", "Groovy"),
    ])
    def test_mapped(self, name: str, expected: str) -> None:
        assert detect_language(name) == expected

    @pytest.mark.parametrize("name", ["LICENSE", "photo.png", "data.bin", "notes.txt"])
    def test_unmapped(self, name: str) -> None:
        assert detect_language(name) is None

    def test_extra_extensions(self) -> None:
        engine = LanguageStatsEngine(extra_extensions={".J2": "Jinja"})
        assert detect_language("page.j2", engine.extensions) == "Jinja"


# ---------------------------------------------------------------------------
# LanguageStatsEngine.analyze
# ---------------------------------------------------------------------------


@pytest.fixture
def mixed_project(tmp_path: Path) -> Path:
    """Python 3 lines, Rust 3 lines, Dockerfile 2 lines, Markdown 0 lines."""
    return make_tree(tmp_path / "mixed", {
        "a.py": "x = 1\ny = 2\n",
        "pkg/b.py": "z = 3",
        "src/main.rs": "fn main() {\n}\n// end\n",
        "Dockerfile": "FROM python\nRUN true\n",
        "README.md": "",
        "blob.py": b"\x00\x01\x02",
        "LICENSE": "MIT\n",
        "node_modules/dep/index.js": "a\n" * 100,
        "static/app.min.js": "var a;\n" * 10,
        "package-lock.json": "{}\n",
        "target/debug/gen.rs": "x\n" * 40,
    })


class TestAnalyze:
    """End-to-end statistics for a project tree."""

    def test_totals(self, mixed_project: Path) -> None:
        stats = LanguageStatsEngine().analyze(mixed_project)
        assert stats.total_lines == 8
        assert stats.total_lines == sum(e.lines for e in stats.languages)

    def test_order_and_ties(self, mixed_project: Path) -> None:
        stats = LanguageStatsEngine().analyze(mixed_project)
        assert [e.language for e in stats.languages] == ["Python", "Rust", "Dockerfile", "Markdown"]

    def test_entry_details(self, mixed_project: Path) -> None:
        stats = LanguageStatsEngine().analyze(mixed_project)
        python = stats.languages[0]
        assert (python.files, python.lines, python.percentage) == (2, 3, 37.5)
        markdown = stats.languages[-1]
        assert (markdown.files, markdown.lines, markdown.percentage) == (1, 0, 0.0)

    def test_percentages_sum_to_100(self, mixed_project: Path) -> None:
        stats = LanguageStatsEngine().analyze(mixed_project)
        assert sum(e.percentage for e in stats.languages) == pytest.approx(100.0, abs=0.05)

    def test_same_tree_same_report(self, mixed_project: Path) -> None:
        engine = LanguageStatsEngine()
        first = engine.analyze(mixed_project)
        second = engine.analyze(mixed_project)
        assert first.languages == second.languages
        assert first.total_lines == second.total_lines

    def test_empty_project(self, tmp_path: Path) -> None:
        stats = LanguageStatsEngine().analyze(tmp_path)
        assert stats.total_lines == 0
        assert stats.languages == []
        assert stats.scanned_at

    def test_only_binary_and_empty_files(self, tmp_path: Path) -> None:
        make_tree(tmp_path, {"a.py": b"\x00", "b.md": ""})
        stats = LanguageStatsEngine().analyze(tmp_path)
        assert stats.total_lines == 0
        assert stats.languages == []

    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(FilesystemError):
            LanguageStatsEngine().analyze(tmp_path / "gone")

    def test_file_as_root(self, tmp_path: Path) -> None:
        path = tmp_path / "file.py"
        path.write_text("x\n")
        with pytest.raises(FilesystemError):
            LanguageStatsEngine().analyze(path)


# ---------------------------------------------------------------------------
# aggregate
# ---------------------------------------------------------------------------


class TestAggregateProperties:
    """Consistency of totals and percentages for arbitrary tallies."""

    tallies = st.dictionaries(
        keys=st.sampled_from(["Python", "Rust", "Go", "C", "Shell", "YAML"]),
        values=st.builds(
            _Tally,
            files=st.integers(min_value=1, max_value=50),
            lines=st.integers(min_value=0, max_value=10_000),
        ),
    )

    @given(tallies)
    def test_total_is_sum(self, tallies: dict[str, _Tally]) -> None:
        stats = aggregate(tallies)
        assert stats.total_lines == sum(e.lines for e in stats.languages)

    @given(tallies)
    def test_percentages(self, tallies: dict[str, _Tally]) -> None:
        stats = aggregate(tallies)
        if stats.total_lines == 0:
            assert stats.languages == []
        else:
            total = sum(e.percentage for e in stats.languages)
            assert total == pytest.approx(100.0, abs=0.01 * len(stats.languages))

    @given(tallies)
    def test_sorted(self, tallies: dict[str, _Tally]) -> None:
        keys = [(-e.lines, e.language) for e in aggregate(tallies).languages]
        assert keys == sorted(keys)
