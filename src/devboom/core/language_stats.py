"""Language statistics engine: per-language file and line counts.

Walks a project tree (honouring the shared ``IgnorePolicy``), maps every
regular file to a language label by extension or well-known file name,
counts its lines, and aggregates the result into a ``LanguageStats``.

Counting Rules:
    - Unmapped extensions are skipped, never reported as "Unknown".
    - A NUL byte in the first 8 KiB marks a file as binary; it is skipped.
    - Lines are ``\\n`` terminators, plus one for a trailing segment that
      lacks a terminator. ``\\r\\n`` therefore counts once.
    - Unreadable files and directories are skipped and counted, never
      raised; only an unreadable project root fails the run.

Output Ordering:
    Entries are sorted by descending line count, ties by language name,
    so the same tree always produces the same report.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

from devboom.core.ignore import DEFAULT_POLICY, IgnorePolicy
from devboom.core.models import LanguageEntry, LanguageStats, now_iso
from devboom.exceptions import FilesystemError

logger = logging.getLogger(__name__)

BINARY_SNIFF_BYTES = 8192
_READ_CHUNK = 1 << 16

EXTENSION_LANGUAGES: dict[str, str] = {
    # -- systems --
    ".rs": "Rust",
    ".c": "C",
    ".h": "C",
    ".cc": "C++",
    ".cpp": "C++",
    ".cxx": "C++",
    ".hh": "C++",
    ".hpp": "C++",
    ".hxx": "C++",
    ".go": "Go",
    ".zig": "Zig",
    ".swift": "Swift",
    ".m": "Objective-C",
    ".mm": "Objective-C++",
    # -- JVM / .NET --
    ".java": "Java",
    ".kt": "Kotlin",
    ".kts": "Kotlin",
    ".scala": "Scala",
    ".groovy": "Groovy",
    ".gradle": "Groovy",
    ".clj": "Clojure",
    ".cs": "C#",
    ".fs": "F#",
    ".vb": "Visual Basic",
    # -- scripting --
    ".py": "Python",
    ".pyi": "Python",
    ".pyx": "Cython",
    ".rb": "Ruby",
    ".php": "PHP",
    ".pl": "Perl",
    ".pm": "Perl",
    ".lua": "Lua",
    ".r": "R",
    ".jl": "Julia",
    ".dart": "Dart",
    ".ex": "Elixir",
    ".exs": "Elixir",
    ".erl": "Erlang",
    ".hs": "Haskell",
    ".ml": "OCaml",
    ".sh": "Shell",
    ".bash": "Shell",
    ".zsh": "Shell",
    ".fish": "Shell",
    ".ps1": "PowerShell",
    ".bat": "Batch",
    ".cmd": "Batch",
    # -- web --
    ".js": "JavaScript",
    ".mjs": "JavaScript",
    ".cjs": "JavaScript",
    ".jsx": "JavaScript",
    ".ts": "TypeScript",
    ".mts": "TypeScript",
    ".cts": "TypeScript",
    ".tsx": "TypeScript",
    ".vue": "Vue",
    ".svelte": "Svelte",
    ".html": "HTML",
    ".htm": "HTML",
    ".css": "CSS",
    ".scss": "SCSS",
    ".sass": "Sass",
    ".less": "Less",
    # -- data / config / docs --
    ".sql": "SQL",
    ".json": "JSON",
    ".yaml": "YAML",
    ".yml": "YAML",
    ".toml": "TOML",
    ".xml": "XML",
    ".md": "Markdown",
    ".markdown": "Markdown",
    ".rst": "reStructuredText",
    ".proto": "Protocol Buffers",
    ".graphql": "GraphQL",
    ".tf": "HCL",
    ".cmake": "CMake",
}

FILENAME_LANGUAGES: dict[str, str] = {
    "Dockerfile": "Dockerfile",
    "Containerfile": "Dockerfile",
    "Makefile": "Makefile",
    "GNUmakefile": "Makefile",
    "CMakeLists.txt": "CMake",
    "Jenkinsfile": "Groovy",
    "Rakefile": "Ruby",
    "Gemfile": "Ruby",
}


def detect_language(
    filename: str,
    extensions: Mapping[str, str] = EXTENSION_LANGUAGES,
) -> str | None:
    """Map a file name to a language label, or None if unmapped.

    Exact file names win over extensions; extensions match case-insensitively.
    """
    by_name = FILENAME_LANGUAGES.get(filename)
    if by_name is not None:
        return by_name
    _, ext = os.path.splitext(filename)
    if not ext:
        return None
    return extensions.get(ext.lower())


def count_lines(path: Path) -> int | None:
    """Count the lines of a text file.

    Returns:
        The line count, or None if the file looks binary.

    Raises:
        OSError: If the file cannot be read.
    """
    lines = 0
    last_byte = b""
    with path.open("rb") as handle:
        head = handle.read(BINARY_SNIFF_BYTES)
        if b"\x00" in head:
            return None
        chunk = head
        while chunk:
            lines += chunk.count(b"\n")
            last_byte = chunk[-1:]
            chunk = handle.read(_READ_CHUNK)
    if last_byte and last_byte != b"\n":
        lines += 1
    return lines


@dataclass
class _Tally:
    files: int = 0
    lines: int = 0


class LanguageStatsEngine:
    """Computes ``LanguageStats`` for a project directory.

    Args:
        policy: Directory and generated-file exclusions.
        extra_extensions: Additional ``extension -> language`` mappings
            merged over the built-in table.
    """

    def __init__(
        self,
        policy: IgnorePolicy = DEFAULT_POLICY,
        extra_extensions: Mapping[str, str] | None = None,
    ) -> None:
        self.policy = policy
        self.extensions: dict[str, str] = dict(EXTENSION_LANGUAGES)
        if extra_extensions:
            self.extensions.update({k.lower(): v for k, v in extra_extensions.items()})

    def _walk_files(self, root: Path, errors: list[str]) -> Iterator[Path]:
        def on_error(exc: OSError) -> None:
            errors.append(f"{exc.filename}: {exc.strerror or exc}")
            logger.warning("Skipping unreadable directory %s: %s", exc.filename, exc)

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            dirnames[:] = sorted(d for d in dirnames if not self.policy.skip_dir(d))
            for name in sorted(filenames):
                if self.policy.skip_file(name):
                    continue
                yield Path(dirpath) / name

    def analyze(self, project_path: str | Path) -> LanguageStats:
        """Profile the source composition of a project.

        Args:
            project_path: Root directory of the project.

        Returns:
            A new ``LanguageStats`` stamped with the current time.

        Raises:
            FilesystemError: If the project root is missing or unreadable.
        """
        root = Path(project_path)
        if not root.is_dir():
            raise FilesystemError("Project directory does not exist", str(root))
        if not os.access(root, os.R_OK | os.X_OK):
            raise FilesystemError("Project directory is not readable", str(root))

        errors: list[str] = []
        tallies: dict[str, _Tally] = {}
        for path in self._walk_files(root, errors):
            language = detect_language(path.name, self.extensions)
            if language is None:
                continue
            try:
                if not path.is_file():
                    continue
                lines = count_lines(path)
            except OSError as exc:
                errors.append(f"{path}: {exc.strerror or exc}")
                logger.debug("Skipping unreadable file %s: %s", path, exc)
                continue
            if lines is None:
                logger.debug("Skipping binary file %s", path)
                continue
            tally = tallies.setdefault(language, _Tally())
            tally.files += 1
            tally.lines += lines

        return aggregate(tallies, skipped_files=len(errors))


def aggregate(tallies: Mapping[str, _Tally], skipped_files: int = 0) -> LanguageStats:
    """Turn per-language tallies into a sorted ``LanguageStats``."""
    total = sum(t.lines for t in tallies.values())
    entries: list[LanguageEntry] = []
    if total > 0:
        for language, tally in tallies.items():
            entries.append(LanguageEntry(
                language=language,
                files=tally.files,
                lines=tally.lines,
                percentage=round(tally.lines / total * 100, 2),
            ))
        entries.sort(key=lambda e: (-e.lines, e.language))
    return LanguageStats(
        total_lines=total,
        languages=entries,
        scanned_at=now_iso(),
        skipped_files=skipped_files,
    )
