"""Catalog data models: projects, IDE configs, language statistics.

These are plain dataclasses with no I/O. Each persisted type offers a
``to_dict``/``from_dict`` pair using camelCase keys, which is the on-disk
layout of ``store.json`` and the payload shape handed to UIs. ``from_dict``
tolerates missing optional keys so older store files keep loading.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

DEFAULT_ARGS_TEMPLATE = "{projectPath}"
DEFAULT_PRIORITY = 200


def now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def timestamp_iso(epoch_seconds: float) -> str:
    """Convert a POSIX timestamp (e.g. ``st_mtime``) to ISO-8601 UTC."""
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ProjectType(Enum):
    """Project kinds recognised by the classifier."""

    RUST = "Rust"
    NODEJS = "Nodejs"
    PYTHON = "Python"
    JAVA = "Java"
    GO = "Go"
    DOTNET = "Dotnet"
    GENERIC = "Generic"


class IdeCategory(Enum):
    """Closed set of launch behaviours for configured tools."""

    GUI = "Gui"
    CLI = "Cli"
    TERMINAL = "Terminal"
    BROWSER = "Browser"


# ---------------------------------------------------------------------------
# Language statistics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LanguageEntry:
    """Aggregated line statistics for one language within a project."""

    language: str
    files: int
    lines: int
    percentage: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "files": self.files,
            "lines": self.lines,
            "percentage": self.percentage,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LanguageEntry:
        return cls(
            language=data["language"],
            files=int(data.get("files", 0)),
            lines=int(data.get("lines", 0)),
            percentage=float(data.get("percentage", 0.0)),
        )


@dataclass(frozen=True)
class LanguageStats:
    """Snapshot of a project's source composition.

    Attributes:
        total_lines: Sum of ``lines`` across all entries.
        languages: Entries sorted by descending lines, then language name.
        scanned_at: ISO-8601 time the statistics were computed.
        skipped_files: Files or directories that could not be read.
    """

    total_lines: int
    languages: list[LanguageEntry]
    scanned_at: str
    skipped_files: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalLines": self.total_lines,
            "languages": [entry.to_dict() for entry in self.languages],
            "scannedAt": self.scanned_at,
            "skippedFiles": self.skipped_files,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LanguageStats:
        return cls(
            total_lines=int(data.get("totalLines", 0)),
            languages=[LanguageEntry.from_dict(e) for e in data.get("languages", [])],
            scanned_at=data.get("scannedAt", ""),
            skipped_files=int(data.get("skippedFiles", 0)),
        )


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


@dataclass
class ProjectMetadata:
    """User- and engine-maintained extras attached to a project."""

    ide_preferences: list[str] = field(default_factory=list)
    git_url: str | None = None
    description: str | None = None
    language_stats: LanguageStats | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "idePreferences": list(self.ide_preferences),
            "gitUrl": self.git_url,
            "description": self.description,
            "languageStats": self.language_stats.to_dict() if self.language_stats else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ProjectMetadata:
        data = data or {}
        stats = data.get("languageStats")
        return cls(
            ide_preferences=list(data.get("idePreferences") or []),
            git_url=data.get("gitUrl"),
            description=data.get("description"),
            language_stats=LanguageStats.from_dict(stats) if stats else None,
        )


@dataclass
class Project:
    """A catalog entry pointing at one project directory.

    ``path`` is the natural key: the store never holds two projects with
    the same canonical path. ``favorite``, ``tags``, ``created_at`` and the
    metadata preferences survive re-scans untouched.
    """

    id: str
    name: str
    path: str
    project_type: ProjectType
    created_at: str
    favorite: bool = False
    tags: list[str] = field(default_factory=list)
    last_opened: str | None = None
    last_modified: str | None = None
    display_order: int = 0
    metadata: ProjectMetadata = field(default_factory=ProjectMetadata)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "projectType": self.project_type.value,
            "favorite": self.favorite,
            "tags": list(self.tags),
            "lastOpened": self.last_opened,
            "lastModified": self.last_modified,
            "createdAt": self.created_at,
            "displayOrder": self.display_order,
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Project:
        return cls(
            id=data["id"],
            name=data["name"],
            path=data["path"],
            project_type=ProjectType(data.get("projectType", "Generic")),
            created_at=data.get("createdAt") or now_iso(),
            favorite=bool(data.get("favorite", False)),
            tags=list(data.get("tags") or []),
            last_opened=data.get("lastOpened"),
            last_modified=data.get("lastModified"),
            display_order=int(data.get("displayOrder", 0)),
            metadata=ProjectMetadata.from_dict(data.get("metadata")),
        )


# ---------------------------------------------------------------------------
# IDE configuration
# ---------------------------------------------------------------------------


@dataclass
class IdeConfig:
    """A configured external tool launchable against a project.

    Attributes:
        id: Stable identifier (family id for detected tools, UUID otherwise).
        name: Display name.
        executable: Absolute path or command name resolvable on PATH.
        args_template: Argument template; ``{projectPath}`` and
            ``{projectName}`` are substituted at launch.
        icon: Cached icon reference (data URI or path), or None.
        category: Launch behaviour.
        priority: Lower is more preferred when nothing else decides.
        auto_detected: True when created by the detector.
    """

    id: str
    name: str
    executable: str
    args_template: str = DEFAULT_ARGS_TEMPLATE
    icon: str | None = None
    category: IdeCategory = IdeCategory.GUI
    priority: int = DEFAULT_PRIORITY
    auto_detected: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "executable": self.executable,
            "argsTemplate": self.args_template,
            "icon": self.icon,
            "category": self.category.value,
            "priority": self.priority,
            "autoDetected": self.auto_detected,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IdeConfig:
        template = data.get("argsTemplate")
        return cls(
            id=data["id"],
            name=data["name"],
            executable=data["executable"],
            args_template=DEFAULT_ARGS_TEMPLATE if template is None else template,
            icon=data.get("icon"),
            category=IdeCategory(data.get("category", "Gui")),
            priority=int(data.get("priority", DEFAULT_PRIORITY)),
            auto_detected=bool(data.get("autoDetected", False)),
        )


@dataclass
class IdeForm:
    """User input for adding an IDE manually.

    An empty ``name`` is replaced by the prettified executable name.
    """

    executable: str
    name: str = ""
    args_template: str | None = None
    category: IdeCategory = IdeCategory.GUI
    priority: int | None = None
    icon: str | None = None


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScanRequest:
    """Ephemeral scan parameters (never persisted)."""

    root_path: str
    max_depth: int


@dataclass
class ScanReport:
    """Outcome of one directory scan.

    Attributes:
        project_ids: Ids of every project created or updated, in
            discovery order.
        started_at: ISO-8601 time the scan began; projects whose
            ``created_at`` is not earlier than this were created by it.
        skipped: Number of subdirectories that could not be read.
        errors: Human-readable descriptions of the skipped entries.
        cancelled: True if the scan stopped early on request.
    """

    project_ids: list[str] = field(default_factory=list)
    started_at: str = field(default_factory=now_iso)
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    cancelled: bool = False
