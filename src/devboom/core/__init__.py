"""Core engine: models, classification, preferences and language statistics.

The directory scanner lives in ``devboom.core.scanner`` and is imported from
there directly, since it depends on the store.
"""

from __future__ import annotations

from devboom.core.classifier import classify
from devboom.core.language_stats import LanguageStatsEngine
from devboom.core.models import (
    IdeCategory,
    IdeConfig,
    IdeForm,
    LanguageEntry,
    LanguageStats,
    Project,
    ProjectMetadata,
    ProjectType,
    ScanReport,
    ScanRequest,
)
from devboom.core.preferences import PreferenceList

__all__ = [
    "IdeCategory",
    "IdeConfig",
    "IdeForm",
    "LanguageEntry",
    "LanguageStats",
    "LanguageStatsEngine",
    "PreferenceList",
    "Project",
    "ProjectMetadata",
    "ProjectType",
    "ScanReport",
    "ScanRequest",
    "classify",
]
