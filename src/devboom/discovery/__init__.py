"""Host discovery: known tool families, per-OS capabilities, icons.

Public API::

    from devboom.discovery import IdeDetector, current_platform

    detector = IdeDetector(current_platform())
    for ide in detector.detect(store.load()):
        print(f"{ide.name}: {ide.executable}")
"""

from __future__ import annotations

from devboom.discovery.detector import IdeDetector
from devboom.discovery.icons import icon_from_file
from devboom.discovery.ide_registry import (
    IDE_DEFINITIONS,
    IdeDefinition,
    default_ides,
    prettify_name,
)
from devboom.discovery.platforms import Platform, current_platform

__all__ = [
    "IDE_DEFINITIONS",
    "IdeDefinition",
    "IdeDetector",
    "Platform",
    "current_platform",
    "default_ides",
    "icon_from_file",
    "prettify_name",
]
