"""IDE detector: proposes catalog entries for tools installed on the host.

Discovery Algorithm:
    1. For each known family in ``IDE_DEFINITIONS`` (probing order), skip
       it if its id is already in the catalog.
    2. Probe the platform's conventional install locations, then look up
       the family's command names on ``PATH``. The first hit wins.
    3. Skip the hit if its normalized executable path is already
       cataloged (directly, or as a bare command resolving to it) or was
       already proposed in this run.
    4. Build an ``IdeConfig`` with the prettified name, the family's
       category, priority and argument template, ``autoDetected`` set, and
       an icon derived from the executable where possible.

Detection never writes to the store; ``add_detected_ides`` in the service
decides what to persist.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from devboom.config import ICON_MAX_BYTES
from devboom.core.models import IdeConfig
from devboom.discovery.icons import derive_icon
from devboom.discovery.ide_registry import (
    CURATED_NAMES,
    IDE_DEFINITIONS,
    IdeDefinition,
    executable_stem,
    prettify_name,
)
from devboom.discovery.platforms import Platform, current_platform
from devboom.store.json_store import Catalog

logger = logging.getLogger(__name__)


def executable_key(executable: str) -> str:
    """Normalize an executable reference for duplicate detection."""
    return os.path.normcase(os.path.normpath(os.path.expanduser(executable)))


def _is_bare_command(executable: str) -> bool:
    return os.sep not in executable and (os.altsep is None or os.altsep not in executable)


class IdeDetector:
    """Probes the host for known editors, IDEs and terminals.

    Usage::

        detector = IdeDetector()
        for ide in detector.detect(store.load()):
            print(f"Found {ide.name} at {ide.executable}")
    """

    def __init__(
        self,
        platform: Platform | None = None,
        definitions: Sequence[IdeDefinition] = IDE_DEFINITIONS,
        icon_max_bytes: int = ICON_MAX_BYTES,
    ) -> None:
        self.platform = platform or current_platform()
        self.definitions = definitions
        self.icon_max_bytes = icon_max_bytes

    def locate(self, definition: IdeDefinition) -> str | None:
        """Return the executable for a family, or None if not installed."""
        try:
            candidates = self.platform.candidate_paths(definition)
        except OSError as exc:
            logger.debug("Probing install locations for %s failed: %s", definition.id, exc)
            candidates = []
        for path in candidates:
            try:
                if self.platform.is_executable(path):
                    return str(path)
            except OSError:
                continue
        for command in definition.commands:
            found = self.platform.which(command)
            if found:
                return found
        return None

    def _cataloged_keys(self, catalog: Catalog) -> set[str]:
        keys: set[str] = set()
        for ide in catalog.ides:
            keys.add(executable_key(ide.executable))
            if _is_bare_command(ide.executable):
                resolved = self.platform.which(ide.executable)
                if resolved:
                    keys.add(executable_key(resolved))
        return keys

    @staticmethod
    def display_name(definition: IdeDefinition, executable: str) -> str:
        """Prettified executable name, or the family name for opaque stems."""
        if executable_stem(executable).lower() in CURATED_NAMES:
            return prettify_name(executable)
        return definition.name

    def detect(self, catalog: Catalog) -> list[IdeConfig]:
        """Propose new ``IdeConfig`` entries not yet in ``catalog``.

        Args:
            catalog: Current catalog snapshot used for de-duplication.

        Returns:
            New proposals in probing order; empty when nothing new is
            installed.
        """
        known = self._cataloged_keys(catalog)
        proposals: list[IdeConfig] = []
        for definition in self.definitions:
            if catalog.find_ide(definition.id) is not None:
                continue
            executable = self.locate(definition)
            if executable is None:
                continue
            key = executable_key(executable)
            if key in known:
                logger.debug("Skipping %s: %s already cataloged", definition.id, executable)
                continue
            known.add(key)
            proposals.append(IdeConfig(
                id=definition.id,
                name=self.display_name(definition, executable),
                executable=executable,
                args_template=definition.args_template,
                icon=derive_icon(Path(executable), self.platform, self.icon_max_bytes),
                category=definition.category,
                priority=definition.priority,
                auto_detected=True,
            ))
            logger.info("Detected %s at %s", definition.name, executable)
        return proposals

    @staticmethod
    def unclaimed(proposals: Sequence[IdeConfig], catalog: Catalog) -> list[IdeConfig]:
        """Drop proposals whose id or executable ``catalog`` now holds.

        ``detect`` works from a snapshot; this re-checks its output against
        the live catalog just before the proposals are committed.
        """
        ids = {ide.id for ide in catalog.ides}
        keys = {executable_key(ide.executable) for ide in catalog.ides}
        fresh = []
        for proposal in proposals:
            if proposal.id in ids or executable_key(proposal.executable) in keys:
                logger.debug("Dropping %s: cataloged while detecting", proposal.id)
                continue
            fresh.append(proposal)
        return fresh
