"""Launching projects in external tools."""

from __future__ import annotations

from devboom.launch.args import expand_args, validate_template
from devboom.launch.orchestrator import LaunchOrchestrator, LaunchOutcome, spawn_detached

__all__ = [
    "LaunchOrchestrator",
    "LaunchOutcome",
    "expand_args",
    "spawn_detached",
    "validate_template",
]
