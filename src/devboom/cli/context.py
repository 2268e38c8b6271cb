"""Shared per-invocation state for CLI commands."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import click

from devboom.config import load_settings
from devboom.service import DevBoomService

T = TypeVar("T")


@dataclass
class CliState:
    """Options from the top-level group, plus the lazily built service."""

    data_dir: Path | None = None
    verbose: bool = False
    _service: DevBoomService | None = None

    def service(self) -> DevBoomService:
        if self._service is None:
            self._service = DevBoomService(load_settings(self.data_dir))
        return self._service


def get_service() -> DevBoomService:
    """Return the service for the current click invocation."""
    state = click.get_current_context().find_object(CliState)
    if state is None:
        state = CliState()
    return state.service()


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a service coroutine from synchronous click code."""
    return asyncio.run(coro)
