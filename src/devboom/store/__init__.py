"""Persistence for the project and IDE catalog.

Public API::

    from devboom.store import JsonStore

    store = JsonStore(Path("store.json"))
    with store.transaction() as catalog:
        catalog.projects.append(project)
"""

from __future__ import annotations

from devboom.store.json_store import Catalog, JsonStore, KeyedLocks

__all__ = [
    "Catalog",
    "JsonStore",
    "KeyedLocks",
]
