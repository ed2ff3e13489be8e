"""
Dependencies shared by routes that read or write users.
"""

from __future__ import annotations

from types import ModuleType

from . import repository


def get_user_store() -> ModuleType:
    # Tests override this with an in-memory store.
    return repository
