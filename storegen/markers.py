"""
Runtime markers — what model code imports so marked classes still run.

The generator never imports model code; it reads these markers from
source.  At runtime they do nothing: the class decorator returns the
class unchanged and the column marker evaluates to ``None``, so a
field's class-level default is ``None`` until an instance sets it.

    from storegen.markers import sqlite_column, sqlite_type

    @sqlite_type(table="users")
    class User:
        id: int = sqlite_column(name="_id", key=True)
        name: str = sqlite_column(name="name")
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T", bound=type)


def sqlite_type(table: str) -> Callable[[T], T]:
    """Mark a class as mapped to ``table``."""

    def decorator(cls: T) -> T:
        return cls

    return decorator


def sqlite_column(name: str, key: bool = False, ignore_null: bool = False) -> Any:
    """Mark a class attribute as the column ``name``."""
    return None
