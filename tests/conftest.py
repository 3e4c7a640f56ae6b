"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path

import pytest

from storegen.adapters.mock import MockDeclaration, MockHost
from storegen.domains.sqlite import COLUMN_MARKER, TYPE_MARKER, SQLiteDomain

USER_MODELS = textwrap.dedent("""\
    from typing import Optional

    from storegen.markers import sqlite_column, sqlite_type


    @sqlite_type(table="users")
    class User:
        id: int = sqlite_column(name="_id", key=True)
        name: str = sqlite_column(name="name")
        email: Optional[str] = sqlite_column(name="email", ignore_null=True)
        active: bool = sqlite_column(name="active")
        avatar: bytes | None = sqlite_column(name="avatar")

        def __init__(self, id, name, email=None, active=True, avatar=None):
            self.id = id
            self.name = name
            self.email = email
            self.active = active
            self.avatar = avatar
""")


def sqlite_class(name: str, table: str = "items", **options) -> MockDeclaration:
    """A class carrying the sqlite type-marker."""
    return MockDeclaration(name, markers={TYPE_MARKER: {"table": table}}, **options)


def sqlite_field(
    owner: MockDeclaration,
    name: str,
    annotation: str | None = "int",
    *,
    column: str | None = None,
    key: bool = False,
    ignore_null: bool = False,
    **options,
) -> MockDeclaration:
    """A field of ``owner`` carrying the sqlite column-marker."""
    args = {"name": column or name, "key": key, "ignore_null": ignore_null}
    return owner.field(name, annotation, markers={COLUMN_MARKER: args}, **options)


@pytest.fixture
def domain() -> SQLiteDomain:
    return SQLiteDomain()


@pytest.fixture
def user_host() -> MockHost:
    """Host holding one valid User type with a key and two plain columns."""
    user = sqlite_class("User", table="users")
    host = MockHost([user])
    host.add(
        sqlite_field(user, "id", "int", column="_id", key=True),
        sqlite_field(user, "name", "str"),
        sqlite_field(user, "email", "str | None", ignore_null=True),
    )
    return host


@pytest.fixture
def models_project(tmp_path: Path) -> Path:
    """A source tree with an ``app`` package holding marked models."""
    package = tmp_path / "app"
    package.mkdir()
    (package / "__init__.py").write_text("")
    (package / "models.py").write_text(USER_MODELS)
    return tmp_path
