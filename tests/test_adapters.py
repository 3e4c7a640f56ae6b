"""
Tests for the host protocol doubles and the runtime markers.
"""

import pytest

from storegen.adapters.base import DeclarationKind, Expression
from storegen.adapters.mock import MockDeclaration, MockHost
from storegen.core.models import Diagnostic, GeneratedArtifact
from storegen.markers import sqlite_column, sqlite_type


def _artifact(path: str, type_name: str = "models.User") -> GeneratedArtifact:
    return GeneratedArtifact(path=path, module="m", content="", role="mapping", type_name=type_name)


# ── Mock declarations ────────────────────────────────────────────────


class TestMockDeclaration:
    def test_defaults(self):
        decl = MockDeclaration("User")
        assert decl.kind == DeclarationKind.CLASS
        assert decl.location == "models.User"
        assert not decl.is_private
        assert decl.marker_arguments("sqlite_type") == {}

    def test_marker_arguments_are_copies(self):
        decl = MockDeclaration("User", markers={"m": {"a": 1}})
        decl.marker_arguments("m")["a"] = 2
        assert decl.marker_arguments("m") == {"a": 1}

    def test_field(self):
        user = MockDeclaration("User", module="app.models")
        field = user.field("id", "int", final=True)
        assert field.kind == DeclarationKind.FIELD
        assert field.enclosing is user
        assert field.module == "app.models"
        assert field.is_final

    def test_repr(self):
        assert repr(MockDeclaration("User")) == "<MockDeclaration class 'models.User'>"


class TestExpression:
    def test_is_str_with_repr(self):
        expr = Expression("TABLE")
        assert expr == "TABLE"
        assert repr(expr) == "Expression('TABLE')"


# ── Mock host ────────────────────────────────────────────────────────


class TestMockHost:
    def test_find_marked(self):
        marked = MockDeclaration("A", markers={"m": {}})
        host = MockHost([marked, MockDeclaration("B")])
        assert host.find_marked("m") == [marked]
        assert host.queries == ["m"]

    def test_records(self):
        host = MockHost()
        host.report(Diagnostic(message="x"))
        assert host.write_artifact(_artifact("a.py"))
        assert host.write_artifact(_artifact("b.py", "models.Other"))
        assert len(host.diagnostics) == 1
        assert [a.path for a in host.artifacts_for("models.User")] == ["a.py"]

        host.reset()
        assert host.diagnostics == []
        assert host.artifacts == []

    def test_refuse(self):
        host = MockHost()
        host.refuse("a.py")
        assert not host.accepts(_artifact("a.py"))
        assert host.accepts(_artifact("b.py"))
        assert not host.write_artifact(_artifact("a.py"))
        assert host.artifacts == []

    def test_fail_writes(self):
        host = MockHost()
        host.fail_writes(OSError("disk full"))
        with pytest.raises(OSError, match="disk full"):
            host.write_artifact(_artifact("a.py"))


# ── Runtime markers ──────────────────────────────────────────────────


class TestMarkers:
    def test_markers_are_inert(self):
        @sqlite_type(table="users")
        class User:
            id: int = sqlite_column(name="_id", key=True)

        assert User.__name__ == "User"
        assert User.id is None
