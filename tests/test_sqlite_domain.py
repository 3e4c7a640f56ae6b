"""
Tests for the SQLite domain — annotation types, marker extraction, registry.
"""

import pytest
from conftest import sqlite_class, sqlite_field

from storegen.adapters.base import Expression
from storegen.adapters.mock import MockDeclaration
from storegen.core.models import ValueType
from storegen.domains import DomainRegistry, GeneratorRole, ProcessingError, default_registry
from storegen.domains.sqlite import COLUMN_MARKER, TYPE_MARKER, SQLiteColumnAttributes, SQLiteDomain
from storegen.domains.sqlite.types import resolve_annotation

# ── Annotation types ─────────────────────────────────────────────────


class TestResolveAnnotation:
    @pytest.mark.parametrize(
        "annotation, expected",
        [
            ("bool", (ValueType.BOOLEAN, False)),
            ("int", (ValueType.INTEGER, False)),
            ("float", (ValueType.FLOAT, False)),
            ("str", (ValueType.STRING, False)),
            ("bytes", (ValueType.BYTES, False)),
            ("Optional[int]", (ValueType.INTEGER, True)),
            ("typing.Optional[str]", (ValueType.STRING, True)),
            ("str | None", (ValueType.STRING, True)),
            ("None | bytes", (ValueType.BYTES, True)),
            ("Union[float, None]", (ValueType.FLOAT, True)),
            ("Union[int]", (ValueType.INTEGER, False)),
            ("'bool'", (ValueType.BOOLEAN, False)),
            ("Optional['int']", (ValueType.INTEGER, True)),
        ],
    )
    def test_supported(self, annotation, expected):
        assert resolve_annotation(annotation) == expected

    @pytest.mark.parametrize(
        "annotation",
        ["list[int]", "datetime", "int | str", "Union[int, str, None]", "dict", "None", "(", ""],
    )
    def test_unsupported(self, annotation):
        assert resolve_annotation(annotation) is None


# ── Markers ──────────────────────────────────────────────────────────


class TestExtractType:
    def test_table(self, domain):
        assert domain.extract_type(sqlite_class("User", table="users")).table == "users"

    def test_positional_table(self, domain):
        user = MockDeclaration("User", markers={TYPE_MARKER: {"args": ["people"]}})
        assert domain.extract_type(user).table == "people"

    def test_missing_table(self, domain):
        user = MockDeclaration("User", markers={TYPE_MARKER: {}})
        with pytest.raises(ProcessingError, match="Table name is empty: User"):
            domain.extract_type(user)

    def test_expression_table(self, domain):
        user = MockDeclaration("User", markers={TYPE_MARKER: {"table": Expression("TABLE")}})
        with pytest.raises(ProcessingError, match="must be a string literal"):
            domain.extract_type(user)


class TestExtractColumn:
    def test_full_column(self, domain):
        field = sqlite_field(sqlite_class("User"), "email", "str | None", column="mail", ignore_null=True)
        column = domain.extract_column(field)
        assert column.field_name == "email"
        assert column.storage_name == "mail"
        assert column.value_type == ValueType.STRING
        assert column.nullable
        assert column.attributes == SQLiteColumnAttributes(key=False, ignore_null=True)

    def test_defaults(self, domain):
        user = sqlite_class("User")
        field = user.field("id", "int", markers={COLUMN_MARKER: {"name": "id"}})
        column = domain.extract_column(field)
        assert not column.attributes.key
        assert not column.attributes.ignore_null

    def test_empty_name(self, domain):
        field = sqlite_field(sqlite_class("User"), "id", column=" ")
        with pytest.raises(ProcessingError, match="Column name is empty: id"):
            domain.extract_column(field)

    def test_flag_must_be_bool(self, domain):
        user = sqlite_class("User")
        field = user.field("id", "int", markers={COLUMN_MARKER: {"name": "id", "key": "yes"}})
        with pytest.raises(ProcessingError, match="key of sqlite_column must be True or False"):
            domain.extract_column(field)

    def test_positional_flags(self, domain):
        user = sqlite_class("User")
        field = user.field("id", "int", markers={COLUMN_MARKER: {"args": ["_id", True]}})
        column = domain.extract_column(field)
        assert column.storage_name == "_id"
        assert column.attributes == SQLiteColumnAttributes(key=True, ignore_null=False)

        email = user.field("email", "str | None", markers={COLUMN_MARKER: {"args": ["email", False, True]}})
        assert domain.extract_column(email).attributes == SQLiteColumnAttributes(key=False, ignore_null=True)

    def test_positional_flag_must_be_bool(self, domain):
        user = sqlite_class("User")
        field = user.field("id", "int", markers={COLUMN_MARKER: {"args": ["id", 1]}})
        with pytest.raises(ProcessingError, match="key of sqlite_column must be True or False"):
            domain.extract_column(field)

    def test_missing_annotation(self, domain):
        field = sqlite_field(sqlite_class("User"), "id", None)
        with pytest.raises(ProcessingError, match="needs a type annotation"):
            domain.extract_column(field)

    def test_unsupported_annotation(self, domain):
        field = sqlite_field(sqlite_class("User"), "tags", "list[str]")
        with pytest.raises(ProcessingError) as exc:
            domain.extract_column(field)
        assert exc.value.declaration is field
        assert exc.value.message == "Unsupported type of field for sqlite_column: tags (list[str])"


class TestSQLiteDomain:
    def test_markers(self, domain):
        assert domain.name == "sqlite"
        assert domain.type_marker == "sqlite_type"
        assert domain.column_marker == "sqlite_column"

    def test_generators_cover_every_role(self, domain):
        assert list(domain.generators()) == list(GeneratorRole)


# ── Registry ─────────────────────────────────────────────────────────


class TestDomainRegistry:
    def test_default_registry(self):
        registry = default_registry()
        assert registry.list_domains() == ["sqlite"]
        assert isinstance(registry.get("sqlite"), SQLiteDomain)
        assert registry.get("nope") is None

    def test_register_unregister(self):
        registry = DomainRegistry()
        registry.register(SQLiteDomain())
        assert registry.list_domains() == ["sqlite"]
        registry.unregister("sqlite")
        assert registry.list_domains() == []

    def test_overwrite_warns(self, caplog):
        registry = DomainRegistry()
        registry.register(SQLiteDomain())
        with caplog.at_level("WARNING"):
            registry.register(SQLiteDomain())
        assert "Overwriting existing domain: sqlite" in caplog.text

    def test_describe(self):
        described = default_registry().describe()["sqlite"]
        assert described["type_marker"] == "sqlite_type"
        assert described["column_marker"] == "sqlite_column"
        assert described["roles"] == ["put_resolver", "get_resolver", "delete_resolver", "mapping"]
        assert described["type"] == "SQLiteDomain"
