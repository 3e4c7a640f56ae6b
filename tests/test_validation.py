"""
Tests for the declaration validator — structural rules for marked classes and fields.
"""

from storegen.adapters.base import DeclarationKind
from storegen.adapters.mock import MockDeclaration
from storegen.core.processor.validation import validate_field, validate_type

TYPE = "sqlite_type"
COLUMN = "sqlite_column"


def _marked_class(name: str = "User", **options) -> MockDeclaration:
    return MockDeclaration(name, markers={TYPE: {"table": "t"}}, **options)


# ── Types ────────────────────────────────────────────────────────────


class TestValidateType:
    def test_valid_class(self):
        assert validate_type(_marked_class(), TYPE) == []

    def test_not_a_class(self):
        func = MockDeclaration("make_user", DeclarationKind.FUNCTION, markers={TYPE: {}})
        problems = validate_type(func, TYPE)
        assert len(problems) == 1
        assert problems[0].message == "sqlite_type can only be applied to classes: make_user"
        assert problems[0].declaration is func

    def test_private_class(self):
        hidden = _marked_class("_Hidden", private=True)
        problems = validate_type(hidden, TYPE)
        assert [p.message for p in problems] == [
            "sqlite_type can not be applied to private class: _Hidden"
        ]


# ── Fields ───────────────────────────────────────────────────────────


class TestValidateField:
    def test_valid_field(self):
        field = _marked_class().field("id", "int")
        assert validate_field(field, TYPE, COLUMN) == []

    def test_enclosing_class_not_marked(self):
        plain = MockDeclaration("Plain")
        field = plain.field("id", "int")
        problems = validate_field(field, TYPE, COLUMN)
        assert [p.message for p in problems] == ["Please annotate class Plain with sqlite_type"]
        assert problems[0].declaration is field

    def test_enclosing_not_a_class(self):
        func = MockDeclaration("build", DeclarationKind.FUNCTION)
        field = func.field("x", "int")
        problems = validate_field(field, TYPE, COLUMN)
        assert [p.message for p in problems] == [
            "Please apply sqlite_column to fields of class: x"
        ]

    def test_no_enclosing(self):
        field = MockDeclaration("x", DeclarationKind.FIELD)
        problems = validate_field(field, TYPE, COLUMN)
        assert len(problems) == 1
        assert "fields of class" in problems[0].message

    def test_private_field(self):
        field = _marked_class().field("_secret", "int", private=True)
        problems = validate_field(field, TYPE, COLUMN)
        assert [p.message for p in problems] == [
            "sqlite_column can not be applied to private field: _secret"
        ]

    def test_final_field(self):
        field = _marked_class().field("ID", "int", final=True)
        problems = validate_field(field, TYPE, COLUMN)
        assert [p.message for p in problems] == [
            "sqlite_column can not be applied to final field: ID"
        ]

    def test_private_and_final_reported_independently(self):
        field = _marked_class().field("_ID", "int", private=True, final=True)
        problems = validate_field(field, TYPE, COLUMN)
        assert len(problems) == 2
        assert "private field" in problems[0].message
        assert "final field" in problems[1].message

    def test_all_rules_at_once(self):
        plain = MockDeclaration("Plain")
        field = plain.field("_x", "int", private=True, final=True)
        problems = validate_field(field, TYPE, COLUMN)
        assert len(problems) == 3
        assert all(p.declaration is field for p in problems)
