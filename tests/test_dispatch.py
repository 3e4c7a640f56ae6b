"""
Tests for generator dispatch — role checks, rendering, fault isolation, writes.
"""

import pytest
from conftest import sqlite_class, sqlite_field

from storegen.adapters.mock import MockHost
from storegen.core.models import DiagnosticCategory, GeneratedArtifact, ProcessingResultBuilder
from storegen.core.processor.discovery import extract_column
from storegen.core.processor.dispatch import GeneratorDispatch
from storegen.domains.base import GeneratorRole
from storegen.domains.sqlite import SQLiteDomain


def _user_meta(domain: SQLiteDomain):
    user = sqlite_class("User", table="users")
    builder = ProcessingResultBuilder()
    builder.add_type(user, domain.extract_type(user))
    for field in (sqlite_field(user, "id", key=True), sqlite_field(user, "name", "str")):
        builder.attach_column(user, extract_column(field, domain).unwrap())
    return builder.freeze()[user]


def _stub(role: GeneratorRole):
    def generate(meta):
        return GeneratedArtifact(
            path=f"{role.value}.py",
            module=role.value,
            content=f"# {meta.qualified_name}\n",
            role=role.value,
            type_name=meta.qualified_name,
        )

    return generate


def _failing(meta):
    raise RuntimeError("template broke")


def _stubs(**overrides):
    generators = {role: _stub(role) for role in GeneratorRole}
    for name, generator in overrides.items():
        generators[GeneratorRole(name)] = generator
    return generators


# ── Construction ─────────────────────────────────────────────────────


class TestDispatchConstruction:
    def test_roles_in_order(self):
        dispatch = GeneratorDispatch(_stubs())
        assert dispatch.roles == [
            GeneratorRole.PUT_RESOLVER,
            GeneratorRole.GET_RESOLVER,
            GeneratorRole.DELETE_RESOLVER,
            GeneratorRole.MAPPING,
        ]

    def test_missing_role(self):
        generators = _stubs()
        del generators[GeneratorRole.MAPPING]
        with pytest.raises(ValueError, match="mapping"):
            GeneratorDispatch(generators)

    def test_unexpected_role(self):
        generators = _stubs()
        generators["extra"] = _stub(GeneratorRole.MAPPING)
        with pytest.raises(ValueError, match="extra"):
            GeneratorDispatch(generators)


# ── Rendering ────────────────────────────────────────────────────────


class TestRender:
    def test_four_artifacts_in_role_order(self, domain):
        rendered = GeneratorDispatch(_stubs()).render(_user_meta(domain))
        assert rendered.ok
        assert [a.role for a in rendered.unwrap()] == [r.value for r in GeneratorRole]

    def test_deterministic(self, domain):
        dispatch = GeneratorDispatch(domain.generators())
        meta = _user_meta(domain)
        assert dispatch.render(meta).unwrap() == dispatch.render(meta).unwrap()

    def test_failing_generator_yields_no_artifacts(self, domain):
        meta = _user_meta(domain)
        rendered = GeneratorDispatch(_stubs(get_resolver=_failing)).render(meta)
        assert rendered.failed
        assert rendered.value is None
        (diagnostic,) = rendered.diagnostics
        assert diagnostic.declaration is meta.declaration
        assert diagnostic.category == DiagnosticCategory.GENERATION
        assert diagnostic.message == "Failed to generate get_resolver for User: template broke"

    def test_one_diagnostic_per_failing_generator(self, domain):
        rendered = GeneratorDispatch(_stubs(put_resolver=_failing, mapping=_failing)).render(
            _user_meta(domain)
        )
        assert len(rendered.diagnostics) == 2


# ── Writing ──────────────────────────────────────────────────────────


class TestDispatchWrites:
    def test_writes_all_four(self, domain):
        host = MockHost()
        outcome = GeneratorDispatch(_stubs()).dispatch(_user_meta(domain), host)
        assert outcome.ok
        assert len(host.artifacts) == 4

    def test_nothing_written_when_a_generator_fails(self, domain):
        host = MockHost()
        outcome = GeneratorDispatch(_stubs(mapping=_failing)).dispatch(_user_meta(domain), host)
        assert outcome.failed
        assert host.artifacts == []

    def test_refused_write_is_a_diagnostic(self, domain):
        host = MockHost()
        host.refuse("get_resolver.py")
        outcome = GeneratorDispatch(_stubs()).dispatch(_user_meta(domain), host)
        assert outcome.failed
        assert outcome.value is None
        assert host.artifacts == []
        assert outcome.diagnostics[0].message == "Host refused artifact get_resolver.py for User"

    def test_late_refusal_reports_no_artifacts(self, domain):
        class LateRefusal(MockHost):
            def accepts(self, artifact):
                return True

        host = LateRefusal()
        host.refuse("get_resolver.py")
        outcome = GeneratorDispatch(_stubs()).dispatch(_user_meta(domain), host)
        assert outcome.failed
        assert outcome.value is None
        # writing stops at the refusal
        assert [a.path for a in host.artifacts] == ["put_resolver.py"]

    def test_sink_exception_propagates(self, domain):
        host = MockHost()
        host.fail_writes(OSError("disk full"))
        with pytest.raises(OSError):
            GeneratorDispatch(_stubs()).dispatch(_user_meta(domain), host)
