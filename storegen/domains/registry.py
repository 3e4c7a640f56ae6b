"""
Domain registry — lookup of mapping domains by name.

The CLI and the generate use case resolve the configured domain
through the registry; nothing else needs to know which domains exist.
"""

from __future__ import annotations

import logging
from typing import Any

from storegen.domains.base import MappingDomain

logger = logging.getLogger(__name__)


class DomainRegistry:
    """Register, look up and describe mapping domains."""

    def __init__(self) -> None:
        self._domains: dict[str, MappingDomain] = {}

    def register(self, domain: MappingDomain) -> None:
        """Register a domain under its name."""
        name = domain.name
        if name in self._domains:
            logger.warning("Overwriting existing domain: %s", name)
        self._domains[name] = domain
        logger.debug("Registered domain: %s", name)

    def unregister(self, name: str) -> None:
        """Remove a domain from the registry."""
        self._domains.pop(name, None)

    def get(self, name: str) -> MappingDomain | None:
        """Look up a domain by name."""
        return self._domains.get(name)

    def list_domains(self) -> list[str]:
        """List all registered domain names."""
        return list(self._domains.keys())

    def describe(self) -> dict[str, dict[str, Any]]:
        """Markers and generator roles of every registered domain."""
        return {
            name: {
                "name": name,
                "type_marker": domain.type_marker,
                "column_marker": domain.column_marker,
                "roles": [role.value for role in domain.generators()],
                "type": domain.__class__.__name__,
            }
            for name, domain in self._domains.items()
        }


def default_registry() -> DomainRegistry:
    """Registry holding the built-in domains."""
    from storegen.domains.sqlite import SQLiteDomain

    registry = DomainRegistry()
    registry.register(SQLiteDomain())
    return registry
