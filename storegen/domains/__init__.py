"""Mapping domains — pluggable storage backends.

Public re-exports for convenient access.
"""

from storegen.domains.base import (
    GenerationError,
    Generator,
    GeneratorRole,
    MappingDomain,
    ProcessingError,
)
from storegen.domains.registry import DomainRegistry, default_registry

__all__ = [
    "DomainRegistry",
    "GenerationError",
    "Generator",
    "GeneratorRole",
    "MappingDomain",
    "ProcessingError",
    "default_registry",
]
