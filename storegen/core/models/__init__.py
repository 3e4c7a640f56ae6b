"""
Domain models — metadata, diagnostics and artifacts for a processing round.

All models are re-exported here for convenient access:

    from storegen.core.models import TypeMeta, ColumnMeta, Diagnostic, GeneratedArtifact
"""

from storegen.core.models.artifact import GeneratedArtifact
from storegen.core.models.diagnostic import Diagnostic, DiagnosticCategory
from storegen.core.models.meta import (
    Attributes,
    ColumnMeta,
    ProcessingResult,
    ProcessingResultBuilder,
    TypeMeta,
    ValueType,
)
from storegen.core.models.result import Result

__all__ = [
    # meta.py
    "Attributes",
    "ColumnMeta",
    # diagnostic.py
    "Diagnostic",
    "DiagnosticCategory",
    # artifact.py
    "GeneratedArtifact",
    "ProcessingResult",
    "ProcessingResultBuilder",
    # result.py
    "Result",
    "TypeMeta",
    "ValueType",
]
