"""
Generated artifact model — used by all generators.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class GeneratedArtifact(BaseModel):
    """One unit of generated source for one generator role and one type.

    Attributes:
        path:      Output path, relative to the output root.
        module:    Dotted import path of the generated module.
        content:   Full module source.
        role:      Generator role that produced it (e.g. "put_resolver").
        type_name: Qualified name of the type it was generated for.
        reason:    Why this artifact was generated.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    module: str
    content: str
    role: str
    type_name: str
    reason: str = ""
