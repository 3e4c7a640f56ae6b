"""
Metadata model — what the processor knows about marked types and fields.

TypeMeta and ColumnMeta are immutable.  During a round the discovery
engine accumulates them in a ProcessingResultBuilder; once extraction
is over the builder is frozen into a read-only ProcessingResult that
every later stage shares.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from storegen.adapters.base import Declaration


class ValueType(str, Enum):
    """Kind of value a column stores."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    BYTES = "bytes"


class Attributes(BaseModel):
    """Domain-specific attributes of a type or column.

    Mapping domains subclass this with their own fields
    (table name, key flag, ...).
    """

    model_config = ConfigDict(frozen=True)


class ColumnMeta(BaseModel):
    """One marked field of a marked type."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    declaration: Declaration
    field_name: str                 # attribute name on the object
    storage_name: str               # name in storage
    value_type: ValueType
    nullable: bool = False
    attributes: Attributes = Attributes()


class TypeMeta(BaseModel):
    """One marked type and its columns, in extraction order."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    declaration: Declaration
    qualified_name: str
    simple_name: str
    module: str
    attributes: Attributes = Attributes()
    columns: tuple[ColumnMeta, ...] = ()

    @property
    def storage_names(self) -> list[str]:
        return [c.storage_name for c in self.columns]

    def column(self, storage_name: str) -> ColumnMeta | None:
        """Look up a column by storage name (first match)."""
        for col in self.columns:
            if col.storage_name == storage_name:
                return col
        return None

    def owns(self, declaration: Declaration) -> bool:
        """Whether the declaration is this type or one of its columns."""
        if declaration is self.declaration:
            return True
        return any(c.declaration is declaration for c in self.columns)


class ProcessingResult(Mapping[Declaration, TypeMeta]):
    """Read-only mapping from type declaration to TypeMeta for one round."""

    def __init__(self, types: Mapping[Declaration, TypeMeta] | None = None):
        self._types = MappingProxyType(dict(types or {}))

    def __getitem__(self, key: Declaration) -> TypeMeta:
        return self._types[key]

    def __iter__(self) -> Iterator[Declaration]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def by_qualified_name(self, name: str) -> TypeMeta | None:
        for meta in self._types.values():
            if meta.qualified_name == name:
                return meta
        return None

    def owner_of(self, declaration: Declaration) -> TypeMeta | None:
        """The TypeMeta that is or contains the declaration, if any."""
        if declaration in self._types:
            return self._types[declaration]
        for meta in self._types.values():
            if meta.owns(declaration):
                return meta
        return None

    @property
    def qualified_names(self) -> list[str]:
        return [m.qualified_name for m in self._types.values()]

    def __repr__(self) -> str:
        return f"<ProcessingResult types={self.qualified_names!r}>"


@dataclass
class _TypeDraft:
    declaration: Declaration
    attributes: Attributes
    columns: list[ColumnMeta] = field(default_factory=list)

    def build(self) -> TypeMeta:
        decl = self.declaration
        return TypeMeta(
            declaration=decl,
            qualified_name=decl.qualified_name,
            simple_name=decl.simple_name,
            module=decl.module,
            attributes=self.attributes,
            columns=tuple(self.columns),
        )


class ProcessingResultBuilder:
    """Accumulates types and columns for one round, then freezes.

    A builder is scoped to a single round.  After freeze() it refuses
    further changes.
    """

    def __init__(self) -> None:
        self._drafts: dict[Declaration, _TypeDraft] = {}
        self._frozen = False

    def __contains__(self, declaration: object) -> bool:
        return declaration in self._drafts

    def __len__(self) -> int:
        return len(self._drafts)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add_type(self, declaration: Declaration, attributes: Attributes) -> bool:
        """Register a type.  Returns False if it was already registered."""
        self._check_open()
        if declaration in self._drafts:
            return False
        self._drafts[declaration] = _TypeDraft(declaration=declaration, attributes=attributes)
        return True

    def attach_column(self, owner: Declaration, column: ColumnMeta) -> None:
        """Attach a column to a registered type."""
        self._check_open()
        draft = self._drafts.get(owner)
        if draft is None:
            raise KeyError(f"Type not registered in this round: {owner.qualified_name}")
        draft.columns.append(column)

    def freeze(self) -> ProcessingResult:
        """Build the immutable result.  The builder is closed afterwards."""
        self._frozen = True
        return ProcessingResult({decl: draft.build() for decl, draft in self._drafts.items()})

    def _check_open(self) -> None:
        if self._frozen:
            raise RuntimeError("ProcessingResultBuilder is frozen")
