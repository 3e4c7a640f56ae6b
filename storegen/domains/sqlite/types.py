"""
Field type resolution for the SQLite domain.

Turns a field's annotation text into a ValueType plus a nullable flag:

    int                   → (INTEGER, False)
    Optional[str]         → (STRING, True)
    bytes | None          → (BYTES, True)
    Union[None, float]    → (FLOAT, True)
    "bool"                → (BOOLEAN, False)   string annotations too

Anything else (containers, datetimes, custom classes) is unsupported.
"""

from __future__ import annotations

import ast

from storegen.core.models.meta import ValueType

_SIMPLE_TYPES: dict[str, ValueType] = {
    "bool": ValueType.BOOLEAN,
    "int": ValueType.INTEGER,
    "float": ValueType.FLOAT,
    "str": ValueType.STRING,
    "bytes": ValueType.BYTES,
}


def resolve_annotation(annotation: str) -> tuple[ValueType, bool] | None:
    """Resolve annotation source text, or None if unsupported."""
    try:
        node = ast.parse(annotation.strip(), mode="eval").body
    except SyntaxError:
        return None
    return _resolve(node)


def _dotted_tail(node: ast.expr) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _is_none(node: ast.expr) -> bool:
    if isinstance(node, ast.Constant):
        return node.value is None
    return _dotted_tail(node) in ("None", "NoneType")


def _union_members(node: ast.expr) -> list[ast.expr]:
    """Flatten ``a | b | c`` into its members."""
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return _union_members(node.left) + _union_members(node.right)
    return [node]


def _resolve_union(members: list[ast.expr]) -> tuple[ValueType, bool] | None:
    concrete = [m for m in members if not _is_none(m)]
    if len(concrete) != 1:
        return None
    inner = _resolve(concrete[0])
    if inner is None:
        return None
    return inner[0], inner[1] or len(concrete) < len(members)


def _resolve(node: ast.expr) -> tuple[ValueType, bool] | None:
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return resolve_annotation(node.value)

    if isinstance(node, ast.BinOp):
        return _resolve_union(_union_members(node))

    if isinstance(node, ast.Subscript):
        base = _dotted_tail(node.value)
        if base == "Optional":
            inner = _resolve(node.slice)
            return (inner[0], True) if inner else None
        if base == "Union":
            members = list(node.slice.elts) if isinstance(node.slice, ast.Tuple) else [node.slice]
            return _resolve_union(members)
        return None

    name = _dotted_tail(node)
    if name in _SIMPLE_TYPES:
        return _SIMPLE_TYPES[name], False
    return None
