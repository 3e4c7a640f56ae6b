"""
Python source declarations — find marked classes and fields with ``ast``.

Uses stdlib ``ast`` for reliable, fast parsing.  Never imports or
executes the scanned code.

What counts as marked:
    class   — a decorator whose (last dotted) name is the marker, with or
              without a call: ``@sqlite_type(table="users")``
    field   — an assignment whose value calls the marker:
              ``name: str = sqlite_column(name="name")`` or
              ``name = sqlite_column(name="name")``

Public API:
    scan_source(source, module)  → list of declarations in one module
    scan_file(path, base)        → list of declarations in one .py file
    scan_tree(base, sources)     → DeclarationIndex over many files
"""

from __future__ import annotations

import ast
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from storegen.adapters.base import Declaration, DeclarationKind, Expression

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE = (
    "__pycache__",
    ".venv",
    "venv",
    "node_modules",
    ".git",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
    "build",
    "dist",
    ".eggs",
)


# ═══════════════════════════════════════════════════════════════════
#  Declaration handle
# ═══════════════════════════════════════════════════════════════════


class PythonDeclaration(Declaration):
    """A class, field, function or module found in Python source."""

    def __init__(
        self,
        name: str,
        kind: DeclarationKind,
        module: str,
        *,
        enclosing: PythonDeclaration | None = None,
        markers: dict[str, dict[str, Any]] | None = None,
        annotation: str | None = None,
        final: bool = False,
        path: str = "",
        lineno: int = 0,
    ):
        self._name = name
        self._kind = kind
        self._module = module
        self._enclosing = enclosing
        self._markers = markers or {}
        self._annotation = annotation
        self._final = final
        self._path = path
        self._lineno = lineno

    @property
    def kind(self) -> DeclarationKind:
        return self._kind

    @property
    def simple_name(self) -> str:
        return self._name

    @property
    def qualified_name(self) -> str:
        if self._kind == DeclarationKind.MODULE:
            return self._module
        if self._enclosing is None:
            return f"{self._module}.{self._name}"
        return f"{self._enclosing.qualified_name}.{self._name}"

    @property
    def module(self) -> str:
        return self._module

    @property
    def is_private(self) -> bool:
        if self._kind == DeclarationKind.MODULE:
            return False
        return _is_private_name(self._name)

    @property
    def is_final(self) -> bool:
        return self._final

    @property
    def enclosing(self) -> PythonDeclaration | None:
        return self._enclosing

    @property
    def annotation(self) -> str | None:
        return self._annotation

    @property
    def location(self) -> str:
        if self._lineno:
            return f"{self._path}:{self._lineno}"
        return self._path or self.qualified_name

    @property
    def markers(self) -> list[str]:
        return list(self._markers)

    def has_marker(self, marker: str) -> bool:
        return marker in self._markers

    def marker_arguments(self, marker: str) -> dict[str, Any]:
        return dict(self._markers.get(marker, {}))


def _is_private_name(name: str) -> bool:
    """Leading underscore means private; dunder names are public."""
    if name.startswith("__") and name.endswith("__"):
        return False
    return name.startswith("_")


# ═══════════════════════════════════════════════════════════════════
#  AST walking helpers
# ═══════════════════════════════════════════════════════════════════


def _call_name(node: ast.expr) -> str | None:
    """Name a decorator or call refers to: ``a.b.marker(...)`` → ``marker``."""
    if isinstance(node, ast.Call):
        node = node.func
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _literal(node: ast.expr) -> Any:
    """Literal value of an argument, or its source text if not a literal."""
    try:
        return ast.literal_eval(node)
    except (ValueError, TypeError, SyntaxError):
        return Expression(ast.unparse(node))


def _call_arguments(node: ast.expr) -> dict[str, Any]:
    """Keyword arguments of a marker call; positionals go under ``args``."""
    if not isinstance(node, ast.Call):
        return {}
    arguments: dict[str, Any] = {}
    if node.args:
        arguments["args"] = [_literal(a) for a in node.args]
    for kw in node.keywords:
        if kw.arg is None:  # **kwargs
            continue
        arguments[kw.arg] = _literal(kw.value)
    return arguments


def _decorator_markers(node: ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef) -> dict[str, dict[str, Any]]:
    markers: dict[str, dict[str, Any]] = {}
    for dec in node.decorator_list:
        name = _call_name(dec)
        if name:
            markers[name] = _call_arguments(dec)
    return markers


def _is_final_annotation(node: ast.expr | None) -> bool:
    """``Final``, ``Final[int]``, ``typing.Final[int]``."""
    if node is None:
        return False
    if isinstance(node, ast.Subscript):
        node = node.value
    if isinstance(node, ast.Name):
        return node.id == "Final"
    if isinstance(node, ast.Attribute):
        return node.attr == "Final"
    return False


def _nested_bodies(node: ast.stmt) -> Iterator[list[ast.stmt]]:
    """Statement lists inside a compound statement (if/for/while/with/try)."""
    for attr in ("body", "orelse", "finalbody"):
        body = getattr(node, attr, None)
        if body:
            yield body
    for handler in getattr(node, "handlers", []):
        yield handler.body


_COMPOUND = (ast.If, ast.For, ast.AsyncFor, ast.While, ast.With, ast.AsyncWith, ast.Try)


def _scan_body(
    body: list[ast.stmt],
    enclosing: PythonDeclaration,
    module: str,
    path: str,
    out: list[PythonDeclaration],
) -> None:
    for node in body:
        if isinstance(node, ast.ClassDef):
            decl = PythonDeclaration(
                node.name,
                DeclarationKind.CLASS,
                module,
                enclosing=enclosing,
                markers=_decorator_markers(node),
                path=path,
                lineno=node.lineno,
            )
            out.append(decl)
            _scan_body(node.body, decl, module, path, out)

        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            decl = PythonDeclaration(
                node.name,
                DeclarationKind.FUNCTION,
                module,
                enclosing=enclosing,
                markers=_decorator_markers(node),
                path=path,
                lineno=node.lineno,
            )
            out.append(decl)
            _scan_body(node.body, decl, module, path, out)

        elif isinstance(node, ast.AnnAssign):
            if isinstance(node.target, ast.Name) and isinstance(node.value, ast.Call):
                out.append(
                    _field(node.target.id, node.value, enclosing, module, path, node.lineno,
                           annotation=node.annotation)
                )

        elif isinstance(node, ast.Assign):
            if (
                len(node.targets) == 1
                and isinstance(node.targets[0], ast.Name)
                and isinstance(node.value, ast.Call)
            ):
                out.append(
                    _field(node.targets[0].id, node.value, enclosing, module, path, node.lineno)
                )

        elif isinstance(node, _COMPOUND):
            for nested in _nested_bodies(node):
                _scan_body(nested, enclosing, module, path, out)


def _field(
    name: str,
    call: ast.Call,
    enclosing: PythonDeclaration,
    module: str,
    path: str,
    lineno: int,
    annotation: ast.expr | None = None,
) -> PythonDeclaration:
    marker = _call_name(call)
    return PythonDeclaration(
        name,
        DeclarationKind.FIELD,
        module,
        enclosing=enclosing,
        markers={marker: _call_arguments(call)} if marker else {},
        annotation=ast.unparse(annotation) if annotation is not None else None,
        final=_is_final_annotation(annotation),
        path=path,
        lineno=lineno,
    )


# ═══════════════════════════════════════════════════════════════════
#  Core: scan one module
# ═══════════════════════════════════════════════════════════════════


def scan_source(source: str, module: str, path: str = "<string>") -> list[PythonDeclaration]:
    """Collect classes, functions and call-assigned fields from source text.

    Raises:
        SyntaxError: If the source does not parse.
    """
    tree = ast.parse(source, filename=path)
    root = PythonDeclaration(
        module.rsplit(".", 1)[-1],
        DeclarationKind.MODULE,
        module,
        path=path,
    )
    out: list[PythonDeclaration] = [root]
    _scan_body(tree.body, root, module, path, out)
    return out


def module_name(path: Path, base: Path) -> str:
    """Dotted module name of a .py file relative to the import base."""
    try:
        rel = path.resolve().relative_to(base.resolve())
    except ValueError:
        rel = Path(path.name)
    parts = list(rel.with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts) or path.stem


def scan_file(path: Path, base: Path | None = None) -> list[PythonDeclaration]:
    """Scan one .py file.

    Raises:
        OSError: If the file cannot be read.
        SyntaxError: If it does not parse.
    """
    base = base or path.parent
    source = path.read_text(encoding="utf-8", errors="replace")
    try:
        display = str(path.resolve().relative_to(base.resolve()))
    except ValueError:
        display = str(path)
    return scan_source(source, module_name(path, base), display)


# ═══════════════════════════════════════════════════════════════════
#  Bulk: index many files
# ═══════════════════════════════════════════════════════════════════


class DeclarationIndex:
    """All declarations found in a set of source files."""

    def __init__(self) -> None:
        self._declarations: list[PythonDeclaration] = []
        self.errors: dict[str, str] = {}
        self.files: list[str] = []

    def add(self, declarations: list[PythonDeclaration]) -> None:
        self._declarations.extend(declarations)

    def marked(self, marker: str) -> list[PythonDeclaration]:
        """Declarations carrying the marker, in source order."""
        return [d for d in self._declarations if d.has_marker(marker)]

    def find(self, qualified_name: str) -> PythonDeclaration | None:
        for decl in self._declarations:
            if decl.qualified_name == qualified_name:
                return decl
        return None

    def __iter__(self) -> Iterator[PythonDeclaration]:
        return iter(self._declarations)

    def __len__(self) -> int:
        return len(self._declarations)


def _iter_python_files(source: Path, exclude: tuple[str, ...]) -> Iterator[Path]:
    if source.is_file():
        if source.suffix == ".py":
            yield source
        return
    for py_file in sorted(source.rglob("*.py")):
        parts = py_file.relative_to(source).parts
        if any(exc in parts for exc in exclude):
            continue
        yield py_file


def scan_tree(
    base: Path,
    sources: list[str] | None = None,
    *,
    exclude_patterns: tuple[str, ...] = DEFAULT_EXCLUDE,
    max_files: int = 5000,
) -> DeclarationIndex:
    """Scan every .py file under the given sources.

    Args:
        base: Import base; module names are computed relative to it.
        sources: Files or directories relative to ``base`` (default: base itself).
        exclude_patterns: Directory names to skip.
        max_files: Safety cap on number of files to scan.

    Returns:
        DeclarationIndex.  Unreadable or unparsable files are recorded in
        ``index.errors`` and skipped.
    """
    index = DeclarationIndex()
    seen: set[Path] = set()

    for source in sources or ["."]:
        root = (base / source) if not Path(source).is_absolute() else Path(source)
        if not root.exists():
            index.errors[str(source)] = "Source path does not exist"
            logger.warning("Source path does not exist: %s", root)
            continue

        for py_file in _iter_python_files(root, exclude_patterns):
            resolved = py_file.resolve()
            if resolved in seen:
                continue
            if len(seen) >= max_files:
                logger.warning("scan_tree: hit max_files cap (%d), stopping", max_files)
                return index
            seen.add(resolved)

            try:
                declarations = scan_file(py_file, base)
            except SyntaxError as e:
                index.errors[str(py_file)] = f"SyntaxError: {e.msg} (line {e.lineno})"
                logger.warning("Skipping %s: %s", py_file, index.errors[str(py_file)])
                continue
            except OSError as e:
                index.errors[str(py_file)] = str(e)
                logger.warning("Cannot read %s: %s", py_file, e)
                continue

            index.files.append(str(py_file))
            index.add(declarations)

    logger.debug("Scanned %d file(s), %d declaration(s)", len(index.files), len(index))
    return index
