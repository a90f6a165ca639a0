"""Discovery of flag constants declared in Python sources.

Constants are recognised in two shapes::

    class Days(int):
        Monday = 1 << 0
        Tuesday = 1 << 1   # Tue

    Read: Perm = Perm(1 << 2)
    Write = Perm(1 << 3)

Values are folded from integer literals, bit and arithmetic operators and
earlier constants of the same type.  Declaration order is preserved and later
used to pick a name when several constants share a bit.
"""

from __future__ import annotations

import ast
import io
import logging
import operator
import tokenize
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from .exceptions import ConstantError
from .runs import FlagEntry

LOGGER = logging.getLogger(__name__)

GENERATED_SUFFIX = "_string.py"

_BINARY_OPS: Dict[type, Callable[[int, int], int]] = {
    ast.LShift: operator.lshift,
    ast.RShift: operator.rshift,
    ast.BitOr: operator.or_,
    ast.BitAnd: operator.and_,
    ast.BitXor: operator.xor,
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.FloorDiv: operator.floordiv,
}
_UNARY_OPS: Dict[type, Callable[[int], int]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
    ast.Invert: operator.invert,
}


class _Unfoldable(Exception):
    pass


class _Folder:
    """Constant folder restricted to integer expressions."""

    def __init__(self, type_name: str, scope: Mapping[str, int]) -> None:
        self.type_name = type_name
        self.scope = scope

    def fold(self, node: ast.AST) -> int:
        if isinstance(node, ast.Constant):
            if isinstance(node.value, int) and not isinstance(node.value, bool):
                return node.value
            raise _Unfoldable(f"not an integer: {node.value!r}")
        if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
            return _UNARY_OPS[type(node.op)](self.fold(node.operand))
        if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
            left = self.fold(node.left)
            right = self.fold(node.right)
            try:
                return _BINARY_OPS[type(node.op)](left, right)
            except (ValueError, ZeroDivisionError) as exc:
                raise _Unfoldable(str(exc)) from exc
        if isinstance(node, ast.Name):
            if node.id in self.scope:
                return self.scope[node.id]
            raise _Unfoldable(f"unknown name {node.id}")
        if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
            if node.value.id == self.type_name and node.attr in self.scope:
                return self.scope[node.attr]
            raise _Unfoldable(f"unknown attribute {node.value.id}.{node.attr}")
        if self._is_wrapper_call(node):
            return self.fold(node.args[0])  # type: ignore[attr-defined]
        raise _Unfoldable(f"unsupported expression {type(node).__name__}")

    def _is_wrapper_call(self, node: ast.AST) -> bool:
        return (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Name)
            and node.func.id in (self.type_name, "int")
            and len(node.args) == 1
            and not node.keywords
        )


def _line_comments(source: str) -> Dict[int, str]:
    comments: Dict[int, str] = {}
    try:
        for token in tokenize.generate_tokens(io.StringIO(source).readline):
            if token.type == tokenize.COMMENT:
                comments[token.start[0]] = token.string.lstrip("#").strip()
    except (tokenize.TokenError, SyntaxError) as exc:  # pragma: no cover - ast already parsed it
        LOGGER.debug("comment scan failed: %s", exc)
    return comments


def _annotation_names(node: ast.AST, type_name: str) -> bool:
    if isinstance(node, ast.Name):
        return node.id == type_name
    if isinstance(node, ast.Constant):
        return node.value == type_name
    return False


def _single_target(stmt: ast.stmt) -> Optional[str]:
    if isinstance(stmt, ast.Assign) and len(stmt.targets) == 1 and isinstance(stmt.targets[0], ast.Name):
        return stmt.targets[0].id
    if isinstance(stmt, ast.AnnAssign) and stmt.value is not None and isinstance(stmt.target, ast.Name):
        return stmt.target.id
    return None


class _Collector:
    def __init__(
        self,
        type_name: str,
        *,
        trim_prefix: str,
        line_comment: bool,
        comments: Mapping[int, str],
        filename: str,
        start_order: int,
    ) -> None:
        self.type_name = type_name
        self.trim_prefix = trim_prefix
        self.line_comment = line_comment
        self.comments = comments
        self.filename = filename
        self.order = start_order
        self.scope: Dict[str, int] = {}
        self.entries: List[FlagEntry] = []

    def add(self, ident: str, value: int, stmt: ast.stmt) -> None:
        self.scope[ident] = value
        name = ident
        if self.trim_prefix and name.startswith(self.trim_prefix):
            name = name[len(self.trim_prefix):]
        if self.line_comment:
            comment = self.comments.get(getattr(stmt, "end_lineno", None) or stmt.lineno)
            if comment:
                name = comment
        self.entries.append(FlagEntry(name=name, value=value, decl_order=self.order))
        self.order += 1

    def visit_module(self, tree: ast.Module) -> None:
        for stmt in tree.body:
            if isinstance(stmt, ast.ClassDef) and stmt.name == self.type_name:
                self.visit_class(stmt)
                continue
            ident = _single_target(stmt)
            if ident is None or not self._is_typed(stmt):
                continue
            folder = _Folder(self.type_name, self.scope)
            try:
                value = folder.fold(stmt.value)  # type: ignore[arg-type]
            except _Unfoldable as exc:
                raise ConstantError(
                    f"{self.filename}:{stmt.lineno}: can't handle non-integer constant {ident}: {exc}"
                ) from exc
            self.add(ident, value, stmt)

    def visit_class(self, node: ast.ClassDef) -> None:
        folder = _Folder(self.type_name, self.scope)
        for stmt in node.body:
            ident = _single_target(stmt)
            if ident is None or ident.startswith("_"):
                continue
            try:
                value = folder.fold(stmt.value)  # type: ignore[arg-type]
            except _Unfoldable as exc:
                LOGGER.debug("%s:%d: skipping %s.%s (%s)", self.filename, stmt.lineno, node.name, ident, exc)
                continue
            self.add(ident, value, stmt)

    def _is_typed(self, stmt: ast.stmt) -> bool:
        if isinstance(stmt, ast.AnnAssign):
            return _annotation_names(stmt.annotation, self.type_name)
        value = getattr(stmt, "value", None)
        return (
            isinstance(value, ast.Call)
            and isinstance(value.func, ast.Name)
            and value.func.id == self.type_name
        )


def find_entries(
    source: str,
    type_name: str,
    *,
    trim_prefix: str = "",
    line_comment: bool = False,
    filename: str = "<source>",
    start_order: int = 0,
) -> List[FlagEntry]:
    """Return the flag entries of ``type_name`` declared in ``source``."""

    tree = ast.parse(source, filename=filename)
    collector = _Collector(
        type_name,
        trim_prefix=trim_prefix,
        line_comment=line_comment,
        comments=_line_comments(source) if line_comment else {},
        filename=filename,
        start_order=start_order,
    )
    collector.visit_module(tree)
    return collector.entries


def iter_source_files(paths: Iterable[Path]) -> Iterator[Path]:
    """Yield Python sources under ``paths`` in a stable order."""

    for path in paths:
        if path.is_dir():
            for candidate in sorted(path.glob("*.py")):
                if not candidate.name.endswith(GENERATED_SUFFIX):
                    yield candidate
        else:
            yield path


def collect_entries(
    paths: Sequence[Path],
    type_names: Sequence[str],
    *,
    trim_prefix: str = "",
    line_comment: bool = False,
) -> Dict[str, List[FlagEntry]]:
    """Scan ``paths`` and return the entries found for every type name."""

    sources = [(path, path.read_text(encoding="utf-8")) for path in iter_source_files(paths)]
    found: Dict[str, List[FlagEntry]] = {}
    for type_name in type_names:
        entries: List[FlagEntry] = []
        for path, source in sources:
            entries.extend(
                find_entries(
                    source,
                    type_name,
                    trim_prefix=trim_prefix,
                    line_comment=line_comment,
                    filename=str(path),
                    start_order=len(entries),
                )
            )
        LOGGER.debug("found %d constants for %s", len(entries), type_name)
        found[type_name] = entries
    return found


__all__ = ["GENERATED_SUFFIX", "collect_entries", "find_entries", "iter_source_files"]
