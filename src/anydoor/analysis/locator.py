"""Resolve the invocable member enclosing a caret position."""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol, Sequence, runtime_checkable

from ..core.call_site import CallSite, MethodTarget

__all__ = [
    "SourceAnalyzer",
    "PythonSourceAnalyzer",
    "module_name_for_path",
    "UNTYPED_PARAMETER",
]

LOGGER = logging.getLogger(__name__)
UNTYPED_PARAMETER = "object"
_DEFAULT_MODULE = "__main__"
_FUNCTION_NODES = (ast.FunctionDef, ast.AsyncFunctionDef)
_NESTED_BODY_FIELDS = ("body", "orelse", "finalbody", "handlers", "cases")


@runtime_checkable
class SourceAnalyzer(Protocol):
    """Collaborator that maps a caret position to a :class:`MethodTarget`."""

    def locate(self, source: str, line: int, column: int = 0) -> MethodTarget | None:
        ...


@dataclass(slots=True)
class _Member:
    node: ast.FunctionDef | ast.AsyncFunctionDef
    scope: tuple[str, ...]
    in_class: bool

    @property
    def first_line(self) -> int:
        lines = [decorator.lineno for decorator in self.node.decorator_list]
        lines.append(self.node.lineno)
        return min(lines)

    def contains(self, line: int, column: int) -> bool:
        end_line = self.node.end_lineno or self.node.lineno
        end_column = self.node.end_col_offset
        if line < self.first_line or line > end_line:
            return False
        if line == end_line and end_column is not None and column > end_column:
            return False
        return True


class PythonSourceAnalyzer:
    """:class:`SourceAnalyzer` for Python source built on :mod:`ast`.

    Only functions declared directly in a module or class body count as
    invocable members. ``line`` is 1-based and ``column`` 0-based.
    """

    def __init__(self, module_name: str = _DEFAULT_MODULE) -> None:
        self.module_name = module_name or _DEFAULT_MODULE

    def locate(self, source: str, line: int, column: int = 0) -> MethodTarget | None:
        try:
            tree = ast.parse(source)
        except (SyntaxError, ValueError) as exc:
            LOGGER.debug("Cannot analyze %s: %s", self.module_name, exc)
            return None
        for member in _collect_members(tree.body, (), in_class=False):
            if member.contains(line, column):
                return self._build_target(member)
        return None

    def locate_file(self, path: Path | str, line: int, column: int = 0) -> MethodTarget | None:
        """Read ``path`` and resolve the member at ``line``/``column``."""

        source = Path(path).read_text(encoding="utf-8")
        return self.locate(source, line, column)

    def _build_target(self, member: _Member) -> MethodTarget:
        params = _declared_parameters(member.node, skip_receiver=member.in_class and not _is_static(member.node))
        call_site = CallSite(
            qualified_type_name=".".join((self.module_name, *member.scope)),
            member_name=member.node.name,
            parameter_type_names=tuple(annotation for _, annotation in params),
        )
        return MethodTarget(call_site=call_site, parameter_names=tuple(name for name, _ in params))


def module_name_for_path(path: Path | str) -> str:
    """Return the dotted module name for ``path``, walking up package directories."""

    resolved = Path(path).resolve()
    parts = [] if resolved.stem == "__init__" else [resolved.stem]
    parent = resolved.parent
    while (parent / "__init__.py").exists():
        parts.insert(0, parent.name)
        if parent.parent == parent:
            break
        parent = parent.parent
    return ".".join(parts) or _DEFAULT_MODULE


def _collect_members(body: Sequence[ast.AST], scope: tuple[str, ...], *, in_class: bool) -> Iterable[_Member]:
    for node in body:
        if isinstance(node, _FUNCTION_NODES):
            yield _Member(node=node, scope=scope, in_class=in_class)
        elif isinstance(node, ast.ClassDef):
            yield from _collect_members(node.body, (*scope, node.name), in_class=True)
        else:
            # Conditional or guarded declarations (if/try/with/match) stay in the same scope.
            for field_name in _NESTED_BODY_FIELDS:
                nested = getattr(node, field_name, None)
                if isinstance(nested, list):
                    yield from _collect_members(nested, scope, in_class=in_class)


def _declared_parameters(
    node: ast.FunctionDef | ast.AsyncFunctionDef, *, skip_receiver: bool
) -> list[tuple[str, str]]:
    arguments = node.args
    positional = [*arguments.posonlyargs, *arguments.args]
    if skip_receiver and positional:
        positional = positional[1:]
    return [(arg.arg, _annotation_text(arg)) for arg in (*positional, *arguments.kwonlyargs)]


def _annotation_text(arg: ast.arg) -> str:
    if arg.annotation is None:
        return UNTYPED_PARAMETER
    return ast.unparse(arg.annotation)


def _is_static(node: ast.FunctionDef | ast.AsyncFunctionDef) -> bool:
    for decorator in node.decorator_list:
        if isinstance(decorator, ast.Name) and decorator.id == "staticmethod":
            return True
        if isinstance(decorator, ast.Attribute) and decorator.attr == "staticmethod":
            return True
    return False
