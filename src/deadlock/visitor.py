"""
deadlock: Declaration visitor.

Walks a parsed module and emits one MarkerOccurrence per workaround
decorator found on a class or on a method defined directly in a class
body. The enclosing class name travels down the walk as an argument, so
nothing carries over from one module to the next.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from .decoder import NonLiteral
from .markers import MARKER_MODULES, MARKER_NAMES, SHORT_NAMES

_FUNCTION_NODES = (ast.FunctionDef, ast.AsyncFunctionDef)
_SLOTS = {"description": 0, "expires": 1}


@dataclass(frozen=True)
class MarkerOccurrence:
    """One marker application at a declaration site, before validation."""
    arguments: tuple[object, ...]  # str for string literals, else NonLiteral
    line: int
    class_name: Optional[str] = None
    method: Optional[str] = None


def dotted_name(node: ast.expr) -> Optional[str]:
    """Return 'a.b.c' for Name/Attribute chains, None otherwise."""
    parts: list[str] = []
    cur = node
    while isinstance(cur, ast.Attribute):
        parts.append(cur.attr)
        cur = cur.value
    if not isinstance(cur, ast.Name):
        return None
    parts.append(cur.id)
    return ".".join(reversed(parts))


def marker_names(tree: ast.AST) -> frozenset[str]:
    """
    Recognized marker spellings for one module.

    The fixed set of short and qualified names, extended by any import
    aliases of the marker that the module itself declares.
    """
    names = set(MARKER_NAMES)
    for node in ast.walk(tree):
        if isinstance(node, ast.ImportFrom) and node.level == 0:
            if node.module not in MARKER_MODULES:
                continue
            for alias in node.names:
                bound = alias.asname or alias.name
                if alias.name in SHORT_NAMES:
                    names.add(bound)
                elif node.module == "deadlock" and alias.name == "markers":
                    names.update(f"{bound}.{short}" for short in SHORT_NAMES)
        elif isinstance(node, ast.Import):
            for alias in node.names:
                if alias.name in MARKER_MODULES and alias.asname:
                    names.update(f"{alias.asname}.{short}" for short in SHORT_NAMES)
    return frozenset(names)


def _literal(node: ast.AST) -> object:
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return node.value
    try:
        return NonLiteral(ast.unparse(node))
    except Exception:
        return NonLiteral()


def marker_arguments(decorator: ast.expr) -> tuple[object, ...]:
    """
    Arguments of a marker decorator, ordered description first.

    Positional arguments fill the slots in order; ``description=`` and
    ``expires=`` keywords take their named slot. Anything else is kept
    so the argument count stays honest.
    """
    if not isinstance(decorator, ast.Call):
        return ()

    slots: list[object] = [None, None]
    filled = [False, False]
    extras: list[object] = []

    for i, arg in enumerate(decorator.args):
        value = _literal(arg)
        if i < 2:
            slots[i], filled[i] = value, True
        else:
            extras.append(value)

    for kw in decorator.keywords:
        value = _literal(kw.value) if kw.arg is not None else NonLiteral("**")
        slot = _SLOTS.get(kw.arg or "")
        if slot is not None and not filled[slot]:
            slots[slot], filled[slot] = value, True
        else:
            extras.append(value)

    ordered = [v for v, ok in zip(slots, filled) if ok]
    return tuple(ordered + extras)


def _markers_on(
    node: ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef,
    names: frozenset[str],
    class_name: Optional[str],
    method: Optional[str],
) -> Iterator[MarkerOccurrence]:
    for decorator in node.decorator_list:
        target = decorator.func if isinstance(decorator, ast.Call) else decorator
        if dotted_name(target) not in names:
            continue
        yield MarkerOccurrence(
            arguments=marker_arguments(decorator),
            line=node.lineno,
            class_name=class_name,
            method=method,
        )


def _walk(
    node: ast.AST,
    names: frozenset[str],
    enclosing: Optional[str],
    in_class_body: bool,
) -> Iterator[MarkerOccurrence]:
    if isinstance(node, ast.ClassDef):
        yield from _markers_on(node, names, node.name, None)
        for child in node.body:
            yield from _walk(child, names, node.name, True)
        return

    if isinstance(node, _FUNCTION_NODES) and in_class_body:
        yield from _markers_on(node, names, enclosing, node.name)

    for child in ast.iter_child_nodes(node):
        yield from _walk(child, names, enclosing, False)


def collect_occurrences(
    tree: ast.AST,
    names: Optional[Iterable[str]] = None,
) -> list[MarkerOccurrence]:
    """Collect marker occurrences from a parsed module, in source order."""
    recognized = frozenset(names) if names is not None else marker_names(tree)
    return list(_walk(tree, recognized, None, False))
