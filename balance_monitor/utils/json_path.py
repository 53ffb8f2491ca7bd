"""
Dotted/bracketed path resolution over decoded JSON values.

Grammar: property names separated by dots, and non-negative integer indices in
brackets, e.g. ``balance_infos[0].total_balance`` or ``data.items[2][0]``.

`resolve` is strict: a path that cannot be followed raises `PathError`.
An empty path or a null root returns `NOT_FOUND` instead, which lets callers
treat a field as optional. The input value is never mutated.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Sequence, Tuple, Union

from balance_monitor.domain.errors import PathError

_TOKEN_RE = re.compile(r"(?:^|\.)([^.\[\]]+)|\[(\d+)\]")

Token = Tuple[str, Union[str, int]]


class _NotFound:
    _instance = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()


def tokenize(path: str) -> List[Token]:
    """
    Split a path into ("key", name) and ("index", n) tokens.
    """
    tokens: List[Token] = []
    pos = 0
    while pos < len(path):
        match = _TOKEN_RE.match(path, pos)
        if match is None or match.end() == pos:
            raise PathError(f"malformed path at offset {pos}", path)
        key, index = match.group(1), match.group(2)
        if key is not None:
            tokens.append(("key", key.strip()))
        else:
            tokens.append(("index", int(index)))
        pos = match.end()
    return tokens


def resolve(root: Any, path: str) -> Any:
    """
    Resolve `path` against `root`.

    Returns NOT_FOUND for an empty path or a None root. Raises PathError when a
    property is read from a non-object, an index is read from a non-array, or
    a step addresses a missing field or out-of-range index.
    """
    if root is None or not path or not path.strip():
        return NOT_FOUND

    current = root
    for kind, value in tokenize(path.strip()):
        if kind == "key":
            if not isinstance(current, Mapping):
                raise PathError("cannot access property on non-object", path, str(value))
            if value not in current:
                raise PathError("field not found", path, str(value))
            current = current[value]
        else:
            if not isinstance(current, Sequence) or isinstance(current, (str, bytes)):
                raise PathError("index access on non-array", path, f"[{value}]")
            if value >= len(current):
                raise PathError("field not found", path, f"[{value}]")
            current = current[value]
    return current


def resolve_optional(root: Any, path: str | None, default: Any = None) -> Any:
    """
    Lenient variant of `resolve` for optional fields: any failure yields `default`.
    """
    if not path:
        return default
    try:
        value = resolve(root, path)
    except PathError:
        return default
    return default if value is NOT_FOUND else value


__all__ = ["NOT_FOUND", "resolve", "resolve_optional", "tokenize"]
