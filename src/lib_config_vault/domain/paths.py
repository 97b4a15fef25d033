"""Dotted-path navigation over nested configuration trees.

Purpose
-------
Centralise how dotted paths (``"database.pool.size"``) are split and how they
walk, create and prune nested ``dict`` trees. The store, the section views and
the format adapters' ``update_value`` all go through these helpers so the
path semantics live in exactly one place.

Contents
--------
* :data:`PATH_SEPARATOR` – the segment separator (no escaping exists).
* :func:`split_path` / :func:`join_path` – lossless split/join.
* :func:`resolve_path` – read a value, ``None`` on a miss.
* :func:`assign_path` – write a value, creating intermediate mappings.
* :func:`remove_path` – delete the final key of a path.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any, Final

from .errors import InvalidPath

PATH_SEPARATOR: Final[str] = "."


def split_path(path: str) -> list[str]:
    """Split *path* into segments, rejecting empty segments.

    A literal ``.`` inside a key cannot be expressed; every dot separates.

    Examples
    --------
    >>> split_path("service.endpoint.url")
    ['service', 'endpoint', 'url']
    >>> split_path("a..b")
    Traceback (most recent call last):
    ...
    lib_config_vault.domain.errors.InvalidPath: Path 'a..b' contains empty segments
    """

    parts = path.split(PATH_SEPARATOR)
    if any(not part for part in parts):
        raise InvalidPath(f"Path {path!r} contains empty segments")
    return parts


def join_path(*segments: str) -> str:
    """Join *segments* with dots, skipping empty ones.

    Examples
    --------
    >>> join_path("", "service", "timeout")
    'service.timeout'
    """

    return PATH_SEPARATOR.join(segment for segment in segments if segment)


def resolve_path(tree: Mapping[str, Any], path: str) -> Any | None:
    """Return the raw value stored at *path* or ``None`` when any segment misses.

    Examples
    --------
    >>> resolve_path({"db": {"port": 5432}}, "db.port")
    5432
    >>> resolve_path({"db": 5}, "db.port") is None
    True
    """

    current: Any = tree
    for part in split_path(path):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


def assign_path(tree: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Store *value* at *path*, or remove the final key when *value* is ``None``.

    Intermediate segments that are missing, or that hold a non-mapping value,
    are replaced by fresh empty mappings; the scalar they held is lost.

    Examples
    --------
    >>> data = {"db": "sqlite"}
    >>> assign_path(data, "db.port", 5432)
    >>> data
    {'db': {'port': 5432}}
    """

    if value is None:
        remove_path(tree, path)
        return
    parts = split_path(path)
    parent = _ensure_parent(tree, parts[:-1])
    parent[parts[-1]] = value


def remove_path(tree: MutableMapping[str, Any], path: str) -> bool:
    """Delete the final key of *path*; return ``True`` when something was removed.

    Absent intermediate mappings are not created.
    """

    parts = split_path(path)
    current: Any = tree
    for part in parts[:-1]:
        current = current.get(part) if isinstance(current, MutableMapping) else None
        if current is None:
            return False
    if not isinstance(current, MutableMapping) or parts[-1] not in current:
        return False
    del current[parts[-1]]
    return True


def _ensure_parent(tree: MutableMapping[str, Any], parts: list[str]) -> MutableMapping[str, Any]:
    """Walk *parts* below *tree*, creating (or overwriting with) empty mappings."""

    current = tree
    for part in parts:
        child = current.get(part)
        if not isinstance(child, MutableMapping):
            child = {}
            current[part] = child
        current = child
    return current
