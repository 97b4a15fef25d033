"""Path-addressed configuration store and its section views.

Purpose
-------
Anchor the mutable :class:`Config` store that owns one configuration tree and
one file, and the :class:`ConfigSection` prefix view layered on top of it.
This module contains no I/O; persistence is delegated to the owning factory
through the :class:`~lib_config_vault.application.ports.StoreOwner` port.

Contents
--------
* :class:`Config` – typed get/set/contains over dotted paths, read-only
  ``Mapping`` over the top-level keys, and cursor factories.
* :class:`ConfigSection` – relative view: every sub-path is prefixed with the
  section path and resolved against the same underlying tree.

System Role
-----------
Every call to :meth:`lib_config_vault.core.ConfigFactory.create` returns a
:class:`Config`. Reads report absent, mistyped or unconvertible values as
``None``; only writes with malformed paths raise.
"""

from __future__ import annotations

import json
from collections.abc import Mapping as MappingABC
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Mapping, TypeVar, overload

from ..application.ports import StoreOwner
from ..application.registry import convert_from_raw, convert_to_raw
from ..observability import log_debug
from .errors import InvalidPath
from .fields import Field, FieldList
from .paths import PATH_SEPARATOR, assign_path, remove_path, resolve_path

T = TypeVar("T")


@dataclass(eq=False, slots=True)
class Config(MappingABC[str, Any]):
    """Configuration tree bound to one file and to the factory that loaded it.

    Why
    ----
    Callers need typed access to nested values without writing guard code for
    every intermediate level, and need edits to go back to the same file.

    Parameters
    ----------
    file:
        Location the tree was loaded from and will be saved to.
    data:
        The tree itself. Mutated in place by :meth:`set`.
    factory:
        Owner providing type adapters and persistence.

    Examples
    --------
    >>> from lib_config_vault.core import ConfigFactory
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> cfg = ConfigFactory(tmp.name).create("app.toml")
    >>> cfg.set("database.port", "5432")
    >>> cfg.get_optional("database.port", int)
    5432
    >>> cfg.contains("database.host")
    False
    >>> tmp.cleanup()
    """

    file: Path
    data: dict[str, Any]
    factory: StoreOwner

    def get_optional(self, path: str, type_: type[T] = object) -> T | None:  # type: ignore[assignment]
        """Return the value at *path* converted to *type_*, or ``None`` on a miss.

        A miss covers absent keys, intermediate non-mapping values, values the
        registered adapter declines, and (without an adapter) values that are
        not instances of *type_*.
        """

        try:
            raw = resolve_path(self.data, path)
        except InvalidPath:
            return None
        return convert_from_raw(self.factory.types, self, path, raw, type_)

    @overload
    def get(self, path: str, type_: type[T] = ..., *, default: T) -> T:  # type: ignore[override]
        ...

    @overload
    def get(self, path: str, type_: type[T] = ..., *, default: None = ...) -> T | None:  # type: ignore[override]
        ...

    def get(self, path: str, type_: type[Any] = object, *, default: Any = None) -> Any:
        """Resolve *path* like :meth:`get_optional` and fall back to *default*.

        Examples
        --------
        >>> from lib_config_vault.core import ConfigFactory
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> cfg = ConfigFactory(tmp.name).create("app.yaml")
        >>> cfg.get("missing.path", int, default=3)
        3
        >>> tmp.cleanup()
        """

        value = self.get_optional(path, type_)
        return default if value is None else value

    def set(self, path: str, value: Any | None) -> None:
        """Store *value* at *path*; ``None`` removes the final key.

        Missing intermediate mappings are created. An intermediate scalar is
        replaced by a mapping and its value is lost. The value is stored in
        the raw form produced by the adapter registered for ``type(value)``.

        Raises
        ------
        InvalidPath
            When *path* contains empty segments.
        """

        if value is None:
            removed = remove_path(self.data, path)
            log_debug("config_value_removed", path=str(self.file), key=path, removed=removed)
            return
        assign_path(self.data, path, convert_to_raw(self.factory.types, self, path, value))

    def remove(self, path: str) -> None:
        self.set(path, None)

    def contains(self, path: str) -> bool:
        """Return ``True`` when *path* holds a value; never raises."""

        try:
            return self.get_optional(path) is not None
        except Exception as exc:  # noqa: BLE001 - contains() reports any failure as absence
            log_debug("config_contains_failed", path=str(self.file), key=path, error=str(exc))
            return False

    def field(self, path: str, type_: type[T]) -> Field[T]:
        return Field(self, path, type_)

    def field_list(self, path: str, element_type: type[T]) -> FieldList:
        return FieldList(self, path, element_type)

    def section(self, path: str) -> ConfigSection:
        return ConfigSection(self, path)

    def save(self) -> None:
        """Write the tree back to :attr:`file` through the owning factory."""

        self.factory.save(self)

    def reload(self) -> Config:
        """Discard unsaved changes and return the freshly loaded store."""

        return self.factory.reload(self)

    def as_dict(self) -> dict[str, Any]:
        """Return a deep, mutable copy of the tree.

        Examples
        --------
        >>> from lib_config_vault.core import ConfigFactory
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> cfg = ConfigFactory(tmp.name).create("app.json")
        >>> cfg.set("service.timeout", 5)
        >>> clone = cfg.as_dict()
        >>> clone["service"]["timeout"] = 10
        >>> cfg.get("service.timeout")
        5
        >>> tmp.cleanup()
        """

        return deepcopy(self.data)

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialise the tree to JSON; dates and other scalars render via ``str``."""

        return json.dumps(self.data, indent=indent, separators=(",", ":"), ensure_ascii=False, default=str)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"Config(file={str(self.file)!r}, keys={list(self.data)!r})"


class ConfigSection:
    """Relative view of a :class:`Config` rooted at a dotted path.

    Why
    ----
    Components that own one subtree (``database``, ``logging``...) should not
    need to know where that subtree sits in the file.

    What
    ----
    Offers the same store contract as :class:`Config` with every sub-path
    prefixed by :attr:`path`; reads and writes hit the root tree directly. It
    is also a cursor over the mapping itself (:meth:`value`,
    :meth:`replace`, :meth:`exists`).

    Examples
    --------
    >>> from lib_config_vault.core import ConfigFactory
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> cfg = ConfigFactory(tmp.name).create("app.toml")
    >>> db = cfg.section("database")
    >>> db.set("port", 5432)
    >>> cfg.get("database.port")
    5432
    >>> db.section("pool").set("size", 4)
    >>> cfg.get("database.pool.size")
    4
    >>> tmp.cleanup()
    """

    __slots__ = ("_root", "_path")

    def __init__(self, root: Config, path: str) -> None:
        self._root = root
        self._path = path

    @property
    def root(self) -> Config:
        return self._root

    @property
    def path(self) -> str:
        return self._path

    @property
    def file(self) -> Path:
        return self._root.file

    def get_optional(self, path: str, type_: type[T] = object) -> T | None:  # type: ignore[assignment]
        return self._root.get_optional(self._combine(path), type_)

    def get(self, path: str, type_: type[Any] = object, *, default: Any = None) -> Any:
        return self._root.get(self._combine(path), type_, default=default)

    def set(self, path: str, value: Any | None) -> None:
        self._root.set(self._combine(path), value)

    def remove(self, path: str) -> None:
        self._root.set(self._combine(path), None)

    def contains(self, path: str) -> bool:
        return self._root.contains(self._combine(path))

    def field(self, path: str, type_: type[T]) -> Field[T]:
        return Field(self._root, self._combine(path), type_)

    def field_list(self, path: str, element_type: type[T]) -> FieldList:
        return FieldList(self._root, self._combine(path), element_type)

    def section(self, path: str) -> ConfigSection:
        return ConfigSection(self._root, self._combine(path))

    def save(self) -> None:
        self._root.save()

    def reload(self) -> Config:
        return self._root.reload()

    def value(self) -> dict[str, Any] | None:
        """Return the live mapping at :attr:`path`, or ``None`` when it is not a mapping."""

        if not self._path:
            return self._root.data
        return self._root.get_optional(self._path, dict)

    def exists(self) -> bool:
        return self.value() is not None

    def replace(self, mapping: Mapping[str, Any] | None) -> None:
        """Replace the whole section with *mapping*; ``None`` removes it."""

        self._root.set(self._path, None if mapping is None else dict(mapping))

    def as_dict(self) -> dict[str, Any]:
        return deepcopy(self.value() or {})

    def _combine(self, sub_path: str) -> str:
        if not self._path:
            return sub_path
        if not sub_path:
            return self._path
        return f"{self._path}{PATH_SEPARATOR}{sub_path}"

    def __repr__(self) -> str:
        return f"ConfigSection(file={str(self.file)!r}, path={self._path!r})"
