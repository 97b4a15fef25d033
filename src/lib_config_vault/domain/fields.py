"""Typed cursors bound to one path of a :class:`~lib_config_vault.domain.config.Config`.

Purpose
-------
Let callers hold on to "the value at ``service.timeout`` as an ``int``"
instead of repeating the path and type on every access. A cursor stores no
data; every call goes back to the store.

Contents
--------
* :class:`Field` – scalar cursor.
* :class:`FieldList` – list cursor with per-element conversion and
  all-or-nothing reads.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ..application.registry import convert_from_raw, convert_to_raw
from .errors import ConversionError

if TYPE_CHECKING:
    from .config import Config

T = TypeVar("T")
E = TypeVar("E")


class Field(Generic[T]):
    """Read/write cursor for a single typed value.

    Examples
    --------
    >>> from lib_config_vault.core import ConfigFactory
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> cfg = ConfigFactory(tmp.name).create("demo.toml")
    >>> timeout = cfg.field("service.timeout", int)
    >>> timeout.exists()
    False
    >>> timeout.set(30)
    >>> timeout.get()
    30
    >>> tmp.cleanup()
    """

    __slots__ = ("_store", "_path", "_type")

    def __init__(self, store: Config, path: str, type_: type[T]) -> None:
        self._store = store
        self._path = path
        self._type = type_

    @property
    def path(self) -> str:
        return self._path

    @property
    def type(self) -> type[T]:
        return self._type

    def get_optional(self) -> T | None:
        """Return the typed value or ``None`` on a miss."""

        return self._store.get_optional(self._path, self._type)

    def get(self, default: T | None = None) -> T | None:
        value = self.get_optional()
        return default if value is None else value

    def set(self, value: T | None) -> None:
        """Store *value*; ``None`` removes the key."""

        self._store.set(self._path, value)

    def remove(self) -> None:
        self.set(None)

    def exists(self) -> bool:
        return self.get_optional() is not None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self._path!r}, type={self._type.__name__})"


class FieldList(Field[list]):  # type: ignore[type-arg]
    """Cursor for a list whose elements convert independently.

    Elements that already are instances of the element type pass through;
    the rest go through the element type's adapter. A read fails as a whole
    (``None``) when any non-``None`` element cannot be converted, whether the
    adapter declines or raises; ``None`` elements are kept as they are.
    Writes convert each element to its raw form before storing the list.

    Examples
    --------
    >>> from lib_config_vault.core import ConfigFactory
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> cfg = ConfigFactory(tmp.name).create("demo.yaml")
    >>> cfg.set("ports", [80, "443"])
    >>> cfg.field_list("ports", int).get()
    [80, 443]
    >>> cfg.set("ports", [80, "https"])
    >>> cfg.field_list("ports", int).get() is None
    True
    >>> tmp.cleanup()
    """

    __slots__ = ("_element_type",)

    def __init__(self, store: Config, path: str, element_type: type[E]) -> None:
        super().__init__(store, path, list)
        self._element_type = element_type

    @property
    def element_type(self) -> type[Any]:
        return self._element_type

    def get_optional(self) -> list[Any] | None:
        raw = self._store.get_optional(self._path, list)
        if raw is None:
            return None
        converted: list[Any] = []
        for item in raw:
            if item is None or isinstance(item, self._element_type):
                converted.append(item)
                continue
            value = convert_from_raw(self._store.factory.types, self._store, self._path, item, self._element_type)
            if value is None:
                return None
            converted.append(value)
        return converted

    def set(self, value: list[Any] | None) -> None:
        if value is None:
            self._store.set(self._path, None)
            return
        types = self._store.factory.types
        self._store.set(self._path, [convert_to_raw(types, self._store, self._path, item) for item in value])

    def get_item(self, index: int) -> Any | None:
        """Return element *index* or ``None`` when the list or the index is missing."""

        items = self.get_optional()
        if items is None:
            return None
        try:
            return items[index]
        except IndexError:
            return None

    def set_item(self, index: int, value: Any | None) -> None:
        """Replace element *index*; ``None`` removes it. Raises ``IndexError`` when out of range."""

        items = self._items_for_update()
        if value is None:
            del items[index]
        else:
            items[index] = value
        self.set(items)

    def append(self, value: Any) -> None:
        items = self._items_for_update()
        items.append(value)
        self.set(items)

    def insert(self, index: int, value: Any) -> None:
        items = self._items_for_update()
        items.insert(index, value)
        self.set(items)

    def remove_item(self, index: int) -> None:
        self.set_item(index, None)

    def _items_for_update(self) -> list[Any]:
        """Return the current elements, or an empty list when nothing is stored yet.

        A stored value that does not read as a list of the element type is not
        silently replaced.
        """

        items = self.get_optional()
        if items is not None:
            return items
        if self._store.contains(self._path):
            raise ConversionError(
                f"Value at {self._path!r} is not a list of {self._element_type.__name__}; refusing to overwrite it"
            )
        return []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self._path!r}, element_type={self._element_type.__name__})"
