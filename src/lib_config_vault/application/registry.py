"""Type adapter registry and the conversion policy built on top of it.

Purpose
-------
Hold the table of :class:`~lib_config_vault.application.ports.TypeAdapter`
instances keyed by exact Python type and apply the read/write conversion rules
every store and field view shares.

Contents
    - ``TypeAdapterRegistry``: exact-type lookup table.
    - ``convert_from_raw``: raw tree value → typed value or ``None`` (miss).
    - ``convert_to_raw``: typed value → raw storable value.

System Role
-----------
Owned by :class:`lib_config_vault.core.ConfigFactory`; consumed by
:mod:`lib_config_vault.domain.config` and :mod:`lib_config_vault.domain.fields`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from ..observability import log_debug
from .ports import TypeAdapter

if TYPE_CHECKING:
    from ..domain.config import Config

T = TypeVar("T")


class TypeAdapterRegistry:
    """Map exact Python types to their adapters.

    Lookup never walks the class hierarchy: an adapter registered for a base
    class does not apply to its subclasses.

    Examples
    --------
    >>> from lib_config_vault.adapters.types.builtin import IntAdapter
    >>> registry = TypeAdapterRegistry()
    >>> registry.register(IntAdapter(), int)
    >>> int in registry, bool in registry
    (True, False)
    """

    def __init__(self) -> None:
        self._adapters: dict[type, TypeAdapter[Any]] = {}

    def register(self, adapter: TypeAdapter[T], type_: type[T]) -> None:
        """Register *adapter* for *type_*, replacing any previous registration."""

        self._adapters[type_] = adapter

    def lookup(self, type_: type[T]) -> TypeAdapter[T] | None:
        """Return the adapter registered for exactly *type_*."""

        return self._adapters.get(type_)

    def __contains__(self, type_: object) -> bool:
        return type_ in self._adapters

    def __len__(self) -> int:
        return len(self._adapters)


def convert_from_raw(
    registry: TypeAdapterRegistry,
    root: Config,
    path: str,
    raw: Any,
    type_: type[T],
) -> T | None:
    """Convert *raw* to *type_* or return ``None`` for a miss.

    Without a registered adapter the raw value passes through only when it is
    already an instance of *type_*. Any exception raised by the adapter is a
    miss; callers cannot tell "absent" from "present but unconvertible".

    Examples
    --------
    >>> convert_from_raw(TypeAdapterRegistry(), None, "a", [1, 2], list)
    [1, 2]
    >>> convert_from_raw(TypeAdapterRegistry(), None, "a", "x", list) is None
    True
    """

    if raw is None:
        return None
    adapter = registry.lookup(type_)
    if adapter is None:
        return raw if isinstance(raw, type_) else None
    try:
        return adapter.from_raw(root, path, raw)
    except Exception as exc:  # noqa: BLE001 - a failed conversion reads as a miss
        log_debug(
            "type_conversion_declined",
            path=path,
            type=type_.__name__,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return None


def convert_to_raw(registry: TypeAdapterRegistry, root: Config, path: str, value: Any) -> Any:
    """Return the storable form of *value* using the adapter for ``type(value)``."""

    if value is None:
        return None
    adapter = registry.lookup(type(value))
    if adapter is None:
        return value
    return adapter.to_raw(root, path, value)
