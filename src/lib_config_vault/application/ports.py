"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts that adapters must satisfy so the factory and
the store can orchestrate behaviour without depending on concrete
implementations.

Contents
--------
* :class:`FileAdapter` – converts text to a tree and back, preserving comments
  where the format allows it.
* :class:`TypeAdapter` – converts raw tree values to typed values and back.
* :class:`ResourceSeeder` – provides first-run copies of missing files.
* :class:`StoreOwner` – what a :class:`~lib_config_vault.domain.config.Config`
  needs from the factory that created it.

System Role
-----------
These protocols keep the dependency rule intact: the domain store talks to
its owner through :class:`StoreOwner`, never to :mod:`lib_config_vault.core`.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from ..domain.config import Config
    from .registry import TypeAdapterRegistry

T = TypeVar("T")


@runtime_checkable
class FileAdapter(Protocol):
    """Parse and render one text format.

    ``write`` receives the previous on-disk text so implementations can carry
    comments and other human formatting over to the new rendering.
    """

    def read(self, text: str) -> dict[str, Any]:
        """Return the tree parsed from *text* or raise ``InvalidFormat``."""

    def write(self, previous: str, tree: Mapping[str, Any]) -> str:
        """Render *tree*, merging in whatever *previous* text can contribute."""

    def update_value(self, previous: str, path: str, value: Any) -> str:
        """Read *previous*, set *path* to *value* (``None`` removes), write back."""


@runtime_checkable
class TypeAdapter(Protocol[T]):
    """Convert between raw tree values and one typed representation.

    ``from_raw`` returns ``None`` when it declines a raw value; it may also
    raise :class:`~lib_config_vault.domain.errors.ConversionError`. Both are
    reported to readers as a miss.
    """

    def from_raw(self, root: Config, path: str, raw: Any) -> T | None:
        """Return the typed value for *raw* stored at *path*, or ``None``."""

    def to_raw(self, root: Config, path: str, value: T) -> Any:
        """Return the storable raw form of *value*."""


@runtime_checkable
class ResourceSeeder(Protocol):
    """Copy a packaged default into place when a configuration file is missing."""

    def seed(self, target: Path) -> bool:
        """Create *target* from a bundled default; return ``True`` on success."""


class StoreOwner(Protocol):
    """Services a store obtains from the factory that owns it."""

    @property
    def types(self) -> TypeAdapterRegistry:
        """Registry used for typed reads and writes."""

    def save(self, target: Config | str | Path) -> None:
        """Persist *target* to its file."""

    def reload(self, target: Config | str | Path) -> Config:
        """Discard the cached store for *target* and load it again."""
