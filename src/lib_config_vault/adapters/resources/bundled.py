"""Seed missing configuration files from bundled defaults.

Purpose
    Give applications a first-run experience: when ``settings.yaml`` does not
    exist yet, copy the packaged ``defaults/settings.yaml`` into place before
    it is loaded.

Contents
    - ``BundledResources``: :class:`~lib_config_vault.application.ports.ResourceSeeder`
      implementation backed by :mod:`importlib.resources` or a plain directory.
    - ``_should_copy`` / ``_copy_payload``: tiny helpers that narrate how
      files are written or skipped.

System Integration
    Passed to :class:`lib_config_vault.core.ConfigFactory` as ``resources``;
    the factory calls :meth:`BundledResources.seed` only for absent files.
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING

from ...domain.errors import NotFound
from ...observability import log_debug

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable


class BundledResources:
    """Look up default files by name below a package or a directory.

    Parameters
    ----------
    anchor:
        Either an importable package name (``"my_app"``) whose data files are
        read with :func:`importlib.resources.files`, or a filesystem
        :class:`~pathlib.Path`.
    directory:
        Sub-directory of *anchor* holding the defaults.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> root = Path(tmp.name)
    >>> _ = (root / "defaults").mkdir()
    >>> _ = (root / "defaults" / "app.toml").write_text("port = 1\\n")
    >>> seeder = BundledResources(root)
    >>> seeder.seed(root / "live" / "app.toml")
    True
    >>> seeder.seed(root / "live" / "other.toml")
    False
    >>> tmp.cleanup()
    """

    def __init__(self, anchor: str | Path, directory: str = "defaults") -> None:
        self._anchor = anchor
        self._directory = directory

    def seed(self, target: Path) -> bool:
        """Copy the default named like *target* into place; ``False`` when none exists."""

        if not _should_copy(target):
            return False
        try:
            payload = self.read(target.name)
        except NotFound:
            log_debug("config_default_missing", path=str(target), resource=target.name)
            return False
        _copy_payload(target, payload)
        log_debug("config_default_copied", path=str(target), resource=target.name)
        return True

    def read(self, name: str) -> bytes:
        """Return the bundled default called *name*.

        Raises
        ------
        NotFound
            When no such default is bundled.
        """

        source = self._locate(name)
        if source is None:
            raise NotFound(f"No bundled default named {name!r} in {self!r}")
        return source.read_bytes()

    def _locate(self, name: str) -> Traversable | Path | None:
        base = self._base()
        if base is None:
            return None
        candidate = base.joinpath(name)
        return candidate if candidate.is_file() else None

    def _base(self) -> Traversable | Path | None:
        if isinstance(self._anchor, Path):
            base: Traversable | Path = self._anchor / self._directory
        else:
            try:
                base = resources.files(self._anchor).joinpath(self._directory)
            except ModuleNotFoundError:
                log_debug("config_resource_package_missing", package=self._anchor)
                return None
        return base if base.is_dir() else None

    def __repr__(self) -> str:
        return f"BundledResources(anchor={self._anchor!r}, directory={self._directory!r})"


def _should_copy(destination: Path) -> bool:
    """Return ``True`` when *destination* is free to receive a default."""

    return not destination.exists()


def _copy_payload(destination: Path, payload: bytes) -> None:
    """Create parent directories and write *payload* to *destination*."""

    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(payload)
