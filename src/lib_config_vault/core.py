"""Composition root for ``lib_config_vault``.

Purpose
-------
Provide the single object that wires file adapters, type adapters and bundled
defaults together and owns the per-file cache of loaded stores.

Contents
--------
* :data:`_DEFAULT_FILE_ADAPTERS` – extension table installed on every factory.
* :class:`ConfigLoadError` / :class:`ConfigSaveError` – I/O and parse failures
  annotated with the offending file.
* :class:`ConfigFactory` – ``create`` / ``reload`` / ``save`` plus adapter
  registration.

System Role
-----------
This module connects the adapters with the domain store while emitting
structured observability signals. It is the canonical location for wiring new
formats. There is no module-level instance: applications construct a factory
and pass it where it is needed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from .adapters.file_formats.structured import JSONFileAdapter
from .adapters.file_formats.toml_format import TOMLFileAdapter
from .adapters.file_formats.yaml_format import YAMLFileAdapter
from .adapters.types.builtin import register_builtin_types
from .application.ports import FileAdapter, ResourceSeeder, TypeAdapter
from .application.registry import TypeAdapterRegistry
from .domain.config import Config
from .domain.errors import ConfigError, InvalidFormat, NotLoaded, UnsupportedFormat
from .observability import log_debug, log_error, log_info, make_event

# Extensions installed on every factory; later registrations override them.
_DEFAULT_FILE_ADAPTERS: tuple[tuple[Callable[[], FileAdapter], tuple[str, ...]], ...] = (
    (JSONFileAdapter, ("json", "jsn", "jason")),
    (YAMLFileAdapter, ("yml", "yaml")),
    (TOMLFileAdapter, ("toml", "tml")),
)


class ConfigLoadError(ConfigError):
    """Raised when a configuration file cannot be read, created or parsed.

    Wraps :class:`OSError` and :class:`InvalidFormat` with the file path so
    callers can catch a single exception family.
    """


class ConfigSaveError(ConfigError):
    """Raised when a configuration file cannot be written."""


def _normalise_extension(extension: str) -> str:
    """Return *extension* lower-cased without its leading dot.

    Examples
    --------
    >>> _normalise_extension(".YAML")
    'yaml'
    """

    return extension.lower().lstrip(".")


class ConfigFactory:
    """Load, cache and save configuration files below one directory.

    Why
    ----
    Each file should map to exactly one live :class:`Config` so edits made
    through different parts of an application are never lost to a stale copy.

    Parameters
    ----------
    directory:
        Base directory for relative file names. Created when missing.
    resources:
        Optional :class:`~lib_config_vault.application.ports.ResourceSeeder`
        that provides a default for files that do not exist yet.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> factory = ConfigFactory(tmp.name)
    >>> cfg = factory.create("service.yaml")
    >>> cfg.set("service.name", "demo")
    >>> factory.save(cfg)
    >>> print((Path(tmp.name) / "service.yaml").read_text(encoding="utf-8"), end="")
    service:
      name: demo
    >>> factory.create("service.yaml") is cfg
    True
    >>> tmp.cleanup()
    """

    def __init__(self, directory: str | Path, *, resources: ResourceSeeder | None = None) -> None:
        self._directory = Path(directory)
        self._directory.mkdir(parents=True, exist_ok=True)
        self._resources = resources
        self._types = TypeAdapterRegistry()
        self._file_adapters: dict[str, FileAdapter] = {}
        self._cache: dict[Path, Config] = {}
        register_builtin_types(self._types)
        for adapter_factory, extensions in _DEFAULT_FILE_ADAPTERS:
            adapter = adapter_factory()
            for extension in extensions:
                self._file_adapters[extension] = adapter

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def types(self) -> TypeAdapterRegistry:
        return self._types

    def create(self, file: str | Path) -> Config:
        """Return the cached store for *file*, loading or creating it on first use.

        A missing file is seeded from the bundled resources when they provide
        one, otherwise created empty together with its parent directories.
        Extensions without a file adapter yield an empty tree.

        Raises
        ------
        ConfigLoadError
            When the file cannot be read or created, or its text is malformed.
        """

        path = self._resolve(file)
        cached = self._cache.get(path)
        if cached is not None:
            return cached
        if not path.exists():
            self._materialise(path)
        config = Config(path, self._load(path), self)
        self._cache[path] = config
        log_info("config_loaded", **make_event(str(path), self._format_of(path), {"keys": len(config.data)}))
        return config

    def reload(self, target: Config | str | Path) -> Config:
        """Drop the cached store for *target* and load the file again.

        Unsaved changes in the previous store are discarded. The previous
        :class:`Config` object stays usable but is no longer the cached one.
        """

        path = self._target_path(target)
        self._cache.pop(path, None)
        log_debug("config_reloaded", **make_event(str(path), self._format_of(path)))
        return self.create(path)

    def save(self, target: Config | str | Path) -> None:
        """Write the cached tree of *target* back to its file, keeping comments.

        Raises
        ------
        NotLoaded
            When the file was never created through this factory.
        UnsupportedFormat
            When no file adapter is registered for the extension.
        ConfigSaveError
            When reading the previous text or writing the new one fails.
        """

        path = self._target_path(target)
        config = self._cache.get(path)
        if config is None:
            raise NotLoaded(f"Configuration {path} was not loaded by this factory")
        adapter = self.file_adapter(path)
        if adapter is None:
            raise UnsupportedFormat(f"No file adapter registered for {path.name!r}")
        try:
            previous = path.read_text(encoding="utf-8") if path.exists() else ""
            text = adapter.write(previous, config.data)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            log_error("config_save_failed", **make_event(str(path), self._format_of(path), {"error": str(exc)}))
            raise ConfigSaveError(f"Failed to save configuration {path}: {exc}") from exc
        log_info("config_saved", **make_event(str(path), self._format_of(path), {"bytes": len(text)}))

    def register_file_adapter(self, adapter: FileAdapter, *extensions: str) -> None:
        """Route files with any of *extensions* (case-insensitive, dot optional) to *adapter*."""

        for extension in extensions:
            key = _normalise_extension(extension)
            self._file_adapters[key] = adapter
            log_debug("file_adapter_registered", extension=key, adapter=type(adapter).__name__)

    def register_type_adapter(self, adapter: TypeAdapter[Any], type_: type) -> None:
        """Use *adapter* for reads and writes of exactly *type_*."""

        self._types.register(adapter, type_)
        log_debug("type_adapter_registered", type=type_.__name__, adapter=type(adapter).__name__)

    def type_adapter(self, type_: type) -> TypeAdapter[Any] | None:
        return self._types.lookup(type_)

    def file_adapter(self, path: str | Path) -> FileAdapter | None:
        """Return the adapter for the extension of *path*, if any.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> factory = ConfigFactory(tmp.name)
        >>> type(factory.file_adapter("settings.YML")).__name__
        'YAMLFileAdapter'
        >>> factory.file_adapter("notes.txt") is None
        True
        >>> tmp.cleanup()
        """

        return self._file_adapters.get(_normalise_extension(Path(path).suffix))

    def _resolve(self, file: str | Path) -> Path:
        path = Path(file)
        if not path.is_absolute():
            path = self._directory / path
        return path.resolve()

    def _target_path(self, target: Config | str | Path) -> Path:
        if isinstance(target, Config):
            return target.file
        return self._resolve(target)

    def _format_of(self, path: Path) -> str | None:
        adapter = self.file_adapter(path)
        return getattr(adapter, "format_name", None) if adapter is not None else None

    def _materialise(self, path: Path) -> None:
        """Seed *path* from bundled resources or create it empty."""

        try:
            if self._resources is not None and self._resources.seed(path):
                log_info("config_seeded", **make_event(str(path), self._format_of(path)))
                return
            path.parent.mkdir(parents=True, exist_ok=True)
            path.touch()
        except OSError as exc:
            raise ConfigLoadError(f"Failed to create configuration {path}: {exc}") from exc
        log_info("config_created", **make_event(str(path), self._format_of(path)))

    def _load(self, path: Path) -> dict[str, Any]:
        adapter = self.file_adapter(path)
        if adapter is None:
            log_debug("config_format_unsupported", **make_event(str(path), None))
            return {}
        try:
            text = path.read_text(encoding="utf-8")
            data = adapter.read(text)
        except (OSError, InvalidFormat) as exc:
            log_error("config_load_failed", **make_event(str(path), self._format_of(path), {"error": str(exc)}))
            raise ConfigLoadError(f"Failed to load configuration {path}: {exc}") from exc
        log_debug("config_file_read", **make_event(str(path), self._format_of(path), {"bytes": len(text)}))
        return data

    def __repr__(self) -> str:
        return f"ConfigFactory(directory={str(self._directory)!r}, files={len(self._cache)})"


__all__ = [
    "ConfigFactory",
    "ConfigLoadError",
    "ConfigSaveError",
]
