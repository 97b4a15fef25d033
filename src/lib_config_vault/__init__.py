"""Public package surface for comment-preserving configuration files.

Applications build one :class:`ConfigFactory` per configuration directory,
obtain :class:`Config` stores from it, and read or write values by dotted
path. Saving a TOML or YAML store keeps the comments of the file on disk.
"""

from __future__ import annotations

from .adapters.file_formats.structured import JSONFileAdapter
from .adapters.file_formats.toml_format import TOMLFileAdapter
from .adapters.file_formats.yaml_format import YAMLFileAdapter
from .adapters.resources.bundled import BundledResources
from .application.ports import FileAdapter, ResourceSeeder, TypeAdapter
from .application.registry import TypeAdapterRegistry
from .core import ConfigFactory, ConfigLoadError, ConfigSaveError
from .domain.config import Config, ConfigSection
from .domain.errors import (
    ConfigError,
    ConversionError,
    InvalidFormat,
    InvalidPath,
    NotFound,
    NotLoaded,
    UnsupportedFormat,
)
from .domain.fields import Field, FieldList
from .observability import bind_trace_id, get_logger

__all__ = [
    "BundledResources",
    "Config",
    "ConfigError",
    "ConfigFactory",
    "ConfigLoadError",
    "ConfigSaveError",
    "ConfigSection",
    "ConversionError",
    "Field",
    "FieldList",
    "FileAdapter",
    "InvalidFormat",
    "InvalidPath",
    "JSONFileAdapter",
    "NotFound",
    "NotLoaded",
    "ResourceSeeder",
    "TOMLFileAdapter",
    "TypeAdapter",
    "TypeAdapterRegistry",
    "UnsupportedFormat",
    "YAMLFileAdapter",
    "bind_trace_id",
    "get_logger",
]
