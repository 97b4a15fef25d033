"""Domain-level exception hierarchy.

Purpose
-------
Expose the error taxonomy shared by the store, the format adapters and the
factory. Reads never use these for absent values: a miss is ``None``. The
exceptions below are reserved for malformed input, unusable paths and fatal
I/O conditions.

Contents
--------
* :class:`ConfigError` – umbrella base class for all library failures.
* :class:`InvalidFormat` – a document cannot be parsed or serialised.
* :class:`InvalidPath` – a dotted path with empty segments was used for a write.
* :class:`ConversionError` – a type adapter declined a raw value loudly.
* :class:`NotFound` – an optional resource (bundled default) is missing.
* :class:`NotLoaded` – a save was requested for a file the factory never loaded.
* :class:`UnsupportedFormat` – no file adapter is registered for an extension.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_config_vault``.

    Callers that do not need fine-grained handling catch this one type.
    """


class InvalidFormat(ConfigError):
    """Raised when text cannot be parsed into a tree (or a tree rendered as text).

    Typical Sources
    ---------------
    :mod:`tomllib`, :mod:`tomli_w`, :mod:`yaml` and :mod:`json` failures inside
    the format adapters.
    """


class InvalidPath(ConfigError):
    """Raised when a dotted path contains empty segments (``"a..b"``, ``".a"``)."""


class ConversionError(ConfigError):
    """Raised by a type adapter that cannot convert a raw value.

    Reads fold this into a miss; it never reaches callers of ``get_optional``.
    """


class NotFound(ConfigError):
    """Represents a missing-but-optional resource such as a bundled default file."""


class NotLoaded(ConfigError):
    """Raised when saving a file that was never created through the factory."""


class UnsupportedFormat(ConfigError):
    """Raised when no file adapter is registered for a file's extension."""
