"""Shared behaviour of the file format adapters plus the plain JSON adapter.

Purpose
-------
Convert configuration text into trees and back. Format-specific subclasses
only provide parsing and rendering; validation of the parsed root, error
translation and ``update_value`` live here so every format behaves the same.

Contents
--------
* :class:`BaseFileAdapter` – ``read`` / ``update_value`` template and helpers.
* :class:`JSONFileAdapter` – JSON without comment handling.

System Role
-----------
Registered by :class:`lib_config_vault.core.ConfigFactory` under file
extensions. The comment-preserving TOML and YAML adapters extend
:class:`BaseFileAdapter` through
:class:`lib_config_vault.adapters.file_formats.comments.CommentPreservingAdapter`.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from ...domain.errors import InvalidFormat
from ...domain.paths import assign_path
from ...observability import log_error


class BaseFileAdapter:
    """Template for adapters: subclasses implement ``_parse``, ``_render`` and ``write``."""

    format_name: str = "text"

    def read(self, text: str) -> dict[str, Any]:
        """Return the tree parsed from *text*; blank text yields an empty tree.

        Raises
        ------
        InvalidFormat
            When the text is malformed or its root is not a mapping.
        """

        if not text or not text.strip():
            return {}
        data = self._parse(text)
        if data is None:
            return {}
        return self._ensure_mapping(data)

    def write(self, previous: str, tree: Mapping[str, Any]) -> str:
        raise NotImplementedError

    def update_value(self, previous: str, path: str, value: Any) -> str:
        """Read *previous*, assign *value* at *path* (``None`` removes), and write.

        This is a whole-document read-modify-write, not an in-place patch.
        """

        tree = self.read(previous)
        assign_path(tree, path, value)
        return self.write(previous, tree)

    def _parse(self, text: str) -> Any:
        raise NotImplementedError

    def _render(self, tree: Mapping[str, Any]) -> str:
        raise NotImplementedError

    def _ensure_mapping(self, data: object) -> dict[str, Any]:
        """Ensure *data* is a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> JSONFileAdapter()._ensure_mapping({"key": 1})
        {'key': 1}
        >>> JSONFileAdapter()._ensure_mapping([1])
        Traceback (most recent call last):
        ...
        lib_config_vault.domain.errors.InvalidFormat: json document did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"{self.format_name} document did not produce a mapping")
        return dict(data)

    def _invalid(self, exc: Exception, action: str = "parse") -> InvalidFormat:
        """Log and build the ``InvalidFormat`` raised for a library failure."""

        log_error("config_file_invalid", format=self.format_name, action=action, error=str(exc))
        return InvalidFormat(f"Cannot {action} {self.format_name.upper()}: {exc}")


class JSONFileAdapter(BaseFileAdapter):
    """Read and write JSON; comments are not part of the format.

    Examples
    --------
    >>> adapter = JSONFileAdapter()
    >>> adapter.read('{"enabled": true}')
    {'enabled': True}
    >>> print(adapter.update_value('{"enabled": true}', "service.port", 8080), end="")
    {
      "enabled": true,
      "service": {
        "port": 8080
      }
    }
    """

    format_name = "json"

    def __init__(self, *, indent: int = 2) -> None:
        self._indent = indent

    def write(self, previous: str, tree: Mapping[str, Any]) -> str:
        return self._render(tree)

    def _parse(self, text: str) -> Any:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise self._invalid(exc) from exc

    def _render(self, tree: Mapping[str, Any]) -> str:
        try:
            return json.dumps(tree, indent=self._indent, ensure_ascii=False) + "\n"
        except (TypeError, ValueError) as exc:
            raise self._invalid(exc, "render") from exc
