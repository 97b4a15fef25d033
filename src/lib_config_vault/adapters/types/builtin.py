"""Built-in type adapters for ``int``, ``float``, ``bool`` and ``str``.

Numeric adapters accept native numbers (narrowed or widened without range
checks) and numeric strings. Unparseable strings are declined with ``None``
so a typed read reports a miss instead of failing. Booleans are never treated
as numbers even though ``bool`` subclasses ``int``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...application.registry import TypeAdapterRegistry

if TYPE_CHECKING:
    from ...domain.config import Config


def _is_number(raw: Any) -> bool:
    return isinstance(raw, (int, float)) and not isinstance(raw, bool)


class IntAdapter:
    """Read integers from numbers (truncating floats) or decimal strings.

    Examples
    --------
    >>> adapter = IntAdapter()
    >>> adapter.from_raw(None, "port", 8080.9), adapter.from_raw(None, "port", "42")
    (8080, 42)
    >>> adapter.from_raw(None, "port", "forty-two") is None
    True
    """

    def from_raw(self, root: Config, path: str, raw: Any) -> int | None:
        if not (_is_number(raw) or isinstance(raw, str)):
            return None
        try:
            return int(raw)
        except (ValueError, OverflowError):
            # nan/inf floats and non-decimal strings
            return None

    def to_raw(self, root: Config, path: str, value: int) -> Any:
        return value


class FloatAdapter:
    """Read floats from numbers or numeric strings."""

    def from_raw(self, root: Config, path: str, raw: Any) -> float | None:
        if _is_number(raw):
            return float(raw)
        if isinstance(raw, str):
            try:
                return float(raw)
            except ValueError:
                return None
        return None

    def to_raw(self, root: Config, path: str, value: float) -> Any:
        return value


class BoolAdapter:
    """Read booleans from booleans, numbers (non-zero is true) or strings.

    Any string other than a case-insensitive ``"true"`` reads as ``False``.

    Examples
    --------
    >>> adapter = BoolAdapter()
    >>> adapter.from_raw(None, "x", 2), adapter.from_raw(None, "x", "TRUE"), adapter.from_raw(None, "x", "no")
    (True, True, False)
    """

    def from_raw(self, root: Config, path: str, raw: Any) -> bool | None:
        if isinstance(raw, bool):
            return raw
        if _is_number(raw):
            return raw != 0
        if isinstance(raw, str):
            return raw.strip().lower() == "true"
        return None

    def to_raw(self, root: Config, path: str, value: bool) -> Any:
        return value


class StrAdapter:
    """Render any raw value as text."""

    def from_raw(self, root: Config, path: str, raw: Any) -> str | None:
        return None if raw is None else str(raw)

    def to_raw(self, root: Config, path: str, value: str) -> Any:
        return value


def register_builtin_types(registry: TypeAdapterRegistry) -> None:
    """Install the built-in adapters into *registry*."""

    registry.register(IntAdapter(), int)
    registry.register(FloatAdapter(), float)
    registry.register(BoolAdapter(), bool)
    registry.register(StrAdapter(), str)
