"""TOML adapter: ``tomllib`` for reading, ``tomli_w`` for writing.

The line grammar recognises ``[table]`` headers, ``[[array]]`` headers (whose
elements are addressed as ``name[n]``), bare, quoted and dotted keys, and
skips the continuation lines of multi-line strings and arrays so comment
attribution stays aligned with the real entries. Rendering walks the tree in
``tomli_w`` order but always writes arrays of tables as ``[[name]]`` blocks;
``tomli_w`` would fold short ones into inline arrays, leaving their comments
without a line to attach to.
"""

from __future__ import annotations

import re
from typing import Any, Iterator, Mapping

import tomli_w

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - exercised on Python 3.10
    import tomli as tomllib  # type: ignore[import-not-found, no-redef]

from .comments import (
    BLANK_LINE,
    COMMENT_LINE,
    CONTENT_LINE,
    CONTINUATION_LINE,
    CommentPreservingAdapter,
    LineKind,
    ScannedLine,
    find_comment,
    split_comment,
)

_KEY_PART = r"""(?:[A-Za-z0-9_-]+|"(?:[^"\\]|\\.)*"|'[^']*')"""
_DOTTED = rf"{_KEY_PART}(?:\s*\.\s*{_KEY_PART})*"
_ARRAY_TABLE = re.compile(rf"^\s*\[\[\s*(?P<name>{_DOTTED})\s*\]\]")
_TABLE = re.compile(rf"^\s*\[\s*(?P<name>{_DOTTED})\s*\]")
_KEY = re.compile(rf"^\s*(?P<key>{_DOTTED})\s*=")
_PART = re.compile(_KEY_PART)


def _normalise(dotted: str) -> str:
    """Turn ``a . "b c"`` into ``a.b c``.

    Examples
    --------
    >>> _normalise('server . "display name"')
    'server.display name'
    """

    parts = []
    for match in _PART.finditer(dotted):
        part = match.group(0)
        if part[:1] in "\"'":
            part = part[1:-1]
        parts.append(part)
    return ".".join(parts)


def _bracket_delta(code: str) -> int:
    """Net count of opening brackets outside strings in *code*."""

    depth = 0
    quote: str | None = None
    index = 0
    while index < len(code):
        char = code[index]
        if quote is not None:
            if char == "\\" and quote == '"':
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char in "[{":
            depth += 1
        elif char in "]}":
            depth -= 1
        index += 1
    return depth


def _opens_multiline_string(code: str) -> str | None:
    """Return the delimiter when *code* leaves a multi-line string open."""

    for delimiter in ('"""', "'''"):
        if code.count(delimiter) % 2 == 1:
            return delimiter
    return None


class TomlLineGrammar:
    """Stateful classifier for TOML lines.

    Examples
    --------
    >>> grammar = TomlLineGrammar()
    >>> [grammar.scan(line).path for line in ["[[servers]]", "host = 'a'", "[[servers]]", "host = 'b'"]]
    ['servers[0]', 'servers[0].host', 'servers[1]', 'servers[1].host']
    """

    def __init__(self) -> None:
        self._table = ""
        self._array_counts: dict[str, int] = {}
        self._array_latest: dict[str, str] = {}
        self._string_delimiter: str | None = None
        self._array_depth = 0

    def scan(self, line: str) -> ScannedLine:
        if self._string_delimiter is not None:
            if self._string_delimiter in line:
                self._string_delimiter = None
            return CONTINUATION_LINE
        stripped = line.strip()
        if self._array_depth > 0:
            return self._scan_array_line(line, stripped)
        if not stripped:
            return BLANK_LINE
        if stripped.startswith("#"):
            return COMMENT_LINE

        match = _ARRAY_TABLE.match(line)
        if match is not None:
            return self._header(line, match, array=True)
        match = _TABLE.match(line)
        if match is not None:
            return self._header(line, match, array=False)
        match = _KEY.match(line)
        if match is not None:
            return self._key(line, match)
        return CONTENT_LINE

    def _scan_array_line(self, line: str, stripped: str) -> ScannedLine:
        if not stripped:
            return BLANK_LINE
        if stripped.startswith("#"):
            return COMMENT_LINE
        code, _ = split_comment(line)
        self._array_depth = max(0, self._array_depth + _bracket_delta(code))
        return CONTENT_LINE

    def _header(self, line: str, match: re.Match[str], *, array: bool) -> ScannedLine:
        rest = line[match.end() :].strip()
        if rest and not rest.startswith("#"):
            return CONTENT_LINE
        name = _normalise(match.group("name"))
        qualified = self._qualify(name)
        if array:
            index = self._array_counts.get(qualified, -1) + 1
            self._array_counts[qualified] = index
            path = f"{qualified}[{index}]"
            for nested in [other for other in self._array_latest if other.startswith(name + ".")]:
                del self._array_latest[nested]
            self._array_latest[name] = path
        else:
            path = qualified
        self._table = path
        content, comment = split_comment(line, match.end())
        return ScannedLine(LineKind.ENTRY, path, content, comment)

    def _qualify(self, name: str) -> str:
        """Rewrite the prefix naming an array of tables to its current element."""

        best = ""
        for array_name in self._array_latest:
            if name.startswith(array_name + ".") and len(array_name) > len(best):
                best = array_name
        if not best:
            return name
        return self._array_latest[best] + name[len(best) :]

    def _key(self, line: str, match: re.Match[str]) -> ScannedLine:
        key = _normalise(match.group("key"))
        path = f"{self._table}.{key}" if self._table else key
        position = find_comment(line, match.end())
        code = line[match.end() :] if position < 0 else line[match.end() : position]
        delimiter = _opens_multiline_string(code)
        if delimiter is not None:
            self._string_delimiter = delimiter
            return ScannedLine(LineKind.ENTRY, path, line.rstrip(), None)
        self._array_depth = max(0, _bracket_delta(code))
        content, comment = split_comment(line, match.end())
        return ScannedLine(LineKind.ENTRY, path, content, comment)


def _drop_none(value: Any) -> Any:
    """Remove ``None`` recursively; TOML has no null."""

    if isinstance(value, Mapping):
        return {key: _drop_none(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [_drop_none(item) for item in value if item is not None]
    return value


def _is_array_of_tables(value: Any) -> bool:
    return isinstance(value, list) and bool(value) and all(isinstance(item, Mapping) for item in value)


def _key_part(key: str) -> str:
    """Return *key* the way ``tomli_w`` writes it left of ``=``.

    Examples
    --------
    >>> _key_part("port"), _key_part("display name")
    ('port', '"display name"')
    """

    return tomli_w.dumps({key: True})[: -len(" = true\n")]


def _table_chunks(table: Mapping[str, Any], name: str, *, array_item: bool = False) -> Iterator[str]:
    """Yield the TOML text of *table* in ``tomli_w`` order.

    Arrays of tables always become ``[[name]]`` blocks, never inline arrays,
    so every element keeps a header line that comments can attach to. Plain
    values are rendered by ``tomli_w`` itself.
    """

    literals: dict[str, Any] = {}
    tables: list[tuple[str, Mapping[str, Any], bool]] = []
    for key, value in table.items():
        if isinstance(value, Mapping):
            tables.append((key, value, False))
        elif _is_array_of_tables(value):
            tables.extend((key, item, True) for item in value)
        else:
            literals[key] = value

    written = False
    if array_item or (name and (literals or not tables)):
        yield f"[[{name}]]\n" if array_item else f"[{name}]\n"
        written = True
    if literals:
        yield tomli_w.dumps(literals)
        written = True
    for key, value, item in tables:
        if written:
            yield "\n"
        written = True
        part = _key_part(key)
        yield from _table_chunks(value, f"{name}.{part}" if name else part, array_item=item)


def _indent_tables(rendered: str, indent: int) -> str:
    """Indent every non-blank line below a table header by *indent* spaces.

    Examples
    --------
    >>> print(_indent_tables('title = "x"\\n\\n[db]\\nport = 1\\n', 2), end="")
    title = "x"
    <BLANKLINE>
    [db]
      port = 1
    """

    if indent <= 0 or not rendered:
        return rendered
    pad = " " * indent
    lines: list[str] = []
    in_table = False
    for line in rendered.splitlines():
        if line.startswith("["):
            in_table = True
            lines.append(line)
        elif in_table and line:
            lines.append(pad + line)
        else:
            lines.append(line)
    return "\n".join(lines) + "\n"


class TOMLFileAdapter(CommentPreservingAdapter):
    """Read and write TOML while keeping comments attached to their entries.

    Parameters
    ----------
    indent:
        Spaces used to indent keys below ``[table]`` headers; ``0`` keeps the
        flat ``tomli_w`` layout.

    Examples
    --------
    >>> adapter = TOMLFileAdapter()
    >>> adapter.read("[db]\\nport = 5432\\n")
    {'db': {'port': 5432}}
    >>> previous = "[db]\\n  # primary\\n  port = 5432  # default\\n"
    >>> print(adapter.update_value(previous, "db.port", 6543), end="")
    [db]
      # primary
      port = 6543  # default
    """

    format_name = "toml"
    grammar_factory = TomlLineGrammar

    def __init__(self, *, indent: int = 2) -> None:
        self._indent = indent

    def _parse(self, text: str) -> Any:
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise self._invalid(exc) from exc

    def _render(self, tree: Mapping[str, Any]) -> str:
        try:
            rendered = "".join(_table_chunks(_drop_none(tree), ""))
        except (TypeError, ValueError) as exc:
            raise self._invalid(exc, "render") from exc
        return _indent_tables(rendered, self._indent)
