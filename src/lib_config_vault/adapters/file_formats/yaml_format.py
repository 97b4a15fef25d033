"""YAML adapter backed by PyYAML's safe loader and dumper.

YAML has no section delimiters, so the line grammar rebuilds each key's path
from indentation: a stack of open mappings and sequence items is popped back
to the first frame indented less than the current line. Sequence items get
``name[n]`` paths, and block scalar bodies (``|`` / ``>``) are skipped. The
tail of a multi-line quoted scalar and the folded lines of a long plain
scalar are marked as continuations, so no inline comment lands inside them.
The reconstruction is best effort for hand-written files with irregular
indentation; PyYAML's own output is always parsed exactly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

import yaml

from .comments import (
    BLANK_LINE,
    COMMENT_LINE,
    CONTENT_LINE,
    CONTINUATION_LINE,
    CommentPreservingAdapter,
    LineKind,
    ScannedLine,
    split_comment,
)

_KEY = re.compile(
    r"""^(?P<key>"(?:[^"\\]|\\.)*"|'(?:[^']|'')*'|[^\s#'"\[\]{},&*!|>%@`?:-][^#:]*?|-[^\s#:][^#:]*?)[ \t]*:(?=[ \t]|$)"""
)
_BLOCK_SCALAR = re.compile(r"^[|>][-+0-9]*$")
_DIRECTIVES = ("---", "...", "%")
_NOT_PLAIN = "'\"|>&!*[{"


@dataclass(frozen=True, slots=True)
class _Frame:
    indent: int
    path: str
    item: bool


def _unquote(key: str) -> str:
    if len(key) >= 2 and key[0] == key[-1] == "'":
        return key[1:-1].replace("''", "'")
    if len(key) >= 2 and key[0] == key[-1] == '"':
        return key[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return key.strip()


def _closes_quote(text: str, quote: str) -> bool:
    """Return ``True`` when *text* contains the closing *quote* of a scalar."""

    index = 0
    while index < len(text):
        char = text[index]
        if quote == '"' and char == "\\":
            index += 2
            continue
        if char == quote:
            if quote == "'" and text[index + 1 : index + 2] == "'":
                index += 2
                continue
            return True
        index += 1
    return False


def _starts_plain_scalar(code: str) -> bool:
    if not code or code[0] in _NOT_PLAIN:
        return False
    return not (code == "-" or code.startswith(("- ", "-\t")))


class YamlLineGrammar:
    """Stateful classifier for block-style YAML lines.

    Examples
    --------
    >>> grammar = YamlLineGrammar()
    >>> lines = ["db:", "  port: 1", "servers:", "  - host: a", "    port: 2", "  - b"]
    >>> [grammar.scan(line).path for line in lines]
    ['db', 'db.port', 'servers', 'servers[0].host', 'servers[0].port', 'servers[1]']
    """

    def __init__(self) -> None:
        self._stack: list[_Frame] = []
        self._item_counts: dict[str, int] = {}
        self._block_owner: int | None = None
        self._open_quote: str | None = None
        self._plain_owner: int | None = None

    def scan(self, line: str) -> ScannedLine:
        if self._open_quote is not None:
            if _closes_quote(line, self._open_quote):
                self._open_quote = None
            return CONTINUATION_LINE
        stripped = line.strip()
        indent = len(line) - len(line.lstrip(" "))
        if self._plain_owner is not None:
            if not stripped:
                return BLANK_LINE
            if indent > self._plain_owner and not stripped.startswith("#"):
                return CONTINUATION_LINE
            self._plain_owner = None
        if self._block_owner is not None:
            if not stripped or indent > self._block_owner:
                return CONTENT_LINE
            self._block_owner = None
        if not stripped:
            return BLANK_LINE
        if stripped.startswith("#"):
            return COMMENT_LINE
        if stripped.startswith(_DIRECTIVES):
            return CONTENT_LINE

        rest = line[indent:]
        if rest == "-" or rest.startswith(("- ", "-\t")):
            return self._item(line, indent, rest)
        match = _KEY.match(rest)
        if match is None:
            return CONTENT_LINE
        self._pop(lambda frame: frame.indent >= indent)
        return self._key(line, indent, match)

    def _item(self, line: str, indent: int, rest: str) -> ScannedLine:
        self._pop(lambda frame: frame.indent > indent or (frame.indent == indent and frame.item))
        parent = self._stack[-1].path if self._stack else ""
        index = self._item_counts.get(parent, -1) + 1
        self._item_counts[parent] = index
        path = f"{parent}[{index}]"
        self._stack.append(_Frame(indent, path, True))

        body = rest[1:].lstrip(" \t")
        key_indent = len(line) - len(body)
        match = _KEY.match(body) if body and not body.startswith("- ") else None
        if match is not None:
            return self._key(line, key_indent, match)
        self._watch_value(body, indent)
        content, comment = split_comment(line, indent + 1, plain_scalars=True)
        return ScannedLine(LineKind.ENTRY, path, content, comment)

    def _key(self, line: str, indent: int, match: re.Match[str]) -> ScannedLine:
        parent = self._stack[-1].path if self._stack else ""
        key = _unquote(match.group("key"))
        path = f"{parent}.{key}" if parent else key
        self._item_counts.pop(path, None)
        self._stack.append(_Frame(indent, path, False))
        value_start = indent + match.end()
        self._watch_value(line[value_start:], indent)
        content, comment = split_comment(line, value_start, plain_scalars=True)
        return ScannedLine(LineKind.ENTRY, path, content, comment)

    def _watch_value(self, value: str, owner_indent: int) -> None:
        """Enter block-scalar, open-quote or plain-scalar mode when *value* starts one.

        A plain scalar may be folded over more-indented lines that follow it.
        """

        code, comment = split_comment(value, plain_scalars=True)
        code = code.strip()
        if _BLOCK_SCALAR.match(code):
            self._block_owner = owner_indent
        elif code[:1] in ("'", '"') and not _closes_quote(code[1:], code[0]):
            self._open_quote = code[0]
        elif comment is None and _starts_plain_scalar(code):
            self._plain_owner = owner_indent

    def _pop(self, predicate: Any) -> None:
        while self._stack and predicate(self._stack[-1]):
            self._stack.pop()


class YAMLFileAdapter(CommentPreservingAdapter):
    """Read and write block-style YAML while keeping comments.

    Parameters
    ----------
    indent:
        Mapping indentation passed to ``yaml.safe_dump``.
    width:
        Preferred line width before PyYAML folds long scalars.

    Examples
    --------
    >>> adapter = YAMLFileAdapter()
    >>> previous = "# Service\\n\\nservice:\\n  # seconds\\n  timeout: 5\\n"
    >>> print(adapter.update_value(previous, "service.timeout", 30), end="")
    # Service
    <BLANKLINE>
    service:
      # seconds
      timeout: 30
    """

    format_name = "yaml"
    grammar_factory = YamlLineGrammar

    def __init__(self, *, indent: int = 2, width: int = 120) -> None:
        self._indent = indent
        self._width = width

    def _parse(self, text: str) -> Any:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise self._invalid(exc) from exc

    def _render(self, tree: Mapping[str, Any]) -> str:
        if not tree:
            return ""
        try:
            return yaml.safe_dump(
                dict(tree),
                default_flow_style=False,
                sort_keys=False,
                indent=self._indent,
                width=self._width,
                allow_unicode=True,
            )
        except yaml.YAMLError as exc:
            raise self._invalid(exc, "render") from exc
