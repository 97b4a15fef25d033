"""Line-oriented comment capture and re-insertion for TOML and YAML text.

Purpose
-------
Serialisation libraries drop comments. This module remembers which comment
belonged to which dotted path in the previous text and splices those comments
into a freshly rendered document, so a ``save`` keeps the human annotations
on every entry that still exists.

Contents
--------
* :class:`LineKind` / :class:`ScannedLine` – classification of one text line.
* :class:`LineGrammar` – per-format, stateful line classifier.
* :class:`CommentMap` – header block, leading comments and inline comments.
* :func:`find_comment` – locate a trailing comment outside quoted strings.
* :func:`collect_comments` / :func:`merge_comments` – the two passes.
* :func:`realign_items` – follow sequence items that moved between versions.
* :class:`CommentPreservingAdapter` – ``write`` built on both passes.

System Role
-----------
Format modules (:mod:`.toml_format`, :mod:`.yaml_format`) supply a grammar;
collection and merging are shared. Comments whose path disappeared are
dropped; merging the same comments into the same rendering twice produces
identical text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Protocol

from ...domain.errors import InvalidFormat
from .structured import BaseFileAdapter


class LineKind(Enum):
    """Role of a line as far as comment bookkeeping is concerned."""

    BLANK = "blank"
    COMMENT = "comment"
    ENTRY = "entry"
    CONTENT = "content"


@dataclass(frozen=True, slots=True)
class ScannedLine:
    """Classification of one line.

    ``path`` and ``content`` are only meaningful for :attr:`LineKind.ENTRY`;
    ``content`` is the line without its trailing comment and ``comment`` is
    that trailing comment, marker included. ``continued`` marks a
    :attr:`LineKind.CONTENT` line that carries on the scalar value started by
    the entry above it (a folded plain scalar or an open quoted string), where
    a comment appended to the entry line would corrupt the value.
    """

    kind: LineKind
    path: str | None = None
    content: str = ""
    comment: str | None = None
    continued: bool = False


BLANK_LINE = ScannedLine(LineKind.BLANK)
COMMENT_LINE = ScannedLine(LineKind.COMMENT)
CONTENT_LINE = ScannedLine(LineKind.CONTENT)
CONTINUATION_LINE = ScannedLine(LineKind.CONTENT, continued=True)


class LineGrammar(Protocol):
    """Classify lines of one document in order; instances carry scan state."""

    def scan(self, line: str) -> ScannedLine:
        ...


@dataclass(slots=True)
class CommentMap:
    """Comments captured from one document.

    Attributes
    ----------
    header:
        Standalone comment block at the top of the file, followed by any
        comments left after the last entry. Interior blank lines are kept.
    leading:
        Comment lines directly above an entry, keyed by its dotted path.
    inline:
        Trailing comment on an entry line, keyed by its dotted path.
    """

    header: list[str] = field(default_factory=list)
    leading: dict[str, list[str]] = field(default_factory=dict)
    inline: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.header or self.leading or self.inline)


def find_comment(text: str, start: int = 0, *, plain_scalars: bool = False) -> int:
    """Return the index of the first ``#`` outside quoted strings, or ``-1``.

    Parameters
    ----------
    text:
        The line to inspect.
    start:
        Index where the value part begins.
    plain_scalars:
        YAML rules: a quote only opens a string at the start of a token, and
        ``#`` only starts a comment when preceded by whitespace. Otherwise
        every quote opens a string (TOML rules).

    Examples
    --------
    >>> find_comment('name = "a # b"  # note')
    16
    >>> find_comment("url: http://x/#frag", 4, plain_scalars=True)
    -1
    >>> find_comment("msg: it's fine # ok", 4, plain_scalars=True)
    15
    """

    quote: str | None = None
    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if quote is not None:
            if char == "\\" and quote == '"':
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "\"'" and (not plain_scalars or _at_token_start(text, index, start)):
            quote = char
        elif char == "#" and (not plain_scalars or index == 0 or text[index - 1] in " \t"):
            return index
        index += 1
    return -1


def _at_token_start(text: str, index: int, start: int) -> bool:
    if index <= start:
        return True
    return text[index - 1] in " \t[{,"


def split_comment(line: str, start: int = 0, *, plain_scalars: bool = False) -> tuple[str, str | None]:
    """Split *line* into its content (right-stripped) and trailing comment."""

    position = find_comment(line, start, plain_scalars=plain_scalars)
    if position < 0:
        return line.rstrip(), None
    return line[:position].rstrip(), line[position:].rstrip()


def collect_comments(text: str, grammar: LineGrammar) -> CommentMap:
    """Scan *text* and attribute every comment line to a path or the header.

    Comment lines accumulate until the next entry line claims them. Blank
    lines neither claim nor discard pending comments, except that the
    comments at the very top of the file which are separated from the first
    entry by a blank line form the header block.

    Examples
    --------
    >>> from lib_config_vault.adapters.file_formats.toml_format import TomlLineGrammar
    >>> found = collect_comments("# app\\n\\n# port to bind\\nport = 80  # http\\n", TomlLineGrammar())
    >>> found.header, found.leading, found.inline
    (['# app'], {'port': ['# port to bind']}, {'port': '# http'})
    """

    comments = CommentMap()
    preamble: list[tuple[str, LineKind]] = []
    pending: list[str] = []
    seen_entry = False

    for line in text.splitlines():
        scanned = grammar.scan(line)
        if not seen_entry:
            if scanned.kind in (LineKind.BLANK, LineKind.COMMENT):
                preamble.append((line.rstrip(), scanned.kind))
                continue
            if scanned.kind is LineKind.CONTENT:
                continue
            seen_entry = True
            comments.header, pending = _split_preamble(preamble)
        if scanned.kind is LineKind.COMMENT:
            pending.append(line.rstrip())
        elif scanned.kind is LineKind.ENTRY and scanned.path is not None:
            if pending:
                comments.leading.setdefault(scanned.path, []).extend(pending)
                pending = []
            if scanned.comment:
                comments.inline[scanned.path] = scanned.comment

    if not seen_entry:
        comments.header = _strip_blank_edges([line for line, _ in preamble])
    elif pending:
        comments.header = comments.header + ([""] if comments.header else []) + pending
    return comments


def merge_comments(rendered: str, comments: CommentMap, grammar: LineGrammar) -> str:
    """Insert *comments* into *rendered* text classified by *grammar*.

    The header is emitted first, followed by one blank line. Leading comments
    go directly above their entry; inline comments are appended after two
    spaces. Comments of an ancestor path that has no line of its own in the
    rendering (an implicit TOML table, for example) are placed above its
    first descendant. An inline comment whose entry value carries on over
    the following lines is placed above the entry instead.

    Examples
    --------
    >>> from lib_config_vault.adapters.file_formats.yaml_format import YamlLineGrammar
    >>> rendered = "msg: 'one\\n\\n  two'\\n"
    >>> print(merge_comments(rendered, CommentMap(inline={"msg": "# note"}), YamlLineGrammar()), end="")
    # note
    msg: 'one
    <BLANKLINE>
      two'
    """

    lines: list[str] = []
    if comments.header:
        lines.extend(comments.header)
        lines.append("")
    emitted: set[str] = set()
    rendered_lines = rendered.splitlines()
    scanned_lines = [grammar.scan(line) for line in rendered_lines]

    for position, (line, scanned) in enumerate(zip(rendered_lines, scanned_lines)):
        if scanned.kind is LineKind.ENTRY and scanned.path is not None:
            for path in (*_ancestors(scanned.path), scanned.path):
                if path in emitted:
                    continue
                emitted.add(path)
                lines.extend(comments.leading.get(path, ()))
            inline = comments.inline.get(scanned.path)
            if inline is not None:
                following = scanned_lines[position + 1] if position + 1 < len(scanned_lines) else None
                if following is not None and following.continued:
                    lines.append(f"{line[: len(line) - len(line.lstrip())]}{inline}")
                else:
                    line = f"{scanned.content.rstrip()}  {inline}"
        lines.append(line)

    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def realign_items(comments: CommentMap, before: Mapping[str, Any] | None, after: Mapping[str, Any]) -> CommentMap:
    """Re-key the comments of sequence items after a list changed length.

    Items of a list whose length is unchanged keep their comments by
    position. When the length changed, every old item is matched to the
    first unused equal item of the new list; comments of old items without a
    match are dropped. With no parsed *before* tree every item comment goes.

    Examples
    --------
    >>> found = CommentMap(inline={"hosts[0]": "# first", "hosts[1]": "# second"})
    >>> realign_items(found, {"hosts": ["a", "b"]}, {"hosts": ["b"]}).inline
    {'hosts[0]': '# second'}
    """

    if before is None:
        return CommentMap(
            header=list(comments.header),
            leading={path: lines for path, lines in comments.leading.items() if "[" not in path},
            inline={path: text for path, text in comments.inline.items() if "[" not in path},
        )
    moves: dict[str, str | None] = {}
    _collect_moves(before, after, "", moves)
    if not moves:
        return comments
    return CommentMap(
        header=list(comments.header),
        leading=_move_keys(comments.leading, moves),
        inline=_move_keys(comments.inline, moves),
    )


def _collect_moves(before: Any, after: Any, path: str, moves: dict[str, str | None]) -> None:
    if isinstance(before, Mapping) and isinstance(after, Mapping):
        for key, value in before.items():
            if key in after:
                _collect_moves(value, after[key], f"{path}.{key}" if path else str(key), moves)
        return
    if not (isinstance(before, list) and isinstance(after, list)):
        return
    if len(before) == len(after):
        for index, (old, new) in enumerate(zip(before, after)):
            _collect_moves(old, new, f"{path}[{index}]", moves)
        return
    unused = list(range(len(after)))
    for index, old in enumerate(before):
        target = next((candidate for candidate in unused if after[candidate] == old), None)
        if target is not None:
            unused.remove(target)
        if target != index:
            moves[f"{path}[{index}]"] = None if target is None else f"{path}[{target}]"


def _move_keys(keyed: Mapping[str, Any], moves: Mapping[str, str | None]) -> dict[str, Any]:
    moved: dict[str, Any] = {}
    for path, value in keyed.items():
        for old, new in moves.items():
            if path == old or path.startswith((old + ".", old + "[")):
                if new is not None:
                    moved[new + path[len(old) :]] = value
                break
        else:
            moved[path] = value
    return moved


def _ancestors(path: str) -> Iterable[str]:
    parts = path.split(".")
    for end in range(1, len(parts)):
        yield ".".join(parts[:end])


def _split_preamble(preamble: list[tuple[str, LineKind]]) -> tuple[list[str], list[str]]:
    """Split the lines before the first entry into header and leading comments."""

    last_blank = -1
    for index, (_, kind) in enumerate(preamble):
        if kind is LineKind.BLANK:
            last_blank = index
    header = _strip_blank_edges([line for line, _ in preamble[: last_blank + 1]])
    leading = [line for line, kind in preamble[last_blank + 1 :] if kind is LineKind.COMMENT]
    return header, leading


def _strip_blank_edges(lines: list[str]) -> list[str]:
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


class CommentPreservingAdapter(BaseFileAdapter):
    """Base for formats whose comments survive a read-modify-write cycle.

    Subclasses provide ``_parse``, ``_render`` and :attr:`grammar_factory`,
    a zero-argument callable returning a fresh :class:`LineGrammar`.
    """

    grammar_factory: Callable[[], LineGrammar]

    def write(self, previous: str, tree: Mapping[str, Any]) -> str:
        """Render *tree* and carry the comments of *previous* into the result.

        Examples
        --------
        >>> from lib_config_vault.adapters.file_formats.toml_format import TOMLFileAdapter
        >>> adapter = TOMLFileAdapter()
        >>> before = "# service settings\\nport = 80\\n"
        >>> print(adapter.update_value(before, "port", 8080), end="")
        # service settings
        port = 8080
        """

        rendered = self._render(tree)
        if not previous or not previous.strip():
            return rendered
        comments = self.collect_comments(previous)
        if comments.is_empty():
            return rendered
        try:
            before: Mapping[str, Any] | None = self.read(previous)
        except InvalidFormat:
            before = None
        return self.merge_comments(rendered, realign_items(comments, before, tree))

    def collect_comments(self, text: str) -> CommentMap:
        return collect_comments(text, self.grammar_factory())

    def merge_comments(self, rendered: str, comments: CommentMap) -> str:
        return merge_comments(rendered, comments, self.grammar_factory())
